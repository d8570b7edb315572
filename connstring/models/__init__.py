"""
Models package for connection string data structures
"""

from connstring.models.connection_record import ConnectionRecord

__all__ = ['ConnectionRecord']
