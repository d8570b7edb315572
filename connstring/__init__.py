"""
connstring - Parse and rebuild database connection strings

Convenience exports:
    parse, reconstruct      - connection string <-> ConnectionRecord
    encrypt, decrypt        - secret-keyed token helpers
    derive_key              - key derivation used by encrypt/decrypt
"""

from connstring.core.credential_manager import (
    decrypt_token as decrypt,
    derive_key,
    encrypt_token as encrypt,
)
from connstring.core.parser import parse_connection_string as parse
from connstring.core.reconstructor import reconstruct_connection_string as reconstruct
from connstring.models.connection_record import ConnectionRecord
from connstring.utils.constants import DbType

__all__ = [
    'ConnectionRecord',
    'DbType',
    'decrypt',
    'derive_key',
    'encrypt',
    'parse',
    'reconstruct',
]
