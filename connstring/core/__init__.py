"""Detection, parsing, reconstruction and encryption of connection strings"""
