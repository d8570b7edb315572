"""Exceptions raised by the parser, reconstructor and credential manager"""

from connstring.utils.constants import ErrorMessage


class ConnectionStringError(Exception):
    """Base class for parse and reconstruct failures"""


class InvalidConnectionString(ConnectionStringError, ValueError):
    """Raised when a connection string cannot be parsed"""

    def __init__(self, detail: str = None):
        message = ErrorMessage.INVALID_CONNECTION_STRING
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ReconstructionError(ConnectionStringError):
    """Raised when a record cannot be turned back into a connection string"""


class UnsupportedDbType(ReconstructionError):
    """Raised when no serializer exists for the record's database type"""

    def __init__(self, db_type=None):
        message = ErrorMessage.UNSUPPORTED_DB_TYPE
        if db_type is not None:
            message = f"{message}: {getattr(db_type, 'value', db_type)}"
        super().__init__(message)
        self.db_type = db_type


class CipherError(Exception):
    """Base class for encryption and decryption failures"""


class EncryptionFailed(CipherError):
    """Raised when a value cannot be encrypted"""

    def __init__(self, detail: str):
        super().__init__(f"{ErrorMessage.ENCRYPTION_FAILED}: {detail}")


class DecryptionFailed(CipherError):
    """Raised when a token cannot be decrypted"""

    def __init__(self, detail: str):
        super().__init__(f"{ErrorMessage.DECRYPTION_FAILED}: {detail}")
