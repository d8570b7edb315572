"""Connection String Reconstructor - Turns records back into connection strings

Each dialect has its own serializer. Passwords stored as cipher tokens are
decrypted first when a secret is supplied.
"""

import logging
from typing import Callable, Dict, Optional
from urllib.parse import quote, urlencode

from connstring.core.credential_manager import CredentialManager, looks_encrypted
from connstring.core.exceptions import (
    CipherError,
    ConnectionStringError,
    DecryptionFailed,
    ReconstructionError,
    UnsupportedDbType,
)
from connstring.models.connection_record import ConnectionRecord
from connstring.utils.constants import (
    DEFAULT_CIPHER_ALGORITHM,
    DEFAULT_HASH_ALGORITHM,
    DbType,
    ErrorMessage,
)

logger = logging.getLogger(__name__)


def _encode(value: str) -> str:
    return quote(value, safe="!~*'()")


def _userinfo(username: Optional[str], password: Optional[str],
              allow_password_only: bool = False) -> str:
    """Build the 'user:pass@' part of a URL"""
    if username and password:
        return f"{_encode(username)}:{_encode(password)}@"
    if username:
        return f"{_encode(username)}@"
    if password and allow_password_only:
        return f":{_encode(password)}@"
    return ''


def _url_host(host: Optional[str]) -> str:
    host = host or ''
    # Bare IPv6 literals need brackets inside a URL
    if ':' in host and not host.startswith('['):
        return f"[{host}]"
    return host


def _query(params: Dict[str, str]) -> str:
    if not params:
        return ''
    return '?' + urlencode(params, quote_via=quote)


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------

def build_mongodb_atlas(record: ConnectionRecord, password: Optional[str]) -> str:
    """mongodb+srv://[user:pass@]host[/db][?params] - no port for SRV"""
    auth = _userinfo(record.username, password)
    db_path = f"/{record.db_name}" if record.db_name else ''
    return f"mongodb+srv://{auth}{record.host or ''}{db_path}{_query(record.params)}"


def build_mongodb_compass(record: ConnectionRecord, password: Optional[str]) -> str:
    """mongodb://[user:pass@]host[:port][/db][?params]"""
    auth = _userinfo(record.username, password)

    if record.cluster_hosts:
        hosts = ','.join(record.cluster_hosts)
    else:
        port = f":{record.port}" if record.port else ''
        hosts = f"{_url_host(record.host)}{port}"

    if record.db_name:
        db_path = f"/{record.db_name}"
    else:
        # A query string still needs the path separator in front of it
        db_path = '/' if record.params else ''

    return f"mongodb://{auth}{hosts}{db_path}{_query(record.params)}"


def build_azure_cosmos(record: ConnectionRecord, password: Optional[str]) -> str:
    """AccountEndpoint=...;AccountKey=...;[Database=...;]<params>"""
    if record.original_endpoint:
        endpoint = record.original_endpoint
    else:
        port = f":{record.port}" if record.port else ''
        endpoint = f"https://{record.host or ''}{port}/"

    parts = [f"AccountEndpoint={endpoint}", f"AccountKey={password or ''}"]
    if record.db_name:
        parts.append(f"Database={record.db_name}")
    parts.extend(f"{key}={value}" for key, value in record.params.items())
    return ';'.join(parts)


def build_sql_server(record: ConnectionRecord, password: Optional[str]) -> str:
    """Server=host[\\instance][,port];Database=...;User Id=...;Password=...;<params>"""
    server = record.host or ''
    if record.instance:
        server = f"{server}\\{record.instance}"
    if record.port:
        server = f"{server},{record.port}"

    parts = [f"Server={server}"]
    if record.db_name:
        parts.append(f"Database={record.db_name}")
    if record.username:
        parts.append(f"User Id={record.username}")
    if password:
        parts.append(f"Password={password}")
    parts.extend(f"{key}={value}" for key, value in record.params.items()
                 if value is not None)
    return ';'.join(parts)


def build_redis(record: ConnectionRecord, password: Optional[str]) -> str:
    """
    Cluster records come back as their comma-joined host list; credentials
    and options are not part of that form. Everything else is a
    redis[s]:// URL.
    """
    if record.is_cluster and record.cluster_hosts:
        return ','.join(record.cluster_hosts)

    auth = _userinfo(record.username, password, allow_password_only=True)
    port = f":{record.port}" if record.port else ''
    db_path = f"/{record.db_name}" if record.db_name else ''
    protocol = record.protocol or 'redis'
    return f"{protocol}://{auth}{_url_host(record.host)}{port}{db_path}{_query(record.params)}"


def build_generic_url(record: ConnectionRecord, password: Optional[str]) -> str:
    """protocol://[user:pass@]host[:port][/db][?params] for MySQL and PostgreSQL"""
    auth = _userinfo(record.username, password)
    port = f":{record.port}" if record.port else ''
    db_path = f"/{record.db_name}" if record.db_name else ''
    return f"{record.protocol}://{auth}{_url_host(record.host)}{port}{db_path}{_query(record.params)}"


_BUILDERS: Dict[DbType, Callable[[ConnectionRecord, Optional[str]], str]] = {
    DbType.MONGODB_ATLAS: build_mongodb_atlas,
    DbType.MONGODB_COMPASS: build_mongodb_compass,
    DbType.AZURE_COSMOS: build_azure_cosmos,
    DbType.SQL_SERVER: build_sql_server,
    DbType.REDIS: build_redis,
    DbType.MYSQL: build_generic_url,
    DbType.POSTGRESQL: build_generic_url,
}


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def _should_decrypt(record: ConnectionRecord, secret: Optional[str]) -> bool:
    if not secret or not record.password:
        return False
    if record.encrypted is None:
        # State unknown, fall back to the token shape
        return looks_encrypted(record.password)
    return record.encrypted


def resolve_password(record: ConnectionRecord, secret: Optional[str] = None,
                     strict_decrypt: bool = False,
                     cipher_algorithm: str = DEFAULT_CIPHER_ALGORITHM,
                     hash_algorithm: str = DEFAULT_HASH_ALGORITHM) -> Optional[str]:
    """
    Return the plaintext password of a record.

    Args:
        record: Parsed record
        secret: Secret the record was encrypted with
        strict_decrypt: Raise instead of falling back to the stored value
            when decryption fails

    Raises:
        ReconstructionError: If the record is encrypted and no secret is given
        DecryptionFailed: If decryption fails and strict_decrypt is set
    """
    if record.encrypted and record.password and not secret:
        raise ReconstructionError("Secret is required to reconstruct an encrypted record")

    if not _should_decrypt(record, secret):
        return record.password

    manager = CredentialManager(secret, hash_algorithm, cipher_algorithm)
    try:
        return manager.decrypt(record.password)
    except DecryptionFailed:
        if strict_decrypt:
            raise
        logger.warning("Continuing with the stored password value")
        return record.password


def reconstruct_connection_string(record: ConnectionRecord, secret: Optional[str] = None,
                                  strict_decrypt: bool = False,
                                  cipher_algorithm: str = DEFAULT_CIPHER_ALGORITHM,
                                  hash_algorithm: str = DEFAULT_HASH_ALGORITHM) -> str:
    """
    Build a dialect-correct connection string from a record.

    Args:
        record: Record produced by parse_connection_string (or from_dict)
        secret: Secret used at parse time, if any
        strict_decrypt: Fail when the password cannot be decrypted instead
            of emitting the stored token
        cipher_algorithm: Cipher used at parse time
        hash_algorithm: Digest used at parse time

    Returns:
        Connection string in the record's dialect

    Raises:
        UnsupportedDbType: If no serializer exists for record.db_type
        ReconstructionError: On any other failure
        DecryptionFailed: If strict_decrypt is set and decryption fails
    """
    if record is None:
        raise ReconstructionError(f"{ErrorMessage.RECONSTRUCTION_FAILED}: Parsed data is required")

    builder = _BUILDERS.get(record.db_type)
    if builder is None:
        raise UnsupportedDbType(record.db_type)

    try:
        password = resolve_password(record, secret, strict_decrypt,
                                    cipher_algorithm, hash_algorithm)
        return builder(record, password)
    except (ConnectionStringError, CipherError):
        raise
    except Exception as e:
        raise ReconstructionError(f"{ErrorMessage.RECONSTRUCTION_FAILED}: {e}") from e


def reveal_original_string(record: ConnectionRecord, secret: Optional[str] = None,
                           cipher_algorithm: str = DEFAULT_CIPHER_ALGORITHM,
                           hash_algorithm: str = DEFAULT_HASH_ALGORITHM) -> Optional[str]:
    """Return the raw string the record was parsed from, decrypting it if needed"""
    if not record.original_string or not record.encrypted:
        return record.original_string
    if not secret:
        raise ReconstructionError("Secret is required to reveal an encrypted connection string")
    return CredentialManager(secret, hash_algorithm, cipher_algorithm).decrypt(record.original_string)


reconstruct = reconstruct_connection_string
