"""Configuration management for the connection string converter"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from connstring.utils.constants import (
    DEFAULT_CIPHER_ALGORITHM,
    DEFAULT_HASH_ALGORITHM,
    DEFAULT_SECRET_ENV_VAR,
)

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


@dataclass
class Config:
    """Application configuration"""

    app_name: str = "connstring"
    version: str = "1.0.0"

    # Encryption
    secret_env_var: str = DEFAULT_SECRET_ENV_VAR
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    cipher_algorithm: str = DEFAULT_CIPHER_ALGORITHM

    # Fail reconstruction when a stored password cannot be decrypted
    strict_decrypt: bool = False

    # Logging
    log_dir: Optional[str] = None
    log_level: str = "INFO"

    # Read from secret_env_var by load_config
    secret: Optional[str] = field(default=None, repr=False)


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Load configuration from defaults overridden by environment variables"""
    if environ is None:
        environ = os.environ

    config = Config()

    config.secret_env_var = environ.get('DB_STRING_SECRET_ENV', config.secret_env_var)
    config.hash_algorithm = environ.get('DB_STRING_HASH_ALGORITHM', config.hash_algorithm)
    config.cipher_algorithm = environ.get('DB_STRING_ALGORITHM', config.cipher_algorithm)
    config.secret = environ.get(config.secret_env_var) or None

    strict = environ.get('DB_STRING_STRICT_DECRYPT')
    if strict is not None:
        config.strict_decrypt = strict.strip().lower() in _TRUE_VALUES

    config.log_level = environ.get('DB_STRING_LOG_LEVEL', config.log_level)
    config.log_dir = environ.get('DB_STRING_LOG_DIR') or None

    return config
