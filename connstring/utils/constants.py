"""Constants used throughout the connection string converter"""

from enum import Enum


class DbType(str, Enum):
    """Database dialects a connection string can be classified as"""
    MONGODB_ATLAS = "mongodb atlas"
    MONGODB_COMPASS = "mongodb compass"
    AZURE_COSMOS = "azure cosmosdb"
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    REDIS = "redis"
    SQL_SERVER = "sql server"
    UNKNOWN = "unknown"


class Dialect(str, Enum):
    """Connection string grammars recognized by the detector"""
    MONGO_SRV = "mongo_srv"
    MONGO_STANDARD = "mongo_standard"
    AZURE_COSMOS = "azure_cosmos"
    SQL_SERVER = "sql_server"
    REDIS = "redis"
    GENERIC_URL = "generic_url"


# Keys that older records keep inside ``params``
class ReservedParam:
    """Reserved parameter names for dialect-specific extras"""
    IS_CLUSTER = "isCluster"
    CLUSTER_HOSTS = "clusterHosts"
    INSTANCE = "instance"
    ORIGINAL_ENDPOINT = "originalEndpoint"

    ALL = (IS_CLUSTER, CLUSTER_HOSTS, INSTANCE, ORIGINAL_ENDPOINT)


DEFAULT_REDIS_PORT = "6379"
DEFAULT_SQL_SERVER_PORT = "1433"

DEFAULT_SECRET_ENV_VAR = "DB_STRING_SECRET_KEY"
DEFAULT_HASH_ALGORITHM = "sha256"
DEFAULT_CIPHER_ALGORITHM = "aes-256-cbc"


class ErrorMessage:
    """Error message prefixes"""
    INVALID_CONNECTION_STRING = "Invalid connection string provided"
    DECRYPTION_FAILED = "Failed to decrypt sensitive data"
    ENCRYPTION_FAILED = "Failed to encrypt sensitive data"
    UNSUPPORTED_DB_TYPE = "Unsupported database type"
    RECONSTRUCTION_FAILED = "Failed to reconstruct connection string"
    INVALID_SQL_SERVER = "Invalid SQL Server connection string format"
    INVALID_REDIS = "Invalid Redis connection string format"
