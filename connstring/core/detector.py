"""Dialect Detector - Classifies a raw connection string

Rules are checked in order and the first match wins. Order matters because
the grammars overlap: a bare ``host:port`` would satisfy both the SQL Server
and Redis shapes, and is claimed by Redis only after the SQL Server keywords
have been ruled out.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from connstring.utils.constants import DbType, Dialect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionRule:
    """One entry of the ordered detection list"""
    name: str
    dialect: Dialect
    matches: Callable[[str], bool]
    db_type: DbType = DbType.UNKNOWN
    is_cloud: bool = False
    protocol: Optional[Callable[[str], Optional[str]]] = None


def _is_mongo_srv(value: str) -> bool:
    return value.startswith('mongodb+srv://')


def _is_mongo_standard(value: str) -> bool:
    return value.startswith('mongodb://')


def _is_cosmos(value: str) -> bool:
    return 'AccountEndpoint=' in value or '.documents.azure.com' in value


def _is_sql_server(value: str) -> bool:
    lowered = value.lower()
    return ('server=' in lowered or 'data source=' in lowered
            or value.startswith(('mssql://', 'sqlserver://')))


def _is_redis(value: str) -> bool:
    if value.startswith(('redis://', 'rediss://')):
        return True
    # Cluster lists and bare host:port
    return '://' not in value and (':' in value or ',' in value)


def _sql_server_protocol(value: str) -> str:
    return 'sqlserver' if value.startswith('sqlserver://') else 'mssql'


def _redis_protocol(value: str) -> str:
    return 'rediss' if value.startswith('rediss://') else 'redis'


DETECTION_RULES: Tuple[DetectionRule, ...] = (
    DetectionRule('mongodb+srv prefix', Dialect.MONGO_SRV, _is_mongo_srv,
                  DbType.MONGODB_ATLAS, True, lambda _: 'mongodb+srv'),
    DetectionRule('mongodb prefix', Dialect.MONGO_STANDARD, _is_mongo_standard,
                  DbType.MONGODB_COMPASS, False, lambda _: 'mongodb'),
    DetectionRule('cosmos endpoint', Dialect.AZURE_COSMOS, _is_cosmos,
                  DbType.AZURE_COSMOS, True),
    DetectionRule('sql server keywords', Dialect.SQL_SERVER, _is_sql_server,
                  DbType.SQL_SERVER, False, _sql_server_protocol),
    DetectionRule('redis url or host list', Dialect.REDIS, _is_redis,
                  DbType.REDIS, False, _redis_protocol),
)

# Fallback when nothing above matches; db_type is resolved from the URL scheme
GENERIC_RULE = DetectionRule('generic url', Dialect.GENERIC_URL, lambda _: True)


def find_rule(connection_string: str) -> DetectionRule:
    """Return the first rule matching connection_string"""
    for rule in DETECTION_RULES:
        if rule.matches(connection_string):
            logger.debug(f"Detected {rule.dialect.value} via rule '{rule.name}'")
            return rule
    logger.debug("No dialect rule matched, falling back to generic URL")
    return GENERIC_RULE


def detect_dialect(connection_string: str) -> Dialect:
    """
    Classify a connection string into one of the known grammars.

    Args:
        connection_string: Non-empty raw connection string

    Returns:
        The Dialect of the first matching rule, GENERIC_URL otherwise
    """
    return find_rule(connection_string).dialect


def db_type_for_scheme(scheme: str) -> DbType:
    """Map a URL scheme onto a database type by substring match"""
    scheme = (scheme or '').lower()
    if 'mysql' in scheme:
        return DbType.MYSQL
    if 'postgres' in scheme:
        return DbType.POSTGRESQL
    if 'redis' in scheme:
        return DbType.REDIS
    if 'mssql' in scheme or 'sqlserver' in scheme:
        return DbType.SQL_SERVER
    return DbType.UNKNOWN
