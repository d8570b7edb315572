"""Connection String Builder - SQLAlchemy URLs from parsed records

Relational records (MySQL, PostgreSQL, SQL Server) can be handed straight to
``sqlalchemy.create_engine`` through the URLs built here.
"""

import logging
from typing import Dict, Optional

from sqlalchemy.engine import URL

from connstring.core.exceptions import ReconstructionError, UnsupportedDbType
from connstring.core.reconstructor import resolve_password
from connstring.models.connection_record import ConnectionRecord
from connstring.utils.constants import DbType

logger = logging.getLogger(__name__)

DEFAULT_ODBC_DRIVER = 'ODBC Driver 17 for SQL Server'

DEFAULT_DRIVERS = {
    DbType.MYSQL: 'mysql+pymysql',
    DbType.POSTGRESQL: 'postgresql+psycopg2',
    DbType.SQL_SERVER: 'mssql+pyodbc',
}


class ConnectionStringBuilder:
    """Builds SQLAlchemy URLs for relational database records"""

    @staticmethod
    def to_sqlalchemy_url(
        record: ConnectionRecord,
        driver: Optional[str] = None,
        secret: Optional[str] = None,
        odbc_driver: str = DEFAULT_ODBC_DRIVER
    ) -> URL:
        """
        Build a SQLAlchemy URL from a parsed record.

        Args:
            record: Parsed MySQL, PostgreSQL or SQL Server record
            driver: SQLAlchemy drivername (e.g. "postgresql+asyncpg");
                defaults per database type
            secret: Secret needed when the record is encrypted
            odbc_driver: ODBC driver name used for SQL Server

        Returns:
            sqlalchemy.engine.URL

        Raises:
            UnsupportedDbType: If the record is not relational
            ReconstructionError: If the port is not numeric or the record
                is encrypted and no secret is given
        """
        if record.db_type not in DEFAULT_DRIVERS:
            raise UnsupportedDbType(record.db_type)

        drivername = driver or DEFAULT_DRIVERS[record.db_type]
        password = resolve_password(record, secret, strict_decrypt=True)

        try:
            port = int(record.port) if record.port else None
        except ValueError:
            raise ReconstructionError(f"Invalid port: {record.port}") from None

        host = record.host
        query: Dict[str, str] = dict(record.params)

        if record.db_type == DbType.SQL_SERVER:
            if record.instance:
                host = f"{host}\\{record.instance}"
            if drivername.endswith('+pyodbc'):
                query.setdefault('driver', odbc_driver)
                if not record.username:
                    # Windows integrated authentication
                    query.setdefault('trusted_connection', 'yes')

        url = URL.create(
            drivername,
            username=record.username,
            password=password,
            host=host,
            port=port,
            database=record.db_name,
            query=query,
        )
        logger.debug(f"Built SQLAlchemy URL: {url.render_as_string(hide_password=True)}")
        return url


# Module-level convenience function
def to_sqlalchemy_url(record: ConnectionRecord, driver: Optional[str] = None,
                      secret: Optional[str] = None) -> URL:
    """Convenience function for SQLAlchemy URLs"""
    return ConnectionStringBuilder.to_sqlalchemy_url(record, driver, secret)
