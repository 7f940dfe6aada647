"""
Database connections for row sources.

Driver modules are imported on first use so that only the driver for the
requested database has to be installed.
"""

import logging
import os
from typing import Any

from ..config import ConnectionSettings
from ..errors import DatabaseConnectionError
from .dialects import DatabaseType

logger = logging.getLogger(__name__)

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


def connect(db_type: DatabaseType, settings: ConnectionSettings) -> Any:
    """
    Open a DB-API connection.

    Args:
        db_type: Which driver to use
        settings: Parsed DSN

    Returns:
        Open DB-API connection

    Raises:
        DatabaseConnectionError: driver missing or the database is unreachable
    """
    logger.debug(
        f"Connecting to {db_type.value} at {settings.host}:{settings.port}/{settings.database}"
    )
    try:
        if db_type == DatabaseType.MYSQL:
            return _connect_mysql(settings)
        elif db_type == DatabaseType.POSTGRESQL:
            return _connect_postgres(settings)
        else:
            return _connect_sqlserver(settings)
    except ImportError as e:
        raise DatabaseConnectionError(
            f"driver for {db_type.value} is not installed: {e}"
        ) from e
    except Exception as e:
        raise DatabaseConnectionError(
            f"cannot connect to {db_type.value} at {settings.host}:{settings.port}"
            f"/{settings.database}: {e}"
        ) from e


def _connect_mysql(settings: ConnectionSettings) -> Any:
    import MySQLdb

    return MySQLdb.connect(
        host=settings.host,
        port=settings.port,
        user=settings.user,
        passwd=settings.password,
        db=settings.database,
        charset="utf8mb4",
    )


def _connect_postgres(settings: ConnectionSettings) -> Any:
    import psycopg2

    return psycopg2.connect(
        host=settings.host,
        port=settings.port,
        dbname=settings.database,
        user=settings.user,
        password=settings.password,
    )


def _connect_sqlserver(settings: ConnectionSettings) -> Any:
    import pyodbc

    odbc_driver = os.getenv("SQLDIFF_ODBC_DRIVER", DEFAULT_ODBC_DRIVER)
    return pyodbc.connect(
        f"DRIVER={{{odbc_driver}}};"
        f"SERVER={settings.host},{settings.port};"
        f"DATABASE={settings.database};"
        f"UID={settings.user};"
        f"PWD={settings.password};"
        f"TrustServerCertificate=yes;"
    )


def open_cursor(db_type: DatabaseType, connection: Any, name: str) -> Any:
    """
    Open a cursor that streams rows instead of buffering the whole result.

    Args:
        db_type: Driver of ``connection``
        connection: Open DB-API connection
        name: Cursor name (used for PostgreSQL server-side cursors)
    """
    if db_type == DatabaseType.MYSQL:
        import MySQLdb.cursors

        return connection.cursor(MySQLdb.cursors.SSCursor)
    elif db_type == DatabaseType.POSTGRESQL:
        # Named cursors are server-side in psycopg2
        return connection.cursor(name=name)
    else:
        # pyodbc fetches lazily already
        return connection.cursor()
