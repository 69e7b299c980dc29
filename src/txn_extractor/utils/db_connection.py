"""
Database connection utilities
"""
from typing import Optional

import psycopg2

from ..config import Settings
from ..errors import StoreUnavailable


def get_db_connection(settings: Optional[Settings] = None):
    """
    Get database connection using settings from the environment

    Args:
        settings: Connection settings (default: Settings.from_env())

    Returns:
        psycopg2 connection object

    Raises:
        StoreUnavailable: if the database cannot be reached
    """
    settings = settings or Settings.from_env()
    try:
        return psycopg2.connect(
            host=settings.db_host,
            port=settings.db_port,
            database=settings.db_name,
            user=settings.db_user,
            password=settings.db_password,
        )
    except psycopg2.OperationalError as e:
        raise StoreUnavailable(f"Cannot connect to {settings.db_host}:{settings.db_port}: {e}") from e
