"""Database module for managing connections to PostgreSQL.

This module handles:
- Database connection pool lifecycle (explicit open and close)
- Database creation and schema management
- Id parsing shared by the store modules
"""

import logging
import ssl
import uuid
from typing import Optional, Dict, Any, Union
from urllib.parse import urlparse, urlunparse, parse_qs

import asyncpg
import backoff

from config import settings_conf
from .exceptions import (
    DatabaseError,
    DatabaseSchemaError,
    ValidationError,
    NotFoundError,
    ConflictError
)
from .lib.schema_manager import SchemaManager

logger = logging.getLogger(__name__)

# Errors worth retrying while the server is starting or briefly unreachable
CONNECT_ERRORS = (
    OSError,
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.CannotConnectNowError
)

SSL_MODES = ('require', 'verify-ca', 'verify-full')


def _get_ssl_context() -> ssl.SSLContext:
    """Create SSL context for TLS database connections."""
    ssl_context = ssl.create_default_context()
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.check_hostname = True
    return ssl_context


def _get_connection_kwargs(db_url: str) -> Dict[str, Any]:
    """Get connection kwargs from database URL.

    Args:
        db_url: Database connection URL

    Returns:
        Dict of connection parameters
    """
    params = parse_qs(urlparse(db_url).query)
    sslmode = params.get('sslmode', ['disable'])[0]

    kwargs: Dict[str, Any] = {
        'server_settings': {
            'statement_timeout': '300000',  # 5 minutes
        }
    }
    if sslmode in SSL_MODES:
        kwargs['ssl'] = _get_ssl_context()

    return kwargs


def _database_name(db_url: str) -> str:
    """Extract the database name from a connection URL."""
    parsed = urlparse(db_url)
    db_name = parsed.path.strip('/')
    if not db_name:
        params = parse_qs(parsed.query)
        db_name = params.get('database', ['postgres'])[0]
    return db_name


def parse_uuid(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """Parse a record id, returning None when it is not a valid UUID."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


@backoff.on_exception(backoff.expo, CONNECT_ERRORS, max_tries=5)
async def create_database_if_not_exists(db_url: str) -> None:
    """Create the database if it doesn't exist.

    Args:
        db_url: Database connection URL

    Raises:
        Exception: If database creation fails after retries
    """
    db_name = _database_name(db_url)
    if db_name == 'postgres':
        return

    # Connect to the maintenance database to issue CREATE DATABASE
    parsed = urlparse(db_url)
    base_url = urlunparse(parsed._replace(path='/postgres'))
    logger.info(f"Connecting to postgres to create {db_name} if needed")

    conn = await asyncpg.connect(base_url, **_get_connection_kwargs(base_url))
    try:
        exists = await conn.fetchval(
            'SELECT EXISTS(SELECT 1 FROM pg_database WHERE datname = $1)',
            db_name
        )
        if not exists:
            await conn.execute(f'CREATE DATABASE "{db_name}"')
            logger.info(f"Created database {db_name}")
    except asyncpg.PostgresError as e:
        logger.error(f"Error creating database: {e}")
        raise DatabaseError(f"Failed to create database {db_name}: {e}") from e
    finally:
        await conn.close()


class Database:
    """Owns the connection pool used by the store managers.

    Open it once on startup and close it on shutdown::

        async with Database(db_url) as db:
            listings = ListingManager(db)
    """

    def __init__(
        self,
        db_url: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None
    ) -> None:
        """Initialize the database handle without connecting.

        Args:
            db_url: Optional database URL. If not provided, will use settings.
            min_size: Minimum idle connections in the pool
            max_size: Maximum connections in the pool
        """
        self.db_url = db_url or settings_conf['db_url']
        if not self.db_url:
            raise ValueError("Database URL not provided")
        self.min_size = min_size if min_size is not None else settings_conf['pool_min_size']
        self.max_size = max_size if max_size is not None else settings_conf['pool_max_size']
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    @property
    def pool(self) -> asyncpg.Pool:
        """The underlying asyncpg pool.

        Raises:
            RuntimeError: If the database hasn't been opened
        """
        if self._pool is None:
            raise RuntimeError("Database is not open")
        return self._pool

    @backoff.on_exception(backoff.expo, CONNECT_ERRORS, max_tries=5)
    async def open(
        self,
        force_recreate: bool = False,
        create_database: bool = True
    ) -> 'Database':
        """Create the connection pool and bring the schema up to date.

        Args:
            force_recreate: If True, drop and recreate all tables
            create_database: If True, create the database when it is missing

        Returns:
            This database, now open

        Raises:
            DatabaseSchemaError: If the schema cannot be initialized
        """
        if self._pool is not None:
            return self

        if create_database:
            await create_database_if_not_exists(self.db_url)

        pool = await asyncpg.create_pool(
            self.db_url,
            min_size=self.min_size,
            max_size=self.max_size,
            max_queries=10000,   # Reset connection after this many queries
            max_inactive_connection_lifetime=300.0,  # 5 minutes
            command_timeout=60.0,
            **_get_connection_kwargs(self.db_url)
        )

        try:
            await SchemaManager(pool).initialize(force_recreate=force_recreate)
        except Exception:
            await pool.close()
            raise

        self._pool = pool
        logger.info(f"Database pool open ({self.min_size}-{self.max_size} connections)")
        return self

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    def acquire(self):
        """Acquire a connection from the pool (async context manager)."""
        return self.pool.acquire()

    async def __aenter__(self) -> 'Database':
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


# Export public interface
__all__ = [
    'Database',
    'parse_uuid',
    'create_database_if_not_exists',
    'DatabaseError',
    'DatabaseSchemaError',
    'ValidationError',
    'NotFoundError',
    'ConflictError',
]
