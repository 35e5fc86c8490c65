"""
Base Repository for order/profile storage.

Provides connection management, session handling, error wrapping and
table access verification shared by every repository.
"""

import asyncio
import functools
import logging
from typing import Any, AsyncContextManager, Callable, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from order_profiles.core.config import get_settings
from order_profiles.db.connection import ConnDB, get_db_connection
from order_profiles.utils.error_handler import AppException, PersistenceException

settings = get_settings()
logger = logging.getLogger(__name__)


def is_connection_error(error: Exception) -> bool:
    """Driver errors caused by a lost or unusable connection rather than by the statement."""
    if isinstance(error, (OperationalError, InterfaceError)):
        return True
    return isinstance(error, DBAPIError) and error.connection_invalidated


def with_retry(
    max_attempts: Optional[int] = None,
    delay: Optional[float] = None,
    backoff: Optional[float] = None,
) -> Callable:
    """
    Decorator for retrying read operations with exponential backoff.

    Only connection-level ``PersistenceException`` errors are retried; a
    failure tied to a specific record is raised immediately.

    Args:
        max_attempts: Maximum number of attempts (default: settings.MAX_RETRIES)
        delay: Initial delay between retries in seconds
        backoff: Multiplier for exponential backoff

    Returns:
        Decorated function with retry logic
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempts = max(1, max_attempts or settings.MAX_RETRIES)
            current_delay = settings.RETRY_DELAY_SECONDS if delay is None else delay
            factor = settings.RETRY_BACKOFF_FACTOR if backoff is None else backoff

            for attempt in range(attempts):
                try:
                    return await func(*args, **kwargs)
                except PersistenceException as e:
                    if not e.connection_level or attempt == attempts - 1:
                        raise
                    logger.warning(
                        f"Attempt {attempt + 1}/{attempts} failed for {func.__name__}: {e}. "
                        f"Retrying in {current_delay:.1f}s..."
                    )
                    await asyncio.sleep(current_delay)
                    current_delay *= factor

        return wrapper

    return decorator


def log_operation(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator for logging repository operations.

    Args:
        operation_name: Optional custom name for the operation

    Returns:
        Decorated function with logging
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")

            try:
                result = await func(self, *args, **kwargs)
                logger.debug(f"Operation successful: {op_name}")
                return result
            except Exception as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise

        return wrapper

    return decorator


class BaseRepository:
    """
    Base repository for storage operations.

    Subclasses list the tables they need in ``TABLES`` and set ``ENTITY``
    to the entity name used in error details.
    """

    TABLES: Sequence[str] = ()
    ENTITY: str = "entity"

    def __init__(self, conn_db: Optional[ConnDB] = None):
        """
        Args:
            conn_db: Optional database connection. If not provided, uses global connection.
        """
        self.conn_db: ConnDB = conn_db or get_db_connection()
        self._initialized: bool = False
        self._repository_name: str = self.__class__.__name__

    @log_operation("repository_initialization")
    async def initialize(self) -> None:
        """
        Initialize the repository ensuring database connection is available.

        Raises:
            PersistenceException: If initialization fails
        """
        if not self.conn_db.is_initialized():
            await self.conn_db.initialize(create_schema=settings.DB_CREATE_SCHEMA)

        await self._verify_table_access()

        self._initialized = True
        logger.info(f"{self._repository_name} initialized successfully")

    async def _verify_table_access(self) -> None:
        """
        Verify access to the tables required by this repository.

        Raises:
            PersistenceException: If a table cannot be read
        """
        try:
            async with self.conn_db.get_session() as session:
                for table_name in self.TABLES:
                    result = await session.execute(text(f"SELECT COUNT(*) FROM {table_name}"))
                    result.scalar()
        except Exception as e:
            raise PersistenceException(
                message=f"{self._repository_name} cannot access tables {list(self.TABLES)}: {e}",
                operation="verify_table_access",
                connection_level=True,
            ) from e

    async def close(self) -> None:
        """
        Close the repository.

        The connection itself is owned by ConnDB; only the repository state is reset.
        """
        self._initialized = False
        logger.info(f"{self._repository_name} closed")

    def is_initialized(self) -> bool:
        """
        Check if the repository is initialized and ready for operations.
        """
        return self._initialized and self.conn_db.is_initialized()

    def get_session(self) -> AsyncContextManager[AsyncSession]:
        """
        Get a database session.

        Raises:
            PersistenceException: If repository is not initialized
        """
        if not self.is_initialized():
            raise PersistenceException(
                message=f"{self._repository_name} not initialized",
                entity=self.ENTITY,
                operation="session_acquisition",
                connection_level=True,
            )

        return self.conn_db.get_session()

    def _persistence_error(self, error: Exception, operation: str, entity_id: Any = None) -> AppException:
        """Wrap a driver error, keeping application errors untouched."""
        if isinstance(error, AppException):
            return error
        return PersistenceException(
            message=f"{self.ENTITY} {operation} failed: {error}",
            entity=self.ENTITY,
            entity_id=entity_id,
            operation=operation,
            connection_level=is_connection_error(error),
        )

    async def health_check(self) -> dict[str, Any]:
        """
        Perform a health check on the repository.
        """
        if not self.is_initialized():
            return {
                "status": "unhealthy",
                "repository": self._repository_name,
                "initialized": False,
                "error": "Repository not initialized",
            }

        try:
            await self._verify_table_access()
        except PersistenceException as e:
            return {
                "status": "unhealthy",
                "repository": self._repository_name,
                "initialized": True,
                "error": e.message,
            }

        return {"status": "healthy", "repository": self._repository_name, "initialized": True}

    def __repr__(self) -> str:
        return f"{self._repository_name}(initialized={self.is_initialized()})"
