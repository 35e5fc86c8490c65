"""
Clase ConnDB para gestión de conexiones a la base de datos de pedidos.

Esta clase maneja únicamente la conexión, configuración del pool,
creación del esquema y ciclo de vida de las conexiones.
"""

import logging
import time
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from order_profiles.core.config import get_settings
from order_profiles.db.models import Base
from order_profiles.utils.error_handler import PersistenceException

settings = get_settings()
logger = logging.getLogger(__name__)


class ConnDB:
    """
    Gestión de conexiones a la base de datos.

    Una instancia por URL de base de datos; ``get_db_connection`` expone la
    instancia compartida de la aplicación.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.DATABASE_URL
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None
        self._connection_tested = False

    async def initialize(self, create_schema: bool = False):
        """
        Inicializa el engine de base de datos y el pool de conexiones.

        Args:
            create_schema: Si crear las tablas que falten

        Raises:
            PersistenceException: Si falla la inicialización
        """
        try:
            if self.engine is not None:
                logger.debug("Database connection already initialized")
                return

            logger.info("Initializing database connection...")

            engine_kwargs = {"echo": settings.DB_ECHO, "future": True}
            if self.database_url.startswith("sqlite"):
                if ":memory:" in self.database_url or self.database_url.rstrip("/").endswith("aiosqlite:"):
                    # Una sola conexión compartida para que la BD en memoria persista
                    engine_kwargs["poolclass"] = StaticPool
                    engine_kwargs["connect_args"] = {"check_same_thread": False}
            else:
                engine_kwargs.update(
                    {
                        "pool_size": settings.DB_POOL_SIZE,
                        "max_overflow": 10,
                        "pool_pre_ping": True,
                        "pool_recycle": 3600,
                    }
                )

            self.engine = create_async_engine(self.database_url, **engine_kwargs)
            self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

            await self._test_connection()

            if create_schema:
                await self.create_schema()

            logger.info("Database connection initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database connection: {e}")
            await self._cleanup_failed_initialization()
            raise PersistenceException(
                message=f"Failed to initialize database connection: {str(e)}",
                operation="initialize",
                connection_level=True,
            ) from e

    async def _test_connection(self):
        """
        Prueba la conexión a la base de datos.

        Raises:
            PersistenceException: Si la prueba de conexión falla
        """
        async with self.session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            if result.scalar() != 1:
                raise PersistenceException(
                    message="Connection test returned unexpected value",
                    operation="test_connection",
                    connection_level=True,
                )
        self._connection_tested = True

    async def create_schema(self):
        """Crea las tablas que no existan."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def _cleanup_failed_initialization(self):
        """Limpia recursos en caso de fallo de inicialización."""
        if self.engine:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        self._connection_tested = False

    def get_session(self) -> AsyncSession:
        """
        Obtiene una nueva sesión de base de datos.

        Returns:
            AsyncSession: Sesión asíncrona de SQLAlchemy

        Raises:
            PersistenceException: Si no hay conexión inicializada
        """
        if not self.is_initialized():
            raise PersistenceException(
                message="Database connection not initialized. Call initialize() first.",
                operation="session_creation",
                connection_level=True,
            )

        return self.session_factory()

    def is_initialized(self) -> bool:
        """
        Verifica si la conexión está inicializada.

        Returns:
            bool: True si está inicializada y probada
        """
        return self.engine is not None and self.session_factory is not None and self._connection_tested

    async def test_connection(self) -> bool:
        """
        Prueba la conexión a la base de datos de forma no destructiva.

        Returns:
            bool: True si la conexión funciona correctamente
        """
        if not self.is_initialized():
            return False

        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

    async def close(self):
        """
        Cierra la conexión y limpia todos los recursos.
        """
        if self.engine:
            await self.engine.dispose()
            logger.info("Database engine disposed")

        self.engine = None
        self.session_factory = None
        self._connection_tested = False

    async def health_check(self) -> dict:
        """
        Realiza un health check de la conexión.

        Returns:
            dict: Estado de salud de la conexión
        """
        start_time = time.time()
        test_passed = await self.test_connection()

        return {
            "connection_initialized": self.is_initialized(),
            "test_passed": test_passed,
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }

    def __repr__(self) -> str:
        return f"ConnDB(initialized={self.is_initialized()}, url={self.database_url.split('@')[-1]!r})"


# Instancia global
_conn_db_instance: Optional[ConnDB] = None


def get_db_connection() -> ConnDB:
    """
    Obtiene la instancia compartida de ConnDB.

    Returns:
        ConnDB: Instancia de conexión a base de datos
    """
    global _conn_db_instance

    if _conn_db_instance is None:
        _conn_db_instance = ConnDB()

    return _conn_db_instance


async def initialize_database():
    """
    Función de conveniencia para inicializar la base de datos.
    """
    await get_db_connection().initialize(create_schema=settings.DB_CREATE_SCHEMA)


async def close_database():
    """
    Función de conveniencia para cerrar la base de datos.
    """
    await get_db_connection().close()
