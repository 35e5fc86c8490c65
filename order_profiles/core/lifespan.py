"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación:
logging, base de datos, repositorios y el servicio de migración de perfiles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI

from order_profiles.core.config import get_environment_info, get_settings
from order_profiles.core.logging_config import setup_logging
from order_profiles.db.connection import close_database, get_db_connection, initialize_database
from order_profiles.db.repositories import (
    OrderRepository,
    OrderTypeRepository,
    ProfileRepository,
    ProfileTypeRepository,
    ShipmentRepository,
)
from order_profiles.services.profile_migration import create_switcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    # === STARTUP ===
    try:
        # 1. Configurar logging
        await startup_configure_logging()
        logger.info(f"Iniciando {settings.APP_NAME} {settings.APP_VERSION}...")

        # 2. Inicializar base de datos
        await initialize_database()

        # 3. Inicializar repositorios y servicios
        await startup_initialize_services(app)

        logger.info("Aplicación iniciada correctamente")

    except Exception as e:
        logger.error(f"Error durante el startup: {e}")
        await close_database()
        raise

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info(f"Cerrando {settings.APP_NAME}...")

    try:
        await shutdown_cleanup_services(app)
        await close_database()
        logger.info("Aplicación cerrada correctamente")
    except Exception as e:
        logger.error(f"Error durante el shutdown: {e}")


# === FUNCIONES DE STARTUP ===


async def startup_configure_logging():
    """Configura el sistema de logging."""
    setup_logging()
    logger.info("Sistema de logging configurado")


async def startup_initialize_services(app: FastAPI):
    """Crea los repositorios y el servicio de migración de perfiles."""
    conn_db = get_db_connection()
    repositories = {
        "order_repository": OrderRepository(conn_db),
        "profile_repository": ProfileRepository(conn_db),
        "shipment_repository": ShipmentRepository(conn_db),
        "order_type_repository": OrderTypeRepository(conn_db),
        "profile_type_repository": ProfileTypeRepository(conn_db),
    }

    for repository in repositories.values():
        await repository.initialize()

    app.state.repositories = repositories
    app.state.switcher = create_switcher(**repositories)
    logger.info("Servicio de migración de perfiles inicializado")


# === FUNCIONES DE SHUTDOWN ===


async def shutdown_cleanup_services(app: FastAPI):
    """Cierra los repositorios creados en el startup."""
    for repository in getattr(app.state, "repositories", {}).values():
        await repository.close()
    app.state.switcher = None


def get_startup_info() -> Dict[str, Any]:
    """
    Obtiene información sobre el estado de startup.

    Returns:
        Dict: Información de startup
    """
    return {
        **get_environment_info(),
        "database": get_db_connection().database_url.split("@")[-1],
    }
