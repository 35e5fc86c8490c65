"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo registra los routers de la API y los endpoints base.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from order_profiles.api.v1.endpoints.profile_migration import router as profile_migration_router
from order_profiles.core.config import get_settings
from order_profiles.core.lifespan import get_startup_info
from order_profiles.db.connection import get_db_connection

logger = logging.getLogger(__name__)


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        """
        Endpoint raíz que proporciona información básica de la API.
        """
        settings = get_settings()
        return {
            "message": settings.APP_NAME,
            "description": "Migration of order profiles to separate billing and shipping profile types",
            "version": settings.APP_VERSION,
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/health",
                "profile_migration": "/api/v1/order-types/{order_type_id}/profile-migration",
            },
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        """
        Endpoint simple para verificar que la API responde.
        """
        return {"message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check(request: Request):
        """
        Verifica la base de datos y los repositorios del servicio.
        """
        settings = get_settings()
        database = await get_db_connection().health_check()
        repositories = {
            name: await repository.health_check()
            for name, repository in getattr(request.app.state, "repositories", {}).items()
        }

        healthy = database["test_passed"] and all(
            repository["status"] == "healthy" for repository in repositories.values()
        )

        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "version": settings.APP_VERSION,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "services": {"database": database, "repositories": repositories},
                "environment": settings.ENVIRONMENT,
            },
        )

    @app.get("/health/liveness", tags=["Health"], summary="Liveness Probe")
    async def liveness_probe():
        """
        Verifica que la aplicación esté ejecutándose.
        """
        return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/info", tags=["Health"], summary="Startup Info")
    async def startup_info():
        """
        Configuración efectiva del servicio.
        """
        return get_startup_info()


def configure_all_routers(app: FastAPI) -> None:
    """
    Registra todos los routers y endpoints de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    create_root_endpoints(app)
    create_health_endpoints(app)

    app.include_router(profile_migration_router, prefix="/api/v1", tags=["Profile Migration"])

    logger.info("Routers configurados correctamente")
