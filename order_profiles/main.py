"""
Order Profile Migration - FastAPI Application Entry Point

Servicio que cambia tipos de pedido de un único tipo de perfil compartido
a perfiles de facturación y envío separados, migrando los pedidos existentes.
"""

import logging

import uvicorn
from fastapi import FastAPI

from order_profiles.core.config import get_settings
from order_profiles.core.exception_handlers import configure_exception_handlers
from order_profiles.core.lifespan import lifespan
from order_profiles.core.routers import configure_all_routers

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    settings = get_settings()
    docs_enabled = settings.DEBUG or settings.ENABLE_DOCS

    app = FastAPI(
        title=settings.APP_NAME,
        description="Migration of order profiles to separate billing and shipping profile types",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    # 1. Manejadores de excepciones
    configure_exception_handlers(app)

    # 2. Routers y endpoints
    configure_all_routers(app)

    app.state.app_info = {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
    }
    return app


app = create_application()


def run() -> None:
    """Ejecuta el servidor con uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "order_profiles.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
