"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Este módulo define los manejadores de excepciones personalizados y globales,
proporcionando respuestas consistentes y logging apropiado para cada tipo de error.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from order_profiles.core.config import get_settings
from order_profiles.utils.error_handler import (
    AppException,
    BatchOperationException,
    PersistenceException,
    ValidationException,
)

logger = logging.getLogger(__name__)


def _base_content(request: Request, error_type: str, message: str) -> dict:
    return {
        "error": True,
        "error_type": error_type,
        "message": message,
        "path": str(request.url.path),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request.headers.get("X-Request-ID"),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    logger.error(
        f"App Exception: {exc.message} - Code: {exc.error_code.value} - URL: {request.url} - Details: {exc.details}"
    )

    content = _base_content(request, "application_error", exc.message)
    content.update(
        {
            "error_code": exc.error_code.value,
            "details": exc.details if get_settings().DEBUG else None,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """
    Manejador para errores de validación.

    Args:
        request: Request de FastAPI
        exc: Excepción de validación

    Returns:
        JSONResponse: Respuesta JSON con detalles de validación
    """
    logger.warning(
        f"Validation Exception: {exc.message} - Field: {exc.field} - Value: {exc.invalid_value} - URL: {request.url}"
    )

    content = _base_content(request, "validation_error", exc.message)
    content.update(
        {
            "error_code": exc.error_code.value,
            "field": exc.field,
            "invalid_value": exc.details.get("invalid_value") if get_settings().DEBUG else None,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def persistence_exception_handler(request: Request, exc: PersistenceException) -> JSONResponse:
    """
    Manejador para errores de base de datos.

    Args:
        request: Request de FastAPI
        exc: Excepción de persistencia

    Returns:
        JSONResponse: Respuesta JSON con información del error de almacenamiento
    """
    logger.error(
        f"Persistence Exception: {exc.message} - Entity: {exc.entity} - "
        f"Operation: {exc.operation} - Connection level: {exc.connection_level} - URL: {request.url}"
    )

    content = _base_content(request, "persistence_error", exc.message)
    content.update(
        {
            "error_code": exc.error_code.value,
            "entity": exc.entity,
            "operation": exc.operation,
            "retry_suggested": exc.is_retryable,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def batch_operation_exception_handler(request: Request, exc: BatchOperationException) -> JSONResponse:
    """
    Manejador para operaciones de batch que abortaron.

    Args:
        request: Request de FastAPI
        exc: Excepción de batch

    Returns:
        JSONResponse: Respuesta JSON con la operación fallida
    """
    logger.error(f"Batch Exception: {exc.message} - Operation: {exc.operation} - URL: {request.url}")

    content = _base_content(request, "batch_error", exc.message)
    content.update(
        {
            "error_code": exc.error_code.value,
            "operation": exc.operation,
            "arguments": repr(exc.arguments),
            "processed_ids": exc.processed_ids,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Manejador para excepciones HTTP estándar.

    Args:
        request: Request de FastAPI
        exc: Excepción HTTP

    Returns:
        JSONResponse: Respuesta JSON con error HTTP
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    content = _base_content(request, "http_error", str(exc.detail))
    content["status_code"] = exc.status_code
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Respuesta JSON con error genérico
    """
    logger.critical(f"Unhandled Exception: {type(exc).__name__}: {exc} - URL: {request.url}", exc_info=exc)

    settings = get_settings()
    content = _base_content(
        request, "internal_error", str(exc) if settings.DEBUG else "An unexpected error occurred"
    )
    content["exception_type"] = type(exc).__name__ if settings.DEBUG else None
    return JSONResponse(status_code=500, content=content)


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("Configurando manejadores de excepciones...")

    # Manejadores específicos (orden de especificidad)
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(PersistenceException, persistence_exception_handler)
    app.add_exception_handler(BatchOperationException, batch_operation_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)

    # Manejadores HTTP estándar
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)
