"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y proporciona utilidades para manejo consistente de errores.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Errores de persistencia
    DB_CONNECTION_FAILED = "DB_CONNECTION_FAILED"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"

    # Errores de migración
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_TYPE_NOT_FOUND = "ORDER_TYPE_NOT_FOUND"
    BATCH_OPERATION_FAILED = "BATCH_OPERATION_FAILED"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
        is_critical: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_retryable: Si la operación puede reintentarse
            is_critical: Si requiere alerta inmediata
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.is_critical = is_critical
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "is_critical": self.is_critical,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """String representation del error."""
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Excepción para errores de validación de datos.
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
            }
        )


class OrderNotFoundException(AppException):
    """
    Excepción para pedidos que no existen en el almacenamiento.
    """

    def __init__(self, order_id: Any, **kwargs):
        super().__init__(
            message=f"Order {order_id} could not be loaded",
            error_code=ErrorCode.ORDER_NOT_FOUND,
            status_code=404,
            severity=ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.order_id = order_id
        self.details.update({"order_id": order_id})


class OrderTypeNotFoundException(AppException):
    """
    Excepción para tipos de pedido inexistentes.
    """

    def __init__(self, order_type_id: str, **kwargs):
        super().__init__(
            message=f"Order type '{order_type_id}' does not exist",
            error_code=ErrorCode.ORDER_TYPE_NOT_FOUND,
            status_code=404,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.order_type_id = order_type_id
        self.details.update({"order_type_id": order_type_id})


class PersistenceException(AppException):
    """
    Excepción para errores de lectura/escritura en la base de datos.

    ``connection_level`` distingue fallos de conexión (reintentables por
    ``with_retry``) de fallos al guardar un registro concreto.
    """

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        entity_id: Any = None,
        operation: Optional[str] = None,
        connection_level: bool = False,
        **kwargs,
    ):
        """
        Inicializa la excepción de persistencia.

        Args:
            message: Mensaje de error
            entity: Tipo de entidad involucrada (profile, shipment, order...)
            entity_id: ID de la entidad
            operation: Operación que falló (load, save, query...)
            connection_level: Si el fallo es de conexión y no del registro
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.DB_CONNECTION_FAILED if connection_level else ErrorCode.PERSISTENCE_FAILED,
            status_code=503 if connection_level else 500,
            severity=ErrorSeverity.HIGH,
            is_retryable=connection_level,
            is_critical=connection_level,
            **kwargs,
        )
        self.entity = entity
        self.entity_id = entity_id
        self.operation = operation
        self.connection_level = connection_level

        self.details.update(
            {
                "entity": entity,
                "entity_id": entity_id,
                "operation": operation,
                "connection_level": connection_level,
            }
        )


class BatchOperationException(AppException):
    """
    Excepción para una operación de batch que abortó la ejecución.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        arguments: Optional[tuple] = None,
        processed_ids: Optional[List[Any]] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de batch.

        Args:
            message: Mensaje de error
            operation: Nombre de la operación que falló
            arguments: Argumentos con los que se invocó
            processed_ids: IDs procesados antes del fallo
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.BATCH_OPERATION_FAILED,
            status_code=500,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.operation = operation
        self.arguments = arguments or ()
        self.processed_ids = processed_ids or []

        self.details.update(
            {
                "operation": operation,
                "arguments": repr(self.arguments),
                "processed_count": len(self.processed_ids),
            }
        )


# === FUNCIONES DE UTILIDAD ===


def convert_to_app_exception(exception: Exception, context: Optional[Dict[str, Any]] = None) -> AppException:
    """
    Convierte una excepción estándar a AppException.

    Args:
        exception: Excepción a convertir
        context: Contexto adicional

    Returns:
        AppException: Excepción convertida
    """
    if isinstance(exception, AppException):
        if context:
            exception.details.update(context)
        return exception

    context = context or {}
    exception_type = type(exception).__name__
    message = str(exception)

    if "connection" in message.lower() or "timeout" in message.lower():
        return PersistenceException(
            message=f"Database connection error: {message}",
            connection_level=True,
            details=context,
        )

    return AppException(
        message=f"{exception_type}: {message}",
        details={"original_exception": exception_type, **context},
    )


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        "traceback": traceback.format_exc(),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
                "is_retryable": exception.is_retryable,
                "is_critical": exception.is_critical,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"

    logger.log(level, message, extra=log_data)


class ErrorAggregator:
    """
    Agregador de errores para procesos batch.
    """

    def __init__(self):
        """Inicializa el agregador."""
        self.errors: List[AppException] = []
        self.total_processed = 0
        self.start_time = datetime.now(timezone.utc)

    def add_error(self, exception: Union[AppException, Exception], context: Optional[Dict] = None):
        """
        Agrega un error al agregador.

        Args:
            exception: Excepción a agregar
            context: Contexto adicional
        """
        exception = convert_to_app_exception(exception, context)
        self.errors.append(exception)

        if exception.is_critical:
            log_error(exception, context, logging.CRITICAL)

    def increment_processed(self, count: int = 1):
        """Incrementa contador de procesados."""
        self.total_processed += count

    def has_errors(self) -> bool:
        """Verifica si hay errores."""
        return len(self.errors) > 0

    def get_summary(self) -> Dict[str, Any]:
        """
        Obtiene resumen de errores.

        Returns:
            Dict: Resumen de errores
        """
        end_time = datetime.now(timezone.utc)
        duration = (end_time - self.start_time).total_seconds()

        return {
            "total_processed": self.total_processed,
            "error_count": len(self.errors),
            "success_count": self.total_processed - len(self.errors),
            "duration_seconds": duration,
            "start_time": self.start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "errors": [error.to_dict() for error in self.errors],
        }
