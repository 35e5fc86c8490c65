"""
Modelos Pydantic para los endpoints de migración de perfiles.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class SwitchRequest(BaseModel):
    """Parámetros para cambiar un tipo de pedido a perfiles separados."""

    chunk_size: Optional[int] = Field(
        None, ge=0, description="Pedidos por operación del batch (0 = todos en una operación)"
    )
    resume: bool = Field(False, description="Reanudar una migración fallida desde su checkpoint")


class MigrationDescription(BaseModel):
    """Datos de confirmación previos al cambio."""

    order_type_id: str
    label: str
    use_multiple_profile_types: bool
    question: str
    order_count: int = Field(..., ge=0)
    billing_profile_type: str
    shipping_profile_type: str
    warning: str
    confirm_label: str


class MigrationReportResponse(BaseModel):
    """Resultado final de un batch de migración."""

    success: bool
    message: str
    migrated_ids: List[Any] = Field(default_factory=list)
    skipped_ids: List[Any] = Field(default_factory=list)
    failed_ids: List[Any] = Field(default_factory=list)
    created_profile_ids: List[int] = Field(default_factory=list)
    failed_operation: Optional[str] = None
    failed_arguments: Optional[str] = None


class MigrationStatusResponse(BaseModel):
    """Progreso guardado en el checkpoint de la migración."""

    status: str
    batch_id: str
    message: Optional[str] = None
    completed_operations: Optional[int] = None
    total_operations: Optional[int] = None
    progress_percentage: Optional[float] = None
    processed_orders: Optional[int] = None
    migrated: Optional[int] = None
    skipped: Optional[int] = None
    failed: Optional[int] = None
    timestamp: Optional[str] = None
