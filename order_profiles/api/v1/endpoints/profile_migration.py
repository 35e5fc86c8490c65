"""
Endpoints para cambiar un tipo de pedido a perfiles de facturación y envío separados.

Exponen la confirmación previa, la ejecución de la migración y el progreso
guardado en el checkpoint del batch.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from order_profiles.api.v1.schemas.migration_schemas import (
    MigrationDescription,
    MigrationReportResponse,
    MigrationStatusResponse,
    SwitchRequest,
)
from order_profiles.services.profile_migration import (
    MigrationCheckpointManager,
    OrderTypeSwitcher,
    migration_batch_id,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_switcher(request: Request) -> OrderTypeSwitcher:
    """Switcher creado durante el startup de la aplicación."""
    switcher = getattr(request.app.state, "switcher", None)
    if switcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Profile migration service is not initialized",
        )
    return switcher


def get_checkpoint_dir() -> Optional[str]:
    """Directorio de checkpoints (None = settings.CHECKPOINT_DIR)."""
    return None


@router.get(
    "/order-types/{order_type_id}/profile-migration",
    response_model=MigrationDescription,
    status_code=status.HTTP_200_OK,
    summary="Confirmation data for switching to multiple profile types",
)
async def describe_profile_migration(
    order_type_id: str,
    switcher: OrderTypeSwitcher = Depends(get_switcher),
) -> MigrationDescription:
    """
    Obtiene la pregunta de confirmación, la cantidad de pedidos y la advertencia.
    """
    return MigrationDescription(**await switcher.describe(order_type_id))


@router.post(
    "/order-types/{order_type_id}/profile-migration",
    response_model=MigrationReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Switch to Multiple Profile Types",
)
async def switch_order_type(
    order_type_id: str,
    switch_request: Optional[SwitchRequest] = None,
    switcher: OrderTypeSwitcher = Depends(get_switcher),
) -> MigrationReportResponse:
    """
    Ejecuta la migración de perfiles del tipo de pedido.

    El tipo de pedido solo cambia si el batch termina correctamente;
    ``success`` indica el resultado y ``message`` el resumen para el operador.
    """
    switch_request = switch_request or SwitchRequest()
    logger.info(
        f"Profile migration requested for order type '{order_type_id}' "
        f"(chunk_size={switch_request.chunk_size}, resume={switch_request.resume})"
    )

    report = await switcher.switch(order_type_id, chunk_size=switch_request.chunk_size, resume=switch_request.resume)
    return MigrationReportResponse(**report.to_dict())


@router.get(
    "/order-types/{order_type_id}/profile-migration/status",
    response_model=MigrationStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Progress of a profile migration",
)
async def get_profile_migration_status(
    order_type_id: str,
    checkpoint_dir: Optional[str] = Depends(get_checkpoint_dir),
) -> MigrationStatusResponse:
    """
    Obtiene el progreso guardado en el checkpoint de la migración.
    """
    checkpoint_manager = MigrationCheckpointManager(migration_batch_id(order_type_id), checkpoint_dir)
    await checkpoint_manager.initialize()
    try:
        return MigrationStatusResponse(**await checkpoint_manager.get_progress_info())
    finally:
        await checkpoint_manager.close()
