"""
Sistema de checkpoints para la migración de perfiles.

Guarda el progreso del batch (operaciones completadas y resultados
acumulados) para poder reanudar una migración interrumpida o fallida.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import redis.asyncio as redis

from order_profiles.core.config import get_settings

logger = logging.getLogger(__name__)


class MigrationCheckpointManager:
    """
    Gestor de checkpoints para batches de migración.

    Guarda el progreso en Redis para recuperación rápida y
    en archivo local como respaldo.
    """

    def __init__(self, batch_id: str, checkpoint_dir: Optional[str] = None):
        """
        Args:
            batch_id: Identificador único del batch
            checkpoint_dir: Directorio de archivos de respaldo (default: settings.CHECKPOINT_DIR)
        """
        self.settings = get_settings()
        self.batch_id = batch_id
        self.redis_client = None
        self.checkpoint_dir = Path(checkpoint_dir or self.settings.CHECKPOINT_DIR)
        self.checkpoint_file = self.checkpoint_dir / f"{batch_id}.json"
        self.redis_key = f"profile_migration:checkpoint:{batch_id}"

    async def initialize(self):
        """Inicializa la conexión con Redis si está disponible."""
        self.checkpoint_dir.mkdir(parents=True, exist_ok=True)

        try:
            if self.settings.REDIS_URL:
                self.redis_client = redis.from_url(**self.settings.redis_config)
                await self.redis_client.ping()
                logger.info(f"Checkpoint manager initialized with Redis for batch {self.batch_id}")
            else:
                logger.info(f"Checkpoint manager initialized with file backup only for batch {self.batch_id}")
                self.redis_client = None
        except Exception as e:
            logger.debug(f"Redis not available, using file-based checkpoints only: {e}")
            self.redis_client = None

    async def save_checkpoint(
        self,
        completed_operations: int,
        total_operations: int,
        results: List[Dict[str, Any]],
        status: str = "in_progress",
        additional_data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Guarda un checkpoint del progreso actual.

        Args:
            completed_operations: Operaciones del batch completadas
            total_operations: Total de operaciones del batch
            results: Resultados acumulados (serializados)
            status: in_progress, failed o completed
            additional_data: Datos adicionales opcionales

        Returns:
            True si se guardó exitosamente
        """
        checkpoint_data = {
            "batch_id": self.batch_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": status,
            "completed_operations": completed_operations,
            "total_operations": total_operations,
            "progress_percentage": (completed_operations / total_operations * 100) if total_operations > 0 else 0,
            "results": results,
            "additional_data": additional_data or {},
        }

        try:
            if self.redis_client:
                await self.redis_client.setex(
                    self.redis_key,
                    self.settings.CHECKPOINT_TTL_SECONDS,
                    json.dumps(checkpoint_data, default=str),
                )
                logger.debug(f"Checkpoint saved to Redis: {completed_operations}/{total_operations} operations")

            # Siempre guardar en archivo como respaldo
            with open(self.checkpoint_file, "w") as f:
                json.dump(checkpoint_data, f, indent=2, default=str)

            logger.debug(f"Checkpoint file saved: {self.checkpoint_file}")
            return True

        except Exception as e:
            logger.error(f"Error saving checkpoint: {e}")
            return False

    async def load_checkpoint(self) -> Optional[Dict[str, Any]]:
        """
        Carga el último checkpoint disponible.

        Returns:
            Datos del checkpoint o None si no existe
        """
        try:
            if self.redis_client:
                try:
                    data = await self.redis_client.get(self.redis_key)
                    if data:
                        checkpoint = json.loads(data)
                        logger.info(
                            f"Checkpoint loaded from Redis: "
                            f"{checkpoint['completed_operations']}/{checkpoint['total_operations']}"
                        )
                        return checkpoint
                except Exception as redis_error:
                    logger.debug(f"Could not load from Redis: {redis_error}")

            if self.checkpoint_file.exists():
                with open(self.checkpoint_file, "r") as f:
                    checkpoint = json.load(f)
                logger.info(
                    f"Checkpoint loaded from file: "
                    f"{checkpoint['completed_operations']}/{checkpoint['total_operations']}"
                )
                return checkpoint

            logger.debug(f"No checkpoint found for batch {self.batch_id} - Starting fresh")
            return None

        except Exception as e:
            logger.error(f"Error loading checkpoint: {e}")
            return None

    async def delete_checkpoint(self) -> bool:
        """
        Elimina el checkpoint al completar el batch.

        Returns:
            True si se eliminó exitosamente
        """
        try:
            if self.redis_client:
                await self.redis_client.delete(self.redis_key)

            if self.checkpoint_file.exists():
                self.checkpoint_file.unlink()

            logger.info(f"Checkpoint deleted for batch {self.batch_id}")
            return True

        except Exception as e:
            logger.error(f"Error deleting checkpoint: {e}")
            return False

    async def get_progress_info(self) -> Dict[str, Any]:
        """
        Obtiene información del progreso del batch.

        Returns:
            Diccionario con información del progreso
        """
        checkpoint = await self.load_checkpoint()

        if not checkpoint:
            return {"status": "not_started", "batch_id": self.batch_id, "message": "No migration in progress"}

        results = checkpoint.get("results", [])
        statuses = [result.get("status") for result in results]

        return {
            "status": checkpoint.get("status", "in_progress"),
            "batch_id": self.batch_id,
            "completed_operations": checkpoint["completed_operations"],
            "total_operations": checkpoint["total_operations"],
            "progress_percentage": checkpoint["progress_percentage"],
            "processed_orders": len(results),
            "migrated": statuses.count("migrated"),
            "skipped": statuses.count("skipped-no-billing-profile"),
            "failed": statuses.count("failed"),
            "timestamp": checkpoint["timestamp"],
        }

    async def should_resume(self) -> bool:
        """
        Determina si existe un checkpoint válido para reanudar.

        Returns:
            True si se puede reanudar desde checkpoint
        """
        checkpoint = await self.load_checkpoint()

        if not checkpoint:
            return False

        try:
            checkpoint_time = datetime.fromisoformat(checkpoint["timestamp"].replace("Z", "+00:00"))
            age_seconds = (datetime.now(timezone.utc) - checkpoint_time).total_seconds()

            if age_seconds > self.settings.CHECKPOINT_TTL_SECONDS:
                logger.warning(f"Checkpoint is {age_seconds / 3600:.1f} hours old, ignoring")
                return False

            return checkpoint["completed_operations"] < checkpoint["total_operations"]

        except (KeyError, ValueError) as e:
            logger.error(f"Error checking checkpoint validity: {e}")
            return False

    async def close(self):
        """Cierra las conexiones."""
        try:
            if self.redis_client:
                await self.redis_client.aclose()
        except Exception as e:
            logger.error(f"Error closing checkpoint manager: {e}")
