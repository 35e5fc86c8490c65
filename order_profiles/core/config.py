"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
del servicio de migración de perfiles usando Pydantic Settings para
validación automática.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Order Profile Migration"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)
    LOG_LEVEL: str = Field(default="INFO")
    ENABLE_DOCS: bool = Field(default=True)

    # === CONFIGURACIÓN DE BASE DE DATOS ===
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./order_profiles.db")
    DB_POOL_SIZE: int = Field(default=5)
    DB_ECHO: bool = Field(default=False)
    DB_CREATE_SCHEMA: bool = Field(default=True)

    # === CONFIGURACIÓN DE REDIS (checkpoints) ===
    REDIS_URL: Optional[str] = Field(default=None)
    CHECKPOINT_DIR: str = Field(default="checkpoints")
    CHECKPOINT_TTL_SECONDS: int = Field(default=86400)

    # === CONFIGURACIÓN DE MIGRACIÓN DE PERFILES ===
    # 0 procesa todos los pedidos en una sola operación del batch
    PROFILE_MIGRATION_CHUNK_SIZE: int = Field(default=50)
    BILLING_PROFILE_TYPE_LABEL: str = Field(default="Customer Billing")
    SHIPPING_PROFILE_TYPE_LABEL: str = Field(default="Customer Shipping")

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default=None)
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)

    # === CONFIGURACIÓN DE RETRIES ===
    MAX_RETRIES: int = Field(default=3)
    RETRY_DELAY_SECONDS: float = Field(default=1.0)
    RETRY_BACKOFF_FACTOR: float = Field(default=2.0)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PROFILE_MIGRATION_CHUNK_SIZE")
    @classmethod
    def validate_chunk_size(cls, v):
        """Valida que el tamaño de lote no sea negativo."""
        if v < 0:
            raise ValueError("PROFILE_MIGRATION_CHUNK_SIZE no puede ser negativo")
        return v

    @field_validator("MAX_RETRIES")
    @classmethod
    def validate_max_retries(cls, v):
        """Valida que haya al menos un intento."""
        if v < 1:
            raise ValueError("MAX_RETRIES debe ser al menos 1")
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def redis_config(self) -> dict:
        """Genera configuración para Redis."""
        if not self.REDIS_URL:
            return {}

        return {
            "url": self.REDIS_URL,
            "decode_responses": True,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Usa LRU cache para evitar recrear la configuración
    múltiples veces durante la ejecución.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para testing).

    Returns:
        Settings: Nueva instancia de configuración
    """
    get_settings.cache_clear()
    return get_settings()


def get_environment_info() -> dict:
    """
    Obtiene información del entorno actual.

    Returns:
        dict: Información del entorno
    """
    settings = get_settings()

    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "log_level": settings.LOG_LEVEL,
        "features": {
            "redis_checkpoints": bool(settings.REDIS_URL),
            "chunk_size": settings.PROFILE_MIGRATION_CHUNK_SIZE,
            "docs": settings.ENABLE_DOCS,
        },
    }
