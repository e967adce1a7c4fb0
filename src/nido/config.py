"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> nido/ -> src/ -> raíz del proyecto
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Persistencia
    store_backend: str = Field(
        "memory",
        description="Backend de swipes/matches: 'memory' o 'supabase'",
    )

    # Supabase (solo requerido con store_backend=supabase)
    supabase_url: Optional[str] = Field(None, description="URL del proyecto Supabase")
    supabase_key: Optional[str] = Field(None, description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )

    # Pesos del score de compatibilidad (deben sumar 1.0)
    weight_lifestyle: float = Field(0.25, ge=0.0, le=1.0)
    weight_budget: float = Field(0.20, ge=0.0, le=1.0)
    weight_location: float = Field(0.15, ge=0.0, le=1.0)
    weight_preferences: float = Field(0.15, ge=0.0, le=1.0)
    weight_deal_breakers: float = Field(0.10, ge=0.0, le=1.0)
    weight_interests: float = Field(0.10, ge=0.0, le=1.0)
    weight_age: float = Field(0.05, ge=0.0, le=1.0)

    # Discovery
    discovery_default_limit: int = Field(
        10, ge=1, description="Tamaño del feed cuando el caller no indica limit"
    )
    discovery_min_age: int = Field(18, ge=0, description="Edad mínima por defecto del filtro")
    discovery_max_age: int = Field(99, ge=0, description="Edad máxima por defecto del filtro")

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
NEUTRAL_SCORE = 50

# Un detalle con score >= a este umbral se considera positivo
POSITIVE_DETAIL_THRESHOLD = 50

SWIPE_ACTIONS = ["like", "pass", "super_like"]

SORT_OPTIONS = ["compatibility", "age", "recent"]

SORT_ORDERS = ["asc", "desc"]

STORE_BACKENDS = ["memory", "supabase"]
