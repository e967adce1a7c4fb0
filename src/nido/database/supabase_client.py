"""
Cliente de Supabase para los repositorios de nido.

Solo se usa con store_backend=supabase. Las tablas que toca el motor
son `profiles`, `swipes` y `mutual_matches`; `mutual_matches` necesita
un unique sobre `pair_key`.
"""

from functools import lru_cache
from typing import Optional

import structlog
from supabase import create_client, Client

from nido.config import Settings, get_settings

logger = structlog.get_logger()

NIDO_TABLES = ("profiles", "swipes", "mutual_matches")


class SupabaseClient:
    """Acceso a las tablas del motor sobre un cliente de Supabase."""

    def __init__(self, client: Client):
        self._client = client

    @property
    def client(self) -> Client:
        return self._client

    def table(self, name: str):
        """
        Query builder de una tabla del motor.

        Raises:
            ValueError: Si la tabla no es una de NIDO_TABLES
        """
        if name not in NIDO_TABLES:
            raise ValueError(f"Tabla desconocida para nido: {name}. Usar una de {NIDO_TABLES}")
        return self._client.table(name)


def build_supabase_client(settings: Optional[Settings] = None) -> SupabaseClient:
    """
    Crea un cliente nuevo a partir de settings.

    Con SUPABASE_SERVICE_KEY se usa esa key: los repositorios escriben
    swipes y matches de cualquier usuario.

    Raises:
        ValueError: Si SUPABASE_URL o SUPABASE_KEY no están configuradas
    """
    settings = settings or get_settings()

    missing = [
        name
        for name, value in (
            ("SUPABASE_URL", settings.supabase_url),
            ("SUPABASE_KEY", settings.supabase_key),
        )
        if not value
    ]
    if missing:
        raise ValueError(
            f"Faltan {', '.join(missing)} para usar STORE_BACKEND=supabase"
        )

    key = settings.supabase_service_key or settings.supabase_key
    client = create_client(settings.supabase_url, key)
    logger.info(
        "Cliente de Supabase creado",
        url=settings.supabase_url,
        service_role=settings.supabase_service_key is not None,
    )
    return SupabaseClient(client)


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """Cliente compartido por los repositorios, construido con get_settings()."""
    return build_supabase_client()
