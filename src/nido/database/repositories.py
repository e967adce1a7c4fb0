"""
Repositorios sobre Supabase.

Implementan ProfileStore, SwipeStore y MatchStore contra las tablas
`profiles`, `swipes` y `mutual_matches`. La tabla de matches tiene un
unique sobre `pair_key`, que es quien arbitra la creación del match
entre procesos distintos.
"""

from typing import Optional

import structlog

from nido.database.supabase_client import get_supabase_client, SupabaseClient
from nido.models import MutualMatch, Profile, SwipeAction, SwipeRecord

logger = structlog.get_logger()

INTEREST_ACTIONS = [SwipeAction.LIKE.value, SwipeAction.SUPER_LIKE.value]


class BaseRepository:
    """Clase base para repositorios."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client


class ProfileRepository(BaseRepository):
    """Repositorio de perfiles."""

    TABLE = "profiles"

    def get(self, profile_id: str) -> Optional[Profile]:
        """Obtiene un perfil por su id."""
        response = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("id", profile_id)
            .limit(1)
            .execute()
        )
        return Profile.model_validate(response.data[0]) if response.data else None

    def list_all(self) -> list[Profile]:
        """Obtiene todos los perfiles (pool de discovery)."""
        response = self.client.table(self.TABLE).select("*").execute()
        return [Profile.model_validate(row) for row in response.data]

    def upsert(self, profile: Profile) -> dict:
        """Inserta o actualiza un perfil por id."""
        response = (
            self.client.table(self.TABLE)
            .upsert(profile.model_dump(mode="json"), on_conflict="id")
            .execute()
        )
        logger.info("Perfil upserted", profile_id=profile.id)
        return response.data[0] if response.data else {}


class SwipeRepository(BaseRepository):
    """Repositorio append-only de swipes."""

    TABLE = "swipes"

    def append(self, record: SwipeRecord) -> SwipeRecord:
        """Registra un swipe."""
        try:
            self.client.table(self.TABLE).insert(record.to_db_dict()).execute()
        except Exception as e:
            logger.error(
                "Error registrando swipe",
                actor_id=record.actor_id,
                target_id=record.target_id,
                error=str(e),
            )
            raise
        logger.info(
            "Swipe registrado",
            actor_id=record.actor_id,
            target_id=record.target_id,
            action=record.action.value,
        )
        return record

    def has_interest(self, actor_id: str, target_id: str) -> bool:
        """Verifica si actor_id dio like o super_like a target_id alguna vez."""
        response = (
            self.client.table(self.TABLE)
            .select("id")
            .eq("actor_id", actor_id)
            .eq("target_id", target_id)
            .in_("action", INTEREST_ACTIONS)
            .limit(1)
            .execute()
        )
        return len(response.data) > 0

    def list_by_actor(self, actor_id: str) -> list[SwipeRecord]:
        """Swipes hechos por un usuario, en orden cronológico."""
        response = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("actor_id", actor_id)
            .order("created_at")
            .execute()
        )
        return [SwipeRecord.model_validate(row) for row in response.data]

    def list_by_target(self, target_id: str) -> list[SwipeRecord]:
        """Swipes recibidos por un usuario, en orden cronológico."""
        response = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("target_id", target_id)
            .order("created_at")
            .execute()
        )
        return [SwipeRecord.model_validate(row) for row in response.data]


class MatchRepository(BaseRepository):
    """Repositorio de matches mutuos."""

    TABLE = "mutual_matches"

    def get(self, pair_key: str) -> Optional[MutualMatch]:
        """Obtiene el match de un par, si existe."""
        response = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("pair_key", pair_key)
            .limit(1)
            .execute()
        )
        return MutualMatch.model_validate(response.data[0]) if response.data else None

    def add_if_absent(self, match: MutualMatch) -> MutualMatch:
        """
        Inserta el match salvo que el par ya tenga uno.

        Returns:
            El match almacenado (el preexistente si otro writer ganó)
        """
        try:
            (
                self.client.table(self.TABLE)
                .upsert(match.to_db_dict(), on_conflict="pair_key", ignore_duplicates=True)
                .execute()
            )
        except Exception as e:
            logger.error("Error creando match", pair_key=match.pair_key, error=str(e))
            raise

        stored = self.get(match.pair_key)
        if stored is None:
            raise RuntimeError(f"Match no encontrado tras insertar: {match.pair_key}")
        if stored.id == match.id:
            logger.info("Match creado", pair_key=match.pair_key)
        return stored

    def list_for_user(self, user_id: str) -> list[MutualMatch]:
        """Matches en los que participa un usuario."""
        rows = []
        for column in ("user_a_id", "user_b_id"):
            response = (
                self.client.table(self.TABLE)
                .select("*")
                .eq(column, user_id)
                .execute()
            )
            rows.extend(response.data)
        matches = [MutualMatch.model_validate(row) for row in rows]
        return sorted(matches, key=lambda m: m.matched_at)

    def set_active(self, pair_key: str, is_active: bool) -> Optional[MutualMatch]:
        """Activa o desactiva un match."""
        response = (
            self.client.table(self.TABLE)
            .update({"is_active": is_active})
            .eq("pair_key", pair_key)
            .execute()
        )
        logger.info("Match actualizado", pair_key=pair_key, is_active=is_active)
        return MutualMatch.model_validate(response.data[0]) if response.data else None
