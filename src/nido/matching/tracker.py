"""
Tracker de swipes y matches mutuos.

Por cada par no ordenado {A, B}:
- Sin interés -> Unilateral(A->B) cuando A da like/super_like
- Unilateral(A->B) -> Mutuo cuando B da like/super_like a A
- Mutuo es terminal: los swipes siguientes quedan en el historial
  pero nunca crean un segundo match

Un pass se registra pero no tiene efecto sobre el match.
"""

import threading
from typing import Optional, Union

import structlog

from nido.database.stores import (
    InMemoryMatchStore,
    InMemorySwipeStore,
    MatchStore,
    ProfileStore,
    SwipeStore,
)
from nido.exceptions import InvalidInputError, MatchNotFoundError, ProfileNotFoundError
from nido.matching.scorer import Clock, CompatibilityScorer, utc_now
from nido.models import (
    MutualMatch,
    Profile,
    SwipeAction,
    SwipeRecord,
    SwipeResult,
    SwipeStats,
    pair_key_for,
)

logger = structlog.get_logger()

# Cantidad fija de locks; cada pair_key usa el de su hash
PAIR_LOCK_STRIPES = 64

MESSAGES = {
    "match": "¡Es un match! Ya pueden escribirse.",
    SwipeAction.LIKE: "Like enviado",
    SwipeAction.SUPER_LIKE: "Super like enviado",
    SwipeAction.PASS: "Perfil descartado",
}


class SwipeTracker:
    """
    Registra swipes y detecta matches mutuos.

    La creación del match se serializa por par con un lock elegido por
    hash del pair_key: dos swipes concurrentes sobre el mismo par nunca
    ven ambos "sin match" a la vez. Pares distintos pueden compartir lock,
    lo que solo los serializa.
    El store además hace check-and-insert atómico para el caso de varios
    procesos.
    """

    def __init__(
        self,
        scorer: CompatibilityScorer,
        profiles: ProfileStore,
        swipes: Optional[SwipeStore] = None,
        matches: Optional[MatchStore] = None,
        clock: Clock = utc_now,
    ):
        self.scorer = scorer
        self.profiles = profiles
        self.swipes = swipes if swipes is not None else InMemorySwipeStore()
        self.matches = matches if matches is not None else InMemoryMatchStore()
        self._clock = clock
        self._pair_locks = [threading.Lock() for _ in range(PAIR_LOCK_STRIPES)]

    def swipe(
        self,
        actor_id: str,
        target_id: str,
        action: Union[SwipeAction, str],
    ) -> SwipeResult:
        """
        Registra el swipe de actor_id sobre target_id.

        Args:
            actor_id: Quien swipea
            target_id: Perfil swipeado
            action: like, pass o super_like

        Returns:
            SwipeResult con is_mutual y el match del par si existe

        Raises:
            InvalidInputError: Swipe sobre sí mismo o acción desconocida
            ProfileNotFoundError: Algún id no existe en el store de perfiles
        """
        try:
            action = SwipeAction(action)
        except ValueError as e:
            raise InvalidInputError(f"Acción de swipe desconocida: {action}") from e
        if actor_id == target_id:
            raise InvalidInputError("Un perfil no puede swipearse a sí mismo")

        actor = self._require_profile(actor_id)
        target = self._require_profile(target_id)

        pair_key = pair_key_for(actor_id, target_id)
        with self._lock_for(pair_key):
            record = self.swipes.append(
                SwipeRecord(
                    actor_id=actor_id,
                    target_id=target_id,
                    action=action,
                    created_at=self._clock(),
                )
            )
            logger.debug(
                "Swipe registrado",
                actor_id=actor_id,
                target_id=target_id,
                action=action.value,
            )

            match = self.matches.get(pair_key)
            if (
                match is None
                and action.is_interest
                and self.swipes.has_interest(target_id, actor_id)
            ):
                match = self._create_match(actor, target, record)

        is_mutual = match is not None and match.is_active
        return SwipeResult(
            record=record,
            is_mutual=is_mutual,
            match=match,
            message=MESSAGES["match"] if is_mutual else MESSAGES[action],
        )

    def get_swipes(self, actor_id: str) -> list[SwipeRecord]:
        """Historial de swipes hechos por un usuario."""
        return self.swipes.list_by_actor(actor_id)

    def get_match(self, user_id: str, other_id: str) -> Optional[MutualMatch]:
        return self.matches.get(pair_key_for(user_id, other_id))

    def get_mutual_matches(
        self, user_id: str, include_inactive: bool = False
    ) -> list[MutualMatch]:
        """Matches del usuario, por defecto solo los activos."""
        matches = self.matches.list_for_user(user_id)
        if include_inactive:
            return matches
        return [m for m in matches if m.is_active]

    def unmatch(self, user_id: str, other_id: str) -> MutualMatch:
        """
        Desactiva el match del par.

        El par sigue siendo terminal: volver a dar like no crea otro match.

        Raises:
            MatchNotFoundError: Si el par no tiene match
        """
        pair_key = pair_key_for(user_id, other_id)
        with self._lock_for(pair_key):
            updated = self.matches.set_active(pair_key, False)
        if updated is None:
            raise MatchNotFoundError(user_id, other_id)

        logger.info("Match desactivado", pair_key=pair_key, by=user_id)
        return updated

    def get_stats(self, user_id: str) -> SwipeStats:
        """Resumen de actividad de swipes de un usuario."""
        stats = SwipeStats()
        for record in self.swipes.list_by_actor(user_id):
            if record.action is SwipeAction.LIKE:
                stats.total_likes += 1
            elif record.action is SwipeAction.SUPER_LIKE:
                stats.total_super_likes += 1
            else:
                stats.total_passes += 1

        active = self.get_mutual_matches(user_id)
        stats.mutual_matches = len(active)
        if active:
            stats.average_match_score = sum(m.compatibility_score for m in active) / len(active)
        return stats

    def _create_match(
        self, actor: Profile, target: Profile, record: SwipeRecord
    ) -> MutualMatch:
        breakdown = self.scorer.score(actor, target)
        candidate = MutualMatch(
            user_a_id=actor.id,
            user_b_id=target.id,
            compatibility_score=breakdown.overall,
            matched_at=record.created_at,
        )
        stored = self.matches.add_if_absent(candidate)
        if stored.id == candidate.id:
            logger.info(
                "Match mutuo creado",
                pair_key=stored.pair_key,
                compatibility_score=stored.compatibility_score,
            )
        return stored

    def _require_profile(self, profile_id: str) -> Profile:
        profile = self.profiles.get(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return profile

    def _lock_for(self, pair_key: str) -> threading.Lock:
        return self._pair_locks[hash(pair_key) % len(self._pair_locks)]
