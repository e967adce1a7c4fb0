"""
Fachada del motor de matching.

Expone las tres operaciones que consume la aplicación (score, discover
y swipe) y arma scorer, ranker y tracker con la configuración y los
stores que correspondan al backend configurado.
"""

from typing import Iterable, Optional, Union

import structlog

from nido.config import STORE_BACKENDS, Settings, get_settings
from nido.database import (
    InMemoryProfileStore,
    MatchRepository,
    MatchStore,
    ProfileRepository,
    ProfileStore,
    SwipeRepository,
    SwipeStore,
    get_supabase_client,
)
from nido.exceptions import ProfileNotFoundError
from nido.matching.ranker import DiscoveryRanker
from nido.matching.scorer import Clock, CompatibilityScorer, ScoringConfig, utc_now
from nido.matching.tracker import SwipeTracker
from nido.models import (
    CompatibilityBreakdown,
    DiscoveryFilters,
    DiscoveryPage,
    Profile,
    ScoringWeights,
    SwipeAction,
    SwipeResult,
)

logger = structlog.get_logger()


class MatchingService:
    """Punto de entrada del motor para la capa de aplicación."""

    def __init__(
        self,
        profiles: ProfileStore,
        swipes: Optional[SwipeStore] = None,
        matches: Optional[MatchStore] = None,
        config: Optional[ScoringConfig] = None,
        clock: Clock = utc_now,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.config = config or ScoringConfig.from_settings(self.settings)
        self.profiles = profiles
        self.scorer = CompatibilityScorer(self.config, clock)
        self.ranker = DiscoveryRanker(self.scorer, self.settings)
        self.tracker = SwipeTracker(self.scorer, profiles, swipes, matches, clock)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        profiles: Optional[ProfileStore] = None,
    ) -> "MatchingService":
        """
        Construye el servicio según STORE_BACKEND.

        Raises:
            ValueError: Backend desconocido o credenciales de Supabase faltantes
        """
        settings = settings or get_settings()
        backend = settings.store_backend.lower()

        if backend == "supabase":
            client = get_supabase_client()
            service = cls(
                profiles=profiles or ProfileRepository(client),
                swipes=SwipeRepository(client),
                matches=MatchRepository(client),
                settings=settings,
            )
        elif backend == "memory":
            service = cls(profiles=profiles or InMemoryProfileStore(), settings=settings)
        else:
            raise ValueError(
                f"store_backend no soportado: {settings.store_backend}. "
                f"Usar uno de {STORE_BACKENDS}"
            )

        logger.info("Servicio de matching inicializado", backend=backend)
        return service

    # -- Scoring --------------------------------------------------------

    def score(self, viewer: Profile, candidate: Profile) -> CompatibilityBreakdown:
        return self.scorer.score(viewer, candidate)

    def get_weights(self) -> ScoringWeights:
        return self.config.get_weights()

    def set_weights(self, **updates: float) -> ScoringWeights:
        return self.config.set_weights(**updates)

    # -- Discovery ------------------------------------------------------

    def discover(
        self,
        viewer: Profile,
        pool: Iterable[Profile],
        filters: Optional[DiscoveryFilters] = None,
        limit: Optional[int] = None,
        exclude_ids: Optional[Iterable[str]] = None,
    ) -> DiscoveryPage:
        return self.ranker.discover(viewer, pool, filters, limit, exclude_ids)

    def discover_for_user(
        self,
        viewer_id: str,
        filters: Optional[DiscoveryFilters] = None,
        limit: Optional[int] = None,
        exclude_swiped: bool = True,
    ) -> DiscoveryPage:
        """
        Discovery resolviendo viewer y pool desde el store de perfiles.

        Con exclude_swiped, los perfiles que el viewer ya swipeó no vuelven
        a aparecer en el feed.

        Raises:
            ProfileNotFoundError: Si el viewer no existe
        """
        viewer = self.profiles.get(viewer_id)
        if viewer is None:
            raise ProfileNotFoundError(viewer_id)

        exclude_ids = None
        if exclude_swiped:
            exclude_ids = {r.target_id for r in self.tracker.get_swipes(viewer_id)}

        return self.ranker.discover(
            viewer, self.profiles.list_all(), filters, limit, exclude_ids
        )

    # -- Swipes ---------------------------------------------------------

    def swipe(
        self, actor_id: str, target_id: str, action: Union[SwipeAction, str]
    ) -> SwipeResult:
        return self.tracker.swipe(actor_id, target_id, action)
