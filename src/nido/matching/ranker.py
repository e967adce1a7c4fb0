"""
Ranker de discovery.

Flujo:
1. Excluir al viewer (y los ids que indique el caller) del pool
2. Aplicar filtros hard (edad, presupuesto, género, vivienda, fotos, verificación)
3. Calcular la compatibilidad de cada sobreviviente
4. Descartar los que quedan bajo el score mínimo
5. Ordenar por score descendente, desempatando por id ascendente
6. Truncar a `limit`

No tiene efectos secundarios: no registra qué candidatos se mostraron
ni lee el estado de swipes/matches.
"""

from datetime import date, datetime, timezone
from typing import Iterable, Optional

import structlog

from nido.config import SORT_OPTIONS, SORT_ORDERS, Settings, get_settings
from nido.exceptions import InvalidInputError
from nido.matching.scorer import CompatibilityScorer
from nido.models import (
    AgeRange,
    DiscoveryFilters,
    DiscoveryPage,
    Profile,
    RankedCandidate,
    SearchResults,
)

logger = structlog.get_logger()


def passes_hard_filters(candidate: Profile, filters: DiscoveryFilters, today: date) -> bool:
    """
    Evalúa los filtros hard sobre un candidato.

    Un dato faltante en el candidato no lo descarta: solo se filtra
    por lo que el perfil efectivamente declara.
    """
    age = candidate.age_on(today)
    if age is not None and not filters.age_range.contains(age):
        return False

    # Presupuestos en otra moneda no son comparables: el filtro no aplica
    budget = candidate.roommate.budget_range if candidate.roommate else None
    if (
        filters.budget_range is not None
        and budget is not None
        and budget.currency.strip().casefold()
        == filters.budget_range.currency.strip().casefold()
    ):
        if not budget.overlaps(filters.budget_range.min, filters.budget_range.max):
            return False

    if filters.genders and candidate.gender is not None:
        if candidate.gender not in filters.genders:
            return False

    housing = candidate.roommate.housing_types if candidate.roommate else None
    if filters.housing_types and housing:
        if not filters.housing_types.intersection(housing):
            return False

    if filters.require_photos and candidate.photo_count <= 0:
        return False

    if filters.require_verified and not candidate.is_verified:
        return False

    return True


def matches_query(profile: Profile, query: str) -> bool:
    """Búsqueda por substring (case-insensitive) en bio, ocupación, ciudad e intereses."""
    needle = query.strip().casefold()
    if not needle:
        return True

    haystack = [profile.bio, profile.occupation]
    if profile.location is not None:
        haystack.append(profile.location.city)
    haystack.extend(profile.interests)

    return any(needle in text.casefold() for text in haystack if text)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DiscoveryRanker:
    """Filtra y rankea un pool de perfiles para un viewer."""

    def __init__(
        self,
        scorer: Optional[CompatibilityScorer] = None,
        settings: Optional[Settings] = None,
    ):
        self.scorer = scorer or CompatibilityScorer()
        self.settings = settings or get_settings()

    def default_filters(self) -> DiscoveryFilters:
        """Filtros por defecto según settings."""
        return DiscoveryFilters(
            age_range=AgeRange(
                min=self.settings.discovery_min_age,
                max=self.settings.discovery_max_age,
            )
        )

    def discover(
        self,
        viewer: Profile,
        pool: Iterable[Profile],
        filters: Optional[DiscoveryFilters] = None,
        limit: Optional[int] = None,
        exclude_ids: Optional[Iterable[str]] = None,
    ) -> DiscoveryPage:
        """
        Arma el feed de discovery de un viewer.

        Args:
            viewer: Perfil que está buscando
            pool: Candidatos a evaluar
            filters: Filtros hard (None = defaults de settings)
            limit: Tamaño máximo del feed (None = discovery_default_limit)
            exclude_ids: Ids a ignorar además del propio viewer

        Returns:
            DiscoveryPage con el feed y el total de elegibles

        Raises:
            InvalidInputError: Si limit < 1
        """
        filters = filters or self.default_filters()
        limit = self.settings.discovery_default_limit if limit is None else limit
        if limit < 1:
            raise InvalidInputError(f"limit debe ser >= 1 (recibido {limit})")

        pool = list(pool)
        eligible = self._score_eligible(viewer, pool, filters, exclude_ids)
        eligible.sort(key=lambda c: (-c.score, c.profile_id))

        total = len(eligible)
        page = DiscoveryPage(
            candidates=eligible[:limit],
            total_eligible=total,
            has_more=total > limit,
        )

        logger.info(
            "Discovery completado",
            viewer_id=viewer.id,
            pool=len(pool),
            eligible=total,
            returned=len(page.candidates),
        )
        return page

    def search(
        self,
        viewer: Profile,
        pool: Iterable[Profile],
        query: str = "",
        filters: Optional[DiscoveryFilters] = None,
        sort_by: str = "compatibility",
        sort_order: str = "desc",
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> SearchResults:
        """
        Búsqueda por texto sobre el pool con los mismos filtros que discovery.

        Los perfiles sin dato para el criterio de orden (edad o fecha de
        actualización) van al final, sea cual sea el orden.

        Raises:
            InvalidInputError: sort_by/sort_order desconocidos o página inválida
        """
        if sort_by not in SORT_OPTIONS:
            raise InvalidInputError(f"sort_by inválido: {sort_by}. Opciones: {SORT_OPTIONS}")
        if sort_order not in SORT_ORDERS:
            raise InvalidInputError(f"sort_order inválido: {sort_order}")
        page_size = self.settings.discovery_default_limit if page_size is None else page_size
        if page < 1 or page_size < 1:
            raise InvalidInputError("page y page_size deben ser >= 1")

        filters = filters or self.default_filters()
        matching = [p for p in pool if matches_query(p, query)]
        results = self._sort(
            self._score_eligible(viewer, matching, filters, None),
            sort_by,
            descending=sort_order == "desc",
        )

        start = (page - 1) * page_size
        total = len(results)

        logger.info(
            "Búsqueda completada",
            viewer_id=viewer.id,
            query=query,
            total=total,
            page=page,
        )

        return SearchResults(
            candidates=results[start:start + page_size],
            total_count=total,
            has_more=start + page_size < total,
            page=page,
            page_size=page_size,
        )

    def _score_eligible(
        self,
        viewer: Profile,
        pool: list[Profile],
        filters: DiscoveryFilters,
        exclude_ids: Optional[Iterable[str]],
    ) -> list[RankedCandidate]:
        today = self.scorer.today()
        skip = set(exclude_ids or ())
        skip.add(viewer.id)

        eligible = []
        for candidate in pool:
            if candidate.id in skip:
                continue
            # Un id repetido en el pool se evalúa una sola vez
            skip.add(candidate.id)

            if not passes_hard_filters(candidate, filters, today):
                continue

            breakdown = self.scorer.score(viewer, candidate)
            if breakdown.overall < filters.min_compatibility_score:
                continue

            eligible.append(RankedCandidate(profile=candidate, compatibility=breakdown))

        return eligible

    def _sort(
        self, candidates: list[RankedCandidate], sort_by: str, descending: bool
    ) -> list[RankedCandidate]:
        today = self.scorer.today()
        if sort_by == "compatibility":
            key = lambda c: c.score
        elif sort_by == "age":
            key = lambda c: c.profile.age_on(today)
        else:
            key = lambda c: _as_utc(c.profile.updated_at) if c.profile.updated_at else None

        # sort es estable: primero por id, después por el criterio
        by_id = sorted(candidates, key=lambda c: c.profile_id)
        known = [c for c in by_id if key(c) is not None]
        unknown = [c for c in by_id if key(c) is None]
        known.sort(key=key, reverse=descending)
        return known + unknown
