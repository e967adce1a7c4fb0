"""
Scorer de compatibilidad entre perfiles.

Calcula un breakdown 0-100 en siete categorías y las combina con
un vector de pesos configurable:

- Lifestyle: horarios de sueño, limpieza, nivel social, home office
- Budget: superposición de rangos de presupuesto
- Location: misma ciudad / mismo estado
- Preferences: edad, género y tipo de vivienda deseados por el viewer
- Deal breakers: cualquier violación anula la categoría
- Interests: intereses en común
- Age: diferencia de edad por bandas

El scoring es puro y determinístico para pesos y fecha fijos. Los datos
faltantes nunca fallan: la categoría queda en un score neutral.
"""

import math
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Optional, Sequence

import structlog
from pydantic import ValidationError

from nido.config import NEUTRAL_SCORE, POSITIVE_DETAIL_THRESHOLD, Settings, get_settings
from nido.exceptions import InvalidInputError
from nido.models import (
    CompatibilityBreakdown,
    CompatibilityCategory,
    CompatibilityDetail,
    GenderPreference,
    GuestsPolicy,
    Pets,
    Profile,
    ScoringWeights,
    SleepSchedule,
    Smoking,
)

logger = structlog.get_logger()

Clock = Callable[[], datetime]

# Bandas de diferencia de edad: (diferencia máxima en años, score)
AGE_GAP_BANDS = [(2, 100), (5, 85), (10, 70), (15, 50)]
AGE_GAP_FLOOR = 25

SMOKER_VALUES = {Smoking.SMOKER, Smoking.SOCIAL_SMOKER}
PARTY_GUEST_POLICIES = {GuestsPolicy.FREQUENT}
OVERNIGHT_GUEST_POLICIES = {GuestsPolicy.FREQUENT, GuestsPolicy.OCCASIONAL}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def round_score(value: float) -> int:
    """Redondeo half-up a entero (round() de Python redondea al par)."""
    return int(math.floor(value + 0.5))


def ordinal_score(value, other, ordering: Optional[Sequence] = None) -> int:
    """
    Compatibilidad entre dos valores de una escala ordinal.

    score = round(100 - 75 * d / maxD), con d la distancia entre índices
    y maxD el largo de la escala menos uno. Valores fuera de la escala
    devuelven 50. Sin `ordering` explícito se usa el orden de definición
    del Enum de `value`.
    """
    if ordering is None:
        if not isinstance(value, Enum):
            return NEUTRAL_SCORE
        ordering = list(type(value))
    ordering = list(ordering)

    if value not in ordering or other not in ordering:
        return NEUTRAL_SCORE
    if value == other:
        return 100

    distance = abs(ordering.index(value) - ordering.index(other))
    max_distance = len(ordering) - 1
    return round_score(100 - 75 * distance / max_distance)


class ScoringConfig:
    """
    Pesos de scoring ajustables en runtime.

    Se inyecta en el scorer al construirlo. Cada scoring lee un único
    snapshot inmutable de los pesos, así que un set_weights concurrente
    nunca se ve a medias; el cambio aplica desde la llamada siguiente.
    """

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self._weights = weights or ScoringWeights()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ScoringConfig":
        settings = settings or get_settings()
        try:
            weights = ScoringWeights(
                lifestyle=settings.weight_lifestyle,
                budget=settings.weight_budget,
                location=settings.weight_location,
                preferences=settings.weight_preferences,
                deal_breakers=settings.weight_deal_breakers,
                interests=settings.weight_interests,
                age=settings.weight_age,
            )
        except ValidationError as e:
            raise InvalidInputError(f"Pesos de scoring inválidos en settings: {e}") from e
        return cls(weights)

    def get_weights(self) -> ScoringWeights:
        return self._weights

    def set_weights(self, **updates: float) -> ScoringWeights:
        """
        Actualiza uno o más pesos.

        El vector resultante debe sumar 1.0; si no, no se aplica nada.

        Raises:
            InvalidInputError: clave desconocida o vector inválido
        """
        unknown = set(updates) - set(ScoringWeights.model_fields)
        if unknown:
            raise InvalidInputError(f"Categorías de peso desconocidas: {sorted(unknown)}")

        with self._lock:
            merged = {**self._weights.model_dump(), **updates}
            try:
                weights = ScoringWeights(**merged)
            except ValidationError as e:
                raise InvalidInputError(f"Pesos de scoring inválidos: {e}") from e
            self._weights = weights

        logger.info("Pesos de scoring actualizados", **weights.model_dump())
        return weights


@dataclass
class _CategoryScore:
    score: int
    details: list[CompatibilityDetail] = field(default_factory=list)


def _detail(
    category: CompatibilityCategory, factor: str, score: int, reason: str
) -> CompatibilityDetail:
    return CompatibilityDetail(
        category=category,
        factor=factor,
        score=score,
        reason=reason,
        is_positive=score >= POSITIVE_DETAIL_THRESHOLD,
    )


def _same_text(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.strip().casefold() == b.strip().casefold()


class CompatibilityScorer:
    """
    Scorer de compatibilidad viewer -> candidato.

    No es simétrico: las preferencias y deal breakers son las del viewer
    evaluadas contra los atributos del candidato.
    """

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        clock: Clock = utc_now,
    ):
        self.config = config or ScoringConfig()
        self._clock = clock

    def today(self) -> date:
        """Fecha de referencia para calcular edades."""
        return self._clock().date()

    def score(self, viewer: Profile, candidate: Profile) -> CompatibilityBreakdown:
        """
        Calcula la compatibilidad de `candidate` para `viewer`.

        Returns:
            CompatibilityBreakdown con overall y score por categoría
        """
        weights = self.config.get_weights()
        today = self.today()

        categories = {
            CompatibilityCategory.LIFESTYLE: self._lifestyle(viewer, candidate),
            CompatibilityCategory.BUDGET: self._budget(viewer, candidate),
            CompatibilityCategory.LOCATION: self._location(viewer, candidate),
            CompatibilityCategory.PREFERENCES: self._preferences(viewer, candidate, today),
            CompatibilityCategory.DEAL_BREAKERS: self._deal_breakers(viewer, candidate),
            CompatibilityCategory.INTERESTS: self._interests(viewer, candidate),
            CompatibilityCategory.AGE: self._age(viewer, candidate, today),
        }

        weighted = sum(
            result.score * weights.for_category(category)
            for category, result in categories.items()
        )
        overall = max(0, min(100, round_score(weighted)))

        logger.debug(
            "Compatibilidad calculada",
            viewer_id=viewer.id,
            candidate_id=candidate.id,
            overall=overall,
        )

        return CompatibilityBreakdown(
            overall=overall,
            details=[d for result in categories.values() for d in result.details],
            **{category.value: result.score for category, result in categories.items()},
        )

    # -- Categorías -----------------------------------------------------

    def _lifestyle(self, viewer: Profile, candidate: Profile) -> _CategoryScore:
        category = CompatibilityCategory.LIFESTYLE
        mine, theirs = viewer.lifestyle, candidate.lifestyle
        if mine is None or theirs is None:
            return _CategoryScore(NEUTRAL_SCORE)

        details = []

        if mine.sleep_schedule and theirs.sleep_schedule:
            if mine.sleep_schedule == theirs.sleep_schedule:
                score, reason = 100, "Mismo horario de sueño"
            elif SleepSchedule.FLEXIBLE in (mine.sleep_schedule, theirs.sleep_schedule):
                score, reason = 75, "Horario de sueño flexible"
            else:
                score, reason = 25, "Horarios de sueño distintos"
            details.append(_detail(category, "sleep_schedule", score, reason))

        if mine.cleanliness and theirs.cleanliness:
            score = ordinal_score(mine.cleanliness, theirs.cleanliness)
            reason = (
                "Estándares de limpieza similares"
                if score >= 75
                else "Estándares de limpieza distintos"
            )
            details.append(_detail(category, "cleanliness", score, reason))

        if mine.social_level and theirs.social_level:
            score = ordinal_score(mine.social_level, theirs.social_level)
            reason = (
                "Niveles sociales compatibles"
                if score >= 75
                else "Necesidades sociales distintas"
            )
            details.append(_detail(category, "social_level", score, reason))

        if mine.work_from_home is not None and theirs.work_from_home is not None:
            if mine.work_from_home == theirs.work_from_home:
                score, reason = 100, "Misma modalidad de trabajo"
            else:
                score, reason = 60, "Modalidades de trabajo distintas"
            details.append(_detail(category, "work_from_home", score, reason))

        if not details:
            return _CategoryScore(NEUTRAL_SCORE)
        mean = sum(d.score for d in details) / len(details)
        return _CategoryScore(round_score(mean), details)

    def _budget(self, viewer: Profile, candidate: Profile) -> _CategoryScore:
        category = CompatibilityCategory.BUDGET
        mine = viewer.roommate.budget_range if viewer.roommate else None
        theirs = candidate.roommate.budget_range if candidate.roommate else None
        if mine is None or theirs is None:
            return _CategoryScore(NEUTRAL_SCORE)

        if not _same_text(mine.currency, theirs.currency):
            detail = _detail(
                category,
                "budget_range",
                NEUTRAL_SCORE,
                f"Presupuestos en monedas distintas ({mine.currency} / {theirs.currency})",
            )
            return _CategoryScore(NEUTRAL_SCORE, [detail])

        overlap_min = max(mine.min, theirs.min)
        overlap_max = min(mine.max, theirs.max)

        if overlap_min <= overlap_max:
            avg_width = ((mine.max - mine.min) + (theirs.max - theirs.min)) / 2
            if avg_width == 0:
                score = 100
            else:
                score = round_score(100 * (overlap_max - overlap_min) / avg_width)
            reason = f"Los presupuestos se superponen ({overlap_min:g}-{overlap_max:g})"
        else:
            gap = min(abs(mine.max - theirs.min), abs(theirs.max - mine.min))
            avg_midpoint = (mine.min + mine.max + theirs.min + theirs.max) / 4
            if avg_midpoint <= 0:
                score = 0
            else:
                score = max(0, round_score(100 - 100 * gap / avg_midpoint))
            reason = "Los presupuestos no se superponen"

        score = min(100, score)
        return _CategoryScore(score, [_detail(category, "budget_range", score, reason)])

    def _location(self, viewer: Profile, candidate: Profile) -> _CategoryScore:
        mine, theirs = viewer.location, candidate.location
        if mine is None or theirs is None or not mine.city or not theirs.city:
            return _CategoryScore(NEUTRAL_SCORE)

        if _same_text(mine.city, theirs.city):
            score, reason = 100, "Misma ciudad"
        elif _same_text(mine.state, theirs.state):
            score, reason = 75, "Mismo estado"
        else:
            score, reason = 25, "Ubicaciones distintas"

        detail = _detail(CompatibilityCategory.LOCATION, "location", score, reason)
        return _CategoryScore(score, [detail])

    def _preferences(self, viewer: Profile, candidate: Profile, today: date) -> _CategoryScore:
        category = CompatibilityCategory.PREFERENCES
        wanted = viewer.roommate
        if wanted is None:
            return _CategoryScore(NEUTRAL_SCORE)

        details = []

        candidate_age = candidate.age_on(today)
        if wanted.age_range is not None and candidate_age is not None:
            if wanted.age_range.contains(candidate_age):
                score, reason = 100, "La edad está dentro de tu rango"
            else:
                score, reason = 25, "La edad está fuera de tu rango"
            details.append(_detail(category, "age_preference", score, reason))

        if wanted.gender_preference is not None and candidate.gender is not None:
            gender_ok = (
                wanted.gender_preference == GenderPreference.NO_PREFERENCE
                or wanted.gender_preference.value == candidate.gender.value
            )
            if gender_ok:
                score, reason = 100, "El género coincide con tu preferencia"
            else:
                score, reason = 0, "El género no coincide con tu preferencia"
            details.append(_detail(category, "gender_preference", score, reason))

        their_housing = candidate.roommate.housing_types if candidate.roommate else None
        if wanted.housing_types and their_housing:
            mine_set, theirs_set = set(wanted.housing_types), set(their_housing)
            common = mine_set & theirs_set
            if common:
                score = round_score(100 * len(common) / max(len(mine_set), len(theirs_set)))
                names = ", ".join(sorted(h.value for h in common))
                reason = f"Tipos de vivienda compatibles ({names})"
            else:
                score, reason = 25, "Sin tipos de vivienda en común"
            details.append(_detail(category, "housing_type", score, reason))

        if not details:
            return _CategoryScore(NEUTRAL_SCORE)
        mean = sum(d.score for d in details) / len(details)
        return _CategoryScore(round_score(mean), details)

    def _deal_breakers(self, viewer: Profile, candidate: Profile) -> _CategoryScore:
        category = CompatibilityCategory.DEAL_BREAKERS
        breakers = viewer.roommate.deal_breakers if viewer.roommate else None
        if breakers is None or not breakers.any_set():
            return _CategoryScore(100)

        # Sin lifestyle declarado no hay violaciones posibles
        lifestyle = candidate.lifestyle
        if lifestyle is None:
            return _CategoryScore(100)

        # (flag activo, valor del candidato, valores que lo violan, motivo)
        checks = [
            (breakers.smoking, lifestyle.smoking, SMOKER_VALUES, "smoking", "Fuma"),
            (breakers.pets, lifestyle.pets, {Pets.HAVE_PETS}, "pets", "Tiene mascotas"),
            (
                breakers.parties,
                lifestyle.guests_policy,
                PARTY_GUEST_POLICIES,
                "parties",
                "Recibe gente con frecuencia",
            ),
            (
                breakers.overnight_guests,
                lifestyle.guests_policy,
                OVERNIGHT_GUEST_POLICIES,
                "overnight_guests",
                "Recibe invitados que se quedan a dormir",
            ),
        ]

        details = []
        for enabled, value, violating, factor, label in checks:
            if enabled and value in violating:
                details.append(_detail(category, factor, 0, f"Deal breaker: {label}"))

        if details:
            return _CategoryScore(0, details)
        ok = _detail(category, "deal_breakers", 100, "Ningún deal breaker violado")
        return _CategoryScore(100, [ok])

    def _interests(self, viewer: Profile, candidate: Profile) -> _CategoryScore:
        mine, theirs = set(viewer.interests), set(candidate.interests)
        if not mine or not theirs:
            return _CategoryScore(NEUTRAL_SCORE)

        common = sorted(mine & theirs)
        score = round_score(100 * len(common) / min(len(mine), len(theirs)))
        if common:
            shown = ", ".join(common[:3])
            suffix = "..." if len(common) > 3 else ""
            reason = f"{len(common)} intereses en común: {shown}{suffix}"
        else:
            reason = "Sin intereses en común"

        detail = _detail(CompatibilityCategory.INTERESTS, "interests", score, reason)
        return _CategoryScore(score, [detail])

    def _age(self, viewer: Profile, candidate: Profile, today: date) -> _CategoryScore:
        viewer_age = viewer.age_on(today)
        candidate_age = candidate.age_on(today)
        if viewer_age is None or candidate_age is None:
            return _CategoryScore(NEUTRAL_SCORE)

        gap = abs(viewer_age - candidate_age)
        score = next(
            (band_score for max_gap, band_score in AGE_GAP_BANDS if gap <= max_gap),
            AGE_GAP_FLOOR,
        )
        detail = _detail(
            CompatibilityCategory.AGE, "age_gap", score, f"{gap} años de diferencia"
        )
        return _CategoryScore(score, [detail])
