"""
Modelos de datos del sistema.

- Profile: snapshot de un candidato
- CompatibilityBreakdown: resultado del scoring de un par
- DiscoveryFilters / DiscoveryPage: request y feed de discovery
- SwipeRecord / MutualMatch: historial de swipes y matches
"""

from nido.models.profile import (
    AgeRange,
    BudgetRange,
    Cleanliness,
    DealBreakers,
    Drinking,
    Gender,
    GenderPreference,
    GuestsPolicy,
    HousingType,
    Lifestyle,
    Location,
    Pets,
    Profile,
    RoommatePreferences,
    SleepSchedule,
    Smoking,
    SocialLevel,
    WorkSchedule,
    calculate_age,
)
from nido.models.compatibility import (
    CompatibilityBreakdown,
    CompatibilityCategory,
    CompatibilityDetail,
    ScoringWeights,
)
from nido.models.discovery import (
    DiscoveryFilters,
    DiscoveryPage,
    RankedCandidate,
    SearchResults,
)
from nido.models.swipe import (
    MutualMatch,
    SwipeAction,
    SwipeRecord,
    SwipeResult,
    SwipeStats,
    pair_key_for,
)

__all__ = [
    # Perfil
    "Profile",
    "Location",
    "Lifestyle",
    "RoommatePreferences",
    "AgeRange",
    "BudgetRange",
    "DealBreakers",
    "Gender",
    "GenderPreference",
    "SleepSchedule",
    "Cleanliness",
    "SocialLevel",
    "GuestsPolicy",
    "Smoking",
    "Drinking",
    "Pets",
    "WorkSchedule",
    "HousingType",
    "calculate_age",
    # Compatibilidad
    "CompatibilityBreakdown",
    "CompatibilityCategory",
    "CompatibilityDetail",
    "ScoringWeights",
    # Discovery
    "DiscoveryFilters",
    "DiscoveryPage",
    "RankedCandidate",
    "SearchResults",
    # Swipes
    "SwipeAction",
    "SwipeRecord",
    "SwipeResult",
    "SwipeStats",
    "MutualMatch",
    "pair_key_for",
]
