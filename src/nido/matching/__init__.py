"""
Motor de matching.

Scorer de compatibilidad, ranker de discovery y tracker de swipes,
combinados en MatchingService.
"""

from nido.matching.scorer import (
    CompatibilityScorer,
    ScoringConfig,
    ordinal_score,
    utc_now,
)
from nido.matching.ranker import DiscoveryRanker, passes_hard_filters, matches_query
from nido.matching.tracker import SwipeTracker
from nido.matching.service import MatchingService

__all__ = [
    "CompatibilityScorer",
    "ScoringConfig",
    "ordinal_score",
    "utc_now",
    "DiscoveryRanker",
    "passes_hard_filters",
    "matches_query",
    "SwipeTracker",
    "MatchingService",
]
