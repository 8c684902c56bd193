"""Matching package exposing scoring primitives, tier tables and errors.

The engine itself lives in :mod:`ssm.match.matching_engine` and is imported
from there directly (it depends on the typed config, which depends on this
package's scoring config).
"""

from .scoring import (
    ScoringConfig,
    skill_match,
    style_compatibility,
    availability_overlap,
    timezone_compatibility,
    blended_percentage,
)
from .tiers import MatchQuality, MatchStrength, quality_for_score, strength_for_blend
from .errors import UserNotFound, RequesterNotFound, RankingCancelled

__all__ = [
    "ScoringConfig",
    "skill_match",
    "style_compatibility",
    "availability_overlap",
    "timezone_compatibility",
    "blended_percentage",
    "MatchQuality",
    "MatchStrength",
    "quality_for_score",
    "strength_for_blend",
    "UserNotFound",
    "RequesterNotFound",
    "RankingCancelled",
]
