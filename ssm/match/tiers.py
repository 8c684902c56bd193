"""Classification tables for ranked matches.

Two independent ladders:
- quality: derived from the rounded 0-100 percentage shown to users
- strength: derived from the raw weighted subscores (before scaling/rounding)

Both tables are module-level tuples, checked top-down; the first threshold
the value reaches wins.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Tuple


class MatchQuality(str, Enum):
    EXCELLENT = "Excellent"
    VERY_GOOD = "Very Good"
    GOOD = "Good"
    FAIR = "Fair"
    MODERATE = "Moderate"
    LOW = "Low"


class MatchStrength(str, Enum):
    STRONG = "Strong"
    MODERATE = "Moderate"
    FAIR = "Fair"
    WEAK = "Weak"


QUALITY_TIERS: Tuple[Tuple[int, MatchQuality], ...] = (
    (90, MatchQuality.EXCELLENT),
    (80, MatchQuality.VERY_GOOD),
    (70, MatchQuality.GOOD),
    (60, MatchQuality.FAIR),
    (50, MatchQuality.MODERATE),
)

STRENGTH_TIERS: Tuple[Tuple[float, MatchStrength], ...] = (
    (0.8, MatchStrength.STRONG),
    (0.6, MatchStrength.MODERATE),
    (0.4, MatchStrength.FAIR),
)


def quality_for_score(score: int) -> MatchQuality:
    for threshold, label in QUALITY_TIERS:
        if score >= threshold:
            return label
    return MatchQuality.LOW


def strength_for_blend(weighted: float) -> MatchStrength:
    """Strength tier for the weighted raw subscores (NaN counts as Weak)."""
    if not math.isfinite(weighted):
        return MatchStrength.WEAK
    for threshold, label in STRENGTH_TIERS:
        if weighted >= threshold:
            return label
    return MatchStrength.WEAK


__all__ = [
    "MatchQuality",
    "MatchStrength",
    "QUALITY_TIERS",
    "STRENGTH_TIERS",
    "quality_for_score",
    "strength_for_blend",
]
