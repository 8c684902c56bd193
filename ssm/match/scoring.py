from __future__ import annotations
"""Scoring primitives for requester-to-candidate compatibility.

This module defines the four subscore functions the matching engine blends
into a single percentage. None of them performs store access; callers provide
already-loaded profile snapshots.

Design goals:
- Pure and total: every function returns a finite float and never raises
- Missing inputs degrade to the documented zero value
- Keep pure / side-effect free for easy unit testing

NOTE: skill_match() is not bounded by 1.0. A single high-priority pair taught
by a ten-year expert in the same category scores 3.3462, and the blended
percentage is only clamped at the very end. Calibrating that needs a product
decision; other consumers rely on the current magnitude.
"""

import math
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..db.models import (
    PreferenceProfile,
    SkillEntry,
    SkillLevel,
    SkillPriority,
    TimeSlot,
)

# --- Scoring Configuration -------------------------------------------------

@dataclass(frozen=True)
class ScoringConfig:
    """Blend weights and skill-pair multipliers.

    Weights must sum to 1.0; the blended score is ``sum(w_i * s_i) * 100``.

    Largest single skill pair (high priority learner, expert teacher with
    10+ years, same category); years >= 10 applies both experience steps:
        1 * 1.5 * 1.3 * 1.2 * 1.3 * 1.1 = 3.3462
    """
    # blend weights
    weight_skill: float = 0.4
    weight_style: float = 0.3
    weight_availability: float = 0.2
    weight_timezone: float = 0.1
    # learner priority
    priority_high: float = 1.5
    priority_low: float = 0.7
    # teacher level
    level_expert: float = 1.3
    level_intermediate: float = 1.1
    # teacher experience (cumulative)
    experience_5_years: float = 1.2
    experience_10_years: float = 1.3
    # same category bonus
    category_match: float = 1.1
    # style adjacency award
    adjacent_style: float = 0.7

    def validate(self) -> None:
        """Raise ValueError if the blend weights are unusable."""
        weights = (self.weight_skill, self.weight_style, self.weight_availability, self.weight_timezone)
        if any(w < 0 for w in weights):
            raise ValueError(f"Scoring weights must be non-negative, got {weights}")
        if not math.isclose(sum(weights), 1.0, abs_tol=1e-9):
            raise ValueError(f"Scoring weights must sum to 1.0, got {sum(weights):.4f}")

    def blend(self, skill: float, style: float, availability: float, timezone: float) -> float:
        """Weighted sum of raw subscores (nominally 0-1, skill may exceed 1)."""
        return (
            skill * self.weight_skill
            + style * self.weight_style
            + availability * self.weight_availability
            + timezone * self.weight_timezone
        )


DEFAULT_SCORING = ScoringConfig()

# --- Helpers ---------------------------------------------------------------

def _finite(value: float) -> float:
    """Map NaN/inf to 0.0 so downstream arithmetic stays well-defined."""
    return value if math.isfinite(value) else 0.0


def _first_by_skill(entries: Iterable[SkillEntry]) -> Dict[str, SkillEntry]:
    first: Dict[str, SkillEntry] = {}
    for entry in entries:
        first.setdefault(entry.skill_id, entry)
    return first


def _pair_multiplier(teacher: SkillEntry, learner: SkillEntry, cfg: ScoringConfig) -> float:
    score = 1.0

    if learner.priority == SkillPriority.HIGH:
        score *= cfg.priority_high
    elif learner.priority == SkillPriority.LOW:
        score *= cfg.priority_low

    if teacher.level == SkillLevel.EXPERT:
        score *= cfg.level_expert
    elif teacher.level == SkillLevel.INTERMEDIATE:
        score *= cfg.level_intermediate

    if teacher.years_of_experience >= 5:
        score *= cfg.experience_5_years
    if teacher.years_of_experience >= 10:
        score *= cfg.experience_10_years

    if teacher.category == learner.category:
        score *= cfg.category_match

    return score


def complementary_pairs(
    requester_skills: Sequence[SkillEntry],
    candidate_skills: Sequence[SkillEntry],
) -> List[Tuple[SkillEntry, SkillEntry]]:
    """Return (teacher, learner) pairs in both directions.

    Each requester entry pairs with the first candidate entry of the opposite
    status sharing its skill id, so duplicates on the requester side produce
    duplicate pairs.
    """
    candidate_learning = _first_by_skill(s for s in candidate_skills if s.is_learning)
    candidate_teaching = _first_by_skill(s for s in candidate_skills if s.is_teaching)

    pairs: List[Tuple[SkillEntry, SkillEntry]] = []
    for teach in (s for s in requester_skills if s.is_teaching):
        learner = candidate_learning.get(teach.skill_id)
        if learner is not None:
            pairs.append((teach, learner))
    for learn in (s for s in requester_skills if s.is_learning):
        teacher = candidate_teaching.get(learn.skill_id)
        if teacher is not None:
            pairs.append((teacher, learn))
    return pairs

# --- Subscores -------------------------------------------------------------

def skill_match(
    requester_skills: Sequence[SkillEntry],
    candidate_skills: Sequence[SkillEntry],
    cfg: ScoringConfig = DEFAULT_SCORING,
) -> float:
    """Mean quality multiplier over complementary skill pairs (0.0 if none).

    Rewards depth and quality of the complementary skills rather than their
    count: one strong pair beats three weak ones.
    """
    pairs = complementary_pairs(requester_skills or (), candidate_skills or ())
    if not pairs:
        return 0.0
    total = sum(_pair_multiplier(teacher, learner, cfg) for teacher, learner in pairs)
    return _finite(total / len(pairs))


def _normalize_style(style: str) -> str:
    key = style.strip().lower()
    # "Reading/Writing" from the preference form
    if key.startswith("reading"):
        return "reading"
    return key


_ADJACENT_STYLES: FrozenSet[FrozenSet[str]] = frozenset({
    frozenset({"visual", "kinesthetic"}),
    frozenset({"auditory", "reading"}),
})

_STYLE_FIELDS: Tuple[Tuple[str, bool], ...] = (
    # (attribute, adjacency applies)
    ("learning_style", True),
    ("teaching_style", True),
    ("communication_preference", False),
    ("preferred_meeting_format", False),
    ("preferred_language", False),
)


def _field_key(value: str, is_style: bool) -> str:
    # equality and adjacency use the same normalization for style fields
    return _normalize_style(value) if is_style else value.strip().lower()


def styles_adjacent(style_a: str, style_b: str) -> bool:
    """True if two distinct styles sit next to each other in the adjacency table."""
    pair = frozenset({_normalize_style(style_a), _normalize_style(style_b)})
    return pair in _ADJACENT_STYLES


def style_compatibility(
    requester_prefs: Optional[PreferenceProfile],
    candidate_prefs: Optional[PreferenceProfile],
    cfg: ScoringConfig = DEFAULT_SCORING,
) -> float:
    """Average agreement over the preference fields set on both sides.

    Absent profile on either side -> 0.0. Present-but-empty profiles have no
    comparable field and also give 0.0. Result is within [0, 1].
    """
    if requester_prefs is None or candidate_prefs is None:
        return 0.0

    awarded = 0.0
    compared = 0
    for attr, adjacency in _STYLE_FIELDS:
        a = getattr(requester_prefs, attr, None)
        b = getattr(candidate_prefs, attr, None)
        if not a or not b:
            continue
        compared += 1
        if _field_key(a, adjacency) == _field_key(b, adjacency):
            awarded += 1.0
        elif adjacency and styles_adjacent(a, b):
            awarded += cfg.adjacent_style

    if compared == 0:
        return 0.0
    return _finite(awarded / compared)


def slots_overlap(a: TimeSlot, b: TimeSlot) -> bool:
    """Same day and intersecting half-open [start, end) intervals."""
    if a.day != b.day:
        return False
    return (
        (a.start_time <= b.start_time < a.end_time)
        or (b.start_time <= a.start_time < b.end_time)
    )


def overlap_hours(a: TimeSlot, b: TimeSlot) -> float:
    return max(0.0, min(a.end_time, b.end_time) - max(a.start_time, b.start_time))


def availability_overlap(
    requester_slots: Optional[Sequence[TimeSlot]],
    candidate_slots: Optional[Sequence[TimeSlot]],
) -> float:
    """Overlap density between two weekly schedules.

    Every overlapping pair adds overlap / shorter-slot-length; the total is
    divided by the size of the larger schedule. Malformed slots (zero or
    negative length) add nothing. Either schedule empty -> 0.0.
    """
    if not requester_slots or not candidate_slots:
        return 0.0

    accumulated = 0.0
    for a in requester_slots:
        for b in candidate_slots:
            if not slots_overlap(a, b):
                continue
            shorter = min(a.duration, b.duration)
            if shorter <= 0:
                continue
            accumulated += overlap_hours(a, b) / shorter

    return _finite(accumulated / max(len(requester_slots), len(candidate_slots)))


# (max absolute offset difference in hours, score), checked in order
_TIMEZONE_STEPS: Tuple[Tuple[int, float], ...] = (
    (0, 1.0),
    (2, 0.8),
    (4, 0.6),
    (6, 0.4),
    (8, 0.2),
)


def timezone_compatibility(requester_tz: Optional[int], candidate_tz: Optional[int]) -> float:
    """Step score on the absolute UTC-offset difference; 0.0 if either is unset."""
    if requester_tz is None or candidate_tz is None:
        return 0.0
    try:
        diff = abs(float(requester_tz) - float(candidate_tz))
    except (TypeError, ValueError):
        return 0.0
    for limit, score in _TIMEZONE_STEPS:
        if diff <= limit:
            return score
    return 0.0


# --- Blended percentage ----------------------------------------------------

def blended_percentage(blend: float) -> int:
    """Scale a blended 0-1 value to an integer percentage clamped to [0, 100].

    Rounds half up like the web client. NaN/inf -> 0.
    """
    if not math.isfinite(blend):
        return 0
    pct = math.floor(blend * 100 + 0.5)
    return min(100, max(0, pct))


__all__ = [
    "ScoringConfig",
    "DEFAULT_SCORING",
    "complementary_pairs",
    "skill_match",
    "styles_adjacent",
    "style_compatibility",
    "slots_overlap",
    "overlap_hours",
    "availability_overlap",
    "timezone_compatibility",
    "blended_percentage",
]
