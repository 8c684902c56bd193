"""Domain model types for matching inputs.

These frozen dataclasses are read-only snapshots of the records owned by the
surrounding storage layer. The engine never mutates them; every ranking call
works from whatever snapshot the stores hand out.

``from_dict`` constructors accept the loosely typed records used by the API
layer and the JSON snapshot format (camelCase keys). Unknown enum values fall
back to documented defaults instead of raising so that one bad record cannot
abort a ranking run.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


# --- Enums -----------------------------------------------------------------

class SkillStatus(str, Enum):
    TEACHING = "teaching"
    LEARNING = "learning"


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class SkillPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EngagementStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class Weekday(str, Enum):
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"


def _parse_enum(enum_cls, value: Any, default=None):
    """Case-insensitive enum lookup returning ``default`` for unknown values."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return default
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        return default


def _parse_weekday(value: Any) -> Optional[Weekday]:
    # Accepts "Mon", "monday", "MONDAY"...
    if isinstance(value, Weekday):
        return value
    if not isinstance(value, str) or len(value.strip()) < 3:
        return None
    return _parse_enum(Weekday, value.strip()[:3])


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            num = float(value)
        elif isinstance(value, str):
            txt = value.strip()
            # "14:30" style clock times
            if ":" in txt:
                hours, _, minutes = txt.partition(":")
                num = int(hours) + int(minutes) / 60.0
            else:
                num = float(txt)
        else:
            return None
    except (ValueError, OverflowError):
        # OverflowError: JSON integers beyond float range
        return None
    return num if math.isfinite(num) else None


def _as_bool(value: Any, default: bool = True) -> bool:
    """Booleans from JSON or form strings ("false", "no", "0")."""
    if value is None:
        return default
    if isinstance(value, str):
        lower = value.strip().lower()
        if lower in {"true", "yes", "1"}:
            return True
        if lower in {"false", "no", "0", ""}:
            return False
        return default
    return bool(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    txt = str(value).strip()
    return txt or None


# --- Skills & users --------------------------------------------------------

@dataclass(frozen=True)
class SkillEntry:
    """A skill a user offers to teach or wants to learn."""
    skill_id: str
    status: SkillStatus
    level: SkillLevel = SkillLevel.BEGINNER
    years_of_experience: int = 0
    priority: SkillPriority = SkillPriority.MEDIUM
    category: str = "Other"

    @property
    def is_teaching(self) -> bool:
        return self.status == SkillStatus.TEACHING

    @property
    def is_learning(self) -> bool:
        return self.status == SkillStatus.LEARNING

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional[SkillEntry]:
        """Parse a skill record; returns None when status or skill id is unusable."""
        skill_id = _optional_str(data.get("skillId", data.get("skill")))
        status = _parse_enum(SkillStatus, data.get("status"))
        if skill_id is None or status is None:
            logger.debug(f"Dropping skill entry without usable id/status: {data!r}")
            return None

        years = _as_number(data.get("yearsOfExperience"))
        return cls(
            skill_id=skill_id,
            status=status,
            level=_parse_enum(SkillLevel, data.get("level"), SkillLevel.BEGINNER),
            years_of_experience=max(0, int(years)) if years is not None else 0,
            priority=_parse_enum(SkillPriority, data.get("priority"), SkillPriority.MEDIUM),
            category=_optional_str(data.get("category")) or "Other",
        )


@dataclass(frozen=True)
class UserProfile:
    """Represents a marketplace user as seen by the matching engine."""
    id: str
    skills: Tuple[SkillEntry, ...] = ()
    is_active: bool = True
    rating: float = 0.0
    name: Optional[str] = None

    def teaching_skills(self) -> Tuple[SkillEntry, ...]:
        return tuple(s for s in self.skills if s.is_teaching)

    def learning_skills(self) -> Tuple[SkillEntry, ...]:
        return tuple(s for s in self.skills if s.is_learning)

    @property
    def teaches_anything(self) -> bool:
        return any(s.is_teaching for s in self.skills)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UserProfile:
        """Convert a user record (``id`` or ``_id``) to UserProfile.

        Raises:
            ValueError: If the record has no id
        """
        user_id = _optional_str(data.get("id", data.get("_id")))
        if user_id is None:
            raise ValueError(f"User record without id: {data!r}")

        skills = []
        for raw in data.get("skills") or ():
            if isinstance(raw, dict):
                entry = SkillEntry.from_dict(raw)
                if entry is not None:
                    skills.append(entry)

        rating = _as_number(data.get("rating")) or 0.0
        return cls(
            id=user_id,
            skills=tuple(skills),
            is_active=_as_bool(data.get("isActive"), default=True),
            rating=min(5.0, max(0.0, rating)),
            name=_optional_str(data.get("name")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "rating": self.rating,
            "isActive": self.is_active,
            "skills": [
                {
                    "skillId": s.skill_id,
                    "status": s.status.value,
                    "level": s.level.value,
                    "yearsOfExperience": s.years_of_experience,
                    "priority": s.priority.value,
                    "category": s.category,
                }
                for s in self.skills
            ],
        }


# --- Preferences -----------------------------------------------------------

@dataclass(frozen=True)
class TimeSlot:
    """Weekly recurring availability window, hours as numbers (e.g. 18.5)."""
    day: Weekday
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        """Length in hours; malformed slots (end <= start) have zero length."""
        return max(0.0, self.end_time - self.start_time)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional[TimeSlot]:
        day = _parse_weekday(data.get("day"))
        start = _as_number(data.get("startTime", data.get("start")))
        end = _as_number(data.get("endTime", data.get("end")))
        if day is None or start is None or end is None:
            logger.debug(f"Dropping unusable time slot: {data!r}")
            return None
        return cls(day=day, start_time=start, end_time=end)


def _parse_availability(raw: Iterable[Any]) -> Tuple[TimeSlot, ...]:
    slots = []
    for item in raw or ():
        if not isinstance(item, dict):
            continue
        # Grouped form: {"day": "Monday", "timeSlots": [{"start": "09:00", "end": "11:00"}]}
        if "timeSlots" in item:
            for sub in item.get("timeSlots") or ():
                if isinstance(sub, dict):
                    slot = TimeSlot.from_dict({"day": item.get("day"), **sub})
                    if slot is not None:
                        slots.append(slot)
            continue
        slot = TimeSlot.from_dict(item)
        if slot is not None:
            slots.append(slot)
    return tuple(slots)


@dataclass(frozen=True)
class PreferenceProfile:
    """Pedagogical and scheduling preferences of one user.

    A missing profile is represented by ``None`` at call sites; use
    :meth:`empty` for a profile that exists but carries no values.
    """
    user_id: str
    learning_style: Optional[str] = None
    teaching_style: Optional[str] = None
    communication_preference: Optional[str] = None
    preferred_meeting_format: Optional[str] = None
    preferred_language: Optional[str] = None
    availability: Tuple[TimeSlot, ...] = field(default_factory=tuple)
    timezone: Optional[int] = None

    @classmethod
    def empty(cls, user_id: str) -> PreferenceProfile:
        return cls(user_id=user_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PreferenceProfile:
        user_id = _optional_str(data.get("userId", data.get("user")))
        if user_id is None:
            raise ValueError(f"Preference record without user id: {data!r}")

        tz = _as_number(data.get("timezone"))
        return cls(
            user_id=user_id,
            learning_style=_optional_str(data.get("learningStyle")),
            teaching_style=_optional_str(data.get("teachingStyle")),
            communication_preference=_optional_str(data.get("communicationPreference")),
            preferred_meeting_format=_optional_str(data.get("preferredMeetingFormat")),
            preferred_language=_optional_str(data.get("preferredLanguage", data.get("language"))),
            availability=_parse_availability(data.get("availability") or ()),
            timezone=int(tz) if tz is not None else None,
        )


# --- Engagements -----------------------------------------------------------

@dataclass(frozen=True)
class ExistingEngagement:
    """An exchange between two users; only used to exclude candidates."""
    user_a: str
    user_b: str
    status: EngagementStatus

    @property
    def is_open(self) -> bool:
        return self.status in (EngagementStatus.PENDING, EngagementStatus.ACTIVE)

    def involves(self, user_id: str) -> bool:
        return user_id in (self.user_a, self.user_b)

    def other_party(self, user_id: str) -> str:
        return self.user_b if self.user_a == user_id else self.user_a

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional[ExistingEngagement]:
        user_a = _optional_str(data.get("userA", data.get("initiator")))
        user_b = _optional_str(data.get("userB", data.get("recipient")))
        status = _parse_enum(EngagementStatus, data.get("status"))
        if user_a is None or user_b is None or status is None:
            logger.debug(f"Dropping unusable engagement record: {data!r}")
            return None
        return cls(user_a=user_a, user_b=user_b, status=status)


__all__ = [
    "SkillStatus",
    "SkillLevel",
    "SkillPriority",
    "EngagementStatus",
    "Weekday",
    "SkillEntry",
    "UserProfile",
    "TimeSlot",
    "PreferenceProfile",
    "ExistingEngagement",
]
