from .interface import (
    StoreUnavailable,
    UserStore,
    PreferenceStore,
    EngagementStore,
    MatchStores,
)
from .snapshot_impl import SnapshotStore
from .models import (
    SkillStatus,
    SkillLevel,
    SkillPriority,
    EngagementStatus,
    Weekday,
    SkillEntry,
    UserProfile,
    TimeSlot,
    PreferenceProfile,
    ExistingEngagement,
)

__all__ = [
    "StoreUnavailable",
    "UserStore",
    "PreferenceStore",
    "EngagementStore",
    "MatchStores",
    "SnapshotStore",
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
