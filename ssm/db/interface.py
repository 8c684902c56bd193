from __future__ import annotations
"""Store interface abstraction for testability.

These interfaces define the read-only contract the matching engine needs from
the surrounding storage layer. A JSON-backed in-memory implementation
(`SnapshotStore`) and the mock used in unit tests both implement them for
dependency injection.

Only read paths used by the engine are included; the engine never writes.
"""
from abc import ABC, abstractmethod
from typing import AbstractSet, List, Optional

from .models import UserProfile, PreferenceProfile, ExistingEngagement


class StoreUnavailable(RuntimeError):
    """Transient store failure; callers may retry the lookup."""


class UserStore(ABC):
    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserProfile]:
        """Return the user profile or None when it does not exist."""
        ...

    @abstractmethod
    def list_active_teachers(self, excluding: AbstractSet[str]) -> List[UserProfile]:
        """Return active users with at least one teaching skill.

        Args:
            excluding: User ids that must not be returned
        """
        ...


class PreferenceStore(ABC):
    @abstractmethod
    def get_preferences(self, user_id: str) -> Optional[PreferenceProfile]:
        """Return the user's preference profile or None when absent.

        Raises:
            StoreUnavailable: On transient lookup failure
        """
        ...


class EngagementStore(ABC):
    @abstractmethod
    def list_active_or_pending(self, user_id: str) -> List[ExistingEngagement]:
        """Return pending or active engagements the user takes part in."""
        ...


class MatchStores(UserStore, PreferenceStore, EngagementStore, ABC):
    """Convenience base for implementations backing all three lookups."""


__all__ = [
    "StoreUnavailable",
    "UserStore",
    "PreferenceStore",
    "EngagementStore",
    "MatchStores",
]
