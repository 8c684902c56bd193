"""In-memory store implementation backed by a JSON snapshot.

The snapshot is the export format of the surrounding API layer:

    {
      "users": [{"id": "u1", "isActive": true, "skills": [...]}, ...],
      "preferences": [{"userId": "u1", "timezone": 1, "availability": [...]}, ...],
      "engagements": [{"userA": "u1", "userB": "u2", "status": "pending"}, ...]
    }

Records that cannot be parsed are skipped with a warning so a partially
corrupted export still yields a usable store.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import AbstractSet, Any, Dict, Iterable, List, Optional

from .interface import MatchStores
from .models import UserProfile, PreferenceProfile, ExistingEngagement

logger = logging.getLogger(__name__)


class SnapshotStore(MatchStores):
    """Read-only store over fully loaded user, preference and engagement records."""

    def __init__(
        self,
        users: Iterable[UserProfile] = (),
        preferences: Iterable[PreferenceProfile] = (),
        engagements: Iterable[ExistingEngagement] = (),
    ):
        self._users: Dict[str, UserProfile] = {u.id: u for u in users}
        self._preferences: Dict[str, PreferenceProfile] = {p.user_id: p for p in preferences}
        self._engagements: List[ExistingEngagement] = list(engagements)

    # --- Construction ---

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SnapshotStore:
        users = []
        for raw in data.get("users") or ():
            try:
                users.append(UserProfile.from_dict(raw))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping user record: {e}")

        preferences = []
        for raw in data.get("preferences") or ():
            try:
                preferences.append(PreferenceProfile.from_dict(raw))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping preference record: {e}")

        engagements = []
        for raw in data.get("engagements") or ():
            engagement = ExistingEngagement.from_dict(raw) if isinstance(raw, dict) else None
            if engagement is not None:
                engagements.append(engagement)

        logger.debug(
            f"Loaded snapshot: {len(users)} users, {len(preferences)} preference profiles, "
            f"{len(engagements)} engagements"
        )
        return cls(users, preferences, engagements)

    @classmethod
    def from_file(cls, path: Path | str) -> SnapshotStore:
        """Load a snapshot from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a JSON object
        """
        path = Path(path)
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot {path} must contain a JSON object")
        return cls.from_dict(data)

    # --- UserStore ---

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        return self._users.get(user_id)

    def list_active_teachers(self, excluding: AbstractSet[str]) -> List[UserProfile]:
        return [
            u for u in self._users.values()
            if u.id not in excluding and u.is_active and u.teaches_anything
        ]

    # --- PreferenceStore ---

    def get_preferences(self, user_id: str) -> Optional[PreferenceProfile]:
        return self._preferences.get(user_id)

    # --- EngagementStore ---

    def list_active_or_pending(self, user_id: str) -> List[ExistingEngagement]:
        return [e for e in self._engagements if e.is_open and e.involves(user_id)]

    def __len__(self) -> int:
        return len(self._users)


__all__ = ["SnapshotStore"]
