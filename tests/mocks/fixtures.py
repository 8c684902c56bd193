from __future__ import annotations
import json
import pytest

from ssm.db.models import (
    PreferenceProfile,
    SkillEntry,
    SkillLevel,
    SkillPriority,
    SkillStatus,
    TimeSlot,
    UserProfile,
    Weekday,
)
from .mock_stores import MockStore


def teach(skill_id, level=SkillLevel.BEGINNER, years=0, category="Other"):
    return SkillEntry(skill_id, SkillStatus.TEACHING, level=level, years_of_experience=years, category=category)


def learn(skill_id, priority=SkillPriority.MEDIUM, category="Other"):
    return SkillEntry(skill_id, SkillStatus.LEARNING, priority=priority, category=category)


def slot(day="mon", start=18.0, end=20.0):
    return TimeSlot(Weekday(day), start, end)


def make_user(user_id, *skills, is_active=True, name=None):
    return UserProfile(id=user_id, skills=tuple(skills), is_active=is_active, name=name)


def make_prefs(user_id, **overrides):
    base = dict(
        learning_style=None,
        teaching_style=None,
        communication_preference=None,
        preferred_meeting_format=None,
        preferred_language=None,
        availability=(),
        timezone=None,
    )
    base.update(overrides)
    if isinstance(base["availability"], list):
        base["availability"] = tuple(base["availability"])
    return PreferenceProfile(user_id=user_id, **base)


@pytest.fixture
def mock_store():
    return MockStore()


@pytest.fixture
def requester():
    return make_user(
        "alice",
        teach("go", level=SkillLevel.EXPERT, years=8),
        learn("rust"),
        name="Alice",
    )


@pytest.fixture
def requester_prefs():
    return make_prefs(
        "alice",
        learning_style="visual",
        teaching_style="interactive",
        availability=[slot("mon", 18, 20)],
        timezone=1,
    )


@pytest.fixture
def snapshot_data():
    return {
        "users": [
            {
                "id": "alice",
                "name": "Alice",
                "isActive": True,
                "skills": [
                    {"skillId": "go", "status": "teaching", "level": "Expert", "yearsOfExperience": 8},
                    {"skillId": "rust", "status": "learning", "priority": "medium"},
                ],
            },
            {
                "id": "bob",
                "name": "Bob",
                "isActive": True,
                "skills": [
                    {"skillId": "rust", "status": "teaching", "level": "intermediate", "yearsOfExperience": 3},
                    {"skillId": "go", "status": "learning", "priority": "high"},
                ],
            },
            {
                "id": "carol",
                "name": "Carol",
                "isActive": True,
                "skills": [{"skillId": "rust", "status": "teaching", "level": "advanced"}],
            },
            {
                "id": "dave",
                "isActive": False,
                "skills": [{"skillId": "rust", "status": "teaching"}],
            },
        ],
        "preferences": [
            {
                "userId": "alice",
                "learningStyle": "visual",
                "teachingStyle": "interactive",
                "timezone": 1,
                "availability": [{"day": "Monday", "startTime": 18, "endTime": 20}],
            },
            {
                "userId": "bob",
                "learningStyle": "visual",
                "teachingStyle": "interactive",
                "timezone": 1,
                "availability": [{"day": "Mon", "startTime": 18, "endTime": 20}],
            },
            {
                "userId": "carol",
                "learningStyle": "kinesthetic",
                "timezone": 5,
            },
            {"userId": "dave", "timezone": 1},
        ],
        "engagements": [],
    }


@pytest.fixture
def snapshot_file(tmp_path, snapshot_data):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_data), encoding="utf-8")
    return path
