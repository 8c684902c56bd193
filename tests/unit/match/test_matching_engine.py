"""Unit tests for MatchingEngine ranking and pair details."""
import threading

import pytest

from ssm.config_types import MatchingConfig
from ssm.db import StoreUnavailable
from ssm.db.models import EngagementStatus, ExistingEngagement, SkillLevel, SkillPriority
from ssm.match.errors import RankingCancelled, RequesterNotFound, UserNotFound
from ssm.match.matching_engine import MatchingEngine, RankOptions
from ssm.match.tiers import MatchQuality, MatchStrength
from tests.mocks.fixtures import learn, make_prefs, make_user, slot, teach
from tests.mocks.mock_stores import MockStore


def _engine(store, **matching):
    matching.setdefault("poll_interval", 0.01)
    return MatchingEngine(store, store, store, MatchingConfig(**matching), progress_interval=1)


@pytest.fixture
def swap_store(requester, requester_prefs):
    """Alice plus a perfect swap partner (bob) and a weaker one (carol)."""
    store = MockStore()
    store.add_user(requester, requester_prefs)
    store.add_user(
        make_user("bob", teach("rust", level=SkillLevel.INTERMEDIATE, years=3), learn("go", priority=SkillPriority.HIGH)),
        make_prefs("bob", learning_style="visual", teaching_style="interactive",
                   availability=[slot("mon", 18, 20)], timezone=1),
    )
    store.add_user(
        make_user("carol", teach("rust", level=SkillLevel.ADVANCED)),
        make_prefs("carol", learning_style="kinesthetic", timezone=5),
    )
    return store


class TestRankMatches:

    def test_ranks_by_score(self, swap_store):
        results = _engine(swap_store).rank_matches("alice")
        assert [r.candidate.id for r in results] == ["bob", "carol"]

        bob = results[0]
        # skill mean (2.574 + 1.21) / 2 = 1.892 pushes the blend past 1.0
        assert bob.compatibility.skill_match == pytest.approx(1.892)
        assert bob.score == 100
        assert bob.quality_label == MatchQuality.EXCELLENT
        assert bob.strength_label == MatchStrength.STRONG
        assert bob.matching_teaching_skills == ("rust",)
        assert bob.matching_learning_skills == ("go",)

    def test_partial_match_subscores(self, swap_store):
        carol = _engine(swap_store).rank_matches("alice")[1]
        c = carol.compatibility
        assert c.skill_match == pytest.approx(1.1)
        assert c.style_compatibility == pytest.approx(0.7)
        assert c.availability_overlap == 0.0
        assert c.timezone_compatibility == pytest.approx(0.6)
        assert carol.score == 71
        assert carol.quality_label == MatchQuality.GOOD
        assert carol.strength_label == MatchStrength.MODERATE
        assert carol.matching_learning_skills == ()

    def test_scores_are_within_bounds(self, swap_store):
        for result in _engine(swap_store).rank_matches("alice"):
            assert 20 <= result.score <= 100

    def test_engaged_candidate_is_excluded(self, swap_store):
        swap_store.engagements = [ExistingEngagement("bob", "alice", EngagementStatus.PENDING)]
        results = _engine(swap_store).rank_matches("alice")
        assert [r.candidate.id for r in results] == ["carol"]

    def test_min_score_threshold_is_inclusive(self, requester, requester_prefs):
        store = MockStore()
        store.add_user(requester, make_prefs("alice", availability=[slot("mon", 0, 20)]))
        # no complementary skills, no style or timezone: score = availability * 20
        store.add_user(make_user("full", teach("chess")), make_prefs("full", availability=[slot("mon", 0, 20)]))
        store.add_user(make_user("part", teach("chess")), make_prefs("part", availability=[slot("mon", 1, 21)]))

        engine = _engine(store)
        results = engine.rank_matches("alice")
        assert [(r.candidate.id, r.score) for r in results] == [("full", 20)]
        assert engine.last_stats.below_threshold == 1

        lowered = engine.rank_matches("alice", RankOptions(min_score=0))
        assert [(r.candidate.id, r.score) for r in lowered] == [("full", 20), ("part", 19)]

    def test_ties_break_by_candidate_id(self, requester, requester_prefs):
        store = MockStore()
        store.add_user(requester, requester_prefs)
        for user_id in ("zoe", "amy", "max"):
            store.add_user(
                make_user(user_id, teach("rust")),
                make_prefs(user_id, availability=[slot("mon", 18, 20)], timezone=1),
            )
        results = _engine(store).rank_matches("alice")
        assert [r.candidate.id for r in results] == ["amy", "max", "zoe"]
        assert len({r.score for r in results}) == 1

    def test_candidate_without_preferences_is_skipped(self, swap_store):
        swap_store.add_user(make_user("ghost", teach("rust", level=SkillLevel.EXPERT)))
        engine = _engine(swap_store)
        results = engine.rank_matches("alice")
        assert "ghost" not in [r.candidate.id for r in results]
        assert engine.last_stats.skipped_ids == ["ghost"]

    def test_limit_keeps_top_results(self, swap_store):
        results = _engine(swap_store).rank_matches("alice", RankOptions(limit=1))
        assert [r.candidate.id for r in results] == ["bob"]

    def test_empty_pool_returns_empty_list(self, requester, requester_prefs):
        store = MockStore()
        store.add_user(requester, requester_prefs)
        assert _engine(store).rank_matches("alice") == []

    def test_repeated_runs_are_identical(self, swap_store):
        engine = _engine(swap_store, max_workers=3)
        first = [r.to_dict() for r in engine.rank_matches("alice")]
        second = [r.to_dict() for r in engine.rank_matches("alice")]
        assert first == second

    def test_stats_are_recorded(self, swap_store):
        engine = _engine(swap_store)
        engine.rank_matches("alice")
        stats = engine.last_stats
        assert stats.pool_size == 2
        assert stats.scored == 2
        assert stats.ranked == 2
        assert stats.skipped == 0


class TestRequesterErrors:

    def test_unknown_requester(self, swap_store):
        with pytest.raises(RequesterNotFound) as exc:
            _engine(swap_store).rank_matches("nobody")
        assert exc.value.user_id == "nobody"

    def test_requester_without_preferences(self, swap_store):
        del swap_store.preferences["alice"]
        with pytest.raises(RequesterNotFound) as exc:
            _engine(swap_store).rank_matches("alice")
        assert exc.value.what == "preferences"

    def test_requester_not_found_is_a_lookup_error(self, swap_store):
        with pytest.raises(LookupError):
            _engine(swap_store).rank_matches("nobody")


class TestStoreFaults:

    def test_transient_failures_are_retried(self, swap_store):
        swap_store.transient_failures["bob"] = 2
        results = _engine(swap_store, fetch_retries=3).rank_matches("alice")
        assert "bob" in [r.candidate.id for r in results]
        assert swap_store.preference_calls("bob") == 3

    def test_persistent_failure_skips_candidate(self, swap_store):
        swap_store.broken_preferences.add("bob")
        engine = _engine(swap_store, fetch_retries=2)
        results = engine.rank_matches("alice")
        assert [r.candidate.id for r in results] == ["carol"]
        assert engine.last_stats.skipped_ids == ["bob"]
        assert swap_store.preference_calls("bob") == 2

    def test_requester_lookup_failure_propagates(self, swap_store):
        swap_store.broken_preferences.add("alice")
        with pytest.raises(StoreUnavailable):
            _engine(swap_store, fetch_retries=1).rank_matches("alice")


class TestCancellation:

    def test_preset_cancel_event(self, swap_store):
        event = threading.Event()
        event.set()
        with pytest.raises(RankingCancelled) as exc:
            _engine(swap_store).rank_matches("alice", RankOptions(cancel_event=event))
        assert exc.value.reason == "cancelled"
        assert exc.value.completed == 0
        assert exc.value.total == 2

    def test_cancel_during_run(self, swap_store):
        swap_store.delays["bob"] = 0.5
        event = threading.Event()
        timer = threading.Timer(0.05, event.set)
        timer.start()
        try:
            with pytest.raises(RankingCancelled) as exc:
                _engine(swap_store).rank_matches("alice", RankOptions(cancel_event=event))
        finally:
            timer.cancel()
        assert exc.value.reason == "cancelled"

    def test_deadline_exceeded(self, swap_store):
        swap_store.delays["bob"] = 0.5
        with pytest.raises(RankingCancelled) as exc:
            _engine(swap_store).rank_matches("alice", RankOptions(timeout=0.05))
        assert exc.value.reason == "timeout"
        assert exc.value.completed < exc.value.total

    def test_configured_timeout_applies(self, swap_store):
        swap_store.delays["carol"] = 0.5
        with pytest.raises(RankingCancelled):
            _engine(swap_store, timeout_seconds=0.05).rank_matches("alice")

    def test_generous_deadline_completes(self, swap_store):
        results = _engine(swap_store).rank_matches("alice", RankOptions(timeout=10))
        assert len(results) == 2


class CountingStore(MockStore):
    """MockStore that records how many preference lookups run at once."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.in_flight = 0
        self.peak = 0
        self._counter_lock = threading.Lock()

    def get_preferences(self, user_id):
        with self._counter_lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            return super().get_preferences(user_id)
        finally:
            with self._counter_lock:
                self.in_flight -= 1


class TestConcurrency:

    def _store(self, requester, requester_prefs, count):
        store = CountingStore()
        store.add_user(requester, requester_prefs)
        for i in range(count):
            user_id = f"c{i:02d}"
            store.add_user(make_user(user_id, teach("rust")), make_prefs(user_id, timezone=1))
            store.delays[user_id] = 0.02
        return store

    def test_lookups_bounded_by_max_workers(self, requester, requester_prefs):
        store = self._store(requester, requester_prefs, 20)
        results = _engine(store, max_workers=3).rank_matches("alice")
        assert len(results) == 20
        assert 1 <= store.peak <= 3

    def test_single_worker_runs_sequentially(self, requester, requester_prefs):
        store = self._store(requester, requester_prefs, 5)
        _engine(store, max_workers=1).rank_matches("alice")
        assert store.peak == 1


class TestMatchDetails:

    def test_ignores_threshold_and_eligibility(self, swap_store):
        swap_store.add_user(make_user("erin", learn("piano"), is_active=False))
        swap_store.engagements = [ExistingEngagement("alice", "erin", EngagementStatus.ACTIVE)]
        result = _engine(swap_store).match_details("alice", "erin")
        assert result.candidate.id == "erin"
        assert result.compatibility.skill_match == 0.0
        assert result.compatibility.style_compatibility == 0.0
        assert result.score == 0
        assert result.quality_label == MatchQuality.LOW
        assert result.strength_label == MatchStrength.WEAK

    def test_matches_ranking_score(self, swap_store):
        engine = _engine(swap_store)
        ranked = {r.candidate.id: r for r in engine.rank_matches("alice")}
        assert engine.match_details("alice", "carol") == ranked["carol"]

    def test_missing_requester_preferences_are_tolerated(self, swap_store):
        del swap_store.preferences["alice"]
        result = _engine(swap_store).match_details("alice", "bob")
        assert result.compatibility.availability_overlap == 0.0
        assert result.compatibility.timezone_compatibility == 0.0
        assert result.compatibility.skill_match == pytest.approx(1.892)

    def test_unknown_target(self, swap_store):
        with pytest.raises(UserNotFound) as exc:
            _engine(swap_store).match_details("alice", "nobody")
        assert not isinstance(exc.value, RequesterNotFound)

    def test_unknown_requester(self, swap_store):
        with pytest.raises(RequesterNotFound):
            _engine(swap_store).match_details("nobody", "bob")


def test_result_serialization_keys(swap_store):
    payload = _engine(swap_store).rank_matches("alice")[0].to_dict()
    assert set(payload) == {
        "user", "score", "compatibility", "matchingTeachingSkills",
        "matchingLearningSkills", "matchQuality", "matchStrength",
    }
    assert set(payload["compatibility"]) == {
        "skillMatch", "styleCompatibility", "availabilityOverlap", "timezoneCompatibility",
    }
    assert payload["matchQuality"] == "Excellent"
    assert payload["user"]["id"] == "bob"


@pytest.mark.parametrize("bad", [
    {"max_workers": 0},
    {"fetch_retries": 0},
    {"min_score": 101},
    {"timeout_seconds": 0},
    {"weight_skill": 0.9},
])
def test_invalid_config_rejected(bad):
    store = MockStore()
    with pytest.raises(ValueError):
        MatchingEngine(store, store, store, MatchingConfig(**bad))
