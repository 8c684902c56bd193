"""Unit tests for CandidateSelector."""

from ssm.db.models import EngagementStatus, ExistingEngagement
from ssm.match.candidate_selector import CandidateSelector, engaged_with
from tests.mocks.fixtures import learn, make_user, teach
from tests.mocks.mock_stores import MockStore


def _store():
    return MockStore(users=[
        make_user("alice", teach("go"), learn("rust")),
        make_user("bob", teach("rust")),
        make_user("carol", teach("python")),
        make_user("dave", teach("rust"), is_active=False),
        make_user("erin", learn("go")),
    ])


class TestBuildPool:
    """Eligibility filtering for the candidate pool."""

    def test_excludes_requester_inactive_and_non_teachers(self):
        store = _store()
        pool = CandidateSelector(store, store).build_pool("alice")
        assert [c.id for c in pool] == ["bob", "carol"]

    def test_excludes_pending_and_active_engagements(self):
        store = _store()
        store.engagements = [
            ExistingEngagement("alice", "bob", EngagementStatus.PENDING),
            ExistingEngagement("carol", "alice", EngagementStatus.ACTIVE),
        ]
        pool = CandidateSelector(store, store).build_pool("alice")
        assert pool == ()

    def test_completed_engagement_does_not_exclude(self):
        store = _store()
        store.engagements = [ExistingEngagement("alice", "bob", EngagementStatus.COMPLETED)]
        pool = CandidateSelector(store, store).build_pool("alice")
        assert "bob" in [c.id for c in pool]

    def test_engagements_between_other_users_are_ignored(self):
        store = _store()
        store.engagements = [ExistingEngagement("bob", "carol", EngagementStatus.ACTIVE)]
        pool = CandidateSelector(store, store).build_pool("alice")
        assert [c.id for c in pool] == ["bob", "carol"]

    def test_refilters_loose_store_results(self):
        store = _store()
        store.loose = True
        store.engagements = [ExistingEngagement("alice", "carol", EngagementStatus.PENDING)]
        pool = CandidateSelector(store, store).build_pool("alice")
        assert [c.id for c in pool] == ["bob"]

    def test_pool_is_sorted_by_id(self):
        store = MockStore(users=[
            make_user("zed", teach("a")),
            make_user("amy", teach("a")),
            make_user("kim", teach("a")),
        ])
        pool = CandidateSelector(store, store).build_pool("someone")
        assert [c.id for c in pool] == ["amy", "kim", "zed"]

    def test_passes_exclusions_to_store(self):
        store = _store()
        store.engagements = [ExistingEngagement("bob", "alice", EngagementStatus.PENDING)]
        selector = CandidateSelector(store, store)
        assert selector.excluded_ids("alice") == frozenset({"alice", "bob"})


def test_filter_candidates_drops_duplicates():
    selector = CandidateSelector(MockStore(), MockStore())
    bob = make_user("bob", teach("rust"))
    pool = selector.filter_candidates([bob, bob], frozenset())
    assert pool == (bob,)


def test_engaged_with_other_party_resolution():
    engagements = [
        ExistingEngagement("alice", "bob", EngagementStatus.ACTIVE),
        ExistingEngagement("carol", "alice", EngagementStatus.PENDING),
        ExistingEngagement("alice", "dave", EngagementStatus.COMPLETED),
    ]
    assert engaged_with("alice", engagements) == frozenset({"bob", "carol"})
