"""Candidate selection for the matching engine.

This module narrows the global user set down to the users worth scoring for
one requester. It keeps the expensive part of a ranking run (preference
lookups and subscore computation) limited to eligible candidates.
"""

from __future__ import annotations
import logging
from typing import FrozenSet, Iterable, Set, Tuple

from ..db.interface import UserStore, EngagementStore
from ..db.models import ExistingEngagement, UserProfile

logger = logging.getLogger(__name__)


class CandidateSelector:
    """Builds the candidate pool for a requester.

    A user is eligible when:
    1. It is not the requester itself
    2. It has no pending or active engagement with the requester
    3. It is active
    4. It has at least one teaching skill entry

    The store query already applies these filters; the selector re-applies
    them so a loose store implementation cannot leak ineligible users.

    Example usage:
        selector = CandidateSelector(users=store, engagements=store)
        pool = selector.build_pool("user-42")
    """

    def __init__(self, users: UserStore, engagements: EngagementStore):
        self.users = users
        self.engagements = engagements

    def excluded_ids(self, requester_id: str) -> FrozenSet[str]:
        """Requester id plus everyone it is already engaged with."""
        engagements = self.engagements.list_active_or_pending(requester_id)
        return engaged_with(requester_id, engagements) | {requester_id}

    @staticmethod
    def is_eligible(candidate: UserProfile, excluded: FrozenSet[str]) -> bool:
        return (
            candidate.id not in excluded
            and candidate.is_active
            and candidate.teaches_anything
        )

    def build_pool(self, requester_id: str) -> Tuple[UserProfile, ...]:
        """Return eligible candidates ordered by id.

        Duplicate profiles returned by the store are collapsed to the first one.
        """
        excluded = self.excluded_ids(requester_id)
        raw = self.users.list_active_teachers(excluding=excluded)
        pool = self.filter_candidates(raw, excluded)
        logger.debug(
            f"Candidate pool for {requester_id}: {len(pool)} eligible "
            f"({len(excluded) - 1} excluded by engagements)"
        )
        return pool

    def filter_candidates(
        self, candidates: Iterable[UserProfile], excluded: FrozenSet[str]
    ) -> Tuple[UserProfile, ...]:
        seen: Set[str] = set()
        pool = []
        for candidate in candidates:
            if candidate.id in seen or not self.is_eligible(candidate, excluded):
                continue
            seen.add(candidate.id)
            pool.append(candidate)
        pool.sort(key=lambda c: c.id)
        return tuple(pool)


def engaged_with(requester_id: str, engagements: Iterable[ExistingEngagement]) -> FrozenSet[str]:
    """Ids of users holding an open engagement with the requester."""
    return frozenset(
        e.other_party(requester_id)
        for e in engagements
        if e.is_open and e.involves(requester_id)
    )


__all__ = ['CandidateSelector', 'engaged_with']
