"""Match service: config-driven entry points for ranking and pair details.

This service builds a MatchingEngine from the configuration dict and the
stores handed in by the caller (API layer or CLI) and wraps the results with
run statistics.
"""

from __future__ import annotations
import logging
import threading
from typing import Any, Dict, List

from ..config_types import AppConfig
from ..db.interface import MatchStores
from ..match.matching_engine import MatchingEngine, MatchResult, RankOptions, RankingStats

logger = logging.getLogger(__name__)


class RankingReport:
    """Results from a ranking operation."""

    def __init__(self, requester_id: str):
        self.requester_id = requester_id
        self.matches: List[MatchResult] = []
        self.stats = RankingStats()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requesterId": self.requester_id,
            "matches": [m.to_dict() for m in self.matches],
            "stats": {
                "poolSize": self.stats.pool_size,
                "scored": self.stats.scored,
                "skipped": self.stats.skipped,
                "belowThreshold": self.stats.below_threshold,
                "ranked": self.stats.ranked,
                "durationSeconds": round(self.stats.duration_seconds, 4),
            },
        }


def build_engine(stores: MatchStores, config: Dict[str, Any]) -> MatchingEngine:
    """Create a MatchingEngine from a config dict.

    Raises:
        ValueError: If the matching configuration is invalid
    """
    app_config = AppConfig.from_dict(config)
    return MatchingEngine(
        stores,
        stores,
        stores,
        app_config.matching,
        progress_enabled=app_config.logging.progress_enabled,
        progress_interval=app_config.logging.progress_interval,
    )


def run_ranking(
    stores: MatchStores,
    config: Dict[str, Any],
    requester_id: str,
    limit: int | None = None,
    min_score: int | None = None,
    timeout: float | None = None,
    cancel_event: threading.Event | None = None,
) -> RankingReport:
    """Rank matches for one requester.

    Args:
        stores: Store implementation backing users, preferences and engagements
        config: Full configuration dict
        requester_id: User to rank matches for
        limit: Keep only the top N results
        min_score: Override matching.min_score
        timeout: Override matching.timeout_seconds
        cancel_event: Caller-owned cancellation signal

    Returns:
        RankingReport with ranked matches and statistics

    Raises:
        RequesterNotFound: Requester or its preferences are missing
        RankingCancelled: Deadline exceeded or cancelled
    """
    engine = build_engine(stores, config)
    report = RankingReport(requester_id)
    options = RankOptions(min_score=min_score, limit=limit, timeout=timeout, cancel_event=cancel_event)
    try:
        report.matches = engine.rank_matches(requester_id, options)
    finally:
        report.stats = engine.last_stats

    if report.stats.skipped_ids:
        logger.debug(f"Skipped candidates: {', '.join(report.stats.skipped_ids)}")
    return report


def get_match_details(
    stores: MatchStores,
    config: Dict[str, Any],
    requester_id: str,
    target_id: str,
) -> MatchResult:
    """Score one requester/target pair regardless of eligibility.

    Raises:
        RequesterNotFound: Requester missing
        UserNotFound: Target missing
    """
    engine = build_engine(stores, config)
    return engine.match_details(requester_id, target_id)


__all__ = ["RankingReport", "build_engine", "run_ranking", "get_match_details"]
