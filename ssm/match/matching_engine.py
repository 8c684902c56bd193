"""Matching engine for requester-to-candidate ranking.

This module provides the engine that coordinates candidate selection,
concurrent scoring and ranking. It reads snapshots through the store
interfaces and never persists anything; every call recomputes scores from
the current records.
"""

from __future__ import annotations
import time
import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from .scoring import (
    ScoringConfig,
    availability_overlap,
    blended_percentage,
    skill_match,
    style_compatibility,
    timezone_compatibility,
)
from .tiers import MatchQuality, MatchStrength, quality_for_score, strength_for_blend
from .candidate_selector import CandidateSelector
from .errors import RankingCancelled, RequesterNotFound, UserNotFound
from ..db.interface import EngagementStore, PreferenceStore, StoreUnavailable, UserStore
from ..db.models import PreferenceProfile, UserProfile
from ..config_types import MatchingConfig
from ..utils.logging_helpers import log_progress, format_summary

logger = logging.getLogger(__name__)


# --- Result types ----------------------------------------------------------

@dataclass(frozen=True)
class CompatibilityBreakdown:
    """Raw subscores (nominally 0-1; skill_match may exceed 1)."""
    skill_match: float
    style_compatibility: float
    availability_overlap: float
    timezone_compatibility: float

    def weighted(self, cfg: ScoringConfig) -> float:
        return cfg.blend(
            self.skill_match,
            self.style_compatibility,
            self.availability_overlap,
            self.timezone_compatibility,
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "skillMatch": self.skill_match,
            "styleCompatibility": self.style_compatibility,
            "availabilityOverlap": self.availability_overlap,
            "timezoneCompatibility": self.timezone_compatibility,
        }


@dataclass(frozen=True)
class MatchResult:
    """One ranked candidate; lives for a single ranking request."""
    candidate: UserProfile
    score: int
    compatibility: CompatibilityBreakdown
    matching_teaching_skills: Tuple[str, ...]
    matching_learning_skills: Tuple[str, ...]
    quality_label: MatchQuality
    strength_label: MatchStrength

    def to_dict(self) -> Dict[str, Any]:
        """API-layer shape of the result."""
        return {
            "user": self.candidate.to_dict(),
            "score": self.score,
            "compatibility": self.compatibility.to_dict(),
            "matchingTeachingSkills": list(self.matching_teaching_skills),
            "matchingLearningSkills": list(self.matching_learning_skills),
            "matchQuality": self.quality_label.value,
            "matchStrength": self.strength_label.value,
        }


@dataclass
class RankOptions:
    """Per-call overrides for rank_matches().

    Attributes:
        min_score: Drop candidates below this percentage (None = config value)
        limit: Keep only the top N results after sorting
        timeout: Deadline in seconds for the whole call (None = config value)
        cancel_event: Set by the caller to abandon the run
    """
    min_score: int | None = None
    limit: int | None = None
    timeout: float | None = None
    cancel_event: threading.Event | None = None


@dataclass
class RankingStats:
    """Counters from the most recent rank_matches() call."""
    pool_size: int = 0
    scored: int = 0
    skipped: int = 0
    below_threshold: int = 0
    ranked: int = 0
    duration_seconds: float = 0.0
    skipped_ids: List[str] = field(default_factory=list)


# --- Engine ----------------------------------------------------------------

class MatchingEngine:
    """Core ranking engine.

    This class orchestrates a ranking run:
    1. Loads the requester and its preferences (missing -> RequesterNotFound)
    2. Builds the candidate pool using CandidateSelector
    3. Scores candidates on a bounded worker pool (one task per candidate)
    4. Filters, sorts and labels the results after the single join point

    Sort order is score descending, then candidate id ascending.

    Example usage:
        engine = MatchingEngine(store, store, store, MatchingConfig(max_workers=4))
        matches = engine.rank_matches("user-42", RankOptions(limit=10))
    """

    def __init__(
        self,
        users: UserStore,
        preferences: PreferenceStore,
        engagements: EngagementStore,
        matching_config: MatchingConfig | None = None,
        progress_enabled: bool = True,
        progress_interval: int = 50,
    ):
        """Initialize the matching engine.

        Args:
            users: User profile store
            preferences: Preference profile store
            engagements: Engagement store (for excluding engaged users)
            matching_config: MatchingConfig instance (defaults if None)
            progress_enabled: Enable progress logging (default: True)
            progress_interval: Log progress every N candidates (default: 50)

        Raises:
            ValueError: If the matching config is invalid
        """
        self.config = matching_config or MatchingConfig()
        self.config.validate()
        self.scoring_config = self.config.scoring()

        self.users = users
        self.preferences = preferences
        self.selector = CandidateSelector(users, engagements)

        self.progress_enabled = progress_enabled
        self.progress_interval = max(1, progress_interval)
        self.last_stats = RankingStats()

    # --- Public API ---

    def rank_matches(self, requester_id: str, options: RankOptions | None = None) -> List[MatchResult]:
        """Rank eligible candidates for a requester.

        Args:
            requester_id: User to compute matches for
            options: Optional per-call overrides

        Returns:
            Ranked MatchResult list (score desc, candidate id asc)

        Raises:
            RequesterNotFound: Requester or its preferences are missing
            RankingCancelled: Deadline exceeded or cancel_event set
        """
        options = options or RankOptions()
        min_score = self.config.min_score if options.min_score is None else options.min_score
        timeout = self.config.timeout_seconds if options.timeout is None else options.timeout
        start = time.monotonic()
        stats = RankingStats()
        self.last_stats = stats

        requester = self.users.get_user(requester_id)
        if requester is None:
            raise RequesterNotFound(requester_id)
        requester_prefs = self._fetch_preferences(requester_id)
        if requester_prefs is None:
            raise RequesterNotFound(requester_id, what="preferences")

        pool = self.selector.build_pool(requester_id)
        stats.pool_size = len(pool)
        if not pool:
            logger.debug(f"No eligible candidates for {requester_id}")
            return []

        scored = self._evaluate_pool(requester, requester_prefs, pool, stats, timeout, options.cancel_event, start)

        ranked = self._rank(scored, min_score, stats)
        if options.limit is not None:
            ranked = ranked[:max(0, options.limit)]

        stats.ranked = len(ranked)
        stats.duration_seconds = time.monotonic() - start
        logger.info(format_summary(
            ranked=stats.ranked,
            below_threshold=stats.below_threshold,
            skipped=stats.skipped,
            duration_seconds=stats.duration_seconds,
        ))
        return ranked

    def match_details(self, requester_id: str, target_id: str) -> MatchResult:
        """Score one specific pair without pool filtering or minimum score.

        Missing preferences on either side are treated as absent (style,
        availability and timezone subscores become 0).

        Raises:
            RequesterNotFound: Requester profile missing
            UserNotFound: Target profile missing
        """
        requester = self.users.get_user(requester_id)
        if requester is None:
            raise RequesterNotFound(requester_id)
        target = self.users.get_user(target_id)
        if target is None:
            raise UserNotFound(target_id)

        return self.score_pair(
            requester,
            self._fetch_preferences(requester_id),
            target,
            self._fetch_preferences(target_id),
        )

    def score_pair(
        self,
        requester: UserProfile,
        requester_prefs: Optional[PreferenceProfile],
        candidate: UserProfile,
        candidate_prefs: Optional[PreferenceProfile],
    ) -> MatchResult:
        """Compute subscores, blended score and labels for one pair. Pure."""
        cfg = self.scoring_config
        compatibility = CompatibilityBreakdown(
            skill_match=skill_match(requester.skills, candidate.skills, cfg),
            style_compatibility=style_compatibility(requester_prefs, candidate_prefs, cfg),
            availability_overlap=availability_overlap(
                requester_prefs.availability if requester_prefs else None,
                candidate_prefs.availability if candidate_prefs else None,
            ),
            timezone_compatibility=timezone_compatibility(
                requester_prefs.timezone if requester_prefs else None,
                candidate_prefs.timezone if candidate_prefs else None,
            ),
        )
        weighted = compatibility.weighted(cfg)
        score = blended_percentage(weighted)

        requester_learning = {s.skill_id for s in requester.skills if s.is_learning}
        requester_teaching = {s.skill_id for s in requester.skills if s.is_teaching}
        return MatchResult(
            candidate=candidate,
            score=score,
            compatibility=compatibility,
            matching_teaching_skills=tuple(
                s.skill_id for s in candidate.skills if s.is_teaching and s.skill_id in requester_learning
            ),
            matching_learning_skills=tuple(
                s.skill_id for s in candidate.skills if s.is_learning and s.skill_id in requester_teaching
            ),
            quality_label=quality_for_score(score),
            strength_label=strength_for_blend(weighted),
        )

    # --- Internals ---

    def _fetch_preferences(self, user_id: str) -> Optional[PreferenceProfile]:
        """Preference lookup retried on StoreUnavailable."""
        retryer = Retrying(
            stop=stop_after_attempt(self.config.fetch_retries),
            wait=wait_random_exponential(multiplier=0.1, max=2),
            retry=retry_if_exception_type(StoreUnavailable),
            reraise=True,
        )
        return retryer(self.preferences.get_preferences, user_id)

    def _evaluate_candidate(
        self,
        requester: UserProfile,
        requester_prefs: PreferenceProfile,
        candidate: UserProfile,
    ) -> Optional[MatchResult]:
        """Score one candidate; None means the candidate is skipped.

        Runs on a worker thread. Faults are contained here so one bad record
        never aborts the ranking.
        """
        try:
            candidate_prefs = self._fetch_preferences(candidate.id)
        except Exception as e:
            logger.warning(f"Skipping candidate {candidate.id}: preference lookup failed ({e!r})")
            return None

        if candidate_prefs is None:
            logger.debug(f"Skipping candidate {candidate.id}: no preferences")
            return None

        try:
            result = self.score_pair(requester, requester_prefs, candidate, candidate_prefs)
        except Exception as e:
            logger.warning(f"Skipping candidate {candidate.id}: scoring failed ({e})")
            return None

        if logger.isEnabledFor(logging.DEBUG):
            c = result.compatibility
            logger.debug(
                f"requester={requester.id} vs candidate={candidate.id} score={result.score} "
                f"skill={c.skill_match:.3f} style={c.style_compatibility:.3f} "
                f"avail={c.availability_overlap:.3f} tz={c.timezone_compatibility:.1f}"
            )
        return result

    def _evaluate_pool(
        self,
        requester: UserProfile,
        requester_prefs: PreferenceProfile,
        pool: Tuple[UserProfile, ...],
        stats: RankingStats,
        timeout: float | None,
        cancel_event: threading.Event | None,
        start: float,
    ) -> List[MatchResult]:
        """Fan out one task per candidate and join; raises RankingCancelled on abort."""
        total = len(pool)
        if cancel_event is not None and cancel_event.is_set():
            raise RankingCancelled("cancelled", 0, total)

        deadline = start + timeout if timeout is not None else None
        results: List[MatchResult] = []
        processed = 0
        last_progress_log = 0

        executor = ThreadPoolExecutor(
            max_workers=min(self.config.max_workers, total),
            thread_name_prefix="ssm-rank",
        )
        try:
            futures: Dict[Future, UserProfile] = {
                executor.submit(self._evaluate_candidate, requester, requester_prefs, candidate): candidate
                for candidate in pool
            }
            pending: Set[Future] = set(futures)

            while pending:
                if cancel_event is not None and cancel_event.is_set():
                    raise RankingCancelled("cancelled", processed, total)

                wait_for = self.config.poll_interval
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise RankingCancelled("timeout", processed, total)
                    wait_for = min(wait_for, remaining)

                done, pending = wait(pending, timeout=wait_for, return_when=FIRST_COMPLETED)
                for future in done:
                    processed += 1
                    result = future.result()
                    if result is None:
                        stats.skipped += 1
                        stats.skipped_ids.append(futures[future].id)
                    else:
                        results.append(result)

                if self.progress_enabled and processed - last_progress_log >= self.progress_interval:
                    log_progress(
                        processed=processed,
                        total=total,
                        kept=len(results),
                        skipped=stats.skipped,
                        elapsed_seconds=time.monotonic() - start,
                    )
                    last_progress_log = processed
        except RankingCancelled as e:
            logger.warning(str(e))
            raise
        finally:
            # Abandon whatever is still queued; running lookups finish in the background
            executor.shutdown(wait=False, cancel_futures=True)

        stats.scored = len(results)
        stats.skipped_ids.sort()
        return results

    def _rank(self, results: List[MatchResult], min_score: int, stats: RankingStats) -> List[MatchResult]:
        kept = [r for r in results if r.score >= min_score]
        stats.below_threshold = len(results) - len(kept)
        kept.sort(key=lambda r: (-r.score, r.candidate.id))
        return kept


__all__ = [
    "CompatibilityBreakdown",
    "MatchResult",
    "RankOptions",
    "RankingStats",
    "MatchingEngine",
]
