"""Service layer: config-driven orchestration used by the CLI and API layer."""

from .match_service import RankingReport, build_engine, run_ranking, get_match_details

__all__ = ["RankingReport", "build_engine", "run_ranking", "get_match_details"]
