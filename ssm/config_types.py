"""Typed configuration dataclasses for skill-swap-matcher.

Provides strongly-typed configuration objects that can be used throughout
the application for better type safety and IDE support.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Dict, Any

from .match.scoring import ScoringConfig


@dataclass
class MatchingConfig:
    """Ranking engine configuration (aligned with _DEFAULTS)."""
    min_score: int = 20  # candidates below this percentage are dropped
    max_workers: int = 8  # bound on parallel preference lookups
    timeout_seconds: float | None = None  # per ranking call; None = no deadline
    fetch_retries: int = 3  # attempts per preference lookup on StoreUnavailable
    poll_interval: float = 0.05  # seconds between cancellation checks
    weight_skill: float = 0.4
    weight_style: float = 0.3
    weight_availability: float = 0.2
    weight_timezone: float = 0.1

    def validate(self) -> None:
        """Raise ValueError on settings the engine cannot run with."""
        if self.max_workers < 1:
            raise ValueError(f"matching.max_workers must be >= 1, got {self.max_workers}")
        if self.fetch_retries < 1:
            raise ValueError(f"matching.fetch_retries must be >= 1, got {self.fetch_retries}")
        if not 0 <= self.min_score <= 100:
            raise ValueError(f"matching.min_score must be within 0-100, got {self.min_score}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(f"matching.timeout_seconds must be positive, got {self.timeout_seconds}")
        if self.poll_interval <= 0:
            raise ValueError(f"matching.poll_interval must be positive, got {self.poll_interval}")
        self.scoring().validate()

    def scoring(self) -> ScoringConfig:
        """Scoring weights as the immutable config used by the primitives."""
        return ScoringConfig(
            weight_skill=self.weight_skill,
            weight_style=self.weight_style,
            weight_availability=self.weight_availability,
            weight_timezone=self.weight_timezone,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for backward compatibility."""
        return asdict(self)


@dataclass
class LoggingConfig:
    """Progress logging configuration."""
    progress_enabled: bool = True
    progress_interval: int = 50  # log every N evaluated candidates

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for backward compatibility."""
        return asdict(self)


@dataclass
class DataConfig:
    """Location of the JSON snapshot used by the CLI."""
    snapshot_path: str = "data/snapshot.json"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for backward compatibility."""
        return asdict(self)


@dataclass
class AppConfig:
    """Root application configuration with all subsections."""
    log_level: str = "INFO"
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    data: DataConfig = field(default_factory=DataConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to nested dictionary.

        Returns:
            Nested dict structure matching config format
        """
        return {
            "log_level": self.log_level,
            "matching": self.matching.to_dict(),
            "logging": self.logging.to_dict(),
            "data": self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create typed config from dictionary.

        Args:
            data: Dictionary config (from load_config)

        Returns:
            Typed AppConfig instance

        Raises:
            ValueError: On unknown keys or invalid matching settings
        """
        try:
            cfg = cls(
                log_level=data.get("log_level", "INFO"),
                matching=MatchingConfig(**data.get("matching", {})),
                logging=LoggingConfig(**data.get("logging", {})),
                data=DataConfig(**data.get("data", {})),
            )
            cfg.matching.validate()
        except TypeError as e:
            # unknown keys, or values of the wrong type ("abc" for a number)
            raise ValueError(f"Invalid configuration: {e}") from e
        return cfg


__all__ = [
    "AppConfig",
    "MatchingConfig",
    "LoggingConfig",
    "DataConfig",
]
