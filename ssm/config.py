from __future__ import annotations
import os
import json
import logging
from typing import Any, Dict
from pathlib import Path
import copy

from .config_types import AppConfig

logger = logging.getLogger(__name__)

_DEFAULTS: Dict[str, Any] = {
    "log_level": "INFO",
    "matching": {
        "min_score": 20,
        "max_workers": 8,
        "timeout_seconds": None,
        "fetch_retries": 3,
        "poll_interval": 0.05,
        "weight_skill": 0.4,
        "weight_style": 0.3,
        "weight_availability": 0.2,
        "weight_timezone": 0.1,
    },
    "logging": {
        "progress_enabled": True,
        "progress_interval": 50,
    },
    "data": {"snapshot_path": "data/snapshot.json"},
}

ENV_PREFIX = "SSM__"


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a new dict with ``override`` layered over ``base``.

    Sections present on both sides as dicts are merged key by key; any other
    value in ``override`` replaces the base value. Inputs are not modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        both_sections = isinstance(current, dict) and isinstance(value, dict)
        merged[key] = deep_merge(current, value) if both_sections else value
    return merged


def _dotenv_value(raw: str) -> str:
    """Unquote a .env value; unquoted values lose a trailing ``# comment``."""
    raw = raw.strip()
    if raw[:1] in ('"', "'"):
        closing = raw.find(raw[0], 1)
        if closing != -1:
            return raw[1:closing]
    return raw.split('#', 1)[0].rstrip()


def _load_dotenv(path: Path, prefix: str = ENV_PREFIX) -> Dict[str, str]:
    """Read ``KEY=value`` lines from a .env file, keeping only ``prefix`` keys."""
    if not path.is_file():
        return {}
    values: Dict[str, str] = {}
    for line in path.read_text(encoding='utf-8').splitlines():
        key, sep, raw = line.partition('=')
        key = key.strip()
        if not sep or not key.startswith(prefix):
            continue
        values[key] = _dotenv_value(raw)
    return values


def load_config(overrides: Dict[str, Any] | None = None, configure_logging: bool = True) -> Dict[str, Any]:
    """Load configuration merging defaults <- .env <- environment <- overrides.

    During test runs (detected via PYTEST_CURRENT_TEST) .env loading is skipped
    unless SSM_ENABLE_DOTENV=1 is set to allow deterministic defaults.

    Environment keys use double underscores for nesting, e.g.
    ``SSM__MATCHING__MAX_WORKERS=4``.

    Args:
        overrides: Dict of values to deep-merge last (primarily for tests).
        configure_logging: Apply log_level to the root logger.

    Returns:
        dict: Configuration dictionary (for typed access use load_typed_config()).
    """
    dotenv_values: Dict[str, str] = {}
    if os.environ.get('SSM_ENABLE_DOTENV') or not os.environ.get('PYTEST_CURRENT_TEST'):
        dotenv_values = _load_dotenv(Path('.env'))
    # Deep copy defaults to avoid cross-call mutation of nested dicts
    cfg: Dict[str, Any] = copy.deepcopy(_DEFAULTS)

    # Real environment wins over .env
    combined = dict(dotenv_values)
    combined.update((k, v) for k, v in os.environ.items() if k.startswith(ENV_PREFIX))
    for raw_key, value in combined.items():
        path_parts = raw_key[len(ENV_PREFIX):].split("__")
        cursor: Dict[str, Any] = cfg
        for part in path_parts[:-1]:
            cursor = cursor.setdefault(part.lower(), {})  # type: ignore[assignment]
        cursor[path_parts[-1].lower()] = coerce_scalar(value)
    if overrides:
        cfg = deep_merge(cfg, overrides)

    if configure_logging:
        _configure_logging(cfg.get('log_level', 'INFO'))

    return cfg


def load_typed_config(overrides: Dict[str, Any] | None = None, configure_logging: bool = True) -> AppConfig:
    """Load configuration as typed AppConfig object.

    Args:
        overrides: Dictionary of override values
        configure_logging: Apply log_level to the root logger

    Returns:
        AppConfig: Typed configuration object with .to_dict() for dict conversion

    Raises:
        ValueError: If the merged configuration is invalid
    """
    dict_config = load_config(overrides, configure_logging=configure_logging)
    return AppConfig.from_dict(dict_config)


_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _configure_logging(level_str: str) -> None:
    """Point the root logger at stderr with bare ``%(message)s`` lines.

    Unknown level names fall back to INFO.
    """
    name = str(level_str).upper()
    level = getattr(logging, name) if name in _LOG_LEVELS else logging.INFO
    logging.basicConfig(level=level, format='%(message)s', force=True)


def coerce_scalar(value: str) -> Any:
    txt = value.strip()
    # JSON object or array
    if (txt.startswith('[') and txt.endswith(']')) or (txt.startswith('{') and txt.endswith('}')):
        try:
            return json.loads(txt)
        except ValueError:
            pass  # fall through to scalar heuristics
    lower = txt.lower()
    if lower in {"none", "null", ""}:
        return None
    if lower in {"true", "yes"}:
        return True
    if lower in {"false", "no"}:
        return False
    # int
    if txt.isdigit() or (txt.startswith("-") and txt[1:].isdigit()):
        return int(txt)
    # float
    try:
        return float(txt)
    except ValueError:
        return txt

__all__ = ["load_config", "deep_merge", "load_typed_config", "coerce_scalar"]
