"""Pytest fixtures for test configuration.

Global test safety measures:
 - Drop SSM__* variables from the environment so local settings cannot leak
   into assertions about defaults
"""
import os
import pytest
from typing import Dict, Any

# Expose mock fixtures (mock_store, requester, snapshot_data, ...)
from tests.mocks.fixtures import *  # noqa: F401,F403


@pytest.fixture(autouse=True)
def _clean_ssm_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("SSM__"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def test_config(snapshot_file) -> Dict[str, Any]:
    """Provide a minimal test configuration as a dict.

    Tests should use this fixture and pass cfg to services/CLI directly,
    rather than creating config files or setting environment variables.
    """
    return {
        'log_level': 'DEBUG',
        'matching': {
            'min_score': 20,
            'max_workers': 4,
            'timeout_seconds': None,
            'fetch_retries': 3,
            'poll_interval': 0.01,
            'weight_skill': 0.4,
            'weight_style': 0.3,
            'weight_availability': 0.2,
            'weight_timezone': 0.1,
        },
        'logging': {
            'progress_enabled': True,
            'progress_interval': 1,
        },
        'data': {
            'snapshot_path': str(snapshot_file),
        },
    }
