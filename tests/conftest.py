import os
from datetime import date

import pytest

from researchlens.synthesis import LiteratureAnalyzer

RL_ENV_VARS = (
    "RL_CONFIG",
    "RL_DEBUG",
    "RL_LOG_FILE",
    "RL_SEED",
    "RL_KEYWORDS_FILE",
    "RL_FEED_TIMEOUT",
    "RL_FDA_BASE_URL",
    "RL_CLINICALTRIALS_URL",
    "RL_TRIAL_TERM",
    "RL_OFFLINE_FEED",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every test without any RL_* settings from the host environment."""
    for name in RL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # apply_runtime_config writes os.environ directly
    for name in RL_ENV_VARS:
        os.environ.pop(name, None)


@pytest.fixture
def reference_day():
    return date(2026, 5, 14)


@pytest.fixture
def analyzer(reference_day):
    return LiteratureAnalyzer(seed=1234, today=reference_day)
