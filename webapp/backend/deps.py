"""
Configuration helpers and shared state for the ResearchLens web backend.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from researchlens.alerts import AlertManager
from researchlens.compliance import ComplianceChecklist
from researchlens.feeds import DEFAULT_CLINICALTRIALS_URL, DEFAULT_FDA_BASE_URL, DEFAULT_TIMEOUT
from researchlens.keywords import KeywordTables, load_keyword_tables


def _str_to_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    return int(value)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration pulled from environment variables."""

    seed: Optional[int] = field(default_factory=lambda: _optional_int(os.getenv("RL_SEED")))
    keywords_file: Optional[str] = field(default_factory=lambda: os.getenv("RL_KEYWORDS_FILE") or None)

    fda_base_url: str = field(default_factory=lambda: os.getenv("RL_FDA_BASE_URL", DEFAULT_FDA_BASE_URL))
    clinicaltrials_url: str = field(
        default_factory=lambda: os.getenv("RL_CLINICALTRIALS_URL", DEFAULT_CLINICALTRIALS_URL)
    )
    feed_timeout: float = field(default_factory=lambda: float(os.getenv("RL_FEED_TIMEOUT", str(DEFAULT_TIMEOUT))))
    trial_term: str = field(default_factory=lambda: os.getenv("RL_TRIAL_TERM", "cardiovascular"))

    # Skip outbound feed calls and serve the bundled sample lists
    offline_feed: bool = field(default_factory=lambda: _str_to_bool(os.getenv("RL_OFFLINE_FEED"), False))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings instance; computed once per process."""

    return Settings()


@lru_cache(maxsize=4)
def get_keyword_tables(keywords_file: Optional[str] = None) -> KeywordTables:
    return load_keyword_tables(keywords_file)


# Dashboard state lives for the lifetime of the process.
@lru_cache(maxsize=1)
def get_alert_manager() -> AlertManager:
    return AlertManager()


@lru_cache(maxsize=1)
def get_checklist() -> ComplianceChecklist:
    return ComplianceChecklist()
