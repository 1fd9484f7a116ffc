import json
import os
from pathlib import Path
from typing import Any, Dict


DEFAULT_CONFIG_PATH = Path(os.getenv("RL_CONFIG", "config/researchlens.json"))


def load_runtime_config(path: str | os.PathLike | None = None) -> Dict[str, Any]:
    """Load JSON config if it exists, otherwise return empty dict."""
    cfg_path = Path(path or os.getenv("RL_CONFIG") or DEFAULT_CONFIG_PATH)
    if not cfg_path.exists():
        return {}
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def _flag(value) -> str:
    return "1" if value else "0"


RUNTIME_MAPPING = {
    "debug": ("RL_DEBUG", _flag),
    "log_file": ("RL_LOG_FILE", str),
    "seed": ("RL_SEED", str),
    "keywords_file": ("RL_KEYWORDS_FILE", str),
}

FEEDS_MAPPING = {
    "timeout": ("RL_FEED_TIMEOUT", str),
    "fda_base_url": ("RL_FDA_BASE_URL", str),
    "clinicaltrials_url": ("RL_CLINICALTRIALS_URL", str),
    "trial_term": ("RL_TRIAL_TERM", str),
    "offline": ("RL_OFFLINE_FEED", _flag),
}


def _apply_section(section: Dict[str, Any], mapping) -> None:
    for key, (env_var, formatter) in mapping.items():
        if env_var in os.environ:
            continue
        if key in section and section[key] is not None:
            os.environ[env_var] = formatter(section[key])


def apply_runtime_config(path: str | os.PathLike | None = None) -> None:
    """
    Apply runtime settings by setting environment variables.
    Existing env vars take precedence.
    """

    config = load_runtime_config(path)
    if not config:
        return

    runtime = config.get("runtime", config)
    if isinstance(runtime, dict):
        _apply_section(runtime, RUNTIME_MAPPING)

    feeds = config.get("feeds", {})
    if isinstance(feeds, dict):
        _apply_section(feeds, FEEDS_MAPPING)
