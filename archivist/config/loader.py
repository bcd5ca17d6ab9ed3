"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  : Static defaults checked into the repo
#   2. .env file           : Local developer overrides (not committed)
#   3. Environment vars    : Set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the
# Settings-derived values on top.  Keys that only exist in YAML (such as
# ``archive.poll_batch_size``) pass through untouched.
#
#   base = {"archive": {"poll_batch_size": 50}}
#   overrides = {"archive": {"db_path": "data/archives.db"}}
#   result = {"archive": {"poll_batch_size": 50, "db_path": "data/archives.db"}}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from archivist.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh ``Settings()`` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "wayback": {
            "user_agent": settings.wayback_user_agent,
            "timeout": settings.wayback_timeout,
            "authenticated": settings.has_wayback_credentials,
        },
        "archive": {
            "db_path": settings.archive_db_path,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
