"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# pydantic-settings reads configuration from two sources (in priority
# order):
#
#   1. **Environment variables**, e.g. WAYBACK_ACCESS_KEY=abc123
#      (highest priority, always wins)
#   2. **.env file** in the project root, holding key=value lines
#      (used for local development)
#
# Field ``wayback_access_key`` maps to env var ``WAYBACK_ACCESS_KEY``.
# Defaults apply when neither source sets a field.
#
# The .env file is never committed.  Archive.org S3-style keys come from
# https://archive.org/account/s3.php.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from archivist.interfaces.archive_provider import CaptureOptions
from archivist.providers.archive.wayback_provider import DEFAULT_USER_AGENT, WaybackConfig


class Settings(BaseSettings):
    """Archivist application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Wayback Machine ===
    # Empty keys = anonymous access: captures use the plain GET endpoint
    # and job polling is unavailable.
    wayback_access_key: str = ""
    wayback_secret_key: str = ""
    wayback_user_agent: str = DEFAULT_USER_AGENT
    wayback_timeout: float = 10.0

    # === Capture options (authenticated SPN2 only) ===
    archive_capture_all: bool = False
    archive_capture_outlinks: bool = False
    archive_capture_screenshot: bool = False
    archive_skip_first_archive: bool = False

    # === Archive record persistence ===
    archive_db_path: str = "data/archives.db"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def wayback_config(self) -> WaybackConfig:
        """Explicit configuration for the Wayback adapter."""
        return WaybackConfig(
            access_key=self.wayback_access_key,
            secret_key=self.wayback_secret_key,
            user_agent=self.wayback_user_agent,
            timeout=self.wayback_timeout,
        )

    def capture_options(self) -> CaptureOptions:
        return CaptureOptions(
            capture_all=self.archive_capture_all,
            capture_outlinks=self.archive_capture_outlinks,
            capture_screenshot=self.archive_capture_screenshot,
            skip_first_archive=self.archive_skip_first_archive,
        )

    @property
    def has_wayback_credentials(self) -> bool:
        return bool(self.wayback_access_key and self.wayback_secret_key)
