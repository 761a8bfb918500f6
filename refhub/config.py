"""Centralised settings for the Reference Hub link monitor.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
_BROWSER_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,"
    "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.9"
)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("REFHUB_WORKSPACE", Path.home() / ".refhub_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "links.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # HTTP API
    # ------------------------------------------------------------------
    api_host: str = field(
        default_factory=lambda: os.environ.get("REFHUB_HOST", "127.0.0.1")
    )
    api_port: int = field(
        default_factory=lambda: int(os.environ.get("REFHUB_PORT", "3001"))
    )

    # ------------------------------------------------------------------
    # Probe client
    # ------------------------------------------------------------------
    probe_timeout: float = field(
        default_factory=lambda: float(os.environ.get("PROBE_TIMEOUT", "10.0"))
    )
    probe_max_redirects: int = field(
        default_factory=lambda: int(os.environ.get("PROBE_MAX_REDIRECTS", "5"))
    )
    probe_user_agent: str = field(
        default_factory=lambda: os.environ.get("PROBE_USER_AGENT", _BROWSER_USER_AGENT)
    )
    probe_accept: str = field(
        default_factory=lambda: os.environ.get("PROBE_ACCEPT", _BROWSER_ACCEPT)
    )

    # ------------------------------------------------------------------
    # Scheduler
    # ------------------------------------------------------------------
    scan_timezone: str = field(
        default_factory=lambda: os.environ.get("SCAN_TIMEZONE", "Asia/Kolkata")
    )
    scan_interval_minutes: int = field(
        default_factory=lambda: int(os.environ.get("SCAN_INTERVAL_MINUTES", "60"))
    )
    scan_on_startup: bool = field(
        default_factory=lambda: _env_flag("SCAN_ON_STARTUP", "true")
    )
    scheduler_enabled: bool = field(
        default_factory=lambda: _env_flag("SCHEDULER_ENABLED", "true")
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton — import this everywhere:
#   from refhub.config import settings
settings = Settings()
