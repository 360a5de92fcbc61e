"""Runtime configuration for Medicita.

Settings are read from environment variables so the same code can run in
tests, from the command line, and behind the dashboard without edits.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

DEFAULT_KEY_PREFIX = "med_"
DEFAULT_PORT = 5000


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    """Resolved configuration values."""

    data_dir: Path
    reports_dir: Path
    key_prefix: str = DEFAULT_KEY_PREFIX
    log_level: str = "INFO"
    recheck_conflicts_on_update: bool = False
    port: int = DEFAULT_PORT


def load_settings() -> Settings:
    """Build :class:`Settings` from the environment."""

    data_override = os.getenv("MEDICITA_DATA_DIR")
    reports_override = os.getenv("MEDICITA_REPORTS_DIR")
    try:
        port = int(os.getenv("PORT", str(DEFAULT_PORT)))
    except ValueError as exc:
        raise ValueError("PORT must be an integer") from exc

    return Settings(
        data_dir=Path(data_override) if data_override else Path.cwd() / "data",
        reports_dir=Path(reports_override) if reports_override else Path.cwd() / "reports",
        key_prefix=os.getenv("MEDICITA_KEY_PREFIX", DEFAULT_KEY_PREFIX),
        log_level=os.getenv("MEDICITA_LOG_LEVEL", "INFO").upper(),
        recheck_conflicts_on_update=_env_flag("MEDICITA_RECHECK_CONFLICTS_ON_UPDATE"),
        port=port,
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Install the root handler; only entry points should call this."""

    logging.basicConfig(level=(level or "INFO").upper(), format=LOG_FORMAT)
