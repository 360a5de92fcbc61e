"""Display formatting for stored dates (dd/mm/yyyy)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional


def _parse(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _format(value: Any, pattern: str) -> str:
    if not value:
        return ""
    # Rows edited outside the app may hold non-text dates; show them as stored.
    if not isinstance(value, str):
        return str(value)
    moment = _parse(value)
    if moment is None:
        return value
    return moment.strftime(pattern)


def format_datetime(value: Optional[str]) -> str:
    return _format(value, "%d/%m/%Y %H:%M")


def format_date(value: Optional[str]) -> str:
    return _format(value, "%d/%m/%Y")
