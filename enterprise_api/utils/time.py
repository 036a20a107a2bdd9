"""Time helpers."""
from __future__ import annotations

from datetime import UTC, date, datetime


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with a ``Z`` suffix."""

    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def today_iso() -> str:
    return date.today().isoformat()


def format_uptime(seconds: float) -> str:
    """Render an uptime as ``"<h>h <m>m <s>s"``."""

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}h {minutes}m {secs}s"
