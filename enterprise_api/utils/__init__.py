"""Utility helpers."""
from .query import (  # noqa: F401
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    contains_text,
    matches_any,
    paginate,
    round_half_up,
    sort_records,
    within_range,
)
from .time import format_uptime, today_iso, utc_now_iso  # noqa: F401
