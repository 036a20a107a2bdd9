"""List filtering, sorting and pagination helpers."""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

Record = Dict[str, Any]


def contains_text(value: Optional[str], needle: str) -> bool:
    """Case-insensitive substring match that tolerates missing values."""

    return needle.strip().lower() in (value or "").lower()


def matches_any(record: Record, fields: Sequence[str], needle: str) -> bool:
    return any(contains_text(record.get(name), needle) for name in fields)


def within_range(value: Optional[float], low: Optional[float], high: Optional[float]) -> bool:
    if value is None:
        return low is None and high is None
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def sort_records(records: Iterable[Record], field: Optional[str], order: str = "asc") -> List[Record]:
    """Sort by ``field``; strings compare case-insensitively, missing values go last."""

    items = list(records)
    if not field:
        return items

    def sort_key(record: Record) -> Any:
        value = record[field]
        return value.casefold() if isinstance(value, str) else value

    present = [item for item in items if item.get(field) is not None]
    missing = [item for item in items if item.get(field) is None]
    present.sort(key=sort_key, reverse=order == "desc")
    return present + missing


def paginate(records: Sequence[Record], page: int, limit: int) -> Dict[str, Any]:
    total = len(records)
    start = (page - 1) * limit
    return {
        "data": list(records[start:start + limit]),
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
