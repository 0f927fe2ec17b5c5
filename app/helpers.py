from __future__ import annotations

from typing import Any

from examfeed.ingest.aggregate import split_patterns

_TRUTHY = {"1", "true", "yes", "on"}


def split_csv(value: Any) -> list[str]:
    if value is None:
        return []
    return split_patterns(str(value))


def parse_limit(value: Any) -> int:
    """Query-string limit; anything negative or non-numeric means no cap."""

    if value is None:
        return 0
    try:
        limit = int(str(value).strip())
    except (TypeError, ValueError):
        return 0
    return max(limit, 0)


def parse_flag(value: Any) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


def apply_feed_headers(response: Any, *, cache_control: str) -> Any:
    response.headers["Cache-Control"] = cache_control
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response
