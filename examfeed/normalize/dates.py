from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Optional

from dateutil import parser as date_parser

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_NOISE_WORDS_PATTERN = re.compile(r"\b(?:on|posted|added|updated|published)\b", re.IGNORECASE)
_SEPARATOR_PATTERN = re.compile(r"[|–—•]")
_WS_PATTERN = re.compile(r"\s+")
_DAY_MONTH_YEAR_PATTERN = re.compile(r"(\d{1,2})[-/ ]([A-Za-z]{3,})[-/ ](\d{2,4})")
_MONTH = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*"
_NEAR_DATE_PATTERN = re.compile(
    rf"{_MONTH}\s+\d{{1,2}},?\s+\d{{4}}"
    rf"|\b\d{{1,2}}\s+{_MONTH}\s+\d{{4}}"
    r"|\b\d{4}-\d{2}-\d{2}\b"
    rf"|\b\d{{1,2}}\s*{_MONTH}\s*\d{{4}}"
    rf"|\b\d{{1,2}}[-/.]\d{{1,2}}[-/.]\d{{4}}\b",
    re.IGNORECASE,
)
_NEAR_SIZE_PATTERN = re.compile(r"\((\d+(?:\.\d+)?)\s*(KB|MB|GB)\)", re.IGNORECASE)

# dateutil fills missing components from this; year 1 marks "no year in the text".
_SENTINEL_DEFAULT = datetime(1, 1, 1)
_MIN_PLAUSIBLE_YEAR = 1900


def _clean(text: str) -> str:
    without_noise = _NOISE_WORDS_PATTERN.sub(" ", text)
    without_separators = _SEPARATOR_PATTERN.sub(" ", without_noise)
    return _WS_PATTERN.sub(" ", without_separators).strip(" ,:")


def _parse_iso(text: str) -> datetime | None:
    candidate = text.replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        return None


def _parse_free(text: str) -> datetime | None:
    try:
        parsed = date_parser.parse(text, dayfirst=True, default=_SENTINEL_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if parsed.year < _MIN_PLAUSIBLE_YEAR:
        return None
    return parsed


def format_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(ISO_FORMAT)


def parse_date(text: Optional[str]) -> Optional[str]:
    """Best-effort conversion of a free-text date into an ISO-8601 UTC timestamp.

    Naive dates are read as UTC midnight. Ambiguous numeric dates are read day
    first (``05-08-2024`` is 5 August). Never raises; returns None when nothing
    date-like can be recovered.
    """

    if not text:
        return None
    cleaned = _clean(str(text))
    if not cleaned or not any(char.isdigit() for char in cleaned):
        return None

    parsed = _parse_iso(cleaned) or _parse_free(cleaned)
    if parsed is None:
        match = _DAY_MONTH_YEAR_PATTERN.search(cleaned)
        if match:
            day, month, year = match.groups()
            parsed = _parse_free(f"{month} {day}, {year}")
    if parsed is None:
        return None
    return format_iso(parsed)


def extract_near_date(text: Optional[str]) -> Optional[str]:
    match = _NEAR_DATE_PATTERN.search(text or "")
    return match.group(0) if match else None


def extract_near_size(text: Optional[str]) -> Optional[str]:
    match = _NEAR_SIZE_PATTERN.search(text or "")
    if not match:
        return None
    return f"{match.group(1)} {match.group(2).upper()}"
