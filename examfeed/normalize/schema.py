from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Optional

JOBS = "jobs"
ADMIT_CARD = "admit-card"
RESULT = "result"
ANSWER_KEY = "answer-key"
CUTOFF = "cutoff"
NOTIFICATION = "notification"
NEWS = "news"
UNCLASSIFIED = "unclassified"

# Most actionable first; anything unknown ranks after the last entry.
CHANNEL_PRIORITY = (JOBS, ADMIT_CARD, RESULT, ANSWER_KEY, CUTOFF, NOTIFICATION, NEWS, UNCLASSIFIED)
CHANNELS = frozenset(CHANNEL_PRIORITY)
CHANNEL_RANK = {channel: rank for rank, channel in enumerate(CHANNEL_PRIORITY)}


@dataclass(slots=True)
class RawCandidate:
    """One unvalidated item pulled out of a page by an extraction strategy."""

    source: str
    title: str
    url: str
    pdf_url: Optional[str] = None
    view_url: Optional[str] = None
    date_text: Optional[str] = None
    size: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    channel_hint: Optional[str] = None


@dataclass(slots=True)
class NormalizedRecord:
    """Canonical notice record; `url` is the identity key."""

    title: str
    url: str
    channel: str
    source: str
    date: Optional[str] = None
    date_text: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    size: Optional[str] = None
    pdf: Optional[str] = None
    view: Optional[str] = None


RECORD_COLUMNS = [
    "title",
    "url",
    "channel",
    "source",
    "date",
    "date_text",
    "categories",
    "size",
    "pdf",
    "view",
]


@dataclass(slots=True)
class FeedResult:
    items: list[NormalizedRecord]
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    errors: list[str] = field(default_factory=list)
    source_results: list[Any] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)
