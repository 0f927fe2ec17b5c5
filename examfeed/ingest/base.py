from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from examfeed.normalize.canonical_url import is_http_url
from examfeed.normalize.schema import CHANNELS, RawCandidate

LISTING = "listing"
TABLE = "table"
HEADING_BLOCKS = "heading-blocks"
LINK_PROXIMITY = "link-proximity"
STRATEGY_NAMES = frozenset({LISTING, TABLE, HEADING_BLOCKS, LINK_PROXIMITY})

PAGE_MODE_ALL = "all"
PAGE_MODE_FIRST_SUCCESS = "first-success"
PAGE_MODES = frozenset({PAGE_MODE_ALL, PAGE_MODE_FIRST_SUCCESS})

DEFAULT_STRATEGIES = (LISTING, LINK_PROXIMITY)


@dataclass(frozen=True, slots=True)
class PageDescriptor:
    url: str
    channel: Optional[str] = None
    strategies: tuple[str, ...] = DEFAULT_STRATEGIES
    # (label substring, channel) pairs for the heading-blocks strategy.
    sections: tuple[tuple[str, str], ...] = ()
    heading_tag: str = "h2"

    def __post_init__(self) -> None:
        if not is_http_url(self.url):
            raise ValueError(f"Page url '{self.url}' must be an absolute http(s) URL.")
        if self.channel is not None and self.channel not in CHANNELS:
            raise ValueError(f"Unknown channel hint '{self.channel}' for {self.url}.")
        if not self.strategies:
            raise ValueError(f"Page {self.url} needs at least one extraction strategy.")
        unknown = [name for name in self.strategies if name not in STRATEGY_NAMES]
        if unknown:
            raise ValueError(f"Unknown extraction strategies {unknown} for {self.url}.")
        for label, channel in self.sections:
            if not label.strip():
                raise ValueError(f"Empty section label for {self.url}.")
            if channel not in CHANNELS:
                raise ValueError(f"Unknown section channel '{channel}' for {self.url}.")
        if HEADING_BLOCKS in self.strategies and not self.sections:
            raise ValueError(f"Page {self.url} uses {HEADING_BLOCKS} without any sections.")


@dataclass(frozen=True, slots=True)
class SourceDescriptor:
    name: str
    base_url: str
    pages: tuple[PageDescriptor, ...]
    page_mode: str = PAGE_MODE_ALL

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Source name must not be empty.")
        if not is_http_url(self.base_url):
            raise ValueError(f"Source '{self.name}' base_url must be an absolute http(s) URL.")
        if not self.pages:
            raise ValueError(f"Source '{self.name}' must define at least one page.")
        if self.page_mode not in PAGE_MODES:
            raise ValueError(f"Source '{self.name}' has unknown page_mode '{self.page_mode}'.")


@dataclass(slots=True)
class PageFailure:
    source: str
    url: str
    reason: str
    message: str

    def describe(self) -> str:
        return f"{self.source}: {self.reason} {self.url} ({self.message})"


@dataclass(slots=True)
class SourceResult:
    source: str
    candidates: list[RawCandidate] = field(default_factory=list)
    failures: list[PageFailure] = field(default_factory=list)
    pages_attempted: int = 0
    pages_succeeded: int = 0

    @property
    def status(self) -> str:
        if self.pages_succeeded == 0 and self.failures:
            return "failed"
        if self.failures:
            return "partial"
        return "succeeded"

    def to_dict(self) -> dict[str, object]:
        return {
            "source": self.source,
            "status": self.status,
            "records": len(self.candidates),
            "pages_attempted": self.pages_attempted,
            "pages_succeeded": self.pages_succeeded,
            "failures": [failure.describe() for failure in self.failures],
        }
