from __future__ import annotations

from .aggregate import AggregateResult, run_all, select_sources
from .base import PageDescriptor, PageFailure, SourceDescriptor, SourceResult
from .cache import write_raw_payload
from .errors import EmptyBody, FetchError, FetchTimeout, HttpError
from .http import PoliteHttpClient
from .orchestrator import scrape_source
from .registry import register_sources

__all__ = [
    "AggregateResult",
    "EmptyBody",
    "FetchError",
    "FetchTimeout",
    "HttpError",
    "PageDescriptor",
    "PageFailure",
    "PoliteHttpClient",
    "SourceDescriptor",
    "SourceResult",
    "register_sources",
    "run_all",
    "scrape_source",
    "select_sources",
    "write_raw_payload",
]
