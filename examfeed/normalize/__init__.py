from __future__ import annotations

from .canonical_url import canonicalize_url
from .classify import classify_channel, extract_categories
from .dates import extract_near_date, extract_near_size, parse_date
from .normalizer import normalize_candidate, normalize_candidates
from .schema import FeedResult, NormalizedRecord, RawCandidate

__all__ = [
    "FeedResult",
    "NormalizedRecord",
    "RawCandidate",
    "canonicalize_url",
    "classify_channel",
    "extract_categories",
    "extract_near_date",
    "extract_near_size",
    "normalize_candidate",
    "normalize_candidates",
    "parse_date",
]
