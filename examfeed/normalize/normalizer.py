from __future__ import annotations

from typing import Iterable, Optional

from examfeed.normalize.canonical_url import canonicalize_url
from examfeed.normalize.classify import classify_channel, extract_categories
from examfeed.normalize.dates import parse_date
from examfeed.normalize.schema import NormalizedRecord, RawCandidate


def clean_text(value: Optional[str]) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split())


def _optional_text(value: Optional[str]) -> Optional[str]:
    cleaned = clean_text(value)
    return cleaned or None


def merge_categories(*groups: Iterable[str]) -> list[str]:
    merged = {tag.strip().upper() for group in groups for tag in group if tag and tag.strip()}
    return sorted(merged)


def normalize_candidate(candidate: RawCandidate) -> NormalizedRecord | None:
    title = clean_text(candidate.title)
    url = canonicalize_url(candidate.url)
    if not title or not url:
        return None

    date_text = _optional_text(candidate.date_text)
    return NormalizedRecord(
        title=title,
        url=url,
        channel=classify_channel(title, candidate.channel_hint),
        source=clean_text(candidate.source),
        date=parse_date(date_text),
        date_text=date_text,
        categories=merge_categories(candidate.categories, extract_categories(title)),
        size=_optional_text(candidate.size),
        pdf=canonicalize_url(candidate.pdf_url),
        view=canonicalize_url(candidate.view_url),
    )


def normalize_candidates(candidates: Iterable[RawCandidate]) -> list[NormalizedRecord]:
    normalized: list[NormalizedRecord] = []
    for candidate in candidates:
        record = normalize_candidate(candidate)
        if record is not None:
            normalized.append(record)
    return normalized
