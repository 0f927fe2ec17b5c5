from __future__ import annotations

from dataclasses import asdict
from typing import Any, Iterable, Optional, Sequence

import pandas as pd

from examfeed.ingest.aggregate import source_matches, split_patterns
from examfeed.normalize.normalizer import merge_categories
from examfeed.normalize.schema import CHANNEL_PRIORITY, CHANNEL_RANK, RECORD_COLUMNS, NormalizedRecord

_UNKNOWN_CHANNEL_RANK = len(CHANNEL_PRIORITY)


def _records_to_df(records: Sequence[NormalizedRecord]) -> pd.DataFrame:
    df = pd.DataFrame([asdict(record) for record in records], columns=RECORD_COLUMNS)
    return df.astype(object).where(pd.notna(df), None)


def _df_to_records(df: pd.DataFrame) -> list[NormalizedRecord]:
    cleaned = df[RECORD_COLUMNS].astype(object).where(pd.notna(df[RECORD_COLUMNS]), None)
    return [NormalizedRecord(**row) for row in cleaned.to_dict(orient="records")]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def filter_records(
    records: Iterable[NormalizedRecord],
    *,
    channels: Optional[Iterable[str]] = None,
    sources: Optional[Iterable[str]] = None,
) -> list[NormalizedRecord]:
    """Drop incomplete records, then apply the optional channel and source allow-lists."""

    allowed_channels = set(split_patterns(channels))
    source_patterns = split_patterns(sources)
    kept: list[NormalizedRecord] = []
    for record in records:
        if not record.title or not record.url:
            continue
        if allowed_channels and record.channel not in allowed_channels:
            continue
        if source_patterns and not source_matches(record.source, source_patterns):
            continue
        kept.append(record)
    return kept


def _date_pairs_by_url(records: Sequence[NormalizedRecord]) -> dict[str, tuple[Optional[str], Optional[str]]]:
    """First observation with a parsed date per URL, else the first with any date text."""

    pairs: dict[str, tuple[Optional[str], Optional[str]]] = {}
    for record in records:
        date, date_text = _blank_to_none(record.date), _blank_to_none(record.date_text)
        current = pairs.get(record.url)
        if current is None:
            pairs[record.url] = (date, date_text)
        elif current[0] is None and (date is not None or (current[1] is None and date_text is not None)):
            pairs[record.url] = (date, date_text)
    return pairs


def dedupe_records(records: Sequence[NormalizedRecord]) -> list[NormalizedRecord]:
    """Collapse records sharing a URL, keeping first-seen order.

    Per field the first non-empty observation wins, so a later duplicate only
    fills gaps (typically the date). ``date`` and ``date_text`` travel as one
    pair from a single observation. Category tags are unioned.
    """

    if not records:
        return []

    categories_by_url: dict[str, list[str]] = {}
    for record in records:
        categories_by_url.setdefault(record.url, []).extend(record.categories or [])

    date_pairs = _date_pairs_by_url(records)

    df = _records_to_df(records).drop(columns=["categories", "date", "date_text"])
    for column in ("size", "pdf", "view"):
        df[column] = df[column].apply(_blank_to_none)

    merged = df.groupby("url", sort=False).first().reset_index()
    merged["categories"] = merged["url"].map(lambda url: merge_categories(categories_by_url[url]))
    merged["date"] = merged["url"].map(lambda url: date_pairs[url][0])
    merged["date_text"] = merged["url"].map(lambda url: date_pairs[url][1])
    return _df_to_records(merged)


def rank_records(records: Sequence[NormalizedRecord]) -> list[NormalizedRecord]:
    """Channel priority ascending, then date descending (undated last), then first-seen."""

    if not records:
        return []

    df = _records_to_df(records)
    df["_channel_rank"] = df["channel"].map(CHANNEL_RANK).fillna(_UNKNOWN_CHANNEL_RANK).astype(int)
    df["_date_key"] = df["date"].fillna("")
    df["_seen"] = range(len(df))
    df = df.sort_values(
        by=["_channel_rank", "_date_key", "_seen"],
        ascending=[True, False, True],
        kind="mergesort",
    )
    return _df_to_records(df)


def merge_and_rank(
    records: Sequence[NormalizedRecord],
    *,
    channels: Optional[Iterable[str]] = None,
    sources: Optional[Iterable[str]] = None,
    limit: Optional[int] = None,
) -> list[NormalizedRecord]:
    """Filter, dedupe by URL, rank, and only then truncate to `limit` (None or 0 keeps all)."""

    filtered = filter_records(records, channels=channels, sources=sources)
    ranked = rank_records(dedupe_records(filtered))
    if limit and int(limit) > 0:
        return ranked[: int(limit)]
    return ranked
