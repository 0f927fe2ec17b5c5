from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from examfeed.ingest.aggregate import run_all, select_sources, split_patterns
from examfeed.ingest.base import SourceDescriptor
from examfeed.normalize.normalizer import normalize_candidates
from examfeed.normalize.schema import FeedResult
from examfeed.rank.merge import merge_and_rank

logger = logging.getLogger(__name__)


def build_feed(
    sources: Sequence[SourceDescriptor],
    http_client: Any,
    *,
    channels: Optional[Iterable[str]] = None,
    source_filters: Optional[Iterable[str]] = None,
    limit: Optional[int] = None,
    max_workers: Optional[int] = None,
    raw_root: Path | None = None,
) -> FeedResult:
    """One stateless fetch, extract, classify, merge and rank pass."""

    source_filters = split_patterns(source_filters)
    selected = select_sources(sources, source_filters)
    aggregate = run_all(selected, http_client, max_workers=max_workers, raw_root=raw_root)
    records = normalize_candidates(aggregate.candidates)
    items = merge_and_rank(records, channels=channels, sources=source_filters, limit=limit)
    logger.info(
        "Feed built sources=%d candidates=%d records=%d items=%d errors=%d",
        len(selected),
        len(aggregate.candidates),
        len(records),
        len(items),
        len(aggregate.errors),
    )
    return FeedResult(
        items=items,
        updated_at=datetime.now(tz=UTC),
        errors=aggregate.errors,
        source_results=aggregate.source_results,
    )
