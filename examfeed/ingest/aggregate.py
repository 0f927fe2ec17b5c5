from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Sequence

from examfeed.ingest.base import PageFailure, SourceDescriptor, SourceResult
from examfeed.ingest.orchestrator import scrape_source
from examfeed.normalize.schema import RawCandidate

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 16


@dataclass(slots=True)
class AggregateResult:
    candidates: list[RawCandidate] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    source_results: list[SourceResult] = field(default_factory=list)


def split_patterns(raw: str | Iterable[str] | None) -> list[str]:
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    return [part.strip().lower() for part in parts if part and part.strip()]


def source_matches(name: str, patterns: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(pattern in lowered for pattern in patterns)


def select_sources(sources: Sequence[SourceDescriptor], patterns: Iterable[str] | None) -> list[SourceDescriptor]:
    """Keep sources whose name contains any pattern (case-insensitive); no patterns keeps all."""

    cleaned = split_patterns(patterns)
    if not cleaned:
        return list(sources)
    return [source for source in sources if source_matches(source.name, cleaned)]


def run_all(
    sources: Sequence[SourceDescriptor],
    http_client: Any,
    *,
    max_workers: int | None = None,
    raw_root: Path | None = None,
) -> AggregateResult:
    """Scrape every source concurrently and fan in once all of them settle.

    Results are collected in configuration order, so the first-seen order of
    candidates does not depend on which site answered first.
    """

    aggregate = AggregateResult()
    if not sources:
        return aggregate

    workers = max(1, min(len(sources), max_workers or DEFAULT_MAX_WORKERS))
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scrape") as executor:
        futures = [
            (source, executor.submit(scrape_source, source, http_client, raw_root=raw_root))
            for source in sources
        ]
        for source, future in futures:
            try:
                result = future.result()
            except Exception as exc:
                failure = PageFailure(
                    source=source.name,
                    url=source.base_url,
                    reason="source_failed",
                    message=f"{type(exc).__name__}: {exc}",
                )
                aggregate.source_results.append(SourceResult(source=source.name, failures=[failure]))
                aggregate.errors.append(failure.describe())
                logger.warning("Source %s failed. Continuing with remaining sources.", source.name, exc_info=True)
                continue
            aggregate.source_results.append(result)
            aggregate.candidates.extend(result.candidates)
            aggregate.errors.extend(failure.describe() for failure in result.failures)

    logger.info(
        "Aggregated sources=%d candidates=%d errors=%d",
        len(sources),
        len(aggregate.candidates),
        len(aggregate.errors),
    )
    return aggregate
