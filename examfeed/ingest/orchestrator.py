from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from examfeed.ingest.base import PAGE_MODE_FIRST_SUCCESS, PageFailure, SourceDescriptor, SourceResult
from examfeed.ingest.cache import page_slug, write_raw_payload
from examfeed.ingest.errors import FetchError
from examfeed.ingest.extract import extract_candidates

logger = logging.getLogger(__name__)


def scrape_source(
    descriptor: SourceDescriptor,
    http_client: Any,
    *,
    raw_root: Path | None = None,
) -> SourceResult:
    """Fetch and extract every page of one source. Never raises.

    `http_client` only needs a ``get_html(url) -> str`` method. A failing page is
    recorded and skipped; it never discards what other pages produced.
    """

    result = SourceResult(source=descriptor.name)
    fetched_at = datetime.now(tz=UTC)

    for page in descriptor.pages:
        result.pages_attempted += 1
        try:
            html = http_client.get_html(page.url)
        except FetchError as exc:
            result.failures.append(
                PageFailure(source=descriptor.name, url=page.url, reason=exc.reason, message=exc.message)
            )
            logger.warning("Source=%s page fetch failed: %s (%s)", descriptor.name, page.url, exc.reason)
            continue
        except Exception as exc:
            result.failures.append(
                PageFailure(
                    source=descriptor.name,
                    url=page.url,
                    reason="fetch_failed",
                    message=f"{type(exc).__name__}: {exc}",
                )
            )
            logger.warning("Source=%s unexpected fetch error: %s", descriptor.name, page.url, exc_info=True)
            continue

        if raw_root is not None:
            _archive_page(descriptor.name, page.url, html, raw_root=raw_root, fetched_at=fetched_at)

        try:
            candidates = extract_candidates(html, source=descriptor, page=page)
        except Exception as exc:
            result.failures.append(
                PageFailure(
                    source=descriptor.name,
                    url=page.url,
                    reason="extract_failed",
                    message=f"{type(exc).__name__}: {exc}",
                )
            )
            logger.warning("Source=%s extraction failed: %s", descriptor.name, page.url, exc_info=True)
            continue

        result.pages_succeeded += 1
        result.candidates.extend(candidates)
        if descriptor.page_mode == PAGE_MODE_FIRST_SUCCESS and candidates:
            break

    logger.info(
        "Source=%s pages=%d/%d candidates=%d",
        descriptor.name,
        result.pages_succeeded,
        result.pages_attempted,
        len(result.candidates),
    )
    return result


def _archive_page(source_name: str, url: str, html: str, *, raw_root: Path, fetched_at: datetime) -> None:
    try:
        write_raw_payload(
            source_name=source_name,
            payload=html.encode("utf-8"),
            extension="html",
            raw_root=raw_root,
            timestamp=fetched_at,
            slug=page_slug(url),
        )
    except OSError:
        logger.warning("Could not archive %s page %s", source_name, url, exc_info=True)
