"""Extraction strategies that turn notice-board markup into RawCandidate lists.

Every strategy tolerates missing structure: an element that does not have the
expected shape is skipped, never raised on. Strategies are looked up by name in
``STRATEGIES`` so that sources pick their chain in configuration.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from bs4 import BeautifulSoup, Tag

from examfeed.ingest.base import (
    HEADING_BLOCKS,
    LINK_PROXIMITY,
    LISTING,
    TABLE,
    PageDescriptor,
    SourceDescriptor,
)
from examfeed.normalize.canonical_url import canonicalize_url
from examfeed.normalize.classify import extract_categories
from examfeed.normalize.dates import extract_near_date, extract_near_size
from examfeed.normalize.schema import ADMIT_CARD, NEWS, NOTIFICATION, RESULT, RawCandidate

logger = logging.getLogger(__name__)

Markup = Union[str, bytes, BeautifulSoup]

# Container sweeps, tried in order until one yields items.
LISTING_CONTAINER_TIERS: tuple[str, ...] = (
    "article",
    ".post, .blog-post, .td-module-container, .elementor-post, li, .card",
)
TITLE_LINK_SELECTOR = (
    "h2 a[href], h3 a[href], .entry-title a[href], a[rel='bookmark'], "
    ".post-title a[href], .td-module-title a[href]"
)
DATE_TEXT_SELECTOR = "[class*='date'], .posted-on, .post-date, .elementor-post-date"
DOCUMENT_LINK_SELECTOR = 'a[href$=".pdf" i], a[href*=".pdf?" i]'
BLOCK_ANCESTORS = ["li", "div", "tr", "section", "article"]

_VIEW_TEXT_PATTERN = re.compile(r"view|preview|eye|details", re.IGNORECASE)
_WS_PATTERN = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class ExtractionContext:
    base_url: str
    source_name: str
    channel_hint: Optional[str] = None
    sections: tuple[tuple[str, str], ...] = ()
    heading_tag: str = "h2"

    @classmethod
    def for_page(cls, source: SourceDescriptor, page: PageDescriptor) -> ExtractionContext:
        return cls(
            base_url=source.base_url,
            source_name=source.name,
            channel_hint=page.channel,
            sections=page.sections,
            heading_tag=page.heading_tag,
        )


def _soup(markup: Markup) -> BeautifulSoup:
    if isinstance(markup, BeautifulSoup):
        return markup
    return BeautifulSoup(markup, "lxml")


def _text(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return _WS_PATTERN.sub(" ", node.get_text(" ", strip=True)).strip()


def _candidate(
    context: ExtractionContext,
    *,
    title: str,
    href: Optional[str],
    channel_hint: Optional[str] = None,
    date_text: Optional[str] = None,
    **extra,
) -> RawCandidate | None:
    cleaned_title = _WS_PATTERN.sub(" ", title or "").strip()
    url = canonicalize_url(href, context.base_url)
    if not cleaned_title or not url:
        return None
    return RawCandidate(
        source=context.source_name,
        title=cleaned_title,
        url=url,
        date_text=date_text or None,
        channel_hint=channel_hint if channel_hint is not None else context.channel_hint,
        **extra,
    )


def _listing_date_text(container: Tag) -> Optional[str]:
    time_tag = container.select_one("time")
    if time_tag is not None:
        machine_date = (time_tag.get("datetime") or "").strip()
        if machine_date:
            return machine_date
        visible = _text(time_tag)
        if visible:
            return visible
    date_node = container.select_one(DATE_TEXT_SELECTOR)
    return _text(date_node) or None


def _sweep_containers(soup: BeautifulSoup, selector: str, context: ExtractionContext) -> list[RawCandidate]:
    items: list[RawCandidate] = []
    for container in soup.select(selector):
        link = container.select_one(TITLE_LINK_SELECTOR)
        if link is None:
            continue
        candidate = _candidate(
            context,
            title=_text(link),
            href=link.get("href"),
            date_text=_listing_date_text(container),
        )
        if candidate is not None:
            items.append(candidate)
    return items


def extract_listing(markup: Markup, context: ExtractionContext) -> list[RawCandidate]:
    """Article/card listings as rendered by most blog and news themes."""

    soup = _soup(markup)
    for selector in LISTING_CONTAINER_TIERS:
        items = _sweep_containers(soup, selector, context)
        if items:
            return items
    return []


def _row_channel_hint(type_text: str, fallback: Optional[str]) -> Optional[str]:
    lowered = type_text.lower()
    if "result" in lowered:
        return RESULT
    if "admit" in lowered:
        return ADMIT_CARD
    if "noti" in lowered:
        return NOTIFICATION
    return fallback or NEWS


def extract_table(markup: Markup, context: ExtractionContext) -> list[RawCandidate]:
    """Rows shaped ``type | title link | date``; anything else is skipped."""

    soup = _soup(markup)
    items: list[RawCandidate] = []
    for row in soup.select("table tr"):
        cells = row.find_all("td", recursive=False)
        if len(cells) < 3:
            continue
        link = cells[1].find("a", href=True)
        if link is None:
            continue
        candidate = _candidate(
            context,
            title=_text(link),
            href=link.get("href"),
            channel_hint=_row_channel_hint(_text(cells[0]), context.channel_hint),
            date_text=_text(cells[2]) or None,
        )
        if candidate is not None:
            items.append(candidate)
    return items


def _section_channel(heading_text: str, sections: tuple[tuple[str, str], ...]) -> Optional[str]:
    lowered = heading_text.lower()
    for label, channel in sections:
        if label.lower() in lowered:
            return channel
    return None


def extract_heading_blocks(markup: Markup, context: ExtractionContext) -> list[RawCandidate]:
    """Links grouped under known section headings, up to the next same-level heading."""

    soup = _soup(markup)
    items: list[RawCandidate] = []
    for heading in soup.find_all(context.heading_tag):
        channel = _section_channel(_text(heading), context.sections)
        if channel is None:
            continue
        for sibling in heading.next_siblings:
            if not isinstance(sibling, Tag):
                continue
            if sibling.name == context.heading_tag:
                break
            anchors = [sibling] if sibling.name == "a" and sibling.get("href") else sibling.select("a[href]")
            for anchor in anchors:
                candidate = _candidate(
                    context,
                    title=_text(anchor),
                    href=anchor.get("href"),
                    channel_hint=channel,
                )
                if candidate is not None:
                    items.append(candidate)
    return items


def _view_link(block: Tag, document_link: Tag, base_url: str) -> Optional[str]:
    for anchor in block.select("a[href]"):
        if anchor is document_link:
            continue
        href = anchor.get("href") or ""
        if _VIEW_TEXT_PATTERN.search(_text(anchor)) or "view" in href.lower():
            resolved = canonicalize_url(href, base_url)
            if resolved:
                return resolved
    return None


def extract_link_proximity(markup: Markup, context: ExtractionContext) -> list[RawCandidate]:
    """Last resort: every document link, with context from its nearest block ancestor."""

    soup = _soup(markup)
    items: list[RawCandidate] = []
    for link in soup.select(DOCUMENT_LINK_SELECTOR):
        block = link.find_parent(BLOCK_ANCESTORS)
        nearby = _text(block) if block is not None else ""
        title = _text(link) or (link.get("title") or "").strip() or nearby
        document_url = canonicalize_url(link.get("href"), context.base_url)
        candidate = _candidate(
            context,
            title=title,
            href=document_url,
            date_text=extract_near_date(nearby),
            pdf_url=document_url,
            view_url=_view_link(block, link, context.base_url) if block is not None else None,
            size=extract_near_size(nearby),
            categories=extract_categories(title),
        )
        if candidate is not None:
            items.append(candidate)
    return items


STRATEGIES: dict[str, Callable[[Markup, ExtractionContext], list[RawCandidate]]] = {
    LISTING: extract_listing,
    TABLE: extract_table,
    HEADING_BLOCKS: extract_heading_blocks,
    LINK_PROXIMITY: extract_link_proximity,
}


def extract_candidates(markup: Markup, *, source: SourceDescriptor, page: PageDescriptor) -> list[RawCandidate]:
    """Run the page's strategy chain and return the first non-empty result."""

    soup = _soup(markup)
    context = ExtractionContext.for_page(source, page)
    for name in page.strategies:
        items = STRATEGIES[name](soup, context)
        if items:
            logger.debug("Source=%s page=%s strategy=%s items=%d", source.name, page.url, name, len(items))
            return items
    logger.info("Source=%s page=%s yielded no items after %s", source.name, page.url, ", ".join(page.strategies))
    return []
