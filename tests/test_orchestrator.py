from __future__ import annotations

from pathlib import Path

from examfeed.ingest.base import LINK_PROXIMITY, PAGE_MODE_FIRST_SUCCESS, PageDescriptor, SourceDescriptor
from examfeed.ingest.errors import EmptyBody, HttpError
from examfeed.ingest.orchestrator import scrape_source

RESOURCES = Path(__file__).resolve().parent / "resources"


class _FakeHttpClient:
    def __init__(self, pages: dict[str, object]) -> None:
        self.pages = pages
        self.requested: list[str] = []

    def get_html(self, url: str) -> str:
        self.requested.append(url)
        outcome = self.pages[url]
        if isinstance(outcome, Exception):
            raise outcome
        return str(outcome)


def _blog_source() -> SourceDescriptor:
    return SourceDescriptor(
        name="Testbook",
        base_url="https://testbook.com",
        pages=(
            PageDescriptor(url="https://testbook.com/blog/results/", channel="result"),
            PageDescriptor(url="https://testbook.com/blog/latest-govt-jobs/", channel="jobs"),
        ),
    )


def _ssc_source() -> SourceDescriptor:
    return SourceDescriptor(
        name="SSC",
        base_url="https://ssc.gov.in",
        pages=tuple(
            PageDescriptor(url=url, channel="notification", strategies=(LINK_PROXIMITY,))
            for url in (
                "https://ssc.gov.in/notice-board",
                "https://ssc.gov.in/noticeboard",
                "https://ssc.gov.in/Notices",
            )
        ),
        page_mode=PAGE_MODE_FIRST_SUCCESS,
    )


def test_failing_page_does_not_discard_other_pages() -> None:
    listing = (RESOURCES / "blog_listing.html").read_text(encoding="utf-8")
    client = _FakeHttpClient(
        {
            "https://testbook.com/blog/results/": HttpError("https://testbook.com/blog/results/", 404),
            "https://testbook.com/blog/latest-govt-jobs/": listing,
        }
    )

    result = scrape_source(_blog_source(), client)

    assert len(result.candidates) == 2
    assert {candidate.channel_hint for candidate in result.candidates} == {"jobs"}
    assert result.pages_attempted == 2
    assert result.pages_succeeded == 1
    assert result.status == "partial"
    assert len(result.failures) == 1
    failure = result.failures[0]
    assert failure.reason == "http_error"
    assert failure.describe() == "Testbook: http_error https://testbook.com/blog/results/ (HTTP 404)"


def test_unexpected_client_errors_become_page_failures() -> None:
    client = _FakeHttpClient(
        {
            "https://testbook.com/blog/results/": RuntimeError("socket exploded"),
            "https://testbook.com/blog/latest-govt-jobs/": RuntimeError("socket exploded"),
        }
    )

    result = scrape_source(_blog_source(), client)

    assert result.candidates == []
    assert result.status == "failed"
    assert [failure.reason for failure in result.failures] == ["fetch_failed", "fetch_failed"]
    assert "RuntimeError" in result.failures[0].message


def test_extraction_crash_is_recorded_as_extract_failed(monkeypatch) -> None:
    def _explode(*args, **kwargs):  # noqa: ANN002, ANN003
        raise AttributeError("unexpected markup")

    monkeypatch.setattr("examfeed.ingest.orchestrator.extract_candidates", _explode)
    client = _FakeHttpClient({page.url: "<html></html>" for page in _blog_source().pages})

    result = scrape_source(_blog_source(), client)

    assert [failure.reason for failure in result.failures] == ["extract_failed", "extract_failed"]
    assert result.status == "failed"


def test_first_success_mode_stops_after_first_productive_page() -> None:
    notice_board = (RESOURCES / "ssc_notice_board.html").read_text(encoding="utf-8")
    client = _FakeHttpClient(
        {
            "https://ssc.gov.in/notice-board": EmptyBody("https://ssc.gov.in/notice-board", 120, 500),
            "https://ssc.gov.in/noticeboard": notice_board,
            "https://ssc.gov.in/Notices": notice_board,
        }
    )

    result = scrape_source(_ssc_source(), client)

    assert client.requested == ["https://ssc.gov.in/notice-board", "https://ssc.gov.in/noticeboard"]
    assert len(result.candidates) == 2
    assert result.failures[0].reason == "empty_body"


def test_first_success_mode_keeps_trying_pages_without_items() -> None:
    notice_board = (RESOURCES / "ssc_notice_board.html").read_text(encoding="utf-8")
    client = _FakeHttpClient(
        {
            "https://ssc.gov.in/notice-board": "<html><body>No notices today</body></html>",
            "https://ssc.gov.in/noticeboard": "<html><body>Moved</body></html>",
            "https://ssc.gov.in/Notices": notice_board,
        }
    )

    result = scrape_source(_ssc_source(), client)

    assert len(client.requested) == 3
    assert len(result.candidates) == 2
    assert result.status == "succeeded"


def test_raw_pages_are_archived_per_source(tmp_path: Path) -> None:
    listing = (RESOURCES / "blog_listing.html").read_text(encoding="utf-8")
    client = _FakeHttpClient({page.url: listing for page in _blog_source().pages})

    scrape_source(_blog_source(), client, raw_root=tmp_path)

    archived = sorted((tmp_path / "testbook").glob("*.html"))
    assert len(archived) == 2
    assert all("testbook-com-blog" in path.name for path in archived)
    assert archived[0].read_text(encoding="utf-8") == listing
