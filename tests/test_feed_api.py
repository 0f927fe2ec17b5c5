from __future__ import annotations

from pathlib import Path

from app.helpers import parse_flag, parse_limit, split_csv
from app.main import create_app
from examfeed.config import FeedConfig
from examfeed.ingest.base import LINK_PROXIMITY, PageDescriptor, SourceDescriptor
from examfeed.ingest.errors import HttpError

RESOURCES = Path(__file__).resolve().parent / "resources"


class _FixtureHttpClient:
    def __init__(self) -> None:
        self.pages = {
            "https://testbook.com/blog/latest-govt-jobs/": (RESOURCES / "blog_listing.html").read_text(encoding="utf-8"),
            "https://ssc.gov.in/notice-board": (RESOURCES / "ssc_notice_board.html").read_text(encoding="utf-8"),
        }

    def get_html(self, url: str) -> str:
        if url not in self.pages:
            raise HttpError(url, 404)
        return self.pages[url]

    def close(self) -> None:
        raise AssertionError("injected clients are owned by the caller")


def _sources() -> list[SourceDescriptor]:
    return [
        SourceDescriptor(
            name="Testbook",
            base_url="https://testbook.com",
            pages=(
                PageDescriptor(url="https://testbook.com/blog/latest-govt-jobs/", channel="jobs"),
                PageDescriptor(url="https://testbook.com/blog/results/", channel="result"),
            ),
        ),
        SourceDescriptor(
            name="SSC",
            base_url="https://ssc.gov.in",
            pages=(
                PageDescriptor(
                    url="https://ssc.gov.in/notice-board",
                    channel="notification",
                    strategies=(LINK_PROXIMITY,),
                ),
            ),
        ),
    ]


def _client():  # noqa: ANN202
    app = create_app(FeedConfig(max_workers=2), sources=_sources(), http_client=_FixtureHttpClient())
    return app.test_client()


def test_notices_returns_ranked_items_with_cache_headers() -> None:
    response = _client().get("/api/notices")

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "public, s-maxage=900, stale-while-revalidate=3600"
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    payload = response.get_json()
    assert payload["ok"] is True
    assert payload["count"] == 4
    assert "errors" not in payload
    assert [item["channel"] for item in payload["items"]] == ["admit-card", "result", "notification", "notification"]
    assert payload["items"][0]["source"] == "Testbook"
    assert set(payload["items"][0]) == {
        "title",
        "url",
        "channel",
        "date",
        "dateText",
        "categories",
        "size",
        "pdf",
        "view",
        "source",
    }


def test_notices_filters_and_limits() -> None:
    client = _client()

    only_results = client.get("/api/notices?only=result,admit-card").get_json()
    assert [item["channel"] for item in only_results["items"]] == ["admit-card", "result"]

    ssc_only = client.get("/api/notices?source=ssc").get_json()
    assert {item["source"] for item in ssc_only["items"]} == {"SSC"}

    limited = client.get("/api/notices?limit=1").get_json()
    assert limited["count"] == 1

    bad_limit = client.get("/api/notices?limit=abc").get_json()
    assert bad_limit["count"] == 4


def test_notices_debug_exposes_page_errors() -> None:
    payload = _client().get("/api/notices?debug=1").get_json()

    assert payload["errors"] == [
        "Testbook: http_error https://testbook.com/blog/results/ (HTTP 404)",
    ]


def test_notices_returns_error_shape_on_failure(monkeypatch) -> None:
    def _explode(*args, **kwargs):  # noqa: ANN002, ANN003
        raise RuntimeError("boom")

    monkeypatch.setattr("app.main.build_feed", _explode)

    response = _client().get("/api/notices")

    assert response.status_code == 500
    assert response.get_json() == {"ok": False, "error": "boom", "items": []}
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_unknown_route_uses_error_shape() -> None:
    response = _client().get("/api/missing")

    assert response.status_code == 404
    payload = response.get_json()
    assert payload["ok"] is False
    assert payload["items"] == []


def test_health_reports_configured_sources() -> None:
    assert _client().get("/api/health").get_json() == {"ok": True, "sources": 2}


def test_query_helpers() -> None:
    assert split_csv(" result, jobs ,") == ["result", "jobs"]
    assert split_csv(None) == []
    assert parse_limit("5") == 5
    assert parse_limit("-2") == 0
    assert parse_limit("ten") == 0
    assert parse_limit(None) == 0
    assert parse_flag("1") is True
    assert parse_flag("true") is True
    assert parse_flag("0") is False
    assert parse_flag(None) is False
