from __future__ import annotations

import json
from pathlib import Path

from examfeed.config import FeedConfig
from examfeed.ingest.base import PageDescriptor, SourceDescriptor
from examfeed.ingest.errors import FetchTimeout
from scripts.run_feed import _run_status, main, parse_args, run_feed

RESOURCES = Path(__file__).resolve().parent / "resources"


class _FakeHttpClient:
    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages

    def get_html(self, url: str) -> str:
        if url not in self.pages:
            raise FetchTimeout(url, 12.0)
        return self.pages[url]


def _sources() -> list[SourceDescriptor]:
    return [
        SourceDescriptor(
            name="Testbook",
            base_url="https://testbook.com",
            pages=(PageDescriptor(url="https://testbook.com/blog/latest-govt-jobs/", channel="jobs"),),
        ),
        SourceDescriptor(
            name="Adda247",
            base_url="https://www.adda247.com",
            pages=(PageDescriptor(url="https://www.adda247.com/jobs/", channel="jobs"),),
        ),
    ]


def test_run_feed_writes_feed_and_report(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr("scripts.run_feed.register_sources", _sources)
    client = _FakeHttpClient(
        {"https://testbook.com/blog/latest-govt-jobs/": (RESOURCES / "blog_listing.html").read_text(encoding="utf-8")}
    )

    report = run_feed(
        config=FeedConfig(max_workers=2),
        output_path=tmp_path / "notices.json",
        raw_dir=tmp_path / "raw",
        report_dir=tmp_path / "reports",
        http_client=client,
    )

    assert report["status"] == "partial"
    assert report["sources"]["succeeded"] == ["Testbook"]
    assert report["sources"]["failed"] == ["Adda247"]
    assert report["records"]["items"] == 2
    assert report["errors"][0].startswith("Adda247: timeout")

    feed = json.loads((tmp_path / "notices.json").read_text(encoding="utf-8"))
    assert feed["ok"] is True
    assert feed["count"] == 2
    assert len(feed["errors"]) == 1

    persisted = json.loads(Path(report["artifact_paths"]["report"]).read_text(encoding="utf-8"))
    assert persisted["status"] == "partial"
    assert persisted["config"]["max_workers"] == 2
    assert list((tmp_path / "raw" / "testbook").glob("*.html"))


def test_run_feed_reports_failure_when_every_source_fails(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr("scripts.run_feed.register_sources", _sources)

    report = run_feed(
        config=FeedConfig(max_workers=2),
        output_path=tmp_path / "notices.json",
        report_dir=tmp_path / "reports",
        http_client=_FakeHttpClient({}),
    )

    assert report["status"] == "failed"
    assert report["sources"]["failed"] == ["Testbook", "Adda247"]


def test_run_feed_records_unexpected_exceptions(monkeypatch, tmp_path: Path) -> None:
    def _raise(*args, **kwargs):  # noqa: ANN002, ANN003
        raise TimeoutError("forced timeout")

    monkeypatch.setattr("scripts.run_feed.build_feed", _raise)

    report = run_feed(
        config=FeedConfig(),
        output_path=tmp_path / "notices.json",
        report_dir=tmp_path / "reports",
        http_client=_FakeHttpClient({}),
    )

    assert report["status"] == "failed"
    assert report["exception_summary"]["type"] == "TimeoutError"
    assert report["artifact_paths"]["feed"] is None
    assert Path(report["artifact_paths"]["report"]).exists()


def test_run_status_levels() -> None:
    assert _run_status([{"status": "succeeded"}], None) == "success"
    assert _run_status([{"status": "succeeded"}, {"status": "failed"}], None) == "partial"
    assert _run_status([{"status": "failed"}, {"status": "failed"}], None) == "failed"
    assert _run_status([], None) == "failed"
    assert _run_status([{"status": "succeeded"}], {"type": "OSError", "message": "disk"}) == "failed"


def test_parse_args_defaults() -> None:
    args = parse_args(["--only", "result", "--limit", "5"])

    assert args.only == "result"
    assert args.limit == 5
    assert args.source is None
    assert args.raw_dir is None


def test_main_exit_code_follows_run_status(monkeypatch, tmp_path: Path) -> None:
    captured: dict[str, object] = {}

    def _fake_run_feed(**kwargs):  # noqa: ANN003, ANN202
        captured.update(kwargs)
        return {
            "status": "failed",
            "records": {"items": 0},
            "artifact_paths": {"feed": None, "report": str(tmp_path / "report.json")},
        }

    monkeypatch.setattr("scripts.run_feed.run_feed", _fake_run_feed)

    exit_code = main(["--timeout-seconds", "4", "--max-workers", "3", "--source", "ssc"])

    assert exit_code == 1
    config = captured["config"]
    assert isinstance(config, FeedConfig)
    assert config.timeout_seconds == 4.0
    assert config.max_workers == 3
    assert captured["source"] == "ssc"
