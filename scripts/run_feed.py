from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from examfeed.config import FeedConfig
from examfeed.feed import build_feed
from examfeed.ingest.registry import register_sources
from examfeed.io.serialize import feed_to_payload, write_json_atomic
from examfeed.normalize.dates import ISO_FORMAT

logger = logging.getLogger("run_feed")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the exam notices feed once and write it to disk.")
    parser.add_argument("--only", type=str, default=None, help="Comma-separated channels to keep.")
    parser.add_argument("--source", type=str, default=None, help="Comma-separated source name substrings.")
    parser.add_argument("--limit", type=int, default=0, help="Maximum items after ranking. 0 keeps all.")
    parser.add_argument("--timeout-seconds", type=float, default=None)
    parser.add_argument("--max-workers", type=int, default=None)
    parser.add_argument("--output", type=Path, default=ROOT_DIR / "data" / "processed" / "notices.json")
    parser.add_argument("--raw-dir", type=Path, default=None, help="Archive fetched HTML per source here.")
    parser.add_argument("--report-dir", type=Path, default=ROOT_DIR / "reports" / "feed_runs")
    return parser.parse_args(argv)


def _resolve_repo_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return ROOT_DIR / path


def _exception_summary(exc: Exception) -> dict[str, str]:
    return {"type": type(exc).__name__, "message": str(exc)}


def _run_status(source_reports: list[dict[str, Any]], run_exception: dict[str, str] | None) -> str:
    statuses = [entry["status"] for entry in source_reports]
    if run_exception is not None or not statuses:
        return "failed"
    if all(status == "failed" for status in statuses):
        return "failed"
    if all(status == "succeeded" for status in statuses):
        return "success"
    return "partial"


def run_feed(
    *,
    config: FeedConfig | None = None,
    only: str | None = None,
    source: str | None = None,
    limit: int = 0,
    output_path: Path | None = None,
    raw_dir: Path | None = None,
    report_dir: Path | None = None,
    http_client: Any = None,
) -> dict[str, Any]:
    started_at = datetime.now(tz=UTC)
    feed_config = config or FeedConfig.from_env()
    resolved_output = _resolve_repo_path(output_path or (ROOT_DIR / "data" / "processed" / "notices.json"))
    resolved_raw_dir = _resolve_repo_path(raw_dir) if raw_dir is not None else None
    resolved_report_dir = _resolve_repo_path(report_dir or (ROOT_DIR / "reports" / "feed_runs"))
    report_path = resolved_report_dir / f"feed_{started_at.strftime('%Y%m%dT%H%M%SZ')}.json"

    source_reports: list[dict[str, Any]] = []
    errors: list[str] = []
    item_count = 0
    feed_written: Path | None = None
    run_exception: dict[str, str] | None = None

    client = http_client if http_client is not None else feed_config.build_http_client()
    try:
        result = build_feed(
            register_sources(),
            client,
            channels=only,
            source_filters=source,
            limit=limit,
            max_workers=feed_config.max_workers,
            raw_root=resolved_raw_dir,
        )
        source_reports = [entry.to_dict() for entry in result.source_results]
        errors = list(result.errors)
        item_count = result.count
        write_json_atomic(
            feed_to_payload(result, include_errors=True, max_errors=feed_config.max_errors),
            resolved_output,
        )
        feed_written = resolved_output
        for entry in source_reports:
            logger.info("Source=%s status=%s records=%d", entry["source"], entry["status"], entry["records"])
    except Exception as exc:
        run_exception = _exception_summary(exc)
        logger.exception("Feed run failed.")
    finally:
        if http_client is None:
            client.close()

        finished_at = datetime.now(tz=UTC)
        status = _run_status(source_reports, run_exception)
        report_payload: dict[str, Any] = {
            "status": status,
            "run_started_at": started_at.strftime(ISO_FORMAT),
            "run_finished_at": finished_at.strftime(ISO_FORMAT),
            "duration_seconds": round((finished_at - started_at).total_seconds(), 3),
            "config": feed_config.to_dict(),
            "filters": {"only": only, "source": source, "limit": limit},
            "sources": {
                "attempted_count": len(source_reports),
                "succeeded": [entry["source"] for entry in source_reports if entry["status"] == "succeeded"],
                "partial": [entry["source"] for entry in source_reports if entry["status"] == "partial"],
                "failed": [entry["source"] for entry in source_reports if entry["status"] == "failed"],
                "details": source_reports,
            },
            "records": {"items": item_count},
            "errors": errors,
            "artifact_paths": {
                "feed": str(feed_written.resolve()) if feed_written else None,
                "report": str(report_path.resolve()),
            },
            "exception_summary": run_exception,
        }
        write_json_atomic(report_payload, report_path)
    return report_payload


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    overrides: dict[str, Any] = FeedConfig.from_env().to_dict()
    if args.timeout_seconds is not None:
        overrides["timeout_seconds"] = args.timeout_seconds
    if args.max_workers is not None:
        overrides["max_workers"] = args.max_workers

    report = run_feed(
        config=FeedConfig.from_mapping(overrides),
        only=args.only,
        source=args.source,
        limit=args.limit,
        output_path=args.output,
        raw_dir=args.raw_dir,
        report_dir=args.report_dir,
    )

    print(f"Run status: {report['status']}")
    print(f"Items: {report['records']['items']}")
    print(f"Wrote feed: {report['artifact_paths']['feed']}")
    print(f"Wrote feed report: {report['artifact_paths']['report']}")
    return 0 if report["status"] != "failed" else 1


if __name__ == "__main__":
    raise SystemExit(main())
