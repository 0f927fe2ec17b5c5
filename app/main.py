from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import apply_feed_headers, parse_flag, parse_limit, split_csv
from examfeed.config import FeedConfig
from examfeed.feed import build_feed
from examfeed.ingest.base import SourceDescriptor
from examfeed.ingest.registry import register_sources
from examfeed.io.serialize import error_payload, feed_to_payload

logger = logging.getLogger(__name__)


def create_app(
    config: FeedConfig | None = None,
    *,
    sources: Sequence[SourceDescriptor] | None = None,
    http_client: Any = None,
) -> Flask:
    """Build the notices API.

    ``sources`` and ``http_client`` are injectable so tests never touch the
    network; without a client each request builds (and closes) its own.
    """

    feed_config = config or FeedConfig.from_env()
    configured_sources = list(sources) if sources is not None else register_sources()

    app = Flask(__name__)
    app.config["FEED_CONFIG"] = feed_config

    @app.after_request
    def _allow_any_origin(response):  # noqa: ANN001, ANN202
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_error(error: HTTPException):  # noqa: ANN202
        return jsonify(error_payload(error.description or error.name)), error.code

    @app.errorhandler(Exception)
    def _handle_unexpected_error(error: Exception):  # noqa: ANN202
        logger.exception("Unhandled error while serving %s", request.path)
        return jsonify(error_payload(error)), 500

    @app.get("/api/health")
    def health():  # noqa: ANN202
        return jsonify({"ok": True, "sources": len(configured_sources)})

    @app.get("/api/notices")
    def notices():  # noqa: ANN202
        channels = split_csv(request.args.get("only"))
        source_filters = split_csv(request.args.get("source"))
        limit = parse_limit(request.args.get("limit"))
        debug = parse_flag(request.args.get("debug"))

        client = http_client if http_client is not None else feed_config.build_http_client()
        try:
            result = build_feed(
                configured_sources,
                client,
                channels=channels,
                source_filters=source_filters,
                limit=limit,
                max_workers=feed_config.max_workers,
            )
            payload = feed_to_payload(result, include_errors=debug, max_errors=feed_config.max_errors)
        except Exception as exc:
            logger.warning("Notice feed request failed.", exc_info=True)
            return jsonify(error_payload(exc)), 500
        finally:
            if http_client is None:
                client.close()

        response = jsonify(payload)
        return apply_feed_headers(response, cache_control=feed_config.cache_control)

    return app


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the exam notices feed over HTTP.")
    parser.add_argument("--host", type=str, default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
