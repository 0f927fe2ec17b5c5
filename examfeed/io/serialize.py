from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from examfeed.normalize.dates import format_iso
from examfeed.normalize.schema import FeedResult, NormalizedRecord

DEFAULT_MAX_ERRORS = 20


def _jsonable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, datetime):
        return format_iso(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def record_to_payload(record: NormalizedRecord) -> dict[str, Any]:
    return {
        "title": record.title,
        "url": record.url,
        "channel": record.channel,
        "date": record.date,
        "dateText": record.date_text,
        "categories": list(record.categories or []),
        "size": record.size,
        "pdf": record.pdf,
        "view": record.view,
        "source": record.source,
    }


def feed_to_payload(
    result: FeedResult,
    *,
    include_errors: bool = False,
    max_errors: int = DEFAULT_MAX_ERRORS,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ok": True,
        "updatedAt": format_iso(result.updated_at),
        "count": result.count,
        "items": [record_to_payload(record) for record in result.items],
    }
    if include_errors:
        payload["errors"] = list(result.errors[: max(0, max_errors)])
    return payload


def error_payload(error: BaseException | str) -> dict[str, Any]:
    return {"ok": False, "error": str(error), "items": []}


def write_json_atomic(payload: dict[str, Any], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.parent / f"{output_path.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_text(json.dumps(_jsonable(payload), indent=2, sort_keys=True), encoding="utf-8")
        temp_path.replace(output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
