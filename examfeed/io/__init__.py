"""Serialization of feed results and atomic JSON artifacts."""

from examfeed.io.serialize import error_payload, feed_to_payload, record_to_payload, write_json_atomic

__all__ = ["error_payload", "feed_to_payload", "record_to_payload", "write_json_atomic"]
