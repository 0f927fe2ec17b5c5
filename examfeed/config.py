from __future__ import annotations

import math
import os
from dataclasses import dataclass, fields
from typing import Any, Mapping

from examfeed.ingest.http import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT, MIN_BODY_BYTES, PoliteHttpClient

ENV_PREFIX = "EXAMFEED_"


@dataclass(frozen=True, slots=True)
class FeedConfig:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    min_body_bytes: int = MIN_BODY_BYTES
    user_agent: str = DEFAULT_USER_AGENT
    max_workers: int = 16
    max_errors: int = 20
    cache_max_age: int = 900
    stale_while_revalidate: int = 3600
    requests_per_second: float = 0.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.timeout_seconds) or self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be a positive number.")
        if self.requests_per_second < 0:
            raise ValueError("requests_per_second must not be negative.")
        for field_name in ("min_body_bytes", "max_errors", "cache_max_age", "stale_while_revalidate"):
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must not be negative.")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1.")
        if not self.user_agent.strip():
            raise ValueError("user_agent must not be empty.")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> FeedConfig:
        values = payload or {}
        kwargs: dict[str, Any] = {}
        for field in fields(cls):
            if field.name not in values or values[field.name] in (None, ""):
                continue
            caster = type(getattr(_DEFAULTS, field.name))
            kwargs[field.name] = caster(values[field.name])
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FeedConfig:
        """Read ``EXAMFEED_<FIELD>`` variables, e.g. ``EXAMFEED_TIMEOUT_SECONDS=10``."""

        source = os.environ if environ is None else environ
        return cls.from_mapping(
            {
                key[len(ENV_PREFIX):].lower(): value
                for key, value in source.items()
                if key.startswith(ENV_PREFIX)
            }
        )

    @property
    def cache_control(self) -> str:
        return f"public, s-maxage={self.cache_max_age}, stale-while-revalidate={self.stale_while_revalidate}"

    def build_http_client(self) -> PoliteHttpClient:
        return PoliteHttpClient(
            timeout_seconds=self.timeout_seconds,
            user_agent=self.user_agent,
            min_body_bytes=self.min_body_bytes,
            requests_per_second=self.requests_per_second,
        )

    def to_dict(self) -> dict[str, Any]:
        return {field.name: getattr(self, field.name) for field in fields(self)}


_DEFAULTS = FeedConfig()
