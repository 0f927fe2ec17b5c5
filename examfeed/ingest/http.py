from __future__ import annotations

import logging
import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Optional

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from examfeed.ingest.errors import EmptyBody, FetchError, FetchTimeout, HttpError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
DEFAULT_HEADERS = {
    "Accept": "text/html,*/*",
    "Accept-Language": "en-IN,en;q=0.9",
}
DEFAULT_TIMEOUT_SECONDS = 12.0
MIN_BODY_BYTES = 500
logger = logging.getLogger(__name__)
_SLOW_REQUEST_SECONDS = 5.0
_CHUNK_SIZE = 16_384


@dataclass(slots=True)
class PoliteHttpClient:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    min_body_bytes: int = MIN_BODY_BYTES
    requests_per_second: float = 0.0
    max_retries: int = 0
    backoff_factor: float = 0.5
    session: Optional[requests.Session] = None
    _session: requests.Session = field(init=False, repr=False)
    _last_request_monotonic: float = field(init=False, default=0.0)
    _rate_limit_lock: threading.Lock = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive.")
        if self.session is not None:
            self._session = self.session
        else:
            self._session = requests.Session()
            retry = Retry(
                total=self.max_retries,
                connect=self.max_retries,
                read=self.max_retries,
                status=self.max_retries,
                backoff_factor=self.backoff_factor,
                status_forcelist=(429, 500, 502, 503, 504),
                allowed_methods=frozenset({"GET"}),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry, pool_maxsize=32)
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
        self._session.headers.update({"User-Agent": self.user_agent, **DEFAULT_HEADERS})
        self._last_request_monotonic = 0.0
        self._rate_limit_lock = threading.Lock()

    def close(self) -> None:
        self._session.close()

    @property
    def timeout_tuple(self) -> tuple[float, float]:
        connect_timeout = max(1.0, min(self.timeout_seconds, 5.0))
        read_timeout = max(connect_timeout, self.timeout_seconds)
        return connect_timeout, read_timeout

    def get_html(self, url: str) -> str:
        """GET `url` and return its markup, or raise a FetchError subclass.

        The whole exchange (connect, headers and streamed body) shares one
        wall-clock budget of `timeout_seconds`. The exchange runs on a helper
        thread; the caller stops waiting at the deadline, and a timer aborts the
        connection so a server dripping bytes cannot pin the helper either.
        """

        self._sleep_for_rate_limit()
        started_at = time.monotonic()
        deadline = started_at + self.timeout_seconds
        outcome: dict[str, object] = {}
        finished = threading.Event()
        worker = threading.Thread(
            target=self._fetch_into,
            args=(url, deadline, outcome, finished),
            name="fetch",
            daemon=True,
        )
        worker.start()
        if not finished.wait(self.timeout_seconds):
            logger.warning("HTTP GET abandoned after %.1fs %s", self.timeout_seconds, url)
            raise FetchTimeout(url, self.timeout_seconds)

        error = outcome.get("error")
        if isinstance(error, BaseException):
            raise error
        body, encoding = outcome["body"]

        elapsed = time.monotonic() - started_at
        if elapsed > _SLOW_REQUEST_SECONDS:
            logger.warning("Slow HTTP GET %.3fs %s", elapsed, url)
        if len(body) < self.min_body_bytes:
            raise EmptyBody(url, len(body), self.min_body_bytes)
        try:
            return body.decode(encoding, errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")

    def _fetch_into(self, url: str, deadline: float, outcome: dict[str, object], finished: threading.Event) -> None:
        try:
            outcome["body"] = self._fetch_body(url, deadline)
        except FetchError as exc:
            outcome["error"] = exc
        except Exception as exc:
            outcome["error"] = FetchError(url, f"{type(exc).__name__}: {exc}")
        finally:
            finished.set()

    def _fetch_body(self, url: str, deadline: float) -> tuple[bytes, str]:
        try:
            response = self._session.get(
                url,
                timeout=self._remaining_timeout(deadline),
                allow_redirects=True,
                stream=True,
            )
        except requests.Timeout as exc:
            raise FetchTimeout(url, self.timeout_seconds) from exc
        except requests.RequestException as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc

        abort_timer = threading.Timer(max(0.0, deadline - time.monotonic()), _abort_response, args=(response,))
        abort_timer.daemon = True
        abort_timer.start()
        try:
            if not 200 <= response.status_code < 300:
                raise HttpError(url, response.status_code)
            body = self._read_body(response, url=url, deadline=deadline)
        finally:
            abort_timer.cancel()
            response.close()
        return body, _response_encoding(response)

    def _remaining_timeout(self, deadline: float) -> tuple[float, float]:
        remaining = max(0.001, deadline - time.monotonic())
        connect_timeout, read_timeout = self.timeout_tuple
        return min(connect_timeout, remaining), min(read_timeout, remaining)

    def _read_body(self, response: Response, *, url: str, deadline: float) -> bytes:
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if time.monotonic() > deadline:
                    raise FetchTimeout(url, self.timeout_seconds)
                if chunk:
                    chunks.append(chunk)
        except FetchTimeout:
            raise
        except Exception as exc:
            # A read cut short by the abort timer surfaces as a protocol or I/O error.
            if time.monotonic() >= deadline:
                raise FetchTimeout(url, self.timeout_seconds) from exc
            if isinstance(exc, requests.Timeout):
                raise FetchTimeout(url, self.timeout_seconds) from exc
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc
        if time.monotonic() > deadline:
            raise FetchTimeout(url, self.timeout_seconds)
        return b"".join(chunks)

    def _sleep_for_rate_limit(self) -> None:
        if self.requests_per_second <= 0:
            return
        min_interval = 1.0 / self.requests_per_second
        with self._rate_limit_lock:
            elapsed = time.monotonic() - self._last_request_monotonic
            sleep_seconds = min_interval - elapsed
            if sleep_seconds > 0:
                time.sleep(sleep_seconds)
            self._last_request_monotonic = time.monotonic()


def _response_encoding(response: Response) -> str:
    content_type = response.headers.get("Content-Type", "")
    if "charset=" in content_type.lower() and response.encoding:
        return response.encoding
    return "utf-8"


def _abort_response(response: Response) -> None:
    """Shut the socket down so a read blocked in another thread returns at once."""

    connection = getattr(getattr(response, "raw", None), "_connection", None)
    sock = getattr(connection, "sock", None)
    if sock is not None:
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            logger.debug("Socket already closed while aborting %s", getattr(response, "url", ""))
    response.close()
