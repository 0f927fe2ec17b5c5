from __future__ import annotations


class FetchError(Exception):
    """A page could not be turned into usable markup."""

    reason = "fetch_failed"

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
        self.message = message


class FetchTimeout(FetchError):
    reason = "timeout"

    def __init__(self, url: str, timeout_seconds: float) -> None:
        super().__init__(url, f"no complete response within {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class HttpError(FetchError):
    reason = "http_error"

    def __init__(self, url: str, status: int) -> None:
        super().__init__(url, f"HTTP {status}")
        self.status = status


class EmptyBody(FetchError):
    reason = "empty_body"

    def __init__(self, url: str, size: int, minimum: int) -> None:
        super().__init__(url, f"body of {size} bytes is below the {minimum}-byte minimum")
        self.size = size
        self.minimum = minimum
