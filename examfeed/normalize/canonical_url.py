from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse

_REJECTED_SCHEMES = ("javascript:", "mailto:", "data:", "tel:")
_DEFAULT_PORTS = {"http": 80, "https": 443}


def is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def canonicalize_url(href: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    """Resolve `href` against `base_url` and return the identity form, or None.

    Only scheme and host are case-folded; path and query are kept verbatim since
    many notice boards serve case-sensitive file paths.
    """

    if href is None:
        return None
    cleaned = href.strip()
    if not cleaned or cleaned.startswith("#"):
        return None
    if cleaned.lower().startswith(_REJECTED_SCHEMES):
        return None

    absolute = urljoin(base_url, cleaned) if base_url else cleaned
    try:
        parsed = urlparse(absolute)
        port = parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not parsed.hostname or parsed.username:
        return None

    netloc = parsed.hostname.lower()
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"
    path = parsed.path or "/"
    return urlunparse((scheme, netloc, path, parsed.params, parsed.query, ""))
