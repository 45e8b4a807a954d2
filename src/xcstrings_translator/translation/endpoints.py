"""Candidate base URLs for reaching the Ollama server.

On several platforms ``localhost`` resolves to ``::1`` first while Ollama
only listens on IPv4, so a configured ``http://localhost:11434`` fails even
though the server is up.  Every call therefore tries the URL as configured
and, for ``localhost``, the same URL pinned to ``127.0.0.1``.
"""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

_LOOPBACK_HOST = "localhost"
_LOOPBACK_IPV4 = "127.0.0.1"


def normalize_base_url(base_url: str) -> str:
    """Strip trailing slashes so ``/api/...`` can be appended safely."""
    return base_url.rstrip("/")


def _ipv4_variant(normalized: str) -> str | None:
    """Return ``normalized`` with a ``localhost`` host swapped for ``127.0.0.1``."""
    try:
        parts = urlsplit(normalized)
        if not parts.scheme or not parts.netloc:
            return None
        if parts.hostname != _LOOPBACK_HOST:
            return None
        port = parts.port
    except ValueError:
        return None

    userinfo, _, _ = parts.netloc.rpartition("@")
    netloc = _LOOPBACK_IPV4 if port is None else f"{_LOOPBACK_IPV4}:{port}"
    if userinfo:
        netloc = f"{userinfo}@{netloc}"
    return normalize_base_url(urlunsplit(parts._replace(netloc=netloc)))


def candidate_base_urls(base_url: str) -> list[str]:
    """Expand one configured base URL into the ordered list of URLs to try.

    The first element is always the normalized input.  Unparseable input is
    not an error here; the connection attempt downstream reports it.

    Examples:
        >>> candidate_base_urls("http://localhost:11434/")
        ['http://localhost:11434', 'http://127.0.0.1:11434']
        >>> candidate_base_urls("http://example.com")
        ['http://example.com']
    """
    normalized = normalize_base_url(base_url)
    candidates = [normalized]
    variant = _ipv4_variant(normalized)
    if variant is not None:
        candidates.append(variant)
    return list(dict.fromkeys(candidates))
