from __future__ import annotations

from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https", "mailto")


def is_valid_url(url: object) -> bool:
    """Return True when *url* parses and uses an allowed scheme (http, https, mailto)."""
    if not isinstance(url, str):
        return False
    candidate = url.strip()
    if not candidate or candidate != url or any(ch.isspace() for ch in candidate):
        return False
    try:
        parts = urlsplit(candidate)
        # Accessing port validates it (raises ValueError on junk like :abc)
        parts.port
    except ValueError:
        return False
    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        return False
    if scheme == "mailto":
        return bool(parts.path)
    return bool(parts.hostname)
