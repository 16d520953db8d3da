"""Canonical URLs and deterministic article identifiers."""

import uuid
from urllib.parse import unquote, urlsplit

from ..errors import InvalidURLError


def canonicalize_url(raw_url: str) -> str:
    """
    Reduce a URL to scheme, host and decoded path.

    Query string and fragment are dropped and a single trailing slash is
    removed, so decorated links to the same page share one canonical form.

    Raises:
        InvalidURLError: If the URL does not parse or lacks scheme or host.
    """
    try:
        parsed = urlsplit(raw_url)
    except (TypeError, ValueError) as e:
        raise InvalidURLError(f"url must be valid: {e}") from e

    # Userinfo is not part of the host
    host = parsed.netloc.rpartition("@")[2]
    if not parsed.scheme or not host:
        raise InvalidURLError(f"url must have scheme and host: {raw_url!r}")

    path = unquote(parsed.path)
    if path.endswith("/"):
        path = path[:-1]
    if not path:
        path = "/"

    return f"{parsed.scheme}://{host}{path}"


def article_id_from_url(raw_url: str) -> str:
    """Derive the UUIDv5 article id (URL namespace) of the canonical URL."""
    canonical = canonicalize_url(raw_url)
    return str(uuid.uuid5(uuid.NAMESPACE_URL, canonical))
