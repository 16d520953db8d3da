"""URL identity and article content extraction."""

from .identity import article_id_from_url, canonicalize_url

__all__ = ["article_id_from_url", "canonicalize_url"]
