"""Article fetcher and content extractor."""

import logging
import math
import re
from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
import pendulum
import trafilatura

from ..errors import ContentExtractionError
from ..models import Article

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 250

_TAG_RE = re.compile(r"<[^>]+>")


def count_words(html: str) -> int:
    """Count words in an HTML fragment, ignoring markup."""
    return len(_TAG_RE.sub(" ", html).split())


def reading_time_minutes(word_count: int) -> int:
    """Estimated reading time, rounded up to whole minutes."""
    return math.ceil(word_count / WORDS_PER_MINUTE)


def _parse_date(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        parsed = pendulum.parse(raw)
    except ValueError:
        logger.debug("Ignoring unparseable publication date %r", raw)
        return None
    return parsed if isinstance(parsed, datetime) else None


class ContentExtractor:
    """Fetch HTML and extract article body and metadata."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "savetoink/1.0 (+e-reader delivery)",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize content extractor."""
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    def _fetch(self, url: str) -> httpx.Response:
        """Fetch a page, insisting on an HTML 200 response."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml",
        }

        try:
            with httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers=headers,
                transport=self.transport,
            ) as client:
                response = client.get(url)
        except httpx.TimeoutException as e:
            raise ContentExtractionError(f"request timed out: {url}") from e
        except httpx.HTTPError as e:
            raise ContentExtractionError(f"failed to fetch URL: {e}") from e

        if response.status_code != 200:
            raise ContentExtractionError(f"unexpected status code: {response.status_code}")

        content_type = response.headers.get("Content-Type", "")
        if not content_type.startswith("text/html"):
            raise ContentExtractionError(f"expected HTML content, got: {content_type}")

        return response

    def extract(self, url: str) -> Article:
        """
        Fetch and extract one article.

        The returned article carries content metadata only; account and id
        are assigned by the caller.
        """
        response = self._fetch(url)
        final_url = str(response.url)

        body = trafilatura.extract(
            response.text,
            url=final_url,
            output_format="html",
            include_comments=False,
            include_images=True,
            include_links=True,
        )
        if not body:
            raise ContentExtractionError("no content extracted")

        metadata = trafilatura.extract_metadata(response.text, default_url=final_url)
        return self.build_article(url, body, metadata)

    def build_article(self, url: str, body: str, metadata: Optional[Any]) -> Article:
        """Combine an extracted body and trafilatura metadata into an Article."""
        word_count = count_words(body)

        def meta(name: str) -> str:
            return (getattr(metadata, name, None) or "") if metadata is not None else ""

        source_domain = meta("hostname") or (urlparse(url).hostname or "")

        return Article(
            url=url,
            title=meta("title"),
            author=meta("author"),
            content=body,
            excerpt=meta("description"),
            image_url=meta("image"),
            published_at=_parse_date(meta("date")),
            word_count=word_count,
            reading_time_minutes=reading_time_minutes(word_count),
            source_domain=source_domain,
            site_name=meta("sitename"),
            content_type=meta("pagetype"),
            language=meta("language"),
        )
