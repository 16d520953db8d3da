"""Stateless page arithmetic for account listings."""

from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from ..config import PaginationConfig
from ..models import Article, ArticlePage

MIN_PAGE = 1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def normalize_page(page: Optional[int]) -> int:
    """Pages below 1 (or missing) are treated as the first page."""
    if page is None or page < MIN_PAGE:
        return MIN_PAGE
    return page


def clamp_page_size(page_size: Optional[int], config: PaginationConfig) -> int:
    """Missing sizes use the default; others are clamped to [min, max]."""
    if page_size is None:
        return config.default_page_size
    return max(config.min_page_size, min(page_size, config.max_page_size))


def page_bounds(page: Optional[int], page_size: Optional[int], config: PaginationConfig) -> Tuple[int, int, int]:
    """
    Normalize a page request.

    Returns:
        Tuple of (page, page_size, offset)
    """
    page = normalize_page(page)
    page_size = clamp_page_size(page_size, config)
    return page, page_size, (page - 1) * page_size


def newest_first(articles: Sequence[Article]) -> List[Article]:
    """Order by created_at descending, ties broken by id ascending."""
    by_id = sorted(articles, key=lambda a: a.id)
    return sorted(by_id, key=lambda a: a.created_at or _EPOCH, reverse=True)


def build_page(summaries: Sequence[Article], page: int, page_size: int, total: int) -> ArticlePage:
    """Assemble an ArticlePage from one window of summaries."""
    offset = (page - 1) * page_size
    return ArticlePage(
        articles=list(summaries),
        page=page,
        page_size=page_size,
        total=total,
        has_more=offset + len(summaries) < total,
    )
