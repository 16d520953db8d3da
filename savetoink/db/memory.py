"""In-process article store."""

import logging
from typing import Dict, Optional, Tuple

from ..config import StorageConfig
from ..errors import NotFoundError
from ..models import Article, ArticlePage
from .base import ArticleStore, Clock
from .pagination import build_page, newest_first, page_bounds

logger = logging.getLogger(__name__)


class InMemoryArticleStore(ArticleStore):
    """Dictionary-backed store holding private copies of each record."""

    def __init__(self, config: Optional[StorageConfig] = None, clock: Optional[Clock] = None) -> None:
        super().__init__(config, clock)
        self._records: Dict[Tuple[str, str], Article] = {}

    def store(self, article: Article) -> Article:
        """Upsert keeping the first created_at of an existing record."""
        prepared = self.prepare_for_write(article)
        key = (prepared.account, prepared.id)

        existing = self._records.get(key)
        if existing is not None:
            prepared = prepared.model_copy(update={"created_at": existing.created_at})

        self._records[key] = prepared
        logger.debug("Stored article %s for account %s", prepared.id, prepared.account)
        return prepared.model_copy(deep=True)

    def get_by_account_and_id(self, account: str, article_id: str) -> Article:
        """Get a full article by its composite key."""
        record = self._records.get((account, article_id))
        if record is None:
            raise NotFoundError(f"article {article_id} not found")
        return record.model_copy(deep=True)

    def list_by_account(
        self,
        account: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> ArticlePage:
        """List summaries for an account, newest first."""
        page, page_size, offset = page_bounds(page, page_size, self.config.pagination)

        owned = newest_first([a for (owner, _), a in self._records.items() if owner == account])
        window = [a.summary() for a in owned[offset:offset + page_size]]

        return build_page(window, page, page_size, len(owned))

    def delete_by_account_and_id(self, account: str, article_id: str) -> int:
        """Delete one article; misses are a no-op."""
        if self._records.pop((account, article_id), None) is None:
            return 0
        return 1

    def delete_by_account(self, account: str) -> int:
        """Delete all articles of an account."""
        keys = [key for key in self._records if key[0] == account]
        for key in keys:
            del self._records[key]
        logger.info("Deleted %d articles for account %s", len(keys), account)
        return len(keys)
