"""Article store contract shared by all backends."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import StorageConfig
from ..content.identity import article_id_from_url
from ..errors import ValidationError
from ..models import Article, ArticlePage

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class ArticleStore(ABC):
    """Abstract base class for article persistence keyed by (account, id)."""

    def __init__(self, config: Optional[StorageConfig] = None, clock: Optional[Clock] = None) -> None:
        self.config = config or StorageConfig()
        self.clock = clock or utcnow

    def prepare_for_write(self, article: Article) -> Article:
        """
        Validate an article and return a copy stamped with updated_at.

        created_at is only filled when missing; backends must still keep the
        stored value when the record already exists.

        Raises:
            ValidationError: If the account is missing or the id does not
                match the article URL.
        """
        if not article.account:
            raise ValidationError("account field is required")
        if article.delivery_attempt_count < 0:
            raise ValidationError("delivery attempt count must not be negative")

        expected_id = article_id_from_url(article.url)
        if article.id and article.id != expected_id:
            raise ValidationError(
                f"article id {article.id!r} does not match the id derived from {article.url!r}"
            )

        now = self.clock()
        return article.model_copy(
            update={
                "id": expected_id,
                "created_at": article.created_at or now,
                "updated_at": now,
            },
            deep=True,
        )

    def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    def store(self, article: Article) -> Article:
        """
        Insert or replace the article keyed by (account, id).

        Returns:
            The article as persisted
        """

    @abstractmethod
    def get_by_account_and_id(self, account: str, article_id: str) -> Article:
        """
        Fetch one full article, content included.

        Raises:
            NotFoundError: If no record matches, including records that
                belong to another account.
        """

    @abstractmethod
    def list_by_account(
        self,
        account: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> ArticlePage:
        """List article summaries for an account, newest first."""

    @abstractmethod
    def delete_by_account_and_id(self, account: str, article_id: str) -> int:
        """
        Delete one article if it belongs to the account.

        Returns:
            Number of records removed (0 or 1)
        """

    @abstractmethod
    def delete_by_account(self, account: str) -> int:
        """
        Delete every article of an account.

        Returns:
            Number of records removed
        """
