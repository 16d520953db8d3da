"""Article service orchestrating extraction, storage and delivery."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from ..config import EmailConfig
from ..content.extractor import ContentExtractor
from ..content.identity import article_id_from_url
from ..db.base import ArticleStore
from ..delivery.lifecycle import DeliveryManager
from ..delivery.sender import EmailRequest, EmailSender, generate_subject
from ..errors import AlreadyDeliveredError, NotFoundError, ValidationError
from ..generation.epub import EpubGenerator
from ..models import Article, ArticlePage, DeliveryReceipt, DeliveryStatus

logger = logging.getLogger(__name__)

MESSAGE_SENT = "article sent to e-reader successfully"
MESSAGE_SEND_FAILED = "article stored but delivery failed"
MESSAGE_EMAIL_DISABLED = "article processed successfully (email sending disabled)"
MESSAGE_ALREADY_DELIVERED = "article refreshed (already delivered, not sent again)"

ARTICLE_ID_LENGTH = 36

# Fields refreshed by re-extraction; delivery history is left alone
CONTENT_FIELDS = (
    "title",
    "author",
    "content",
    "excerpt",
    "image_url",
    "source_domain",
    "site_name",
    "content_type",
    "language",
    "word_count",
    "reading_time_minutes",
    "published_at",
)


class ProcessResult(BaseModel):
    """Extracted article and its generated document."""

    article: Article = Field(..., description="Extracted article")
    document: bytes = Field(..., description="Generated EPUB bytes")
    url: str = Field(..., description="URL that was processed")


class CreateArticleResult(BaseModel):
    """Outcome of saving (and possibly delivering) an article."""

    article: Article = Field(..., description="Article as stored")
    message: str = Field(..., description="Human-readable outcome")


class ArticleService:
    """Process web articles into documents, store them per account and deliver them."""

    def __init__(
        self,
        store: ArticleStore,
        extractor: Optional[ContentExtractor] = None,
        generator: Optional[EpubGenerator] = None,
        sender: Optional[EmailSender] = None,
        email_config: Optional[EmailConfig] = None,
    ) -> None:
        """Initialize article service with its collaborators."""
        self.store = store
        self.extractor = extractor or ContentExtractor()
        self.generator = generator or EpubGenerator()
        self.sender = sender
        self.email_config = email_config or EmailConfig()
        self.delivery = DeliveryManager(store)

    @property
    def send_enabled(self) -> bool:
        """Whether processed articles are emailed."""
        return bool(
            self.email_config.enabled and self.sender is not None and self.email_config.destination_email
        )

    def _extract(self, url: str) -> Article:
        article = self.extractor.extract(url)
        if not article.title:
            article = article.model_copy(update={"title": "Untitled"})
        return article

    def process(self, url: str) -> ProcessResult:
        """Extract an article and generate its document. Safe to repeat."""
        article = self._extract(url)
        document = self.generator.generate(article)
        return ProcessResult(article=article, document=document, url=url)

    def send(self, result: ProcessResult, subject: str = "") -> DeliveryReceipt:
        """Email a processed document to the configured destination."""
        if self.sender is None:
            raise ValidationError("email sender is not configured")
        if not self.email_config.destination_email:
            raise ValidationError("destination email is not configured")

        request = EmailRequest(
            article=result.article,
            document=result.document,
            destination_email=self.email_config.destination_email,
            subject=generate_subject(result.article.title, subject),
        )
        return self.sender.send(request)

    def write_to_file(self, result: ProcessResult, output_path: Path) -> Path:
        """Write a processed document to disk."""
        if not output_path.name:
            raise ValidationError("output path is empty")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(result.document)
        return output_path

    def create_article(self, raw_url: str, account: str) -> CreateArticleResult:
        """
        Save an article for an account and deliver it when sending is enabled.

        A pending placeholder is stored before extraction, so failed
        extractions still leave a record behind.
        """
        article_id = article_id_from_url(raw_url)

        try:
            existing = self.store.get_by_account_and_id(account, article_id)
        except NotFoundError:
            existing = self.store.store(Article(account=account, id=article_id, url=raw_url))

        result = self.process(raw_url)
        article = self.store.store(self._merge_content(existing, result.article))

        if not self.send_enabled:
            return CreateArticleResult(article=article, message=MESSAGE_EMAIL_DISABLED)

        if article.delivery_status == DeliveryStatus.DELIVERED:
            return CreateArticleResult(article=article, message=MESSAGE_ALREADY_DELIVERED)

        to_send = result.model_copy(update={"article": article})
        article = self.delivery.deliver(article, lambda: self.send(to_send))
        message = MESSAGE_SENT if article.delivery_status == DeliveryStatus.DELIVERED else MESSAGE_SEND_FAILED
        return CreateArticleResult(article=article, message=message)

    def get_article(self, account: str, article_id: str) -> Article:
        """Get a full article owned by the account."""
        if not article_id:
            raise ValidationError("invalid article id")
        return self.store.get_by_account_and_id(account, article_id)

    def resolve_article_id(self, account: str, article_ref: str) -> str:
        """
        Expand a unique id prefix, as shown by listings, to a full article id.

        Raises:
            NotFoundError: If no article of the account matches.
            ValidationError: If the prefix is empty or matches several articles.
        """
        if not article_ref:
            raise ValidationError("invalid article id")
        if len(article_ref) == ARTICLE_ID_LENGTH:
            return article_ref

        matches = []
        page = 1
        while True:
            listing = self.store.list_by_account(account, page)
            matches.extend(a.id for a in listing.articles if a.id.startswith(article_ref))
            if not listing.has_more:
                break
            page += 1

        if not matches:
            raise NotFoundError(f"article {article_ref} not found")
        if len(matches) > 1:
            raise ValidationError(f"article id prefix {article_ref} matches {len(matches)} articles")
        return matches[0]

    def list_articles(self, account: str, page: int = 1, page_size: Optional[int] = None) -> ArticlePage:
        """List article summaries for the account."""
        return self.store.list_by_account(account, page, page_size)

    def delete_article(self, account: str, article_id: str) -> int:
        """Delete one article; returns the number removed."""
        if not article_id:
            raise ValidationError("invalid article id")
        return self.store.delete_by_account_and_id(account, article_id)

    def delete_all_articles(self, account: str) -> int:
        """Delete every article of the account."""
        return self.store.delete_by_account(account)

    def refresh_article(self, account: str, article_id: str) -> Article:
        """Re-extract a stored article without resetting its delivery history."""
        existing = self.get_article(account, article_id)
        extracted = self._extract(existing.url)
        return self.store.store(self._merge_content(existing, extracted))

    def retry_delivery(self, account: str, article_id: str, subject: str = "") -> Article:
        """Start a new delivery attempt for a pending or failed article."""
        if not self.send_enabled:
            raise ValidationError("email sending is disabled")

        article = self.get_article(account, article_id)
        if article.delivery_status == DeliveryStatus.DELIVERED:
            raise AlreadyDeliveredError(f"article {article.id} was already delivered")

        document = self.generator.generate(article)
        result = ProcessResult(article=article, document=document, url=article.url)
        return self.delivery.deliver(article, lambda: self.send(result, subject))

    def _merge_content(self, existing: Article, extracted: Article) -> Article:
        """Copy extracted content onto an existing record."""
        return existing.model_copy(
            update={field: getattr(extracted, field) for field in CONTENT_FIELDS}
        )
