"""Article model for fetched documents and their delivery history."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..content.identity import article_id_from_url
from .base import DBModel


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    FAILED = "failed"


class Article(DBModel):
    """Article owned by a single account, keyed by (account, id)."""

    account: str = Field("", description="Owning account (tenant)")
    id: str = Field("", description="Identifier derived from the canonical URL")
    url: str = Field(..., description="URL as supplied by the caller")

    title: str = Field("", description="Article title")
    author: str = Field("", description="Article author")
    content: str = Field("", description="Article body (HTML)")
    excerpt: str = Field("", description="Short description")
    image_url: str = Field("", description="Lead image URL")
    source_domain: str = Field("", description="Host the article was fetched from")
    site_name: str = Field("", description="Publishing site name")
    content_type: str = Field("", description="Page type reported by the extractor")
    language: str = Field("", description="Content language")
    word_count: int = Field(0, ge=0, description="Words in the body")
    reading_time_minutes: int = Field(0, ge=0, description="Estimated reading time")
    published_at: Optional[datetime] = Field(None, description="Publication timestamp")

    delivery_status: DeliveryStatus = Field(DeliveryStatus.PENDING, description="Delivery lifecycle state")
    delivery_attempt_count: int = Field(0, ge=0, description="Number of delivery attempts started")
    last_delivery_attempt: Optional[datetime] = Field(None, description="When the last attempt started")
    delivery_error: Optional[str] = Field(None, description="Cause of the last failed delivery")
    delivered_from: Optional[str] = Field(None, description="Sender address of the successful delivery")
    delivered_to: Optional[str] = Field(None, description="Recipient address of the successful delivery")
    delivered_email_uuid: Optional[str] = Field(
        None,
        alias="deliveredEmailUUID",
        description="Provider-assigned message id",
    )
    delivered_by: Optional[str] = Field(None, description="Email provider name")

    @classmethod
    def for_url(cls, url: str, account: str) -> "Article":
        """Create a new pending article whose id is derived from ``url``."""
        return cls(account=account, id=article_id_from_url(url), url=url)

    def summary(self) -> "Article":
        """Return a copy suitable for listings, without the body."""
        return self.model_copy(update={"content": ""})


class ArticlePage(BaseModel):
    """One page of article summaries for an account."""

    articles: List[Article] = Field(default_factory=list, description="Summaries, newest first")
    page: int = Field(..., ge=1, description="1-based page number")
    page_size: int = Field(..., ge=1, description="Items per page")
    total: int = Field(..., ge=0, description="Records for the account")
    has_more: bool = Field(False, description="Whether later pages exist")


class DeliveryReceipt(BaseModel):
    """Successful send details reported by an email sender."""

    delivered_from: str = Field(..., description="Sender address")
    delivered_to: str = Field(..., description="Recipient address")
    email_uuid: str = Field("", description="Provider-assigned message id")
    provider: str = Field(..., description="Provider name")
