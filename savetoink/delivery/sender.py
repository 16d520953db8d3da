"""Email sender interface and message helpers."""

import re
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from ..models import Article, DeliveryReceipt

DEFAULT_SUBJECT = "Document"
MAX_SUBJECT_LENGTH = 100

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w\s-]")


class EmailRequest(BaseModel):
    """Everything needed to mail one document."""

    article: Article = Field(..., description="Article the document was generated from")
    document: bytes = Field(..., description="EPUB attachment bytes")
    destination_email: str = Field(..., description="Recipient, typically an e-reader inbox")
    subject: str = Field("", description="Email subject")


class EmailSender(ABC):
    """Abstract base class for email providers."""

    provider_name: str = ""

    @abstractmethod
    def send(self, request: EmailRequest) -> DeliveryReceipt:
        """
        Send a document by email.

        Returns:
            Receipt describing the accepted message

        Raises:
            EmailSendError: If the provider rejects or fails the send.
        """


def generate_filename(article: Article) -> str:
    """Create a sanitized attachment filename from the article title."""
    if not article.title:
        return "article.epub"
    sanitized = _UNSAFE_FILENAME_CHARS.sub("", article.title).strip()
    return f"{sanitized or 'article'}.epub"


def generate_subject(article_title: str, custom_subject: str = "") -> str:
    """Pick the custom subject, else the title, else the default."""
    subject = (custom_subject or article_title).strip()
    if not subject:
        return DEFAULT_SUBJECT
    return subject[:MAX_SUBJECT_LENGTH]
