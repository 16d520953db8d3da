"""Service layer wiring collaborators to the article store."""

from typing import Optional

from ..config import Config
from ..content.extractor import ContentExtractor
from ..db import create_article_store
from ..db.base import ArticleStore
from ..delivery.mailjet import MailjetSender
from ..delivery.sender import EmailSender
from ..generation.epub import EpubGenerator
from .articles import ArticleService, CreateArticleResult, ProcessResult


def build_sender(config: Config) -> Optional[EmailSender]:
    """Create the configured email sender, or None when sending is disabled."""
    email_config = config.get_email_config()
    if not email_config.get("enabled"):
        return None

    if email_config.get("provider") != "mailjet":
        raise ValueError(f"Unknown email provider: {email_config.get('provider')}")

    return MailjetSender(
        api_key=email_config.get("api_key") or "",
        api_secret=email_config.get("api_secret") or "",
        sender_email=email_config.get("sender_email") or "",
        timeout=email_config.get("timeout", 30.0),
    )


def build_service(config: Config, store: Optional[ArticleStore] = None) -> ArticleService:
    """Build an ArticleService from configuration."""
    extractor_config = config.config.extractor
    return ArticleService(
        store=store or create_article_store(config),
        extractor=ContentExtractor(
            timeout=extractor_config.timeout,
            user_agent=extractor_config.user_agent,
        ),
        generator=EpubGenerator(),
        sender=build_sender(config),
        email_config=config.config.email,
    )


__all__ = [
    "ArticleService",
    "CreateArticleResult",
    "ProcessResult",
    "build_sender",
    "build_service",
]
