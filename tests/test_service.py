from pathlib import Path
from typing import List, Optional

import pytest

from savetoink.config import EmailConfig
from savetoink.content import article_id_from_url
from savetoink.db import InMemoryArticleStore
from savetoink.delivery import EmailRequest, EmailSender
from savetoink.errors import (
    AlreadyDeliveredError,
    ContentExtractionError,
    EmailSendError,
    NotFoundError,
    ValidationError,
)
from savetoink.models import Article, DeliveryReceipt, DeliveryStatus
from savetoink.service import ArticleService
from savetoink.service.articles import (
    MESSAGE_ALREADY_DELIVERED,
    MESSAGE_EMAIL_DISABLED,
    MESSAGE_SEND_FAILED,
    MESSAGE_SENT,
)

URL = "https://example.com/article/123?utm=x"


class FakeExtractor:
    def __init__(self, title: str = "A Great Read", error: Optional[Exception] = None) -> None:
        self.title = title
        self.error = error
        self.calls: List[str] = []

    def extract(self, url: str) -> Article:
        self.calls.append(url)
        if self.error:
            raise self.error
        return Article(url=url, title=self.title, content="<p>Body</p>", word_count=1, reading_time_minutes=1)


class FakeGenerator:
    def generate(self, article: Article) -> bytes:
        return f"EPUB:{article.title}".encode()


class FakeSender(EmailSender):
    provider_name = "fake"

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.requests: List[EmailRequest] = []

    def send(self, request: EmailRequest) -> DeliveryReceipt:
        self.requests.append(request)
        if self.failures:
            self.failures -= 1
            raise EmailSendError("HTTP 500")
        return DeliveryReceipt(
            delivered_from="app@example.com",
            delivered_to=request.destination_email,
            email_uuid=f"uuid-{len(self.requests)}",
            provider=self.provider_name,
        )


def _service(
    store: InMemoryArticleStore,
    extractor: Optional[FakeExtractor] = None,
    sender: Optional[FakeSender] = None,
    enabled: bool = True,
) -> ArticleService:
    return ArticleService(
        store=store,
        extractor=extractor or FakeExtractor(),
        generator=FakeGenerator(),
        sender=sender,
        email_config=EmailConfig(enabled=enabled, destination_email="reader@kindle.com"),
    )


def test_create_article_without_email(store: InMemoryArticleStore) -> None:
    result = _service(store, enabled=False).create_article(URL, "alice")

    assert result.message == MESSAGE_EMAIL_DISABLED
    assert result.article.id == article_id_from_url(URL)
    assert result.article.title == "A Great Read"
    assert result.article.delivery_status == DeliveryStatus.PENDING
    assert store.get_by_account_and_id("alice", result.article.id).content == "<p>Body</p>"


def test_create_article_sends_and_records_delivery(store: InMemoryArticleStore) -> None:
    sender = FakeSender()

    result = _service(store, sender=sender).create_article(URL, "alice")

    assert result.message == MESSAGE_SENT
    assert result.article.delivery_status == DeliveryStatus.DELIVERED
    assert result.article.delivered_email_uuid == "uuid-1"
    assert result.article.delivery_attempt_count == 1
    assert sender.requests[0].document == b"EPUB:A Great Read"
    assert sender.requests[0].article.account == "alice"


def test_create_article_keeps_record_when_send_fails(store: InMemoryArticleStore) -> None:
    result = _service(store, sender=FakeSender(failures=1)).create_article(URL, "alice")

    assert result.message == MESSAGE_SEND_FAILED
    stored = store.get_by_account_and_id("alice", result.article.id)
    assert stored.delivery_status == DeliveryStatus.FAILED
    assert stored.delivery_error == "HTTP 500"
    assert stored.title == "A Great Read"


def test_failed_extraction_leaves_pending_placeholder(store: InMemoryArticleStore) -> None:
    service = _service(store, extractor=FakeExtractor(error=ContentExtractionError("no content extracted")))

    with pytest.raises(ContentExtractionError):
        service.create_article(URL, "alice")

    placeholder = store.get_by_account_and_id("alice", article_id_from_url(URL))
    assert placeholder.delivery_status == DeliveryStatus.PENDING
    assert placeholder.url == URL
    assert placeholder.title == ""


def test_saving_again_does_not_resend_delivered_article(store: InMemoryArticleStore) -> None:
    sender = FakeSender()
    service = _service(store, sender=sender)
    first = service.create_article(URL, "alice")

    second = service.create_article(URL, "alice")

    assert second.message == MESSAGE_ALREADY_DELIVERED
    assert len(sender.requests) == 1
    assert second.article.created_at == first.article.created_at
    assert second.article.delivered_email_uuid == "uuid-1"


def test_saving_again_retries_failed_article(store: InMemoryArticleStore) -> None:
    sender = FakeSender(failures=1)
    service = _service(store, sender=sender)
    service.create_article(URL, "alice")

    second = service.create_article(URL, "alice")

    assert second.message == MESSAGE_SENT
    assert second.article.delivery_attempt_count == 2


def test_retry_delivery(store: InMemoryArticleStore) -> None:
    sender = FakeSender(failures=1)
    service = _service(store, sender=sender)
    failed = service.create_article(URL, "alice").article

    retried = service.retry_delivery("alice", failed.id, subject="Custom")

    assert retried.delivery_status == DeliveryStatus.DELIVERED
    assert retried.delivery_attempt_count == 2
    assert sender.requests[-1].subject == "Custom"

    with pytest.raises(AlreadyDeliveredError):
        service.retry_delivery("alice", failed.id)


def test_retry_requires_sending_enabled(store: InMemoryArticleStore) -> None:
    service = _service(store, enabled=False)
    article = service.create_article(URL, "alice").article

    with pytest.raises(ValidationError, match="disabled"):
        service.retry_delivery("alice", article.id)


def test_refresh_keeps_delivery_history(store: InMemoryArticleStore) -> None:
    extractor = FakeExtractor()
    service = _service(store, extractor=extractor, sender=FakeSender())
    delivered = service.create_article(URL, "alice").article

    extractor.title = "Updated Title"
    refreshed = service.refresh_article("alice", delivered.id)

    assert refreshed.title == "Updated Title"
    assert refreshed.delivery_status == DeliveryStatus.DELIVERED
    assert refreshed.delivered_email_uuid == delivered.delivered_email_uuid
    assert extractor.calls[-1] == URL


def test_get_list_and_delete(store: InMemoryArticleStore) -> None:
    service = _service(store, enabled=False)
    article = service.create_article(URL, "alice").article
    service.create_article("https://example.com/other", "alice")

    assert service.get_article("alice", article.id).content == "<p>Body</p>"
    assert service.list_articles("alice").total == 2
    assert service.delete_article("bob", article.id) == 0
    assert service.delete_article("alice", article.id) == 1
    assert service.delete_all_articles("alice") == 1


def test_empty_article_id_is_invalid(store: InMemoryArticleStore) -> None:
    service = _service(store)

    with pytest.raises(ValidationError, match="invalid article id"):
        service.get_article("alice", "")
    with pytest.raises(ValidationError, match="invalid article id"):
        service.delete_article("alice", "")


def test_process_defaults_title(store: InMemoryArticleStore) -> None:
    result = _service(store, extractor=FakeExtractor(title="")).process(URL)

    assert result.article.title == "Untitled"
    assert result.document == b"EPUB:Untitled"


def test_send_requires_configured_sender(store: InMemoryArticleStore) -> None:
    service = _service(store)

    with pytest.raises(ValidationError, match="sender is not configured"):
        service.send(service.process(URL))


def test_write_to_file(store: InMemoryArticleStore, tmp_path: Path) -> None:
    service = _service(store)
    output = tmp_path / "book.epub"

    assert service.write_to_file(service.process(URL), output) == output
    assert output.read_bytes() == b"EPUB:A Great Read"


def test_missing_destination_disables_sending(store: InMemoryArticleStore) -> None:
    sender = FakeSender()
    service = ArticleService(
        store=store,
        extractor=FakeExtractor(),
        generator=FakeGenerator(),
        sender=sender,
        email_config=EmailConfig(enabled=True),
    )

    result = service.create_article(URL, "alice")

    assert result.message == MESSAGE_EMAIL_DISABLED
    assert result.article.delivery_status == DeliveryStatus.PENDING
    assert sender.requests == []


def test_refresh_defaults_missing_title(store: InMemoryArticleStore) -> None:
    extractor = FakeExtractor()
    service = _service(store, extractor=extractor, enabled=False)
    article = service.create_article(URL, "alice").article

    extractor.title = ""
    refreshed = service.refresh_article("alice", article.id)

    assert refreshed.title == "Untitled"


def test_resolve_article_id_expands_unique_prefix(store: InMemoryArticleStore) -> None:
    service = _service(store, enabled=False)
    article = service.create_article(URL, "alice").article

    assert service.resolve_article_id("alice", article.id[:8]) == article.id
    assert service.resolve_article_id("alice", article.id) == article.id

    with pytest.raises(NotFoundError):
        service.resolve_article_id("bob", article.id[:8])
    with pytest.raises(ValidationError, match="invalid article id"):
        service.resolve_article_id("alice", "")


def test_resolve_article_id_rejects_ambiguous_prefix(store: InMemoryArticleStore) -> None:
    service = _service(store, enabled=False)
    by_first_char = {}
    index = 0
    while True:
        url = f"https://example.com/post/{index}"
        first = article_id_from_url(url)[0]
        if first in by_first_char:
            break
        by_first_char[first] = url
        index += 1
    service.create_article(by_first_char[first], "alice")
    service.create_article(url, "alice")

    with pytest.raises(ValidationError, match="matches 2 articles"):
        service.resolve_article_id("alice", first)
