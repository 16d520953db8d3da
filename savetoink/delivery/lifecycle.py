"""Delivery status state machine persisted through the article store."""

import logging
from typing import Callable, Optional

from ..db.base import ArticleStore, Clock, utcnow
from ..errors import (
    BackendUnavailableError,
    DeliveryNotRecordedError,
    InvalidDeliveryTransitionError,
)
from ..models import Article, DeliveryReceipt, DeliveryStatus

logger = logging.getLogger(__name__)

STARTABLE_STATES = (DeliveryStatus.PENDING, DeliveryStatus.FAILED)


class DeliveryManager:
    """
    Move articles through pending -> delivering -> delivered/failed.

    Holds no state between calls: every transition is written with
    ``ArticleStore.store`` and the stored record is returned. There is no
    mutual exclusion across concurrent attempts on the same article.
    """

    def __init__(self, store: ArticleStore, clock: Optional[Clock] = None) -> None:
        self.store = store
        self.clock = clock or utcnow

    def start_attempt(self, article: Article) -> Article:
        """
        Record a new attempt before anything is sent.

        Raises:
            InvalidDeliveryTransitionError: If the article is not pending or failed.
        """
        if article.delivery_status not in STARTABLE_STATES:
            raise InvalidDeliveryTransitionError(
                f"cannot start delivery of article {article.id} in state {article.delivery_status.value}"
            )

        started = article.model_copy(
            update={
                "delivery_status": DeliveryStatus.DELIVERING,
                "delivery_attempt_count": article.delivery_attempt_count + 1,
                "last_delivery_attempt": self.clock(),
                "delivery_error": None,
            }
        )
        return self.store.store(started)

    def mark_delivered(self, article: Article, receipt: DeliveryReceipt) -> Article:
        """Record a successful send."""
        return self.store.store(self._delivered(article, receipt))

    def mark_failed(self, article: Article, error: str) -> Article:
        """Record a failed send; attempt bookkeeping is kept."""
        return self.store.store(self._failed(article, error))

    def record(self, article: Article) -> Article:
        """Persist an outcome that could not be recorded earlier."""
        return self.store.store(article)

    def deliver(self, article: Article, send: Callable[[], DeliveryReceipt]) -> Article:
        """
        Run one delivery attempt.

        Any error raised by ``send`` is recorded and returned as a ``failed``
        article rather than raised.

        Raises:
            InvalidDeliveryTransitionError: If the article cannot start an attempt.
            BackendUnavailableError: If the attempt could not be started.
            DeliveryNotRecordedError: If the send finished but its outcome
                could not be stored. Retry ``record(e.article)``; do not resend.
        """
        started = self.start_attempt(article)

        try:
            receipt = send()
        except Exception as e:
            logger.warning("Delivery of article %s failed: %s", started.id, e)
            outcome = self._failed(started, str(e))
        else:
            outcome = self._delivered(started, receipt)

        try:
            return self.store.store(outcome)
        except BackendUnavailableError as e:
            raise DeliveryNotRecordedError(
                f"delivery outcome for article {outcome.id} was not recorded: {e}",
                article=outcome,
            ) from e

    def _require_delivering(self, article: Article) -> None:
        if article.delivery_status != DeliveryStatus.DELIVERING:
            raise InvalidDeliveryTransitionError(
                f"article {article.id} is {article.delivery_status.value}, not delivering"
            )

    def _delivered(self, article: Article, receipt: DeliveryReceipt) -> Article:
        self._require_delivering(article)
        return article.model_copy(
            update={
                "delivery_status": DeliveryStatus.DELIVERED,
                "delivery_error": None,
                "delivered_from": receipt.delivered_from,
                "delivered_to": receipt.delivered_to,
                "delivered_email_uuid": receipt.email_uuid,
                "delivered_by": receipt.provider,
            }
        )

    def _failed(self, article: Article, error: str) -> Article:
        self._require_delivering(article)
        return article.model_copy(
            update={
                "delivery_status": DeliveryStatus.FAILED,
                "delivery_error": error or "unknown delivery error",
            }
        )
