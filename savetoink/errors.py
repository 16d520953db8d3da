"""Exception hierarchy for savetoink."""

from typing import Optional


class SaveToInkError(Exception):
    """Base error for all savetoink failures."""


class ValidationError(SaveToInkError, ValueError):
    """Raised for bad caller input such as a missing account or malformed URL."""


class InvalidURLError(ValidationError):
    """Raised when a URL cannot be canonicalized."""


class NotFoundError(SaveToInkError):
    """Raised when no article matches an (account, id) lookup."""


class BackendUnavailableError(SaveToInkError):
    """Raised when the article store is unreachable or throttled. Retryable."""


class DeliveryNotRecordedError(BackendUnavailableError):
    """Raised when a delivery outcome could not be persisted.

    The email has already been attempted: callers must retry recording
    ``article`` via ``DeliveryManager.record`` instead of sending again.
    """

    def __init__(self, message: str, article: Optional[object] = None) -> None:
        super().__init__(message)
        self.article = article


class MarshalError(SaveToInkError):
    """Raised when a record cannot be encoded or decoded. Not retryable."""


class InvalidDeliveryTransitionError(SaveToInkError):
    """Raised when a delivery status change is not allowed from the current state."""


class AlreadyDeliveredError(SaveToInkError):
    """Raised when a delivery is requested for an article that was already delivered."""


class ContentExtractionError(SaveToInkError):
    """Raised when article content cannot be fetched or extracted."""


class DocumentGenerationError(SaveToInkError):
    """Raised when an e-reader document cannot be generated."""


class EmailSendError(SaveToInkError):
    """Raised when the email provider rejects or fails a send."""
