"""Email delivery and the delivery lifecycle."""

from .lifecycle import DeliveryManager
from .mailjet import MailjetSender
from .sender import EmailRequest, EmailSender, generate_filename, generate_subject

__all__ = [
    "DeliveryManager",
    "EmailRequest",
    "EmailSender",
    "MailjetSender",
    "generate_filename",
    "generate_subject",
]
