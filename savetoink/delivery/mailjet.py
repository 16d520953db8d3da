"""Mailjet implementation of the email sender."""

import base64
import logging
from typing import Optional

import httpx

from ..errors import EmailSendError
from ..models import DeliveryReceipt
from .sender import EmailRequest, EmailSender, generate_filename, generate_subject

logger = logging.getLogger(__name__)

MAILJET_SEND_URL = "https://api.mailjet.com/v3.1/send"


class MailjetSender(EmailSender):
    """Send EPUB attachments through the Mailjet v3.1 send API."""

    provider_name = "mailjet"

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        sender_email: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize Mailjet sender.

        Args:
            api_key: Mailjet public API key
            api_secret: Mailjet private API key
            sender_email: Verified sender address
            timeout: Request timeout in seconds
            transport: Custom httpx transport (for testing)
        """
        self.api_key = api_key
        self.api_secret = api_secret
        self.sender_email = sender_email
        self.timeout = timeout
        self.transport = transport

    def _validate(self, request: EmailRequest) -> None:
        if not self.api_key:
            raise EmailSendError("invalid sender config: API key is required")
        if not self.api_secret:
            raise EmailSendError("invalid sender config: API secret is required")
        if not self.sender_email:
            raise EmailSendError("invalid sender config: sender email is required")
        if not request.destination_email:
            raise EmailSendError("invalid request: destination email is required")
        if not request.document:
            raise EmailSendError("invalid request: EPUB data is empty")

    def _build_payload(self, request: EmailRequest) -> dict:
        return {
            "Messages": [
                {
                    "From": {"Email": self.sender_email},
                    "To": [{"Email": request.destination_email}],
                    "Subject": generate_subject(request.article.title, request.subject),
                    "TextPart": "EPUB document attached.",
                    "Attachments": [
                        {
                            "ContentType": "application/epub+zip",
                            "Filename": generate_filename(request.article),
                            "Base64Content": base64.b64encode(request.document).decode("ascii"),
                        }
                    ],
                }
            ]
        }

    def send(self, request: EmailRequest) -> DeliveryReceipt:
        """Send the document and return the provider's message id."""
        self._validate(request)

        try:
            with httpx.Client(
                timeout=self.timeout,
                auth=(self.api_key, self.api_secret),
                transport=self.transport,
            ) as client:
                response = client.post(MAILJET_SEND_URL, json=self._build_payload(request))
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise EmailSendError(f"failed to send email: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise EmailSendError(f"failed to send email: {e}") from e
        except ValueError as e:
            raise EmailSendError(f"failed to send email: invalid response body: {e}") from e

        if not isinstance(data, dict):
            raise EmailSendError("failed to send email: unexpected response body")

        messages = data.get("Messages") or []
        if not isinstance(messages, list) or not messages:
            raise EmailSendError("no messages in response")

        result = messages[0]
        if not isinstance(result, dict):
            raise EmailSendError("failed to send email: unexpected message result")
        if result.get("Status") != "success":
            raise EmailSendError(f"email send failed with status: {result.get('Status')}")

        recipients = result.get("To") or []
        first = recipients[0] if isinstance(recipients, list) and recipients else {}
        email_uuid = first.get("MessageUUID", "") if isinstance(first, dict) else ""

        logger.info("Sent %s to %s via Mailjet (%s)", request.article.id, request.destination_email, email_uuid)
        return DeliveryReceipt(
            delivered_from=self.sender_email,
            delivered_to=request.destination_email,
            email_uuid=email_uuid,
            provider=self.provider_name,
        )
