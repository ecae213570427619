"""
Resend Email Adapter.

Sends transactional emails through the Resend API using the
official SDK. Constructed once at process start and injected
wherever email is sent.

Key behaviors:
- Provider rejection (ResendError) returns a FAILED result
- Transport faults are raised as EmailSendError
- Default sender comes from configuration
"""

from __future__ import annotations

import logging

import resend
from resend.exceptions import ResendError

from src.core.ports.email import EmailAddress, EmailResult, EmailSendError

logger = logging.getLogger(__name__)


class ResendEmailAdapter:
    """Email adapter backed by resend.Emails.send. Implements EmailPort."""

    def __init__(self, api_key: str, sender: EmailAddress) -> None:
        if not api_key:
            raise ValueError("Resend API key is required")
        # The SDK reads its credential from module state.
        resend.api_key = api_key
        self.sender = sender

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        params: resend.Emails.SendParams = {
            "from": str(self.sender),
            "to": [recipient],
            "subject": subject,
            "html": body_html,
        }
        if body_text:
            params["text"] = body_text

        try:
            response = resend.Emails.send(params)
        except ResendError as e:
            reason = getattr(e, "message", None) or str(e)
            logger.error("Resend rejected email to %s: %s", recipient, reason)
            return EmailResult.failed(recipient, reason)
        except Exception as e:
            raise EmailSendError(recipient, str(e)) from e

        message_id = response.get("id") if isinstance(response, dict) else None
        logger.info("Email sent to %s (id=%s)", recipient, message_id)
        return EmailResult.success(recipient, message_id)


def create_resend_adapter(api_key: str, sender: str) -> ResendEmailAdapter:
    """
    Create a Resend adapter.

    Args:
        api_key: Resend API key
        sender: Default sender, "Name <addr>" or bare address

    Returns:
        Configured ResendEmailAdapter
    """
    return ResendEmailAdapter(api_key=api_key, sender=EmailAddress.parse(sender))
