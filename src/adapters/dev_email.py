"""
Dev Email Adapter.

Logs emails to console instead of sending.
Used for local development (WAITLIST_EMAIL_BACKEND=dev) and testing.

Key behaviors:
- Logs email details to console
- Returns SKIPPED status (not SENT)
- Stores emails in memory for test assertions
- Can be told to fail for chosen recipients
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.core.ports.email import EmailResult

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """
    Dev email adapter that logs instead of sending.

    Implements EmailPort. Safe to share between the bulk send
    worker threads.
    """

    # In-memory storage for test assertions
    sent_emails: list[SentEmail] = field(default_factory=list)

    # Recipients whose sends return a failed result
    fail_recipients: set[str] = field(default_factory=set)
    failure_reason: str = "Simulated provider rejection"

    # Configuration
    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """
        Log an email instead of sending.

        Returns:
            EmailResult with SKIPPED status, or FAILED if the recipient
            is in fail_recipients
        """
        if recipient in self.fail_recipients:
            logger.warning("EMAIL (dev): simulated failure for %s", recipient)
            return EmailResult.failed(recipient, self.failure_reason)

        message_id = f"dev-{uuid4().hex[:12]}"

        with self._lock:
            self.sent_emails.append(
                SentEmail(
                    id=message_id,
                    recipient=recipient,
                    subject=subject,
                    body_html=body_html,
                    body_text=body_text or "",
                    logged_at=datetime.now(UTC),
                )
            )

        self._log_email(recipient, subject, body_html, message_id)

        return EmailResult.skipped(
            recipient, "Dev mode - email logged, not sent", message_id
        )

    def _log_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        message_id: str,
    ) -> None:
        parts = [
            f"EMAIL (dev): To={recipient}",
            f"Subject={subject}",
        ]

        if self.log_body and body_html:
            preview = body_html[:self.body_preview_length]
            if len(body_html) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")

        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        """Get the most recently logged email."""
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        """Get all emails logged to a specific recipient."""
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        """Clear all stored emails (for test isolation)."""
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
