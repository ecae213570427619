"""
Email Adapter Interface.

Protocol-based interface for sending transactional emails.
Used by the waitlist component for welcome and announcement emails.

Key requirements:
- Send a single email to a single recipient
- HTML body with optional plain text fallback
- Stateless send operation, safe to call from worker threads
- Provider rejection is reported as a failed result, not raised

Implementation strategies:
1. ResendEmailAdapter: Sends via the Resend API
2. DevEmailAdapter: Logs emails to console (dev/test)

A missing adapter (None) means the integration is unconfigured.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter


@dataclass(frozen=True)
class EmailAddress:
    """
    Email address with optional display name.

    Examples:
        EmailAddress("onboarding@resend.dev")
        EmailAddress("onboarding@resend.dev", "Steerify")
    """

    email: str
    name: str | None = None

    def __str__(self) -> str:
        """Format as RFC 5322 address."""
        if self.name:
            safe_name = self.name.replace('"', '\\"')
            return f'"{safe_name}" <{self.email}>'
        return self.email

    @classmethod
    def parse(cls, value: str) -> EmailAddress:
        """Parse 'Name <addr>' or a bare address."""
        value = value.strip()
        if value.endswith(">") and "<" in value:
            name, _, addr = value[:-1].rpartition("<")
            name = name.strip().strip('"')
            return cls(addr.strip(), name or None)
        return cls(value)


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None  # Provider's message ID
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""

    @property
    def ok(self) -> bool:
        """True unless the send failed. Dev skips count as delivered."""
        return self.status != EmailStatus.FAILED

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        """Create a successful send result."""
        return cls(
            status=EmailStatus.SENT,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def skipped(
        cls,
        recipient: str,
        reason: str = "Dev mode",
        message_id: str | None = None,
    ) -> EmailResult:
        """Create a skipped result (dev adapter)."""
        return cls(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error=reason,
        )

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        """Create a failed result."""
        return cls(
            status=EmailStatus.FAILED,
            recipient=recipient,
            error=error,
        )


class EmailPort(Protocol):
    """
    Email sending interface.

    Implementations:
    - ResendEmailAdapter: Sends via Resend
    - DevEmailAdapter: Logs to console (dev/test)
    """

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """
        Send a transactional email.

        Args:
            recipient: Email address of recipient
            subject: Email subject line
            body_html: HTML body content
            body_text: Plain text body (optional, fallback)

        Returns:
            EmailResult with send outcome

        Notes:
            - Provider rejection returns failed status
            - Transport faults may raise EmailSendError
        """
        ...


# --- Error Types ---


class EmailError(Exception):
    """Base exception for email-related errors."""

    pass


class EmailSendError(EmailError):
    """Failed to reach the email provider."""

    def __init__(self, recipient: str, error: str) -> None:
        self.recipient = recipient
        self.error = error
        super().__init__(f"Failed to send email to {recipient}: {error}")
