"""
Waitlist component models.

Data models for subscriber admission and administration.

Lifecycle: Subscriber is created on admission, never mutated,
and removed only by an explicit admin delete.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class SubscriberRole(Enum):
    """Who the entrant signs up as."""

    CUSTOMER = "customer"
    PROVIDER = "provider"


class NotificationPolicy(Enum):
    """
    How admission reacts when the welcome email cannot be sent.

    - strict: report failure, keep the persisted record
    - best_effort: log the failure, report success
    - compensate: delete the persisted record, report failure
    """

    STRICT = "strict"
    BEST_EFFORT = "best_effort"
    COMPENSATE = "compensate"


# --- Entity ---


@dataclass(frozen=True)
class Subscriber:
    """Waitlist entrant, keyed by normalized email."""

    name: str
    email: str
    role: SubscriberRole
    joined_at: datetime = field(default_factory=lambda: datetime.now(UTC))


# --- Input Models ---


@dataclass(frozen=True)
class JoinInput:
    """Input for joining the waitlist. Fields are raw request values."""

    name: str | None
    email: str | None
    role: str | None


@dataclass(frozen=True)
class CountInput:
    """Input for the subscriber count query."""


@dataclass(frozen=True)
class ListInput:
    """Input for listing all subscribers."""


@dataclass(frozen=True)
class DeleteInput:
    """Input for deleting a subscriber."""

    email: str | None


@dataclass(frozen=True)
class BulkEmailInput:
    """Transient bulk email request."""

    subject: str | None
    body: str | None
    emails: list[str] = field(default_factory=list)


# --- Output Models ---


@dataclass(frozen=True)
class WaitlistError:
    """Error detail."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class JoinOutput:
    """Output from an admission attempt."""

    success: bool
    message: str = ""
    count: int | None = None
    subscriber: Subscriber | None = None
    notified: bool = False
    errors: list[WaitlistError] = field(default_factory=list)


@dataclass(frozen=True)
class CountOutput:
    """Output from the count query. available=False means the count degraded to 0."""

    count: int
    available: bool = True


@dataclass(frozen=True)
class ListOutput:
    """Output from listing subscribers."""

    success: bool
    subscribers: list[Subscriber] = field(default_factory=list)
    errors: list[WaitlistError] = field(default_factory=list)


@dataclass(frozen=True)
class DeleteOutput:
    """Output from deleting a subscriber."""

    success: bool
    message: str = ""
    errors: list[WaitlistError] = field(default_factory=list)


@dataclass(frozen=True)
class RecipientResult:
    """Send outcome for one bulk email recipient."""

    email: str
    sent: bool
    error: str | None = None


@dataclass(frozen=True)
class BulkEmailOutput:
    """Output from a bulk send. Results are in request order."""

    success: bool
    message: str = ""
    results: list[RecipientResult] = field(default_factory=list)
    errors: list[WaitlistError] = field(default_factory=list)

    @property
    def sent(self) -> list[str]:
        return [r.email for r in self.results if r.sent]

    @property
    def failed(self) -> list[str]:
        return [r.email for r in self.results if not r.sent]


# --- Configuration ---


@dataclass(frozen=True)
class WaitlistConfig:
    """Waitlist component configuration."""

    site_name: str = "Steerify"
    welcome_subject: str = "Welcome to the Steerify Waitlist!"
    notification_policy: NotificationPolicy = NotificationPolicy.STRICT
    degrade_count_on_error: bool = True
    bulk_max_concurrency: int = 10
    bulk_escape_html: bool = False


# --- Error Types ---


class WaitlistServiceError(Exception):
    """Base waitlist error."""

    pass


class StoreError(WaitlistServiceError):
    """Subscriber store operation failed."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store {operation} failed: {reason}")
