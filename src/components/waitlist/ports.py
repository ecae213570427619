"""
Waitlist component ports.

Protocol interfaces for waitlist dependencies.
Outbound email goes through the shared EmailPort in src.core.ports.
"""

from __future__ import annotations

from typing import Protocol

from src.components.waitlist.models import Subscriber


class SubscriberRepoPort(Protocol):
    """
    Subscriber store interface, keyed by normalized email.

    add_if_absent must be atomic: under concurrent calls for the
    same email at most one returns True.
    """

    def add_if_absent(self, subscriber: Subscriber) -> bool:
        """Insert subscriber. Returns False if the email already exists."""
        ...

    def delete(self, email: str) -> bool:
        """Delete subscriber by email. Returns False if not found."""
        ...

    def get_by_email(self, email: str) -> Subscriber | None:
        """Get subscriber by email."""
        ...

    def list_all(self) -> list[Subscriber]:
        """List all subscribers, oldest first."""
        ...

    def count(self) -> int:
        """Count all subscribers."""
        ...
