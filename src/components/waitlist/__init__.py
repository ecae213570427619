"""
Waitlist component.

Subscriber admission, welcome notification and admin operations.
"""

from src.components.waitlist.component import (
    EMAIL_REGEX,
    JOIN_SUCCESS_MESSAGE,
    WaitlistMetrics,
    create_subscriber,
    is_valid_email,
    metrics,
    normalize_email,
    render_bulk_html,
    render_welcome_email,
    run,
    run_bulk_email,
    run_count,
    run_delete,
    run_join,
    run_list,
    validate_join,
)
from src.components.waitlist.models import (
    BulkEmailInput,
    BulkEmailOutput,
    CountInput,
    CountOutput,
    DeleteInput,
    DeleteOutput,
    JoinInput,
    JoinOutput,
    ListInput,
    ListOutput,
    NotificationPolicy,
    RecipientResult,
    StoreError,
    Subscriber,
    SubscriberRole,
    WaitlistConfig,
    WaitlistError,
    WaitlistServiceError,
)
from src.components.waitlist.ports import SubscriberRepoPort

__all__ = [
    # Component
    "run",
    "run_join",
    "run_count",
    "run_list",
    "run_delete",
    "run_bulk_email",
    # Pure functions
    "validate_join",
    "normalize_email",
    "is_valid_email",
    "create_subscriber",
    "render_welcome_email",
    "render_bulk_html",
    # Constants / observability
    "EMAIL_REGEX",
    "JOIN_SUCCESS_MESSAGE",
    "WaitlistMetrics",
    "metrics",
    # Models
    "Subscriber",
    "SubscriberRole",
    "NotificationPolicy",
    "WaitlistConfig",
    # Input/Output
    "JoinInput",
    "JoinOutput",
    "CountInput",
    "CountOutput",
    "ListInput",
    "ListOutput",
    "DeleteInput",
    "DeleteOutput",
    "BulkEmailInput",
    "BulkEmailOutput",
    "RecipientResult",
    "WaitlistError",
    # Errors
    "WaitlistServiceError",
    "StoreError",
    # Ports
    "SubscriberRepoPort",
]
