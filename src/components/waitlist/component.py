"""
Waitlist component.

Functional core for waitlist admission and administration.

Key behaviors:
- Join: validate, add-if-absent by normalized email, send welcome email
- Count: never fails, degrades to 0 and records the degradation
- List / Delete: admin operations over the subscriber store
- Bulk email: bounded worker pool with per-recipient results

Invariants:
- At most one admission side-effect (record + welcome email) per email
- Validation failures perform no store write and no send
- Successful bulk sends are never undone, failures are reported exactly
"""

from __future__ import annotations

import html
import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime

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
    Subscriber,
    SubscriberRole,
    WaitlistConfig,
    WaitlistError,
)
from src.components.waitlist.ports import SubscriberRepoPort
from src.core.ports.email import EmailPort, EmailSendError

logger = logging.getLogger(__name__)

# --- Email Validation Regex (RFC 5322 simplified) ---
# No leading, trailing or doubled dots in the local part; alphabetic TLD.

EMAIL_REGEX = re.compile(
    r"^(?!\.)(?!.*\.\.)[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+(?<!\.)@"
    r"(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+"
    r"[a-zA-Z]{2,}$"
)

MAX_EMAIL_LENGTH = 254

VALID_ROLES = {role.value for role in SubscriberRole}

# --- Messages ---

JOIN_SUCCESS_MESSAGE = (
    "You have been added to the waitlist! Check your email for confirmation."
)
UNEXPECTED_JOIN_MESSAGE = "An unexpected error occurred. Please try again."
UNEXPECTED_DELETE_MESSAGE = "An unexpected error occurred while deleting subscriber."
UNEXPECTED_BULK_MESSAGE = "An error occurred while sending emails."
LIST_ERROR_MESSAGE = "Error fetching subscribers"

BULK_HTML_TEMPLATE = "<div style='font-family:sans-serif;line-height:1.5;'>{body}</div>"


# --- Observability ---


@dataclass
class WaitlistMetrics:
    """In-process counters. count_unavailable tells 'zero' apart from 'unknown'."""

    count_unavailable: int = 0

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def record_count_unavailable(self) -> None:
        with self._lock:
            self.count_unavailable += 1


metrics = WaitlistMetrics()


# --- Pure Functions (Functional Core) ---


def normalize_email(email: str) -> str:
    """Trim and lowercase an email so it can be used as the store key."""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return len(email) <= MAX_EMAIL_LENGTH and bool(EMAIL_REGEX.match(email))


def validate_join(inp: JoinInput) -> list[WaitlistError]:
    """
    Validate a join request.

    Rules are checked in order and only the first violation is
    reported, so the caller always gets one human-readable message.

    Returns:
        Empty list if valid, else a single-element list
    """
    if not inp.name or not inp.email or not inp.role:
        return [WaitlistError("MISSING_FIELDS", "All fields are required")]

    if not inp.name.strip():
        return [WaitlistError("EMPTY_NAME", "Name is required", "name")]

    if not is_valid_email(normalize_email(inp.email)):
        return [WaitlistError("INVALID_EMAIL", "Invalid email address", "email")]

    if inp.role not in VALID_ROLES:
        return [
            WaitlistError(
                "INVALID_ROLE",
                "Role must be either customer or provider",
                "role",
            )
        ]

    return []


def create_subscriber(
    inp: JoinInput,
    now: datetime | None = None,
) -> Subscriber:
    """
    Build the subscriber record for a validated join request.

    Args:
        inp: Validated input
        now: Join time (for testing)
    """
    if now is None:
        now = datetime.now(UTC)

    if not (inp.name and inp.email and inp.role):
        raise ValueError("Join input must be validated before creating a subscriber")

    return Subscriber(
        name=inp.name.strip(),
        email=normalize_email(inp.email),
        role=SubscriberRole(inp.role),
        joined_at=now,
    )


def render_welcome_email(name: str, email: str, site_name: str) -> tuple[str, str]:
    """
    Render the welcome email.

    Returns:
        (body_html, body_text)
    """
    safe_name = html.escape(name)
    safe_email = html.escape(email)
    safe_site = html.escape(site_name)

    body_html = (
        "<div style='font-family:sans-serif;line-height:1.5;'>"
        f"<h1>Welcome to {safe_site}, {safe_name}!</h1>"
        "<p>Thanks for joining our waitlist. We'll let you know as soon as "
        "we're ready for you.</p>"
        f"<p style='color:#666;font-size:12px;'>This email was sent to {safe_email}.</p>"
        "</div>"
    )
    body_text = (
        f"Welcome to {site_name}, {name}!\n\n"
        "Thanks for joining our waitlist. We'll let you know as soon as "
        "we're ready for you.\n\n"
        f"This email was sent to {email}."
    )
    return body_html, body_text


def render_bulk_html(body: str, escape: bool = False) -> str:
    """
    Convert a plain-text announcement body to HTML.

    Newlines become <br/>. With escape=False any HTML in the body
    is passed through verbatim.
    """
    if escape:
        body = html.escape(body)
    return BULK_HTML_TEMPLATE.format(body=body.replace("\n", "<br/>"))


def _send_welcome(
    subscriber: Subscriber,
    email_sender: EmailPort | None,
    config: WaitlistConfig,
) -> WaitlistError | None:
    """Send the welcome email. Returns the error, or None on success."""
    if email_sender is None:
        logger.error("Welcome email not sent to %s: email service not configured", subscriber.email)
        return WaitlistError("EMAIL_NOT_CONFIGURED", "Email service not configured")

    body_html, body_text = render_welcome_email(
        subscriber.name, subscriber.email, config.site_name
    )

    try:
        result = email_sender.send_email(
            subscriber.email,
            config.welcome_subject,
            body_html,
            body_text,
        )
    except Exception as e:
        logger.exception("Email service error for %s", subscriber.email)
        detail = e.error if isinstance(e, EmailSendError) else str(e)
        return WaitlistError("EMAIL_SERVICE_ERROR", f"Email service error: {detail}")

    if not result.ok:
        logger.error("Welcome email failed for %s: %s", subscriber.email, result.error)
        return WaitlistError("EMAIL_FAILED", f"Email failed: {result.error}")

    logger.info("Welcome email sent to %s", subscriber.email)
    return None


# --- Run Handlers (Functional Core) ---


def run_join(
    inp: JoinInput,
    repo: SubscriberRepoPort,
    *,
    email_sender: EmailPort | None = None,
    config: WaitlistConfig | None = None,
) -> JoinOutput:
    """
    Handle a join request (Atomic Handler).

    The record is persisted before the welcome email is sent; what a
    failed send means for the record is decided by notification_policy.
    """
    cfg = config or WaitlistConfig()

    errors = validate_join(inp)
    if errors:
        return JoinOutput(success=False, message=errors[0].message, errors=errors)

    try:
        subscriber = create_subscriber(inp)

        if not repo.add_if_absent(subscriber):
            logger.info("Duplicate waitlist join for email=%s", subscriber.email)
            error = WaitlistError(
                "DUPLICATE_EMAIL", "This email is already on the waitlist", "email"
            )
            return JoinOutput(success=False, message=error.message, errors=[error])

        logger.info(
            "New waitlist signup: email=%s role=%s", subscriber.email, subscriber.role.value
        )

        notify_error = _send_welcome(subscriber, email_sender, cfg)
        if notify_error is not None:
            if cfg.notification_policy == NotificationPolicy.BEST_EFFORT:
                logger.warning(
                    "Admitting %s without welcome email (best_effort): %s",
                    subscriber.email,
                    notify_error.message,
                )
            else:
                if cfg.notification_policy == NotificationPolicy.COMPENSATE:
                    _compensate(repo, subscriber)
                return JoinOutput(
                    success=False,
                    message=notify_error.message,
                    subscriber=subscriber,
                    errors=[notify_error],
                )
    except Exception:
        logger.exception("Error joining waitlist")
        error = WaitlistError("UNEXPECTED", UNEXPECTED_JOIN_MESSAGE)
        return JoinOutput(success=False, message=error.message, errors=[error])

    count = run_count(CountInput(), repo).count
    return JoinOutput(
        success=True,
        message=JOIN_SUCCESS_MESSAGE,
        count=count,
        subscriber=subscriber,
        notified=notify_error is None,
    )


def _compensate(repo: SubscriberRepoPort, subscriber: Subscriber) -> None:
    """Undo an admission whose welcome email failed."""
    try:
        repo.delete(subscriber.email)
        logger.info("Rolled back admission of %s after email failure", subscriber.email)
    except Exception:
        logger.exception("Rollback of %s failed; record remains", subscriber.email)


def run_count(
    inp: CountInput,
    repo: SubscriberRepoPort,
) -> CountOutput:
    """
    Handle the count query (Atomic Handler).

    Never raises: a store failure degrades to a count of 0 with
    available=False, a warning and a metrics increment.
    """
    try:
        return CountOutput(count=repo.count())
    except Exception:
        logger.warning("Waitlist count unavailable, reporting 0", exc_info=True)
        metrics.record_count_unavailable()
        return CountOutput(count=0, available=False)


def run_list(
    inp: ListInput,
    repo: SubscriberRepoPort,
) -> ListOutput:
    """Handle listing all subscribers (Atomic Handler)."""
    try:
        logger.info("Fetching all waitlist subscribers")
        subscribers = repo.list_all()
    except Exception:
        logger.exception("Error fetching subscribers")
        return ListOutput(
            success=False,
            subscribers=[],
            errors=[WaitlistError("UNEXPECTED", LIST_ERROR_MESSAGE)],
        )

    logger.info("Fetched %d subscribers", len(subscribers))
    return ListOutput(success=True, subscribers=subscribers)


def run_delete(
    inp: DeleteInput,
    repo: SubscriberRepoPort,
) -> DeleteOutput:
    """
    Handle deleting a subscriber (Atomic Handler).

    Not idempotent: deleting an already removed email reports NOT_FOUND.
    """
    if not inp.email or not inp.email.strip():
        error = WaitlistError("EMPTY_EMAIL", "Email is required", "email")
        return DeleteOutput(success=False, message=error.message, errors=[error])

    email = normalize_email(inp.email)

    try:
        deleted = repo.delete(email)
    except Exception:
        logger.exception("Error deleting subscriber %s", email)
        error = WaitlistError("UNEXPECTED", UNEXPECTED_DELETE_MESSAGE)
        return DeleteOutput(success=False, message=error.message, errors=[error])

    if not deleted:
        error = WaitlistError("NOT_FOUND", "Subscriber not found", "email")
        return DeleteOutput(success=False, message=error.message, errors=[error])

    logger.info("Deleted waitlist subscriber %s", email)
    return DeleteOutput(success=True, message="Subscriber deleted successfully")


def _send_one(
    email_sender: EmailPort,
    recipient: str,
    subject: str,
    body_html: str,
    body_text: str,
) -> RecipientResult:
    try:
        result = email_sender.send_email(recipient, subject, body_html, body_text)
    except Exception as e:
        logger.exception("Bulk email to %s raised", recipient)
        return RecipientResult(email=recipient, sent=False, error=str(e))

    if not result.ok:
        return RecipientResult(email=recipient, sent=False, error=result.error)
    return RecipientResult(email=recipient, sent=True)


def run_bulk_email(
    inp: BulkEmailInput,
    *,
    email_sender: EmailPort | None = None,
    config: WaitlistConfig | None = None,
) -> BulkEmailOutput:
    """
    Handle a bulk announcement (Atomic Handler).

    Every recipient is attempted on a bounded pool and the call waits
    for all of them. Any failed recipient fails the whole operation,
    naming exactly the recipients that failed.
    """
    cfg = config or WaitlistConfig()

    if email_sender is None:
        error = WaitlistError("EMAIL_NOT_CONFIGURED", "Email service not configured.")
        return BulkEmailOutput(success=False, message=error.message, errors=[error])

    if not inp.subject or not inp.body or not inp.emails:
        error = WaitlistError(
            "MISSING_BULK_FIELDS",
            "Subject, body, and at least one recipient are required.",
        )
        return BulkEmailOutput(success=False, message=error.message, errors=[error])

    subject = inp.subject
    body_text = inp.body
    body_html = render_bulk_html(inp.body, escape=cfg.bulk_escape_html)
    workers = max(1, min(cfg.bulk_max_concurrency, len(inp.emails)))

    try:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bulk-email") as pool:
            results = list(
                pool.map(
                    lambda recipient: _send_one(
                        email_sender, recipient, subject, body_html, body_text
                    ),
                    inp.emails,
                )
            )
    except Exception:
        logger.exception("Bulk email error")
        error = WaitlistError("UNEXPECTED", UNEXPECTED_BULK_MESSAGE)
        return BulkEmailOutput(success=False, message=error.message, errors=[error])

    failed = [r.email for r in results if not r.sent]
    logger.info(
        "Bulk email finished: %d sent, %d failed", len(results) - len(failed), len(failed)
    )

    if failed:
        error = WaitlistError("BULK_SEND_FAILED", f"Failed to send to: {', '.join(failed)}")
        return BulkEmailOutput(
            success=False,
            message=error.message,
            results=results,
            errors=[error],
        )

    return BulkEmailOutput(
        success=True,
        message=f"Sent to {len(inp.emails)} subscriber(s).",
        results=results,
    )


def run(
    inp: JoinInput | CountInput | ListInput | DeleteInput | BulkEmailInput,
    *,
    repo: SubscriberRepoPort,
    email_sender: EmailPort | None = None,
    config: WaitlistConfig | None = None,
) -> JoinOutput | CountOutput | ListOutput | DeleteOutput | BulkEmailOutput:
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Input command
        repo: Subscriber store port (Required)
        email_sender: Email port (Optional, None means unconfigured)
        config: Configuration (Optional)

    Returns:
        Operation result
    """
    if isinstance(inp, JoinInput):
        return run_join(inp, repo, email_sender=email_sender, config=config)
    elif isinstance(inp, CountInput):
        return run_count(inp, repo)
    elif isinstance(inp, ListInput):
        return run_list(inp, repo)
    elif isinstance(inp, DeleteInput):
        return run_delete(inp, repo)
    elif isinstance(inp, BulkEmailInput):
        return run_bulk_email(inp, email_sender=email_sender, config=config)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
