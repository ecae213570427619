"""
Unit tests for DevEmailAdapter.

Tests cover:
1. Basic send_email functionality
2. Status is SKIPPED (not SENT)
3. Failure injection for chosen recipients
4. Email storage for test assertions
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from src.adapters.dev_email import DevEmailAdapter, SentEmail
from src.core.ports.email import EmailStatus


class TestDevEmailAdapterSendEmail:
    """Tests for send_email."""

    def test_send_email_returns_skipped_status(self) -> None:
        adapter = DevEmailAdapter()

        result = adapter.send_email(
            recipient="user@example.com",
            subject="Test Subject",
            body_html="<p>Test body</p>",
        )

        assert result.status == EmailStatus.SKIPPED
        assert result.ok is True
        assert result.error == "Dev mode - email logged, not sent"

    def test_send_email_includes_message_id(self) -> None:
        adapter = DevEmailAdapter()

        result = adapter.send_email("user@example.com", "Test", "<p>Test</p>")

        assert result.message_id is not None
        assert result.message_id.startswith("dev-")
        assert result.recipient == "user@example.com"

    def test_send_email_stores_email(self) -> None:
        adapter = DevEmailAdapter()

        adapter.send_email("user@example.com", "Hello", "<p>Hi</p>", "Hi")

        assert adapter.email_count == 1
        email = adapter.get_last_email()
        assert isinstance(email, SentEmail)
        assert email.subject == "Hello"
        assert email.body_text == "Hi"

    def test_send_email_logs(self, caplog) -> None:
        adapter = DevEmailAdapter()

        with caplog.at_level(logging.INFO, logger="src.adapters.dev_email"):
            adapter.send_email("user@example.com", "Logged", "<p>" + "x" * 200 + "</p>")

        assert "EMAIL (dev): To=user@example.com" in caplog.text
        assert "Subject=Logged" in caplog.text
        assert "..." in caplog.text

    def test_log_body_disabled(self, caplog) -> None:
        adapter = DevEmailAdapter(log_body=False)

        with caplog.at_level(logging.INFO, logger="src.adapters.dev_email"):
            adapter.send_email("user@example.com", "Quiet", "<p>secret body</p>")

        assert "secret body" not in caplog.text


class TestDevEmailAdapterFailures:
    """Failure injection used by waitlist tests."""

    def test_fail_recipient_returns_failed(self) -> None:
        adapter = DevEmailAdapter(fail_recipients={"bad@example.com"})

        result = adapter.send_email("bad@example.com", "S", "<p>B</p>")

        assert result.status == EmailStatus.FAILED
        assert result.ok is False
        assert result.error == "Simulated provider rejection"
        assert adapter.email_count == 0

    def test_other_recipients_unaffected(self) -> None:
        adapter = DevEmailAdapter(fail_recipients={"bad@example.com"})

        result = adapter.send_email("good@example.com", "S", "<p>B</p>")

        assert result.ok is True


class TestDevEmailAdapterHelpers:
    def test_get_emails_to(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send_email("a@example.com", "One", "<p>1</p>")
        adapter.send_email("b@example.com", "Two", "<p>2</p>")
        adapter.send_email("a@example.com", "Three", "<p>3</p>")

        assert [e.subject for e in adapter.get_emails_to("a@example.com")] == ["One", "Three"]

    def test_clear(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send_email("a@example.com", "One", "<p>1</p>")

        adapter.clear()

        assert adapter.email_count == 0
        assert adapter.get_last_email() is None

    def test_concurrent_sends_are_all_recorded(self) -> None:
        adapter = DevEmailAdapter(log_body=False)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(
                lambda i: adapter.send_email(f"u{i}@example.com", "S", "<p>B</p>"),
                range(50),
            ))

        assert adapter.email_count == 50
