"""
Unit tests for the admin waitlist API endpoints.

GET /api/waitlist/subscribers, DELETE /api/waitlist/subscriber/{email},
POST /api/waitlist/bulk-email.
"""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite_db import SQLiteSubscriberRepo
from src.api.deps import get_email_adapter, get_subscriber_repo
from src.api.main import app
from src.components.waitlist.models import Subscriber, SubscriberRole


class FailingStore:
    def list_all(self):  # type: ignore[no-untyped-def]
        raise RuntimeError("store offline")

    def delete(self, email):  # type: ignore[no-untyped-def]
        raise RuntimeError("store offline")


@pytest.fixture
def sample_subscribers(test_repo: SQLiteSubscriberRepo) -> list[Subscriber]:
    base = datetime(2026, 3, 1, 9, 30, 15, 123456, tzinfo=UTC)
    subscribers = [
        Subscriber("Ada", "ada@example.com", SubscriberRole.CUSTOMER, base),
        Subscriber("Bob", "bob@example.com", SubscriberRole.PROVIDER, base + timedelta(minutes=5)),
        Subscriber("Cy", "cy@example.com", SubscriberRole.CUSTOMER, base + timedelta(hours=2)),
    ]
    for s in subscribers:
        test_repo.add_if_absent(s)
    return subscribers


# --- List Subscribers ---


class TestListSubscribers:
    """Tests for GET /api/waitlist/subscribers."""

    def test_list_all(
        self, client: TestClient, sample_subscribers: list[Subscriber]
    ) -> None:
        response = client.get("/api/waitlist/subscribers")

        assert response.status_code == 200
        data = response.json()
        assert [s["email"] for s in data["subscribers"]] == [
            "ada@example.com",
            "bob@example.com",
            "cy@example.com",
        ]
        assert data["subscribers"][1] == {
            "name": "Bob",
            "email": "bob@example.com",
            "role": "provider",
            "joinedAt": "2026-03-01T09:35:15.123456+00:00",
        }

    def test_joined_at_round_trips(
        self, client: TestClient, sample_subscribers: list[Subscriber]
    ) -> None:
        data = client.get("/api/waitlist/subscribers").json()

        parsed = datetime.fromisoformat(data["subscribers"][0]["joinedAt"])
        assert parsed == sample_subscribers[0].joined_at

    def test_list_empty(self, client: TestClient) -> None:
        response = client.get("/api/waitlist/subscribers")

        assert response.status_code == 200
        assert response.json() == {"subscribers": []}

    def test_list_failure(self, client: TestClient) -> None:
        app.dependency_overrides[get_subscriber_repo] = lambda: FailingStore()

        response = client.get("/api/waitlist/subscribers")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Error fetching subscribers",
            "subscribers": [],
        }


# --- Delete Subscriber ---


class TestDeleteSubscriber:
    """Tests for DELETE /api/waitlist/subscriber/{email}."""

    def test_delete(
        self,
        client: TestClient,
        test_repo: SQLiteSubscriberRepo,
        sample_subscribers: list[Subscriber],
    ) -> None:
        response = client.delete("/api/waitlist/subscriber/ada@example.com")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Subscriber deleted successfully",
        }
        assert test_repo.get_by_email("ada@example.com") is None

        listed = client.get("/api/waitlist/subscribers").json()["subscribers"]
        assert "ada@example.com" not in [s["email"] for s in listed]

    def test_delete_twice_is_not_found(
        self, client: TestClient, sample_subscribers: list[Subscriber]
    ) -> None:
        client.delete("/api/waitlist/subscriber/ada@example.com")

        response = client.delete("/api/waitlist/subscriber/ada@example.com")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Subscriber not found"}

    def test_delete_url_encoded_email(
        self, client: TestClient, sample_subscribers: list[Subscriber]
    ) -> None:
        response = client.delete("/api/waitlist/subscriber/Bob%40Example.com")

        assert response.status_code == 200

    def test_delete_missing_email(self, client: TestClient) -> None:
        response = client.delete("/api/waitlist/subscriber/%20")

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Email is required"}

    def test_delete_store_failure(self, client: TestClient) -> None:
        app.dependency_overrides[get_subscriber_repo] = lambda: FailingStore()

        response = client.delete("/api/waitlist/subscriber/ada@example.com")

        assert response.status_code == 500
        assert response.json()["message"] == (
            "An unexpected error occurred while deleting subscriber."
        )


# --- Bulk Email ---


class TestBulkEmail:
    """Tests for POST /api/waitlist/bulk-email."""

    def test_bulk_send(
        self, client: TestClient, test_email_adapter: DevEmailAdapter
    ) -> None:
        response = client.post(
            "/api/waitlist/bulk-email",
            json={
                "subject": "We're live",
                "body": "Hello!\nWe launched.",
                "emails": ["a@x.com", "b@x.com"],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Sent to 2 subscriber(s)."
        assert data["sent"] == ["a@x.com", "b@x.com"]
        assert data["failed"] == []

        email = test_email_adapter.get_emails_to("a@x.com")[0]
        assert email.subject == "We're live"
        assert "Hello!<br/>We launched." in email.body_html

    def test_bulk_partial_failure(
        self, client: TestClient, test_email_adapter: DevEmailAdapter
    ) -> None:
        test_email_adapter.fail_recipients.add("b@x.com")

        response = client.post(
            "/api/waitlist/bulk-email",
            json={"subject": "S", "body": "B", "emails": ["a@x.com", "b@x.com", "c@x.com"]},
        )

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["message"] == "Failed to send to: b@x.com"
        assert data["failed"] == ["b@x.com"]
        assert data["sent"] == ["a@x.com", "c@x.com"]
        # Sends that went out are not undone
        assert test_email_adapter.get_emails_to("a@x.com")
        assert test_email_adapter.get_emails_to("c@x.com")

    @pytest.mark.parametrize(
        "payload",
        [
            {"subject": "", "body": "B", "emails": ["a@x.com"]},
            {"subject": "S", "emails": ["a@x.com"]},
            {"subject": "S", "body": "B", "emails": []},
            {"subject": "S", "body": "B"},
        ],
    )
    def test_bulk_missing_fields(
        self,
        client: TestClient,
        test_email_adapter: DevEmailAdapter,
        payload: dict,
    ) -> None:
        response = client.post("/api/waitlist/bulk-email", json=payload)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Subject, body, and at least one recipient are required.",
        }
        assert test_email_adapter.email_count == 0

    def test_bulk_not_configured(self, client: TestClient) -> None:
        app.dependency_overrides[get_email_adapter] = lambda: None

        response = client.post(
            "/api/waitlist/bulk-email",
            json={"subject": "S", "body": "B", "emails": ["a@x.com"]},
        )

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Email service not configured.",
        }
