from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite_db import SQLiteSubscriberRepo
from src.api.deps import get_email_adapter, get_subscriber_repo, get_waitlist_config
from src.api.main import app
from src.components.waitlist.models import WaitlistConfig


@pytest.fixture
def test_db_path(tmp_path) -> str:
    return str(tmp_path / "waitlist.db")


@pytest.fixture
def test_repo(test_db_path: str) -> SQLiteSubscriberRepo:
    """Subscriber store backed by a temporary SQLite file."""
    return SQLiteSubscriberRepo(test_db_path)


@pytest.fixture
def test_email_adapter() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def test_config() -> WaitlistConfig:
    return WaitlistConfig(site_name="Test Site", welcome_subject="Welcome!")


@pytest.fixture
def client(
    test_repo: SQLiteSubscriberRepo,
    test_email_adapter: DevEmailAdapter,
    test_config: WaitlistConfig,
) -> Generator[TestClient, None, None]:
    """Create test client with dependency overrides."""
    app.dependency_overrides[get_subscriber_repo] = lambda: test_repo
    app.dependency_overrides[get_email_adapter] = lambda: test_email_adapter
    app.dependency_overrides[get_waitlist_config] = lambda: test_config

    yield TestClient(app)

    app.dependency_overrides.clear()
