import logging
import os
from functools import lru_cache
from pathlib import Path

from src.adapters.dev_email import DevEmailAdapter
from src.adapters.resend_email import create_resend_adapter
from src.adapters.sqlite_db import SQLiteSubscriberRepo
from src.components.waitlist.models import WaitlistConfig
from src.core.ports.email import EmailPort
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("WAITLIST_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "waitlist.db")
        self.rules_path = Path(
            os.environ.get("WAITLIST_RULES_PATH", str(self.base_dir / "waitlist.yaml"))
        )
        self.resend_api_key = os.environ.get("RESEND_API_KEY", "").strip()
        self.email_backend = os.environ.get("WAITLIST_EMAIL_BACKEND", "resend").strip().lower()
        self.cors_origins = [
            origin.strip()
            for origin in os.environ.get("WAITLIST_CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


def get_waitlist_config() -> WaitlistConfig:
    return get_rules().to_waitlist_config()


# --- Repos ---
@lru_cache
def get_subscriber_repo() -> SQLiteSubscriberRepo:
    settings = get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return SQLiteSubscriberRepo(settings.db_path)


# --- Email ---
@lru_cache
def get_email_adapter() -> EmailPort | None:
    """
    Build the process-wide email adapter once.

    Returns None when no credential is configured; the waitlist
    reports that per request instead of failing startup.
    """
    settings = get_settings()

    if settings.email_backend == "dev":
        logger.info("Email backend: dev (emails are logged, not sent)")
        return DevEmailAdapter()

    if not settings.resend_api_key:
        logger.error("RESEND_API_KEY missing; email sending is disabled")
        return None

    logger.info("Email backend: resend")
    return create_resend_adapter(settings.resend_api_key, get_rules().email.sender)
