"""
SQLite Subscriber Store Adapter.

Implements SubscriberRepoPort using SQLite.
Uniqueness of the email key is enforced by the PRIMARY KEY, and
add_if_absent relies on INSERT ... ON CONFLICT DO NOTHING so that
concurrent joins for one email admit at most one subscriber.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any

from src.components.waitlist.models import StoreError, Subscriber, SubscriberRole

SCHEMA = """
CREATE TABLE IF NOT EXISTS waitlist_subscribers (
    email TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    role TEXT NOT NULL CHECK(role IN ('customer', 'provider')),
    joined_at TEXT NOT NULL
)
"""

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str) -> datetime:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s)


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection
        if connection is not None:
            connection.row_factory = dict_factory

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = dict_factory
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


# -----------------------------------------------------------------------------
# Subscriber Repository
# -----------------------------------------------------------------------------


class SQLiteSubscriberRepo(SQLiteRepoBase):
    """SQLite implementation of SubscriberRepoPort."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        super().__init__(db_path, connection)
        self.ensure_schema()

    def ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(SCHEMA)
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError("init", str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def add_if_absent(self, subscriber: Subscriber) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """
                INSERT INTO waitlist_subscribers (email, name, role, joined_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(email) DO NOTHING
                """,
                (
                    subscriber.email,
                    subscriber.name,
                    subscriber.role.value,
                    subscriber.joined_at.isoformat(),
                ),
            )
            conn.commit()
            return cursor.rowcount == 1
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError("insert", str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def delete(self, email: str) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "DELETE FROM waitlist_subscribers WHERE email = ?", (email,)
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError("delete", str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def get_by_email(self, email: str) -> Subscriber | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM waitlist_subscribers WHERE email = ?", (email,)
            ).fetchone()
            return self._map_row(row) if row else None
        except sqlite3.Error as e:
            raise StoreError("get", str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def list_all(self) -> list[Subscriber]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM waitlist_subscribers ORDER BY joined_at ASC, email ASC"
            ).fetchall()
            return [self._map_row(row) for row in rows]
        except sqlite3.Error as e:
            raise StoreError("list", str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def count(self) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT COUNT(*) AS total FROM waitlist_subscribers"
            ).fetchone()
            return int(row["total"]) if row else 0
        except sqlite3.Error as e:
            raise StoreError("count", str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> Subscriber:
        return Subscriber(
            name=row["name"],
            email=row["email"],
            role=SubscriberRole(row["role"]),
            joined_at=parse_dt(row["joined_at"]),
        )
