"""SQLite-backed key/value persistence for whole JSON collections."""

from __future__ import annotations

import json
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

DATA_DIR = Path.home() / ".brain_gym"
DEFAULT_DB_PATH = DATA_DIR / "brain_gym.db"
DB_PATH = Path(os.environ.get("BRAIN_GYM_DB_PATH", DEFAULT_DB_PATH))

# Database file whose schema is known to exist
_schema_path: Path | None = None


@contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    """Yield a SQLite connection, committing on success."""

    connection = _open_connection()
    try:
        yield connection
        connection.commit()
    finally:
        connection.close()


def _open_connection() -> sqlite3.Connection:
    _ensure_data_dir()
    connection = sqlite3.connect(DB_PATH)
    connection.row_factory = sqlite3.Row
    return connection


def _ensure_data_dir() -> None:
    Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)


def now_iso(value: datetime | None = None) -> str:
    """Return the current UTC timestamp (seconds precision) as ISO 8601."""

    moment = value or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="seconds")


def init_db() -> None:
    """Initialise the database schema if tables are missing."""

    global _schema_path
    with connect() as connection:
        connection.execute(
            """
            CREATE TABLE IF NOT EXISTS collections (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
    _schema_path = Path(DB_PATH)


def _ensure_schema() -> None:
    if _schema_path != Path(DB_PATH):
        init_db()


def persist_get(key: str, default: Any = None) -> Any:
    """Return the decoded collection stored under key, or default."""

    _ensure_schema()
    with connect() as connection:
        row = connection.execute(
            "SELECT value FROM collections WHERE key = ?", (key,)
        ).fetchone()
    if row is None:
        return default
    try:
        return json.loads(row["value"])
    except (json.JSONDecodeError, TypeError):
        logger.warning("Stored collection '{}' is not valid JSON; using default", key)
        return default


def persist_set(key: str, value: Any) -> None:
    """Replace the whole collection stored under key."""

    _ensure_schema()
    encoded = json.dumps(value, ensure_ascii=False)
    timestamp = now_iso()
    with connect() as connection:
        connection.execute(
            """
            INSERT INTO collections (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, encoded, timestamp),
        )


__all__ = [
    "connect",
    "DB_PATH",
    "DEFAULT_DB_PATH",
    "init_db",
    "now_iso",
    "persist_get",
    "persist_set",
]
