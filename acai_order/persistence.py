"""SQLite storage for the cart session identifier."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

from acai_order.config import CART_DB_PATH


@dataclass(frozen=True)
class SavedCart:
    """The stored cart session and its last known item count."""

    session_id: str
    item_count: int
    updated_at: str


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _connect(db_path: str | Path | None = None) -> sqlite3.Connection:
    db_file = Path(db_path or CART_DB_PATH)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(db_file)


def bootstrap_schema(db_path: str | Path | None = None) -> None:
    """Create the cart table if it does not already exist."""
    with _connect(db_path) as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS cart_session (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                session_id TEXT NOT NULL,
                item_count INTEGER NOT NULL DEFAULT 0,
                updated_at TEXT NOT NULL
            );
            """
        )


def load_cart(db_path: str | Path | None = None) -> SavedCart | None:
    """Return the stored cart session, if any."""
    with _connect(db_path) as conn:
        row = conn.execute("SELECT session_id, item_count, updated_at FROM cart_session WHERE id = 1").fetchone()
    if row is None:
        return None
    return SavedCart(session_id=row[0], item_count=int(row[1]), updated_at=row[2])


def save_cart(session_id: str, item_count: int, db_path: str | Path | None = None) -> SavedCart:
    """Insert or replace the single stored cart session."""
    if not session_id:
        raise ValueError("session_id is required")
    if item_count < 0:
        raise ValueError("item_count must not be negative")

    updated_at = _utc_now_iso()
    with _connect(db_path) as conn:
        with conn:
            conn.execute(
                """
                INSERT INTO cart_session (id, session_id, item_count, updated_at)
                VALUES (1, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    session_id = excluded.session_id,
                    item_count = excluded.item_count,
                    updated_at = excluded.updated_at
                """,
                (session_id, item_count, updated_at),
            )
    return SavedCart(session_id=session_id, item_count=item_count, updated_at=updated_at)


def load_or_create_cart(db_path: str | Path | None = None) -> SavedCart:
    """Load the stored cart session, creating a fresh one on first run."""
    bootstrap_schema(db_path)
    saved = load_cart(db_path)
    if saved is not None:
        return saved
    return save_cart(uuid4().hex, 0, db_path)
