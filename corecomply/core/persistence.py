"""
Durable store snapshots keyed by store name.

Each store writes its whole state as one JSON document; rehydration reads it
back at process start.
"""

import json
import sqlite3
from typing import Any, Dict, List, Optional

from .db import get_db, init_db, health_check
from ..util.logging import logger


class StateRepository:
    """Key-value repository of store snapshots backed by SQLite."""

    def __init__(self, db_path: str = None):
        self.db_path = db_path
        init_db(db_path)

    def save_state(self, name: str, payload: Dict[str, Any]) -> None:
        """Insert or replace the snapshot for a store."""
        if not name or not name.strip():
            raise ValueError("store name cannot be empty")

        document = json.dumps(payload, ensure_ascii=False)
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "INSERT INTO store_state (name, payload, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
                    "ON CONFLICT(name) DO UPDATE SET payload = excluded.payload, updated_at = CURRENT_TIMESTAMP",
                    (name, document)
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to persist store '{name}': {e}")
            raise

        logger.log_store_persisted(name, len(document))

    def load_state(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the stored snapshot, or None when absent or unreadable."""
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT payload FROM store_state WHERE name = ?", (name,))
                row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to load store '{name}': {e}")
            return None

        if row is None:
            return None

        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt snapshot for store '{name}': {e}")
            return None

    def delete_state(self, name: str) -> bool:
        """Remove a store snapshot. Returns True if a row was deleted."""
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM store_state WHERE name = ?", (name,))
            conn.commit()
            return cursor.rowcount > 0

    def list_states(self) -> List[str]:
        """List the names of all persisted stores."""
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM store_state ORDER BY name")
            return [row[0] for row in cursor.fetchall()]

    def health_check(self) -> bool:
        return health_check(self.db_path)
