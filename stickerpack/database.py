"""SQLite key/value item store holding account credentials."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .utils import DatabaseError

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class ItemStore:
    """Read and write string items by id.

    The uploader only reads from the store; items are written by the
    ``login`` command.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """
        Open a connection with transaction management.
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise DatabaseError(str(exc)) from exc
        try:
            conn.execute("BEGIN")
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise DatabaseError(str(exc)) from exc
        finally:
            conn.close()

    def init(self) -> None:
        """
        Create the database file and schema if missing.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self.get_connection() as conn:
            conn.executescript(SCHEMA)

    def get_item(self, item_id: str) -> Optional[str]:
        """
        Fetch an item value.

        Args:
            item_id: Item identifier.

        Returns:
            Stored value or None if the item (or the store) does not exist.
        """
        if not self.db_path.exists():
            return None
        with self.get_connection() as conn:
            try:
                row = conn.execute(
                    "SELECT value FROM items WHERE id = ?", (item_id,)
                ).fetchone()
            except sqlite3.OperationalError:
                logger.debug("Item store %s has no items table.", self.db_path)
                return None
        return row[0] if row else None

    def put_item(self, item_id: str, value: str) -> None:
        """
        Insert or replace an item.

        Args:
            item_id: Item identifier.
            value: Item value.
        """
        self.init()
        with self.get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO items (id, value) VALUES (?, ?)",
                (item_id, value),
            )

    def remove_item(self, item_id: str) -> None:
        """
        Delete an item if present.

        Args:
            item_id: Item identifier.
        """
        if not self.db_path.exists():
            return
        with self.get_connection() as conn:
            conn.execute("DELETE FROM items WHERE id = ?", (item_id,))
