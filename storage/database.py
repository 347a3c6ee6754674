# storage/database.py
"""
Database access layer for the SecOps Task Tracker.

Exposes one parameterized-query primitive (``query``) that every service
and the chatbot build on, plus ``execute``/``transaction`` for writes.
SQL uses positional ``?`` placeholders.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from storage.schema import init_database

logger = logging.getLogger(__name__)


class Database(object):
    """
    SQLite wrapper shared by all request handlers.

    A single connection is opened per instance; access is serialized with a
    re-entrant lock so the instance can be handed to FastAPI's threadpool.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.RLock()
        self.conn = init_database(path)
        logger.info("SQLite database connected: %s", path)

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    # =====================================================
    # QUERY PRIMITIVES
    # =====================================================

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        Run a read statement and return every row as a dict.

        Args:
            sql: SQL text with positional placeholders
            params: Values for the placeholders

        Returns:
            List of row dictionaries (empty when nothing matched)
        """
        with self._lock:
            cursor = self.conn.execute(sql, tuple(params))
            rows = cursor.fetchall()
        return [dict(row) for row in rows]

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        """Return the first row of ``sql`` or None."""
        rows = self.query(sql, params)
        return rows[0] if rows else None

    def scalar(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Return the first column of the first row, or None."""
        with self._lock:
            row = self.conn.execute(sql, tuple(params)).fetchone()
        return row[0] if row else None

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """
        Run a write statement and commit it.

        Returns:
            lastrowid for INSERTs, otherwise the affected row count
        """
        with self._lock:
            cursor = self.conn.execute(sql, tuple(params))
            self.conn.commit()
            if sql.lstrip().upper().startswith('INSERT'):
                return cursor.lastrowid
            return cursor.rowcount

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Group several writes into one commit.

        The yielded connection must be used for every statement of the unit;
        any exception rolls the whole unit back and is re-raised.
        """
        with self._lock:
            try:
                yield self.conn
                self.conn.commit()
            except Exception:
                self.conn.rollback()
                logger.exception("Transaction rolled back")
                raise


# Global database instance
_db = None


def get_db() -> Database:
    """Get or create the process-wide database used by the HTTP app."""
    global _db
    if _db is None:
        from config.settings import settings
        _db = Database(settings.get_sqlite_path())
    return _db
