"""Token storage for the access/refresh token pair.

This module provides an in-memory store for tests and short-lived processes and
a SQLite-backed store that survives restarts.
"""

import logging
import os
import sqlite3
from typing import Optional

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


class TokenStore:
    """Interface for the local token store."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def get_access_token(self) -> Optional[str]:
        return self.get(ACCESS_TOKEN_KEY)

    def get_refresh_token(self) -> Optional[str]:
        return self.get(REFRESH_TOKEN_KEY)

    def set_access_token(self, token: str) -> None:
        self.set(ACCESS_TOKEN_KEY, token)

    def set_tokens(self, access_token: str, refresh_token: str) -> None:
        self.set(ACCESS_TOKEN_KEY, access_token)
        self.set(REFRESH_TOKEN_KEY, refresh_token)

    def clear(self) -> None:
        self.delete(ACCESS_TOKEN_KEY)
        self.delete(REFRESH_TOKEN_KEY)


class InMemoryTokenStore(TokenStore):
    def __init__(self):
        self._values = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class SqliteTokenStore(TokenStore):
    """A token store persisted in a small SQLite file readable only by its owner."""

    def __init__(self, db_path: str):
        """Initialize the store with the database path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_exists()

    def _ensure_db_exists(self) -> None:
        """Ensure the database file and tokens table exist."""
        db_dirname = os.path.dirname(self.db_path)
        if db_dirname:
            os.makedirs(db_dirname, exist_ok=True)

        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tokens (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

        try:
            os.chmod(self.db_path, 0o600)
        except OSError as e:
            logger.warning(f"Could not restrict permissions on {self.db_path}: {e!s}")

    def get(self, key: str) -> Optional[str]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM tokens WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO tokens (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM tokens WHERE key = ?", (key,))
            conn.commit()
