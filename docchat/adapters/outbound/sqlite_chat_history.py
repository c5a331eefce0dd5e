"""SQLite adapter for storing chat history."""

import json
import logging
import sqlite3
from pathlib import Path

from ...core.domain import ChatHistoryEntry, ChatHistoryPage

logger = logging.getLogger(__name__)


class SQLiteChatHistoryAdapter:
    """Chat history persisted in SQLite, capped per user."""

    def __init__(self, db_path: str | Path = "data/chat_history.db", max_entries: int = 100) -> None:
        """Initialize the SQLite adapter.

        Args:
            db_path: Path to the SQLite database file.
            max_entries: Most recent exchanges kept per user.
        """
        self.db_path = Path(db_path)
        self.max_entries = max_entries
        self._ensure_db_dir()
        self._init_db()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        """Initialize the database schema."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS chat_history (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        user_id TEXT NOT NULL,
                        message TEXT NOT NULL,
                        response TEXT NOT NULL,
                        sources TEXT NOT NULL DEFAULT '[]',
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_chat_history_user
                    ON chat_history(user_id, id)
                """)

                conn.commit()

        except sqlite3.Error as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    def record(self, user_id: str, message: str, response: str, sources: list[str]) -> int:
        """Insert one exchange and prune the user's oldest entries.

        Returns:
            ID of the inserted record.
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO chat_history (user_id, message, response, sources)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, message, response, json.dumps(sources, ensure_ascii=False)),
            )
            entry_id = cursor.lastrowid or 0

            if self.max_entries > 0:
                cursor.execute(
                    """
                    DELETE FROM chat_history
                    WHERE user_id = ? AND id NOT IN (
                        SELECT id FROM chat_history
                        WHERE user_id = ?
                        ORDER BY id DESC
                        LIMIT ?
                    )
                    """,
                    (user_id, user_id, self.max_entries),
                )
            conn.commit()
            return entry_id

    def list_history(self, user_id: str, limit: int = 50, offset: int = 0) -> ChatHistoryPage:
        """Return the user's exchanges, newest first."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM chat_history WHERE user_id = ?", (user_id,))
            total = cursor.fetchone()[0]

            cursor.execute(
                """
                SELECT id, user_id, message, response, sources, created_at
                FROM chat_history
                WHERE user_id = ?
                ORDER BY id DESC
                LIMIT ? OFFSET ?
                """,
                (user_id, limit, offset),
            )
            rows = cursor.fetchall()

        entries = [
            ChatHistoryEntry(
                entry_id=row[0],
                user_id=row[1],
                message=row[2],
                response=row[3],
                sources=json.loads(row[4] or "[]"),
                created_at=str(row[5]),
            )
            for row in rows
        ]
        return ChatHistoryPage(entries=entries, total=total, has_more=offset + len(entries) < total)
