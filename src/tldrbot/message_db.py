"""SQLite message log.

Every guild message the bot sees is recorded here so the tldr command can
read a window back without hitting the Discord API.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from tldrbot.summarization.window import SelectionCriteria, StoredMessage

_LOG = logging.getLogger(__name__)


class MessageDB:
    """Database interface for the per-guild message log.

    Satisfies the ``MessageStore`` protocol used by the summarization
    pipeline.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)

    # ==================== Database Connection ====================

    @contextmanager
    def _get_connection(self, row_factory: bool = False) -> Iterator[sqlite3.Connection]:
        """Get a database connection that commits on success and always closes."""
        conn = sqlite3.connect(self.db_path)
        try:
            if row_factory:
                conn.row_factory = sqlite3.Row
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create the messages table and its index if they don't exist."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with self._get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS messages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    platform TEXT NOT NULL,
                    message_id TEXT NOT NULL,
                    guild_id TEXT NOT NULL,
                    channel_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    username TEXT NOT NULL,
                    content TEXT NOT NULL,
                    timestamp INTEGER NOT NULL,
                    UNIQUE (platform, message_id)
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_messages_guild_time "
                "ON messages(platform, guild_id, timestamp)"
            )
        _LOG.debug("Message log ready at %s", self.db_path)

    # ==================== Writes ====================

    def log_message(self, message: StoredMessage) -> None:
        """Record a message; re-recording the same message id is a no-op."""
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO messages
                (platform, message_id, guild_id, channel_id, user_id, username,
                 content, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    message.platform,
                    message.message_id,
                    message.guild_id,
                    message.channel_id,
                    message.user_id,
                    message.username,
                    message.content,
                    message.timestamp,
                ),
            )

    # ==================== Reads ====================

    def query(self, criteria: SelectionCriteria) -> list[StoredMessage]:
        """Return matching messages, newest first, at most ``criteria.limit`` rows.

        Ties on timestamp fall back to insertion order so repeated queries
        agree with each other.
        """
        clauses = ["platform = ?", "guild_id = ?"]
        params: list[object] = [criteria.platform, criteria.guild_id]
        if criteria.user_id is not None:
            clauses.append("user_id = ?")
            params.append(criteria.user_id)
        if criteria.min_timestamp is not None:
            clauses.append("timestamp >= ?")
            params.append(criteria.min_timestamp)
        params.append(criteria.limit)

        sql = (
            "SELECT * FROM messages WHERE "
            + " AND ".join(clauses)
            + " ORDER BY timestamp DESC, id DESC LIMIT ?"
        )
        with self._get_connection(row_factory=True) as conn:
            cursor = conn.execute(sql, params)
            return [self._row_to_message(row) for row in cursor.fetchall()]

    def _row_to_message(self, row: sqlite3.Row) -> StoredMessage:
        return StoredMessage(
            platform=row["platform"],
            guild_id=row["guild_id"],
            user_id=row["user_id"],
            username=row["username"],
            content=row["content"],
            timestamp=int(row["timestamp"]),
            message_id=row["message_id"],
            channel_id=row["channel_id"],
        )
