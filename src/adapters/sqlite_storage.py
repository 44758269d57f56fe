"""SQLite storage adapter.

Implements the core StoragePort: the append-only rule table and the
per-sender reputation ledger, behind one shared connection.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from typing import List, Optional

from core.errors import StorageError
from core.models import ReputationRecord, Rule

LOGGER = logging.getLogger(__name__)


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the StoragePort contract.

    A single connection is shared by every caller and guarded by one lock,
    held for the whole of each operation, so all reads and writes are
    serialized, including upserts for different senders.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("storage is not initialized, call init_db() first")
        return self._conn

    def init_db(self) -> None:
        """Open the database and create tables if they do not exist.

        Tables:
        - rules: append-only (keyword, score) scoring rules
        - senders: per-sender spam-flag and message counters

        Safe to call on an existing database; rows are never dropped.
        """

        with self._lock:
            try:
                if self._conn is None:
                    conn = sqlite3.connect(self._db_path, check_same_thread=False)
                    conn.row_factory = sqlite3.Row
                    self._conn = conn
                with self._conn as conn:
                    # rules has no uniqueness on keyword: duplicates are allowed.
                    # Fields:
                    # - id: auto-increment primary key, gives load order
                    # - keyword: text matched against messages
                    # - score: weight of the keyword
                    conn.execute(
                        """
                        CREATE TABLE IF NOT EXISTS rules (
                            id INTEGER PRIMARY KEY AUTOINCREMENT,
                            keyword TEXT NOT NULL,
                            score REAL NOT NULL
                        )
                        """
                    )
                    # senders keeps monotonically growing counters per user.
                    # Fields:
                    # - user_id: platform sender id (PRIMARY KEY)
                    # - spam_score: number of messages classified as spam
                    # - message_count: number of evaluated messages
                    conn.execute(
                        """
                        CREATE TABLE IF NOT EXISTS senders (
                            user_id TEXT PRIMARY KEY,
                            spam_score INTEGER DEFAULT 0,
                            message_count INTEGER DEFAULT 0
                        )
                        """
                    )
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to open database {self._db_path}: {exc}") from exc
        LOGGER.info("Database ready at %s", self._db_path)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def insert_rule(self, keyword: str, score: float) -> None:
        """Append a rule. Never deduplicates."""

        with self._lock:
            try:
                with self._connection() as conn:
                    conn.execute(
                        "INSERT INTO rules (keyword, score) VALUES (?, ?)",
                        (keyword, float(score)),
                    )
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to insert rule {keyword!r}: {exc}") from exc

    def load_all_rules(self) -> List[Rule]:
        """Return every rule in insertion order."""

        with self._lock:
            try:
                rows = self._connection().execute(
                    "SELECT keyword, score FROM rules ORDER BY id"
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to load rules: {exc}") from exc
        return [Rule(keyword=row["keyword"], score=float(row["score"])) for row in rows]

    def count_rules(self) -> int:
        with self._lock:
            try:
                row = self._connection().execute("SELECT COUNT(*) AS total FROM rules").fetchone()
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to count rules: {exc}") from exc
        return int(row["total"])

    def upsert_sender(self, sender_id: str, flagged: bool) -> None:
        """Count one message for a sender in a single insert-or-update statement.

        The spam counter grows by one for flagged messages and is left as is
        otherwise; it is never decremented.
        """

        increment = 1 if flagged else 0
        with self._lock:
            try:
                with self._connection() as conn:
                    conn.execute(
                        """
                        INSERT INTO senders (user_id, spam_score, message_count)
                        VALUES (?, ?, 1)
                        ON CONFLICT(user_id) DO UPDATE SET
                            spam_score = spam_score + excluded.spam_score,
                            message_count = message_count + 1
                        """,
                        (sender_id, increment),
                    )
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to update sender {sender_id}: {exc}") from exc

    def get_record(self, sender_id: str) -> Optional[ReputationRecord]:
        """Return the sender's counters, or None when the sender is unknown."""

        with self._lock:
            try:
                row = self._connection().execute(
                    "SELECT user_id, spam_score, message_count FROM senders WHERE user_id = ?",
                    (sender_id,),
                ).fetchone()
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to read sender {sender_id}: {exc}") from exc
        if row is None:
            return None
        return ReputationRecord(
            sender_id=row["user_id"],
            spam_flag_count=int(row["spam_score"] or 0),
            message_count=int(row["message_count"] or 0),
        )

    def get_spam_score(self, sender_id: str) -> int:
        """Return the sender's spam-flag count.

        Unknown senders and read failures both yield 0; use get_record() when
        the difference matters.
        """

        try:
            record = self.get_record(sender_id)
        except StorageError as exc:
            LOGGER.warning("Reputation read failed for %s, assuming 0: %s", sender_id, exc)
            return 0
        return record.spam_flag_count if record else 0


def open_storage(db_path: str) -> SQLiteStorage:
    """Create a storage adapter with its schema ready."""

    storage = SQLiteStorage(db_path)
    storage.init_db()
    return storage
