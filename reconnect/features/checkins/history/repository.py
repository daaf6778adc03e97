"""
Read-only adapter over the Messages database (chat.db).

Responsible for the grouped per-counterpart query and for converting the
store's Apple-epoch timestamps into standard UTC datetimes.
"""

import asyncio
import os
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from reconnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

APPLE_EPOCH = datetime(2001, 1, 1, tzinfo=UTC)
_NANOSECONDS_THRESHOLD = 10**12
_SQLITE_INT_MIN = -(2**63)
DEFAULT_ROW_LIMIT = 50


class MessageStoreUnavailable(Exception):
    """The message store could not be opened or queried."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


def apple_time_to_datetime(raw: int | float | None) -> datetime | None:
    """Apple-epoch value (nanoseconds on current systems, seconds on old ones) -> UTC datetime."""
    if raw is None:
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    seconds = value / 1_000_000_000 if abs(value) > _NANOSECONDS_THRESHOLD else value
    return APPLE_EPOCH + timedelta(seconds=seconds)


def datetime_to_apple_time(dt: datetime) -> int:
    """UTC datetime -> Apple-epoch nanoseconds."""
    return int((dt - APPLE_EPOCH).total_seconds() * 1_000_000_000)


@dataclass(slots=True)
class MessageStatsRow:
    counterpart: str
    last_sent_native: int | None
    last_any_native: int
    message_count: int
    sent_count: int


_CONTACT_STATS_QUERY = """
    SELECT
        handle.id AS counterpart,
        MAX(CASE WHEN message.is_from_me = 1 THEN message.date ELSE NULL END) AS last_sent_date,
        MAX(message.date) AS last_any_date,
        COUNT(message.ROWID) AS message_count,
        COUNT(CASE WHEN message.is_from_me = 1 THEN 1 END) AS sent_count
    FROM message
    JOIN chat_message_join ON message.ROWID = chat_message_join.message_id
    JOIN chat ON chat_message_join.chat_id = chat.ROWID
    JOIN chat_handle_join ON chat.ROWID = chat_handle_join.chat_id
    JOIN handle ON chat_handle_join.handle_id = handle.ROWID
    WHERE message.date > ? AND handle.id IS NOT NULL
    GROUP BY handle.id
    HAVING COUNT(message.ROWID) >= 2 AND sent_count >= 1
    ORDER BY last_sent_date ASC NULLS LAST
    LIMIT ?
"""


class MessageStoreRepository:
    """Raw SQL helpers for the message store."""

    def __init__(self, db_path: str, timeout_seconds: float = 10.0):
        self.db_path = db_path
        self.timeout_seconds = timeout_seconds

    async def fetch_contact_stats(
        self, window_start: datetime, limit: int = DEFAULT_ROW_LIMIT
    ) -> list[MessageStatsRow]:
        """
        Per-counterpart aggregates for reciprocal conversations since window_start.

        Raises:
            MessageStoreUnavailable: the database is missing, unreadable, or too slow.
        """
        # SQLite integers are 64-bit; older cutoffs all mean "the whole store"
        cutoff = max(_SQLITE_INT_MIN, datetime_to_apple_time(window_start))
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._query_contact_stats, cutoff, limit),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as e:
            raise MessageStoreUnavailable(
                f"Message store query timed out after {self.timeout_seconds:.1f}s",
                path=self.db_path,
            ) from e

    def _query_contact_stats(self, cutoff: int, limit: int) -> list[MessageStatsRow]:
        if not os.path.exists(self.db_path):
            raise MessageStoreUnavailable("Message store not found", path=self.db_path)

        try:
            conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise MessageStoreUnavailable(str(e), path=self.db_path) from e

        try:
            rows = conn.execute(_CONTACT_STATS_QUERY, (cutoff, limit)).fetchall()
        except sqlite3.Error as e:
            # Permission problems (Full Disk Access) surface here on first read
            raise MessageStoreUnavailable(str(e), path=self.db_path) from e
        finally:
            conn.close()

        return [
            MessageStatsRow(
                counterpart=counterpart,
                last_sent_native=last_sent,
                last_any_native=last_any,
                message_count=message_count,
                sent_count=sent_count,
            )
            for counterpart, last_sent, last_any, message_count, sent_count in rows
        ]
