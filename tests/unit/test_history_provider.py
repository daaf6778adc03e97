import sqlite3
from datetime import UTC, datetime, timedelta

import pytest

from reconnect.features.checkins.domain import NO_OUTBOUND_CONTACT_DAYS
from reconnect.features.checkins.history import HistoryProvider, MessageStoreRepository
from reconnect.features.checkins.history.repository import (
    apple_time_to_datetime,
    datetime_to_apple_time,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _build_store(path, conversations):
    """conversations: handle id -> list of (days_ago, is_from_me)."""
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE handle (ROWID INTEGER PRIMARY KEY, id TEXT);
        CREATE TABLE chat (ROWID INTEGER PRIMARY KEY);
        CREATE TABLE chat_handle_join (chat_id INTEGER, handle_id INTEGER);
        CREATE TABLE message (ROWID INTEGER PRIMARY KEY, date INTEGER, is_from_me INTEGER);
        CREATE TABLE chat_message_join (chat_id INTEGER, message_id INTEGER);
        """
    )
    for chat_id, (handle, messages) in enumerate(conversations.items(), start=1):
        conn.execute("INSERT INTO handle (ROWID, id) VALUES (?, ?)", (chat_id, handle))
        conn.execute("INSERT INTO chat (ROWID) VALUES (?)", (chat_id,))
        conn.execute("INSERT INTO chat_handle_join VALUES (?, ?)", (chat_id, chat_id))
        for days_ago, is_from_me in messages:
            cursor = conn.execute(
                "INSERT INTO message (date, is_from_me) VALUES (?, ?)",
                (datetime_to_apple_time(NOW - timedelta(days=days_ago, hours=1)), is_from_me),
            )
            conn.execute("INSERT INTO chat_message_join VALUES (?, ?)", (chat_id, cursor.lastrowid))
    conn.commit()
    conn.close()


def _provider(path) -> HistoryProvider:
    return HistoryProvider(MessageStoreRepository(str(path)), clock=lambda: NOW)


def test_apple_time_accepts_seconds_and_nanoseconds():
    moment = datetime(2024, 3, 5, 8, 30, tzinfo=UTC)
    nanos = datetime_to_apple_time(moment)

    assert apple_time_to_datetime(nanos) == moment
    assert apple_time_to_datetime(nanos // 1_000_000_000) == moment
    assert apple_time_to_datetime(None) is None


@pytest.mark.asyncio
async def test_get_stats_aggregates_reciprocal_conversations(tmp_path):
    path = tmp_path / "chat.db"
    _build_store(
        path,
        {
            "+15551234567": [(40, 1), (35, 0), (5, 0)],
            "friend@example.com": [(10, 1), (9, 0)],
            # never written to by the user
            "+15550000000": [(3, 0), (2, 0)],
            # a single message is not a conversation
            "+15559999999": [(1, 1)],
        },
    )

    snapshot = await _provider(path).get_stats(lookback_days=365)

    assert snapshot.available
    by_contact = {c.raw_contact: c for c in snapshot.contacts}
    assert set(by_contact) == {"+15551234567", "friend@example.com"}

    jennifer = by_contact["+15551234567"]
    assert jennifer.days_since == 40
    assert jennifer.message_count == 3
    assert jennifer.sent_count == 1
    assert jennifer.last_any_at > jennifer.last_sent_at


@pytest.mark.asyncio
async def test_lookback_window_excludes_old_messages(tmp_path):
    path = tmp_path / "chat.db"
    _build_store(path, {"+15551234567": [(400, 1), (390, 0)], "+15559876543": [(20, 1), (19, 0)]})

    snapshot = await _provider(path).get_stats(lookback_days=365)

    assert [c.raw_contact for c in snapshot.contacts] == ["+15559876543"]


@pytest.mark.asyncio
async def test_stalest_conversations_come_first(tmp_path):
    path = tmp_path / "chat.db"
    _build_store(
        path,
        {
            "+15550000001": [(10, 1), (9, 0)],
            "+15550000002": [(90, 1), (80, 0)],
            "+15550000003": [(45, 1), (44, 0)],
        },
    )

    snapshot = await _provider(path).get_stats(lookback_days=365)

    assert [c.days_since for c in snapshot.contacts] == [90, 45, 10]


@pytest.mark.asyncio
async def test_missing_store_is_unavailable_not_an_error(tmp_path):
    snapshot = await _provider(tmp_path / "missing.db").get_stats(lookback_days=30)

    assert not snapshot.available
    assert snapshot.contacts == []
    assert snapshot.error


@pytest.mark.asyncio
async def test_store_without_expected_tables_is_unavailable(tmp_path):
    path = tmp_path / "chat.db"
    sqlite3.connect(path).close()

    snapshot = await _provider(path).get_stats(lookback_days=30)

    assert not snapshot.available


def test_days_since_without_outbound_messages():
    last = NOW - timedelta(days=3)

    assert HistoryProvider.days_since(None, last, 0, NOW) == NO_OUTBOUND_CONTACT_DAYS
    assert HistoryProvider.days_since(last, last, 1, NOW) == 3


def test_days_since_floors_partial_days():
    last = NOW - timedelta(days=29, hours=23)

    assert HistoryProvider.days_since(last, last, 2, NOW) == 29


@pytest.mark.asyncio
async def test_lookback_beyond_the_calendar_is_unavailable(tmp_path):
    snapshot = await _provider(tmp_path / "missing.db").get_stats(lookback_days=1_000_000)

    assert not snapshot.available
    assert snapshot.contacts == []
    assert "out of range" in snapshot.error


@pytest.mark.asyncio
async def test_very_old_window_reads_whole_store(tmp_path):
    path = tmp_path / "chat.db"
    _build_store(path, {"+15551234567": [(40, 1), (35, 0)]})

    # ~550 years back: earlier than a 64-bit nanosecond offset can express
    snapshot = await _provider(path).get_stats(lookback_days=200_000)

    assert snapshot.available
    assert [c.raw_contact for c in snapshot.contacts] == ["+15551234567"]
