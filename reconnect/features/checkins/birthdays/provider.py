"""
Birthday providers.

The ranker only depends on the BirthdayProvider protocol. SqliteBirthdayProvider
reads the imported birthdays table (name, facebook_id, birth_month, birth_day,
facebook_url, and optionally phone) and, like the message store, treats a
missing or unreadable database as "no birthdays". Rows without a phone are
kept; they surface as birthday suggestions without a number to text.
"""

from __future__ import annotations

import asyncio
import os
import sqlite3
from collections.abc import Callable
from datetime import date
from typing import Protocol

from reconnect.features.checkins.domain import BirthdayEntry
from reconnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class BirthdayProvider(Protocol):
    async def get_today(self) -> list[BirthdayEntry]: ...

    async def get_upcoming(self, days_ahead: int) -> list[BirthdayEntry]: ...


def next_occurrence(month: int, day: int, today: date) -> date:
    """
    Next date (today included) on which month/day falls. Feb 29 maps to Mar 1
    outside leap years.

    Raises:
        ValueError: month/day is not a calendar date.
    """
    date(2000, month, day)  # leap year, so only impossible dates fail here

    for year in (today.year, today.year + 1):
        try:
            candidate = date(year, month, day)
        except ValueError:
            candidate = date(year, 3, 1)
        if candidate >= today:
            return candidate
    return candidate


class NullBirthdayProvider:
    """Provider used when no birthday source is configured."""

    async def get_today(self) -> list[BirthdayEntry]:
        return []

    async def get_upcoming(self, days_ahead: int) -> list[BirthdayEntry]:
        return []


class SqliteBirthdayProvider:
    def __init__(self, db_path: str, today: Callable[[], date] = date.today):
        self.db_path = db_path
        self._today = today

    async def get_today(self) -> list[BirthdayEntry]:
        return [entry for entry in await self._entries() if entry.days_until == 0]

    async def get_upcoming(self, days_ahead: int) -> list[BirthdayEntry]:
        """Birthdays 1..days_ahead days out, soonest first; today's are excluded."""
        upcoming = [
            entry for entry in await self._entries() if 1 <= entry.days_until <= days_ahead
        ]
        upcoming.sort(key=lambda entry: entry.days_until)
        return upcoming

    async def _entries(self) -> list[BirthdayEntry]:
        today = self._today()
        rows = await asyncio.to_thread(self._load_rows)

        entries: list[BirthdayEntry] = []
        for row in rows:
            try:
                occurs = next_occurrence(row["birth_month"], row["birth_day"], today)
            except (TypeError, ValueError):
                logger.debug("Skipping birthday with an invalid date", name=row["name"])
                continue
            entries.append(self._to_entry(row, (occurs - today).days))
        return entries

    def _load_rows(self) -> list[sqlite3.Row]:
        if not os.path.exists(self.db_path):
            logger.info("Birthday database not found", path=self.db_path)
            return []

        try:
            conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            logger.warning("Birthday database unavailable", path=self.db_path, error=str(e))
            return []

        try:
            conn.row_factory = sqlite3.Row
            # SELECT * so databases with and without a phone column both load
            return conn.execute(
                """
                SELECT *
                FROM birthdays
                WHERE birth_month IS NOT NULL AND birth_day IS NOT NULL
                ORDER BY birth_month, birth_day
                """
            ).fetchall()
        except sqlite3.Error as e:
            logger.warning("Birthday query failed", path=self.db_path, error=str(e))
            return []
        finally:
            conn.close()

    @staticmethod
    def _to_entry(row: sqlite3.Row, days_until: int) -> BirthdayEntry:
        columns = row.keys()
        return BirthdayEntry(
            name=row["name"],
            phone=(row["phone"] if "phone" in columns else None) or None,
            days_until=days_until,
            birth_month=row["birth_month"],
            birth_day=row["birth_day"],
            facebook_url=row["facebook_url"] if "facebook_url" in columns else None,
        )
