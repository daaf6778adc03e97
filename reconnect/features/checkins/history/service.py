"""
History provider.

Turns message-store aggregates into ContactActivity records with recency
(days_since) computed against the current time. An unreadable store is an
expected operating condition and comes back as an unavailable snapshot.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from reconnect.features.checkins.domain import (
    NO_OUTBOUND_CONTACT_DAYS,
    ContactActivity,
    HistorySnapshot,
)
from reconnect.features.checkins.history.repository import (
    MessageStatsRow,
    MessageStoreRepository,
    MessageStoreUnavailable,
    apple_time_to_datetime,
)
from reconnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class HistoryProvider:
    def __init__(
        self,
        repository: MessageStoreRepository,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self._clock = clock

    async def get_stats(self, lookback_days: int) -> HistorySnapshot:
        now = self._clock()
        try:
            window_start = now - timedelta(days=lookback_days)
        except OverflowError:
            logger.warning("Lookback window out of range", lookback_days=lookback_days)
            return HistorySnapshot(
                contacts=[], available=False, error=f"lookback of {lookback_days} days is out of range"
            )

        try:
            rows = await self.repository.fetch_contact_stats(window_start)
        except MessageStoreUnavailable as e:
            logger.warning("Message store unavailable", path=e.path, error=str(e))
            return HistorySnapshot(contacts=[], available=False, error=str(e))

        contacts = [
            activity
            for activity in (self._to_activity(row, now) for row in rows)
            if activity is not None
        ]
        logger.info(
            "Message history loaded",
            lookback_days=lookback_days,
            contact_count=len(contacts),
        )
        return HistorySnapshot(contacts=contacts)

    def _to_activity(self, row: MessageStatsRow, now: datetime) -> ContactActivity | None:
        last_any_at = apple_time_to_datetime(row.last_any_native)
        if last_any_at is None:
            logger.debug("Skipping row without a usable timestamp", counterpart=row.counterpart)
            return None
        last_sent_at = apple_time_to_datetime(row.last_sent_native)

        return ContactActivity(
            raw_contact=row.counterpart,
            last_sent_at=last_sent_at,
            last_any_at=last_any_at,
            days_since=self.days_since(last_sent_at, last_any_at, row.sent_count, now),
            message_count=row.message_count,
            sent_count=row.sent_count,
        )

    @staticmethod
    def days_since(
        last_sent_at: datetime | None,
        last_any_at: datetime,
        sent_count: int,
        now: datetime,
    ) -> int:
        """Whole days since the user last wrote; 999 when they never have."""
        if sent_count <= 0:
            return NO_OUTBOUND_CONTACT_DAYS
        reference = last_sent_at or last_any_at
        return max(0, (now - reference) // timedelta(days=1))
