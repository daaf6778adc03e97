"""
Check-in engine facade.

Composes the identity cache, directory resolver, history provider and
ranker into the one object the rest of the application talks to. Instances
are built explicitly (build_checkin_engine) rather than living as module
globals, so tests and alternative configurations get their own cache.
"""

from __future__ import annotations

from reconnect.config import Settings
from reconnect.features.checkins.birthdays import BirthdayProvider, SqliteBirthdayProvider
from reconnect.features.checkins.domain import CacheStats, CheckInResult
from reconnect.features.checkins.history import HistoryProvider, MessageStoreRepository
from reconnect.features.checkins.identity import (
    DirectoryLookupClient,
    DirectoryResolver,
    IdentityCache,
)
from reconnect.features.checkins.ranking import CheckInConfig, CheckInRanker
from reconnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class CheckInEngine:
    """Public core API: rank, cache_stats, clear_cache."""

    def __init__(self, ranker: CheckInRanker, cache: IdentityCache):
        self.ranker = ranker
        self.cache = cache

    async def rank(self, config: CheckInConfig) -> CheckInResult:
        return await self.ranker.rank(config)

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Identity cache cleared")


def build_checkin_engine(
    settings: Settings,
    birthdays: BirthdayProvider | None = None,
) -> CheckInEngine:
    cache = IdentityCache(**settings.get_identity_cache_config())
    client = DirectoryLookupClient(
        command=settings.lookup_command(),
        batch_command=settings.batch_lookup_command(),
        cwd=settings.CONTACT_LOOKUP_CWD,
        timeout_seconds=settings.CONTACT_LOOKUP_TIMEOUT_SECONDS,
        batch_timeout_seconds=settings.CONTACT_BATCH_LOOKUP_TIMEOUT_SECONDS,
        batch_timeout_per_identifier_seconds=settings.CONTACT_BATCH_TIMEOUT_PER_IDENTIFIER_SECONDS,
    )
    history = HistoryProvider(
        MessageStoreRepository(
            settings.message_db_path(),
            timeout_seconds=settings.MESSAGE_STORE_TIMEOUT_SECONDS,
        )
    )
    ranker = CheckInRanker(
        history=history,
        resolver=DirectoryResolver(cache, client),
        birthdays=birthdays or SqliteBirthdayProvider(settings.BIRTHDAY_DB_PATH),
        upcoming_birthday_days=settings.BIRTHDAY_UPCOMING_DAYS,
    )

    logger.info(
        "Check-in engine built",
        cache_ttl_seconds=cache.ttl,
        cache_negative_ttl_seconds=cache.negative_ttl,
        cache_capacity=cache.capacity,
    )
    return CheckInEngine(ranker=ranker, cache=cache)
