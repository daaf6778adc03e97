"""
Check-in ranking service.

Fetches message history and birthdays, resolves every counterpart's name in
one batch, then filters, sorts and truncates according to CheckInConfig.
Birthday contacts are placed ahead of ordinary ones. No external call
happens once filtering starts.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from reconnect.features.checkins.birthdays import BirthdayProvider, NullBirthdayProvider
from reconnect.features.checkins.domain import (
    BirthdayEntry,
    BirthdayInfo,
    BirthdaySummary,
    CheckInCandidate,
    CheckInResult,
    ContactActivity,
    ContactStats,
    ResolvedContact,
)
from reconnect.features.checkins.history import HistoryProvider
from reconnect.features.checkins.identity import DirectoryResolver
from reconnect.features.checkins.identity.resolver import fallback_contact
from reconnect.features.checkins.ranking.config import CheckInConfig
from reconnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

MIN_REGULAR_SLOTS = 5
LONG_TIME_DAYS = 60
DEFAULT_UPCOMING_BIRTHDAY_DAYS = 7
NO_PHONE = "No phone"


def matches_filter(filter_type: str, is_resolved: bool) -> bool:
    if filter_type == "resolved":
        return is_resolved
    if filter_type == "unresolved":
        return not is_resolved
    return True


def regular_reason(days_since: int) -> str:
    return "Long time since contact" if days_since > LONG_TIME_DAYS else "Overdue for check-in"


def regular_message(name: str, is_resolved: bool) -> str:
    if is_resolved and name.strip():
        first_name = name.split()[0]
        return f"Hey {first_name}, it's been a while! How have you been?"
    return "Hey! It's been a while since we last talked. How have you been?"


def birthday_candidate(entry: BirthdayEntry) -> CheckInCandidate:
    days_until = max(0, entry.days_until)
    if days_until == 0:
        reason = f"🎂 It's {entry.name}'s birthday today!"
    else:
        reason = f"🎂 {entry.name}'s birthday is in {days_until} day{'' if days_until == 1 else 's'}"

    if days_until <= 1:
        message = f"Happy birthday {entry.name}! 🎉 Hope you have an amazing day!"
    else:
        message = (
            f"Hi {entry.name}! Your birthday is coming up in {days_until} days. "
            "Looking forward to celebrating with you! 🎉"
        )

    return CheckInCandidate(
        name=entry.name,
        days_since=-days_until,
        reason=reason,
        suggested_message=message,
        raw_contact=entry.phone or NO_PHONE,
        message_count=None,
        is_resolved=entry.phone is not None,
        is_birthday=True,
        birthday_info=BirthdayInfo(
            birth_month=entry.birth_month,
            birth_day=entry.birth_day,
            days_until_birthday=days_until,
            facebook_url=entry.facebook_url,
        ),
    )


class CheckInRanker:
    def __init__(
        self,
        history: HistoryProvider,
        resolver: DirectoryResolver,
        birthdays: BirthdayProvider | None = None,
        rng: random.Random | None = None,
        upcoming_birthday_days: int = DEFAULT_UPCOMING_BIRTHDAY_DAYS,
    ):
        self.history = history
        self.resolver = resolver
        self.birthdays = birthdays or NullBirthdayProvider()
        self.rng = rng or random.Random()
        self.upcoming_birthday_days = upcoming_birthday_days

    async def rank(
        self,
        config: CheckInConfig,
        birthday_contacts: Sequence[BirthdayEntry] | None = None,
    ) -> CheckInResult:
        if birthday_contacts is None:
            birthday_contacts = await self._load_birthdays()

        snapshot = await self.history.get_stats(config.lookback_days)
        if not snapshot.available:
            logger.info("Ranking without message history", error=snapshot.error)

        names = await self.resolver.resolve_many(
            activity.raw_contact for activity in snapshot.contacts
        )
        stats = [
            self._merge(activity, names.get(activity.raw_contact)) for activity in snapshot.contacts
        ]

        eligible = self.filter_contacts(stats, config)
        ordered = self.sort_contacts(eligible, config.sort_by)
        needs_check_in = ordered[: config.max_contacts]

        birthday_candidates = [
            birthday_candidate(entry) for entry in birthday_contacts[: config.max_contacts]
        ]
        regular_slots = max(MIN_REGULAR_SLOTS, config.max_contacts - len(birthday_candidates))
        regular_candidates = [
            self._regular_candidate(contact) for contact in needs_check_in[:regular_slots]
        ]

        today_count = sum(1 for entry in birthday_contacts if entry.days_until <= 0)
        result = CheckInResult(
            priority_contacts=[*birthday_candidates, *regular_candidates],
            total_contacts=len(needs_check_in) + len(birthday_candidates),
            resolved_contacts=(
                sum(1 for contact in needs_check_in if contact.is_resolved)
                + sum(1 for candidate in birthday_candidates if candidate.is_resolved)
            ),
            birthday_summary=BirthdaySummary(
                today_count=today_count,
                upcoming_count=len(birthday_contacts) - today_count,
                total_birthday_contacts=len(birthday_candidates),
            ),
        )

        logger.info(
            "Check-in ranking complete",
            history_contacts=len(stats),
            eligible=len(eligible),
            birthday_contacts=len(birthday_candidates),
            returned=len(result.priority_contacts),
            sort_by=config.sort_by,
            filter_type=config.filter_type,
        )
        return result

    def filter_contacts(
        self, contacts: Sequence[ContactStats], config: CheckInConfig
    ) -> list[ContactStats]:
        return [
            contact
            for contact in contacts
            if contact.days_since >= config.days_threshold
            and contact.message_count >= config.min_messages
            and matches_filter(config.filter_type, contact.is_resolved)
        ]

    def sort_contacts(self, contacts: Sequence[ContactStats], sort_by: str) -> list[ContactStats]:
        if sort_by == "messageCount":
            return sorted(contacts, key=lambda contact: contact.message_count, reverse=True)
        if sort_by == "random":
            shuffled = list(contacts)
            self.rng.shuffle(shuffled)
            return shuffled
        return sorted(contacts, key=lambda contact: contact.days_since, reverse=True)

    async def _load_birthdays(self) -> list[BirthdayEntry]:
        try:
            today = await self.birthdays.get_today()
            upcoming = await self.birthdays.get_upcoming(self.upcoming_birthday_days)
        except Exception as e:
            logger.warning("Birthday provider failed", error=str(e))
            return []
        return [*today, *upcoming]

    @staticmethod
    def _merge(activity: ContactActivity, resolved: ResolvedContact | None) -> ContactStats:
        resolved = resolved or fallback_contact(activity.raw_contact)
        return ContactStats(
            raw_contact=activity.raw_contact,
            name=resolved.name,
            last_sent_at=activity.last_sent_at,
            last_any_at=activity.last_any_at,
            days_since=activity.days_since,
            message_count=activity.message_count,
            sent_count=activity.sent_count,
            is_resolved=resolved.is_resolved,
        )

    @staticmethod
    def _regular_candidate(contact: ContactStats) -> CheckInCandidate:
        return CheckInCandidate(
            name=contact.name,
            days_since=contact.days_since,
            reason=regular_reason(contact.days_since),
            suggested_message=regular_message(contact.name, contact.is_resolved),
            raw_contact=contact.raw_contact,
            message_count=contact.message_count,
            is_resolved=contact.is_resolved,
        )
