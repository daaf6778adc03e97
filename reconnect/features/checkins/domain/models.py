"""
Domain models for the check-in feature.

These lightweight dataclasses describe the shapes flowing between the
identity, history and ranking layers. They intentionally avoid business
logic so repositories, services and the API layer can share them.
"""

from dataclasses import dataclass, field
from datetime import datetime

NO_OUTBOUND_CONTACT_DAYS = 999


@dataclass(frozen=True, slots=True)
class NormalizedPhone:
    """Canonical view of a raw phone string."""

    original: str | None
    normalized: str
    digits: str
    last10: str
    area: str
    exchange: str
    number: str

    @property
    def is_too_short(self) -> bool:
        return len(self.last10) < 10


@dataclass(frozen=True, slots=True)
class ResolvedContact:
    """Display name for an identifier and whether a directory match produced it."""

    name: str
    is_resolved: bool


@dataclass(slots=True)
class CacheEntry:
    value: ResolvedContact
    expires_at: float
    created_at: float
    last_accessed_at: float


@dataclass(frozen=True, slots=True)
class CacheStats:
    total_entries: int
    resolved: int
    unresolved: int
    fresh: int
    aging: int


@dataclass(frozen=True, slots=True)
class ContactActivity:
    """Per-counterpart message statistics as read from the message store."""

    raw_contact: str
    last_sent_at: datetime | None
    last_any_at: datetime
    days_since: int
    message_count: int
    sent_count: int


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    """Result of a history query; ``available`` is False when the store could not be read."""

    contacts: list[ContactActivity]
    available: bool = True
    error: str | None = None


@dataclass(frozen=True, slots=True)
class ContactStats:
    """Activity merged with name resolution, fixed for the lifetime of one ranking request."""

    raw_contact: str
    name: str
    last_sent_at: datetime | None
    last_any_at: datetime
    days_since: int
    message_count: int
    sent_count: int
    is_resolved: bool


@dataclass(frozen=True, slots=True)
class BirthdayEntry:
    name: str
    phone: str | None = None
    days_until: int = 0
    birth_month: int | None = None
    birth_day: int | None = None
    facebook_url: str | None = None


@dataclass(slots=True)
class BirthdayInfo:
    birth_month: int | None
    birth_day: int | None
    days_until_birthday: int
    facebook_url: str | None


@dataclass(slots=True)
class CheckInCandidate:
    name: str
    days_since: int
    reason: str
    suggested_message: str
    raw_contact: str
    message_count: int | None
    is_resolved: bool
    is_birthday: bool = False
    birthday_info: BirthdayInfo | None = None


@dataclass(slots=True)
class BirthdaySummary:
    today_count: int = 0
    upcoming_count: int = 0
    total_birthday_contacts: int = 0


@dataclass(slots=True)
class CheckInResult:
    priority_contacts: list[CheckInCandidate] = field(default_factory=list)
    total_contacts: int = 0
    resolved_contacts: int = 0
    birthday_summary: BirthdaySummary = field(default_factory=BirthdaySummary)
