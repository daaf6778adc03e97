"""
Domain subpackage for the check-in feature.
"""

from .models import (
    NO_OUTBOUND_CONTACT_DAYS,
    BirthdayEntry,
    BirthdayInfo,
    BirthdaySummary,
    CacheEntry,
    CacheStats,
    CheckInCandidate,
    CheckInResult,
    ContactActivity,
    ContactStats,
    HistorySnapshot,
    NormalizedPhone,
    ResolvedContact,
)

__all__ = [
    "NO_OUTBOUND_CONTACT_DAYS",
    "BirthdayEntry",
    "BirthdayInfo",
    "BirthdaySummary",
    "CacheEntry",
    "CacheStats",
    "CheckInCandidate",
    "CheckInResult",
    "ContactActivity",
    "ContactStats",
    "HistorySnapshot",
    "NormalizedPhone",
    "ResolvedContact",
]
