"""
Check-in ranking configuration.

CheckInConfig is the validated policy object the ranker runs with. Values
coming from callers (query strings, presets) are clamped here, at the
boundary; the ranker trusts whatever it receives.
"""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SortBy = Literal["daysSince", "messageCount", "random"]
FilterType = Literal["all", "resolved", "unresolved"]

SORT_OPTIONS: tuple[str, ...] = ("daysSince", "messageCount", "random")
FILTER_OPTIONS: tuple[str, ...] = ("all", "resolved", "unresolved")

DEFAULT_DAYS_THRESHOLD = 30
DEFAULT_LOOKBACK_DAYS = 365
DEFAULT_MAX_CONTACTS = 15
DEFAULT_MIN_MESSAGES = 2
MAX_CONTACTS_LIMIT = 50
# A century; anything older predates the message store and overflows date math
MAX_LOOKBACK_DAYS = 36500

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _int_or_default(value: Any, default: int) -> int:
    """
    Parse leniently, reading the leading integer the way query strings are
    usually read ("7.5" -> 7, "12abc" -> 12). Zero, blanks and garbage all
    mean "use the default".
    """
    if isinstance(value, int | float) and not isinstance(value, bool):
        try:
            parsed = int(value)
        except (OverflowError, ValueError):
            return default
    elif isinstance(value, str) and (match := _LEADING_INT_RE.match(value)):
        parsed = int(match.group(1))
    else:
        return default
    return parsed or default


class CheckInConfig(BaseModel):
    """Ranking policy for one check-in request."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    days_threshold: int = Field(default=DEFAULT_DAYS_THRESHOLD, alias="daysThreshold")
    lookback_days: int = Field(default=DEFAULT_LOOKBACK_DAYS, alias="lookbackDays")
    max_contacts: int = Field(default=DEFAULT_MAX_CONTACTS, alias="maxContacts")
    sort_by: SortBy = Field(default="daysSince", alias="sortBy")
    filter_type: FilterType = Field(default="all", alias="filterType")
    min_messages: int = Field(default=DEFAULT_MIN_MESSAGES, alias="minMessages")

    @field_validator("days_threshold", mode="before")
    @classmethod
    def _clamp_days_threshold(cls, value: Any) -> int:
        return max(1, _int_or_default(value, DEFAULT_DAYS_THRESHOLD))

    @field_validator("lookback_days", mode="before")
    @classmethod
    def _clamp_lookback_days(cls, value: Any) -> int:
        return max(1, min(MAX_LOOKBACK_DAYS, _int_or_default(value, DEFAULT_LOOKBACK_DAYS)))

    @field_validator("max_contacts", mode="before")
    @classmethod
    def _clamp_max_contacts(cls, value: Any) -> int:
        return max(1, min(MAX_CONTACTS_LIMIT, _int_or_default(value, DEFAULT_MAX_CONTACTS)))

    @field_validator("min_messages", mode="before")
    @classmethod
    def _clamp_min_messages(cls, value: Any) -> int:
        return max(1, _int_or_default(value, DEFAULT_MIN_MESSAGES))

    @field_validator("sort_by", mode="before")
    @classmethod
    def _known_sort(cls, value: Any) -> str:
        return value if value in SORT_OPTIONS else "daysSince"

    @field_validator("filter_type", mode="before")
    @classmethod
    def _known_filter(cls, value: Any) -> str:
        return value if value in FILTER_OPTIONS else "all"


def describe_config(config: CheckInConfig) -> str:
    """Short human-readable summary of a config, shown next to the results."""
    parts: list[str] = []

    if config.days_threshold == 1:
        parts.append("showing very recent contacts")
    elif config.days_threshold <= 7:
        parts.append("showing recent contacts")
    elif config.days_threshold <= 30:
        parts.append("showing contacts from past month")
    else:
        parts.append(f"showing contacts not contacted in {config.days_threshold}+ days")

    if config.sort_by == "messageCount":
        parts.append("sorted by message frequency")
    elif config.sort_by == "random":
        parts.append("in random order")
    else:
        parts.append("sorted by time since last contact")

    if config.filter_type == "resolved":
        parts.append("(named contacts only)")
    elif config.filter_type == "unresolved":
        parts.append("(phone numbers only)")

    return ", ".join(parts)


CHECKIN_PRESETS: dict[str, dict] = {
    "recent-activity": {
        "name": "Recent Activity",
        "description": "People you've talked to recently (last 7 days)",
        "config": {"daysThreshold": 1, "lookbackDays": 30, "maxContacts": 10, "sortBy": "daysSince"},
    },
    "catch-up-mode": {
        "name": "Catch-Up Mode",
        "description": "Long-term friends you haven't talked to in a while (30+ days)",
        "config": {"daysThreshold": 30, "lookbackDays": 365, "maxContacts": 15, "sortBy": "daysSince"},
    },
    "reconnect-deep": {
        "name": "Deep Reconnection",
        "description": "Important relationships that need attention (60+ days)",
        "config": {
            "daysThreshold": 60,
            "lookbackDays": 730,
            "maxContacts": 10,
            "sortBy": "messageCount",
        },
    },
    "high-frequency": {
        "name": "High Frequency",
        "description": "People you message a lot but haven't recently (10+ messages)",
        "config": {
            "daysThreshold": 14,
            "lookbackDays": 90,
            "maxContacts": 8,
            "sortBy": "messageCount",
            "minMessages": 10,
        },
    },
    "random-surprise": {
        "name": "Random Surprise",
        "description": "Randomly selected contacts for spontaneous check-ins",
        "config": {"daysThreshold": 21, "lookbackDays": 180, "maxContacts": 5, "sortBy": "random"},
    },
}


def config_for_preset(preset_id: str, overrides: dict[str, Any] | None = None) -> CheckInConfig:
    """
    Build a config from a preset, with camelCase overrides taking precedence.

    Raises:
        KeyError: unknown preset id.
    """
    return CheckInConfig.model_validate(
        {**CHECKIN_PRESETS[preset_id]["config"], **(overrides or {})}
    )
