"""
Check-in API response models.
Used by the check-in router for output serialization.
"""

from dataclasses import asdict

from pydantic import BaseModel, Field

from reconnect.features.checkins.domain import CacheStats, CheckInResult


class BirthdayInfoResponse(BaseModel):
    birth_month: int | None = None
    birth_day: int | None = None
    days_until_birthday: int = 0
    facebook_url: str | None = None


class CheckInCandidateResponse(BaseModel):
    name: str
    days_since: int
    reason: str
    suggested_message: str
    raw_contact: str
    message_count: int | None = None
    is_resolved: bool
    is_birthday: bool = False
    birthday_info: BirthdayInfoResponse | None = None


class BirthdaySummaryResponse(BaseModel):
    today_count: int = 0
    upcoming_count: int = 0
    total_birthday_contacts: int = 0


class CheckInConfigResponse(BaseModel):
    days_threshold: int
    lookback_days: int
    max_contacts: int
    sort_by: str
    filter_type: str
    min_messages: int


class CheckInResponse(BaseModel):
    """Ranked check-in suggestions plus the config that produced them."""

    priority_contacts: list[CheckInCandidateResponse] = Field(default_factory=list)
    total_contacts: int = 0
    resolved_contacts: int = 0
    birthday_summary: BirthdaySummaryResponse
    config: CheckInConfigResponse
    config_description: str

    @classmethod
    def from_result(
        cls, result: CheckInResult, config: CheckInConfigResponse, description: str
    ) -> "CheckInResponse":
        payload = asdict(result)
        return cls(**payload, config=config, config_description=description)


class CacheStatsResponse(BaseModel):
    total_entries: int
    resolved: int
    unresolved: int
    fresh: int
    aging: int

    @classmethod
    def from_stats(cls, stats: CacheStats) -> "CacheStatsResponse":
        return cls(**asdict(stats))
