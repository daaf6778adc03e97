"""
Check-in routes.

Thin HTTP layer over CheckInEngine. Query parameters are accepted as raw
strings and clamped into a CheckInConfig, so bad input degrades to defaults
instead of failing the request.
"""

from fastapi import APIRouter, Query, Request

from reconnect.features.checkins.api.schemas import (
    CacheStatsResponse,
    CheckInConfigResponse,
    CheckInResponse,
)
from reconnect.features.checkins.ranking import (
    CHECKIN_PRESETS,
    CheckInConfig,
    config_for_preset,
    describe_config,
)
from reconnect.features.checkins.services import CheckInEngine
from reconnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/check-ins", tags=["check-ins"])


def get_checkin_engine(request: Request) -> CheckInEngine:
    return request.app.state.checkin_engine


@router.get("", response_model=CheckInResponse)
async def get_check_ins(
    request: Request,
    preset: str | None = Query(None),
    days_threshold: str | None = Query(None, alias="daysThreshold"),
    lookback_days: str | None = Query(None, alias="lookbackDays"),
    max_contacts: str | None = Query(None, alias="maxContacts"),
    sort_by: str | None = Query(None, alias="sortBy"),
    filter_type: str | None = Query(None, alias="filterType"),
    min_messages: str | None = Query(None, alias="minMessages"),
):
    """Ranked list of people to reconnect with; explicit parameters override a preset."""
    raw = {
        "daysThreshold": days_threshold,
        "lookbackDays": lookback_days,
        "maxContacts": max_contacts,
        "sortBy": sort_by,
        "filterType": filter_type,
        "minMessages": min_messages,
    }
    overrides = {k: v for k, v in raw.items() if v is not None}

    if preset in CHECKIN_PRESETS:
        config = config_for_preset(preset, overrides)
    else:
        if preset is not None:
            logger.warning("Unknown check-in preset, using defaults", preset=preset)
        config = CheckInConfig.model_validate(overrides)
    logger.info("Check-in analysis requested", preset=preset, **config.model_dump())

    result = await get_checkin_engine(request).rank(config)
    return CheckInResponse.from_result(
        result,
        config=CheckInConfigResponse(**config.model_dump()),
        description=describe_config(config),
    )


@router.get("/presets")
async def list_presets() -> dict:
    return {"success": True, "presets": CHECKIN_PRESETS}


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(request: Request):
    return CacheStatsResponse.from_stats(get_checkin_engine(request).cache_stats())


@router.post("/cache/clear")
async def clear_cache(request: Request) -> dict:
    get_checkin_engine(request).clear_cache()
    return {"success": True}
