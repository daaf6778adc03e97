"""
Identity cache sweep job.

Runs inside the API process (started from the lifespan hook) and purges
expired identity cache entries on a fixed interval, so identifiers nobody
asks about again still leave memory.
"""

import asyncio

from reconnect.features.checkins.identity import IdentityCache
from reconnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SWEEP_INTERVAL_SECONDS = 5 * 60
ERROR_BACKOFF_SECONDS = 60


async def start_cache_sweep_scheduler(
    cache: IdentityCache, interval_seconds: float = SWEEP_INTERVAL_SECONDS
) -> None:
    """Sweep forever; cancel the task to stop."""
    logger.info("Starting identity cache sweep scheduler", interval_seconds=interval_seconds)

    while True:
        try:
            await asyncio.sleep(interval_seconds)
            cache.sweep()
        except asyncio.CancelledError:
            logger.info("Identity cache sweep scheduler stopped")
            raise
        except Exception as e:
            logger.error(
                "Error in identity cache sweep scheduler",
                error=str(e),
                error_type=type(e).__name__,
            )
            await asyncio.sleep(ERROR_BACKOFF_SECONDS)
