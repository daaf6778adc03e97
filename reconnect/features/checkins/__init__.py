"""
Relationship check-in feature package.

This vertical slice keeps every layer of the check-in engine co-located
(domain models, identity resolution, message history, ranking, jobs and
the API router) so contributors can navigate the feature without hunting
through global folders.
"""

# Re-export the primary building blocks for easy access.
from .api.router import router as checkins_router  # noqa: F401
from .jobs.cache_sweep_job import start_cache_sweep_scheduler  # noqa: F401
from .ranking import CheckInConfig, CheckInRanker  # noqa: F401
from .services.engine import CheckInEngine, build_checkin_engine  # noqa: F401
