"""
Background jobs for the check-in feature.
"""

from .cache_sweep_job import start_cache_sweep_scheduler

__all__ = ["start_cache_sweep_scheduler"]
