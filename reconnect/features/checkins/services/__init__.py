"""
Service layer for the check-in feature.
"""

from .engine import CheckInEngine, build_checkin_engine

__all__ = ["CheckInEngine", "build_checkin_engine"]
