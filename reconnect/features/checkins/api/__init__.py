"""
HTTP surface for the check-in feature.
"""

from .router import router

__all__ = ["router"]
