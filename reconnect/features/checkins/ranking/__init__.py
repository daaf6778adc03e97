"""
Ranking package for check-ins.

Holds the validated ranking policy (CheckInConfig, presets) and the
CheckInRanker that applies it.
"""

from .config import CHECKIN_PRESETS, CheckInConfig, config_for_preset, describe_config
from .service import CheckInRanker

__all__ = [
    "CHECKIN_PRESETS",
    "CheckInConfig",
    "CheckInRanker",
    "config_for_preset",
    "describe_config",
]
