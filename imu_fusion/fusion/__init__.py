"""Sensor fusion module for IMU orientation estimation."""

from .settings import (
    Convention,
    AhrsSettings,
    AhrsFlags,
    AhrsInternalStates,
)
from .ahrs import Ahrs
from .fusion_manager import Fusion, FusionStatus

__all__ = [
    "Convention",
    "AhrsSettings",
    "AhrsFlags",
    "AhrsInternalStates",
    "Ahrs",
    "Fusion",
    "FusionStatus",
]
