"""Calibration tools for sensor fusion."""

from .inertial import (
    inertial_calibration,
    magnetic_calibration,
    InertialCalibration,
    MagneticCalibration,
    CalibrationParameters,
)
from .gyro_offset import GyroscopeOffset

__all__ = [
    'inertial_calibration',
    'magnetic_calibration',
    'InertialCalibration',
    'MagneticCalibration',
    'CalibrationParameters',
    'GyroscopeOffset',
]
