"""Sensor calibration models.

Gyroscope and accelerometer samples are corrected for offset, per-axis
sensitivity and axis misalignment. Magnetometer samples are corrected for
hard-iron offset and soft-iron distortion.
"""

from dataclasses import dataclass, field

from ..core.config import CalibrationConfig
from ..core.types import Matrix3x3, Vector3


def inertial_calibration(
    uncalibrated: Vector3,
    misalignment: Matrix3x3,
    sensitivity: Vector3,
    offset: Vector3,
) -> Vector3:
    """Apply gyroscope or accelerometer calibration.

    Computes ``misalignment * ((uncalibrated - offset) * sensitivity)``
    with an elementwise sensitivity product.

    Args:
        uncalibrated: Raw sensor sample.
        misalignment: Axis misalignment matrix.
        sensitivity: Per-axis sensitivity.
        offset: Per-axis offset in raw units.

    Returns:
        Calibrated sample.
    """
    return misalignment * ((uncalibrated - offset) * sensitivity)


def magnetic_calibration(
    uncalibrated: Vector3,
    soft_iron_matrix: Matrix3x3,
    hard_iron_offset: Vector3,
) -> Vector3:
    """Apply magnetometer calibration: ``soft_iron * (uncalibrated - hard_iron)``."""
    return soft_iron_matrix * (uncalibrated - hard_iron_offset)


@dataclass(frozen=True)
class InertialCalibration:
    """Calibration of a gyroscope or accelerometer."""
    misalignment: Matrix3x3 = field(default_factory=Matrix3x3.identity)
    sensitivity: Vector3 = field(default_factory=Vector3.ones)
    offset: Vector3 = field(default_factory=Vector3.zero)

    def apply(self, uncalibrated: Vector3) -> Vector3:
        return inertial_calibration(
            uncalibrated, self.misalignment, self.sensitivity, self.offset
        )


@dataclass(frozen=True)
class MagneticCalibration:
    """Calibration of a magnetometer."""
    soft_iron_matrix: Matrix3x3 = field(default_factory=Matrix3x3.identity)
    hard_iron_offset: Vector3 = field(default_factory=Vector3.zero)

    def apply(self, uncalibrated: Vector3) -> Vector3:
        return magnetic_calibration(
            uncalibrated, self.soft_iron_matrix, self.hard_iron_offset
        )


@dataclass(frozen=True)
class CalibrationParameters:
    """Calibration of all three sensors. Defaults leave samples unchanged."""
    gyroscope: InertialCalibration = field(default_factory=InertialCalibration)
    accelerometer: InertialCalibration = field(default_factory=InertialCalibration)
    magnetometer: MagneticCalibration = field(default_factory=MagneticCalibration)

    @classmethod
    def from_config(cls, config: CalibrationConfig) -> "CalibrationParameters":
        """Build parameters from the calibration section of the configuration.

        Raises:
            ValueError: If a matrix does not have nine elements or a vector
                does not have three.
        """
        return cls(
            gyroscope=InertialCalibration(
                misalignment=Matrix3x3.from_array(config.gyroscope.misalignment),
                sensitivity=Vector3.from_array(config.gyroscope.sensitivity),
                offset=Vector3.from_array(config.gyroscope.offset),
            ),
            accelerometer=InertialCalibration(
                misalignment=Matrix3x3.from_array(config.accelerometer.misalignment),
                sensitivity=Vector3.from_array(config.accelerometer.sensitivity),
                offset=Vector3.from_array(config.accelerometer.offset),
            ),
            magnetometer=MagneticCalibration(
                soft_iron_matrix=Matrix3x3.from_array(config.magnetometer.soft_iron_matrix),
                hard_iron_offset=Vector3.from_array(config.magnetometer.hard_iron_offset),
            ),
        )

    def calibrate_gyroscope(self, gyr: Vector3) -> Vector3:
        return self.gyroscope.apply(gyr)

    def calibrate_accelerometer(self, acc: Vector3) -> Vector3:
        return self.accelerometer.apply(acc)

    def calibrate_magnetometer(self, mag: Vector3) -> Vector3:
        return self.magnetometer.apply(mag)
