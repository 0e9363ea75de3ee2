"""Sensor fusion manager.

Main interface combining:
- CalibrationParameters for sensor calibration
- GyroscopeOffset for run-time gyroscope bias removal
- Ahrs for orientation estimation

Provides a single, simple API for orientation estimation from IMU data.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..calibration.gyro_offset import GyroscopeOffset
from ..calibration.inertial import CalibrationParameters
from ..core.config import Config
from ..core.numeric import use_fast_inverse_sqrt
from ..core.types import EulerAngles, Quaternion, Vector3, as_vector
from .ahrs import Ahrs
from .settings import AhrsFlags, AhrsSettings

logger = logging.getLogger(__name__)

VectorLike = Union[Vector3, ArrayLike]


@dataclass
class FusionStatus:
    """Current status of the fusion algorithm."""
    quaternion: NDArray[np.float64]  # [w, x, y, z]
    euler_deg: NDArray[np.float64]   # [roll, pitch, yaw] in degrees
    earth_acc: NDArray[np.float64]   # [x, y, z] in g
    gyro_offset: NDArray[np.float64]  # [bx, by, bz] in degrees/s
    flags: AhrsFlags
    quaternion_valid: bool
    update_count: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'qw': float(self.quaternion[0]),
            'qx': float(self.quaternion[1]),
            'qy': float(self.quaternion[2]),
            'qz': float(self.quaternion[3]),
            'roll_deg': float(self.euler_deg[0]),
            'pitch_deg': float(self.euler_deg[1]),
            'yaw_deg': float(self.euler_deg[2]),
            'earth_acc_x': float(self.earth_acc[0]),
            'earth_acc_y': float(self.earth_acc[1]),
            'earth_acc_z': float(self.earth_acc[2]),
            'gyro_offset_x': float(self.gyro_offset[0]),
            'gyro_offset_y': float(self.gyro_offset[1]),
            'gyro_offset_z': float(self.gyro_offset[2]),
            'initialising': self.flags.initialising,
            'angular_rate_recovery': self.flags.angular_rate_recovery,
            'acceleration_recovery': self.flags.acceleration_recovery,
            'magnetic_recovery': self.flags.magnetic_recovery,
            'quaternion_valid': self.quaternion_valid,
            'update_count': self.update_count
        }


class Fusion:
    """Main fusion interface combining all components.

    Each sample is calibrated, the gyroscope offset is removed and the AHRS
    algorithm is updated. Entry points come in two flavours: the plain ones
    take an absolute timestamp in seconds and derive the time step from the
    previous call, the ``*_by_duration`` ones take the time step directly.

    Usage:
        fusion = Fusion(100, AhrsSettings(gain=0.5))

        while True:
            gyr, acc, mag, timestamp = read_sensors()
            fusion.update(gyr, acc, mag, timestamp)
            euler = fusion.euler()
    """

    def __init__(
        self,
        sample_rate_hz: int,
        settings: Optional[AhrsSettings] = None,
        calibration: Optional[CalibrationParameters] = None
    ):
        """Initialize fusion manager.

        Args:
            sample_rate_hz: Sensor sample rate in Hz.
            settings: AHRS settings. If None, uses defaults.
            calibration: Sensor calibration. If None, samples are used as is.

        Raises:
            ValueError: If the sample rate is not a positive integer.
        """
        if calibration is None:
            calibration = CalibrationParameters()

        self.calibration = calibration
        self.ahrs = Ahrs(settings)
        self.offset = GyroscopeOffset(sample_rate_hz)
        self.sample_rate_hz = self.offset.sample_rate

        self.last_timestamp = 0.0
        self.update_count = 0

    @classmethod
    def from_config(cls, config: Config) -> "Fusion":
        """Create a fusion manager from configuration.

        Also applies the configured inverse square root method, which is
        process-wide.
        """
        use_fast_inverse_sqrt(config.algebra.fast_inverse_sqrt)
        fusion = cls(
            config.sensor.sample_rate_hz,
            AhrsSettings.from_config(config.ahrs),
            CalibrationParameters.from_config(config.calibration),
        )
        logger.info(
            "Fusion created: %d Hz, %s convention",
            fusion.sample_rate_hz,
            fusion.ahrs.settings.convention.value
        )
        return fusion

    def _calibrate_inertial(self, gyr: VectorLike, acc: VectorLike):
        gyr = self.calibration.calibrate_gyroscope(as_vector(gyr))
        acc = self.calibration.calibrate_accelerometer(as_vector(acc))
        return self.offset.update(gyr), acc

    def _elapsed(self, timestamp: float) -> float:
        dt = timestamp - self.last_timestamp
        self.last_timestamp = timestamp
        return dt

    def update_by_duration(
        self,
        gyr: VectorLike,
        acc: VectorLike,
        mag: VectorLike,
        dt: float
    ) -> None:
        """Update fusion with new sensor data.

        Args:
            gyr: Gyroscope in degrees/s.
            acc: Accelerometer in g.
            mag: Magnetometer in any unit.
            dt: Time since the previous sample in seconds.
        """
        gyr, acc = self._calibrate_inertial(gyr, acc)
        mag = self.calibration.calibrate_magnetometer(as_vector(mag))
        self.ahrs.update(gyr, acc, mag, dt)
        self.update_count += 1

    def update(
        self,
        gyr: VectorLike,
        acc: VectorLike,
        mag: VectorLike,
        timestamp: float
    ) -> None:
        """Update fusion with new sensor data and its timestamp in seconds."""
        self.update_by_duration(gyr, acc, mag, self._elapsed(timestamp))

    def update_no_mag_by_duration(
        self,
        gyr: VectorLike,
        acc: VectorLike,
        dt: float
    ) -> None:
        """Update fusion without a magnetometer.

        Args:
            gyr: Gyroscope in degrees/s.
            acc: Accelerometer in g.
            dt: Time since the previous sample in seconds.
        """
        gyr, acc = self._calibrate_inertial(gyr, acc)
        self.ahrs.update_no_mag(gyr, acc, dt)
        self.update_count += 1

    def update_no_mag(
        self,
        gyr: VectorLike,
        acc: VectorLike,
        timestamp: float
    ) -> None:
        """Update fusion without a magnetometer, given a timestamp in seconds."""
        self.update_no_mag_by_duration(gyr, acc, self._elapsed(timestamp))

    def update_external_heading_by_duration(
        self,
        gyr: VectorLike,
        acc: VectorLike,
        heading: float,
        dt: float
    ) -> None:
        """Update fusion with a heading from an external source.

        Args:
            gyr: Gyroscope in degrees/s.
            acc: Accelerometer in g.
            heading: Heading in degrees.
            dt: Time since the previous sample in seconds.
        """
        gyr, acc = self._calibrate_inertial(gyr, acc)
        self.ahrs.update_external_heading(gyr, acc, heading, dt)
        self.update_count += 1

    def update_external_heading(
        self,
        gyr: VectorLike,
        acc: VectorLike,
        heading: float,
        timestamp: float
    ) -> None:
        """Update fusion with an external heading, given a timestamp in seconds."""
        self.update_external_heading_by_duration(
            gyr, acc, heading, self._elapsed(timestamp)
        )

    def euler(self) -> EulerAngles:
        """Get current Euler angles in degrees."""
        return self.ahrs.euler()

    def earth_acceleration(self) -> Vector3:
        """Get acceleration in the earth frame with gravity removed, in g."""
        return self.ahrs.earth_acceleration()

    def linear_acceleration(self) -> Vector3:
        """Get acceleration in the sensor frame with gravity removed, in g."""
        return self.ahrs.linear_acceleration()

    def quaternion(self) -> Quaternion:
        """Get current quaternion estimate."""
        return self.ahrs.quaternion

    def flags(self) -> AhrsFlags:
        return self.ahrs.flags()

    def gyroscope_offset(self) -> Vector3:
        """Get current gyroscope offset estimate in degrees/s."""
        return self.offset.offset

    def status(self) -> FusionStatus:
        """Get complete fusion status."""
        quaternion = self.quaternion()
        return FusionStatus(
            quaternion=quaternion.to_array(),
            euler_deg=self.euler().to_array(),
            earth_acc=self.earth_acceleration().to_array(),
            gyro_offset=self.gyroscope_offset().to_array(),
            flags=self.flags(),
            quaternion_valid=quaternion.is_valid(),
            update_count=self.update_count
        )

    def reset(self) -> None:
        """Reset fusion state."""
        self.ahrs.reset()
        self.offset.reset()
        self.last_timestamp = 0.0
        self.update_count = 0
