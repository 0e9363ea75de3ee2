"""Attitude and heading reference system (AHRS) algorithm.

Complementary filter that integrates the gyroscope and corrects the
integrated quaternion with accelerometer and magnetometer feedback. The
feedback gain is ramped down from a high initial value during an
initialisation period so that the filter converges quickly at start-up.

Each feedback channel has a rejection threshold. A sample whose error
exceeds the threshold is ignored, and a recovery trigger counts up by 1 for
every rejected sample and down by 9 for every accepted one. When the
trigger exceeds the recovery trigger period the channel is forced back on
until the trigger has drained to zero.

Sensor anomalies never raise: they are reported through ``flags()`` and
``internal_states()``.
"""

import logging
import math
from typing import Optional, Union

from numpy.typing import ArrayLike

from ..core.constants import (
    GYROSCOPE_RANGE_MARGIN,
    INITIAL_GAIN,
    INITIALISATION_PERIOD,
    RECOVERY_TRIGGER_DECREMENT,
    RECOVERY_TRIGGER_INCREMENT,
)
from ..core.numeric import asin_safe, degrees_to_radians, radians_to_degrees
from ..core.quaternion import QuaternionOps
from ..core.types import EulerAngles, Matrix3x3, Quaternion, Vector3, as_vector
from .convention import gravity_sign, half_gravity, half_magnetic
from .settings import AhrsFlags, AhrsInternalStates, AhrsSettings

logger = logging.getLogger(__name__)

VectorLike = Union[Vector3, ArrayLike]


def _rejection_threshold(degrees: float) -> float:
    if degrees == 0.0:
        return math.inf
    value = 0.5 * math.sin(degrees_to_radians(degrees))
    return value * value


def _normalize_or_zero(vector: Vector3) -> Vector3:
    if vector.is_zero():
        return Vector3.zero()
    return vector.normalize()


def _feedback(sensor: Vector3, reference: Vector3) -> Vector3:
    """Half-scaled error between a measured and an expected direction.

    Antiparallel directions give no rotation axis and no feedback.
    """
    if sensor.dot(reference) < 0.0:  # error is greater than 90 degrees
        return _normalize_or_zero(sensor.cross(reference))
    return sensor.cross(reference)


class _FeedbackChannel:
    """Rejection and recovery state of one feedback sensor."""

    def __init__(self, name: str, recovery_trigger_period: int):
        self.name = name
        self.feedback = Vector3.zero()
        self.ignored = False
        self.recovery_trigger = 0
        self.recovery_timeout = recovery_trigger_period

    def reset(self, recovery_trigger_period: int) -> None:
        self.feedback = Vector3.zero()
        self.ignored = False
        self.recovery_trigger = 0
        self.recovery_timeout = recovery_trigger_period

    @property
    def recovering(self) -> bool:
        return self.recovery_trigger > self.recovery_timeout

    def gate(
        self,
        feedback: Vector3,
        threshold: float,
        initialising: bool,
        recovery_trigger_period: int,
    ) -> Vector3:
        """Store the feedback and return it, or zero if the sample is ignored."""
        self.feedback = feedback

        if initialising or feedback.magnitude_squared() <= threshold:
            self.ignored = False
            self.recovery_trigger -= RECOVERY_TRIGGER_DECREMENT
        else:
            self.ignored = True
            self.recovery_trigger += RECOVERY_TRIGGER_INCREMENT

        if self.recovery_trigger > self.recovery_timeout:
            if self.recovery_timeout != 0:
                logger.warning("%s rejected for too long, forcing recovery", self.name)
            self.recovery_timeout = 0
            self.ignored = False
        else:
            if self.recovery_timeout == 0 and recovery_trigger_period != 0:
                logger.info("%s recovery complete", self.name)
            self.recovery_timeout = recovery_trigger_period

        self.recovery_trigger = min(max(self.recovery_trigger, 0), recovery_trigger_period)

        if self.ignored:
            return Vector3.zero()
        return feedback

    def error_degrees(self) -> float:
        return radians_to_degrees(asin_safe(2.0 * self.feedback.magnitude()))

    def trigger_ratio(self, recovery_trigger_period: int) -> float:
        if recovery_trigger_period == 0:
            return 0.0
        return self.recovery_trigger / recovery_trigger_period


class Ahrs:
    """AHRS algorithm state for a single IMU.

    Usage:
        ahrs = Ahrs(AhrsSettings(gain=0.5, recovery_trigger_period=500))

        while True:
            ahrs.update(gyr, acc, mag, dt)
            euler = ahrs.euler()
    """

    def __init__(self, settings: Optional[AhrsSettings] = None):
        """Initialize the algorithm.

        Args:
            settings: Algorithm settings. If None, uses defaults.
        """
        if settings is None:
            settings = AhrsSettings()

        self._settings = settings
        self._quaternion = Quaternion.identity()
        self._acc = Vector3.zero()
        self._initialising = True
        self._ramped_gain = INITIAL_GAIN
        self._ramped_gain_step = (INITIAL_GAIN - settings.gain) / INITIALISATION_PERIOD
        self._angular_rate_recovery = False
        self._accelerometer = _FeedbackChannel("Accelerometer", settings.recovery_trigger_period)
        self._magnetometer = _FeedbackChannel("Magnetometer", settings.recovery_trigger_period)

        self._gyroscope_range = math.inf
        self._acceleration_rejection = math.inf
        self._magnetic_rejection = math.inf

        self.update_settings(settings)

    @property
    def settings(self) -> AhrsSettings:
        """Settings as last supplied by the caller."""
        return self._settings

    def update_settings(self, settings: AhrsSettings) -> None:
        """Apply new settings without resetting the orientation.

        Args:
            settings: Algorithm settings.
        """
        self._settings = settings
        if settings.gyroscope_range == 0.0:
            self._gyroscope_range = math.inf
        else:
            self._gyroscope_range = GYROSCOPE_RANGE_MARGIN * settings.gyroscope_range
        self._acceleration_rejection = _rejection_threshold(settings.acceleration_rejection)
        self._magnetic_rejection = _rejection_threshold(settings.magnetic_rejection)
        if settings.gain == 0.0 or settings.recovery_trigger_period == 0:
            self._acceleration_rejection = math.inf
            self._magnetic_rejection = math.inf

        self._accelerometer.recovery_timeout = settings.recovery_trigger_period
        self._magnetometer.recovery_timeout = settings.recovery_trigger_period

        if not self._initialising:
            self._ramped_gain = settings.gain
        self._ramped_gain_step = (INITIAL_GAIN - settings.gain) / INITIALISATION_PERIOD

        logger.debug(
            "AHRS settings: convention=%s gain=%.3f gyroscope_range=%.1f "
            "acceleration_rejection=%.1f magnetic_rejection=%.1f recovery_trigger_period=%d",
            settings.convention.value,
            settings.gain,
            settings.gyroscope_range,
            settings.acceleration_rejection,
            settings.magnetic_rejection,
            settings.recovery_trigger_period,
        )

    def update(self, gyr: VectorLike, acc: VectorLike, mag: VectorLike, dt: float) -> None:
        """Update the algorithm with new gyroscope, accelerometer and magnetometer data.

        Args:
            gyr: Gyroscope in degrees/s.
            acc: Accelerometer in g.
            mag: Magnetometer in any calibrated unit. Zero skips the magnetometer.
            dt: Time since the previous update in seconds.
        """
        gyr = as_vector(gyr)
        acc = as_vector(acc)
        mag = as_vector(mag)
        settings = self._settings

        self._acc = acc

        # Reinitialise if gyroscope range exceeded
        if (abs(gyr.x) > self._gyroscope_range
                or abs(gyr.y) > self._gyroscope_range
                or abs(gyr.z) > self._gyroscope_range):
            if not self._angular_rate_recovery:
                logger.warning("Gyroscope range exceeded, reinitialising")
            quaternion = self._quaternion
            self.reset()
            self._quaternion = quaternion
            self._acc = acc
            self._angular_rate_recovery = True

        # Ramp down gain during initialisation
        if self._initialising:
            self._ramped_gain -= self._ramped_gain_step * dt
            if self._ramped_gain < settings.gain or settings.gain == 0.0:
                self._ramped_gain = settings.gain
                self._initialising = False
                self._angular_rate_recovery = False
                logger.info("AHRS initialisation complete")

        gravity = half_gravity(settings.convention, self._quaternion)

        half_accelerometer_feedback = Vector3.zero()
        self._accelerometer.ignored = True
        if not acc.is_zero():
            half_accelerometer_feedback = self._accelerometer.gate(
                _feedback(acc.normalize(), gravity),
                self._acceleration_rejection,
                self._initialising,
                settings.recovery_trigger_period,
            )

        half_magnetometer_feedback = Vector3.zero()
        self._magnetometer.ignored = True
        if not mag.is_zero():
            half_magnetometer_feedback = self._magnetometer.gate(
                # Field parallel to gravity carries no heading
                _feedback(
                    _normalize_or_zero(gravity.cross(mag)),
                    half_magnetic(settings.convention, self._quaternion),
                ),
                self._magnetic_rejection,
                self._initialising,
                settings.recovery_trigger_period,
            )

        # Convert gyroscope to radians per second scaled by 0.5
        half_gyroscope = gyr * degrees_to_radians(0.5)
        adjusted_half_gyroscope = half_gyroscope + (
            half_accelerometer_feedback + half_magnetometer_feedback
        ) * self._ramped_gain

        self._quaternion = self._quaternion + self._quaternion * (adjusted_half_gyroscope * dt)
        self._quaternion = self._quaternion.normalize()

    def update_no_mag(self, gyr: VectorLike, acc: VectorLike, dt: float) -> None:
        """Update the algorithm without a magnetometer.

        Heading is held at zero while initialising since nothing observes it.

        Args:
            gyr: Gyroscope in degrees/s.
            acc: Accelerometer in g.
            dt: Time since the previous update in seconds.
        """
        self.update(gyr, acc, Vector3.zero(), dt)
        if self._initialising:
            self.set_heading(0.0)

    def update_external_heading(
        self, gyr: VectorLike, acc: VectorLike, heading: float, dt: float
    ) -> None:
        """Update the algorithm with a heading from an external source.

        A horizontal magnetometer reading is synthesised from the heading and
        the current roll estimate.

        Args:
            gyr: Gyroscope in degrees/s.
            acc: Accelerometer in g.
            heading: Heading in degrees.
            dt: Time since the previous update in seconds.
        """
        roll = QuaternionOps.roll_radians(self._quaternion)
        heading_radians = degrees_to_radians(heading)
        sin_heading_radians = math.sin(heading_radians)
        magnetometer = Vector3(
            math.cos(heading_radians),
            -1.0 * math.cos(roll) * sin_heading_radians,
            sin_heading_radians * math.sin(roll),
        )
        self.update(gyr, acc, magnetometer, dt)

    def set_heading(self, heading: float) -> None:
        """Rotate the orientation about the z axis so that yaw equals heading.

        Args:
            heading: Heading in degrees.
        """
        self._quaternion = QuaternionOps.with_heading(self._quaternion, heading)

    def reset(self) -> None:
        """Reset the algorithm, including the orientation, to its initial state."""
        period = self._settings.recovery_trigger_period
        self._quaternion = Quaternion.identity()
        self._acc = Vector3.zero()
        self._initialising = True
        self._ramped_gain = INITIAL_GAIN
        self._angular_rate_recovery = False
        self._accelerometer.reset(period)
        self._magnetometer.reset(period)

    @property
    def quaternion(self) -> Quaternion:
        """Current orientation of the sensor relative to the earth."""
        return self._quaternion

    @quaternion.setter
    def quaternion(self, value: Union[Quaternion, ArrayLike]) -> None:
        if not isinstance(value, Quaternion):
            value = Quaternion.from_array(value)
        self._quaternion = value

    @property
    def initialising(self) -> bool:
        return self._initialising

    def euler(self) -> EulerAngles:
        """Orientation as Euler angles in degrees."""
        return QuaternionOps.to_euler(self._quaternion)

    def rotation_matrix(self) -> Matrix3x3:
        """Orientation as a rotation matrix from sensor to earth frame."""
        return QuaternionOps.rotation_matrix(self._quaternion)

    def earth_acceleration(self) -> Vector3:
        """Accelerometer measurement in the earth frame with gravity removed, in g."""
        accelerometer = self.rotation_matrix() * self._acc
        sign = gravity_sign(self._settings.convention)
        return Vector3(accelerometer.x, accelerometer.y, accelerometer.z - sign)

    def linear_acceleration(self) -> Vector3:
        """Accelerometer measurement in the sensor frame with gravity removed, in g."""
        q = self._quaternion
        gravity = Vector3(
            2.0 * (q.x * q.z - q.w * q.y),
            2.0 * (q.y * q.z + q.w * q.x),
            2.0 * (q.w * q.w - 0.5 + q.z * q.z),
        )
        return self._acc - gravity * gravity_sign(self._settings.convention)

    def flags(self) -> AhrsFlags:
        """Algorithm flags."""
        return AhrsFlags(
            initialising=self._initialising,
            angular_rate_recovery=self._angular_rate_recovery,
            acceleration_recovery=self._accelerometer.recovering,
            magnetic_recovery=self._magnetometer.recovering,
        )

    def internal_states(self) -> AhrsInternalStates:
        """Algorithm internal states."""
        period = self._settings.recovery_trigger_period
        return AhrsInternalStates(
            acceleration_error=self._accelerometer.error_degrees(),
            accelerometer_ignored=self._accelerometer.ignored,
            acceleration_recovery_trigger=self._accelerometer.trigger_ratio(period),
            magnetic_error=self._magnetometer.error_degrees(),
            magnetometer_ignored=self._magnetometer.ignored,
            magnetic_recovery_trigger=self._magnetometer.trigger_ratio(period),
        )
