"""Run-time gyroscope offset correction.

The offset estimate adapts only after the gyroscope has read below a fixed
threshold on every axis for a timeout period, so that slow bias drift is
removed without mistaking real rotation for bias.
"""

import logging
import math

from ..core.constants import (
    GYROSCOPE_OFFSET_CUTOFF_FREQUENCY,
    GYROSCOPE_OFFSET_TIMEOUT,
    GYROSCOPE_STATIONARY_THRESHOLD,
)
from ..core.types import Vector3

logger = logging.getLogger(__name__)


class GyroscopeOffset:
    """Adaptive gyroscope offset estimator for continuous operation.

    Updates the offset estimate only during stationary periods, using a
    first order low-pass filter with a 0.02 Hz cutoff.
    """

    def __init__(self, sample_rate: int):
        """Initialize estimator.

        Args:
            sample_rate: Sample rate in Hz.

        Raises:
            ValueError: If the sample rate is not a positive integer.
        """
        if int(sample_rate) != sample_rate or sample_rate <= 0:
            raise ValueError(f"Sample rate must be a positive integer, got {sample_rate}")

        self.sample_rate = int(sample_rate)
        self.filter_coefficient = (
            2.0 * math.pi * GYROSCOPE_OFFSET_CUTOFF_FREQUENCY * (1.0 / self.sample_rate)
        )
        self.timeout = GYROSCOPE_OFFSET_TIMEOUT * self.sample_rate
        self.timer = 0
        self._offset = Vector3.zero()

    def update(self, gyr: Vector3) -> Vector3:
        """Update offset estimate with new gyro reading.

        Args:
            gyr: Gyroscope reading in degrees/s.

        Returns:
            Corrected gyro (gyro - offset).
        """
        gyr = gyr - self._offset

        if (abs(gyr.x) > GYROSCOPE_STATIONARY_THRESHOLD
                or abs(gyr.y) > GYROSCOPE_STATIONARY_THRESHOLD
                or abs(gyr.z) > GYROSCOPE_STATIONARY_THRESHOLD):
            self.timer = 0
            return gyr

        if self.timer < self.timeout:
            self.timer += 1
            if self.timer == self.timeout:
                logger.debug("Gyroscope stationary, offset estimation active")
            return gyr

        self._offset = self._offset + gyr * self.filter_coefficient
        return gyr

    @property
    def offset(self) -> Vector3:
        """Current offset estimate in degrees/s."""
        return self._offset

    @property
    def is_stationary(self) -> bool:
        """Whether the offset is currently being adapted."""
        return self.timer >= self.timeout

    def reset(self) -> None:
        """Reset estimator state."""
        self.timer = 0
        self._offset = Vector3.zero()
