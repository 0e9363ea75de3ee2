"""AHRS settings and status records."""

from dataclasses import dataclass
from enum import Enum

from ..core.config import AhrsConfig


class Convention(Enum):
    """Earth axes convention."""
    NWU = "NWU"  # North-West-Up
    ENU = "ENU"  # East-North-Up
    NED = "NED"  # North-East-Down

    @classmethod
    def parse(cls, value) -> "Convention":
        """Accept a Convention or a case-insensitive name.

        Raises:
            ValueError: If the name is not a known convention.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            names = ", ".join(c.value for c in cls)
            raise ValueError(f"Unknown convention {value!r}, expected one of {names}") from None


@dataclass(frozen=True)
class AhrsSettings:
    """AHRS algorithm settings as supplied by the caller.

    Attributes:
        convention: Earth axes convention.
        gain: Feedback gain, 0 disables accelerometer and magnetometer feedback.
        gyroscope_range: Gyroscope range in degrees/s, 0 for unbounded.
        acceleration_rejection: Accelerometer rejection threshold in degrees,
            0 disables rejection.
        magnetic_rejection: Magnetometer rejection threshold in degrees,
            0 disables rejection.
        recovery_trigger_period: Recovery trigger period in samples,
            0 disables rejection of both sensors.
    """
    convention: Convention = Convention.NWU
    gain: float = 0.5
    gyroscope_range: float = 0.0
    acceleration_rejection: float = 90.0
    magnetic_rejection: float = 90.0
    recovery_trigger_period: int = 0

    def __post_init__(self):
        object.__setattr__(self, "convention", Convention.parse(self.convention))
        for name in ("gain", "gyroscope_range", "acceleration_rejection", "magnetic_rejection"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)}")
        if self.recovery_trigger_period < 0:
            raise ValueError(
                f"recovery_trigger_period must not be negative, got {self.recovery_trigger_period}"
            )

    @classmethod
    def from_config(cls, config: AhrsConfig) -> "AhrsSettings":
        """Build settings from the ahrs section of the configuration."""
        return cls(
            convention=Convention.parse(config.convention),
            gain=float(config.gain),
            gyroscope_range=float(config.gyroscope_range),
            acceleration_rejection=float(config.acceleration_rejection),
            magnetic_rejection=float(config.magnetic_rejection),
            recovery_trigger_period=int(config.recovery_trigger_period),
        )


@dataclass(frozen=True)
class AhrsFlags:
    """AHRS algorithm flags."""
    initialising: bool
    angular_rate_recovery: bool
    acceleration_recovery: bool
    magnetic_recovery: bool


@dataclass(frozen=True)
class AhrsInternalStates:
    """AHRS algorithm internal states.

    Errors are in degrees; recovery triggers are a ratio of the recovery
    trigger period in [0, 1].
    """
    acceleration_error: float
    accelerometer_ignored: bool
    acceleration_recovery_trigger: float
    magnetic_error: float
    magnetometer_ignored: bool
    magnetic_recovery_trigger: float

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'acceleration_error': self.acceleration_error,
            'accelerometer_ignored': self.accelerometer_ignored,
            'acceleration_recovery_trigger': self.acceleration_recovery_trigger,
            'magnetic_error': self.magnetic_error,
            'magnetometer_ignored': self.magnetometer_ignored,
            'magnetic_recovery_trigger': self.magnetic_recovery_trigger,
        }
