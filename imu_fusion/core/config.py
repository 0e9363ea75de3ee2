"""Configuration management for IMU sensor fusion."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import os

import yaml


def _identity_matrix() -> List[float]:
    return [1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0]


def _ones() -> List[float]:
    return [1.0, 1.0, 1.0]


def _zeros() -> List[float]:
    return [0.0, 0.0, 0.0]


@dataclass
class SensorConfig:
    """Sensor sampling configuration."""
    sample_rate_hz: int = 100


@dataclass
class AhrsConfig:
    """AHRS algorithm configuration.

    Angles are in degrees, the gyroscope range in degrees/s and the
    recovery trigger period in samples. Zero disables the corresponding
    feature.
    """
    convention: str = "NWU"
    gain: float = 0.5
    gyroscope_range: float = 0.0
    acceleration_rejection: float = 90.0
    magnetic_rejection: float = 90.0
    recovery_trigger_period: int = 0


@dataclass
class InertialCalibrationConfig:
    """Gyroscope or accelerometer calibration.

    The misalignment matrix is given as nine row-major values.
    """
    misalignment: List[float] = field(default_factory=_identity_matrix)
    sensitivity: List[float] = field(default_factory=_ones)
    offset: List[float] = field(default_factory=_zeros)


@dataclass
class MagneticCalibrationConfig:
    """Magnetometer soft-iron and hard-iron calibration."""
    soft_iron_matrix: List[float] = field(default_factory=_identity_matrix)
    hard_iron_offset: List[float] = field(default_factory=_zeros)


@dataclass
class CalibrationConfig:
    """Calibration of all three sensors."""
    gyroscope: InertialCalibrationConfig = field(default_factory=InertialCalibrationConfig)
    accelerometer: InertialCalibrationConfig = field(default_factory=InertialCalibrationConfig)
    magnetometer: MagneticCalibrationConfig = field(default_factory=MagneticCalibrationConfig)


@dataclass
class AlgebraConfig:
    """Numerical options."""
    fast_inverse_sqrt: bool = False


@dataclass
class Config:
    """Complete configuration for IMU sensor fusion."""
    sensor: SensorConfig = field(default_factory=SensorConfig)
    ahrs: AhrsConfig = field(default_factory=AhrsConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    algebra: AlgebraConfig = field(default_factory=AlgebraConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, uses the
            ``IMU_FUSION_CONFIG_PATH`` environment variable, then the
            bundled default.

    Returns:
        Configuration object with all settings.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
    """
    if config_path is None:
        env_path = os.environ.get("IMU_FUSION_CONFIG_PATH")
        if env_path:
            config_path = env_path
        else:
            default_path = Path(__file__).parent.parent / "config" / "default.yaml"
            if default_path.exists():
                config_path = str(default_path)
            else:
                return Config()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return Config()

    return _build_config(data)


def _build_config(data: dict) -> Config:
    """Build Config object from dictionary."""
    sensor = SensorConfig(**data.get("sensor", {}))
    ahrs = AhrsConfig(**data.get("ahrs", {}))

    cal_data = data.get("calibration", {})
    calibration = CalibrationConfig(
        gyroscope=InertialCalibrationConfig(**cal_data.get("gyroscope", {})),
        accelerometer=InertialCalibrationConfig(**cal_data.get("accelerometer", {})),
        magnetometer=MagneticCalibrationConfig(**cal_data.get("magnetometer", {})),
    )

    algebra = AlgebraConfig(**data.get("algebra", {}))

    return Config(
        sensor=sensor,
        ahrs=ahrs,
        calibration=calibration,
        algebra=algebra,
    )
