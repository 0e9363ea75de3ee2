"""Pytest fixtures for IMU sensor fusion tests."""

import pytest
import numpy as np

from imu_fusion.core import numeric
from imu_fusion.core.config import Config
from imu_fusion.core.types import Quaternion, Vector3
from imu_fusion.fusion.settings import AhrsSettings, Convention


@pytest.fixture(autouse=True)
def standard_sqrt():
    """Run every test with the standard inverse square root and restore it after."""
    previous = numeric.fast_inverse_sqrt_enabled()
    numeric.use_fast_inverse_sqrt(False)
    yield
    numeric.use_fast_inverse_sqrt(previous)


@pytest.fixture
def config() -> Config:
    """Create default configuration for tests."""
    return Config()


@pytest.fixture
def settings() -> AhrsSettings:
    """Settings used by the reference scenario at 100 Hz."""
    return AhrsSettings(
        convention=Convention.NWU,
        gain=0.5,
        gyroscope_range=2000.0,
        acceleration_rejection=10.0,
        magnetic_rejection=10.0,
        recovery_trigger_period=500,
    )


@pytest.fixture
def level_acc() -> Vector3:
    """Accelerometer of a level, stationary sensor in an up convention."""
    return Vector3(0.0, 0.0, 1.0)


@pytest.fixture
def north_mag() -> Vector3:
    """Magnetometer pointing north with no inclination."""
    return Vector3(1.0, 0.0, 0.0)


@pytest.fixture
def sample_quaternion() -> Quaternion:
    """Create a sample non-identity quaternion.

    Represents a rotation of 40 degrees about the axis (1, 2, 3).
    """
    axis = np.array([1.0, 2.0, 3.0])
    axis = axis / np.linalg.norm(axis)
    angle = np.deg2rad(40)
    return Quaternion(
        w=float(np.cos(angle / 2)),
        x=float(axis[0] * np.sin(angle / 2)),
        y=float(axis[1] * np.sin(angle / 2)),
        z=float(axis[2] * np.sin(angle / 2)),
    )
