"""Core module for IMU sensor fusion."""

from .types import (
    Vector3,
    Matrix3x3,
    Quaternion,
    EulerAngles,
    as_vector,
)
from .quaternion import QuaternionOps
from .numeric import use_fast_inverse_sqrt, fast_inverse_sqrt_enabled
from .config import Config, load_config

__all__ = [
    "Vector3",
    "Matrix3x3",
    "Quaternion",
    "EulerAngles",
    "as_vector",
    "QuaternionOps",
    "use_fast_inverse_sqrt",
    "fast_inverse_sqrt_enabled",
    "Config",
    "load_config",
]
