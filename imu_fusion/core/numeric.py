"""Scalar helpers: unit conversion, safe arcsine and inverse square root.

Normalisation uses either ``1 / sqrt(x)`` or the bit-level fast inverse
square root. The fast variant is evaluated in single precision and differs
from the standard one at roughly the 1e-3 relative level. The choice is
process-wide and defaults to the ``IMU_FUSION_FAST_INVERSE_SQRT``
environment variable.
"""

import math
import os

import numpy as np

_FAST_INVERSE_SQRT_MAGIC = 0x5F1F1412


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


_use_fast_inverse_sqrt = _env_flag("IMU_FUSION_FAST_INVERSE_SQRT")


def use_fast_inverse_sqrt(enabled: bool) -> None:
    """Select the inverse square root used by every ``normalize`` call."""
    global _use_fast_inverse_sqrt
    _use_fast_inverse_sqrt = bool(enabled)


def fast_inverse_sqrt_enabled() -> bool:
    """Whether the bit-level approximation is active."""
    return _use_fast_inverse_sqrt


def fast_inverse_sqrt(x: float) -> float:
    """Approximate ``1 / sqrt(x)`` with the single precision bit hack.

    Args:
        x: Positive value.

    Returns:
        Approximation with a relative error below 1e-3.
    """
    value = np.array([x], dtype=np.float32)
    bits = value.view(np.int32)
    bits = np.int32(_FAST_INVERSE_SQRT_MAGIC) - (bits >> 1)
    y = bits.view(np.float32)
    y = y * (np.float32(1.69000231) - np.float32(0.714158168) * value * y * y)
    return float(y[0])


def inverse_sqrt(x: float) -> float:
    """Inverse square root using the configured method."""
    if _use_fast_inverse_sqrt:
        return fast_inverse_sqrt(x)
    return 1.0 / math.sqrt(x)


def degrees_to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180.0)


def radians_to_degrees(radians: float) -> float:
    return radians * (180.0 / math.pi)


def asin_safe(value: float) -> float:
    """Arcsine clamped to [-pi/2, pi/2] for inputs outside [-1, 1]."""
    if value <= -1.0:
        return -math.pi / 2.0
    if value >= 1.0:
        return math.pi / 2.0
    return math.asin(value)
