"""Reference directions for each earth axes convention.

All directions are expressed in the sensor frame and scaled by 0.5 to match
the quaternion derivative.
"""

from ..core.types import Quaternion, Vector3
from .settings import Convention


def half_gravity(convention: Convention, q: Quaternion) -> Vector3:
    """Direction of gravity indicated by the quaternion, scaled by 0.5."""
    if convention in (Convention.NWU, Convention.ENU):
        return Vector3(
            q.x * q.z - q.w * q.y,
            q.y * q.z + q.w * q.x,
            q.w * q.w - 0.5 + q.z * q.z,
        )
    if convention is Convention.NED:
        return Vector3(
            q.w * q.y - q.x * q.z,
            -1.0 * (q.y * q.z + q.w * q.x),
            0.5 - q.w * q.w - q.z * q.z,
        )
    raise ValueError(f"Unsupported convention: {convention}")


def half_magnetic(convention: Convention, q: Quaternion) -> Vector3:
    """Direction of the magnetic field indicated by the quaternion, scaled by 0.5."""
    if convention is Convention.NWU:
        return Vector3(
            q.x * q.y + q.w * q.z,
            q.w * q.w - 0.5 + q.y * q.y,
            q.y * q.z - q.w * q.x,
        )
    if convention is Convention.ENU:
        return Vector3(
            0.5 - q.w * q.w - q.x * q.x,
            q.w * q.z - q.x * q.y,
            -1.0 * (q.x * q.z + q.w * q.y),
        )
    if convention is Convention.NED:
        return Vector3(
            -1.0 * (q.x * q.y + q.w * q.z),
            0.5 - q.w * q.w - q.y * q.y,
            q.w * q.x - q.y * q.z,
        )
    raise ValueError(f"Unsupported convention: {convention}")


def gravity_sign(convention: Convention) -> float:
    """Sign of gravity removed from the vertical earth axis.

    +1 for the up conventions (1 g is subtracted), -1 for NED (1 g is added).
    """
    if convention in (Convention.NWU, Convention.ENU):
        return 1.0
    if convention is Convention.NED:
        return -1.0
    raise ValueError(f"Unsupported convention: {convention}")
