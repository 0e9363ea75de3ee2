"""Quaternion conversions and utilities."""

import math

from .numeric import asin_safe, degrees_to_radians, radians_to_degrees
from .types import EulerAngles, Matrix3x3, Quaternion, Vector3


class QuaternionOps:
    """Static methods for quaternion operations."""

    @staticmethod
    def to_euler(q: Quaternion) -> EulerAngles:
        """Convert quaternion to Euler angles (ZYX convention).

        Pitch is clamped to +/-90 degrees when the argument of the arcsine
        leaves [-1, 1] through rounding.

        Args:
            q: Unit quaternion.

        Returns:
            Euler angles in degrees.
        """
        half_minus_qy_squared = 0.5 - q.y * q.y
        roll = math.atan2(q.w * q.x + q.y * q.z, half_minus_qy_squared - q.x * q.x)
        pitch = asin_safe(2.0 * (q.w * q.y - q.z * q.x))
        yaw = math.atan2(q.w * q.z + q.x * q.y, half_minus_qy_squared - q.z * q.z)

        return EulerAngles(
            roll=radians_to_degrees(roll),
            pitch=radians_to_degrees(pitch),
            yaw=radians_to_degrees(yaw),
        )

    @staticmethod
    def rotation_matrix(q: Quaternion) -> Matrix3x3:
        """Convert quaternion to the rotation matrix from sensor to earth frame.

        Args:
            q: Unit quaternion.

        Returns:
            Rotation matrix.
        """
        qwqw = q.w * q.w
        qwqx = q.w * q.x
        qwqy = q.w * q.y
        qwqz = q.w * q.z
        qxqx = q.x * q.x
        qxqy = q.x * q.y
        qxqz = q.x * q.z
        qyqy = q.y * q.y
        qyqz = q.y * q.z
        qzqz = q.z * q.z

        return Matrix3x3(
            xx=2.0 * (qwqw - 0.5 + qxqx),
            xy=2.0 * (qxqy - qwqz),
            xz=2.0 * (qxqz + qwqy),
            yx=2.0 * (qxqy + qwqz),
            yy=2.0 * (qwqw - 0.5 + qyqy),
            yz=2.0 * (qyqz - qwqx),
            zx=2.0 * (qxqz - qwqy),
            zy=2.0 * (qyqz + qwqx),
            zz=2.0 * (qwqw - 0.5 + qzqz),
        )

    @staticmethod
    def rotate_vector(q: Quaternion, v: Vector3) -> Vector3:
        """Rotate a vector by computing q * v * q^-1.

        Args:
            q: Unit quaternion.
            v: Vector to rotate.

        Returns:
            Rotated vector.
        """
        return ((q * v) * q.conjugate()).vector

    @staticmethod
    def roll_radians(q: Quaternion) -> float:
        """Roll angle of a unit quaternion in radians."""
        return math.atan2(q.w * q.x + q.y * q.z, 0.5 - q.y * q.y - q.x * q.x)

    @staticmethod
    def yaw_radians(q: Quaternion) -> float:
        """Yaw angle of a unit quaternion in radians."""
        return math.atan2(q.w * q.z + q.x * q.y, 0.5 - q.y * q.y - q.z * q.z)

    @staticmethod
    def with_heading(q: Quaternion, heading: float) -> Quaternion:
        """Return ``q`` rotated about its z axis so that its yaw equals heading.

        Args:
            q: Unit quaternion.
            heading: Target heading in degrees.

        Returns:
            Rotated quaternion.
        """
        half_yaw_minus_heading = 0.5 * (
            QuaternionOps.yaw_radians(q) - degrees_to_radians(heading)
        )
        rotation = Quaternion(
            w=math.cos(half_yaw_minus_heading),
            x=0.0,
            y=0.0,
            z=-1.0 * math.sin(half_yaw_minus_heading),
        )
        return q * rotation
