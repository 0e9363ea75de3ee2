"""Value types for IMU sensor fusion.

All arithmetic is done on Python floats (IEEE-754 double precision). Results
therefore agree with single precision implementations of the same filter only
to within rounding, typically 1e-6 relative, and are not bit-identical.
"""

from dataclasses import dataclass
from typing import Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .numeric import inverse_sqrt


@dataclass(frozen=True)
class Vector3:
    """Three-component vector, typically a sensor-frame quantity.

    Units follow the sensor: degrees/s for the gyroscope, g for the
    accelerometer, any consistent unit for the magnetometer.
    """
    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> "Vector3":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def ones(cls) -> "Vector3":
        return cls(1.0, 1.0, 1.0)

    @classmethod
    def from_array(cls, arr: ArrayLike) -> "Vector3":
        """Create from an array-like [x, y, z].

        Raises:
            ValueError: If the input does not hold exactly three values.
        """
        values = np.asarray(arr, dtype=np.float64).reshape(-1)
        if values.shape != (3,):
            raise ValueError(f"Expected 3 components, got {values.size}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to numpy array [x, y, z]."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def is_zero(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.z == 0.0

    def sum(self) -> float:
        return self.x + self.y + self.z

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def magnitude_squared(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def magnitude(self) -> float:
        return float(np.sqrt(self.magnitude_squared()))

    def normalize(self) -> "Vector3":
        """Return the unit vector. The input must not be zero."""
        return self * inverse_sqrt(self.magnitude_squared())

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, other: Union["Vector3", float]) -> "Vector3":
        # Vector operand multiplies elementwise (Hadamard product).
        if isinstance(other, Vector3):
            return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)
        return Vector3(self.x * other, self.y * other, self.z * other)

    def __rmul__(self, other: float) -> "Vector3":
        return Vector3(self.x * other, self.y * other, self.z * other)


def as_vector(value: Union[Vector3, ArrayLike]) -> Vector3:
    """Accept a Vector3 or any array-like of three values."""
    if isinstance(value, Vector3):
        return value
    return Vector3.from_array(value)


@dataclass(frozen=True)
class Matrix3x3:
    """3x3 matrix stored row-major as xx, xy, xz, yx, ... zz."""
    xx: float
    xy: float
    xz: float
    yx: float
    yy: float
    yz: float
    zx: float
    zy: float
    zz: float

    @classmethod
    def identity(cls) -> "Matrix3x3":
        return cls(1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_array(cls, arr: ArrayLike) -> "Matrix3x3":
        """Create from a 3x3 array or nine row-major values.

        Raises:
            ValueError: If the input does not hold exactly nine values.
        """
        values = np.asarray(arr, dtype=np.float64).reshape(-1)
        if values.shape != (9,):
            raise ValueError(f"Expected 9 matrix elements, got {values.size}")
        return cls(*(float(v) for v in values))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to a 3x3 numpy array."""
        return np.array([
            [self.xx, self.xy, self.xz],
            [self.yx, self.yy, self.yz],
            [self.zx, self.zy, self.zz],
        ], dtype=np.float64)

    def __mul__(self, v: Vector3) -> Vector3:
        return Vector3(
            self.xx * v.x + self.xy * v.y + self.xz * v.z,
            self.yx * v.x + self.yy * v.y + self.yz * v.z,
            self.zx * v.x + self.zy * v.y + self.zz * v.z,
        )

    __matmul__ = __mul__


@dataclass(frozen=True)
class Quaternion:
    """Quaternion representing orientation.

    Convention: [w, x, y, z] where w is the scalar component. Unit norm is
    restored after every integration step, not enforced continuously.
    """
    w: float
    x: float
    y: float
    z: float

    @classmethod
    def identity(cls) -> "Quaternion":
        """Return identity quaternion (no rotation)."""
        return cls(w=1.0, x=0.0, y=0.0, z=0.0)

    @classmethod
    def from_array(cls, arr: ArrayLike) -> "Quaternion":
        """Create from array-like [w, x, y, z]."""
        values = np.asarray(arr, dtype=np.float64).reshape(-1)
        if values.shape != (4,):
            raise ValueError(f"Expected 4 quaternion components, got {values.size}")
        return cls(w=float(values[0]), x=float(values[1]),
                   y=float(values[2]), z=float(values[3]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to numpy array [w, x, y, z]."""
        return np.array([self.w, self.x, self.y, self.z], dtype=np.float64)

    @property
    def vector(self) -> Vector3:
        """Imaginary part [x, y, z]."""
        return Vector3(self.x, self.y, self.z)

    @property
    def norm(self) -> float:
        """Euclidean norm of quaternion."""
        return float(np.sqrt(self.w**2 + self.x**2 + self.y**2 + self.z**2))

    def is_valid(self, tolerance: float = 0.01) -> bool:
        """Check if quaternion is unit quaternion within tolerance."""
        return abs(self.norm - 1.0) <= tolerance and self._is_finite()

    def _is_finite(self) -> bool:
        """Check all components are finite."""
        return bool(np.all(np.isfinite([self.w, self.x, self.y, self.z])))

    def normalize(self) -> "Quaternion":
        """Return the unit quaternion. The input must not be zero."""
        return self * inverse_sqrt(
            self.w * self.w + self.x * self.x + self.y * self.y + self.z * self.z
        )

    def conjugate(self) -> "Quaternion":
        return Quaternion(w=self.w, x=-self.x, y=-self.y, z=-self.z)

    def __add__(self, other: "Quaternion") -> "Quaternion":
        return Quaternion(
            w=self.w + other.w,
            x=self.x + other.x,
            y=self.y + other.y,
            z=self.z + other.z,
        )

    def __mul__(self, other: Union["Quaternion", Vector3, float]) -> "Quaternion":
        """Hamilton product, product with a pure quaternion, or scaling."""
        if isinstance(other, Quaternion):
            return Quaternion(
                w=self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
                x=self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
                y=self.w * other.y - self.x * other.z + self.y * other.w + self.z * other.x,
                z=self.w * other.z + self.x * other.y - self.y * other.x + self.z * other.w,
            )
        if isinstance(other, Vector3):
            # Vector treated as the pure quaternion (0, v).
            return Quaternion(
                w=-self.x * other.x - self.y * other.y - self.z * other.z,
                x=self.w * other.x + self.y * other.z - self.z * other.y,
                y=self.w * other.y - self.x * other.z + self.z * other.x,
                z=self.w * other.z + self.x * other.y - self.y * other.x,
            )
        return Quaternion(
            w=self.w * other, x=self.x * other, y=self.y * other, z=self.z * other
        )


@dataclass(frozen=True)
class EulerAngles:
    """Euler angles in degrees.

    Convention: ZYX (yaw-pitch-roll) intrinsic rotations.
    """
    roll: float   # Rotation about X axis
    pitch: float  # Rotation about Y axis
    yaw: float    # Rotation about Z axis

    @classmethod
    def zero(cls) -> "EulerAngles":
        return cls(roll=0.0, pitch=0.0, yaw=0.0)

    def to_array(self) -> NDArray[np.float64]:
        """Convert to numpy array [roll, pitch, yaw] in degrees."""
        return np.array([self.roll, self.pitch, self.yaw], dtype=np.float64)
