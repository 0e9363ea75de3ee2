"""IMU sensor fusion: AHRS orientation estimation from gyroscope,
accelerometer and magnetometer samples."""

from .core import (
    Vector3,
    Matrix3x3,
    Quaternion,
    EulerAngles,
    QuaternionOps,
    Config,
    load_config,
    use_fast_inverse_sqrt,
)
from .calibration import (
    inertial_calibration,
    magnetic_calibration,
    InertialCalibration,
    MagneticCalibration,
    CalibrationParameters,
    GyroscopeOffset,
)
from .fusion import (
    Convention,
    AhrsSettings,
    AhrsFlags,
    AhrsInternalStates,
    Ahrs,
    Fusion,
    FusionStatus,
)

__version__ = "0.1.0"

__all__ = [
    "Vector3",
    "Matrix3x3",
    "Quaternion",
    "EulerAngles",
    "QuaternionOps",
    "Config",
    "load_config",
    "use_fast_inverse_sqrt",
    "inertial_calibration",
    "magnetic_calibration",
    "InertialCalibration",
    "MagneticCalibration",
    "CalibrationParameters",
    "GyroscopeOffset",
    "Convention",
    "AhrsSettings",
    "AhrsFlags",
    "AhrsInternalStates",
    "Ahrs",
    "Fusion",
    "FusionStatus",
]
