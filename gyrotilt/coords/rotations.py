"""Rotation representations and conversions.

This module converts between the rotation representations the tilt
integrator touches:
- Rotation vectors / quaternions in scalar-last order [x, y, z, w], as
  produced per gyro sample (sensors.integration)
- Rotation matrices (3x3 orthogonal matrices, SO(3))
- Euler angles (roll-pitch-yaw, ZYX convention)

Conventions:
- Euler angles: [roll, pitch, yaw] in radians (ZYX/3-2-1 convention)
  - Roll: rotation about x-axis (φ)
  - Pitch: rotation about y-axis (θ)
  - Yaw: rotation about z-axis (ψ)
- Rotation matrices: 3x3 numpy arrays, v_ref = R @ v_device
"""

import numpy as np
from numpy.typing import NDArray


def rotation_vector_to_matrix(rotation_vector: NDArray) -> NDArray[np.float32]:
    """Convert a rotation vector (scalar-last quaternion) to a rotation matrix.

    Accepts the 3- or 4-component form used by sensor rotation vectors:
    [x, y, z] or [x, y, z, w]. With three components the scalar part is
    reconstructed as w = sqrt(1 - x² - y² - z²), or 0 when that is negative.

    The quaternion is used as given, without normalization, so the result is
    a pure function of the input: converting the same vector twice yields
    bit-identical matrices.

    Args:
        rotation_vector: Array of shape (3,) or (4,).

    Returns:
        3x3 float32 rotation matrix R.

    Raises:
        ValueError: If the input does not have 3 or 4 components.

    Example:
        >>> R = rotation_vector_to_matrix(np.array([0.0, 0.0, 0.0, 1.0]))
        >>> bool(np.all(R == np.eye(3, dtype=np.float32)))
        True
    """
    rv = np.asarray(rotation_vector, dtype=np.float32)
    if rv.shape not in ((3,), (4,)):
        raise ValueError(
            f"Expected rotation vector of shape (3,) or (4,), got {rv.shape}"
        )

    q1, q2, q3 = rv[0], rv[1], rv[2]
    if rv.shape == (4,):
        q0 = rv[3]
    else:
        q0 = np.float32(1.0) - q1 * q1 - q2 * q2 - q3 * q3
        q0 = np.sqrt(q0) if q0 > 0 else np.float32(0.0)

    two = np.float32(2.0)
    one = np.float32(1.0)
    sq_q1 = two * q1 * q1
    sq_q2 = two * q2 * q2
    sq_q3 = two * q3 * q3
    q1_q2 = two * q1 * q2
    q3_q0 = two * q3 * q0
    q1_q3 = two * q1 * q3
    q2_q0 = two * q2 * q0
    q2_q3 = two * q2 * q3
    q1_q0 = two * q1 * q0

    R = np.array(
        [
            [one - sq_q2 - sq_q3, q1_q2 - q3_q0, q1_q3 + q2_q0],
            [q1_q2 + q3_q0, one - sq_q1 - sq_q3, q2_q3 - q1_q0],
            [q1_q3 - q2_q0, q2_q3 + q1_q0, one - sq_q1 - sq_q2],
        ],
        dtype=np.float32,
    )

    return R


def rotation_matrix_to_euler(R: NDArray) -> NDArray[np.float64]:
    """Convert rotation matrix to Euler angles.

    Extracts roll-pitch-yaw Euler angles (ZYX convention) from a 3x3
    rotation matrix. Handles gimbal lock when pitch is near ±90°.

    Args:
        R: 3x3 rotation matrix (orthogonal matrix in SO(3)).

    Returns:
        Euler angles as numpy array [roll, pitch, yaw] in radians.

    Raises:
        ValueError: If R is not a 3x3 matrix.

    Example:
        >>> R = np.eye(3)  # Identity rotation
        >>> euler = rotation_matrix_to_euler(R)
        >>> print(f"Euler angles: {euler}")  # Should be [0, 0, 0]
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {R.shape}")

    sin_pitch = -R[2, 0]

    if abs(sin_pitch) >= 1.0:
        # Gimbal lock: only yaw - roll (or yaw + roll) is observable
        pitch = np.copysign(np.pi / 2.0, sin_pitch)
        yaw = np.arctan2(-R[0, 1], R[1, 1])
        roll = 0.0
    else:
        pitch = np.arcsin(sin_pitch)
        roll = np.arctan2(R[2, 1], R[2, 2])
        yaw = np.arctan2(R[1, 0], R[0, 0])

    return np.array([roll, pitch, yaw], dtype=np.float64)
