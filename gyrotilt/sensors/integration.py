"""
Gyroscope integration: angular velocity to incremental rotation quaternion.

This module implements the numerical core of the tilt integrator as pure
functions:
    - Angular speed of a gyro sample
    - Rotation axis extraction (with a near-zero guard)
    - Axis-angle to unit quaternion over one sample interval
    - Conversion of the quaternion vector part to a tilt increment (degrees)

Given an angular velocity ω = [ωx, ωy, ωz] held constant over Δt, the device
rotates about the unit axis n = ω / |ω| by the angle θ = |ω|·Δt. The
incremental rotation is the unit quaternion

    Δq = [sin(θ/2)·nx, sin(θ/2)·ny, sin(θ/2)·nz, cos(θ/2)]

Quaternion Convention:
    - Scalar-last: [x, y, z, w] (sensor rotation-vector order)
    - Identity: [0, 0, 0, 1]

Precision:
    All arithmetic is float32, the precision of the gyro samples themselves.
"""

from typing import Tuple
import numpy as np

from gyrotilt.sensors.config import DEFAULT_EPSILON
from gyrotilt.sensors.types import DeltaRotation
from gyrotilt.sensors.units import RAD2DEG


def angular_speed(omega: np.ndarray) -> np.float32:
    """
    Magnitude of the angular velocity vector.

    Args:
        omega: Angular velocity, shape (3,). Units: rad/s.

    Returns:
        |ω| = sqrt(ωx² + ωy² + ωz²) as float32. Units: rad/s.
    """
    omega = np.asarray(omega, dtype=np.float32)
    if omega.shape != (3,):
        raise ValueError(f"omega must have shape (3,), got {omega.shape}")

    wx, wy, wz = omega
    return np.sqrt(wx * wx + wy * wy + wz * wz)


def rotation_axis(
    omega: np.ndarray,
    epsilon: float = DEFAULT_EPSILON,
) -> Tuple[np.ndarray, np.float32]:
    """
    Rotation axis of an angular velocity sample.

    The axis is ω / |ω| when |ω| > epsilon. Below the threshold the vector is
    returned unnormalized: dividing by a near-zero magnitude would amplify
    sensor noise into an arbitrary unit axis, while the unnormalized vector
    contributes a negligible rotation anyway.

    Args:
        omega: Angular velocity, shape (3,). Units: rad/s.
        epsilon: Normalization threshold. Units: rad/s.

    Returns:
        Tuple (axis, speed):
            axis: shape (3,), float32. Unit vector when speed > epsilon.
            speed: |ω| as float32.

    Example:
        >>> axis, speed = rotation_axis(np.array([0.0, 0.0, 2.0]))
        >>> axis, float(speed)
        (array([0., 0., 1.], dtype=float32), 2.0)
    """
    axis = np.array(omega, dtype=np.float32)
    speed = angular_speed(axis)

    if speed > epsilon:
        axis = axis / speed

    return axis, speed


def delta_rotation_from_gyro(
    omega: np.ndarray,
    dt: float,
    epsilon: float = DEFAULT_EPSILON,
) -> DeltaRotation:
    """
    Incremental rotation quaternion from one gyro sample.

    Integrates around the sample's rotation axis with its angular speed over
    the time step, turning the axis-angle pair into a unit quaternion:

        θ/2 = |ω|·Δt / 2
        Δq  = [sin(θ/2)·axis, cos(θ/2)]

    Args:
        omega: Angular velocity, shape (3,). Units: rad/s.
        dt: Time step since the previous sample. Units: seconds.
            Not validated: a zero step yields the identity rotation and a
            negative step the reverse rotation.
        epsilon: Axis normalization threshold (see rotation_axis).

    Returns:
        DeltaRotation with float32 components.

    Notes:
        - For |ω| = 0 the result is exactly [0, 0, 0, 1] for every dt.
        - When the axis was normalized, ||Δq|| = 1 up to float32 rounding.

    Example:
        >>> dq = delta_rotation_from_gyro(np.array([0.0, 0.0, 1.0]), 1.0)
        >>> round(float(dq.z), 4), round(float(dq.w), 4)
        (0.4794, 0.8776)
    """
    axis, speed = rotation_axis(omega, epsilon)

    theta_over_two = speed * np.float32(dt) / np.float32(2.0)
    sin_theta_over_two = np.sin(theta_over_two)
    cos_theta_over_two = np.cos(theta_over_two)

    return DeltaRotation(
        x=sin_theta_over_two * axis[0],
        y=sin_theta_over_two * axis[1],
        z=sin_theta_over_two * axis[2],
        w=cos_theta_over_two,
    )


def tilt_increment_deg(
    delta: DeltaRotation,
    invert_y: bool = True,
) -> Tuple[np.float32, np.float32, np.float32]:
    """
    Tilt increment contributed by one delta rotation, in degrees.

    The vector part of Δq (sin(θ/2)·axis) is scaled by 180/π and added to the
    running tilt. For small rotations sin(θ/2)·n ≈ θ/2·n, so the estimate
    tracks half the rotated angle per axis; the on-screen tilt is calibrated
    to that response.

    Args:
        delta: Incremental rotation for the sample interval.
        invert_y: If True (default), the y increment is negated so that the
                  image tilts in the screen's y direction.

    Returns:
        Tuple (dx, dy, dz) in degrees, float32.
    """
    dx = delta.x * RAD2DEG
    dy = delta.y * RAD2DEG
    dz = delta.z * RAD2DEG
    if invert_y:
        dy = -dy
    return dx, dy, dz
