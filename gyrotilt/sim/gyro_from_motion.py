"""
Generate synthetic gyroscope recordings from simple device motions.

The generators produce GyroSeries with integer nanosecond timestamps that
start at a non-zero boot offset, like a real sensor clock, so the first
sample of a recording is never confused with an unset timestamp.

Motions:
    - Constant angular rate about a fixed axis
    - Sinusoidal tilt (rocking) about one device axis
    - Arbitrary Euler-angle tracks, differentiated to body rates

Sensor errors are added separately (add_gyro_noise): white noise plus a
constant bias, the two terms that make raw integration drift.
"""

from typing import Optional, Sequence, Union

import numpy as np

from gyrotilt.sensors.types import GyroSeries
from gyrotilt.sensors.units import s_to_ns

# Sensor clocks count from boot; start recordings one second in
DEFAULT_BOOT_OFFSET_NS = 1_000_000_000

AXIS_INDEX = {"x": 0, "y": 1, "z": 2}


def make_timestamps(
    n_samples: int,
    dt: float,
    t0_ns: int = DEFAULT_BOOT_OFFSET_NS,
) -> np.ndarray:
    """
    Evenly spaced sensor timestamps.

    Args:
        n_samples: Number of samples.
        dt: Sample period. Units: seconds.
        t0_ns: First timestamp. Units: ns.

    Returns:
        Timestamps, shape (n_samples,), int64 nanoseconds.
    """
    if n_samples < 0:
        raise ValueError(f"n_samples must be non-negative, got {n_samples}")
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    return t0_ns + np.arange(n_samples, dtype=np.int64) * s_to_ns(dt)


def constant_rate_gyro(
    rate_rad_s: Sequence[float],
    duration: float,
    dt: float,
    t0_ns: int = DEFAULT_BOOT_OFFSET_NS,
) -> GyroSeries:
    """
    Gyro recording of a device spinning at a constant angular velocity.

    Args:
        rate_rad_s: Angular velocity [ωx, ωy, ωz]. Units: rad/s.
        duration: Recording length. Units: seconds.
        dt: Sample period. Units: seconds.
        t0_ns: First timestamp. Units: ns.

    Returns:
        GyroSeries with N = int(duration / dt) + 1 samples.

    Example:
        >>> series = constant_rate_gyro([0.0, 0.0, 0.1], duration=1.0, dt=0.01)
        >>> len(series)
        101
    """
    rate = np.asarray(rate_rad_s, dtype=np.float64)
    if rate.shape != (3,):
        raise ValueError(f"rate_rad_s must have shape (3,), got {rate.shape}")
    if duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")

    n = int(round(duration / dt)) + 1
    t_ns = make_timestamps(n, dt, t0_ns)
    gyro = np.tile(rate, (n, 1))

    return GyroSeries(
        t_ns=t_ns,
        gyro=gyro,
        meta={
            "description": "constant angular rate",
            "sample_rate_hz": 1.0 / dt,
            "rate_rad_s": rate.tolist(),
        },
    )


def sinusoidal_tilt_gyro(
    amplitude_deg: float,
    frequency_hz: float,
    duration: float,
    dt: float,
    axis: str = "x",
    t0_ns: int = DEFAULT_BOOT_OFFSET_NS,
) -> GyroSeries:
    """
    Gyro recording of a device rocking back and forth about one axis.

    The tilt angle follows α(t) = A·sin(2πft), so the gyro reads
        ω(t) = A·2πf·cos(2πft)
    on the chosen axis and zero on the others.

    Args:
        amplitude_deg: Peak tilt A. Units: degrees.
        frequency_hz: Rocking frequency f. Units: Hz.
        duration: Recording length. Units: seconds.
        dt: Sample period. Units: seconds.
        axis: 'x', 'y' or 'z'.
        t0_ns: First timestamp. Units: ns.

    Returns:
        GyroSeries.
    """
    if axis not in AXIS_INDEX:
        raise ValueError(f"axis must be one of {list(AXIS_INDEX)}, got '{axis}'")
    if frequency_hz <= 0:
        raise ValueError(f"frequency_hz must be positive, got {frequency_hz}")
    if duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")

    n = int(round(duration / dt)) + 1
    t_ns = make_timestamps(n, dt, t0_ns)
    t = np.arange(n) * dt

    amplitude_rad = np.deg2rad(amplitude_deg)
    two_pi_f = 2.0 * np.pi * frequency_hz

    gyro = np.zeros((n, 3))
    gyro[:, AXIS_INDEX[axis]] = amplitude_rad * two_pi_f * np.cos(two_pi_f * t)

    return GyroSeries(
        t_ns=t_ns,
        gyro=gyro,
        meta={
            "description": f"sinusoidal tilt about {axis}",
            "sample_rate_hz": 1.0 / dt,
            "amplitude_deg": float(amplitude_deg),
            "frequency_hz": float(frequency_hz),
            "axis": axis,
        },
    )


def gyro_from_angles(angles_rad: np.ndarray, dt: float) -> np.ndarray:
    """
    Body angular rates from a track of [roll, pitch, yaw] angles.

    Uses central finite differences (one-sided at the ends). For the small
    tilts a hand-held screen sees, the Euler-angle rates approximate the body
    rates the gyro measures.

    Args:
        angles_rad: Angle track, shape (N, 3). Units: rad.
        dt: Sample period. Units: seconds.

    Returns:
        Angular velocity, shape (N, 3). Units: rad/s.
    """
    angles_rad = np.asarray(angles_rad, dtype=np.float64)
    if angles_rad.ndim != 2 or angles_rad.shape[1] != 3:
        raise ValueError(f"angles_rad must have shape (N, 3), got {angles_rad.shape}")
    if angles_rad.shape[0] < 2:
        raise ValueError("angles_rad needs at least 2 samples to differentiate")
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")

    return np.gradient(angles_rad, dt, axis=0)


def add_gyro_noise(
    gyro: np.ndarray,
    noise_std: float = 0.0,
    bias: Union[float, Sequence[float]] = 0.0,
    seed: Optional[int] = None,
) -> np.ndarray:
    """
    Add sensor errors to ideal gyro readings.

    Measured = true + bias + white noise.

    Args:
        gyro: Ideal angular velocity, shape (N, 3). Units: rad/s.
        noise_std: White-noise standard deviation per axis. Units: rad/s.
        bias: Constant bias, scalar or shape (3,). Units: rad/s.
        seed: Random seed for reproducibility.

    Returns:
        Measured angular velocity, shape (N, 3). Units: rad/s.
    """
    gyro = np.asarray(gyro, dtype=np.float64)
    if gyro.ndim != 2 or gyro.shape[1] != 3:
        raise ValueError(f"gyro must have shape (N, 3), got {gyro.shape}")
    if noise_std < 0:
        raise ValueError(f"noise_std must be non-negative, got {noise_std}")

    rng = np.random.default_rng(seed)
    bias_vec = np.broadcast_to(np.asarray(bias, dtype=np.float64), (3,))

    return gyro + bias_vec + rng.standard_normal(gyro.shape) * noise_std


def with_noise(
    series: GyroSeries,
    noise_std: float = 0.0,
    bias: Union[float, Sequence[float]] = 0.0,
    seed: Optional[int] = None,
) -> GyroSeries:
    """Copy of a GyroSeries with add_gyro_noise() applied."""
    meta = dict(series.meta)
    meta["gyro_noise_std_rad_s"] = float(noise_std)
    meta["gyro_bias_rad_s"] = np.broadcast_to(np.asarray(bias, dtype=np.float64), (3,)).tolist()
    meta["seed"] = seed
    return GyroSeries(
        t_ns=series.t_ns,
        gyro=add_gyro_noise(series.gyro, noise_std, bias, seed),
        meta=meta,
    )
