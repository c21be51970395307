"""
Unit conversion utilities for gyroscope samples and sensor timing.

Every conversion states both its input and output unit in the function name.
Gyroscope samples arrive with integer nanosecond timestamps and rad/s rates;
the tilt estimate is reported in degrees. Keeping the conversions here avoids
scattering bare ``1e-9`` and ``180 / pi`` factors through the integrator.

Common units:
    - Timestamps: ns (int, monotonic platform clock) -> s (float)
    - Angular rate: rad/s <-> deg/s
    - Angles: rad <-> deg
    - Sampling: sensor delay period (µs) <-> rate (Hz)
"""

import numpy as np
from typing import Union

# Type alias for numeric types
Numeric = Union[float, np.ndarray]

# Radians to degrees in float32; the tilt estimate is accumulated in float32
RAD2DEG = np.float32(180.0 / np.pi)


# ============================================================================
# Time Conversions
# ============================================================================

def ns_to_s(t_ns: Numeric) -> Numeric:
    """
    Convert a timestamp or interval from nanoseconds to seconds.

    Args:
        t_ns: Time in nanoseconds.

    Returns:
        Time in seconds.

    Example:
        >>> ns_to_s(1_000_000_000)
        1.0
    """
    return t_ns * 1e-9


def s_to_ns(t_s: Numeric) -> Numeric:
    """
    Convert seconds to integer nanoseconds (rounded to nearest).

    Args:
        t_s: Time in seconds.

    Returns:
        Time in nanoseconds (int, or int64 array).
    """
    if isinstance(t_s, np.ndarray):
        return np.rint(t_s * 1e9).astype(np.int64)
    return int(round(t_s * 1e9))


def interval_ns_to_s_f32(dt_ns: int) -> np.float32:
    """
    Convert an integer nanosecond interval to float32 seconds.

    This is the conversion used for the integration step ``dT``. The
    product is formed in double precision before rounding, so intervals
    between large boot-relative timestamps keep their resolution.

    Args:
        dt_ns: Interval in nanoseconds.

    Returns:
        Interval in seconds as float32.

    Example:
        >>> interval_ns_to_s_f32(1_000_000_000)
        1.0
    """
    return np.float32(dt_ns * 1e-9)


# ============================================================================
# Angle / Angular Rate Conversions
# ============================================================================

def rad_to_deg(rad: Numeric) -> Numeric:
    """Convert an angle from radians to degrees."""
    return np.rad2deg(rad)


def deg_to_rad(deg: Numeric) -> Numeric:
    """Convert an angle from degrees to radians."""
    return np.deg2rad(deg)


def deg_per_sec_to_rad_per_sec(deg_per_s: Numeric) -> Numeric:
    """
    Convert angular velocity from deg/s to rad/s.

    Args:
        deg_per_s: Angular velocity in degrees per second.

    Returns:
        Angular velocity in radians per second.
    """
    return np.deg2rad(deg_per_s)


def rad_per_sec_to_deg_per_sec(rad_per_s: Numeric) -> Numeric:
    """
    Convert angular velocity from rad/s to deg/s.

    Args:
        rad_per_s: Angular velocity in radians per second.

    Returns:
        Angular velocity in degrees per second.
    """
    return np.rad2deg(rad_per_s)


# ============================================================================
# Sampling Conversions
# ============================================================================

def period_us_to_rate_hz(period_us: float) -> float:
    """
    Convert a sensor delivery period (µs) to a nominal rate (Hz).

    A period of zero means "as fast as possible" and maps to ``inf``.

    Args:
        period_us: Delivery period in microseconds.

    Returns:
        Nominal rate in Hz.

    Example:
        >>> period_us_to_rate_hz(200_000)  # normal UI-paced delivery
        5.0
    """
    if period_us < 0:
        raise ValueError(f"period_us must be non-negative, got {period_us}")
    if period_us == 0:
        return float("inf")
    return 1e6 / period_us


def rate_hz_to_period_ns(rate_hz: float) -> int:
    """
    Convert a sampling rate (Hz) to a sample period in integer nanoseconds.

    Args:
        rate_hz: Sampling rate in Hz. Must be positive.

    Returns:
        Sample period in nanoseconds.
    """
    if rate_hz <= 0:
        raise ValueError(f"rate_hz must be positive, got {rate_hz}")
    return int(round(1e9 / rate_hz))


# ============================================================================
# Formatting (for diagnostics)
# ============================================================================

def format_rate(rad_per_s: float) -> str:
    """
    Format an angular rate with both units.

    Example:
        >>> format_rate(1.0)
        '1.0000 rad/s (57.296 deg/s)'
    """
    return f"{rad_per_s:.4f} rad/s ({rad_per_sec_to_deg_per_sec(rad_per_s):.3f} deg/s)"


def format_tilt(x_deg: float, y_deg: float, z_deg: float) -> str:
    """Format a tilt triple in degrees."""
    return f"x={x_deg:+7.2f}°  y={y_deg:+7.2f}°  z={z_deg:+7.2f}°"
