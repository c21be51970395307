"""
Simulation utilities for generating synthetic gyroscope recordings.

Modules:
    gyro_from_motion: Constant-rate, rocking and angle-track gyro series,
                      plus white noise and bias injection
"""

from gyrotilt.sim.gyro_from_motion import (
    DEFAULT_BOOT_OFFSET_NS,
    add_gyro_noise,
    constant_rate_gyro,
    gyro_from_angles,
    make_timestamps,
    sinusoidal_tilt_gyro,
    with_noise,
)

__all__ = [
    "DEFAULT_BOOT_OFFSET_NS",
    "add_gyro_noise",
    "constant_rate_gyro",
    "gyro_from_angles",
    "make_timestamps",
    "sinusoidal_tilt_gyro",
    "with_noise",
]
