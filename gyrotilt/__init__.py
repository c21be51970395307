"""Gyroscope tilt integration.

This package turns a stream of timestamped gyroscope samples into a tilt
orientation estimate used to tilt an on-screen image:
- sensors: Sample types, integration math, drift guard, integrator, sources
- coords: Rotation representations and conversions
- sim: Synthetic gyro recordings for examples and tests
"""

__version__ = "0.1.0"
