"""
Gyroscope sample handling and tilt integration.

Modules:
    types: Sample packets, delta rotation, orientation estimate, sensor enums
    units: Explicit unit conversions (ns/s, rad/deg, delay/rate)
    config: IntegratorConfig
    integration: Pure integration math (axis, delta quaternion, tilt increment)
    drift_guard: Bounded tilt accumulator
    observable: Per-axis publish/subscribe values
    integrator: OrientationIntegrator (stateful core with start/stop)
    source: GyroSource interface and ReplaySource
    dataset: Recording save/load

Integration step (per sample after the first):
    Δt  = (t_k - t_{k-1}) · 1e-9
    Δq  = [sin(|ω|Δt/2)·ω/|ω|, cos(|ω|Δt/2)]
    x  += Δq.x·180/π,  y -= Δq.y·180/π,  z += Δq.z·180/π
    x, y reset to 0 outside ±50°

Example:
    >>> from gyrotilt.sensors import OrientationIntegrator, ReplaySource, SensorDelay
    >>> from gyrotilt.sim import constant_rate_gyro
    >>>
    >>> series = constant_rate_gyro([0.0, 0.0, 0.2], duration=2.0, dt=0.01)
    >>> integrator = OrientationIntegrator()
    >>> source = ReplaySource(series)
    >>> integrator.start(source, SensorDelay.FASTEST)
    True
    >>> source.play()
    201
    >>> integrator.stop()
"""

from gyrotilt.sensors.types import (
    DeltaRotation,
    GyroSample,
    GyroSeries,
    OrientationEstimate,
    SensorAccuracy,
    SensorDelay,
)

from gyrotilt.sensors.config import IntegratorConfig

from gyrotilt.sensors.integration import (
    angular_speed,
    rotation_axis,
    delta_rotation_from_gyro,
    tilt_increment_deg,
)

from gyrotilt.sensors.drift_guard import TiltAccumulator
from gyrotilt.sensors.observable import ObservableValue, Subscription
from gyrotilt.sensors.integrator import OrientationIntegrator
from gyrotilt.sensors.source import GyroSource, ReplaySource
from gyrotilt.sensors.dataset import load_gyro_series, save_gyro_series

__all__ = [
    # Data types
    "DeltaRotation",
    "GyroSample",
    "GyroSeries",
    "OrientationEstimate",
    "SensorAccuracy",
    "SensorDelay",
    # Configuration
    "IntegratorConfig",
    # Integration math
    "angular_speed",
    "rotation_axis",
    "delta_rotation_from_gyro",
    "tilt_increment_deg",
    # Stateful pieces
    "TiltAccumulator",
    "ObservableValue",
    "Subscription",
    "OrientationIntegrator",
    # Sources and recordings
    "GyroSource",
    "ReplaySource",
    "load_gyro_series",
    "save_gyro_series",
]
