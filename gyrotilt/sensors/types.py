"""
Data structures for gyroscope samples and tilt orientation estimates.

This module defines the shared data types used by the tilt integrator:
    - Sensor enumerations (accuracy levels, delivery delays)
    - Gyroscope sample packets (single sample and time series)
    - The incremental rotation quaternion computed per sample
    - The tilt orientation estimate published to consumers

Time Base Convention:
    All timestamps are integer nanoseconds from the platform's monotonic
    sensor clock. Intervals are converted to float32 seconds only inside the
    integration step (see units.interval_ns_to_s_f32).

Quaternion Convention:
    - Scalar-last: q = [x, y, z, w], the rotation-vector order delivered by
      mobile sensor stacks (NOT the scalar-first order of coords.rotations)
    - Identity quaternion: [0, 0, 0, 1]

Numeric Precision:
    Angular velocities, quaternions and tilt angles are float32, matching the
    precision of the sensor pipeline they come from.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator

import numpy as np

from gyrotilt.sensors.units import period_us_to_rate_hz


class SensorAccuracy(Enum):
    """
    Accuracy levels reported by a sensor through accuracy-change callbacks.

    Values follow the platform sensor API: higher is better, negative means
    the sensor is not in contact with what it measures.
    """

    NO_CONTACT = -1
    UNRELIABLE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class SensorDelay(Enum):
    """
    Requested sample delivery period when registering a sensor listener.

    The value is the nominal delivery period in microseconds. FASTEST asks
    for every sample the hardware produces.
    """

    FASTEST = 0
    GAME = 20_000
    UI = 66_667
    NORMAL = 200_000

    @property
    def period_us(self) -> int:
        """Delivery period in microseconds."""
        return self.value

    @property
    def period_ns(self) -> int:
        """Delivery period in nanoseconds."""
        return self.value * 1000

    @property
    def rate_hz(self) -> float:
        """Nominal delivery rate in Hz (inf for FASTEST)."""
        return period_us_to_rate_hz(self.value)


@dataclass(frozen=True)
class GyroSample:
    """
    A single timestamped gyroscope sample.

    Attributes:
        timestamp_ns: Sample timestamp in nanoseconds (monotonic sensor
                      clock). Strictly increasing across a stream.
        omega: Angular velocity in the device frame, shape (3,), float32.
               Units: rad/s. Components [ωx, ωy, ωz].

    Notes:
        - frozen=True: a captured sample never changes.
        - omega is converted to a float32 array on construction.

    Example:
        >>> s = GyroSample(timestamp_ns=1_000_000_000, omega=[0.0, 0.0, 1.0])
        >>> s.omega.dtype
        dtype('float32')
    """

    timestamp_ns: int
    omega: np.ndarray

    def __post_init__(self) -> None:
        """Validate timestamp type and angular-velocity shape."""
        if isinstance(self.timestamp_ns, bool) or not isinstance(
            self.timestamp_ns, (int, np.integer)
        ):
            raise TypeError(
                f"GyroSample.timestamp_ns must be an integer, "
                f"got {type(self.timestamp_ns).__name__}"
            )

        omega = np.asarray(self.omega, dtype=np.float32)
        if omega.shape != (3,):
            raise ValueError(
                f"GyroSample.omega must have shape (3,), got {omega.shape}"
            )
        # frozen dataclass: bypass __setattr__ to store normalized fields
        object.__setattr__(self, "timestamp_ns", int(self.timestamp_ns))
        object.__setattr__(self, "omega", omega)


@dataclass(frozen=True)
class GyroSeries:
    """
    Time-series recording of gyroscope samples.

    Batch counterpart of GyroSample, used by the simulator, recording I/O and
    replay sources.

    Attributes:
        t_ns: Timestamps in nanoseconds, shape (N,), int64.
        gyro: Angular velocity in device frame, shape (N, 3), float32. rad/s.
        meta: Optional metadata dict. May include:
              - 'sample_rate_hz': float, nominal sampling rate
              - 'sensor_name': str, device identifier
              - 'description': str, how the recording was produced
    """

    t_ns: np.ndarray
    gyro: np.ndarray
    meta: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate shape consistency of the recording."""
        t_ns = np.asarray(self.t_ns)
        gyro = np.asarray(self.gyro, dtype=np.float32)

        if t_ns.ndim != 1:
            raise ValueError(
                f"GyroSeries.t_ns must be 1D array, got shape {t_ns.shape}"
            )
        if not np.issubdtype(t_ns.dtype, np.integer):
            raise TypeError(
                f"GyroSeries.t_ns must hold integer nanoseconds, got {t_ns.dtype}"
            )

        n_samples = t_ns.shape[0]
        if gyro.shape != (n_samples, 3):
            raise ValueError(
                f"GyroSeries.gyro must have shape ({n_samples}, 3), "
                f"got {gyro.shape}"
            )

        object.__setattr__(self, "t_ns", t_ns.astype(np.int64))
        object.__setattr__(self, "gyro", gyro)

    def __len__(self) -> int:
        return int(self.t_ns.shape[0])

    def samples(self) -> Iterator[GyroSample]:
        """Iterate the recording as GyroSample packets, in time order."""
        for t, w in zip(self.t_ns, self.gyro):
            yield GyroSample(timestamp_ns=int(t), omega=w)

    @property
    def duration_s(self) -> float:
        """Time span between first and last sample, in seconds."""
        if len(self) < 2:
            return 0.0
        return float(self.t_ns[-1] - self.t_ns[0]) * 1e-9

    @property
    def sample_rate_hz(self) -> float:
        """Mean sampling rate estimated from the timestamps (0 if < 2 samples)."""
        if len(self) < 2:
            return 0.0
        return (len(self) - 1) / self.duration_s


@dataclass(frozen=True)
class DeltaRotation:
    """
    Incremental rotation over one sample interval, as a unit quaternion.

    The rotation about unit axis n by angle θ is encoded as:
        q = [sin(θ/2)·nx, sin(θ/2)·ny, sin(θ/2)·nz, cos(θ/2)]

    Attributes:
        x, y, z: Vector part (float32).
        w: Scalar part (float32).

    Notes:
        - Scalar-last order, matching sensor rotation vectors.
        - Recomputed every sample; carries no identity of its own.
    """

    x: np.float32
    y: np.float32
    z: np.float32
    w: np.float32

    @classmethod
    def identity(cls) -> "DeltaRotation":
        """The no-rotation quaternion [0, 0, 0, 1]."""
        return cls(np.float32(0.0), np.float32(0.0), np.float32(0.0), np.float32(1.0))

    @classmethod
    def from_array(cls, q: np.ndarray) -> "DeltaRotation":
        """Build from a scalar-last array of shape (4,)."""
        q = np.asarray(q, dtype=np.float32)
        if q.shape != (4,):
            raise ValueError(f"q must have shape (4,), got {q.shape}")
        return cls(q[0], q[1], q[2], q[3])

    def as_array(self) -> np.ndarray:
        """Scalar-last float32 array [x, y, z, w]."""
        return np.array([self.x, self.y, self.z, self.w], dtype=np.float32)

    def norm(self) -> float:
        """Euclidean norm of the quaternion (1 for a proper unit quaternion)."""
        return float(np.linalg.norm(self.as_array().astype(np.float64)))


@dataclass(frozen=True)
class OrientationEstimate:
    """
    Tilt orientation estimate, in degrees.

    Snapshot of the integrator's accumulator. Readers always receive a full
    triple taken under the integrator's lock, never a half-updated one.

    Attributes:
        x: Accumulated tilt about the device x axis [deg] (float32).
        y: Accumulated tilt about the device y axis [deg] (float32),
           sign-inverted relative to the raw rotation.
        z: Accumulated rotation about the device z axis [deg] (float32).
    """

    x: np.float32 = np.float32(0.0)
    y: np.float32 = np.float32(0.0)
    z: np.float32 = np.float32(0.0)

    def as_array(self) -> np.ndarray:
        """Float32 array [x, y, z] in degrees."""
        return np.array([self.x, self.y, self.z], dtype=np.float32)
