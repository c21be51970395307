"""
Orientation integrator: gyro samples in, tilt estimate out.

OrientationIntegrator consumes a stream of timestamped angular-velocity
samples and maintains a running tilt estimate in degrees:

    1. The first sample after start-up or reset() only primes the timestamp.
    2. Every later sample is integrated over Δt = t_k - t_{k-1}:
         Δq = [sin(|ω|Δt/2)·ω/|ω|, cos(|ω|Δt/2)]        (integration module)
         x += Δq.x·180/π,  y -= Δq.y·180/π,  z += Δq.z·180/π
    3. The drift guard resets x or y to 0 once it leaves ±drift_bound_deg.
    4. Δq is converted to a 3x3 matrix and concatenated onto the attitude.
    5. The new estimate is published per axis (x, y, z observables).

States:
    Unprimed --on_sample--> Primed --reset()--> Unprimed

Concurrency:
    One producer calls on_sample(); any thread may read `estimate`. The
    triple is updated atomically under a lock, and observables are notified
    after the lock is released, on the updating thread. Each update carries
    a sequence number; publishing is serialized and an older snapshot is
    never published over a newer one (e.g. a reset() from another thread or
    from inside a subscriber).

Lifecycle:
    start(source) registers the integrator as a listener of a GyroSource and
    stop() unregisters it. State survives stop()/start(), so integration
    resumes from the last timestamp.
"""

import logging
import threading
from typing import Optional

import numpy as np

from gyrotilt.coords.rotations import rotation_matrix_to_euler, rotation_vector_to_matrix
from gyrotilt.sensors.config import IntegratorConfig
from gyrotilt.sensors.drift_guard import TiltAccumulator
from gyrotilt.sensors.integration import delta_rotation_from_gyro, tilt_increment_deg
from gyrotilt.sensors.observable import ObservableValue
from gyrotilt.sensors.source import GyroSource
from gyrotilt.sensors.types import (
    DeltaRotation,
    GyroSample,
    GyroSeries,
    OrientationEstimate,
    SensorAccuracy,
    SensorDelay,
)
from gyrotilt.sensors.units import interval_ns_to_s_f32, rad_to_deg

log = logging.getLogger(__name__)


class OrientationIntegrator:
    """
    Integrates gyroscope samples into a tilt orientation estimate.

    Args:
        config: Integrator configuration. Default: IntegratorConfig().

    Attributes:
        x, y, z: ObservableValue per axis, carrying the latest tilt in
                 degrees (float32).
        last_accuracy: Last accuracy reported by the source, or None.

    Example:
        >>> integrator = OrientationIntegrator()
        >>> _ = integrator.on_sample(GyroSample(0, [0.0, 0.0, 0.0]))  # primes
        >>> _ = integrator.on_sample(GyroSample(1_000_000_000, [0.0, 0.0, 1.0]))
        >>> round(float(integrator.estimate.z), 2)
        27.47
    """

    def __init__(self, config: Optional[IntegratorConfig] = None) -> None:
        self.config = config if config is not None else IntegratorConfig()

        self._lock = threading.Lock()
        self._accumulator = TiltAccumulator(
            bound_deg=self.config.drift_bound_deg,
            guarded_axes=self.config.guarded_axes,
        )
        self._previous_timestamp_ns: Optional[int] = None
        self._delta = DeltaRotation.identity()
        self._rotation_matrix = rotation_vector_to_matrix(self._delta.as_array())
        self._attitude = np.eye(3)
        self._last_dt_s = 0.0
        self._sample_count = 0
        self._source: Optional[GyroSource] = None
        self._publish_lock = threading.RLock()
        self._update_seq = 0
        self._published_seq = 0

        self.last_accuracy: Optional[SensorAccuracy] = None
        self.x = ObservableValue(np.float32(0.0), name="x")
        self.y = ObservableValue(np.float32(0.0), name="y")
        self.z = ObservableValue(np.float32(0.0), name="z")

    def __repr__(self) -> str:
        e = self.estimate
        state = "primed" if self.is_primed else "unprimed"
        return (
            f"OrientationIntegrator({state}, samples={self.sample_count}, "
            f"x={e.x:.2f}, y={e.y:.2f}, z={e.z:.2f})"
        )

    # ------------------------------------------------------------------
    # Listener callbacks
    # ------------------------------------------------------------------

    def on_sample(self, sample: GyroSample) -> OrientationEstimate:
        """
        Integrate one gyro sample.

        Never raises for numeric input. Non-increasing timestamps are logged
        and integrated as given (zero or negative Δt). An exception raised by
        a subscriber propagates, after all three axes have been published.

        Args:
            sample: Timestamped angular velocity.

        Returns:
            The estimate after this sample (also readable via `estimate`).
        """
        reset_axes = ()
        with self._lock:
            integrated = self._previous_timestamp_ns is not None
            if integrated:
                dt_ns = sample.timestamp_ns - self._previous_timestamp_ns
                if dt_ns <= 0:
                    log.warning(
                        "Non-increasing gyro timestamp: %d after %d",
                        sample.timestamp_ns,
                        self._previous_timestamp_ns,
                    )
                dt = interval_ns_to_s_f32(dt_ns)

                delta = delta_rotation_from_gyro(sample.omega, dt, self.config.epsilon)
                dx, dy, dz = tilt_increment_deg(delta, invert_y=self.config.invert_y)
                self._accumulator.add(dx, dy, dz)
                reset_axes = self._accumulator.clamp_or_reset()

                self._delta = delta
                self._last_dt_s = float(dt)
                self._update_seq += 1

            # Matrix of the latest delta; the caller may concatenate it
            self._rotation_matrix = rotation_vector_to_matrix(self._delta.as_array())
            if integrated:
                self._attitude = self._attitude @ self._rotation_matrix

            self._previous_timestamp_ns = sample.timestamp_ns
            self._sample_count += 1
            estimate = self._accumulator.value()
            delta = self._delta
            seq = self._update_seq

        if not integrated:
            log.debug("Primed at t=%d ns", sample.timestamp_ns)
            return estimate

        log.debug("X: %s  Y: %s  Z: %s  W: %s", delta.x, delta.y, delta.z, delta.w)
        if reset_axes:
            log.debug("Drift guard reset axes %s", ", ".join(reset_axes))

        self._publish(estimate, seq)
        return estimate

    def on_accuracy_changed(self, sensor_name: str, accuracy: SensorAccuracy) -> None:
        """Record and log an accuracy change. Integration is unaffected."""
        self.last_accuracy = accuracy
        log.info("onAccuracyChanged: %s, %s", sensor_name, accuracy.name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, source: GyroSource, delay: Optional[SensorDelay] = None) -> bool:
        """
        Subscribe to a sample source.

        Args:
            source: Source to register with.
            delay: Requested delivery period. Default: config.sensor_delay.

        Returns:
            True when subscribed (or already running), False when the source
            has no gyroscope or refused the registration.
        """
        if self._source is not None:
            return True

        if not source.has_gyroscope:
            log.warning("No gyroscope available on %s; not subscribing", source.name)
            return False

        delay = delay if delay is not None else self.config.sensor_delay
        if not source.register_listener(self, delay):
            log.warning("Source %s refused listener registration", source.name)
            return False

        self._source = source
        log.info("Subscribed to %s at %s", source.name, delay.name)
        return True

    def stop(self) -> None:
        """Unsubscribe from the current source. Integrator state is kept."""
        if self._source is None:
            return
        self._source.unregister_listener(self)
        log.info("Unsubscribed from %s", self._source.name)
        self._source = None

    def reset(self) -> None:
        """Return to the unprimed state with a zero estimate."""
        with self._lock:
            self._accumulator.reset()
            self._previous_timestamp_ns = None
            self._delta = DeltaRotation.identity()
            self._rotation_matrix = rotation_vector_to_matrix(self._delta.as_array())
            self._attitude = np.eye(3)
            self._last_dt_s = 0.0
            self._sample_count = 0
            self._update_seq += 1
            seq = self._update_seq
            estimate = self._accumulator.value()
        self._publish(estimate, seq)

    def integrate(self, series: GyroSeries) -> np.ndarray:
        """
        Feed a whole recording through on_sample().

        Args:
            series: Gyro recording, in time order.

        Returns:
            Estimate after every sample, shape (N, 3), float32, degrees.
        """
        history = np.zeros((len(series), 3), dtype=np.float32)
        for i, sample in enumerate(series.samples()):
            history[i] = self.on_sample(sample).as_array()
        return history

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def estimate(self) -> OrientationEstimate:
        """Consistent snapshot of the tilt estimate (degrees)."""
        with self._lock:
            return self._accumulator.value()

    @property
    def is_primed(self) -> bool:
        with self._lock:
            return self._previous_timestamp_ns is not None

    @property
    def is_running(self) -> bool:
        return self._source is not None

    @property
    def previous_timestamp_ns(self) -> Optional[int]:
        """Timestamp of the last sample, None while unprimed."""
        with self._lock:
            return self._previous_timestamp_ns

    @property
    def sample_count(self) -> int:
        """Samples received since construction or the last reset()."""
        with self._lock:
            return self._sample_count

    @property
    def delta_rotation(self) -> DeltaRotation:
        """Last computed incremental rotation (identity before the first)."""
        with self._lock:
            return self._delta

    @property
    def last_dt_s(self) -> float:
        with self._lock:
            return self._last_dt_s

    @property
    def rotation_matrix(self) -> np.ndarray:
        """3x3 float32 matrix of the last delta rotation."""
        with self._lock:
            return self._rotation_matrix.copy()

    @property
    def attitude(self) -> np.ndarray:
        """Product of all delta rotation matrices since the last reset."""
        with self._lock:
            return self._attitude.copy()

    @property
    def reset_count(self) -> dict:
        """Drift guard resets per axis since the last reset()."""
        with self._lock:
            return dict(self._accumulator.reset_count)

    def attitude_euler_deg(self) -> np.ndarray:
        """Attitude as [roll, pitch, yaw] in degrees (ZYX convention)."""
        return rad_to_deg(rotation_matrix_to_euler(self.attitude))

    # ----------------------- Internal methods -----------------------

    def _publish(self, estimate: OrientationEstimate, seq: int) -> None:
        first_error = None
        with self._publish_lock:
            if seq < self._published_seq:
                return
            self._published_seq = seq
            for observable, value in (
                (self.x, estimate.x),
                (self.y, estimate.y),
                (self.z, estimate.z),
            ):
                if self._published_seq != seq:
                    # a newer update was published from inside a callback
                    break
                try:
                    observable.emit(value)
                except Exception as exc:
                    if first_error is None:
                        first_error = exc
        if first_error is not None:
            raise first_error
