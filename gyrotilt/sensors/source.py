"""
Gyroscope sample sources.

A source is the collaborator that owns the sensor and delivers samples to
registered listeners, one at a time, on a single producer thread. Listeners
implement two callbacks:

    on_sample(sample: GyroSample)
    on_accuracy_changed(sensor_name: str, accuracy: SensorAccuracy)

OrientationIntegrator is such a listener. ReplaySource replays a recorded
or simulated GyroSeries, which is how the integrator runs outside a device.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Protocol

from gyrotilt.sensors.types import GyroSample, GyroSeries, SensorAccuracy, SensorDelay

log = logging.getLogger(__name__)


class GyroListener(Protocol):
    """Callbacks a source invokes on its listeners."""

    def on_sample(self, sample: GyroSample) -> None:
        ...

    def on_accuracy_changed(self, sensor_name: str, accuracy: SensorAccuracy) -> None:
        ...


class GyroSource(ABC):
    """Abstract sample source."""

    name: str = "gyroscope"

    @property
    @abstractmethod
    def has_gyroscope(self) -> bool:
        """Whether the underlying device provides a gyroscope."""

    @abstractmethod
    def register_listener(self, listener: GyroListener, delay: SensorDelay) -> bool:
        """Start delivering samples to listener. Returns False if impossible."""

    @abstractmethod
    def unregister_listener(self, listener: GyroListener) -> None:
        """Stop delivering samples to listener."""


class ReplaySource(GyroSource):
    """
    Replays a GyroSeries to registered listeners.

    Each listener gets samples decimated to its requested delay: a sample is
    delivered once at least one delay period has elapsed since the previous
    sample delivered to that listener. SensorDelay.FASTEST delivers every
    sample.

    Args:
        series: Recording to replay.
        has_gyroscope: Simulate a device with or without a gyroscope.
        name: Sensor name reported in accuracy callbacks.

    Example:
        >>> source = ReplaySource(series)
        >>> integrator.start(source, SensorDelay.FASTEST)
        >>> source.play()
    """

    def __init__(
        self,
        series: GyroSeries,
        has_gyroscope: bool = True,
        name: str = "replay-gyroscope",
    ) -> None:
        self.series = series
        self.name = name
        self._has_gyroscope = has_gyroscope
        self._lock = threading.Lock()
        self._listeners: Dict[int, GyroListener] = {}
        self._delays: Dict[int, SensorDelay] = {}
        self._last_delivered: Dict[int, Optional[int]] = {}
        self._thread: Optional[threading.Thread] = None
        self.delivered = 0

    @property
    def has_gyroscope(self) -> bool:
        return self._has_gyroscope

    def register_listener(self, listener: GyroListener, delay: SensorDelay) -> bool:
        if not self._has_gyroscope:
            return False
        key = id(listener)
        with self._lock:
            self._listeners[key] = listener
            self._delays[key] = delay
            self._last_delivered[key] = None
        log.debug("Registered listener %r at %s", listener, delay.name)
        return True

    def unregister_listener(self, listener: GyroListener) -> None:
        key = id(listener)
        with self._lock:
            self._listeners.pop(key, None)
            self._delays.pop(key, None)
            self._last_delivered.pop(key, None)
        log.debug("Unregistered listener %r", listener)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def emit_accuracy(self, accuracy: SensorAccuracy) -> None:
        """Send an accuracy-change notification to every listener."""
        for listener in self._snapshot_listeners():
            listener.on_accuracy_changed(self.name, accuracy)

    def play(self) -> int:
        """
        Deliver the whole recording synchronously on the calling thread.

        Listeners registered or unregistered mid-replay take effect from the
        next sample.

        Returns:
            Number of (listener, sample) deliveries made.
        """
        deliveries = 0
        for sample in self.series.samples():
            for listener in self._due_listeners(sample.timestamp_ns):
                listener.on_sample(sample)
                deliveries += 1
        self.delivered += deliveries
        return deliveries

    def play_in_background(self) -> threading.Thread:
        """Run play() on a daemon thread (the single producer) and return it."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("Replay already running")
        self._thread = threading.Thread(target=self.play, daemon=True, name=self.name)
        self._thread.start()
        return self._thread

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for a background replay to finish."""
        if self._thread is not None:
            self._thread.join(timeout)

    # ----------------------- Internal methods -----------------------

    def _snapshot_listeners(self) -> List[GyroListener]:
        with self._lock:
            return list(self._listeners.values())

    def _due_listeners(self, t_ns: int) -> List[GyroListener]:
        due = []
        with self._lock:
            for key, listener in self._listeners.items():
                last = self._last_delivered[key]
                period_ns = self._delays[key].period_ns
                if last is None or t_ns - last >= period_ns:
                    self._last_delivered[key] = t_ns
                    due.append(listener)
        return due
