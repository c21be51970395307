"""
Bounded tilt accumulator with a drift guard.

Integrating raw gyro rates accumulates bias and noise without bound. The
drift guard treats that as a correctable condition: once a guarded axis
leaves the open interval (-bound, +bound) it is reset to zero. The increment
that crossed the bound is discarded along with the accumulated drift.

The guard runs in the same update path as the accumulation (add() followed
by clamp_or_reset()), so there is a single writer and the value read after
an update is already corrected.
"""

from typing import Dict, Iterable, Tuple

import numpy as np

from gyrotilt.sensors.config import DEFAULT_DRIFT_BOUND_DEG, VALID_AXES
from gyrotilt.sensors.types import OrientationEstimate


def exceeds_bound(value: float, bound: float) -> bool:
    """True when value is strictly outside [-bound, +bound]."""
    return value > bound or value < -bound


class TiltAccumulator:
    """
    Accumulates tilt increments (degrees) on three axes with a drift guard.

    Not thread-safe on its own; OrientationIntegrator serializes access.

    Example:
        >>> acc = TiltAccumulator(bound_deg=50.0)
        >>> acc.add(30.0, 0.0, 0.0)
        >>> acc.add(25.0, 0.0, 0.0)
        >>> acc.clamp_or_reset()
        ('x',)
        >>> float(acc.value().x)
        0.0
    """

    def __init__(
        self,
        bound_deg: float = DEFAULT_DRIFT_BOUND_DEG,
        guarded_axes: Iterable[str] = ("x", "y"),
    ) -> None:
        if bound_deg <= 0:
            raise ValueError(f"bound_deg must be positive, got {bound_deg}")
        axes = tuple(guarded_axes)
        for axis in axes:
            if axis not in VALID_AXES:
                raise ValueError(
                    f"guarded axis must be one of {VALID_AXES}, got '{axis}'"
                )

        self.bound_deg = np.float32(bound_deg)
        self.guarded_axes = axes
        self._angles = np.zeros(3, dtype=np.float32)
        self.reset_count: Dict[str, int] = {axis: 0 for axis in VALID_AXES}

    def add(self, dx: float, dy: float, dz: float) -> None:
        """Add one increment per axis (float32 accumulation)."""
        self._angles += np.array([dx, dy, dz], dtype=np.float32)

    def clamp_or_reset(self) -> Tuple[str, ...]:
        """
        Reset every guarded axis that is out of bounds.

        Returns:
            Names of the axes that were reset (empty tuple if none).
        """
        reset = []
        for axis in self.guarded_axes:
            i = VALID_AXES.index(axis)
            if exceeds_bound(self._angles[i], self.bound_deg):
                self._angles[i] = np.float32(0.0)
                self.reset_count[axis] += 1
                reset.append(axis)
        return tuple(reset)

    def value(self) -> OrientationEstimate:
        """Frozen snapshot of the accumulated angles."""
        x, y, z = self._angles
        return OrientationEstimate(x=x, y=y, z=z)

    def reset(self) -> None:
        """Zero all axes and the reset counters."""
        self._angles[:] = 0.0
        for axis in self.reset_count:
            self.reset_count[axis] = 0
