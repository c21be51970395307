"""Integrator configuration."""

from dataclasses import dataclass
from typing import Any, Dict, Tuple
import warnings

from gyrotilt.sensors.types import SensorDelay

# Machine epsilon of a half-precision float (2**-10).
# Angular speeds at or below this are treated as "no rotation axis".
DEFAULT_EPSILON = 0.0009765625

# Tilt bound (degrees) beyond which a guarded axis is reset to zero
DEFAULT_DRIFT_BOUND_DEG = 50.0

VALID_AXES = ("x", "y", "z")


@dataclass(frozen=True)
class IntegratorConfig:
    """
    Tuning knobs for OrientationIntegrator.

    Attributes:
        epsilon: Angular speed threshold [rad/s]. The rotation axis is only
                 normalized when the angular speed exceeds it.
        drift_bound_deg: Drift guard bound [deg]. A guarded axis whose
                         accumulated value is strictly outside
                         (-bound, +bound) is reset to 0.
        guarded_axes: Axes the drift guard applies to. Default ('x', 'y');
                      the z axis accumulates without a bound.
        invert_y: Subtract (instead of add) the y increment. Default True,
                  which is the tilt direction the on-screen image uses.
        sensor_delay: Delivery period requested when subscribing to a source.

    Example:
        >>> cfg = IntegratorConfig(drift_bound_deg=30.0)
        >>> cfg.guarded_axes
        ('x', 'y')
    """

    epsilon: float = DEFAULT_EPSILON
    drift_bound_deg: float = DEFAULT_DRIFT_BOUND_DEG
    guarded_axes: Tuple[str, ...] = ("x", "y")
    invert_y: bool = True
    sensor_delay: SensorDelay = SensorDelay.NORMAL

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.epsilon, (float, int)):
            raise TypeError(f"epsilon must be numeric, got {type(self.epsilon)}")
        if self.epsilon < 0:
            raise ValueError(f"epsilon must be non-negative, got {self.epsilon}")
        if self.epsilon > 0.1:
            warnings.warn(
                f"epsilon of {self.epsilon} rad/s is unusually large; slow "
                f"rotations will integrate along an unnormalized axis.",
                UserWarning,
            )

        if not isinstance(self.drift_bound_deg, (float, int)):
            raise TypeError(
                f"drift_bound_deg must be numeric, got {type(self.drift_bound_deg)}"
            )
        if self.drift_bound_deg <= 0:
            raise ValueError(
                f"drift_bound_deg must be positive, got {self.drift_bound_deg}"
            )

        axes = tuple(self.guarded_axes)
        for axis in axes:
            if axis not in VALID_AXES:
                raise ValueError(
                    f"guarded_axes entries must be one of {VALID_AXES}, got '{axis}'"
                )
        if len(set(axes)) != len(axes):
            raise ValueError(f"guarded_axes contains duplicates: {axes}")
        object.__setattr__(self, "guarded_axes", axes)

        if not isinstance(self.sensor_delay, SensorDelay):
            raise TypeError(
                f"sensor_delay must be a SensorDelay, got {type(self.sensor_delay)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "epsilon": float(self.epsilon),
            "drift_bound_deg": float(self.drift_bound_deg),
            "guarded_axes": list(self.guarded_axes),
            "invert_y": bool(self.invert_y),
            "sensor_delay": self.sensor_delay.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntegratorConfig":
        """
        Build a config from a dict such as the one written by to_dict().

        Missing keys fall back to defaults; unknown keys raise ValueError.
        """
        unknown = set(data) - {
            "epsilon", "drift_bound_deg", "guarded_axes", "invert_y", "sensor_delay"
        }
        if unknown:
            raise ValueError(f"Unknown integrator config keys: {sorted(unknown)}")

        kwargs: Dict[str, Any] = dict(data)
        if "guarded_axes" in kwargs:
            kwargs["guarded_axes"] = tuple(kwargs["guarded_axes"])
        if "sensor_delay" in kwargs and not isinstance(kwargs["sensor_delay"], SensorDelay):
            try:
                kwargs["sensor_delay"] = SensorDelay[str(kwargs["sensor_delay"]).upper()]
            except KeyError:
                raise ValueError(
                    f"Unknown sensor_delay '{kwargs['sensor_delay']}', "
                    f"expected one of {[d.name for d in SensorDelay]}"
                ) from None
        return cls(**kwargs)
