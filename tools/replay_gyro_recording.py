#!/usr/bin/env python3
"""
Replay a saved gyro recording through the tilt integrator.

Loads gyro.npz/config.json, registers an OrientationIntegrator on a
ReplaySource at the requested sensor delay, plays the recording and prints
the final estimate, drift guard activity and attitude.

Usage:
    python tools/replay_gyro_recording.py data/sim/gyro_tilt
    python tools/replay_gyro_recording.py data/sim/gyro_tilt --delay GAME --bound 30
    python tools/replay_gyro_recording.py data/sim/gyro_tilt --config my_integrator.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from gyrotilt.sensors import (
    IntegratorConfig,
    OrientationIntegrator,
    ReplaySource,
    SensorAccuracy,
    SensorDelay,
    load_gyro_series,
)
from gyrotilt.sensors.units import format_tilt


def build_config(args: argparse.Namespace) -> IntegratorConfig:
    """Integrator config from an optional JSON file plus CLI overrides."""
    data = {}
    if args.config:
        with open(args.config, "r") as f:
            data = json.load(f)
    if args.bound is not None:
        data["drift_bound_deg"] = args.bound
    if args.delay is not None:
        data["sensor_delay"] = args.delay
    return IntegratorConfig.from_dict(data)


def replay(data_dir: Path, config: IntegratorConfig) -> OrientationIntegrator:
    """Play a recording through a fresh integrator and return it."""
    series = load_gyro_series(data_dir)
    source = ReplaySource(series)
    integrator = OrientationIntegrator(config)

    if not integrator.start(source):
        raise RuntimeError(f"Could not subscribe to {source.name}")
    source.emit_accuracy(SensorAccuracy.HIGH)
    try:
        source.play()
    finally:
        integrator.stop()

    return integrator


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Replay a gyro recording through the tilt integrator"
    )
    parser.add_argument("data_dir", type=Path, help="Directory with gyro.npz and config.json")
    parser.add_argument("--config", type=Path, default=None, help="Integrator config JSON")
    parser.add_argument(
        "--delay",
        choices=[d.name for d in SensorDelay],
        default=None,
        help="Sensor delivery delay (default: from config, NORMAL)",
    )
    parser.add_argument("--bound", type=float, default=None, help="Drift bound in degrees")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every sample")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.data_dir.exists():
        parser.error(f"Data directory not found: {args.data_dir}")

    config = build_config(args)

    print("=" * 70)
    print(f"Replaying {args.data_dir}")
    print("=" * 70)
    print(f"  Sensor delay : {config.sensor_delay.name} ({config.sensor_delay.period_us} µs)")
    print(f"  Drift bound  : ±{config.drift_bound_deg}° on {', '.join(config.guarded_axes)}")

    integrator = replay(args.data_dir, config)

    e = integrator.estimate
    roll, pitch, yaw = integrator.attitude_euler_deg()
    print(f"\nResults:")
    print(f"  Samples integrated : {integrator.sample_count}")
    print(f"  Final tilt         : {format_tilt(e.x, e.y, e.z)}")
    print(f"  Drift guard resets : {integrator.reset_count}")
    print(f"  Attitude (r/p/y)   : {roll:+.2f}° {pitch:+.2f}° {yaw:+.2f}°")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
