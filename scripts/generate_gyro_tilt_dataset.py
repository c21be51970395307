"""Generate a synthetic gyroscope recording for the tilt examples.

Creates a hand-held rocking motion dataset with:
    - Sinusoidal tilt about a chosen device axis
    - Configurable sample rate, white noise and constant bias
    - Integer nanosecond timestamps on a boot-relative clock

Saves to: data/sim/gyro_tilt/
    gyro.npz    : t_ns (N,), gyro (N, 3) [rad/s]
    config.json : dataset configuration

Author: Navigation Engineer
"""

import argparse
from pathlib import Path

import numpy as np

from gyrotilt.sensors import save_gyro_series
from gyrotilt.sim import sinusoidal_tilt_gyro, with_noise


# ============================================================================
# PRESET CONFIGURATIONS
# ============================================================================

PRESETS = {
    'ideal': {
        'description': 'Noise-free rocking motion (integration error only)',
        'noise_std': 0.0,
        'bias_x': 0.0,
        'bias_y': 0.0,
        'bias_z': 0.0,
    },
    'phone': {
        'description': 'Smartphone-grade gyro (moderate noise, no bias)',
        'noise_std': 0.01,
        'bias_x': 0.0,
        'bias_y': 0.0,
        'bias_z': 0.0,
    },
    'biased_phone': {
        'description': 'Smartphone gyro with constant bias (drift guard resets)',
        'noise_std': 0.01,
        'bias_x': 0.05,
        'bias_y': -0.04,
        'bias_z': 0.02,
    },
}


def generate_gyro_tilt_dataset(
    output_dir: str = "data/sim/gyro_tilt",
    seed: int = 42,
    # Motion parameters
    amplitude_deg: float = 20.0,
    frequency_hz: float = 0.5,
    axis: str = "x",
    duration: float = 30.0,
    rate_hz: float = 50.0,
    # Gyro error parameters
    noise_std: float = 0.01,
    bias_x: float = 0.0,
    bias_y: float = 0.0,
    bias_z: float = 0.0,
) -> Path:
    """Generate and save the gyro tilt dataset.

    Args:
        output_dir: Output directory path.
        seed: Random seed for reproducibility.
        amplitude_deg: Peak tilt (degrees).
        frequency_hz: Rocking frequency (Hz).
        axis: Rocking axis ('x', 'y' or 'z').
        duration: Dataset duration (seconds).
        rate_hz: Gyro sample rate (Hz).
        noise_std: Gyro white noise std (rad/s).
        bias_x: X-axis gyro bias (rad/s).
        bias_y: Y-axis gyro bias (rad/s).
        bias_z: Z-axis gyro bias (rad/s).

    Returns:
        Path of the output directory.
    """
    print(f"\n{'='*70}")
    print(f"Generating Gyro Tilt Dataset")
    print(f"{'='*70}")

    dt = 1.0 / rate_hz

    print(f"\n1. Generating rocking motion...")
    print(f"   Amplitude: {amplitude_deg} deg about {axis}")
    print(f"   Frequency: {frequency_hz} Hz")
    print(f"   Duration: {duration} s")
    print(f"   Gyro rate: {rate_hz:.0f} Hz")

    truth = sinusoidal_tilt_gyro(
        amplitude_deg=amplitude_deg,
        frequency_hz=frequency_hz,
        duration=duration,
        dt=dt,
        axis=axis,
    )
    print(f"   Generated {len(truth)} samples")

    print(f"\n2. Adding gyro errors...")
    print(f"   Noise: {noise_std} rad/s")
    print(f"   Bias: [{bias_x}, {bias_y}, {bias_z}] rad/s")

    series = with_noise(truth, noise_std=noise_std, bias=[bias_x, bias_y, bias_z], seed=seed)
    series.meta["duration_sec"] = duration

    print(f"\n3. Saving recording...")
    output_path = save_gyro_series(series, output_dir)
    print(f"   Saved: gyro.npz, config.json")

    peak = np.max(np.abs(series.gyro), axis=0)
    print(f"\n{'='*70}")
    print(f"Dataset generation complete!")
    print(f"{'='*70}")
    print(f"Output directory: {output_path.absolute()}")
    print(f"\nDataset statistics:")
    print(f"  Duration    : {series.duration_s:.1f} s")
    print(f"  Samples     : {len(series)} ({series.sample_rate_hz:.0f} Hz)")
    print(f"  Peak rate   : {peak} rad/s")
    print()

    return output_path


# ============================================================================
# COMMAND-LINE INTERFACE
# ============================================================================

def main(argv=None):
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Generate a synthetic gyroscope tilt recording",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate with default parameters
  python %(prog)s

  # Use a preset configuration
  python %(prog)s --preset biased_phone --output data/sim/gyro_tilt_biased

  # Faster rocking about the y axis
  python %(prog)s --axis y --frequency 1.5 --amplitude 10

Available presets: """ + ", ".join(PRESETS.keys())
    )

    parser.add_argument(
        '--preset',
        type=str,
        choices=PRESETS.keys(),
        help='Use preset configuration (overrides individual parameters)'
    )
    parser.add_argument(
        '--output',
        type=str,
        default='data/sim/gyro_tilt',
        help='Output directory (default: data/sim/gyro_tilt)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=42,
        help='Random seed for reproducibility (default: 42)'
    )

    motion_group = parser.add_argument_group('Motion Parameters')
    motion_group.add_argument(
        '--amplitude',
        type=float,
        default=20.0,
        dest='amplitude_deg',
        help='Peak tilt in degrees (default: 20.0)'
    )
    motion_group.add_argument(
        '--frequency',
        type=float,
        default=0.5,
        dest='frequency_hz',
        help='Rocking frequency in Hz (default: 0.5)'
    )
    motion_group.add_argument(
        '--axis',
        type=str,
        choices=['x', 'y', 'z'],
        default='x',
        help='Rocking axis (default: x)'
    )
    motion_group.add_argument(
        '--duration',
        type=float,
        default=30.0,
        help='Recording duration in seconds (default: 30.0)'
    )
    motion_group.add_argument(
        '--rate',
        type=float,
        default=50.0,
        dest='rate_hz',
        help='Gyro sample rate in Hz (default: 50.0)'
    )

    gyro_group = parser.add_argument_group('Gyro Error Parameters')
    gyro_group.add_argument(
        '--noise',
        type=float,
        default=0.01,
        dest='noise_std',
        help='Gyro noise std in rad/s (default: 0.01)'
    )
    gyro_group.add_argument('--bias-x', type=float, default=0.0, help='X gyro bias in rad/s')
    gyro_group.add_argument('--bias-y', type=float, default=0.0, help='Y gyro bias in rad/s')
    gyro_group.add_argument('--bias-z', type=float, default=0.0, help='Z gyro bias in rad/s')

    args = parser.parse_args(argv)

    if args.preset:
        preset_config = PRESETS[args.preset]
        print(f"\nUsing preset: '{args.preset}'")
        print(f"Description: {preset_config['description']}\n")

        for key, value in preset_config.items():
            if key != 'description' and hasattr(args, key):
                setattr(args, key, value)

    if args.duration <= 0:
        parser.error("Duration must be positive")
    if args.rate_hz <= 0:
        parser.error("Rate must be positive")
    if args.frequency_hz <= 0:
        parser.error("Frequency must be positive")
    if args.noise_std < 0:
        parser.error("Noise must be non-negative")

    return generate_gyro_tilt_dataset(
        output_dir=args.output,
        seed=args.seed,
        amplitude_deg=args.amplitude_deg,
        frequency_hz=args.frequency_hz,
        axis=args.axis,
        duration=args.duration,
        rate_hz=args.rate_hz,
        noise_std=args.noise_std,
        bias_x=args.bias_x,
        bias_y=args.bias_y,
        bias_z=args.bias_z,
    )


if __name__ == "__main__":
    main()
