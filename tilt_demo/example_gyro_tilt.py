"""
Example: Gyroscope Tilt Integration

Rocks a simulated phone back and forth and integrates its gyro samples into
the tilt estimate that drives the on-screen image.

Implements:
    - Axis-angle to delta quaternion per sample
    - Tilt accumulation from the quaternion vector part (degrees)
    - Attitude by concatenating delta rotation matrices

Key Insight: the tilt estimate follows sin(θ/2) per step, so a rocking
motion of ±A degrees shows up as roughly ±A/2 degrees of image tilt, while
the concatenated attitude recovers the full angle.
"""

import time
import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path

from gyrotilt.sensors import (
    OrientationIntegrator,
    ReplaySource,
    SensorDelay,
)
from gyrotilt.sim import sinusoidal_tilt_gyro, with_noise


class TiltRecorder:
    """Listener that forwards samples to an integrator and records its output."""

    def __init__(self, integrator):
        self.integrator = integrator
        self.t_ns = []
        self.tilt = []
        self.attitude_deg = []

    def on_sample(self, sample):
        estimate = self.integrator.on_sample(sample)
        self.t_ns.append(sample.timestamp_ns)
        self.tilt.append(estimate.as_array())
        self.attitude_deg.append(self.integrator.attitude_euler_deg())

    def on_accuracy_changed(self, sensor_name, accuracy):
        self.integrator.on_accuracy_changed(sensor_name, accuracy)


def run_tilt_integration(series):
    """
    Run the integrator over a recording through a replay source.

    Args:
        series: GyroSeries to replay.

    Returns:
        Tuple of (t, tilt, attitude_deg):
            t: time since first sample [s], shape (N,)
            tilt: tilt estimate after each sample [deg], shape (N, 3)
            attitude_deg: roll/pitch/yaw after each sample [deg], shape (N, 3)
    """
    recorder = TiltRecorder(OrientationIntegrator())
    source = ReplaySource(series)

    source.register_listener(recorder, SensorDelay.FASTEST)
    source.play()
    source.unregister_listener(recorder)

    t = (np.array(recorder.t_ns) - series.t_ns[0]) * 1e-9
    return t, np.array(recorder.tilt), np.array(recorder.attitude_deg)


def plot_results(t, truth_deg, tilt, attitude_deg, figs_dir):
    """
    Plot the tilt estimate and attitude against the true rocking angle.

    Args:
        t: Time array [s].
        truth_deg: True tilt angle [deg], shape (N,).
        tilt: Tilt estimate [deg], shape (N, 3).
        attitude_deg: Concatenated attitude [deg], shape (N, 3).
        figs_dir: Directory to save figures.
    """
    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    axes[0].plot(t, truth_deg, 'k-', linewidth=2, label='True tilt')
    axes[0].plot(t, attitude_deg[:, 0], 'b--', linewidth=2, label='Attitude roll')
    axes[0].set_ylabel('Angle [deg]', fontsize=12)
    axes[0].legend(fontsize=10)
    axes[0].grid(True, alpha=0.3)
    axes[0].set_title('Gyro Tilt: Rocking About x', fontsize=14)

    axes[1].plot(t, truth_deg / 2.0, 'k-', linewidth=2, label='True tilt / 2')
    axes[1].plot(t, tilt[:, 0], 'r--', linewidth=2, label='Image tilt x')
    axes[1].set_ylabel('Image tilt [deg]', fontsize=12)
    axes[1].set_xlabel('Time [s]', fontsize=12)
    axes[1].legend(fontsize=10)
    axes[1].grid(True, alpha=0.3)

    plt.tight_layout()
    fig.savefig(figs_dir / 'gyro_tilt_rocking.svg', dpi=300, bbox_inches='tight')
    fig.savefig(figs_dir / 'gyro_tilt_rocking.pdf', bbox_inches='tight')
    print(f"  [OK] Saved: {figs_dir / 'gyro_tilt_rocking.svg'}")

    plt.close('all')


def main():
    """Main execution function."""
    print("\n" + "="*60)
    print("Gyroscope Tilt Integration")
    print("="*60)

    # Configuration
    amplitude_deg = 20.0
    frequency_hz = 0.5
    duration = 10.0
    dt = 0.01  # 100 Hz gyro
    noise_std = 0.005

    print(f"Configuration:")
    print(f"  Amplitude:       ±{amplitude_deg}° about x")
    print(f"  Frequency:       {frequency_hz} Hz")
    print(f"  Duration:        {duration} s")
    print(f"  Gyro Rate:       {1/dt:.0f} Hz")
    print(f"  Gyro Noise:      {noise_std} rad/s\n")

    truth = sinusoidal_tilt_gyro(amplitude_deg, frequency_hz, duration, dt, axis='x')
    series = with_noise(truth, noise_std=noise_std, seed=7)

    print("Running tilt integration...")
    start_time = time.time()
    t, tilt, attitude_deg = run_tilt_integration(series)
    elapsed = time.time() - start_time
    print(f"  Computation time: {elapsed:.3f} s ({len(series)/elapsed:.0f} samples/s)")

    truth_deg = amplitude_deg * np.sin(2 * np.pi * frequency_hz * t)

    figs_dir = Path(__file__).parent / 'figs'
    figs_dir.mkdir(exist_ok=True)

    print("\nGenerating plots...")
    plot_results(t, truth_deg, tilt, attitude_deg, figs_dir)

    tilt_error = np.abs(tilt[:, 0] - truth_deg / 2.0)
    roll_error = np.abs(attitude_deg[:, 0] - truth_deg)

    print("\n" + "="*60)
    print("RESULTS")
    print("="*60)
    print(f"  Peak image tilt x:     {np.max(np.abs(tilt[:, 0])):.2f}°")
    print(f"  Max |tilt - true/2|:   {np.max(tilt_error):.2f}°")
    print(f"  Max |roll - true|:     {np.max(roll_error):.2f}°")
    print(f"  Final tilt (x, y, z):  {tilt[-1]}")
    print()
    print(f"Figures saved to: {figs_dir}/")
    print()


if __name__ == "__main__":
    main()
