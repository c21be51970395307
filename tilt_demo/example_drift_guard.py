"""
Example: Drift Guard Under Gyro Bias

A phone lying still with a biased gyro. Raw integration of the bias makes
the tilt estimate ramp without bound; the drift guard resets the x and y
axes to zero each time they leave ±50°, producing a sawtooth instead. The z
axis is not guarded and keeps drifting.
"""

import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path

from gyrotilt.sensors import (
    IntegratorConfig,
    OrientationIntegrator,
)
from gyrotilt.sim import constant_rate_gyro, with_noise


def main():
    """Main execution function."""
    print("\n" + "="*60)
    print("Drift Guard Under Gyro Bias")
    print("="*60)

    duration = 120.0
    dt = 0.02  # 50 Hz gyro
    bias = [0.03, -0.02, 0.01]  # rad/s
    config = IntegratorConfig()

    print(f"Configuration:")
    print(f"  Duration:        {duration} s")
    print(f"  Gyro Rate:       {1/dt:.0f} Hz")
    print(f"  Gyro Bias:       {bias} rad/s")
    print(f"  Drift Bound:     ±{config.drift_bound_deg}° on {config.guarded_axes}\n")

    stationary = constant_rate_gyro([0.0, 0.0, 0.0], duration, dt)
    series = with_noise(stationary, noise_std=0.002, bias=bias, seed=3)

    integrator = OrientationIntegrator(config)

    # Collect what a display bound to the per-axis values would see
    published = {'x': [], 'y': [], 'z': []}
    subscriptions = [
        getattr(integrator, axis).subscribe(published[axis].append, replay=False)
        for axis in published
    ]

    history = integrator.integrate(series)
    for subscription in subscriptions:
        subscription.cancel()

    t = (series.t_ns - series.t_ns[0]) * 1e-9

    figs_dir = Path(__file__).parent / 'figs'
    figs_dir.mkdir(exist_ok=True)

    fig, ax = plt.subplots(figsize=(12, 6))
    ax.plot(t, history[:, 0], 'r-', linewidth=1.5, label='x (guarded)')
    ax.plot(t, history[:, 1], 'g-', linewidth=1.5, label='y (guarded)')
    ax.plot(t, history[:, 2], 'b-', linewidth=1.5, label='z (unguarded)')
    ax.axhline(config.drift_bound_deg, color='k', linestyle=':', linewidth=1)
    ax.axhline(-config.drift_bound_deg, color='k', linestyle=':', linewidth=1)
    ax.set_xlabel('Time [s]', fontsize=12)
    ax.set_ylabel('Tilt [deg]', fontsize=12)
    ax.set_title('Drift Guard: Stationary Phone With Biased Gyro', fontsize=14)
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    fig.savefig(figs_dir / 'drift_guard_sawtooth.svg', dpi=300, bbox_inches='tight')
    fig.savefig(figs_dir / 'drift_guard_sawtooth.pdf', bbox_inches='tight')
    print(f"  [OK] Saved: {figs_dir / 'drift_guard_sawtooth.svg'}")
    plt.close('all')

    print("\n" + "="*60)
    print("RESULTS")
    print("="*60)
    print(f"  Drift guard resets:    {integrator.reset_count}")
    print(f"  Max |x| published:     {np.max(np.abs(published['x'])):.2f}°")
    print(f"  Max |y| published:     {np.max(np.abs(published['y'])):.2f}°")
    print(f"  Final z (unguarded):   {history[-1, 2]:.2f}°")
    print()


if __name__ == "__main__":
    main()
