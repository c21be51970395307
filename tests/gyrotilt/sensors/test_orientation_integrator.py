"""
Unit tests for gyrotilt/sensors/integrator.py (OrientationIntegrator).

Tests cover:
    - Priming on the first sample (no integration, no publication)
    - One-second rotation about z (end-to-end value check)
    - y sign inversion and the unguarded z axis
    - Drift guard resets as seen by subscribers
    - Rotation matrix of the last delta and the concatenated attitude
    - Non-increasing timestamps
    - reset(), start()/stop() against a ReplaySource, accuracy changes
    - Consistent estimate snapshots under a background producer
    - Published values after a reset() that races a publication
    - Subscriber errors

Run with: pytest tests/gyrotilt/sensors/test_orientation_integrator.py -v
"""

import threading
import time
import unittest

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from gyrotilt.coords.rotations import rotation_vector_to_matrix
from gyrotilt.sensors.config import IntegratorConfig
from gyrotilt.sensors.integrator import OrientationIntegrator
from gyrotilt.sensors.source import ReplaySource
from gyrotilt.sensors.types import GyroSample, SensorAccuracy, SensorDelay
from gyrotilt.sim import constant_rate_gyro

# Tilt increment of a 1 rad rotation: sin(0.5) * 180 / pi
ONE_RAD_STEP_DEG = np.sin(0.5) * 180.0 / np.pi

SECOND_NS = 1_000_000_000


def sample(t_ns, omega):
    return GyroSample(timestamp_ns=t_ns, omega=np.asarray(omega, dtype=float))


class TestPriming(unittest.TestCase):
    """The first sample only records its timestamp."""

    def test_initial_state(self) -> None:
        integrator = OrientationIntegrator()

        self.assertFalse(integrator.is_primed)
        self.assertIsNone(integrator.previous_timestamp_ns)
        np.testing.assert_array_equal(integrator.estimate.as_array(), np.zeros(3))
        np.testing.assert_array_equal(integrator.rotation_matrix, np.eye(3))

    def test_first_sample_primes_without_publishing(self) -> None:
        integrator = OrientationIntegrator()
        published = []
        integrator.z.subscribe(published.append, replay=False)

        estimate = integrator.on_sample(sample(SECOND_NS, [0.0, 0.0, 5.0]))

        self.assertTrue(integrator.is_primed)
        self.assertEqual(integrator.previous_timestamp_ns, SECOND_NS)
        self.assertEqual(integrator.sample_count, 1)
        np.testing.assert_array_equal(estimate.as_array(), np.zeros(3))
        self.assertEqual(published, [])

    def test_timestamp_zero_primes(self) -> None:
        """A zero timestamp is a valid first sample, not an unset marker."""
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))

        self.assertTrue(integrator.is_primed)
        self.assertEqual(integrator.previous_timestamp_ns, 0)


class TestIntegration(unittest.TestCase):
    """Test suite for the per-sample integration step."""

    def test_one_radian_about_z(self) -> None:
        """(t=0, ω=0) then (t=1 s, ω=[0, 0, 1]) gives z ≈ 27.47°."""
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        estimate = integrator.on_sample(sample(SECOND_NS, [0.0, 0.0, 1.0]))

        self.assertEqual(float(estimate.x), 0.0)
        self.assertEqual(float(estimate.y), 0.0)
        self.assertAlmostEqual(float(estimate.z), ONE_RAD_STEP_DEG, places=4)
        self.assertAlmostEqual(float(estimate.z), 27.47, places=2)

        np.testing.assert_allclose(
            integrator.delta_rotation.as_array(),
            [0.0, 0.0, 0.4794255, 0.8775826],
            atol=1e-6,
        )
        self.assertAlmostEqual(integrator.last_dt_s, 1.0)

    def test_one_radian_rotation_matrix(self) -> None:
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        integrator.on_sample(sample(SECOND_NS, [0.0, 0.0, 1.0]))

        c, s = np.cos(1.0), np.sin(1.0)
        expected = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
        np.testing.assert_allclose(integrator.rotation_matrix, expected, atol=1e-6)

    def test_rotation_matrix_is_pure_function_of_delta(self) -> None:
        """The published matrix is bit-identical to converting the delta again."""
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        integrator.on_sample(sample(20_000_000, [0.3, -0.7, 1.1]))

        np.testing.assert_array_equal(
            integrator.rotation_matrix,
            rotation_vector_to_matrix(integrator.delta_rotation.as_array()),
        )

    def test_y_is_inverted(self) -> None:
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        estimate = integrator.on_sample(sample(SECOND_NS, [0.0, 1.0, 0.0]))

        self.assertAlmostEqual(float(estimate.y), -ONE_RAD_STEP_DEG, places=4)

    def test_y_not_inverted_when_configured(self) -> None:
        integrator = OrientationIntegrator(IntegratorConfig(invert_y=False))
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        estimate = integrator.on_sample(sample(SECOND_NS, [0.0, 1.0, 0.0]))

        self.assertAlmostEqual(float(estimate.y), ONE_RAD_STEP_DEG, places=4)

    def test_zero_rate_leaves_estimate_unchanged(self) -> None:
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        integrator.on_sample(sample(SECOND_NS, [1.0, 0.0, 0.0]))
        before = integrator.estimate

        integrator.on_sample(sample(2 * SECOND_NS, [0.0, 0.0, 0.0]))

        self.assertEqual(integrator.estimate, before)
        np.testing.assert_array_equal(
            integrator.delta_rotation.as_array(), [0.0, 0.0, 0.0, 1.0]
        )

    def test_z_accumulates_past_bound(self) -> None:
        """z is not guarded: three 1 rad steps reach ~82°."""
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        for k in range(1, 4):
            integrator.on_sample(sample(k * SECOND_NS, [0.0, 0.0, 1.0]))

        self.assertAlmostEqual(float(integrator.estimate.z), 3 * ONE_RAD_STEP_DEG, places=3)
        self.assertEqual(integrator.reset_count["z"], 0)

    def test_integrate_series(self) -> None:
        series = constant_rate_gyro([0.0, 0.0, 0.2], duration=1.0, dt=0.01)
        history = OrientationIntegrator().integrate(series)

        self.assertEqual(history.shape, (len(series), 3))
        self.assertEqual(history.dtype, np.float32)
        np.testing.assert_array_equal(history[0], np.zeros(3))
        # monotone rotation about z
        self.assertTrue(np.all(np.diff(history[:, 2]) > 0))
        expected = 100 * np.sin(0.2 * 0.01 / 2.0) * 180.0 / np.pi
        self.assertAlmostEqual(float(history[-1, 2]), expected, places=3)


class TestDriftGuard(unittest.TestCase):
    """Test suite for drift guard behavior inside the integrator."""

    def test_x_reset_is_what_subscribers_see(self) -> None:
        """Subscribers observe 0 after the overflow, never the overflowed value."""
        integrator = OrientationIntegrator()
        published = []
        integrator.x.subscribe(published.append, replay=False)

        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        integrator.on_sample(sample(SECOND_NS, [1.0, 0.0, 0.0]))       # ~27.5°
        integrator.on_sample(sample(2 * SECOND_NS, [1.0, 0.0, 0.0]))   # ~54.9° -> 0

        self.assertEqual(len(published), 2)
        self.assertAlmostEqual(float(published[0]), ONE_RAD_STEP_DEG, places=4)
        self.assertEqual(float(published[1]), 0.0)
        self.assertEqual(integrator.reset_count["x"], 1)

    def test_y_reset_on_negative_overflow(self) -> None:
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        integrator.on_sample(sample(SECOND_NS, [0.0, 1.0, 0.0]))       # ~-27.5°
        estimate = integrator.on_sample(sample(2 * SECOND_NS, [0.0, 1.0, 0.0]))

        self.assertEqual(float(estimate.y), 0.0)
        self.assertEqual(integrator.reset_count["y"], 1)

    def test_integration_continues_after_reset(self) -> None:
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        for k in range(1, 4):
            integrator.on_sample(sample(k * SECOND_NS, [1.0, 0.0, 0.0]))

        # 27.5 -> 54.9 (reset to 0) -> 27.5
        self.assertAlmostEqual(float(integrator.estimate.x), ONE_RAD_STEP_DEG, places=4)

    def test_custom_bound(self) -> None:
        integrator = OrientationIntegrator(IntegratorConfig(drift_bound_deg=20.0))
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        estimate = integrator.on_sample(sample(SECOND_NS, [1.0, 0.0, 0.0]))

        self.assertEqual(float(estimate.x), 0.0)

    def test_biased_stationary_stays_bounded(self) -> None:
        series = constant_rate_gyro([0.05, -0.05, 0.05], duration=60.0, dt=0.02)
        history = OrientationIntegrator().integrate(series)

        self.assertLessEqual(np.max(np.abs(history[:, :2])), 50.0)
        self.assertGreater(history[-1, 2], 50.0)


class TestTimestamps(unittest.TestCase):
    """Test suite for non-increasing timestamps."""

    def test_repeated_timestamp_is_identity_step(self) -> None:
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(SECOND_NS, [0.0, 0.0, 0.0]))

        with self.assertLogs("gyrotilt.sensors.integrator", level="WARNING") as logs:
            estimate = integrator.on_sample(sample(SECOND_NS, [0.0, 0.0, 3.0]))

        self.assertIn("Non-increasing", logs.output[0])
        np.testing.assert_array_equal(estimate.as_array(), np.zeros(3))

    def test_backwards_timestamp_reverses_rotation(self) -> None:
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        integrator.on_sample(sample(SECOND_NS, [0.0, 0.0, 1.0]))

        with self.assertLogs("gyrotilt.sensors.integrator", level="WARNING"):
            estimate = integrator.on_sample(sample(0, [0.0, 0.0, 1.0]))

        self.assertAlmostEqual(float(estimate.z), 0.0, places=4)
        self.assertEqual(integrator.previous_timestamp_ns, 0)


class TestAttitude(unittest.TestCase):
    """Test suite for the concatenated attitude."""

    def test_attitude_after_one_radian(self) -> None:
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        integrator.on_sample(sample(SECOND_NS, [0.0, 0.0, 1.0]))

        roll, pitch, yaw = integrator.attitude_euler_deg()
        self.assertAlmostEqual(roll, 0.0, places=4)
        self.assertAlmostEqual(pitch, 0.0, places=4)
        self.assertAlmostEqual(yaw, np.rad2deg(1.0), places=3)

    def test_attitude_matches_scipy(self) -> None:
        """Concatenating the deltas of a constant rate recovers the full rotation."""
        omega = np.array([0.2, -0.1, 0.3])
        series = constant_rate_gyro(omega, duration=2.0, dt=0.01)
        integrator = OrientationIntegrator()
        integrator.integrate(series)

        expected = Rotation.from_rotvec(omega * 2.0).as_matrix()
        np.testing.assert_allclose(integrator.attitude, expected, atol=1e-4)


class TestReset(unittest.TestCase):
    """Test suite for reset()."""

    def test_reset_returns_to_unprimed(self) -> None:
        integrator = OrientationIntegrator()
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        integrator.on_sample(sample(SECOND_NS, [0.0, 0.0, 1.0]))
        published = []
        integrator.z.subscribe(published.append, replay=False)

        integrator.reset()

        self.assertFalse(integrator.is_primed)
        self.assertEqual(integrator.sample_count, 0)
        self.assertEqual(published, [0.0])
        np.testing.assert_array_equal(integrator.attitude, np.eye(3))

        # next sample primes again
        integrator.on_sample(sample(5 * SECOND_NS, [0.0, 0.0, 1.0]))
        self.assertEqual(float(integrator.estimate.z), 0.0)


class TestPublication(unittest.TestCase):
    """Published per-axis values always end equal to the estimate."""

    def assert_published_matches_estimate(self, integrator):
        e = integrator.estimate
        self.assertEqual(integrator.x.value, e.x)
        self.assertEqual(integrator.y.value, e.y)
        self.assertEqual(integrator.z.value, e.z)

    def test_reset_from_subscriber_wins(self) -> None:
        """A reset() issued from an x callback is not overwritten by y and z."""
        integrator = OrientationIntegrator()
        resets = []

        def reset_on_first_tilt(value):
            if value != 0.0 and not resets:
                resets.append(value)
                integrator.reset()

        integrator.x.subscribe(reset_on_first_tilt, replay=False)
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))
        integrator.on_sample(sample(SECOND_NS, [0.5, 0.5, 1.0]))

        self.assertEqual(len(resets), 1)
        np.testing.assert_array_equal(integrator.estimate.as_array(), np.zeros(3))
        self.assert_published_matches_estimate(integrator)

    def test_reset_from_other_thread_during_publication(self) -> None:
        """A reset() landing while the producer is still publishing ends at zero."""
        integrator = OrientationIntegrator()
        entered = threading.Event()
        proceed = threading.Event()

        def slow_y(value):
            if value != 0.0 and not entered.is_set():
                entered.set()
                proceed.wait(timeout=5.0)

        integrator.y.subscribe(slow_y, replay=False)
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))

        producer = threading.Thread(
            target=integrator.on_sample,
            args=(sample(SECOND_NS, [0.5, 0.5, 1.0]),),
        )
        producer.start()
        self.assertTrue(entered.wait(timeout=5.0))

        resetter = threading.Thread(target=integrator.reset)
        resetter.start()
        # the reset has replaced the state before the producer finishes publishing
        for _ in range(500):
            if not integrator.is_primed:
                break
            time.sleep(0.01)
        self.assertFalse(integrator.is_primed)
        proceed.set()

        producer.join(timeout=5.0)
        resetter.join(timeout=5.0)

        np.testing.assert_array_equal(integrator.estimate.as_array(), np.zeros(3))
        self.assert_published_matches_estimate(integrator)

    def test_subscriber_error_after_all_axes_published(self) -> None:
        integrator = OrientationIntegrator()

        def broken(value):
            raise RuntimeError("display gone")

        integrator.x.subscribe(broken, replay=False)
        integrator.on_sample(sample(0, [0.0, 0.0, 0.0]))

        with pytest.raises(RuntimeError, match="display gone"):
            integrator.on_sample(sample(SECOND_NS, [0.5, 0.5, 1.0]))

        self.assertNotEqual(float(integrator.estimate.z), 0.0)
        self.assert_published_matches_estimate(integrator)


class TestLifecycle(unittest.TestCase):
    """Test suite for start()/stop() against a ReplaySource."""

    def setUp(self) -> None:
        self.series = constant_rate_gyro([0.0, 0.0, 0.2], duration=2.0, dt=0.01)

    def test_start_play_stop(self) -> None:
        integrator = OrientationIntegrator()
        source = ReplaySource(self.series)

        self.assertTrue(integrator.start(source, SensorDelay.FASTEST))
        self.assertTrue(integrator.is_running)
        self.assertEqual(source.play(), len(self.series))
        integrator.stop()

        self.assertFalse(integrator.is_running)
        self.assertEqual(source.listener_count, 0)
        self.assertEqual(integrator.sample_count, len(self.series))
        expected = 200 * np.sin(0.2 * 0.01 / 2.0) * 180.0 / np.pi
        self.assertAlmostEqual(float(integrator.estimate.z), expected, places=3)

    def test_default_delay_from_config(self) -> None:
        """NORMAL (200 ms) on a 100 Hz recording delivers every 20th sample."""
        integrator = OrientationIntegrator()
        source = ReplaySource(self.series)
        integrator.start(source)

        self.assertEqual(source.play(), 11)
        self.assertAlmostEqual(integrator.last_dt_s, 0.2, places=6)

    def test_start_twice_is_noop(self) -> None:
        integrator = OrientationIntegrator()
        source = ReplaySource(self.series)

        self.assertTrue(integrator.start(source))
        self.assertTrue(integrator.start(source))
        self.assertEqual(source.listener_count, 1)

    def test_no_gyroscope(self) -> None:
        integrator = OrientationIntegrator()
        source = ReplaySource(self.series, has_gyroscope=False)

        with self.assertLogs("gyrotilt.sensors.integrator", level="WARNING"):
            self.assertFalse(integrator.start(source))

        self.assertFalse(integrator.is_running)
        self.assertEqual(source.play(), 0)
        self.assertFalse(integrator.is_primed)

    def test_stop_keeps_state(self) -> None:
        integrator = OrientationIntegrator()
        source = ReplaySource(self.series)
        integrator.start(source, SensorDelay.FASTEST)
        source.play()
        integrator.stop()
        estimate = integrator.estimate

        self.assertEqual(source.play(), 0)
        self.assertEqual(integrator.estimate, estimate)
        self.assertEqual(integrator.previous_timestamp_ns, int(self.series.t_ns[-1]))

    def test_stop_when_not_running(self) -> None:
        integrator = OrientationIntegrator()
        integrator.stop()
        self.assertFalse(integrator.is_running)

    def test_accuracy_change_is_recorded(self) -> None:
        integrator = OrientationIntegrator()
        source = ReplaySource(self.series, name="test-gyro")
        integrator.start(source)

        with self.assertLogs("gyrotilt.sensors.integrator", level="INFO") as logs:
            source.emit_accuracy(SensorAccuracy.LOW)

        self.assertIs(integrator.last_accuracy, SensorAccuracy.LOW)
        self.assertIn("test-gyro", logs.output[0])
        self.assertFalse(integrator.is_primed)

    def test_snapshots_consistent_under_background_producer(self) -> None:
        """Every estimate read during replay is a complete triple."""
        series = constant_rate_gyro([0.1, -0.1, 0.1], duration=2.0, dt=0.01)
        integrator = OrientationIntegrator()
        source = ReplaySource(series)
        integrator.start(source, SensorDelay.FASTEST)

        mismatches = []
        thread = source.play_in_background()
        while thread.is_alive():
            e = integrator.estimate
            if not (e.x == e.y == e.z):
                mismatches.append(e)
        source.join()
        integrator.stop()

        self.assertEqual(mismatches, [])
        self.assertEqual(integrator.sample_count, len(series))
        e = integrator.estimate
        self.assertEqual(e.x, e.y)
        self.assertEqual(e.x, e.z)


if __name__ == "__main__":
    unittest.main()
