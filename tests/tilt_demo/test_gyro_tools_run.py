"""Smoke tests for the gyro tilt scripts and tools.

Runs the dataset generator, the replay tool and the drift guard example as
subprocesses, the way they are used from the command line. Uses the Agg
backend to avoid display requirements.
"""

import json
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path


class TestGyroToolsRun(unittest.TestCase):
    """Smoke tests: scripts should run without errors."""

    def setUp(self):
        """Set up test environment."""
        self.python_exe = sys.executable
        self.workspace_root = Path(__file__).parent.parent.parent
        self.env = dict(os.environ)
        self.env["MPLBACKEND"] = "Agg"
        self.env["PYTHONIOENCODING"] = "utf-8"
        self.env["PYTHONPATH"] = os.pathsep.join(
            filter(None, [str(self.workspace_root), self.env.get("PYTHONPATH")])
        )

    def run_script(self, *args):
        result = subprocess.run(
            [self.python_exe, *[str(a) for a in args]],
            cwd=self.workspace_root,
            env=self.env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=120,
        )
        self.assertEqual(
            result.returncode, 0,
            f"Script failed:\nSTDOUT:\n{result.stdout}\nSTDERR:\n{result.stderr}",
        )
        return result

    def test_generate_and_replay(self):
        """Generated recording replays through the integrator."""
        with tempfile.TemporaryDirectory() as tmp:
            data_dir = Path(tmp) / "gyro_tilt"
            self.run_script(
                "scripts/generate_gyro_tilt_dataset.py",
                "--preset", "biased_phone",
                "--duration", "20",
                "--output", data_dir,
            )

            self.assertTrue((data_dir / "gyro.npz").exists())
            with open(data_dir / "config.json") as f:
                meta = json.load(f)
            self.assertEqual(meta["gyro_bias_rad_s"], [0.05, -0.04, 0.02])

            result = self.run_script(
                "tools/replay_gyro_recording.py", data_dir, "--delay", "GAME"
            )
            self.assertIn("Samples integrated", result.stdout)
            self.assertIn("Drift guard resets", result.stdout)

    def test_replay_with_config_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            data_dir = Path(tmp) / "rec"
            config_path = Path(tmp) / "integrator.json"
            with open(config_path, "w") as f:
                json.dump({"drift_bound_deg": 10.0, "guarded_axes": ["x", "y", "z"]}, f)

            self.run_script(
                "scripts/generate_gyro_tilt_dataset.py",
                "--duration", "5",
                "--output", data_dir,
            )
            result = self.run_script(
                "tools/replay_gyro_recording.py", data_dir, "--config", config_path
            )
            self.assertIn("10.0", result.stdout)

    def test_replay_missing_directory(self):
        result = subprocess.run(
            [self.python_exe, "tools/replay_gyro_recording.py", "does/not/exist"],
            cwd=self.workspace_root,
            env=self.env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=60,
        )
        self.assertNotEqual(result.returncode, 0)
        self.assertIn("Data directory not found", result.stderr)

    def test_gyro_tilt_example_runs(self):
        result = self.run_script("tilt_demo/example_gyro_tilt.py")

        self.assertIn("Peak image tilt x", result.stdout)
        self.assertTrue(
            (self.workspace_root / "tilt_demo" / "figs" / "gyro_tilt_rocking.svg").exists()
        )

    def test_drift_guard_example_runs(self):
        result = self.run_script("tilt_demo/example_drift_guard.py")

        self.assertIn("RESULTS", result.stdout)
        self.assertTrue(
            (self.workspace_root / "tilt_demo" / "figs" / "drift_guard_sawtooth.svg").exists()
        )


if __name__ == "__main__":
    unittest.main()
