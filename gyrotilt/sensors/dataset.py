"""Save and load gyroscope recordings.

Directory layout:
    out_dir/
    ├── gyro.npz       # t_ns (N,) int64, gyro (N, 3) float32 [rad/s]
    └── config.json    # recording metadata (GyroSeries.meta)
"""

import json
from pathlib import Path
from typing import Union

import numpy as np

from .types import GyroSeries


def save_gyro_series(series: GyroSeries, out_dir: Union[str, Path]) -> Path:
    """
    Write a recording to out_dir (created if needed).

    Args:
        series: Recording to save.
        out_dir: Target directory.

    Returns:
        The output directory as a Path.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    np.savez(out_dir / "gyro.npz", t_ns=series.t_ns, gyro=series.gyro)
    with open(out_dir / "config.json", "w") as f:
        json.dump(series.meta, f, indent=2)

    return out_dir


def load_gyro_series(data_dir: Union[str, Path]) -> GyroSeries:
    """
    Load a recording written by save_gyro_series().

    Args:
        data_dir: Directory containing gyro.npz and config.json.

    Returns:
        GyroSeries.

    Raises:
        FileNotFoundError: If gyro.npz is missing.
        ValueError: If the arrays are missing or malformed.
    """
    data_dir = Path(data_dir)
    gyro_file = data_dir / "gyro.npz"
    config_file = data_dir / "config.json"

    if not gyro_file.exists():
        raise FileNotFoundError(f"Required file not found: {gyro_file}")

    with np.load(gyro_file) as data:
        missing = {"t_ns", "gyro"} - set(data.files)
        if missing:
            raise ValueError(f"{gyro_file} is missing arrays: {sorted(missing)}")
        t_ns = data["t_ns"]
        gyro = data["gyro"]

    meta = {}
    if config_file.exists():
        with open(config_file, "r") as f:
            meta = json.load(f)

    return GyroSeries(t_ns=t_ns, gyro=gyro, meta=meta)
