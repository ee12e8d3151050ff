from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import h5py
import numpy as np
import pytest


START_NS = 1_000_000_000


def write_bluelake_h5(
    path: Path,
    *,
    n: int = 1000,
    rate_hz: float = 100.0,
    start_ns: Optional[int] = START_NS,
    format_attr: bool = True,
    channel_group: Optional[str] = "Force HF",
    channels: Sequence[str] = ("Force 1x", "Force 1y", "Force 2x", "Force 2y"),
    lengths: Optional[Dict[str, int]] = None,
    aux: bool = False,
    aux_rate_hz: Optional[float] = None,
    calibration: bool = True,
    markers: Optional[Dict[str, Tuple[Optional[int], Optional[int]]]] = None,
    description: str = "tether pulling",
) -> Path:
    """
    Write a small file with the Bluelake layout.

    Channel k (in order of ``channels``) holds ``(k + 1) * arange(n)``.
    """
    lengths = lengths or {}
    with h5py.File(path, "w") as f:
        if format_attr:
            f.attrs["Bluelake version"] = "2.3.1"
        f.attrs["File format version"] = 2
        f.attrs["GUID"] = "{6B3E1D0A-0000-4000-8000-000000000001}"
        f.attrs["Description"] = description
        f.attrs["Experiment"] = "ssDNA"
        f.attrs["Export time (ns)"] = np.int64(1_700_000_000_000_000_000)

        if channel_group is not None:
            g = f.create_group(channel_group)
            for k, name in enumerate(channels):
                m = lengths.get(name, n)
                ds = g.create_dataset(name, data=(k + 1) * np.arange(m, dtype=np.float64))
                ds.attrs["Sample rate (Hz)"] = rate_hz
                if start_ns is not None:
                    ds.attrs["Start time (ns)"] = np.int64(start_ns)
                    ds.attrs["Stop time (ns)"] = np.int64(start_ns + int(m / rate_hz * 1e9))
                ds.attrs["Kind"] = "Continuous"

        if aux:
            tp = f.create_group("Trap position")
            ds = tp.create_dataset("1X", data=0.5 * np.arange(n, dtype=np.float64))
            ds.attrs["Sample rate (Hz)"] = aux_rate_hz if aux_rate_hz is not None else rate_hz
            ds.attrs["Start time (ns)"] = np.int64(start_ns or 0)

        if calibration:
            c1 = f.create_group("Calibration/1")
            for name, kappa in (("Force 1x", 0.1), ("Force 2x", 0.3)):
                b = c1.create_group(name)
                b.attrs["Kind"] = "Full calibration"
                b.attrs["kappa (pN/nm)"] = kappa
                b.attrs["Rf (pN/V)"] = 1200.0
                b.attrs["Number of samples"] = np.int32(781250)
                b.attrs["Start time (ns)"] = np.int64(500_000_000)
            c2 = f.create_group("Calibration/2")
            b = c2.create_group("Force 1x")
            b.attrs["Kind"] = "Full calibration"
            b.attrs["kappa (pN/nm)"] = 0.2
            b.attrs["Bead diameter (um)"] = 4.89

        if markers:
            mg = f.create_group("Marker")
            for name, (t0, t1) in markers.items():
                m = mg.create_group(name)
                if t0 is not None:
                    m.attrs["Start time (ns)"] = np.int64(t0)
                if t1 is not None:
                    m.attrs["Stop time (ns)"] = np.int64(t1)
    return path


@pytest.fixture
def make_bluelake(tmp_path):
    """Factory fixture: ``make_bluelake(name="x.h5", **layout) -> Path``."""

    def _make(name: str = "run.h5", **kwargs) -> Path:
        return write_bluelake_h5(tmp_path / name, **kwargs)

    return _make
