"""Tests for channel loading with and without downsampling."""

from __future__ import annotations

import h5py
import numpy as np
import pytest

from bluelake_importer import import_h5
from bluelake_importer.errors import HarvestFailure, InvalidDownsampleRate
from bluelake_importer.ingest.channels import load_channel
from bluelake_importer.ingest.container import H5Container

from conftest import START_NS


def test_raw_load_is_unchanged(make_bluelake) -> None:
    with H5Container.open(make_bluelake(n=1000, rate_hz=100.0)) as c:
        ch = load_channel(c, "Force HF/Force 2x")
    assert ch.name == "Force 2x"
    assert ch.path == "/Force HF/Force 2x"
    assert ch.sampling_rate_hz == 100.0
    assert ch.downsample_factor == 1
    assert not ch.downsampled
    assert ch.start_time_ns == START_NS
    assert ch.stop_time_ns == START_NS + 10_000_000_000
    assert ch.kind == "Continuous"
    assert ch.values.dtype == np.float64
    np.testing.assert_array_equal(ch.values, 3.0 * np.arange(1000))


def test_downsampled_load(make_bluelake) -> None:
    with H5Container.open(make_bluelake(n=1000, rate_hz=100.0)) as c:
        ch = load_channel(c, "/Force HF/Force 1x", downsample=True, target_rate_hz=10.0)
    assert ch.sampling_rate_hz == 10.0
    assert ch.original_rate_hz == 100.0
    assert ch.downsample_factor == 10
    assert ch.downsampled
    assert ch.n_samples == 100
    np.testing.assert_allclose(ch.values, np.arange(1000.0).reshape(100, 10).mean(axis=1))
    assert ch.warnings == ()


def test_downsample_drops_remainder_with_warning(make_bluelake) -> None:
    with H5Container.open(make_bluelake(n=1005, rate_hz=100.0)) as c:
        ch = load_channel(c, "/Force HF/Force 1x", downsample=True, target_rate_hz=10.0)
    assert ch.n_samples == 100
    assert any("dropped 5 trailing" in w for w in ch.warnings)


def test_downsample_flag_off_ignores_target(make_bluelake) -> None:
    with H5Container.open(make_bluelake(n=50, rate_hz=100.0)) as c:
        ch = load_channel(c, "/Force HF/Force 1x", downsample=False, target_rate_hz=1e9)
    assert ch.n_samples == 50
    assert ch.sampling_rate_hz == 100.0


@pytest.mark.parametrize("target, reason", [(60.0, "too_high"), (0.0, "too_low"), (-1.0, "too_low")])
def test_invalid_target_rate(make_bluelake, target: float, reason: str) -> None:
    with H5Container.open(make_bluelake(rate_hz=100.0)) as c:
        with pytest.raises(InvalidDownsampleRate) as ei:
            load_channel(c, "/Force HF/Force 1x", downsample=True, target_rate_hz=target)
    assert ei.value.reason == reason


def test_missing_start_time_is_optional(make_bluelake) -> None:
    with H5Container.open(make_bluelake(start_ns=None)) as c:
        ch = load_channel(c, "/Force HF/Force 1x")
    assert ch.start_time_ns is None
    assert ch.stop_time_ns is None


def test_missing_sample_rate_is_harvest_failure(tmp_path) -> None:
    p = tmp_path / "norate.h5"
    with h5py.File(p, "w") as f:
        f.create_dataset("Force HF/Force 1x", data=np.arange(10.0))
    with H5Container.open(p) as c:
        with pytest.raises(HarvestFailure):
            load_channel(c, "/Force HF/Force 1x")


def test_zero_sample_rate_is_harvest_failure(tmp_path) -> None:
    p = tmp_path / "zerorate.h5"
    with h5py.File(p, "w") as f:
        ds = f.create_dataset("Force HF/Force 1x", data=np.arange(10.0))
        ds.attrs["Sample rate (Hz)"] = 0.0
    with H5Container.open(p) as c:
        with pytest.raises(HarvestFailure):
            load_channel(c, "/Force HF/Force 1x")


def test_infinite_sample_rate_is_harvest_failure(tmp_path) -> None:
    p = tmp_path / "infrate.h5"
    with h5py.File(p, "w") as f:
        ds = f.create_dataset("Force HF/Force 1x", data=np.arange(10.0))
        ds.attrs["Sample rate (Hz)"] = np.inf
    with H5Container.open(p) as c:
        with pytest.raises(HarvestFailure):
            load_channel(c, "/Force HF/Force 1x", downsample=True, target_rate_hz=10.0)


def test_infinite_sample_rate_gives_typed_import_error(make_bluelake) -> None:
    p = make_bluelake()
    with h5py.File(p, "a") as f:
        f["Force HF/Force 2x"].attrs["Sample rate (Hz)"] = np.inf
    result = import_h5(str(p), downsample=True, target_rate_hz=10.0)
    assert isinstance(result.error, HarvestFailure)
    assert result.molecule is None


def test_group_instead_of_dataset_is_harvest_failure(make_bluelake) -> None:
    with H5Container.open(make_bluelake()) as c:
        with pytest.raises(HarvestFailure):
            c.read_array("/Force HF")
