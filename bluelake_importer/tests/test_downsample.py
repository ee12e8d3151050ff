"""Tests for box-car downsampling and the rate bounds."""

from __future__ import annotations

import numpy as np
import pytest

from bluelake_importer.analysis.downsample import (
    bin_factor,
    boxcar_downsample,
    downsample_to_rate,
    validate_target_rate,
)
from bluelake_importer.errors import InvalidDownsampleRate


# -----------------------------------------------------------------------
# boxcar_downsample
# -----------------------------------------------------------------------


def test_pairs_of_ten_values() -> None:
    out = boxcar_downsample(np.arange(1, 11, dtype=float), 2)
    np.testing.assert_allclose(out, [1.5, 3.5, 5.5, 7.5, 9.5])


@pytest.mark.parametrize("n", [0, 1, 7, 10, 99, 1000, 1001])
@pytest.mark.parametrize("factor", [1, 2, 3, 8, 10])
def test_output_length_is_floor(n: int, factor: int) -> None:
    out = boxcar_downsample(np.random.default_rng(n).normal(size=n), factor)
    assert out.shape == (n // factor,)


def test_trailing_remainder_is_dropped() -> None:
    # 11 samples, factor 5 -> 2 bins of 5, the last sample never contributes
    x = np.concatenate([np.ones(10), [1e6]])
    np.testing.assert_array_equal(boxcar_downsample(x, 5), [1.0, 1.0])


def test_bin_size_recomputed_from_output_length() -> None:
    # 11 samples, factor 4 -> n_out = 2, bin = 11 // 2 = 5
    x = np.arange(11, dtype=float)
    np.testing.assert_allclose(boxcar_downsample(x, 4), [2.0, 7.0])


def test_factor_one_is_identity_copy() -> None:
    x = np.array([3.0, 1.0, 2.0])
    out = boxcar_downsample(x, 1)
    np.testing.assert_array_equal(out, x)
    assert out is not x


def test_input_shorter_than_one_bin() -> None:
    assert boxcar_downsample(np.arange(3.0), 10).size == 0


@pytest.mark.parametrize("factor", [0, -2, 2.5])
def test_bad_factor_rejected(factor) -> None:
    with pytest.raises(ValueError):
        boxcar_downsample(np.arange(10.0), factor)


def test_two_dimensional_input_rejected() -> None:
    with pytest.raises(ValueError):
        boxcar_downsample(np.zeros((4, 4)), 2)


# -----------------------------------------------------------------------
# bin_factor / rate bounds
# -----------------------------------------------------------------------


def test_bin_factor_100_to_10_hz() -> None:
    assert bin_factor(100.0, 10.0) == 10


def test_bin_factor_rounds_half_up() -> None:
    assert bin_factor(100.0, 40.0) == 3  # 2.5 -> 3


def test_1000_samples_at_100_hz_to_10_hz() -> None:
    x = np.random.default_rng(1).normal(size=1000)
    out, factor = downsample_to_rate(x, 100.0, 10.0)
    assert factor == 10
    assert out.size == 100
    np.testing.assert_allclose(out, x.reshape(100, 10).mean(axis=1))


def test_rate_above_half_original_is_too_high() -> None:
    with pytest.raises(InvalidDownsampleRate) as ei:
        validate_target_rate(60.0, 100.0)
    assert ei.value.reason == InvalidDownsampleRate.TOO_HIGH


def test_rate_exactly_half_original_is_accepted() -> None:
    validate_target_rate(50.0, 100.0)
    assert bin_factor(100.0, 50.0) == 2


@pytest.mark.parametrize("target", [0.0, -5.0, 0.5, float("nan")])
def test_rate_below_one_hz_is_too_low(target: float) -> None:
    with pytest.raises(InvalidDownsampleRate) as ei:
        validate_target_rate(target, 100.0)
    assert ei.value.reason == InvalidDownsampleRate.TOO_LOW


def test_invalid_rate_is_also_value_error() -> None:
    with pytest.raises(ValueError):
        bin_factor(100.0, 0.0)
