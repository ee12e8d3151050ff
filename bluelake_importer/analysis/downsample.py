"""Box-car downsampling of a single channel.

A channel recorded at ``original_rate_hz`` is reduced to ``target_rate_hz`` by
averaging consecutive, non-overlapping bins of raw samples:

    factor  = round(original_rate_hz / target_rate_hz)
    n_out   = floor(n / factor)
    bin     = floor(n / n_out)
    out[i]  = mean(x[i*bin : (i+1)*bin])

Trailing samples that do not fill a complete bin are dropped, never padded.
The target rate must satisfy ``1 <= target_rate_hz <= original_rate_hz / 2``.
"""

from __future__ import annotations

import math

import numpy as np

from bluelake_importer.errors import InvalidDownsampleRate


MIN_TARGET_RATE_HZ = 1.0


def validate_target_rate(target_rate_hz: float, original_rate_hz: float) -> None:
    """Raise :class:`InvalidDownsampleRate` if the target rate is out of bounds."""
    target = float(target_rate_hz)
    original = float(original_rate_hz)
    if not original > 0:
        raise ValueError(f"original_rate_hz must be > 0, got {original_rate_hz}")
    if not math.isfinite(target) or target < MIN_TARGET_RATE_HZ:
        raise InvalidDownsampleRate(InvalidDownsampleRate.TOO_LOW, target, original)
    if target > original / 2.0:
        raise InvalidDownsampleRate(InvalidDownsampleRate.TOO_HIGH, target, original)


def bin_factor(original_rate_hz: float, target_rate_hz: float) -> int:
    """
    Number of raw samples averaged into one output sample.

    Half-way ratios round up.

    >>> bin_factor(100.0, 10.0)
    10
    >>> bin_factor(78125.0, 10000.0)
    8
    """
    validate_target_rate(target_rate_hz, original_rate_hz)
    return max(1, int(math.floor(float(original_rate_hz) / float(target_rate_hz) + 0.5)))


def boxcar_downsample(values: np.ndarray, factor: int) -> np.ndarray:
    """
    Average consecutive bins of ``factor`` samples.

    Parameters
    ----------
    values:
        1-D numeric array.
    factor:
        Nominal bin size (>= 1). The effective bin size is recomputed as
        ``len(values) // n_out`` so that all bins are equal.

    Returns
    -------
    np.ndarray
        float64 array of length ``len(values) // factor``.

    >>> boxcar_downsample(np.arange(1, 11), 2).tolist()
    [1.5, 3.5, 5.5, 7.5, 9.5]
    """
    x = np.asarray(values, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"Expected 1D array, got shape {x.shape}")
    f = int(factor)
    if f < 1 or f != factor:
        raise ValueError(f"factor must be an integer >= 1, got {factor!r}")
    if f == 1:
        return x.copy()

    n_out = x.size // f
    if n_out == 0:
        return np.empty(0, dtype=np.float64)
    size = x.size // n_out
    return x[: n_out * size].reshape(n_out, size).mean(axis=1)


def downsample_to_rate(values: np.ndarray, original_rate_hz: float, target_rate_hz: float) -> tuple[np.ndarray, int]:
    """Validate the rate, derive the factor and downsample. Returns (values, factor)."""
    factor = bin_factor(original_rate_hz, target_rate_hz)
    return boxcar_downsample(values, factor), factor
