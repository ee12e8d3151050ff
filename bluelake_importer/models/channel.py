from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class ChannelData:
    """
    One channel read from the container, after optional downsampling.

    Notes
    - 'values' is always float64.
    - 'sampling_rate_hz' is the effective rate of 'values' (the target rate when
      downsampled, the original rate otherwise).
    - start/stop times are the raw Bluelake timestamps in nanoseconds.
    """
    name: str
    path: str
    values: np.ndarray
    sampling_rate_hz: float
    start_time_ns: Optional[int] = None
    stop_time_ns: Optional[int] = None
    kind: Optional[str] = None
    original_rate_hz: Optional[float] = None
    downsample_factor: int = 1
    warnings: Tuple[str, ...] = ()

    @property
    def n_samples(self) -> int:
        return int(self.values.shape[0])

    @property
    def downsampled(self) -> bool:
        return self.downsample_factor > 1 or (
            self.original_rate_hz is not None and self.original_rate_hz != self.sampling_rate_hz
        )
