from __future__ import annotations

from typing import List, Optional
import logging
import math

from bluelake_importer.analysis.downsample import downsample_to_rate
from bluelake_importer.errors import HarvestFailure
from bluelake_importer.ingest.attributes import FieldSpec, lookup_attribute
from bluelake_importer.ingest.container import SourceContainer, normalize_path
from bluelake_importer.models.channel import ChannelData


log = logging.getLogger(__name__)

SAMPLE_RATE = FieldSpec("Sample rate (Hz)", "float")
START_TIME = FieldSpec("Start time (ns)", "int")
STOP_TIME = FieldSpec("Stop time (ns)", "int")
KIND = FieldSpec("Kind", "text")


def load_channel(
    container: SourceContainer,
    path: str,
    *,
    name: Optional[str] = None,
    downsample: bool = False,
    target_rate_hz: float = 10000.0,
) -> ChannelData:
    """
    Read one channel and optionally box-car average it down to ``target_rate_hz``.

    Contract:
      - the dataset must carry a positive 'Sample rate (Hz)' attribute
      - 'Start time (ns)', 'Stop time (ns)' and 'Kind' are optional
      - without downsampling the raw array and original rate are returned unchanged
      - with downsampling the rate bounds are checked before any averaging
        (InvalidDownsampleRate), and the effective rate becomes the target rate
    """
    p = normalize_path(path)
    ch_name = name if name is not None else p.rsplit("/", 1)[-1]

    rate = lookup_attribute(container, p, SAMPLE_RATE)
    if rate is None:
        raise HarvestFailure(p, "missing sample rate attribute", key=SAMPLE_RATE.name)
    if not rate > 0 or not math.isfinite(rate):
        raise HarvestFailure(p, f"sample rate must be a finite number > 0, got {rate}", key=SAMPLE_RATE.name)

    start_ns = lookup_attribute(container, p, START_TIME)
    stop_ns = lookup_attribute(container, p, STOP_TIME)
    kind = lookup_attribute(container, p, KIND)

    warnings: List[str] = []
    values = container.read_array(p)
    n_raw = int(values.size)

    if not downsample:
        log.info("Loaded %s: %d samples at %g Hz", p, n_raw, rate)
        return ChannelData(
            name=ch_name,
            path=p,
            values=values,
            sampling_rate_hz=float(rate),
            start_time_ns=start_ns,
            stop_time_ns=stop_ns,
            kind=kind,
            original_rate_hz=float(rate),
            warnings=tuple(warnings),
        )

    out, factor = downsample_to_rate(values, float(rate), float(target_rate_hz))
    if out.size:
        dropped = n_raw - out.size * (n_raw // out.size)
        if dropped:
            warnings.append(f"{ch_name}: dropped {dropped} trailing sample(s) not filling a complete bin")
    else:
        warnings.append(f"{ch_name}: {n_raw} sample(s) is fewer than one bin of {factor}; channel is empty")
    log.info(
        "Loaded %s: %d samples at %g Hz -> %d samples at %g Hz (bin factor %d)",
        p, n_raw, rate, out.size, target_rate_hz, factor,
    )
    return ChannelData(
        name=ch_name,
        path=p,
        values=out,
        sampling_rate_hz=float(target_rate_hz),
        start_time_ns=start_ns,
        stop_time_ns=stop_ns,
        kind=kind,
        original_rate_hz=float(rate),
        downsample_factor=factor,
        warnings=tuple(warnings),
    )
