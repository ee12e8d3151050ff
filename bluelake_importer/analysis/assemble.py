from __future__ import annotations

"""Record assembly: aligned channel columns -> one MoleculeRecord.

The first channel is the primary channel. Its effective sampling rate defines
the time column

    t[i] = i / rate_hz

and every column is truncated to the shortest channel so that all columns of
the table share one row count. Channels are only read, never modified.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from bluelake_importer.models.channel import ChannelData
from bluelake_importer.models.records import TIME_COLUMN, MoleculeRecord, RegionMarker, Scalar, new_uid


def time_axis(n_rows: int, rate_hz: float) -> np.ndarray:
    """Seconds since the first sample: ``arange(n_rows) / rate_hz``."""
    if not rate_hz > 0:
        raise ValueError(f"rate_hz must be > 0, got {rate_hz}")
    return np.arange(int(n_rows), dtype=np.float64) / float(rate_hz)


def build_table(
    channels: Sequence[ChannelData],
    *,
    time_column: str = TIME_COLUMN,
) -> Tuple[pd.DataFrame, List[str]]:
    """
    Align channels into one table.

    Returns
    -------
    table:
        Time column first, then one float64 column per channel (named after it).
    warnings:
        Truncation and rate-mismatch notes.
    """
    if not channels:
        raise ValueError("No channels provided")

    names = [ch.name for ch in channels]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes or time_column in names:
        raise ValueError(f"Column names must be unique and differ from '{time_column}': {names}")

    warnings: List[str] = []
    primary = channels[0]
    rate = float(primary.sampling_rate_hz)

    for ch in channels[1:]:
        if float(ch.sampling_rate_hz) != rate:
            warnings.append(
                f"'{ch.name}' sampled at {ch.sampling_rate_hz:g} Hz, time axis uses "
                f"'{primary.name}' at {rate:g} Hz"
            )

    n_rows = min(ch.n_samples for ch in channels)
    for ch in channels:
        if ch.n_samples > n_rows:
            warnings.append(f"'{ch.name}' truncated from {ch.n_samples} to {n_rows} rows")

    data: Dict[str, np.ndarray] = {time_column: time_axis(n_rows, rate)}
    for ch in channels:
        data[ch.name] = np.asarray(ch.values[:n_rows], dtype=np.float64)
    return pd.DataFrame(data), warnings


def channel_parameters(ch: ChannelData) -> Dict[str, Scalar]:
    """Per-channel scalars attached to the MoleculeRecord, keyed ``"<channel>_<field>"``."""
    params: Dict[str, Scalar] = {}
    if ch.kind is not None:
        params[f"{ch.name}_Kind"] = ch.kind
    params[f"{ch.name}_Sample rate (Hz)"] = float(ch.sampling_rate_hz)
    if ch.start_time_ns is not None:
        params[f"{ch.name}_Start time (ns)"] = int(ch.start_time_ns)
    if ch.stop_time_ns is not None:
        params[f"{ch.name}_Stop time (ns)"] = int(ch.stop_time_ns)
    if ch.downsampled:
        params[f"{ch.name}_Original sample rate (Hz)"] = float(ch.original_rate_hz)
        params[f"{ch.name}_Downsample factor"] = int(ch.downsample_factor)
    return params


def assemble_molecule(
    metadata_uid: str,
    channels: Sequence[ChannelData],
    *,
    regions: Sequence[RegionMarker] = (),
    uid: Optional[str] = None,
) -> Tuple[MoleculeRecord, List[str]]:
    """
    Build the MoleculeRecord of one import.

    Parameters
    ----------
    metadata_uid:
        UID of the MetadataRecord this molecule belongs to.
    channels:
        Primary channel first, then the other required and auxiliary channels.
    regions:
        Region markers to attach (usually attached later, see
        :meth:`MoleculeRecord.with_regions`).
    uid:
        Explicit UID; a fresh one is generated when omitted.
    """
    table, warnings = build_table(channels)
    params: Dict[str, Scalar] = {}
    for ch in channels:
        params.update(channel_parameters(ch))
    record = MoleculeRecord(
        uid=uid or new_uid(),
        metadata_uid=metadata_uid,
        table=table,
        parameters=params,
        regions=tuple(regions),
    )
    return record, warnings
