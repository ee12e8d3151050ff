"""Conversion of Bluelake markers into region annotations.

Each entry under the marker group carries absolute 'Start time (ns)' and
'Stop time (ns)' attributes. They are made relative to the primary channel's
start time and converted to seconds so they line up with the table's time
column. Entries without both timestamps are skipped.
"""

from __future__ import annotations

from typing import List, Optional, Tuple
import logging

from bluelake_importer.ingest.attributes import FieldSpec, lookup_attribute
from bluelake_importer.ingest.container import SourceContainer, join_path
from bluelake_importer.models.records import TIME_COLUMN, RegionMarker


log = logging.getLogger(__name__)

NS_PER_S = 1e9

MARKER_START = FieldSpec("Start time (ns)", "int")
MARKER_STOP = FieldSpec("Stop time (ns)", "int")


def ns_to_relative_seconds(t_ns: int, origin_ns: int) -> float:
    """
    >>> ns_to_relative_seconds(3_000_000_000, 1_000_000_000)
    2.0
    """
    return (int(t_ns) - int(origin_ns)) / NS_PER_S


def convert_markers(
    container: SourceContainer,
    origin_ns: Optional[int],
    *,
    marker_group: str = "Marker",
    column: str = TIME_COLUMN,
    color: str = "#0000FF",
    opacity: float = 0.2,
) -> Tuple[List[RegionMarker], List[str]]:
    """
    Read every marker under ``marker_group`` and return RegionMarkers plus warnings.

    A missing marker group yields no regions. When ``origin_ns`` is None (the
    primary channel has no start time) no marker can be placed and all are skipped.
    """
    group = join_path(marker_group)
    names = container.members(group)
    if not names:
        return [], []
    if origin_ns is None:
        msg = f"{len(names)} marker(s) skipped: primary channel has no start time"
        log.warning(msg)
        return [], [msg]

    regions: List[RegionMarker] = []
    warnings: List[str] = []
    for name in names:
        path = join_path(group, name)
        start_ns = lookup_attribute(container, path, MARKER_START)
        stop_ns = lookup_attribute(container, path, MARKER_STOP)
        if start_ns is None or stop_ns is None:
            msg = f"marker '{name}' skipped: missing start or stop time"
            log.warning(msg)
            warnings.append(msg)
            continue
        regions.append(
            RegionMarker(
                name=str(name),
                column=column,
                start=ns_to_relative_seconds(start_ns, origin_ns),
                stop=ns_to_relative_seconds(stop_ns, origin_ns),
                color=color,
                opacity=float(opacity),
            )
        )
    log.info("Converted %d of %d marker(s)", len(regions), len(names))
    return regions, warnings
