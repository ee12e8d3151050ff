"""MetadataRecord, MoleculeRecord and RegionMarker: the two linked outputs of an import.

Design goals
------------
- One import run produces exactly one MetadataRecord and one MoleculeRecord.
- The MoleculeRecord references its MetadataRecord by UID.
- MoleculeRecord and RegionMarker are frozen; MetadataRecord only grows while the
  pipeline harvests attributes and is not touched after it has been put.
- Parameters are flat ``name -> scalar`` mappings so they can be written to
  CSV headers or JSON sidecars.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union
import uuid

import numpy as np
import pandas as pd


Scalar = Union[str, int, float]

TIME_COLUMN = "Time (s)"


def new_uid() -> str:
    """Return a fresh random record identifier."""
    return uuid.uuid4().hex


def now_iso() -> str:
    """Return current UTC time as ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _json_scalar(v: Any) -> Any:
    # h5py hands back numpy scalars
    if isinstance(v, np.generic):
        return v.item()
    return v


@dataclass(frozen=True)
class RegionMarker:
    """A named time interval annotated onto a MoleculeRecord.

    Attributes
    ----------
    name : str
        Marker name as found in the source file.
    column : str
        Column the interval refers to (the time column).
    start, stop : float
        Interval bounds in seconds, relative to the primary channel start time.
    color : str
        Display color (hex string).
    opacity : float
        Display opacity in [0, 1].
    """

    name: str
    column: str
    start: float
    stop: float
    color: str = "#0000FF"
    opacity: float = 0.2

    @property
    def duration(self) -> float:
        return self.stop - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "column": self.column,
            "start": float(self.start),
            "stop": float(self.stop),
            "color": self.color,
            "opacity": float(self.opacity),
        }


@dataclass
class MetadataRecord:
    """File-level metadata of one import.

    Attributes
    ----------
    uid : str
        Unique identifier; the MoleculeRecord of the same run references it.
    parameters : dict
        Flat ``name -> scalar`` mapping. File attributes are stored under their
        Bluelake name, calibration fields under ``"<channel>_<field>"``.
    notes : list of str
        Ordered free-text notes (import provenance, file description).
    source_path : str, optional
        Path of the imported file.
    """

    uid: str = field(default_factory=new_uid)
    parameters: Dict[str, Scalar] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)
    source_path: Optional[str] = None

    def set_parameter(self, name: str, value: Scalar) -> None:
        self.parameters[name] = value

    def update_parameters(self, values: Dict[str, Scalar]) -> None:
        self.parameters.update(values)

    def add_note(self, text: str) -> None:
        self.notes.append(str(text))

    def calibration(self, channel: str) -> Dict[str, Scalar]:
        """Return the calibration block of one channel with the scope prefix removed."""
        prefix = f"{channel}_"
        return {k[len(prefix):]: v for k, v in self.parameters.items() if k.startswith(prefix)}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "source_path": self.source_path,
            "parameters": {k: _json_scalar(v) for k, v in self.parameters.items()},
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class MoleculeRecord:
    """Per-entity measured data of one import.

    Attributes
    ----------
    uid : str
        Fresh identifier of this record.
    metadata_uid : str
        UID of the MetadataRecord created in the same run.
    table : pd.DataFrame
        Aligned columns: the time column first, then one column per channel.
    parameters : dict
        Per-channel scalars (kind, effective sampling rate, start/stop time).
    regions : tuple of RegionMarker
        Converted markers, in source order.
    """

    uid: str
    metadata_uid: str
    table: pd.DataFrame
    parameters: Dict[str, Scalar] = field(default_factory=dict)
    regions: Tuple[RegionMarker, ...] = ()

    @property
    def n_rows(self) -> int:
        return int(len(self.table))

    @property
    def columns(self) -> List[str]:
        return [str(c) for c in self.table.columns]

    def with_regions(self, regions: Tuple[RegionMarker, ...]) -> MoleculeRecord:
        """Return a copy with ``regions`` appended (same UID, same table)."""
        return replace(self, regions=tuple(self.regions) + tuple(regions))

    def region(self, name: str) -> RegionMarker:
        for r in self.regions:
            if r.name == name:
                return r
        raise KeyError(f"No region named '{name}'.")

    def to_metadata_dict(self) -> Dict[str, Any]:
        """Export everything except the table as a flat JSON-friendly dict."""
        return {
            "uid": self.uid,
            "metadata_uid": self.metadata_uid,
            "n_rows": self.n_rows,
            "columns": self.columns,
            "parameters": {k: _json_scalar(v) for k, v in self.parameters.items()},
            "regions": [r.to_dict() for r in self.regions],
        }
