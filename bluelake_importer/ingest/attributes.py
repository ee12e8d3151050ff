"""Typed scalar attribute harvesting.

Attributes are looked up per field: a field that is absent at the given path
is simply omitted (``lookup_attribute`` returns ``None``), while a reader
failure or an attribute that cannot be converted to its declared type raises
:class:`~bluelake_importer.errors.HarvestFailure`.

Harvested values are stored under ``"<scope>_<field>"`` where scope is the
channel or block name; file-level attributes are harvested without a scope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence, Tuple, Union
import logging

import numpy as np

from bluelake_importer.errors import HarvestFailure
from bluelake_importer.ingest.container import SourceContainer, join_path, normalize_path
from bluelake_importer.models.records import MetadataRecord, Scalar


log = logging.getLogger(__name__)

FieldKind = Literal["text", "int", "uint", "float"]


@dataclass(frozen=True)
class FieldSpec:
    """A known attribute name and the canonical type it is read as."""

    name: str
    kind: FieldKind = "float"


def _fields(kind: FieldKind, *names: str) -> Tuple[FieldSpec, ...]:
    return tuple(FieldSpec(n, kind) for n in names)


# Root attributes of a Bluelake export
FILE_FIELDS: Tuple[FieldSpec, ...] = (
    _fields("text", "Bluelake version", "GUID", "Description", "Experiment")
    + _fields("int", "File format version")
    + _fields("uint", "Export time (ns)")
)

# Per-channel attributes of a Bluelake force calibration block
CALIBRATION_FIELDS: Tuple[FieldSpec, ...] = (
    _fields("text", "Kind")
    + _fields("uint", "Start time (ns)", "Stop time (ns)")
    + _fields("int", "Max iterations", "Number of samples", "Points per block")
    + _fields(
        "float",
        "Bead diameter (um)",
        "D (V^2/s)",
        "Fit range (max.) (Hz)",
        "Fit range (min.) (Hz)",
        "Fit tolerance",
        "Offset (pN)",
        "Rd (um/V)",
        "Response (pN/V)",
        "Rf (pN/V)",
        "Sign",
        "Temperature (C)",
        "Viscosity (Pa*s)",
        "alpha",
        "backing (%)",
        "chi_squared_per_deg",
        "err_D",
        "err_alpha",
        "err_backing",
        "err_fc",
        "fc (Hz)",
        "kappa (pN/nm)",
    )
)


def scoped_key(scope: Optional[str], field_name: str) -> str:
    """
    >>> scoped_key("Force 1x", "kappa (pN/nm)")
    'Force 1x_kappa (pN/nm)'
    >>> scoped_key(None, "GUID")
    'GUID'
    """
    return field_name if not scope else f"{scope}_{field_name}"


def _unwrap(value: object) -> object:
    # Scalar attributes sometimes come back as 0-d or length-1 arrays
    if isinstance(value, np.ndarray):
        if value.size != 1:
            raise ValueError(f"expected a scalar, got array of shape {value.shape}")
        value = value.reshape(-1)[0]
    if isinstance(value, np.generic):
        value = value.item()
    return value


def coerce(value: object, kind: FieldKind) -> Scalar:
    """Convert a raw attribute value to its canonical Python type."""
    v = _unwrap(value)
    if kind == "text":
        if isinstance(v, bytes):
            return v.decode("utf-8", errors="replace")
        return str(v)
    if isinstance(v, bytes):
        v = v.decode("utf-8").strip()
    if kind == "float":
        return float(v)
    if isinstance(v, float):
        if not v.is_integer():
            raise ValueError(f"expected an integer, got {v!r}")
        v = int(v)
    iv = int(v)
    if kind == "uint" and iv < 0:
        raise ValueError(f"expected an unsigned integer, got {iv}")
    return iv


def lookup_attribute(container: SourceContainer, path: str, spec: Union[FieldSpec, str]) -> Optional[Scalar]:
    """
    Read one attribute with its declared type.

    Returns None when the attribute (or the object at ``path``) does not exist.
    """
    if isinstance(spec, str):
        spec = FieldSpec(spec, "text")
    p = normalize_path(path)
    if not container.has_attribute(p, spec.name):
        return None
    raw = container.attribute(p, spec.name)
    try:
        return coerce(raw, spec.kind)
    except (TypeError, ValueError, UnicodeDecodeError) as e:
        raise HarvestFailure(p, f"cannot read as {spec.kind}: {e}", key=spec.name) from e


def harvest_attributes(
    container: SourceContainer,
    path: str,
    fields: Sequence[FieldSpec],
    scope: Optional[str] = None,
) -> Dict[str, Scalar]:
    """Return only the fields present at ``path``, keyed by :func:`scoped_key`."""
    out: Dict[str, Scalar] = {}
    for spec in fields:
        value = lookup_attribute(container, path, spec)
        if value is not None:
            out[scoped_key(scope, spec.name)] = value
    return out


def harvest_into(
    target: MetadataRecord,
    container: SourceContainer,
    path: str,
    fields: Sequence[FieldSpec],
    scope: Optional[str] = None,
) -> Dict[str, Scalar]:
    """Harvest and merge into ``target`` in place; returns what was added."""
    values = harvest_attributes(container, path, fields, scope=scope)
    target.update_parameters(values)
    return values


# ---------------------------------------------------------------------------
# Calibration blocks
# ---------------------------------------------------------------------------


def _calibration_sort_key(name: str) -> Tuple[int, float, str]:
    # Bluelake numbers calibration sub-groups ("1", "2", ...); keep others after them
    try:
        return (0, float(name), name)
    except ValueError:
        return (1, 0.0, name)


def find_calibration_block(container: SourceContainer, calibration_group: str, channel: str) -> Optional[str]:
    """
    Locate the calibration block of one channel.

    The latest calibration sub-group (numeric order) that contains ``channel``
    wins. Returns the block path or None if no sub-group has the channel.
    """
    root = join_path(calibration_group)
    found: Optional[str] = None
    for sub in sorted(container.members(root), key=_calibration_sort_key):
        candidate = join_path(root, sub, channel)
        if container.has_group(candidate) or container.has_dataset(candidate):
            found = candidate
    return found


def harvest_calibration(
    target: MetadataRecord,
    container: SourceContainer,
    calibration_group: str,
    channels: Sequence[str],
    fields: Sequence[FieldSpec] = CALIBRATION_FIELDS,
) -> List[str]:
    """
    Copy the calibration block of every channel into ``target``.

    Returns warnings for channels without a calibration block (not an error).
    """
    warnings: List[str] = []
    for ch in channels:
        block = find_calibration_block(container, calibration_group, ch)
        if block is None:
            warnings.append(f"no calibration block for '{ch}' under '/{calibration_group}'")
            continue
        added = harvest_into(target, container, block, fields, scope=ch)
        log.info("Calibration %s: %d field(s) from %s", ch, len(added), block)
    return warnings
