"""Import configuration -- bundles every parameter that affects an import run.

An ImportConfig groups the input file, the downsampling request and the
Bluelake layout names into one frozen dataclass.  It can be:

- Constructed with only a path (all layout names default to Bluelake's)
- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict for JSON provenance
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Tuple
import math
import numbers


DEFAULT_TARGET_RATE_HZ = 10000.0


@dataclass(frozen=True)
class ImportConfig:
    """Frozen configuration for one import run.

    Required fields
    ---------------
    path : str
        Path to the Bluelake ``.h5`` file.

    Optional fields (Bluelake defaults)
    -----------------------------------
    downsample : bool
        If True, every channel is box-car averaged down to ``target_rate_hz``.
    target_rate_hz : float
        Requested output rate in Hz (only used when ``downsample`` is True).
    format_attribute : str
        Root attribute whose presence identifies a Bluelake file.
    channel_group : str
        Top-level group holding the high-frequency force channels.
    required_channels : tuple of str
        Channels that must exist in ``channel_group``. The first one is the
        primary channel: it defines the time axis and the marker time origin.
    auxiliary_channels : tuple of str
        Container paths (relative to the root) of extra channels appended to the
        table when present, e.g. ``"Trap position/1X"``.
    calibration_group : str
        Top-level group holding numbered calibration sub-groups.
    marker_group : str
        Top-level group holding named markers.
    marker_color, marker_opacity :
        Display defaults for converted region markers.
    """

    path: str

    downsample: bool = False
    target_rate_hz: float = DEFAULT_TARGET_RATE_HZ

    format_attribute: str = "Bluelake version"
    channel_group: str = "Force HF"
    required_channels: Tuple[str, ...] = ("Force 1x", "Force 2x")
    auxiliary_channels: Tuple[str, ...] = ("Trap position/1X",)
    calibration_group: str = "Calibration"
    marker_group: str = "Marker"

    marker_color: str = "#0000FF"
    marker_opacity: float = 0.2

    def __post_init__(self) -> None:
        # Callers may pass lists or Path objects
        object.__setattr__(self, "path", str(self.path))
        for name in ("required_channels", "auxiliary_channels"):
            value = getattr(self, name)
            if isinstance(value, str):
                value = (value,)
            object.__setattr__(self, name, tuple(value))

    @property
    def primary_channel(self) -> str:
        return self.required_channels[0]

    def channel_path(self, channel: str) -> str:
        return f"{self.channel_group}/{channel}"

    def validate(self) -> None:
        """Reject programmatic misuse (not file problems)."""
        if not self.required_channels:
            raise ValueError("required_channels must name at least one channel")
        if not isinstance(self.target_rate_hz, numbers.Real) or not math.isfinite(self.target_rate_hz):
            raise ValueError(f"target_rate_hz must be a finite number, got {self.target_rate_hz!r}")
        if not 0.0 <= float(self.marker_opacity) <= 1.0:
            raise ValueError(f"marker_opacity must be within [0, 1], got {self.marker_opacity}")

    @property
    def source_name(self) -> str:
        return Path(self.path).name

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict (tuples become lists)."""
        d = asdict(self)
        d["required_channels"] = list(d["required_channels"])
        d["auxiliary_channels"] = list(d["auxiliary_channels"])
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ImportConfig:
        """Reconstruct from a dict (e.g. loaded from JSON)."""
        return cls(**dict(d))
