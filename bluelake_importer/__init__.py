"""Bluelake Importer -- converts Bluelake force-spectroscopy h5 files into analysis records.

This package provides tools for:
- Validating that an h5 file has the Bluelake force-channel layout
- Harvesting typed file attributes and per-channel calibration blocks
- Loading force channels, with optional box-car downsampling
- Assembling an aligned table with a derived time axis
- Converting Bluelake markers into region annotations

Key principles:
- All-or-nothing: a failed import exposes no record
- Typed failures (see ``errors``) instead of dialogs or prints
- The source file is only ever read

Main subpackages:
- ingest: container access, structural validation, attribute harvesting, channel loading
- analysis: downsampling, record assembly, marker conversion
- models: data models (ImportConfig, ChannelData, MetadataRecord, MoleculeRecord)
"""

from .errors import (
    FormatMismatch,
    HarvestFailure,
    ImportFailure,
    InvalidDownsampleRate,
    MissingChannel,
    MissingGroup,
)
from .models import ImportConfig, MetadataRecord, MoleculeRecord, RegionMarker
from .pipeline import ImportResult, import_h5, run_import

__all__ = [
    "FormatMismatch",
    "HarvestFailure",
    "ImportFailure",
    "InvalidDownsampleRate",
    "MissingChannel",
    "MissingGroup",
    "ImportConfig",
    "MetadataRecord",
    "MoleculeRecord",
    "RegionMarker",
    "ImportResult",
    "import_h5",
    "run_import",
]
