"""Ingest package - container access and everything read from the file.

This package handles:
- Path-based, read-only access to the h5 container (h5py)
- Structural validation of the Bluelake layout
- Typed attribute harvesting (file attributes, calibration blocks)
- Channel loading (with optional downsampling)

Design principle:
- Reader failures surface as HarvestFailure, exactly once
- Absent optional attributes are omitted, never null-filled
"""
from .container import H5Container, SourceContainer
from .validate import ValidationResult, validate_structure

__all__ = [
    "H5Container",
    "SourceContainer",
    "ValidationResult",
    "validate_structure",
]
