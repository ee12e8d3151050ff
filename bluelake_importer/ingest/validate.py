"""
Structural validation of a Bluelake container.

Runs before anything is copied out of the file. Checks, in order, and stops at
the first failure:

1) the root format attribute exists           -> FormatMismatch
2) the top-level channel group exists         -> MissingGroup
3) every required channel exists in the group -> MissingChannel

Validation never mutates anything; it only produces a :class:`ValidationResult`.

Examples
--------
>>> from bluelake_importer.ingest.validate import validate_structure
>>> with H5Container.open("run.h5") as c:              # doctest: +SKIP
...     validate_structure(c).raise_if_errors()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from bluelake_importer.errors import FormatMismatch, ImportFailure, MissingChannel, MissingGroup
from bluelake_importer.ingest.container import SourceContainer, join_path


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of validating one container.

    Attributes
    ----------
    ok:
        True if no errors were found.
    errors:
        Fatal issues as text; the caller should stop the pipeline.
    warnings:
        Non-fatal observations (e.g. unexpected extra channels).
    error:
        The typed failure for the first fatal issue, if any.
    """
    ok: bool
    errors: List[str]
    warnings: List[str]
    error: Optional[ImportFailure] = None

    def raise_if_errors(self) -> None:
        """Raise the typed failure if validation failed."""
        if self.error is not None:
            raise self.error


def _fail(error: ImportFailure, warnings: List[str]) -> ValidationResult:
    return ValidationResult(ok=False, errors=[str(error)], warnings=warnings, error=error)


def validate_structure(
    container: SourceContainer,
    *,
    format_attribute: str = "Bluelake version",
    channel_group: str = "Force HF",
    required_channels: Sequence[str] = ("Force 1x", "Force 2x"),
) -> ValidationResult:
    """
    Check that a container has the Bluelake force-spectroscopy layout.

    Parameters
    ----------
    container:
        Open source container.
    format_attribute:
        Root attribute identifying the format.
    channel_group:
        Top-level group that must hold the required channels.
    required_channels:
        Channel names that must all be present in ``channel_group``.

    Returns
    -------
    ValidationResult
    """
    warnings: List[str] = []

    if not container.has_attribute("/", format_attribute):
        return _fail(FormatMismatch(format_attribute, getattr(container, "source", None)), warnings)

    group_path = join_path(channel_group)
    if not container.has_group(group_path):
        return _fail(MissingGroup(channel_group), warnings)

    present = container.members(group_path)
    missing = [ch for ch in required_channels if ch not in present]
    if missing:
        return _fail(MissingChannel(channel_group, missing), warnings)

    not_datasets = [ch for ch in required_channels if not container.has_dataset(join_path(group_path, ch))]
    if not_datasets:
        return _fail(MissingChannel(channel_group, not_datasets), warnings)

    extras = [m for m in present if m not in required_channels]
    if extras:
        warnings.append(f"channels in '/{channel_group}' not imported: {extras}")

    return ValidationResult(ok=True, errors=[], warnings=warnings)
