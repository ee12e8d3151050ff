"""Typed failures of a Bluelake import run.

Every failure is terminal for the run: no record is produced and nothing is
committed to the archive. Absence of an optional attribute is not a failure
and is therefore not represented here.
"""

from __future__ import annotations

from typing import Iterable, Optional


class ImportFailure(Exception):
    """Base class for all import failures."""


class FormatMismatch(ImportFailure):
    """The container lacks the root attribute that identifies the format."""

    def __init__(self, attribute: str, source: Optional[str] = None) -> None:
        self.attribute = attribute
        self.source = source
        where = f" in '{source}'" if source else ""
        super().__init__(f"Not a Bluelake file: root attribute '{attribute}' not found{where}.")


class MissingGroup(ImportFailure):
    """A required top-level group is absent."""

    def __init__(self, group: str) -> None:
        self.group = group
        super().__init__(f"Required group '/{group}' not found.")


class MissingChannel(ImportFailure):
    """One or more required channels are absent from the channel group."""

    def __init__(self, group: str, channels: Iterable[str]) -> None:
        self.group = group
        self.channels = tuple(channels)
        names = ", ".join(f"'{c}'" for c in self.channels)
        super().__init__(f"Required channel(s) {names} not found in '/{group}'.")


class InvalidDownsampleRate(ImportFailure, ValueError):
    """Target rate is below 1 Hz or above half the original sampling rate."""

    TOO_LOW = "too_low"
    TOO_HIGH = "too_high"

    def __init__(self, reason: str, target_rate_hz: float, original_rate_hz: Optional[float] = None) -> None:
        self.reason = reason
        self.target_rate_hz = target_rate_hz
        self.original_rate_hz = original_rate_hz
        if reason == self.TOO_LOW:
            msg = f"Downsample rate {target_rate_hz:g} Hz is too low; it must be at least 1 Hz."
        else:
            msg = (
                f"Downsample rate {target_rate_hz:g} Hz is too high; it must not exceed half "
                f"the original rate ({original_rate_hz:g} Hz / 2)."
            )
        super().__init__(msg)


class HarvestFailure(ImportFailure, OSError):
    """The reader failed to deliver an attribute or array."""

    def __init__(self, path: str, detail: str, key: Optional[str] = None) -> None:
        self.path = path
        self.key = key
        self.detail = detail
        target = f"{path}@{key}" if key is not None else path
        super().__init__(f"Failed to read '{target}': {detail}")
