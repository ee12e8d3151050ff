"""Path-addressed, read-only access to a hierarchical source container.

The importer core only talks to the :class:`SourceContainer` protocol:
typed attribute reads and numeric array reads addressed by slash-delimited
paths. :class:`H5Container` implements it on top of h5py.

Every reader-level exception is converted exactly once, here, into
:class:`~bluelake_importer.errors.HarvestFailure`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Protocol

import h5py
import numpy as np

from bluelake_importer.errors import HarvestFailure


# Exceptions h5py raises for unreadable objects/attributes
_READER_ERRORS = (OSError, KeyError, RuntimeError, TypeError, ValueError)


def normalize_path(path: str) -> str:
    """
    Return an absolute container path.

    >>> normalize_path("")
    '/'
    >>> normalize_path("Force HF/Force 1x/")
    '/Force HF/Force 1x'
    """
    p = str(path).strip("/")
    return "/" + p if p else "/"


def join_path(*parts: str) -> str:
    """
    Join path components with '/'.

    >>> join_path("/", "Marker", "Bead 1")
    '/Marker/Bead 1'
    """
    return normalize_path("/".join(str(p).strip("/") for p in parts if str(p).strip("/")))


class SourceContainer(Protocol):
    """Read-only view of a hierarchical container."""

    source: str

    def has_group(self, path: str) -> bool: ...

    def has_dataset(self, path: str) -> bool: ...

    def has_attribute(self, path: str, key: str) -> bool: ...

    def attribute(self, path: str, key: str) -> Any: ...

    def members(self, path: str) -> List[str]: ...

    def read_array(self, path: str) -> np.ndarray: ...


class H5Container:
    """
    h5py-backed :class:`SourceContainer`.

    Usage:
        with H5Container.open("run.h5") as c:
            c.attribute("/", "Bluelake version")

    The file is opened read-only; nothing here ever writes to it.
    """

    def __init__(self, handle: h5py.File, source: Optional[str] = None) -> None:
        self._f = handle
        self.source = source if source is not None else str(handle.filename)

    @classmethod
    def open(cls, file_path: str | Path) -> H5Container:
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise HarvestFailure(str(path), "file does not exist")
        try:
            handle = h5py.File(path, "r")
        except OSError as e:
            raise HarvestFailure(str(path), f"cannot open as HDF5 ({e})") from e
        return cls(handle, source=str(path))

    def close(self) -> None:
        self._f.close()

    def __enter__(self) -> H5Container:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _get(self, path: str) -> Any:
        p = normalize_path(path)
        try:
            return self._f.get(p)
        except _READER_ERRORS as e:
            raise HarvestFailure(p, f"{type(e).__name__}: {e}") from e

    def has_group(self, path: str) -> bool:
        return isinstance(self._get(path), h5py.Group)

    def has_dataset(self, path: str) -> bool:
        return isinstance(self._get(path), h5py.Dataset)

    def members(self, path: str) -> List[str]:
        """Names of the direct children of a group (empty if the group is absent)."""
        obj = self._get(path)
        if not isinstance(obj, h5py.Group):
            return []
        return list(obj.keys())

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def has_attribute(self, path: str, key: str) -> bool:
        obj = self._get(path)
        if obj is None:
            return False
        try:
            return key in obj.attrs
        except _READER_ERRORS as e:
            raise HarvestFailure(normalize_path(path), f"{type(e).__name__}: {e}", key=key) from e

    def attribute(self, path: str, key: str) -> Any:
        """Raw attribute value; missing objects or keys are reader failures here."""
        p = normalize_path(path)
        obj = self._get(p)
        if obj is None:
            raise HarvestFailure(p, "no such object", key=key)
        try:
            return obj.attrs[key]
        except _READER_ERRORS as e:
            raise HarvestFailure(p, f"{type(e).__name__}: {e}", key=key) from e

    # ------------------------------------------------------------------
    # Arrays
    # ------------------------------------------------------------------

    def read_array(self, path: str) -> np.ndarray:
        """Read a whole numeric dataset as a 1-D float64 array."""
        p = normalize_path(path)
        obj = self._get(p)
        if not isinstance(obj, h5py.Dataset):
            raise HarvestFailure(p, "not a dataset")
        try:
            arr = np.asarray(obj[()], dtype=np.float64)
        except _READER_ERRORS as e:
            raise HarvestFailure(p, f"{type(e).__name__}: {e}") from e
        if arr.ndim != 1:
            raise HarvestFailure(p, f"expected a 1-D array, got shape {arr.shape}")
        return arr
