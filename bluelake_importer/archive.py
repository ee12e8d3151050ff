"""Hand-off of finished records to an archive.

The persistent archive format is not part of this package. Anything with
``put_metadata`` and ``put`` methods can receive the records of an import;
:class:`MemoryArchive` is the in-process implementation used by the CLI and
the tests.
"""

from __future__ import annotations

from typing import Dict, List, Protocol

from bluelake_importer.models.records import MetadataRecord, MoleculeRecord


class ArchiveSink(Protocol):
    def put_metadata(self, metadata: MetadataRecord) -> None: ...

    def put(self, molecule: MoleculeRecord) -> None: ...


class MemoryArchive:
    """
    Keeps records in memory, keyed by UID.

    Rules:
      - a UID can only be put once (records are not mutated after put)
      - a molecule is only accepted if its metadata record was put first
    """

    def __init__(self) -> None:
        self.metadata: Dict[str, MetadataRecord] = {}
        self.molecules: Dict[str, MoleculeRecord] = {}

    def put_metadata(self, metadata: MetadataRecord) -> None:
        if metadata.uid in self.metadata:
            raise ValueError(f"Metadata record '{metadata.uid}' already in archive.")
        self.metadata[metadata.uid] = metadata

    def put(self, molecule: MoleculeRecord) -> None:
        if molecule.uid in self.molecules:
            raise ValueError(f"Molecule record '{molecule.uid}' already in archive.")
        if molecule.metadata_uid not in self.metadata:
            raise KeyError(f"Molecule '{molecule.uid}' references unknown metadata '{molecule.metadata_uid}'.")
        self.molecules[molecule.uid] = molecule

    def molecules_for(self, metadata_uid: str) -> List[MoleculeRecord]:
        return [m for m in self.molecules.values() if m.metadata_uid == metadata_uid]

    def __len__(self) -> int:
        return len(self.molecules)
