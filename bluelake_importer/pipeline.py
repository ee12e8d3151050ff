"""Bluelake h5 import pipeline.

``run_import`` takes an :class:`~bluelake_importer.models.config.ImportConfig`
and returns an :class:`ImportResult`. Stages, in order:

1) structural validation (may abort the run)
2) file-level attributes and per-channel calibration blocks -> MetadataRecord
3) required channels, then optional auxiliary channels (with optional downsampling)
4) table assembly -> MoleculeRecord linked to the MetadataRecord by UID
5) marker conversion, regions attached to the MoleculeRecord

Import is all-or-nothing: when any stage fails, the result carries the typed
error and no record; nothing is put into the archive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple
import logging
import time

from bluelake_importer.analysis.assemble import assemble_molecule
from bluelake_importer.analysis.markers import convert_markers
from bluelake_importer.archive import ArchiveSink
from bluelake_importer.errors import ImportFailure
from bluelake_importer.ingest.attributes import FILE_FIELDS, harvest_calibration, harvest_into
from bluelake_importer.ingest.channels import load_channel
from bluelake_importer.ingest.container import H5Container, SourceContainer, normalize_path
from bluelake_importer.ingest.validate import validate_structure
from bluelake_importer.models.channel import ChannelData
from bluelake_importer.models.config import DEFAULT_TARGET_RATE_HZ, ImportConfig
from bluelake_importer.models.records import MetadataRecord, MoleculeRecord, now_iso


log = logging.getLogger(__name__)


@dataclass
class ImportContext:
    """State threaded through the stages of one run."""

    config: ImportConfig
    container: SourceContainer
    metadata: MetadataRecord
    channels: List[ChannelData] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        log.warning(message)
        self.warnings.append(message)


@dataclass(frozen=True)
class ImportResult:
    """
    Outcome of one import run.

    Exactly one of (metadata and molecule) or error is set.
    """
    metadata: Optional[MetadataRecord] = None
    molecule: Optional[MoleculeRecord] = None
    error: Optional[ImportFailure] = None
    warnings: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Tuple[MetadataRecord, MoleculeRecord]:
        """Return (metadata, molecule) or raise the stored failure."""
        if self.error is not None:
            raise self.error
        assert self.metadata is not None and self.molecule is not None
        return self.metadata, self.molecule


def auxiliary_column_name(path: str) -> str:
    """
    >>> auxiliary_column_name("/Trap position/1X")
    'Trap position 1X'
    """
    return normalize_path(path).strip("/").replace("/", " ")


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def _harvest_metadata(ctx: ImportContext) -> None:
    cfg = ctx.config
    md = ctx.metadata
    harvest_into(md, ctx.container, "/", FILE_FIELDS)
    for w in harvest_calibration(md, ctx.container, cfg.calibration_group, cfg.required_channels):
        ctx.warn(w)


def _load_required(ctx: ImportContext) -> None:
    cfg = ctx.config
    for name in cfg.required_channels:
        ch = load_channel(
            ctx.container,
            cfg.channel_path(name),
            name=name,
            downsample=cfg.downsample,
            target_rate_hz=cfg.target_rate_hz,
        )
        ctx.warnings.extend(ch.warnings)
        ctx.channels.append(ch)


def _load_auxiliary(ctx: ImportContext) -> None:
    cfg = ctx.config
    primary = ctx.channels[0]
    for path in cfg.auxiliary_channels:
        if not ctx.container.has_dataset(path):
            log.info("Auxiliary channel %s not present", normalize_path(path))
            continue
        ch = load_channel(
            ctx.container,
            path,
            name=auxiliary_column_name(path),
            downsample=cfg.downsample,
            target_rate_hz=cfg.target_rate_hz,
        )
        if ch.sampling_rate_hz != primary.sampling_rate_hz:
            ctx.warn(
                f"auxiliary channel '{ch.path}' skipped: sampled at {ch.sampling_rate_hz:g} Hz, "
                f"'{primary.name}' at {primary.sampling_rate_hz:g} Hz"
            )
            continue
        ctx.warnings.extend(ch.warnings)
        ctx.channels.append(ch)


def _add_notes(ctx: ImportContext) -> None:
    cfg = ctx.config
    md = ctx.metadata
    md.add_note(f"Imported from {cfg.path} on {now_iso()}")
    if cfg.downsample:
        md.add_note(f"Downsampled to {cfg.target_rate_hz:g} Hz by box-car averaging")
    else:
        md.add_note("Not downsampled: channels kept at their recorded sample rate")
    description = md.parameters.get("Description")
    if description:
        md.add_note(str(description))


def import_container(ctx: ImportContext) -> MoleculeRecord:
    """Run all stages against an open container. Raises ImportFailure."""
    cfg = ctx.config

    report = validate_structure(
        ctx.container,
        format_attribute=cfg.format_attribute,
        channel_group=cfg.channel_group,
        required_channels=cfg.required_channels,
    )
    report.raise_if_errors()
    ctx.warnings.extend(report.warnings)

    _harvest_metadata(ctx)
    _load_required(ctx)
    _load_auxiliary(ctx)

    molecule, warnings = assemble_molecule(ctx.metadata.uid, ctx.channels)
    ctx.warnings.extend(warnings)

    regions, warnings = convert_markers(
        ctx.container,
        ctx.channels[0].start_time_ns,
        marker_group=cfg.marker_group,
        color=cfg.marker_color,
        opacity=cfg.marker_opacity,
    )
    ctx.warnings.extend(warnings)
    _add_notes(ctx)
    return molecule.with_regions(tuple(regions))


def run_import(config: ImportConfig, archive: Optional[ArchiveSink] = None) -> ImportResult:
    """
    Import one Bluelake file.

    Parameters
    ----------
    config:
        Input path, downsampling request and layout names.
    archive:
        Optional sink; on success the metadata record and then the molecule
        record are put into it. Nothing is put on failure.

    Returns
    -------
    ImportResult
        Records on success, the typed error otherwise.
    """
    config.validate()
    t0 = time.perf_counter()
    log.info(
        "Bluelake import: %s (downsample=%s, target rate=%g Hz)",
        config.path, config.downsample, config.target_rate_hz,
    )

    try:
        with H5Container.open(config.path) as container:
            ctx = ImportContext(
                config=config,
                container=container,
                metadata=MetadataRecord(source_path=config.path),
            )
            molecule = import_container(ctx)
    except ImportFailure as e:
        log.error("Import of %s failed: %s", config.path, e)
        return ImportResult(error=e)

    if archive is not None:
        archive.put_metadata(ctx.metadata)
        archive.put(molecule)

    log.info(
        "Imported %d rows x %d columns, %d region(s) in %.2f s",
        molecule.n_rows, len(molecule.columns), len(molecule.regions), time.perf_counter() - t0,
    )
    return ImportResult(
        metadata=ctx.metadata,
        molecule=molecule,
        warnings=tuple(ctx.warnings),
    )


def import_h5(
    path: str,
    *,
    downsample: bool = False,
    target_rate_hz: float = DEFAULT_TARGET_RATE_HZ,
    archive: Optional[ArchiveSink] = None,
    **overrides: Any,
) -> ImportResult:
    """Shortcut for ``run_import(ImportConfig(path, downsample, target_rate_hz, **overrides))``."""
    config = ImportConfig(path=path, downsample=downsample, target_rate_hz=target_rate_hz, **overrides)
    return run_import(config, archive=archive)
