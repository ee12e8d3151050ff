"""Command-line entry point: import one Bluelake h5 file.

    python -m bluelake_importer.cli run.h5 --downsample --rate 1000 --out-dir out/

Prints a compact summary. With ``--out-dir`` the table is written as
``<stem>_<uid>.csv`` and the records (without the table) as a JSON sidecar
``<stem>_<uid>.json``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence
import json
import logging

from bluelake_importer.archive import MemoryArchive
from bluelake_importer.models.config import DEFAULT_TARGET_RATE_HZ, ImportConfig
from bluelake_importer.pipeline import ImportResult, run_import


def write_outputs(result: ImportResult, out_dir: str | Path, stem: str) -> tuple[Path, Path]:
    """Write the table CSV and the JSON sidecar of a successful import."""
    metadata, molecule = result.unwrap()
    out = Path(out_dir).expanduser()
    out.mkdir(parents=True, exist_ok=True)
    csv_path = out / f"{stem}_{molecule.uid}.csv"
    json_path = out / f"{stem}_{molecule.uid}.json"
    molecule.table.to_csv(csv_path, index=False)
    sidecar = {
        "metadata": metadata.to_dict(),
        "molecule": molecule.to_metadata_dict(),
        "warnings": list(result.warnings),
    }
    json_path.write_text(json.dumps(sidecar, indent=2), encoding="utf-8")
    return csv_path, json_path


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse

    p = argparse.ArgumentParser(
        prog="python -m bluelake_importer.cli",
        description="Import a Bluelake force-spectroscopy h5 file into a metadata/molecule record pair.",
    )
    p.add_argument("file", help="Bluelake .h5 file")
    p.add_argument("--downsample", action="store_true", help="Box-car average all channels to --rate")
    p.add_argument("--rate", type=float, default=DEFAULT_TARGET_RATE_HZ, help="Target rate in Hz (default: %(default)g)")
    p.add_argument(
        "--aux",
        action="append",
        default=None,
        help="Auxiliary channel path, repeatable (default: 'Trap position/1X')",
    )
    p.add_argument("--out-dir", default=None, help="Write <stem>_<uid>.csv and .json here")
    p.add_argument("-v", "--verbose", action="store_true", help="Log stage progress")

    ns = p.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=logging.INFO if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if ns.aux is not None:
        overrides["auxiliary_channels"] = tuple(ns.aux)
    cfg = ImportConfig(path=ns.file, downsample=bool(ns.downsample), target_rate_hz=float(ns.rate), **overrides)

    archive = MemoryArchive()
    result = run_import(cfg, archive=archive)
    if not result.ok:
        print(f"[error] {type(result.error).__name__}: {result.error}")
        return 1

    metadata, molecule = result.unwrap()
    print(f"[ok] metadata {metadata.uid}: {len(metadata.parameters)} parameter(s)")
    print(f"[ok] molecule {molecule.uid}: {molecule.n_rows} rows, columns={molecule.columns}")
    for r in molecule.regions:
        print(f"  region {r.name!r}: {r.start:.6g} s .. {r.stop:.6g} s")
    for w in result.warnings:
        print(f"[warn] {w}")

    if ns.out_dir:
        csv_path, json_path = write_outputs(result, ns.out_dir, Path(ns.file).stem)
        print(f"wrote: {csv_path}")
        print(f"wrote: {json_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
