"""Analysis package.

Design principle:
  - Ingest produces :class:`~bluelake_importer.models.channel.ChannelData` objects.
  - Analysis consumes them and produces the table, the MoleculeRecord and its regions.
"""

from .assemble import assemble_molecule, build_table
from .downsample import bin_factor, boxcar_downsample

__all__ = [
    "assemble_molecule",
    "build_table",
    "bin_factor",
    "boxcar_downsample",
]
