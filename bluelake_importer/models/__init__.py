from .channel import ChannelData
from .config import DEFAULT_TARGET_RATE_HZ, ImportConfig
from .records import TIME_COLUMN, MetadataRecord, MoleculeRecord, RegionMarker, new_uid

__all__ = [
    "ChannelData",
    "DEFAULT_TARGET_RATE_HZ",
    "ImportConfig",
    "TIME_COLUMN",
    "MetadataRecord",
    "MoleculeRecord",
    "RegionMarker",
    "new_uid",
]
