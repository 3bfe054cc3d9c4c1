"""Point types and point-cloud helpers shared by the extractor stages."""

from .point_types import (
    POINT_XYZIRT,
    CloudCapabilities,
    PointLabel,
    describe_cloud,
    empty_cloud,
    to_canonical,
    xyz_of,
)
from .lidar_filter import voxel_downsample
from .debug_io import dump_scan_lines

__all__ = [
    "POINT_XYZIRT",
    "CloudCapabilities",
    "PointLabel",
    "describe_cloud",
    "empty_cloud",
    "to_canonical",
    "xyz_of",
    "voxel_downsample",
    "dump_scan_lines",
]
