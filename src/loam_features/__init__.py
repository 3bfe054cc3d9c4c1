"""LOAM feature extraction for rotating LiDAR sweeps."""

from .common.point_types import POINT_XYZIRT, PointLabel
from .feature_extraction import LoamFeatureExtractor, LoamParams, LoamPointCloud

__version__ = "0.1.0"

__all__ = ["POINT_XYZIRT", "PointLabel", "LoamFeatureExtractor", "LoamParams", "LoamPointCloud"]
