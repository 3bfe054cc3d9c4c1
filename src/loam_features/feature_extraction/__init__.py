"""LOAM scan feature extraction.

This package turns a rotating-LiDAR sweep into the corner and surface
feature clouds used by LOAM-style scan registration.  The stages are
kept in separate modules: scan line segmentation, the neighbour
reliability filter, curvature ranking, feature selection and the
orchestrating extractor.
"""

from .params import LoamParams
from .scan_lines import IndexRange, SortedScan, assemble_sorted_scan, get_scan_lines
from .reliability import mark_unreliable
from .curvature import compute_curvature, feature_regions, rank_region
from .selector import ScanLineFeatures, extract_scan_line_features, mark_as_picked
from .loam_cloud import LoamPointCloud
from .extractor import LoamFeatureExtractor

__all__ = [
    "LoamParams",
    "IndexRange",
    "SortedScan",
    "assemble_sorted_scan",
    "get_scan_lines",
    "mark_unreliable",
    "compute_curvature",
    "feature_regions",
    "rank_region",
    "ScanLineFeatures",
    "extract_scan_line_features",
    "mark_as_picked",
    "LoamPointCloud",
    "LoamFeatureExtractor",
]
