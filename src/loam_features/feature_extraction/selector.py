"""Feature selection within scan line regions.

Each region contributes at most a fixed number of corner and flat
features.  Candidates are visited in curvature order; every accepted
point suppresses its neighbours along the scan line so features spread
out instead of clustering on a single edge.
"""

from dataclasses import dataclass, field
from typing import List

import numpy as np

from ..common.point_types import PointLabel
from .curvature import compute_curvature, feature_regions, rank_region
from .params import LoamParams
from .reliability import mark_unreliable
from .scan_lines import IndexRange

SUPPRESSION_SQ_DIST = 0.05
"""Squared step length at which neighbour suppression stops (surface break)."""


@dataclass
class RegionFeatures:
    """Scan-relative indices selected in one region, in selection order."""

    corner_sharp: List[int] = field(default_factory=list)
    corner_less_sharp: List[int] = field(default_factory=list)
    surface_flat: List[int] = field(default_factory=list)
    surface_less_flat: List[int] = field(default_factory=list)


@dataclass
class ScanLineFeatures:
    """Selection result for a whole scan line.

    ``labels`` covers every point of the line; points outside the
    regions keep the default ``SURFACE_LESS_FLAT``.
    """

    labels: np.ndarray
    curvature: np.ndarray
    regions: List[IndexRange]
    region_features: List[RegionFeatures]

    def indices(self, name: str) -> np.ndarray:
        """Concatenate one index list (e.g. ``"corner_sharp"``) over all regions."""
        chunks = [getattr(r, name) for r in self.region_features]
        return np.asarray([i for chunk in chunks for i in chunk], dtype=np.int64)


def mark_as_picked(xyz: np.ndarray, picked: np.ndarray, k: int, curvature_region: int) -> None:
    """Exclude point ``k`` and its close neighbours from further selection.

    The walk goes up to ``curvature_region`` steps each way and stops
    at the first step longer than the suppression distance.
    """
    picked[k] = True
    n = len(xyz)
    for i in range(1, curvature_region + 1):
        if k + i >= n:
            break
        step = xyz[k + i] - xyz[k + i - 1]
        if np.dot(step, step) > SUPPRESSION_SQ_DIST:
            break
        picked[k + i] = True
    for i in range(1, curvature_region + 1):
        if k - i < 0:
            break
        step = xyz[k - i] - xyz[k - i + 1]
        if np.dot(step, step) > SUPPRESSION_SQ_DIST:
            break
        picked[k - i] = True


def select_region_features(
    xyz: np.ndarray,
    curvature: np.ndarray,
    order: np.ndarray,
    picked: np.ndarray,
    labels: np.ndarray,
    params: LoamParams,
) -> RegionFeatures:
    """Pick corner and flat features from one region.

    Parameters
    ----------
    xyz : numpy.ndarray
        ``(N, 3)`` coordinates of the scan line.
    curvature : numpy.ndarray
        Curvature of every point of the scan line.
    order : numpy.ndarray
        Region indices sorted by ascending curvature.
    picked : numpy.ndarray
        Scan line wide exclusion mask, updated in place.
    labels : numpy.ndarray
        Scan line wide labels, updated in place.
    params : LoamParams
        Feature caps and thresholds.

    Returns
    -------
    RegionFeatures
        Selected indices; the less sharp list includes the sharp
        corners, the less flat list includes the flat points.
    """
    result = RegionFeatures()
    threshold = params.surface_curvature_threshold
    keep_weak = not params.ignore_weak_features

    n_corners = 0
    for idx in order[::-1]:
        if n_corners >= params.max_corner_less_sharp:
            break
        if picked[idx] or not curvature[idx] > threshold:
            continue
        n_corners += 1
        if n_corners <= params.max_corner_sharp:
            labels[idx] = PointLabel.CORNER_SHARP
            result.corner_sharp.append(int(idx))
        else:
            labels[idx] = PointLabel.CORNER_LESS_SHARP
        if keep_weak:
            result.corner_less_sharp.append(int(idx))
        mark_as_picked(xyz, picked, idx, params.curvature_region)

    n_flat = 0
    for idx in order:
        if n_flat >= params.max_surface_flat:
            break
        if picked[idx] or not curvature[idx] < threshold:
            continue
        n_flat += 1
        labels[idx] = PointLabel.SURFACE_FLAT
        result.surface_flat.append(int(idx))
        if keep_weak:
            result.surface_less_flat.append(int(idx))
        mark_as_picked(xyz, picked, idx, params.curvature_region)

    if keep_weak:
        region = np.sort(order)
        # corners are not surface points and flats were appended by the flat pass
        background = region[labels[region] == PointLabel.SURFACE_LESS_FLAT]
        result.surface_less_flat.extend(int(i) for i in background)
    return result


def extract_scan_line_features(xyz: np.ndarray, params: LoamParams) -> ScanLineFeatures:
    """Run reliability filtering, ranking and selection over one scan line.

    Parameters
    ----------
    xyz : numpy.ndarray
        ``(N, 3)`` coordinates of the scan line in acquisition order.
    params : LoamParams
        Extractor parameters.

    Returns
    -------
    ScanLineFeatures
        Labels and selected indices, all relative to the scan line.
    """
    cr = params.curvature_region
    labels = np.full(len(xyz), PointLabel.SURFACE_LESS_FLAT, dtype=np.int8)
    picked = mark_unreliable(xyz, cr)
    curvature = compute_curvature(xyz, cr)
    regions = feature_regions(len(xyz), cr, params.n_feature_regions)

    region_features = []
    for region in regions:
        order = rank_region(curvature, region)
        region_features.append(
            select_region_features(xyz, curvature, order, picked, labels, params)
        )
    return ScanLineFeatures(
        labels=labels,
        curvature=curvature,
        regions=regions,
        region_features=region_features,
    )
