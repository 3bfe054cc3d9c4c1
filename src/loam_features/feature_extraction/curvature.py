"""Region split and curvature ranking for one scan line.

The curvature of point ``i`` is the squared norm of

    sum_{j=-k..k} w(j) * p[i + j],   w(0) = -2k,  w(j != 0) = 1

with ``k`` the curvature region.  It is zero on a straight, evenly
sampled line and grows with the local bend, so it separates edge
points from planar points.
"""

from typing import List

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .scan_lines import IndexRange


def feature_regions(n_points: int, curvature_region: int, n_regions: int) -> List[IndexRange]:
    """Split the curvature-eligible span of a scan line into regions.

    The span ``[k, n_points - 1 - k]`` is cut into ``n_regions``
    contiguous pieces of near-equal size.  Empty pieces are dropped,
    the others are disjoint and together cover the span.

    Returns
    -------
    list of IndexRange
        Inclusive, scan-relative ranges in increasing order.
    """
    first = curvature_region
    last = n_points - 1 - curvature_region
    span = last - first + 1
    if span <= 0:
        return []

    bounds = [first + (span * j) // n_regions for j in range(n_regions + 1)]
    return [
        IndexRange(bounds[j], bounds[j + 1] - 1)
        for j in range(n_regions)
        if bounds[j + 1] > bounds[j]
    ]


def compute_curvature(xyz: np.ndarray, curvature_region: int) -> np.ndarray:
    """Curvature of every point of a scan line.

    Parameters
    ----------
    xyz : numpy.ndarray
        ``(N, 3)`` coordinates in acquisition order.
    curvature_region : int
        Half-width ``k`` of the window.

    Returns
    -------
    numpy.ndarray
        Array of length ``N``; entries closer than ``k`` to either end
        have no full window and are NaN.
    """
    n = len(xyz)
    k = curvature_region
    curvature = np.full(n, np.nan)
    if n < 2 * k + 1:
        return curvature

    windows = sliding_window_view(xyz, 2 * k + 1, axis=0)
    centre = xyz[k:n - k]
    diff = windows.sum(axis=-1) - (2 * k + 1) * centre
    curvature[k:n - k] = np.sum(diff ** 2, axis=1)
    return curvature


def rank_region(curvature: np.ndarray, region: IndexRange) -> np.ndarray:
    """Scan-relative indices of a region sorted by ascending curvature.

    Ties keep index order.
    """
    values = curvature[region.start:region.end + 1]
    return region.start + np.argsort(values, kind="stable")
