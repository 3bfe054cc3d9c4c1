"""Neighbor-reliability filter.

Before ranking, points whose curvature cannot be trusted are marked as
already picked so the selector never considers them:

* points on the hidden side of a depth discontinuity, where a near
  surface partially occludes a far one;
* points on surfaces nearly parallel to the laser beam, whose
  neighbours are spread far apart relative to their range.

All indices are relative to the scan line.
"""

import numpy as np

DISCONTINUITY_SQ_DIST = 0.1
"""Squared distance to the next point above which a depth discontinuity is examined."""

OCCLUSION_RATIO = 0.1
"""Depth-normalised distance below which the far side of a discontinuity is occluded."""

PARALLEL_BEAM_RATIO = 0.0002
"""Neighbour spacing, relative to squared range, above which a surface is near-parallel."""


def _squared_diff(a: np.ndarray, b: np.ndarray, wb: np.ndarray) -> np.ndarray:
    return np.sum((a - b * wb[:, None]) ** 2, axis=1)


def mark_unreliable(xyz: np.ndarray, curvature_region: int) -> np.ndarray:
    """Flag the points of one scan line that must not be selected.

    Parameters
    ----------
    xyz : numpy.ndarray
        ``(N, 3)`` coordinates of the scan line in acquisition order.
    curvature_region : int
        Half-width of the curvature window.

    Returns
    -------
    numpy.ndarray
        Boolean mask of length ``N``; True means excluded.
    """
    n = len(xyz)
    cr = curvature_region
    picked = np.zeros(n, dtype=bool)
    if n < 2 * cr + 2:
        return picked

    idx = np.arange(cr, n - 1 - cr)
    point = xyz[idx]
    next_point = xyz[idx + 1]
    previous_point = xyz[idx - 1]

    diff_next = np.sum((next_point - point) ** 2, axis=1)
    diff_previous = np.sum((point - previous_point) ** 2, axis=1)
    squared_range = np.sum(point ** 2, axis=1)

    depth1 = np.sqrt(squared_range)
    depth2 = np.linalg.norm(next_point, axis=1)
    jump = diff_next > DISCONTINUITY_SQ_DIST

    with np.errstate(divide="ignore", invalid="ignore"):
        # current point is the far one: its side of the jump is hidden
        far_current = jump & (depth1 > depth2)
        weighted = np.sqrt(_squared_diff(next_point, point, depth2 / depth1)) / depth2
        occluded_before = far_current & (weighted < OCCLUSION_RATIO)

        # next point is the far one
        far_next = jump & ~(depth1 > depth2)
        weighted = np.sqrt(_squared_diff(point, next_point, depth1 / depth2)) / depth1
        occluded_after = far_next & (weighted < OCCLUSION_RATIO)

    for i in idx[occluded_before]:
        picked[i - cr:i + 1] = True
    for i in idx[occluded_after]:
        picked[i + 1:i + cr + 2] = True

    threshold = PARALLEL_BEAM_RATIO * squared_range
    near_parallel = (
        (diff_next > threshold)
        & (diff_previous > threshold)
        & ~occluded_before
    )
    picked[idx[near_parallel]] = True
    return picked
