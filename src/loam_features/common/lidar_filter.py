"""LiDAR filtering utilities.

The extractor thins its less-flat surface features with a uniform
voxel grid: every occupied cubic voxel is replaced by the centroid of
the points that fall into it.  Points are canonical structured arrays
(see :mod:`loam_features.common.point_types`).
"""

import numpy as np

from .point_types import POINT_XYZIRT, empty_cloud, xyz_of

_AVERAGED_FIELDS = ("x", "y", "z", "intensity", "time")


def voxel_downsample(points: np.ndarray, leaf_size: float) -> np.ndarray:
    """Downsample a point cloud using voxel grid filtering.

    Parameters
    ----------
    points : numpy.ndarray
        Canonical cloud of dtype ``POINT_XYZIRT``.
    leaf_size : float
        Edge length of the cubic voxels in metres.

    Returns
    -------
    numpy.ndarray
        One point per occupied voxel, ordered by voxel index.  The
        coordinates, intensity and time are averaged over the voxel;
        the ring id is that of the first point that fell in it.
    """
    if leaf_size <= 0:
        raise ValueError("leaf_size must be positive")
    if len(points) == 0:
        return empty_cloud()

    voxel_indices = np.floor(xyz_of(points) / leaf_size).astype(np.int64)
    _, first_idx, inverse = np.unique(
        voxel_indices, axis=0, return_index=True, return_inverse=True
    )
    inverse = inverse.reshape(-1)
    counts = np.bincount(inverse)

    result = np.zeros(len(counts), dtype=POINT_XYZIRT)
    for name in _AVERAGED_FIELDS:
        sums = np.bincount(inverse, weights=points[name].astype(np.float64))
        result[name] = sums / counts
    result["ring"] = points["ring"][first_idx]
    return result
