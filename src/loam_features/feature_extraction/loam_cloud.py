"""Container for the four LOAM feature clouds."""

from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from ..common.point_types import empty_cloud, xyz_of

FEATURE_CLOUDS = ("corner_sharp", "corner_less_sharp", "surface_flat", "surface_less_flat")


@dataclass
class LoamPointCloud:
    """Feature clouds extracted from one sweep.

    Each attribute is a canonical ``POINT_XYZIRT`` array owned by the
    caller.  ``corner_less_sharp`` includes the sharp corners and
    ``surface_less_flat`` includes the flat points.
    """

    corner_sharp: np.ndarray = field(default_factory=empty_cloud)
    corner_less_sharp: np.ndarray = field(default_factory=empty_cloud)
    surface_flat: np.ndarray = field(default_factory=empty_cloud)
    surface_less_flat: np.ndarray = field(default_factory=empty_cloud)

    def __len__(self) -> int:
        return sum(len(getattr(self, name)) for name in FEATURE_CLOUDS)

    def counts(self) -> Dict[str, int]:
        """Number of points in each feature cloud."""
        return {name: len(getattr(self, name)) for name in FEATURE_CLOUDS}

    def transform(self, T: np.ndarray) -> "LoamPointCloud":
        """Return a copy with every feature moved by the 4x4 rigid transform ``T``."""
        T = np.asarray(T, dtype=np.float64)
        if T.shape != (4, 4):
            raise ValueError("T must be a 4x4 homogeneous transform")
        R, t = T[:3, :3], T[:3, 3]

        moved = {}
        for name in FEATURE_CLOUDS:
            points = getattr(self, name).copy()
            if len(points):
                xyz = xyz_of(points) @ R.T + t
                points["x"], points["y"], points["z"] = xyz[:, 0], xyz[:, 1], xyz[:, 2]
            moved[name] = points
        return LoamPointCloud(**moved)

    def merge(self, other: "LoamPointCloud") -> "LoamPointCloud":
        """Return a cloud holding the features of both clouds."""
        return LoamPointCloud(**{
            name: np.concatenate([getattr(self, name), getattr(other, name)])
            for name in FEATURE_CLOUDS
        })
