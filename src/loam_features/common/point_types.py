"""Canonical point representation and feature labels.

Every cloud handled by the extractor is projected onto one structured
numpy dtype, :data:`POINT_XYZIRT`, holding the coordinates, the return
intensity, the beam (ring) id and the per-point time offset.  Callers
may hand in:

* a structured array with at least ``x``, ``y`` and ``z`` fields.  A
  ``ring`` field marks the cloud as carrying beam ids; ``intensity``
  and ``time`` are copied when present and any other field is dropped;
* a plain ``(N, 3)`` or ``(N, 4)`` array holding XYZ and optionally
  intensity (no beam ids);
* a plain ``(N, M)`` array with ``M >= 6`` whose columns are
  ``x, y, z, intensity, ring, time``; further columns are dropped.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

import numpy as np

POINT_XYZIRT = np.dtype([
    ("x", np.float64),
    ("y", np.float64),
    ("z", np.float64),
    ("intensity", np.float32),
    ("ring", np.uint16),
    ("time", np.float32),
])

CANONICAL_FIELDS = POINT_XYZIRT.names


class PointLabel(IntEnum):
    """Feature label of a point, ordered from strongest edge to flattest surface."""

    CORNER_SHARP = 0
    CORNER_LESS_SHARP = 1
    SURFACE_LESS_FLAT = 2
    SURFACE_FLAT = 3


@dataclass(frozen=True)
class CloudCapabilities:
    """Which per-point channels an input cloud provides."""

    has_ring: bool
    has_time: bool
    has_intensity: bool
    extra_fields: Tuple[str, ...] = ()


def empty_cloud(size: int = 0) -> np.ndarray:
    """Return a zero-initialised canonical cloud of ``size`` points."""
    return np.zeros(size, dtype=POINT_XYZIRT)


def xyz_of(points: np.ndarray) -> np.ndarray:
    """Return the coordinates of a canonical cloud as an ``(N, 3)`` float64 array."""
    return np.column_stack([points["x"], points["y"], points["z"]]).astype(np.float64, copy=False)


def describe_cloud(cloud: np.ndarray) -> CloudCapabilities:
    """Inspect an input cloud and report the channels it carries.

    Raises
    ------
    ValueError
        If the cloud matches none of the accepted layouts.
    """
    if cloud.dtype.names is not None:
        names = cloud.dtype.names
        missing = [f for f in ("x", "y", "z") if f not in names]
        if missing:
            raise ValueError(f"point cloud is missing coordinate fields: {missing}")
        extras = tuple(n for n in names if n not in CANONICAL_FIELDS)
        return CloudCapabilities(
            has_ring="ring" in names,
            has_time="time" in names,
            has_intensity="intensity" in names,
            extra_fields=extras,
        )

    if cloud.ndim != 2:
        raise ValueError("plain point arrays must be two-dimensional (N, M)")
    n_cols = cloud.shape[1]
    if n_cols in (3, 4):
        return CloudCapabilities(has_ring=False, has_time=False, has_intensity=n_cols == 4)
    if n_cols >= 6:
        extras = tuple(f"col_{i}" for i in range(6, n_cols))
        return CloudCapabilities(has_ring=True, has_time=True, has_intensity=True, extra_fields=extras)
    raise ValueError(
        "plain point arrays need 3 or 4 columns (x,y,z[,intensity]) "
        f"or at least 6 columns (x,y,z,intensity,ring,time), got {n_cols}"
    )


def to_canonical(cloud: np.ndarray) -> Tuple[np.ndarray, CloudCapabilities]:
    """Project any accepted input layout onto :data:`POINT_XYZIRT`.

    Parameters
    ----------
    cloud : numpy.ndarray
        Input cloud in one of the layouts listed in the module docstring.

    Returns
    -------
    (numpy.ndarray, CloudCapabilities)
        The canonical cloud (always a fresh array) and the capabilities
        detected on the input.
    """
    cloud = np.asarray(cloud)
    caps = describe_cloud(cloud)
    points = empty_cloud(len(cloud))

    if cloud.dtype.names is not None:
        for name in CANONICAL_FIELDS:
            if name == "ring" and caps.has_ring:
                points["ring"] = _safe_ring(cloud["ring"])
            elif name in cloud.dtype.names:
                points[name] = cloud[name]
        return points, caps

    points["x"] = cloud[:, 0]
    points["y"] = cloud[:, 1]
    points["z"] = cloud[:, 2]
    if caps.has_intensity:
        points["intensity"] = cloud[:, 3]
    if caps.has_ring:
        points["ring"] = _safe_ring(cloud[:, 4])
        points["time"] = cloud[:, 5]
    return points, caps


def _safe_ring(ring: np.ndarray) -> np.ndarray:
    """Cast beam ids to uint16 without wrapping.

    Negative, non-finite or too large ids cannot name a beam and are
    parked at the uint16 maximum, which no sensor reaches.
    """
    ring = np.asarray(ring)
    if ring.dtype == np.uint16:
        return ring
    ring_max = np.iinfo(np.uint16).max
    values = ring.astype(np.float64)
    valid = np.isfinite(values) & (values >= 0) & (values <= ring_max)
    return np.where(valid, values, ring_max).astype(np.uint16)
