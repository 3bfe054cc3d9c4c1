"""Scan line segmentation and sorted scan assembly.

A rotating LiDAR sweeps each of its lasers around the vertical axis,
so the points of one laser form an ordered scan line.  This module
splits an input cloud into ``number_of_beams`` such lines, either from
the ``ring`` channel of the points or, when the sensor does not report
it, by binning the elevation angle of each point.  The lines are then
concatenated into one buffer with the index range of every line.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, NamedTuple, Optional

import numpy as np

from ..common.debug_io import dump_scan_lines
from ..common.point_types import empty_cloud, to_canonical, xyz_of
from ..utils.logging import get_logger
from .params import LoamParams

logger = get_logger(__name__)

MIN_SQUARED_NORM = 0.0001
"""Points closer than 1 cm to the sensor are treated as empty returns."""

_AXIS_COLUMN = {"X": 0, "Y": 1, "Z": 2}


class IndexRange(NamedTuple):
    """Inclusive ``[start, end]`` range of one scan line in the sorted scan."""

    start: int
    end: int


@dataclass
class SortedScan:
    """All scan lines concatenated in beam order."""

    points: np.ndarray
    index_ranges: List[IndexRange]

    def scan_line(self, i: int) -> np.ndarray:
        """Return the points of scan line ``i`` (empty for empty lines)."""
        start = self.index_ranges[i].start
        if i + 1 < len(self.index_ranges):
            stop = self.index_ranges[i + 1].start
        else:
            stop = len(self.points)
        return self.points[start:stop]


def split_by_ring(points: np.ndarray, params: LoamParams) -> List[np.ndarray]:
    """Route points to scan lines using their ``ring`` channel.

    Points whose ring id is not below ``number_of_beams`` are dropped
    with a warning.  The acquisition order within each line is kept.
    """
    ring = points["ring"].astype(np.int64)
    valid = ring < params.number_of_beams
    n_invalid = int(np.count_nonzero(~valid))
    if n_invalid:
        logger.warning(
            "%d point(s) have a ring number greater than the specified number of "
            "beams (%d), not using them.",
            n_invalid,
            params.number_of_beams,
        )
        points = points[valid]
        ring = ring[valid]

    order = np.argsort(ring, kind="stable")
    counts = np.bincount(ring, minlength=params.number_of_beams)
    return np.split(points[order], np.cumsum(counts)[:-1])


def split_by_angle(points: np.ndarray, params: LoamParams) -> List[np.ndarray]:
    """Route points to scan lines by binning their elevation angle.

    Non-finite points and points within 1 cm of the sensor are dropped
    silently.  The line id is written into the ``ring`` channel.

    Raises
    ------
    ValueError
        If ``params.vertical_axis`` is not X, Y or Z.  The check runs
        before any point is examined.
    """
    axis = _AXIS_COLUMN[params.normalized_vertical_axis()]
    bins_desc = np.asarray(params.beam_angle_bins_deg(), dtype=np.float64)

    xyz = xyz_of(points)
    finite = np.all(np.isfinite(xyz), axis=1)
    with np.errstate(invalid="ignore", over="ignore"):
        keep = finite & (np.sum(xyz ** 2, axis=1) >= MIN_SQUARED_NORM)
    points = points[keep].copy()
    xyz = xyz[keep]

    others = [c for c in range(3) if c != axis]
    horizontal = np.hypot(xyz[:, others[0]], xyz[:, others[1]])
    angle_deg = np.degrees(np.arctan2(xyz[:, axis], horizontal))

    # first descending threshold the angle exceeds == number of thresholds >= angle
    bins_asc = bins_desc[::-1]
    line_id = len(bins_asc) - np.searchsorted(bins_asc, angle_deg, side="left")
    points["ring"] = line_id.astype(np.uint16)

    lines = []
    for i in range(params.number_of_beams):
        lines.append(points[line_id == i])
    return lines


def get_scan_lines(
    cloud: np.ndarray,
    params: LoamParams,
    debug_output_path: Optional[Path] = None,
) -> List[np.ndarray]:
    """Split an input cloud of any accepted layout into scan lines.

    Parameters
    ----------
    cloud : numpy.ndarray
        Input cloud (see :mod:`loam_features.common.point_types`).
    params : LoamParams
        Extractor parameters.
    debug_output_path : Path, optional
        Existing directory to which the scan lines are dumped.

    Returns
    -------
    list of numpy.ndarray
        ``params.number_of_beams`` canonical clouds, one per beam.
    """
    points, caps = to_canonical(cloud)
    if caps.extra_fields:
        logger.debug("Dropping extra point channels: %s", ", ".join(caps.extra_fields))
    if not caps.has_time:
        logger.debug("Input cloud has no time channel, point time offsets default to 0.")

    if caps.has_ring:
        scan_lines = split_by_ring(points, params)
    else:
        scan_lines = split_by_angle(points, params)

    if debug_output_path is not None:
        dump_scan_lines(scan_lines, np.asarray(cloud), Path(debug_output_path))
    return scan_lines


def assemble_sorted_scan(scan_lines: List[np.ndarray]) -> SortedScan:
    """Concatenate scan lines in beam order and record their index ranges.

    Empty scan lines get the degenerate range ``(start, start)``.
    """
    ranges: List[IndexRange] = []
    cloud_size = 0
    for line in scan_lines:
        start = cloud_size
        cloud_size += len(line)
        end = cloud_size - 1 if len(line) > 0 else start
        ranges.append(IndexRange(start, end))

    if scan_lines:
        points = np.concatenate([np.asarray(line) for line in scan_lines])
    else:
        points = empty_cloud()
    return SortedScan(points=points, index_ranges=ranges)
