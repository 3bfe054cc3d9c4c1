"""LOAM feature extraction orchestrator.

:class:`LoamFeatureExtractor` turns one LiDAR sweep into the four
LOAM feature clouds:

1. the cloud is projected onto the canonical point type and split into
   scan lines (by ring id when available, by elevation angle otherwise);
2. the scan lines are concatenated into a sorted scan;
3. for every scan line long enough to hold a curvature window,
   unreliable points are masked, curvature is ranked per region and
   corner/flat features are selected;
4. the selections are gathered into a :class:`LoamPointCloud`.

The extractor itself only holds its parameters and an optional debug
directory.  All buffers live in a working set created for each call,
so one instance may be reused for any number of sweeps.  Calls on one
instance from several threads are still not coordinated; give each
thread its own extractor if that matters.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import numpy as np

from ..common.lidar_filter import voxel_downsample
from ..common.point_types import empty_cloud, to_canonical, xyz_of
from ..utils.logging import get_logger
from .loam_cloud import LoamPointCloud
from .params import LoamParams
from .scan_lines import SortedScan, assemble_sorted_scan, get_scan_lines
from .selector import extract_scan_line_features

logger = get_logger(__name__)


@dataclass
class _WorkingSet:
    """Per-call buffers of one extraction."""

    sorted_scan: SortedScan
    corner_sharp: List[np.ndarray] = field(default_factory=list)
    corner_less_sharp: List[np.ndarray] = field(default_factory=list)
    surface_flat: List[np.ndarray] = field(default_factory=list)
    surface_less_flat: List[np.ndarray] = field(default_factory=list)


def _concat(chunks: List[np.ndarray]) -> np.ndarray:
    return np.concatenate(chunks) if chunks else empty_cloud()


class LoamFeatureExtractor:
    """Extract sharp/less sharp corners and flat/less flat surfaces from sweeps."""

    def __init__(self, params: Optional[LoamParams] = None, debug_output_path: Optional[str] = None):
        """Initialize the extractor.

        Parameters
        ----------
        params : LoamParams, optional
            Extractor parameters (defaults to ``LoamParams()``).
        debug_output_path : str, optional
            Existing directory to which intermediate scan lines are dumped.
        """
        self.params = params or LoamParams()
        self.debug_output_path = Path(debug_output_path) if debug_output_path else None

    def save_scan_lines(self, debug_output_path: Optional[str]) -> None:
        """Dump the scan lines of every following call under ``debug_output_path``.

        Pass None to stop dumping.
        """
        self.debug_output_path = Path(debug_output_path) if debug_output_path else None

    def extract_features(self, cloud: np.ndarray) -> LoamPointCloud:
        """Extract features from a sweep.

        Parameters
        ----------
        cloud : numpy.ndarray
            Structured cloud or plain ``(N, M)`` array in any layout
            accepted by :func:`loam_features.common.point_types.to_canonical`.
            Clouds with a ``ring`` channel are split by beam id, others by
            elevation angle.

        Returns
        -------
        LoamPointCloud
            The four feature clouds.

        Raises
        ------
        ValueError
            If the cloud layout is not supported, or if beam ids must be
            inferred and the configured vertical axis is invalid.
        """
        scan_lines = get_scan_lines(cloud, self.params, self.debug_output_path)
        return self.extract_features_from_scan_lines(scan_lines)

    def extract_features_from_scan_lines(self, scan_lines: List[np.ndarray]) -> LoamPointCloud:
        """Extract features from clouds already split per beam.

        Parameters
        ----------
        scan_lines : list of numpy.ndarray
            One cloud per beam, ordered by beam id, each in acquisition order.

        Returns
        -------
        LoamPointCloud
            The four feature clouds.
        """
        lines = [to_canonical(line)[0] if len(line) else empty_cloud() for line in scan_lines]
        n_non_empty = sum(1 for line in lines if len(line) > 0)
        if n_non_empty != self.params.number_of_beams:
            logger.warning(
                "Number of scan lines extracted (%d) is not equal to the specified number "
                "of lidar beams (%d), please confirm lidar settings (number of beams and FOV).",
                n_non_empty,
                self.params.number_of_beams,
            )

        work = _WorkingSet(sorted_scan=assemble_sorted_scan(lines))
        for i, (start, end) in enumerate(work.sorted_scan.index_ranges):
            # too short to hold a single curvature window
            if end - start <= 2 * self.params.curvature_region:
                continue
            self._extract_from_scan_line(work, work.sorted_scan.scan_line(i))

        features = LoamPointCloud(
            corner_sharp=_concat(work.corner_sharp),
            corner_less_sharp=_concat(work.corner_less_sharp),
            surface_flat=_concat(work.surface_flat),
            surface_less_flat=_concat(work.surface_less_flat),
        )
        if len(features.corner_sharp) == 0:
            logger.warning("Unable to extract sharp edge features from cloud.")
        if len(features.surface_flat) == 0:
            logger.warning("Unable to extract flat surface features from cloud.")
        logger.debug("Extracted features: %s", features.counts())
        return features

    def _extract_from_scan_line(self, work: _WorkingSet, line: np.ndarray) -> None:
        result = extract_scan_line_features(xyz_of(line), self.params)

        work.corner_sharp.append(line[result.indices("corner_sharp")])
        work.surface_flat.append(line[result.indices("surface_flat")])
        if self.params.ignore_weak_features:
            return

        work.corner_less_sharp.append(line[result.indices("corner_less_sharp")])
        less_flat = line[result.indices("surface_less_flat")]
        if self.params.downsample_less_flat_features:
            less_flat = voxel_downsample(less_flat, self.params.less_flat_filter_size)
        work.surface_less_flat.append(less_flat)
