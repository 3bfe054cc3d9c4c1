"""Parameters of the LOAM feature extractor.

A :class:`LoamParams` value is built once, usually from a YAML file,
and shared read-only by every extractor that uses it.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

from ..utils.config import load_config
from ..utils.logging import get_logger

logger = get_logger(__name__)

VERTICAL_AXES = ("X", "Y", "Z")


@dataclass(frozen=True)
class LoamParams:
    """Configuration of the scan feature extractor."""

    number_of_beams: int = 16
    """Number of lasers of the sensor, i.e. number of scan lines."""

    fov_deg: float = 30.0
    """Vertical field of view in degrees, used to bin points without a ring id."""

    curvature_region: int = 5
    """Half-width (in points) of the window used to estimate curvature."""

    n_feature_regions: int = 6
    """Number of equally sized regions each scan line is divided into."""

    max_corner_sharp: int = 2
    """Maximum number of sharp corner points per region."""

    max_corner_less_sharp: int = 20
    """Maximum number of sharp plus less sharp corner points per region."""

    max_surface_flat: int = 4
    """Maximum number of flat surface points per region."""

    surface_curvature_threshold: float = 0.1
    """Curvature separating corner candidates (above) from surface candidates (below)."""

    ignore_weak_features: bool = False
    """Skip collecting the less sharp and less flat feature clouds."""

    downsample_less_flat_features: bool = True
    """Voxel filter the less flat points of each scan line."""

    less_flat_filter_size: float = 0.2
    """Voxel edge length (metres) for the less flat downsampling."""

    vertical_axis: str = "Z"
    """Sensor axis pointing up; only used when beam ids must be inferred."""

    def __post_init__(self):
        if self.number_of_beams < 1:
            raise ValueError("number_of_beams must be at least 1")
        if self.curvature_region < 1:
            raise ValueError("curvature_region must be at least 1")
        if self.n_feature_regions < 1:
            raise ValueError("n_feature_regions must be at least 1")
        if self.max_corner_sharp < 0 or self.max_surface_flat < 0:
            raise ValueError("feature caps must be non-negative")
        if self.max_corner_less_sharp < self.max_corner_sharp:
            raise ValueError("max_corner_less_sharp must be >= max_corner_sharp")
        if self.fov_deg <= 0:
            raise ValueError("fov_deg must be positive")
        if self.downsample_less_flat_features and self.less_flat_filter_size <= 0:
            raise ValueError("less_flat_filter_size must be positive when downsampling")

    def normalized_vertical_axis(self) -> str:
        """Return the vertical axis as an upper case letter.

        Raises
        ------
        ValueError
            If the configured axis is not one of X, Y or Z.
        """
        axis = str(self.vertical_axis).upper()
        if axis not in VERTICAL_AXES:
            logger.error("Invalid vertical axis param. Options: X, Y, Z")
            raise ValueError(f"Invalid vertical axis param: {self.vertical_axis!r}")
        return axis

    def beam_angle_bins_deg(self) -> List[float]:
        """Elevation thresholds separating adjacent beams, in descending order.

        The beams are assumed evenly spread over ``[-fov/2, +fov/2]``,
        beam 0 being the highest.  Threshold ``i`` lies halfway between
        beam ``i`` and beam ``i + 1``, so a sensor with ``n`` beams has
        ``n - 1`` thresholds.
        """
        if self.number_of_beams < 2:
            return []
        spacing = self.fov_deg / (self.number_of_beams - 1)
        top = self.fov_deg / 2.0
        return [top - spacing * (i + 0.5) for i in range(self.number_of_beams - 1)]

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "LoamParams":
        """Build parameters from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning("Ignoring unknown LOAM parameters: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in values.items() if k in known})

    @classmethod
    def from_config(cls, path: str, section: Optional[str] = "loam") -> "LoamParams":
        """Load parameters from a YAML file.

        Parameters
        ----------
        path : str
            Path to the configuration file.
        section : str, optional
            Top-level key holding the parameters.  Files without that key
            are read as a flat mapping.
        """
        return cls.from_dict(load_config(path, section=section))
