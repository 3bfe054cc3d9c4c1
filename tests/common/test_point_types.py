"""Unit tests for point types and ingestion."""

import numpy as np
import pytest

from loam_features.common.point_types import (
    POINT_XYZIRT,
    PointLabel,
    describe_cloud,
    to_canonical,
    xyz_of,
)

RING_MAX = np.iinfo(np.uint16).max


class TestPointLabel:
    """Test suite for PointLabel ordering."""

    def test_ordering(self):
        """Test labels are ordered from sharpest corner to flattest surface."""
        assert PointLabel.CORNER_SHARP < PointLabel.CORNER_LESS_SHARP
        assert PointLabel.CORNER_LESS_SHARP < PointLabel.SURFACE_LESS_FLAT
        assert PointLabel.SURFACE_LESS_FLAT < PointLabel.SURFACE_FLAT


class TestIngestion:
    """Test suite for describe_cloud / to_canonical."""

    def test_plain_xyz(self):
        """(N, 3) arrays carry no beam ids."""
        cloud = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        points, caps = to_canonical(cloud)

        assert not caps.has_ring
        assert not caps.has_intensity
        assert not caps.has_time
        assert points.dtype == POINT_XYZIRT
        np.testing.assert_allclose(xyz_of(points), cloud)
        assert np.all(points["ring"] == 0)

    def test_plain_xyzi(self):
        """Test the fourth column of an (N, 4) array is read as intensity."""
        cloud = np.array([[1.0, 2.0, 3.0, 42.0]])
        points, caps = to_canonical(cloud)

        assert caps.has_intensity and not caps.has_ring
        assert points["intensity"][0] == pytest.approx(42.0)

    def test_plain_with_ring_time_and_extras(self):
        """Columns beyond x,y,z,intensity,ring,time are dropped."""
        cloud = np.array([
            [1.0, 2.0, 3.0, 10.0, 4.0, 0.05, 99.0, 98.0],
            [1.5, 2.5, 3.5, 11.0, 7.0, 0.06, 97.0, 96.0],
        ])
        points, caps = to_canonical(cloud)

        assert caps.has_ring and caps.has_time
        assert caps.extra_fields == ("col_6", "col_7")
        assert list(points["ring"]) == [4, 7]
        assert points["time"][1] == pytest.approx(0.06)
        assert points.dtype.names == POINT_XYZIRT.names

    def test_plain_negative_ring_is_out_of_range(self):
        """Test a negative ring column value is parked out of range."""
        cloud = np.array([[1.0, 2.0, 3.0, 10.0, -1.0, 0.0]])
        points, _ = to_canonical(cloud)
        assert points["ring"][0] == RING_MAX

    def test_structured_with_extra_channels(self):
        """Structured input with extra fields is projected onto the canonical type."""
        dtype = np.dtype([
            ("x", "f4"), ("y", "f4"), ("z", "f4"), ("intensity", "f4"),
            ("ring", "u2"), ("time", "f8"), ("range", "u4"), ("noise", "u2"),
        ])
        cloud = np.zeros(3, dtype=dtype)
        cloud["x"] = [1, 2, 3]
        cloud["ring"] = [0, 1, 2]
        cloud["time"] = [0.1, 0.2, 0.3]
        cloud["range"] = [1000, 2000, 3000]

        points, caps = to_canonical(cloud)

        assert caps.has_ring and caps.has_time
        assert set(caps.extra_fields) == {"range", "noise"}
        assert points.dtype == POINT_XYZIRT
        assert list(points["ring"]) == [0, 1, 2]
        np.testing.assert_allclose(points["time"], [0.1, 0.2, 0.3], rtol=1e-6)

    @pytest.mark.parametrize("ring_dtype", ["i4", "i8", "u4"])
    def test_structured_wide_ring_does_not_wrap(self, ring_dtype):
        """Test ring ids beyond the uint16 range are parked out of range."""
        dtype = np.dtype([("x", "f8"), ("y", "f8"), ("z", "f8"), ("ring", ring_dtype)])
        cloud = np.zeros(3, dtype=dtype)
        cloud["ring"] = [3, 65536, 65537]

        points, _ = to_canonical(cloud)

        assert list(points["ring"]) == [3, RING_MAX, RING_MAX]

    def test_structured_negative_ring(self):
        """Test negative structured ring ids are parked out of range."""
        dtype = np.dtype([("x", "f8"), ("y", "f8"), ("z", "f8"), ("ring", "i2")])
        cloud = np.zeros(2, dtype=dtype)
        cloud["ring"] = [-1, 1]

        points, _ = to_canonical(cloud)

        assert list(points["ring"]) == [RING_MAX, 1]

    def test_structured_float_ring_nan(self):
        """Test non-finite float ring ids are parked out of range."""
        dtype = np.dtype([("x", "f8"), ("y", "f8"), ("z", "f8"), ("ring", "f4")])
        cloud = np.zeros(3, dtype=dtype)
        cloud["ring"] = [np.nan, np.inf, 2.0]

        points, _ = to_canonical(cloud)

        assert list(points["ring"]) == [RING_MAX, RING_MAX, 2]

    def test_structured_without_ring(self):
        """Test a structured cloud without a ring field reports no beam ids."""
        dtype = np.dtype([("x", "f8"), ("y", "f8"), ("z", "f8")])
        caps = describe_cloud(np.zeros(2, dtype=dtype))
        assert not caps.has_ring
        assert not caps.has_time

    def test_to_canonical_copies(self):
        """Test the canonical cloud never aliases the input."""
        cloud = np.zeros(2, dtype=POINT_XYZIRT)
        points, _ = to_canonical(cloud)
        points["x"] = 5.0
        assert np.all(cloud["x"] == 0.0)

    @pytest.mark.parametrize("shape", [(4, 5), (4, 2), (4,)])
    def test_rejects_unsupported_plain_layouts(self, shape):
        """Test plain arrays with an unsupported column count are rejected."""
        with pytest.raises(ValueError):
            to_canonical(np.zeros(shape))

    def test_rejects_structured_without_coordinates(self):
        """Test structured clouds must carry x, y and z."""
        dtype = np.dtype([("x", "f8"), ("y", "f8"), ("ring", "u2")])
        with pytest.raises(ValueError, match="coordinate"):
            to_canonical(np.zeros(2, dtype=dtype))
