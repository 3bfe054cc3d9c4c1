"""Synthetic scan lines and sweeps shared by the test suites."""

import numpy as np
import pytest

from loam_features.common.point_types import POINT_XYZIRT


def make_cloud(xyz, ring=0, intensity=None):
    """Wrap an (N, 3) array into a canonical cloud on one ring."""
    xyz = np.asarray(xyz, dtype=np.float64)
    cloud = np.zeros(len(xyz), dtype=POINT_XYZIRT)
    cloud["x"], cloud["y"], cloud["z"] = xyz[:, 0], xyz[:, 1], xyz[:, 2]
    cloud["ring"] = ring
    cloud["time"] = np.linspace(0.0, 0.1, len(xyz), endpoint=False)
    if intensity is not None:
        cloud["intensity"] = intensity
    return cloud


def spike_line(n=41, spike_idx=20, range_=100.0, spacing=0.2, offset=1.0):
    """Straight line at constant x with one point pulled towards the sensor."""
    y = (np.arange(n) - spike_idx) * spacing
    xyz = np.column_stack([np.full(n, range_), y, np.zeros(n)])
    xyz[spike_idx, 0] -= offset
    return xyz


def straight_line(n=121, x=10.0, z=-1.0, spacing=0.05):
    """Noise-free straight line lying on the plane x = const."""
    y = (np.arange(n) - n // 2) * spacing
    return np.column_stack([np.full(n, x), y, np.full(n, z)])


def corner_line(n_per_leg=120, spacing=0.05, noise=0.0, seed=0):
    """L-shaped scan line running along two walls meeting at (5, 5)."""
    rng = np.random.default_rng(seed)
    k = np.arange(n_per_leg)
    leg1 = np.column_stack([np.full(n_per_leg, 5.0), 5.0 - spacing * (n_per_leg - k), np.zeros(n_per_leg)])
    leg2 = np.column_stack([5.0 - spacing * k, np.full(n_per_leg, 5.0), np.zeros(n_per_leg)])
    xyz = np.vstack([leg1, leg2])
    if noise:
        xyz += rng.normal(0.0, noise, xyz.shape)
    return xyz


def zigzag_line(n=60, x=30.0, spacing=0.05, amplitude=0.3):
    """Line whose height alternates every point: every point is a corner candidate."""
    y = np.arange(n) * spacing
    z = np.where(np.arange(n) % 2 == 0, 0.0, amplitude)
    return np.column_stack([np.full(n, x), y, z])


def room_sweep(n_beams=16, fov_deg=30.0, n_azimuth=900, half_size=(6.0, 4.0),
               floor=-1.5, ceiling=2.5, noise=0.005, seed=0):
    """Ray cast a sweep of an n-beam sensor inside a box room."""
    rng = np.random.default_rng(seed)
    elevations = np.radians(np.linspace(fov_deg / 2, -fov_deg / 2, n_beams))
    azimuths = np.linspace(-np.pi, np.pi, n_azimuth, endpoint=False)
    el, az = np.meshgrid(elevations, azimuths, indexing="ij")
    d = np.stack([np.cos(el) * np.cos(az), np.cos(el) * np.sin(az), np.sin(el)], axis=-1)

    limits = np.array(half_size)
    with np.errstate(divide="ignore", invalid="ignore"):
        t_walls = np.min(np.abs(limits / d[..., :2]), axis=-1)
        t_vertical = np.where(d[..., 2] > 0, ceiling / d[..., 2], floor / d[..., 2])
    t = np.minimum(t_walls, t_vertical) + rng.normal(0.0, noise, el.shape)
    xyz = (d * t[..., None]).reshape(-1, 3)

    cloud = make_cloud(xyz)
    cloud["ring"] = np.repeat(np.arange(n_beams), n_azimuth)
    cloud["intensity"] = rng.uniform(0, 100, len(cloud))
    return cloud


@pytest.fixture
def lines():
    """Namespace of scan line generators."""
    class Lines:
        spike = staticmethod(spike_line)
        straight = staticmethod(straight_line)
        corner = staticmethod(corner_line)
        zigzag = staticmethod(zigzag_line)
        room = staticmethod(room_sweep)
        cloud = staticmethod(make_cloud)
    return Lines


def assert_clouds_equal(a, b):
    """Bit-for-bit equality of two canonical clouds."""
    assert a.dtype == b.dtype
    assert len(a) == len(b)
    assert a.tobytes() == b.tobytes()


@pytest.fixture
def clouds_equal():
    return assert_clouds_equal
