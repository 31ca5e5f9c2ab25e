"""
tests/test_region.py
====================
Pytest test suite for the Region class.

Region fixtures
---------------
  uniform       16 x 16 raster, every cell green (0x00FF00), default bounds
                (-90, 90, -180, 180).  Inside == inside the bounding box.

  quadrant      16 x 32 raster over default bounds; green only where
                lat >= 0 and long >= 0 (rows 8-15, columns 16-31).

  blank         default 1024 x 1024 all-black raster; nothing is inside.

Cell sizes in these fixtures are powers of two, so lower-corner coordinates
are exact; ``TestSample`` also covers a checkerboard whose size and bounds
make cell edges inexact.
"""

import logging
import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from geoprior._region import Region, _lower_corner

GREEN = 0x00FF00
RED = 0xFF0000


# ======================================================================== #
# Fixtures                                                                  #
# ======================================================================== #


@pytest.fixture(scope="module")
def uniform():
    return Region(np.full((16, 16), GREEN, dtype=np.int64))


@pytest.fixture(scope="module")
def quadrant():
    raster = np.zeros((16, 32), dtype=np.int64)
    raster[8:, 16:] = GREEN
    return Region(raster)


@pytest.fixture(scope="module")
def blank():
    return Region()


# ======================================================================== #
# Construction                                                              #
# ======================================================================== #


class TestConstruction:
    def test_default_size_and_bounds(self, blank):
        assert (blank.height, blank.width) == (1024, 1024)
        assert blank.bounds == (-90.0, 90.0, -180.0, 180.0)
        assert blank.region_color == GREEN
        assert blank.n_cells_inside == 0

    def test_raster_is_read_only(self, uniform):
        with pytest.raises(ValueError):
            uniform.raster[0, 0] = RED

    def test_raster_is_copied(self):
        raster = np.full((4, 4), GREEN, dtype=np.int64)
        region = Region(raster)
        raster[:] = 0
        assert region.n_cells_inside == 16

    def test_rgb_raster_is_packed(self):
        rgb = np.zeros((2, 3, 3), dtype=np.uint8)
        rgb[1, 2] = (0, 255, 0)
        rgb[0, 0] = (255, 0, 0)
        region = Region(rgb)
        assert (region.height, region.width) == (2, 3)
        assert region.raster[1, 2] == GREEN
        assert region.raster[0, 0] == RED
        assert region.n_cells_inside == 1

    def test_rgba_alpha_channel_is_ignored(self):
        rgba = np.zeros((2, 2, 4), dtype=np.uint8)
        rgba[:, :, 1] = 255
        rgba[:, :, 3] = 17
        assert Region(rgba).n_cells_inside == 4

    def test_high_bits_are_masked(self):
        region = Region(np.full((2, 2), 0xFF00FF00, dtype=np.int64))
        assert region.n_cells_inside == 4

    @pytest.mark.parametrize(
        "bounds",
        [(10, -10, -180, 180), (-90, 90, 5, 5), (0, 0, 0, 1)],
    )
    def test_invalid_bounds(self, bounds):
        with pytest.raises(ValueError, match="Bounds"):
            Region(np.zeros((2, 2)), bounds=bounds)

    def test_bad_raster_shape(self):
        with pytest.raises(ValueError, match="Raster"):
            Region(np.zeros(5))

    def test_size_mismatch(self):
        with pytest.raises(ValueError, match="does not match"):
            Region(np.zeros((4, 4)), width=8)

    def test_blank_with_custom_size(self):
        region = Region(width=8, height=4)
        assert region.raster.shape == (4, 8)

    def test_summary_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="geoprior"):
            Region(np.full((2, 2), GREEN))
        assert "covers 4 cells" in caplog.text

    def test_empty_region_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="geoprior"):
            Region(np.zeros((2, 2)))
        assert "does not occur in the raster" in caplog.text


# ======================================================================== #
# Containment                                                               #
# ======================================================================== #


class TestIsInside:
    @pytest.mark.parametrize(
        "lat, lon",
        [
            (0.0, 0.0),
            (-90.0, -180.0),
            (89.999, 179.999),
            (-45.5, 120.25),
            (12.0, -170.0),
        ],
    )
    def test_uniform_inside_box(self, uniform, lat, lon):
        assert uniform.is_inside(lat, lon)

    @pytest.mark.parametrize(
        "lat, lon",
        [
            (-90.001, 0.0),
            (0.0, -180.5),
            (95.0, 0.0),
            (0.0, 200.0),
            (1e300, -1e300),
            (float("inf"), 0.0),
            (0.0, float("-inf")),
            (float("nan"), 0.0),
        ],
    )
    def test_uniform_outside_box(self, uniform, lat, lon):
        assert not uniform.is_inside(lat, lon)

    @pytest.mark.parametrize(
        "lat, lon", [(90.0, 0.0), (0.0, 180.0), (90.0, 180.0)]
    )
    def test_upper_edges_are_excluded(self, uniform, lat, lon):
        assert not uniform.is_inside(lat, lon)

    @pytest.mark.parametrize(
        "lat, lon, expected",
        [
            (45.0, 90.0, True),
            (0.0, 0.0, True),
            (-0.001, 90.0, False),
            (45.0, -0.001, False),
            (-45.0, -90.0, False),
            (45.0, -90.0, False),
            (-45.0, 90.0, False),
        ],
    )
    def test_quadrant(self, quadrant, lat, lon, expected):
        assert quadrant.is_inside(lat, lon) is expected

    def test_other_colour_is_outside(self):
        raster = np.full((4, 4), GREEN, dtype=np.int64)
        raster[0, 0] = RED
        region = Region(raster)
        assert not region.is_inside(-89.0, -179.0)
        red = Region(raster, region_color=RED)
        assert red.is_inside(-89.0, -179.0)
        assert not red.is_inside(0.0, 0.0)

    def test_custom_bounds(self):
        region = Region(np.full((10, 10), GREEN), bounds=(30.0, 40.0, -10.0, 0.0))
        assert region.is_inside(35.0, -5.0)
        assert not region.is_inside(0.0, 0.0)

    def test_cell_index(self, quadrant):
        assert quadrant.cell_index(-90.0, -180.0) == (0, 0)
        assert quadrant.cell_index(0.0, 0.0) == (8, 16)
        assert quadrant.cell_index(89.9, 179.9) == (15, 31)
        assert quadrant.cell_index(90.0, 0.0) is None


class TestContains:
    def test_matches_is_inside(self, quadrant):
        rng = np.random.default_rng(7)
        lats = rng.uniform(-100, 100, size=200)
        longs = rng.uniform(-200, 200, size=200)
        expected = [quadrant.is_inside(a, b) for a, b in zip(lats, longs)]
        np.testing.assert_array_equal(quadrant.contains(lats, longs), expected)

    def test_length_mismatch(self, quadrant):
        with pytest.raises(ValueError, match="equal length"):
            quadrant.contains([0.0, 1.0], [0.0])

    def test_unknown_backend(self, quadrant):
        with pytest.raises(ValueError, match="not available"):
            quadrant.contains([0.0], [0.0], backend="cuda")


# ======================================================================== #
# Sampling                                                                  #
# ======================================================================== #


class TestSample:
    def test_samples_are_inside(self, quadrant):
        rng = np.random.default_rng(2024)
        for _ in range(200):
            lat, lon = quadrant.sample(rng=rng)
            assert quadrant.is_inside(lat, lon)

    def test_samples_are_lower_cell_corners(self, quadrant):
        rng = np.random.default_rng(5)
        lat_step = 180.0 / quadrant.height
        long_step = 360.0 / quadrant.width
        for _ in range(50):
            lat, lon = quadrant.sample(rng=rng)
            assert ((lat + 90.0) / lat_step).is_integer()
            assert ((lon + 180.0) / long_step).is_integer()

    def test_samples_are_inside_with_inexact_cells(self):
        rows, cols = np.indices((100, 100))
        raster = np.where((rows + cols) % 2 == 0, GREEN, RED)
        region = Region(raster, bounds=(-43.7, 12.3, 101.1, 179.9))
        rng = np.random.default_rng(17)
        for _ in range(2000):
            lat, lon = region.sample(rng=rng)
            assert region.is_inside(lat, lon)

    @pytest.mark.parametrize(
        "lo, hi, n", [(-90.0, 90.0, 1000), (-43.7, 12.3, 100), (101.1, 179.9, 37)]
    )
    def test_lower_corner_maps_back(self, lo, hi, n):
        for i in range(n):
            x = _lower_corner(lo, hi, n, i)
            assert int(np.floor(n * (x - lo) / (hi - lo))) == i

    def test_single_cell_region(self):
        raster = np.zeros((8, 8), dtype=np.int64)
        raster[3, 5] = GREEN
        region = Region(raster, bounds=(0.0, 8.0, 0.0, 8.0))
        rng = np.random.default_rng(0)
        assert region.sample(rng=rng) == (3.0, 5.0)

    def test_reproducible_with_seed(self, quadrant):
        a = [quadrant.sample(rng=np.random.default_rng(11)) for _ in range(3)]
        b = [quadrant.sample(rng=np.random.default_rng(11)) for _ in range(3)]
        assert a == b

    def test_outside_request_still_samples_region(self, quadrant, caplog):
        rng = np.random.default_rng(3)
        with caplog.at_level(logging.WARNING, logger="geoprior"):
            lat, lon = quadrant.sample(is_inside=False, rng=rng)
        assert quadrant.is_inside(lat, lon)
        assert "is_inside=False" in caplog.text

    def test_empty_region_raises(self, blank):
        with pytest.raises(ValueError, match="Cannot sample"):
            blank.sample()

    def test_default_rng(self, uniform):
        lat, lon = uniform.sample()
        assert uniform.is_inside(lat, lon)


# ======================================================================== #
# Quadrangle regions                                                        #
# ======================================================================== #


class TestFromQuadrangle:
    @pytest.fixture(scope="class")
    def box(self):
        # Axis-aligned quadrangle lat [0, 45], long [0, 90] in (lat, long).
        corners = [(0.0, 0.0), (45.0, 0.0), (45.0, 90.0), (0.0, 90.0)]
        return Region.from_quadrangle(corners, width=64, height=64)

    def test_inside_and_outside(self, box):
        assert box.is_inside(20.0, 40.0)
        assert not box.is_inside(-20.0, 40.0)
        assert not box.is_inside(20.0, 100.0)
        assert not box.is_inside(60.0, 10.0)

    def test_cell_count(self, box):
        # 45 deg of 180 over 64 rows = 16 rows; 90 of 360 over 64 cols = 16.
        assert box.n_cells_inside == 16 * 16

    def test_slanted_quadrangle(self):
        corners = [(-40.0, -100.0), (10.0, -120.0), (50.0, 80.0), (-20.0, 60.0)]
        region = Region.from_quadrangle(corners, width=128, height=128)
        assert region.is_inside(0.0, 0.0)
        assert not region.is_inside(80.0, 170.0)
        assert 0 < region.n_cells_inside < 128 * 128

    def test_corner_count(self):
        with pytest.raises(ValueError, match="4 corners"):
            Region.from_quadrangle([(0, 0), (1, 1), (2, 0)])

    @pytest.mark.slow
    def test_default_size(self):
        corners = [(0.0, 0.0), (45.0, 0.0), (45.0, 90.0), (0.0, 90.0)]
        region = Region.from_quadrangle(corners)
        assert region.raster.shape == (1024, 1024)
        assert region.n_cells_inside == 256 * 256
