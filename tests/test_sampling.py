"""Tests for seed point sampling."""

import pytest
import numpy as np
from scipy.spatial.distance import pdist

from py_mapgraph.core.geometry import Rect
from py_mapgraph.core.sampling import get_jittered_grid, poisson_disk_sample


class TestPoissonDisk:
    """Test Poisson disk sampling."""

    def test_minimum_distance(self):
        points = poisson_disk_sample(Rect.from_size(100, 100), 5.0, seed=1)
        assert pdist(points).min() >= 5.0

    def test_points_strictly_inside(self):
        bounds = Rect(10.0, 20.0, 60.0, 50.0)
        points = poisson_disk_sample(bounds, 3.0, seed=2)

        assert np.all(points[:, 0] > 10) and np.all(points[:, 0] < 60)
        assert np.all(points[:, 1] > 20) and np.all(points[:, 1] < 50)

    def test_area_is_filled(self):
        points = poisson_disk_sample(Rect.from_size(100, 100), 5.0, seed=3)
        # A maximal packing at distance r has well over area / (4 r^2) points
        assert len(points) > 100

    def test_same_seed_same_points(self):
        bounds = Rect.from_size(50, 50)
        np.testing.assert_array_equal(
            poisson_disk_sample(bounds, 4.0, seed=7),
            poisson_disk_sample(bounds, 4.0, seed=7),
        )

    def test_different_seeds(self):
        bounds = Rect.from_size(50, 50)
        points1 = poisson_disk_sample(bounds, 4.0, seed=7)
        points2 = poisson_disk_sample(bounds, 4.0, seed=8)
        assert points1.shape != points2.shape or not np.array_equal(points1, points2)

    @pytest.mark.parametrize("bounds,min_distance", [
        (Rect.from_size(10, 10), 0.0),
        (Rect.from_size(10, 10), -1.0),
        (Rect.from_size(0, 10), 1.0),
    ])
    def test_invalid_arguments(self, bounds, min_distance):
        with pytest.raises(ValueError):
            poisson_disk_sample(bounds, min_distance)


class TestJitteredGrid:
    """Test jittered grid generation."""

    def test_grid_size(self):
        points = get_jittered_grid(100, 100, 10, seed=1)
        assert len(points) == 100

    def test_point_bounds(self):
        points = get_jittered_grid(100, 80, 10, seed=1)

        assert np.all(points[:, 0] > 0) and np.all(points[:, 0] < 100)
        assert np.all(points[:, 1] > 0) and np.all(points[:, 1] < 80)

    def test_jittering_consistency(self):
        np.testing.assert_array_equal(
            get_jittered_grid(50, 50, 5, seed=3),
            get_jittered_grid(50, 50, 5, seed=3),
        )

    def test_invalid_spacing(self):
        with pytest.raises(ValueError):
            get_jittered_grid(50, 50, 0)
