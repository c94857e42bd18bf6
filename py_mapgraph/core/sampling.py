"""
Seed point generation.

Poisson disk sampling gives a well spread set of sites with a guaranteed
minimum distance, the jittered grid is a cheaper alternative.
"""

import math
from typing import Optional

import numpy as np
import structlog

from .geometry import Rect

logger = structlog.get_logger()

DEFAULT_ATTEMPTS_PER_POINT = 30


def poisson_disk_sample(bounds: Rect, min_distance: float, seed: Optional[int] = None,
                        attempts: int = DEFAULT_ATTEMPTS_PER_POINT) -> np.ndarray:
    """
    Bridson's fast Poisson disk sampling.

    Args:
        bounds: Area to fill, points are strictly inside it
        min_distance: Minimum distance between any two points
        seed: Seed for numpy's random generator
        attempts: Candidates tried around an active point before retiring it

    Returns:
        Array of [x, y] coordinates
    """
    if min_distance <= 0:
        raise ValueError("min_distance must be positive")
    if bounds.width <= 0 or bounds.height <= 0:
        raise ValueError("bounds must have a positive area")

    rng = np.random.default_rng(seed)
    cell_size = min_distance / math.sqrt(2)
    grid_width = int(math.ceil(bounds.width / cell_size))
    grid_height = int(math.ceil(bounds.height / cell_size))
    grid = np.full((grid_width, grid_height), -1, dtype=np.int64)
    min_distance_sqr = min_distance * min_distance

    points = []
    active = []

    def grid_index(x, y):
        return int((x - bounds.x_min) / cell_size), int((y - bounds.y_min) / cell_size)

    def inside(x, y):
        return bounds.x_min < x < bounds.x_max and bounds.y_min < y < bounds.y_max

    def far_enough(x, y):
        gx, gy = grid_index(x, y)
        for i in range(max(0, gx - 2), min(grid_width, gx + 3)):
            for j in range(max(0, gy - 2), min(grid_height, gy + 3)):
                index = grid[i, j]
                if index >= 0:
                    px, py = points[index]
                    if (px - x) ** 2 + (py - y) ** 2 < min_distance_sqr:
                        return False
        return True

    def add(x, y):
        points.append((x, y))
        grid[grid_index(x, y)] = len(points) - 1
        active.append(len(points) - 1)

    x, y = bounds.x_min, bounds.y_min
    while not inside(x, y):
        x = rng.uniform(bounds.x_min, bounds.x_max)
        y = rng.uniform(bounds.y_min, bounds.y_max)
    add(x, y)

    while active:
        slot = int(rng.integers(len(active)))
        px, py = points[active[slot]]

        for _ in range(attempts):
            angle = rng.uniform(0.0, 2 * math.pi)
            radius = rng.uniform(min_distance, 2 * min_distance)
            x = px + radius * math.cos(angle)
            y = py + radius * math.sin(angle)
            if inside(x, y) and far_enough(x, y):
                add(x, y)
                break
        else:
            active[slot] = active[-1]
            active.pop()

    logger.info("Poisson disk sampling complete", points=len(points), min_distance=min_distance)
    return np.array(points)


def get_jittered_grid(width: float, height: float, spacing: float,
                      seed: Optional[int] = None) -> np.ndarray:
    """
    Square grid of points, each moved randomly inside its own cell.

    Args:
        width: Grid width
        height: Grid height
        spacing: Distance between grid points
        seed: Seed for numpy's random generator

    Returns:
        Array of [x, y] point coordinates, strictly inside (0, width) x (0, height)
    """
    if spacing <= 0:
        raise ValueError("spacing must be positive")
    rng = np.random.default_rng(seed)

    radius = spacing / 2
    jittering = radius * 0.9  # max deviation
    margin = 0.01

    points = []
    y = radius
    while y < height:
        x = radius
        while x < width:
            xj = min(max(round(x + rng.uniform(-jittering, jittering), 2), margin), width - margin)
            yj = min(max(round(y + rng.uniform(-jittering, jittering), 2), margin), height - margin)
            points.append([xj, yj])
            x += spacing
        y += spacing

    return np.array(points)
