"""
Geometry Module
Distance and angle primitives over normalized landmark points
"""

import math

import numpy as np


def distance_2d(p1, p2):
    """
    Euclidean distance in the image (x, y) plane; z is ignored.

    Args:
        p1: First point (x, y[, z])
        p2: Second point (x, y[, z])

    Returns:
        Distance (float)
    """
    return float(np.linalg.norm(np.asarray(p1[:2], dtype=np.float64) - np.asarray(p2[:2], dtype=np.float64)))


def safe_ratio(numerator, denominator, default=0.0):
    """Divide, returning `default` when the denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def angle_2d(p1, p2):
    """
    Angle (radians) of the vector p1 -> p2 against the +x axis.

    Returns 0.0 for coincident points.
    """
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    if dx == 0 and dy == 0:
        return 0.0
    return math.atan2(dy, dx)


def mean_y(points, indices):
    """Average y coordinate of the given landmark indices."""
    return float(np.mean(points[list(indices), 1]))


def clamp(value, lower, upper):
    return max(lower, min(upper, value))
