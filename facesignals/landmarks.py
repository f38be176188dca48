"""
Landmark Module
Landmark container types, index contract and input normalization
"""

from typing import NamedTuple

import numpy as np

from .exceptions import InsufficientLandmarksError, InvalidParameterError

# Face landmark model: 468 points, 478 with iris refinement
FACE_LANDMARK_COUNT = 468
FACE_LANDMARK_COUNT_REFINED = 478

# Hand landmark model: exactly 21 points
HAND_LANDMARK_COUNT = 21


class Landmark(NamedTuple):
    """One normalized landmark: x, y in [0, 1] of the frame, z relative depth."""
    x: float
    y: float
    z: float = 0.0


def _point_xyz(point):
    """Read (x, y, z) from a tuple/list or an object with x/y/z attributes."""
    if hasattr(point, "x") and hasattr(point, "y"):
        return (float(point.x), float(point.y), float(getattr(point, "z", 0.0)))
    try:
        values = tuple(point)
    except TypeError:
        raise ValueError(f"Landmark must be a point with x/y[/z], got {point!r}") from None
    if len(values) not in (2, 3):
        raise ValueError(f"Landmark must have 2 or 3 coordinates, got {len(values)}")
    if len(values) == 2:
        return (float(values[0]), float(values[1]), 0.0)
    return (float(values[0]), float(values[1]), float(values[2]))


def as_landmark_array(landmarks):
    """
    Normalize a landmark set into an (N, 3) float64 numpy array.

    Accepts numpy arrays of shape (N, 2) or (N, 3), sequences of (x, y[, z])
    tuples, sequences of objects with .x/.y/.z attributes, or a landmark list
    object exposing them under .landmark (the MediaPipe result layout).

    Args:
        landmarks: Landmark set in any of the supported layouts

    Returns:
        numpy array of shape (N, 3)
    """
    if landmarks is None:
        return np.zeros((0, 3), dtype=np.float64)

    if hasattr(landmarks, "landmark"):
        landmarks = landmarks.landmark

    if isinstance(landmarks, np.ndarray):
        pts = np.asarray(landmarks, dtype=np.float64)
        if pts.ndim != 2 or pts.shape[1] not in (2, 3):
            raise ValueError(f"Landmark array must have shape (N, 2) or (N, 3), got {pts.shape}")
        if pts.shape[1] == 2:
            pts = np.hstack([pts, np.zeros((pts.shape[0], 1))])
        return pts

    rows = [_point_xyz(p) for p in landmarks]
    if not rows:
        return np.zeros((0, 3), dtype=np.float64)
    return np.array(rows, dtype=np.float64)


def require_landmarks(points, indices):
    """
    Check that every index in `indices` is addressable in `points`.

    Args:
        points: (N, 3) landmark array
        indices: Iterable of landmark indices the caller is about to read

    Raises:
        InsufficientLandmarksError: If the set is too short
    """
    required = max(indices) + 1
    if len(points) < required:
        raise InsufficientLandmarksError(required, len(points))


def require_hand_landmarks(points):
    """
    Check that `points` is a complete hand landmark set.

    Raises:
        InsufficientLandmarksError: If the set has fewer than 21 points
        InvalidParameterError: If the set has more than 21 points
    """
    if len(points) < HAND_LANDMARK_COUNT:
        raise InsufficientLandmarksError(HAND_LANDMARK_COUNT, len(points), "hand landmarks")
    if len(points) > HAND_LANDMARK_COUNT:
        raise InvalidParameterError("landmarks", len(points), f"hand sets must have exactly {HAND_LANDMARK_COUNT} points")
