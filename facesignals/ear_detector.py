"""
EAR (Eye Aspect Ratio) Detection Module
Calculates EAR for single eye and average EAR for both eyes
"""

from dataclasses import dataclass
from typing import NamedTuple

from .config import EAR_THRESHOLD
from .geometry import distance_2d, safe_ratio
from .landmarks import as_landmark_array, require_landmarks


class EyeIndices(NamedTuple):
    """
    The six face-mesh points of one eye, in EAR formula order.

    p1/p4 are the horizontal corners, (p2, p6) and (p3, p5) the two vertical
    lid pairs.
    """
    p1: int  # outer corner
    p2: int  # upper lid, outer
    p3: int  # upper lid, inner
    p4: int  # inner corner
    p5: int  # lower lid, inner
    p6: int  # lower lid, outer


# MediaPipe Face Mesh landmark indices
LEFT_EYE = EyeIndices(33, 160, 158, 133, 153, 144)
RIGHT_EYE = EyeIndices(362, 385, 387, 263, 373, 380)

EAR_INDICES = tuple(LEFT_EYE) + tuple(RIGHT_EYE)


@dataclass
class EyeAspectRatios:
    left: float
    right: float
    avg: float

    def to_dict(self):
        return {"left": round(self.left, 4), "right": round(self.right, 4), "avg": round(self.avg, 4)}


def calculate_ear(landmarks, eye):
    """
    Calculate EAR for a single eye.

    EAR = (|p2-p6| + |p3-p5|) / (2 * |p1-p4|), measured in the (x, y) plane.

    Args:
        landmarks: Face landmark set (any layout accepted by as_landmark_array)
        eye: EyeIndices for the eye to measure

    Returns:
        EAR value (float); 0.0 when the eye corners coincide

    Raises:
        InsufficientLandmarksError: If the set does not reach the eye indices
    """
    pts = as_landmark_array(landmarks)
    require_landmarks(pts, eye)

    # vertical distances
    v1 = distance_2d(pts[eye.p2], pts[eye.p6])
    v2 = distance_2d(pts[eye.p3], pts[eye.p5])
    # horizontal distance
    h = distance_2d(pts[eye.p1], pts[eye.p4])

    return safe_ratio(v1 + v2, 2.0 * h)


def calculate_eye_ears(landmarks):
    """
    Calculate left, right and average EAR in one pass.

    Returns:
        EyeAspectRatios
    """
    pts = as_landmark_array(landmarks)
    require_landmarks(pts, EAR_INDICES)

    left = calculate_ear(pts, LEFT_EYE)
    right = calculate_ear(pts, RIGHT_EYE)
    return EyeAspectRatios(left=left, right=right, avg=(left + right) / 2.0)


def calculate_average_ear(landmarks):
    """
    Calculate average EAR from both eyes.

    Args:
        landmarks: Face landmark set

    Returns:
        Average EAR value (float)
    """
    return calculate_eye_ears(landmarks).avg


def are_eyes_closed(landmarks, threshold=EAR_THRESHOLD):
    """True when the average EAR is below `threshold`."""
    return calculate_average_ear(landmarks) < threshold
