"""
Mouth Gesture Detection Module
Scale-invariant mouth openness, yawn-scaled open ratio and smile intensity
"""

from collections import deque
from dataclasses import dataclass

import numpy as np

from .config import (
    MOUTH_HISTORY_SIZE,
    MOUTH_OPEN_THRESHOLD,
    MOUTH_YAWN_SCALE,
    SMILE_INTENSITY_SCALE,
    SMILE_THRESHOLD,
)
from .geometry import clamp, distance_2d, safe_ratio
from .landmarks import as_landmark_array, require_landmarks
from .validation import check_positive_int, check_ratio

# MediaPipe Face Mesh lip landmarks:
# 13: upper lip (inner edge, centre)
# 14: lower lip (inner edge, centre)
# 61: left mouth corner
# 291: right mouth corner
UPPER_LIP = 13
LOWER_LIP = 14
MOUTH_LEFT = 61
MOUTH_RIGHT = 291
MOUTH_INDICES = (UPPER_LIP, LOWER_LIP, MOUTH_LEFT, MOUTH_RIGHT)


@dataclass
class MouthState:
    is_open: bool
    openness: float       # smoothed height / width
    open_ratio: float     # openness scaled to [0, 1] against a full yawn
    is_smiling: bool
    smile_intensity: float

    def to_dict(self):
        return {
            "is_open": self.is_open,
            "openness": round(self.openness, 4),
            "open_ratio": round(self.open_ratio, 4),
            "is_smiling": self.is_smiling,
            "smile_intensity": round(self.smile_intensity, 4),
        }


def calculate_mouth_openness(landmarks):
    """
    Lip gap normalized by mouth width.

    Args:
        landmarks: Face landmark set

    Returns:
        height / width (float), 0.0 when the corners coincide
    """
    pts = as_landmark_array(landmarks)
    require_landmarks(pts, MOUTH_INDICES)
    height = distance_2d(pts[UPPER_LIP], pts[LOWER_LIP])
    width = distance_2d(pts[MOUTH_LEFT], pts[MOUTH_RIGHT])
    return safe_ratio(height, width)


class MouthGestureDetector:
    """
    Tracks mouth openness and smile.

    Openness is averaged over the last few frames; `open_ratio` feeds the
    fatigue detector's yawn logic.
    """

    def __init__(self, history_size=MOUTH_HISTORY_SIZE, open_threshold=MOUTH_OPEN_THRESHOLD):
        self._history = deque(maxlen=check_positive_int("history_size", history_size))
        self.open_threshold = check_ratio("open_threshold", open_threshold)

    def detect(self, landmarks):
        """
        Update mouth tracking from a face landmark set.

        Returns:
            MouthState
        """
        pts = as_landmark_array(landmarks)
        require_landmarks(pts, MOUTH_INDICES)

        self._history.append(calculate_mouth_openness(pts))
        avg_openness = float(np.mean(self._history))

        upper = pts[UPPER_LIP]
        lower = pts[LOWER_LIP]
        # Image y grows downward, so a lifted corner has a smaller y than the lip centre
        center_y = (upper[1] + lower[1]) / 2.0
        corner_height = ((center_y - pts[MOUTH_LEFT][1]) + (center_y - pts[MOUTH_RIGHT][1])) / 2.0

        return MouthState(
            is_open=avg_openness > self.open_threshold,
            openness=avg_openness,
            open_ratio=min(1.0, avg_openness / MOUTH_YAWN_SCALE),
            is_smiling=corner_height > SMILE_THRESHOLD,
            smile_intensity=clamp(corner_height * SMILE_INTENSITY_SCALE, 0.0, 1.0),
        )

    def set_threshold(self, threshold):
        self.open_threshold = check_ratio("open_threshold", threshold)

    def reset(self):
        self._history.clear()
