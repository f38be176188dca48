"""
Eyebrow Detection Module
Detects raised eyebrows against a calibrated resting position
"""

import logging
from dataclasses import dataclass

from .config import EYEBROW_RAISE_THRESHOLD
from .geometry import mean_y
from .landmarks import as_landmark_array, require_landmarks
from .validation import check_ratio

logger = logging.getLogger("facesignals.eyebrows")

LEFT_EYEBROW = (70, 63, 105, 66, 107)
RIGHT_EYEBROW = (300, 293, 334, 296, 336)


@dataclass
class EyebrowState:
    left_raised: bool
    right_raised: bool
    both_raised: bool

    def to_dict(self):
        return {
            "left_raised": self.left_raised,
            "right_raised": self.right_raised,
            "both_raised": self.both_raised,
        }


class EyebrowDetector:
    """
    Compares the mean brow height against a per-brow baseline.

    The baseline is taken from the first frame seen unless calibrate() is
    called explicitly. Raising a brow moves it up the image, i.e. decreases y.
    """

    def __init__(self, raise_threshold=EYEBROW_RAISE_THRESHOLD):
        self.raise_threshold = check_ratio("raise_threshold", raise_threshold)
        self.baseline_left_y = None
        self.baseline_right_y = None

    @property
    def is_calibrated(self):
        return self.baseline_left_y is not None

    def _brow_heights(self, landmarks):
        pts = as_landmark_array(landmarks)
        require_landmarks(pts, LEFT_EYEBROW + RIGHT_EYEBROW)
        return mean_y(pts, LEFT_EYEBROW), mean_y(pts, RIGHT_EYEBROW)

    def calibrate(self, landmarks):
        """Store the current brow heights as the resting baseline."""
        self.baseline_left_y, self.baseline_right_y = self._brow_heights(landmarks)
        logger.info("Eyebrow baseline set (left=%.4f, right=%.4f)", self.baseline_left_y, self.baseline_right_y)

    def detect(self, landmarks):
        """
        Detect raised eyebrows.

        Returns:
            EyebrowState
        """
        left_y, right_y = self._brow_heights(landmarks)

        # Auto-calibrate on first use
        if not self.is_calibrated:
            self.baseline_left_y, self.baseline_right_y = left_y, right_y

        left_raised = (self.baseline_left_y - left_y) > self.raise_threshold
        right_raised = (self.baseline_right_y - right_y) > self.raise_threshold

        return EyebrowState(
            left_raised=left_raised,
            right_raised=right_raised,
            both_raised=left_raised and right_raised,
        )

    def set_threshold(self, threshold):
        self.raise_threshold = check_ratio("raise_threshold", threshold)

    def reset(self):
        """Forget the baseline; the next frame recalibrates."""
        self.baseline_left_y = None
        self.baseline_right_y = None
