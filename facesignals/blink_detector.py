"""
Blink Detection Module
Counts blinks with a consecutive-frame state machine over the average EAR
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .config import BLINK_CONSEC_FRAMES, EAR_THRESHOLD
from .ear_detector import calculate_eye_ears
from .validation import check_positive_int, check_ratio

logger = logging.getLogger("facesignals.blink")


class BlinkState(str, Enum):
    OPEN = "OPEN"
    CLOSING = "CLOSING"


@dataclass
class BlinkDetectionResult:
    """Per-frame blink output"""
    is_blinking: bool
    left_ear: float
    right_ear: float
    avg_ear: float

    def to_dict(self):
        return {
            "is_blinking": self.is_blinking,
            "left_ear": round(self.left_ear, 4),
            "right_ear": round(self.right_ear, 4),
            "avg_ear": round(self.avg_ear, 4),
        }


class BlinkDetector:
    """
    Detects blinks from the average EAR of both eyes.

    A frame with avg EAR below the threshold moves the detector into
    CLOSING and increments a consecutive-frame counter. When the eyes reopen,
    the blink is counted only if the counter reached `consec_frames`, so a
    single noisy low-EAR frame is not a blink.
    """

    def __init__(self, ear_threshold=EAR_THRESHOLD, consec_frames=BLINK_CONSEC_FRAMES):
        """
        Initialize blink detector.

        Args:
            ear_threshold: Average EAR below which the eyes count as closed
            consec_frames: Closed frames required before a reopening counts
        """
        self.ear_threshold = check_ratio("ear_threshold", ear_threshold)
        self.consec_frames = check_positive_int("consec_frames", consec_frames)

        self.state = BlinkState.OPEN
        self._frame_counter = 0
        self._blink_count = 0

    @property
    def blink_count(self):
        return self._blink_count

    def detect(self, landmarks):
        """
        Update blink tracking from a face landmark set.

        Args:
            landmarks: Face landmark set

        Returns:
            BlinkDetectionResult
        """
        ears = calculate_eye_ears(landmarks)
        return self.update(ears.left, ears.right)

    def update(self, left_ear, right_ear):
        """
        Update blink tracking with per-eye EAR values.

        Args:
            left_ear: Left eye EAR
            right_ear: Right eye EAR

        Returns:
            BlinkDetectionResult
        """
        avg_ear = (left_ear + right_ear) / 2.0
        is_blinking = avg_ear < self.ear_threshold

        if is_blinking:
            self.state = BlinkState.CLOSING
            self._frame_counter += 1
        else:
            if self._frame_counter >= self.consec_frames:
                self._blink_count += 1
                logger.debug("Blink #%d after %d closed frames", self._blink_count, self._frame_counter)
            self._frame_counter = 0
            self.state = BlinkState.OPEN

        return BlinkDetectionResult(
            is_blinking=is_blinking,
            left_ear=left_ear,
            right_ear=right_ear,
            avg_ear=avg_ear,
        )

    def reset_blink_count(self):
        self._blink_count = 0

    def reset(self):
        """Clear the counter and the in-progress closure."""
        self._blink_count = 0
        self._frame_counter = 0
        self.state = BlinkState.OPEN

    def set_threshold(self, threshold):
        self.ear_threshold = check_ratio("ear_threshold", threshold)

    def set_consecutive_frames(self, frames):
        self.consec_frames = check_positive_int("consec_frames", frames)
