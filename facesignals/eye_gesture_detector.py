"""
Eye Gesture Detection Module
Smoothed per-eye EAR, wink classification and intentional-wink timing
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .config import (
    EYE_BOTH_CLOSED_THRESHOLD,
    EYE_HISTORY_SIZE,
    EYE_OPEN_THRESHOLD,
    WINK_DIFF_THRESHOLD,
    WINK_MAX_SECONDS,
    WINK_MIN_SECONDS,
)
from .ear_detector import calculate_eye_ears
from .exceptions import InvalidParameterError
from .validation import check_non_negative, check_positive_int, check_ratio

logger = logging.getLogger("facesignals.eyes")


class WinkSide(str, Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class EyeState:
    """Smoothed eye state for one frame"""
    left_open: bool
    right_open: bool
    left_ear: float
    right_ear: float
    is_winking_left: bool
    is_winking_right: bool
    is_both_closed: bool

    def to_dict(self):
        return {
            "left_open": self.left_open,
            "right_open": self.right_open,
            "left_ear": round(self.left_ear, 4),
            "right_ear": round(self.right_ear, 4),
            "is_winking_left": self.is_winking_left,
            "is_winking_right": self.is_winking_right,
            "is_both_closed": self.is_both_closed,
        }


class EyeGestureDetector:
    """
    Detects winks from smoothed per-eye EAR.

    A wink needs one eye closed, the other open, and an EAR gap wider than
    `wink_diff`; the gap check rejects lighting or distance changes that
    lower both EARs together.
    """

    def __init__(
        self,
        history_size=EYE_HISTORY_SIZE,
        open_threshold=EYE_OPEN_THRESHOLD,
        closed_threshold=EYE_BOTH_CLOSED_THRESHOLD,
        wink_diff=WINK_DIFF_THRESHOLD,
        min_wink_seconds=WINK_MIN_SECONDS,
        max_wink_seconds=WINK_MAX_SECONDS,
    ):
        history_size = check_positive_int("history_size", history_size)
        self._left_history = deque(maxlen=history_size)
        self._right_history = deque(maxlen=history_size)

        self.open_threshold = check_ratio("open_threshold", open_threshold)
        self.closed_threshold = check_ratio("closed_threshold", closed_threshold)
        self.wink_diff = check_ratio("wink_diff", wink_diff)
        self.min_wink_seconds = 0.0
        self.max_wink_seconds = 0.0
        self.set_wink_duration(min_wink_seconds, max_wink_seconds)

        self._left_wink_start = None
        self._right_wink_start = None
        self.last_state = None

    def detect(self, landmarks):
        """
        Update smoothing history from a face landmark set.

        Returns:
            EyeState
        """
        ears = calculate_eye_ears(landmarks)
        return self.update(ears.left, ears.right)

    def update(self, left_ear, right_ear):
        """
        Update smoothing history with raw per-eye EAR values.

        Args:
            left_ear: Left eye EAR for this frame
            right_ear: Right eye EAR for this frame

        Returns:
            EyeState computed from the smoothed values
        """
        self._left_history.append(left_ear)
        self._right_history.append(right_ear)

        avg_left = float(np.mean(self._left_history))
        avg_right = float(np.mean(self._right_history))

        left_open = avg_left > self.open_threshold
        right_open = avg_right > self.open_threshold

        # Detect wink: one eye closed while the other is open
        ear_diff = abs(avg_left - avg_right)
        is_winking_left = not left_open and right_open and ear_diff > self.wink_diff
        is_winking_right = not right_open and left_open and ear_diff > self.wink_diff

        is_both_closed = avg_left < self.closed_threshold and avg_right < self.closed_threshold

        self.last_state = EyeState(
            left_open=left_open,
            right_open=right_open,
            left_ear=avg_left,
            right_ear=avg_right,
            is_winking_left=is_winking_left,
            is_winking_right=is_winking_right,
            is_both_closed=is_both_closed,
        )
        return self.last_state

    def detect_intentional_wink(self, landmarks, timestamp=None):
        """
        Report a completed wink whose length fell inside the wink window.

        Args:
            landmarks: Face landmark set
            timestamp: Frame time in seconds (defaults to now)

        Returns:
            WinkSide or None
        """
        state = self.detect(landmarks)
        return self.update_wink(state, timestamp)

    def update_wink(self, state, timestamp=None):
        """
        Advance the per-eye wink timers with an already computed EyeState.

        A wink is reported when it ends; anything shorter than the minimum is
        noise and anything longer than the maximum is a deliberate closed eye.
        """
        if timestamp is None:
            timestamp = time.time()

        self._left_wink_start, left_done = self._track_wink(
            state.is_winking_left, self._left_wink_start, timestamp
        )
        if left_done:
            logger.debug("Left wink")
            return WinkSide.LEFT

        self._right_wink_start, right_done = self._track_wink(
            state.is_winking_right, self._right_wink_start, timestamp
        )
        if right_done:
            logger.debug("Right wink")
            return WinkSide.RIGHT

        return None

    def _track_wink(self, is_winking, start, timestamp):
        if is_winking:
            return (start if start is not None else timestamp), False
        if start is None:
            return None, False
        duration = timestamp - start
        return None, self.min_wink_seconds <= duration <= self.max_wink_seconds

    def set_thresholds(self, open_threshold=None, closed_threshold=None, wink_diff=None):
        """
        Update eye thresholds.

        Args:
            open_threshold: Smoothed EAR above which an eye is open
            closed_threshold: Smoothed EAR below which both eyes count as closed
            wink_diff: Minimum EAR gap between the eyes for a wink
        """
        if open_threshold is not None:
            self.open_threshold = check_ratio("open_threshold", open_threshold)
        if closed_threshold is not None:
            self.closed_threshold = check_ratio("closed_threshold", closed_threshold)
        if wink_diff is not None:
            self.wink_diff = check_ratio("wink_diff", wink_diff)

    def set_wink_duration(self, min_seconds=None, max_seconds=None):
        lower = self.min_wink_seconds if min_seconds is None else check_non_negative("min_wink_seconds", min_seconds)
        upper = self.max_wink_seconds if max_seconds is None else check_non_negative("max_wink_seconds", max_seconds)
        if lower > upper:
            raise InvalidParameterError("min_wink_seconds", lower, f"must not exceed max_wink_seconds ({upper})")
        self.min_wink_seconds = lower
        self.max_wink_seconds = upper

    def reset(self):
        self._left_history.clear()
        self._right_history.clear()
        self._left_wink_start = None
        self._right_wink_start = None
        self.last_state = None
