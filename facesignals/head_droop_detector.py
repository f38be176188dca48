"""
Head Droop Detection Module
Counts sustained drops of the head below its session baseline
"""

import logging
from collections import deque

import numpy as np

from .config import (
    HEAD_BASELINE_SAMPLES,
    HEAD_DROOP_CONFIRM_FACTOR,
    HEAD_DROOP_RECENT_SAMPLES,
    HEAD_DROOP_THRESHOLD,
    HEAD_HISTORY_SIZE,
)

logger = logging.getLogger("facesignals.head_droop")


class HeadDroopDetector:
    """
    Detects head droop from the vertical head position.

    The baseline is the mean of the first HEAD_BASELINE_SAMPLES positions.
    A droop needs the current position more than HEAD_DROOP_THRESHOLD below
    the baseline (larger y) and the recent average more than
    HEAD_DROOP_THRESHOLD * HEAD_DROOP_CONFIRM_FACTOR below it. One sustained
    droop counts as one event; the detector re-arms once the recent average
    rises back above the confirm level.
    """

    def __init__(self):
        """Initialize head droop detector."""
        self.head_y_history = deque(maxlen=HEAD_HISTORY_SIZE)
        self.baseline = None
        self.droop_events = 0
        self.in_droop = False

    def update(self, head_y):
        """
        Update droop tracking with a new head position.

        Args:
            head_y: Vertical head position (larger = lower in the image)

        Returns:
            True if a new droop event was counted
        """
        # Baseline is fixed from the samples seen before this one
        if self.baseline is None and len(self.head_y_history) >= HEAD_BASELINE_SAMPLES:
            self.baseline = float(np.mean(self.head_y_history))
            logger.debug("Head baseline established at %.4f", self.baseline)

        self.head_y_history.append(float(head_y))

        if self.baseline is None:
            return False

        recent = list(self.head_y_history)[-HEAD_DROOP_RECENT_SAMPLES:]
        recent_drop = float(np.mean(recent)) - self.baseline
        confirm_level = HEAD_DROOP_THRESHOLD * HEAD_DROOP_CONFIRM_FACTOR

        if self.in_droop:
            if recent_drop <= confirm_level:
                self.in_droop = False
            return False

        if head_y - self.baseline > HEAD_DROOP_THRESHOLD and recent_drop > confirm_level:
            self.in_droop = True
            self.droop_events += 1
            logger.info("Head droop detected (%.3f below baseline, total %d)", recent_drop, self.droop_events)
            return True
        return False

    def forgive(self, count):
        """Drop up to `count` droop events from the tally (used after a break)."""
        self.droop_events = max(0, self.droop_events - count)

    def reset(self):
        self.head_y_history.clear()
        self.baseline = None
        self.droop_events = 0
        self.in_droop = False
