"""
Yawn Detection Module
Counts yawns from a sustained wide-open mouth with a cooldown between yawns
"""

import logging

from .config import YAWN_COOLDOWN_SECONDS, YAWN_DURATION_SECONDS, YAWN_OPEN_RATIO

logger = logging.getLogger("facesignals.yawn")


class YawnDetector:
    """
    Detects yawning from the mouth open ratio.

    Features:
    - Open ratio must exceed YAWN_OPEN_RATIO (wide open, not talking)
    - Mouth must stay wide open for YAWN_DURATION_SECONDS
    - At most one yawn per YAWN_COOLDOWN_SECONDS
    """

    def __init__(self):
        """Initialize yawn detector."""
        self.yawn_count = 0
        self.last_yawn_ts = None
        self.mouth_was_open = False
        self.mouth_open_start_ts = None
        self.mouth_open_duration = 0.0

    def update(self, is_open, open_ratio, timestamp):
        """
        Update yawn tracking with this frame's mouth state.

        Args:
            is_open: True if the mouth is open at all
            open_ratio: Openness scaled to [0, 1] against a full yawn
            timestamp: Current timestamp in seconds

        Returns:
            True if a yawn was counted on this frame
        """
        wide_open = bool(is_open) and open_ratio > YAWN_OPEN_RATIO
        counted = False

        if wide_open:
            # Detect mouth opening
            if not self.mouth_was_open:
                self.mouth_open_start_ts = timestamp
            self.mouth_open_duration = max(0.0, timestamp - self.mouth_open_start_ts)

            cooled_down = self.last_yawn_ts is None or (timestamp - self.last_yawn_ts) > YAWN_COOLDOWN_SECONDS
            if self.mouth_open_duration >= YAWN_DURATION_SECONDS and cooled_down:
                self.yawn_count += 1
                self.last_yawn_ts = timestamp
                counted = True
                logger.info("Yawn detected (%.1fs open, total %d)", self.mouth_open_duration, self.yawn_count)
        else:
            self.mouth_open_duration = 0.0
            self.mouth_open_start_ts = None

        self.mouth_was_open = wide_open
        return counted

    def get_current_yawn_duration(self):
        """
        Get how long the mouth has currently been wide open.

        Returns:
            Duration in seconds (0.0 if the mouth is not wide open)
        """
        return self.mouth_open_duration

    def forgive(self, count):
        """Drop up to `count` yawns from the tally (used after a break)."""
        self.yawn_count = max(0, self.yawn_count - count)

    def reset(self):
        self.yawn_count = 0
        self.last_yawn_ts = None
        self.mouth_was_open = False
        self.mouth_open_start_ts = None
        self.mouth_open_duration = 0.0
