"""
Blink Analysis Module
Logs both-eyes-closed episodes and derives blink rate and blink duration
"""

from collections import deque

from .config import (
    BLINK_HISTORY_SECONDS,
    BLINK_MAX_SECONDS,
    BLINK_MIN_SECONDS,
    BLINK_RATE_WINDOW,
    NORMAL_BLINK_SECONDS,
)


class BlinkAnalyzer:
    """
    Analyzes blink rate and blink duration for fatigue scoring.

    A blink is an episode where both eyes are closed. Only episodes whose
    duration falls in [BLINK_MIN_SECONDS, BLINK_MAX_SECONDS] are logged;
    shorter ones are noise and longer ones are not blinks.

    Tracks:
    - Blink timestamps (last BLINK_HISTORY_SECONDS)
    - Blink durations
    - Current closure duration
    """

    def __init__(self):
        """Initialize blink analyzer."""
        self.blink_timestamps = deque()
        self.blink_durations = deque()

        # State tracking
        self.was_closed = False
        self.closed_start_ts = None

    def update(self, left_open, right_open, timestamp):
        """
        Update blink tracking with this frame's eye state.

        Args:
            left_open: True if the left eye is open
            right_open: True if the right eye is open
            timestamp: Current timestamp in seconds

        Returns:
            Duration of the blink that just ended, or None
        """
        is_closed = not left_open and not right_open
        logged = None

        # Detect eye closure start
        if is_closed and not self.was_closed:
            self.closed_start_ts = timestamp

        # Detect eye opening (end of closure)
        elif not is_closed and self.was_closed and self.closed_start_ts is not None:
            duration = max(0.0, timestamp - self.closed_start_ts)

            if BLINK_MIN_SECONDS <= duration <= BLINK_MAX_SECONDS:
                self.blink_timestamps.append(timestamp)
                self.blink_durations.append(duration)
                logged = duration
                self._evict(timestamp)

            self.closed_start_ts = None

        self.was_closed = is_closed
        return logged

    def _evict(self, current_time):
        cutoff = current_time - BLINK_HISTORY_SECONDS
        while self.blink_timestamps and self.blink_timestamps[0] < cutoff:
            self.blink_timestamps.popleft()
            self.blink_durations.popleft()

    def calculate_blink_rate(self, current_time):
        """
        Count blinks in the trailing BLINK_RATE_WINDOW seconds.

        Args:
            current_time: Current timestamp

        Returns:
            Blinks per minute
        """
        window_start = current_time - BLINK_RATE_WINDOW
        return sum(1 for ts in self.blink_timestamps if ts > window_start)

    def get_avg_blink_duration(self):
        """
        Get average duration of the logged blinks.

        Returns:
            Average blink duration in seconds (NORMAL_BLINK_SECONDS when nothing is logged)
        """
        if not self.blink_durations:
            return NORMAL_BLINK_SECONDS
        return float(sum(self.blink_durations) / len(self.blink_durations))

    def get_current_closed_duration(self, current_time):
        """
        Get current eye closure duration if eyes are currently closed.

        Args:
            current_time: Current timestamp

        Returns:
            Duration in seconds (0.0 if eyes are open)
        """
        if self.was_closed and self.closed_start_ts is not None:
            return float(max(0.0, current_time - self.closed_start_ts))
        return 0.0

    def reset(self):
        self.blink_timestamps.clear()
        self.blink_durations.clear()
        self.was_closed = False
        self.closed_start_ts = None
