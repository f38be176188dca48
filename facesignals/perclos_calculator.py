"""
PERCLOS (Percentage of Eye Closure) Calculator Module
Frame-based percentage of recent frames with both eyes closed
"""

from collections import deque

from .config import PERCLOS_MIN_FRAMES, PERCLOS_WINDOW_FRAMES


class PERCLOSCalculator:
    """
    Calculates PERCLOS over the last `window_frames` frames.

    PERCLOS = (frames with both eyes closed / frames in window) * 100%

    Returns 0 until at least `min_frames` frames have been seen, so a
    handful of startup frames cannot produce a large percentage.
    """

    def __init__(self, window_frames=PERCLOS_WINDOW_FRAMES, min_frames=PERCLOS_MIN_FRAMES):
        """
        Initialize PERCLOS calculator.

        Args:
            window_frames: Number of most recent frames considered
            min_frames: Frames required before a non-zero value is reported
        """
        self.left_open_history = deque(maxlen=window_frames)
        self.right_open_history = deque(maxlen=window_frames)
        self.min_frames = min_frames

    def update(self, left_open, right_open):
        """
        Record one frame's eye state.

        Args:
            left_open: True if the left eye is open
            right_open: True if the right eye is open
        """
        self.left_open_history.append(bool(left_open))
        self.right_open_history.append(bool(right_open))

    def calculate(self):
        """
        Calculate PERCLOS percentage for the current frame window.

        Returns:
            PERCLOS percentage (0.0 to 100.0)
        """
        total = len(self.left_open_history)
        if total < self.min_frames:
            return 0.0

        closed = sum(
            1 for left, right in zip(self.left_open_history, self.right_open_history)
            if not left and not right
        )
        return (closed / total) * 100.0

    def reset(self):
        self.left_open_history.clear()
        self.right_open_history.clear()
