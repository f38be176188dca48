"""
Sleep Detection Module
Dual-signal (eye closure + head down) decaying-counter sleep detector
"""

import logging
import time
from dataclasses import dataclass

from .config import (
    EAR_THRESHOLD,
    SLEEP_EYE_CLOSED_FRAMES,
    SLEEP_EYE_SCORE_MAX,
    SLEEP_FRAME_DECAY,
    SLEEP_HEAD_DOWN_FRAMES,
    SLEEP_HEAD_SCORE_MAX,
    SLEEP_PITCH_THRESHOLD,
)
from .ear_detector import calculate_average_ear
from .head_pose_estimator import estimate_head_pose
from .landmarks import as_landmark_array
from .validation import check_non_negative, check_positive_int, check_ratio

logger = logging.getLogger("facesignals.sleep")


@dataclass
class SleepDetectionResult:
    is_sleeping: bool
    sleep_score: int          # 0-100 confidence
    eye_closed_frames: int
    head_down_frames: int
    is_head_down: bool
    head_pitch: float

    def to_dict(self):
        return {
            "is_sleeping": self.is_sleeping,
            "sleep_score": self.sleep_score,
            "eye_closed_frames": self.eye_closed_frames,
            "head_down_frames": self.head_down_frames,
            "is_head_down": self.is_head_down,
            "head_pitch": round(self.head_pitch, 4),
        }


class SleepDetector:
    """
    Detects sleep from sustained eye closure and/or a lowered head.

    Both counters grow by one per matching frame and decay by `frame_decay`
    per non-matching frame (floored at 0), so a single noisy frame does not
    wipe out an ongoing episode.

    Sleeping is declared when any of these holds:
    - eye_closed_frames >= eye_closed_threshold
    - eyes closed now and head_down_frames >= head_down_threshold
    - eyes closed now and head_down_frames >= head_down_threshold / 2
    """

    def __init__(
        self,
        eye_closed_threshold=SLEEP_EYE_CLOSED_FRAMES,
        head_down_threshold=SLEEP_HEAD_DOWN_FRAMES,
        pitch_threshold=SLEEP_PITCH_THRESHOLD,
        ear_threshold=EAR_THRESHOLD,
        frame_decay=SLEEP_FRAME_DECAY,
    ):
        self.eye_closed_threshold = check_positive_int("eye_closed_threshold", eye_closed_threshold)
        self.head_down_threshold = check_positive_int("head_down_threshold", head_down_threshold)
        self.pitch_threshold = check_non_negative("pitch_threshold", pitch_threshold)
        self.ear_threshold = check_ratio("ear_threshold", ear_threshold)
        self.frame_decay = check_positive_int("frame_decay", frame_decay)

        self.eye_closed_frames = 0
        self.head_down_frames = 0
        self.is_sleeping = False
        self._sleep_start_ts = None
        self._total_sleep_seconds = 0.0

    def detect(self, landmarks, timestamp=None):
        """
        Update sleep tracking from a face landmark set.

        Args:
            landmarks: Face landmark set
            timestamp: Frame time in seconds (defaults to now)

        Returns:
            SleepDetectionResult
        """
        pts = as_landmark_array(landmarks)
        pitch = estimate_head_pose(pts).pitch
        eyes_closed = calculate_average_ear(pts) < self.ear_threshold
        return self.update(eyes_closed, pitch, timestamp)

    def update(self, eyes_closed, pitch, timestamp=None):
        """
        Update sleep tracking with this frame's eye state and head pitch.

        Args:
            eyes_closed: True when the average EAR is below the closed threshold
            pitch: Head pitch in radians from the head pose estimator
            timestamp: Frame time in seconds (defaults to now)

        Returns:
            SleepDetectionResult
        """
        if timestamp is None:
            timestamp = time.time()

        head_down = pitch > self.pitch_threshold

        if eyes_closed:
            self.eye_closed_frames += 1
        else:
            self.eye_closed_frames = max(0, self.eye_closed_frames - self.frame_decay)

        if head_down:
            self.head_down_frames += 1
        else:
            self.head_down_frames = max(0, self.head_down_frames - self.frame_decay)

        eyes_factor = self.eye_closed_frames >= self.eye_closed_threshold
        head_factor = eyes_closed and self.head_down_frames >= self.head_down_threshold
        combined_factor = eyes_closed and self.head_down_frames >= self.head_down_threshold / 2

        sleeping = eyes_factor or head_factor or combined_factor
        self._track_duration(sleeping, timestamp)

        return SleepDetectionResult(
            is_sleeping=sleeping,
            sleep_score=self.sleep_score(),
            eye_closed_frames=self.eye_closed_frames,
            head_down_frames=self.head_down_frames,
            is_head_down=head_down,
            head_pitch=pitch,
        )

    def _track_duration(self, sleeping, timestamp):
        if sleeping and self._sleep_start_ts is None:
            self._sleep_start_ts = timestamp
            logger.info("Sleep episode started (eye frames=%d, head frames=%d)",
                        self.eye_closed_frames, self.head_down_frames)
        elif not sleeping and self._sleep_start_ts is not None:
            episode = max(0.0, timestamp - self._sleep_start_ts)
            self._total_sleep_seconds += episode
            self._sleep_start_ts = None
            logger.info("Sleep episode ended after %.1fs", episode)
        self.is_sleeping = sleeping

    def sleep_score(self):
        """Confidence 0-100: up to 60 points from the eyes, up to 40 from the head."""
        eye_score = min(SLEEP_EYE_SCORE_MAX, self.eye_closed_frames / self.eye_closed_threshold * SLEEP_EYE_SCORE_MAX)
        head_score = min(SLEEP_HEAD_SCORE_MAX, self.head_down_frames / self.head_down_threshold * SLEEP_HEAD_SCORE_MAX)
        return int(round(min(100.0, eye_score + head_score)))

    def get_current_sleep_duration(self, current_time=None):
        """
        Total sleep time, including the episode in progress.

        Args:
            current_time: Query time in seconds (defaults to now)

        Returns:
            Seconds slept in this session
        """
        if self._sleep_start_ts is None:
            return self._total_sleep_seconds
        if current_time is None:
            current_time = time.time()
        return self._total_sleep_seconds + max(0.0, current_time - self._sleep_start_ts)

    def reset_sleep_duration(self):
        self._total_sleep_seconds = 0.0
        self._sleep_start_ts = None

    def reset(self):
        self.eye_closed_frames = 0
        self.head_down_frames = 0
        self.is_sleeping = False
        self.reset_sleep_duration()

    def set_thresholds(self, eye_closed_threshold=None, head_down_threshold=None, pitch_threshold=None,
                       ear_threshold=None):
        """
        Update sleep thresholds.

        Args:
            eye_closed_threshold: Closed-eye frames that alone mean sleep
            head_down_threshold: Head-down frames combined with closed eyes
            pitch_threshold: Pitch (radians) above which the head counts as down
            ear_threshold: Average EAR below which the eyes count as closed
        """
        if eye_closed_threshold is not None:
            self.eye_closed_threshold = check_positive_int("eye_closed_threshold", eye_closed_threshold)
        if head_down_threshold is not None:
            self.head_down_threshold = check_positive_int("head_down_threshold", head_down_threshold)
        if pitch_threshold is not None:
            self.pitch_threshold = check_non_negative("pitch_threshold", pitch_threshold)
        if ear_threshold is not None:
            self.ear_threshold = check_ratio("ear_threshold", ear_threshold)
