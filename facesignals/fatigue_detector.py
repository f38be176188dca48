"""
Fatigue Detection Module
Combines blink, PERCLOS, yawn and head droop tracking into a fatigue score
and break recommendation
"""

import logging
import time
from dataclasses import dataclass

from .blink_analyzer import BlinkAnalyzer
from .config import BREAK_INTERVAL_MINUTES, DROWSY_BLINK_RATE_MIN, LONG_BLINK_SECONDS, SCORE_SEVERE
from .head_droop_detector import HeadDroopDetector
from .perclos_calculator import PERCLOSCalculator
from .score_calculator import FatigueLevel, ScoreCalculator
from .validation import check_positive
from .yawn_detector import YawnDetector

logger = logging.getLogger("facesignals.fatigue")


@dataclass
class FatigueMetrics:
    blink_rate: int               # blinks in the last minute
    avg_blink_duration: float     # seconds
    yawn_count: int
    head_droop_events: int
    perclos: float                # % of recent frames with both eyes closed
    session_duration: float       # seconds

    def to_dict(self):
        return {
            "blink_rate": self.blink_rate,
            "avg_blink_duration": round(self.avg_blink_duration, 3),
            "yawn_count": self.yawn_count,
            "head_droop_events": self.head_droop_events,
            "perclos": round(self.perclos, 1),
            "session_duration": round(self.session_duration, 1),
        }


@dataclass
class FatigueState:
    level: FatigueLevel
    score: int
    should_take_break: bool
    time_until_break: float       # seconds

    def to_dict(self):
        return {
            "level": self.level.value,
            "score": self.score,
            "should_take_break": self.should_take_break,
            "time_until_break": round(self.time_until_break, 1),
        }


class FatigueDetector:
    """
    Monitors eye, mouth and head signals for fatigue and suggests breaks.

    Per-frame inputs:
    - process_eye_state(left_open, right_open, ts)
    - process_mouth_state(is_open, open_ratio, ts)
    - process_head_position(head_y)

    Queries that depend on time take an optional timestamp (seconds);
    omitted timestamps default to time.time().
    """

    def __init__(self, break_interval_minutes=BREAK_INTERVAL_MINUTES):
        self.break_interval = check_positive("break_interval_minutes", break_interval_minutes) * 60.0

        self.blink_analyzer = BlinkAnalyzer()
        self.perclos_calculator = PERCLOSCalculator()
        self.yawn_detector = YawnDetector()
        self.head_droop_detector = HeadDroopDetector()
        self.score_calculator = ScoreCalculator()

        self.session_start_ts = None
        self.last_break_ts = None

    def set_break_interval(self, minutes):
        self.break_interval = check_positive("break_interval_minutes", minutes) * 60.0

    def start_session(self, timestamp=None):
        """Reset all histories and start the break timer."""
        if timestamp is None:
            timestamp = time.time()
        self.reset()
        self.session_start_ts = timestamp
        self.last_break_ts = timestamp
        logger.info("Fatigue session started")

    def end_session(self):
        self.session_start_ts = None
        logger.info("Fatigue session ended")

    def record_break(self, timestamp=None):
        """
        Mark that the user took a break.

        Resets the break timer and forgives two yawns and one head droop.
        """
        if timestamp is None:
            timestamp = time.time()
        self.last_break_ts = timestamp
        self.yawn_detector.forgive(2)
        self.head_droop_detector.forgive(1)
        logger.info("Break recorded (yawns=%d, droops=%d)",
                    self.yawn_detector.yawn_count, self.head_droop_detector.droop_events)

    def reset(self):
        self.blink_analyzer.reset()
        self.perclos_calculator.reset()
        self.yawn_detector.reset()
        self.head_droop_detector.reset()

    def process_eye_state(self, left_open, right_open, timestamp=None):
        """
        Feed one frame's eye state.

        Args:
            left_open: True if the left eye is open
            right_open: True if the right eye is open
            timestamp: Frame time in seconds
        """
        if timestamp is None:
            timestamp = time.time()
        self.perclos_calculator.update(left_open, right_open)
        duration = self.blink_analyzer.update(left_open, right_open, timestamp)
        if duration is not None:
            logger.debug("Blink logged (%.3fs)", duration)

    def process_mouth_state(self, is_open, open_ratio, timestamp=None):
        """
        Feed one frame's mouth state.

        Args:
            is_open: True if the mouth is open
            open_ratio: Openness scaled to [0, 1] against a full yawn
            timestamp: Frame time in seconds
        """
        if timestamp is None:
            timestamp = time.time()
        self.yawn_detector.update(is_open, open_ratio, timestamp)

    def process_head_position(self, head_y):
        self.head_droop_detector.update(head_y)

    def get_blink_rate(self, current_time=None):
        if current_time is None:
            current_time = time.time()
        return self.blink_analyzer.calculate_blink_rate(current_time)

    def get_average_blink_duration(self):
        return self.blink_analyzer.get_avg_blink_duration()

    def get_metrics(self, current_time=None):
        """
        Snapshot of all fatigue metrics.

        Returns:
            FatigueMetrics
        """
        if current_time is None:
            current_time = time.time()
        session_duration = 0.0
        if self.session_start_ts is not None:
            session_duration = max(0.0, current_time - self.session_start_ts)

        return FatigueMetrics(
            blink_rate=self.blink_analyzer.calculate_blink_rate(current_time),
            avg_blink_duration=self.blink_analyzer.get_avg_blink_duration(),
            yawn_count=self.yawn_detector.yawn_count,
            head_droop_events=self.head_droop_detector.droop_events,
            perclos=self.perclos_calculator.calculate(),
            session_duration=session_duration,
        )

    def calculate_fatigue_score(self, current_time=None):
        metrics = self.get_metrics(current_time)
        return self.score_calculator.calculate_score(
            blink_rate=metrics.blink_rate,
            avg_blink_duration=metrics.avg_blink_duration,
            yawn_count=metrics.yawn_count,
            head_droop_events=metrics.head_droop_events,
            perclos=metrics.perclos,
            session_seconds=metrics.session_duration,
        )

    def get_fatigue_state(self, current_time=None):
        """
        Current fatigue level and break recommendation.

        Returns:
            FatigueState
        """
        if current_time is None:
            current_time = time.time()
        score = self.calculate_fatigue_score(current_time)
        level = self.score_calculator.classify_level(score)

        if self.last_break_ts is not None:
            since_break = current_time - self.last_break_ts
        elif self.session_start_ts is not None:
            since_break = current_time - self.session_start_ts
        else:
            since_break = 0.0
        time_until_break = max(0.0, self.break_interval - since_break)

        return FatigueState(
            level=level,
            score=score,
            should_take_break=time_until_break == 0 or score >= SCORE_SEVERE,
            time_until_break=time_until_break,
        )

    def get_warnings(self, current_time=None):
        """
        Human-readable fatigue warnings.

        Returns:
            List of warning strings (empty when nothing is wrong)
        """
        if current_time is None:
            current_time = time.time()
        metrics = self.get_metrics(current_time)
        state = self.get_fatigue_state(current_time)
        warnings = []

        if state.level == FatigueLevel.SEVERE:
            warnings.append("High fatigue detected. Please take a break immediately.")
        if metrics.yawn_count >= 3:
            warnings.append("Multiple yawns detected - you may be getting tired.")
        if metrics.head_droop_events >= 2:
            warnings.append("Head drooping detected - consider taking a short break.")
        if metrics.avg_blink_duration > LONG_BLINK_SECONDS:
            warnings.append("Prolonged blinks detected - your eyes may be tired.")
        if metrics.blink_rate < DROWSY_BLINK_RATE_MIN:
            warnings.append("Reduced blink rate detected - try blinking more often.")
        if state.time_until_break == 0:
            warnings.append("It's time for a break! Rest your eyes for a few minutes.")

        return warnings
