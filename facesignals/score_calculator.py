"""
Fatigue Score Calculator Module
Calculates the fatigue score and classifies the fatigue level from all metrics
"""

from enum import Enum

from .config import (
    DROWSY_BLINK_RATE_MAX,
    DROWSY_BLINK_RATE_MIN,
    FATIGUE_BLINK_RATE_MAX,
    FATIGUE_BLINK_RATE_MIN,
    LONG_BLINK_SECONDS,
    NORMAL_BLINK_SECONDS,
    SCORE_MILD,
    SCORE_MODERATE,
    SCORE_SEVERE,
)


class FatigueLevel(str, Enum):
    FRESH = "fresh"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class ScoreCalculator:
    """
    Calculates fatigue score (0-100) and classifies fatigue level.

    Score Weightage:
    - Blink rate: up to 30 points (too low = drowsy, too high = eye strain)
    - Blink duration: up to 20 points
    - Yawns: 10 points each, up to 30
    - Head droops: 15 points each, up to 30
    - PERCLOS: up to 25 points
    - Session length: up to 10 points
    """

    def __init__(self):
        """Initialize score calculator."""
        self.current_score = 0
        self.current_level = FatigueLevel.FRESH

    def calculate_score(
        self,
        blink_rate,
        avg_blink_duration,
        yawn_count=0,
        head_droop_events=0,
        perclos=0.0,
        session_seconds=0.0,
    ):
        """
        Calculate fatigue score from all metrics.

        Args:
            blink_rate: Blinks in the last minute
            avg_blink_duration: Average blink duration (seconds)
            yawn_count: Yawns counted this session
            head_droop_events: Head droop events counted this session
            perclos: Percentage of recent frames with both eyes closed (0-100)
            session_seconds: Time since the session started (seconds)

        Returns:
            Fatigue score (int, 0 to 100)
        """
        score = 0

        # 1) Blink rate - up to 30 points
        if blink_rate < DROWSY_BLINK_RATE_MIN:
            score += 30  # very low rate, possible severe drowsiness
        elif blink_rate < DROWSY_BLINK_RATE_MAX:
            score += 20
        elif blink_rate > FATIGUE_BLINK_RATE_MAX:
            score += 15  # eye strain
        elif blink_rate > FATIGUE_BLINK_RATE_MIN:
            score += 10

        # 2) Long blinks - up to 20 points
        if avg_blink_duration > LONG_BLINK_SECONDS:
            score += 20
        elif avg_blink_duration > NORMAL_BLINK_SECONDS * 1.5:
            score += 10

        # 3) Yawns - up to 30 points
        score += min(yawn_count * 10, 30)

        # 4) Head droops - up to 30 points
        score += min(head_droop_events * 15, 30)

        # 5) PERCLOS - up to 25 points
        if perclos > 20:
            score += 25
        elif perclos > 15:
            score += 15
        elif perclos > 10:
            score += 5

        # 6) Session duration - up to 10 points
        session_hours = session_seconds / 3600.0
        if session_hours > 2:
            score += 10
        elif session_hours > 1:
            score += 5

        score = min(score, 100)
        self.current_score = score
        return score

    def classify_level(self, score):
        """
        Classify fatigue level from score.

        Args:
            score: Current fatigue score

        Returns:
            FatigueLevel
        """
        if score < SCORE_MILD:
            level = FatigueLevel.FRESH
        elif score < SCORE_MODERATE:
            level = FatigueLevel.MILD
        elif score < SCORE_SEVERE:
            level = FatigueLevel.MODERATE
        else:
            level = FatigueLevel.SEVERE

        self.current_level = level
        return level
