"""
Break Reminder Module
Turns a fatigue state into a break prompt with a suggested rest duration
"""

import logging
from dataclasses import dataclass

from .score_calculator import FatigueLevel

logger = logging.getLogger("facesignals.break_reminder")

# level -> (message, suggested break in seconds)
BREAK_MESSAGES = {
    FatigueLevel.SEVERE: ("High fatigue detected! Please take a longer break to rest your eyes and mind.", 300),
    FatigueLevel.MODERATE: ("You've been working for a while. Take a short break to stay fresh.", 180),
    FatigueLevel.MILD: ("Time for a quick stretch! Look away from the screen for a moment.", 60),
}
DEFAULT_BREAK_MESSAGE = ("Scheduled break time. Rest your eyes for a moment.", 60)


@dataclass
class BreakReminderData:
    is_visible: bool
    fatigue_level: FatigueLevel
    score: int
    message: str
    suggested_break_duration: int  # seconds

    def to_dict(self):
        return {
            "is_visible": self.is_visible,
            "fatigue_level": self.fatigue_level.value,
            "score": self.score,
            "message": self.message,
            "suggested_break_duration": self.suggested_break_duration,
        }


def get_break_reminder_data(state):
    """
    Build the break prompt for a fatigue state.

    Args:
        state: FatigueState from FatigueDetector.get_fatigue_state()

    Returns:
        BreakReminderData (visible only when a break is due)
    """
    message, duration = BREAK_MESSAGES.get(state.level, DEFAULT_BREAK_MESSAGE)
    return BreakReminderData(
        is_visible=state.should_take_break,
        fatigue_level=state.level,
        score=state.score,
        message=message,
        suggested_break_duration=duration,
    )


class BreakReminder:
    """
    Raises a break prompt once per due period.

    Mirrors a latched alert: the prompt becomes active when the fatigue
    state says a break is due and stays active until acknowledge() is
    called (record_break does this). A score dipping below the break
    level and back does not raise a second prompt.
    """

    def __init__(self):
        self.active = False

    def process(self, state):
        """
        Update reminder state.

        Args:
            state: Current FatigueState

        Returns:
            BreakReminderData when a new reminder is raised, else None
        """
        if state.should_take_break and not self.active:
            self.active = True
            data = get_break_reminder_data(state)
            logger.info("Break reminder raised (level=%s, score=%d)", state.level.value, state.score)
            return data
        return None

    def acknowledge(self):
        self.active = False
