"""
Gesture Recognition Module
Per-frame gesture classification with confidence, plus a hold recognizer
that turns a sustained gesture into a single command
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum

from .config import GESTURE_COOLDOWN_SECONDS, GESTURE_HOLD_SECONDS, GESTURE_REQUIRE_RELEASE
from .finger_counter import GestureType, Handedness, count_fingers
from .validation import check_non_negative, check_positive

logger = logging.getLogger("facesignals.gestures")

GESTURE_CONFIDENCE = {
    GestureType.FIST: 0.95,
    GestureType.OPEN_PALM: 0.95,
    GestureType.THUMBS_UP: 0.9,
    GestureType.THUMBS_DOWN: 0.85,
    GestureType.POINT_UP: 0.9,
    GestureType.PEACE_SIGN: 0.9,
    GestureType.THREE_FINGERS: 0.85,
    GestureType.FOUR_FINGERS: 0.85,
    GestureType.ROCK_SIGN: 0.85,
    GestureType.CALL_ME: 0.85,
}
DEFAULT_CONFIDENCE = 0.8


class ActionType(str, Enum):
    CLICK = "click"
    KEY = "key"
    SCROLL = "scroll"
    CUSTOM = "custom"


@dataclass(frozen=True)
class GestureAction:
    type: ActionType
    action: str
    description: str


DEFAULT_GESTURE_ACTIONS = {
    GestureType.FIST: GestureAction(ActionType.KEY, "Escape", "Cancel / Escape"),
    GestureType.OPEN_PALM: GestureAction(ActionType.CUSTOM, "pause", "Pause / Resume"),
    GestureType.THUMBS_UP: GestureAction(ActionType.KEY, "Enter", "Confirm / Enter"),
    GestureType.PEACE_SIGN: GestureAction(ActionType.KEY, "ctrl+c", "Copy"),
    GestureType.POINT_UP: GestureAction(ActionType.SCROLL, "up", "Scroll Up"),
    GestureType.THREE_FINGERS: GestureAction(ActionType.KEY, "Alt+Left", "Go Back"),
    GestureType.FOUR_FINGERS: GestureAction(ActionType.KEY, "Alt+Right", "Go Forward"),
    GestureType.FIVE_FINGERS: GestureAction(ActionType.KEY, "ctrl+Home", "Go Home"),
    GestureType.ROCK_SIGN: GestureAction(ActionType.CUSTOM, "quickActions", "Quick Actions"),
    GestureType.CALL_ME: GestureAction(ActionType.CUSTOM, "keyboard", "Toggle Keyboard"),
}

GESTURE_DESCRIPTIONS = {
    GestureType.FIST: "Fist - Cancel",
    GestureType.OPEN_PALM: "Open Palm - Pause",
    GestureType.THUMBS_UP: "Thumbs Up - Confirm",
    GestureType.THUMBS_DOWN: "Thumbs Down",
    GestureType.PEACE_SIGN: "Peace Sign - Copy",
    GestureType.POINT_UP: "Point Up - Scroll Up",
    GestureType.ROCK_SIGN: "Rock Sign - Quick Actions",
    GestureType.CALL_ME: "Call Me - Keyboard",
    GestureType.ONE_FINGER: "One Finger",
    GestureType.TWO_FINGERS: "Two Fingers",
    GestureType.THREE_FINGERS: "Three Fingers - Back",
    GestureType.FOUR_FINGERS: "Four Fingers - Forward",
    GestureType.FIVE_FINGERS: "Five Fingers - Home",
}


@dataclass
class GestureResult:
    gesture: GestureType
    confidence: float
    finger_count: int
    finger_states: object  # FingerStates

    def to_dict(self):
        return {
            "gesture": self.gesture.value,
            "confidence": self.confidence,
            "finger_count": self.finger_count,
            "finger_states": self.finger_states.to_dict(),
        }


def action_for_gesture(gesture, custom_actions=None):
    """
    Look up the action bound to a gesture.

    Args:
        gesture: GestureType (NONE and None map to no action)
        custom_actions: Optional {GestureType: GestureAction} overrides

    Returns:
        GestureAction or None
    """
    if gesture is None or gesture == GestureType.NONE:
        return None
    actions = dict(DEFAULT_GESTURE_ACTIONS)
    if custom_actions:
        actions.update(custom_actions)
    return actions.get(gesture)


def describe_gesture(gesture):
    """Short UI label for a gesture ("" for no gesture)."""
    if gesture is None or gesture == GestureType.NONE:
        return ""
    return GESTURE_DESCRIPTIONS.get(gesture, gesture.value)


class GestureRecognizer:
    """
    Classifies hand gestures and detects deliberately held ones.

    detect_held_gesture() fires a gesture once it has been recognized
    continuously for `hold_time` seconds, then ignores everything for
    `cooldown` seconds. With `require_release` the fired gesture has to be
    replaced by a different classification, or the hand has to leave the
    frame (release()), before it can be timed again, so holding a pose never
    repeat-fires.
    """

    def __init__(self, hold_time=GESTURE_HOLD_SECONDS, cooldown=GESTURE_COOLDOWN_SECONDS,
                 require_release=GESTURE_REQUIRE_RELEASE):
        self.hold_time = check_positive("hold_time", hold_time)
        self.cooldown = check_non_negative("cooldown", cooldown)
        self.require_release = bool(require_release)

        self.last_gesture = None
        self.gesture_start_ts = None
        self.gesture_hold_time = 0.0
        self.last_fire_ts = None
        self._awaiting_release = None

    def recognize(self, landmarks, handedness=Handedness.RIGHT):
        """
        Classify one frame of hand landmarks.

        Args:
            landmarks: 21-point hand landmark set
            handedness: "left" or "right"

        Returns:
            GestureResult
        """
        fingers = count_fingers(landmarks, handedness)
        return GestureResult(
            gesture=fingers.gesture,
            confidence=GESTURE_CONFIDENCE.get(fingers.gesture, DEFAULT_CONFIDENCE),
            finger_count=fingers.count,
            finger_states=fingers.finger_states,
        )

    def detect_held_gesture(self, landmarks, handedness=Handedness.RIGHT, timestamp=None):
        """
        Return a gesture once it has been held long enough.

        Args:
            landmarks: 21-point hand landmark set
            handedness: "left" or "right"
            timestamp: Frame time in seconds (defaults to now)

        Returns:
            GestureType on the frame the hold completes, otherwise None
        """
        return self.update_hold(self.recognize(landmarks, handedness), timestamp)

    def update_hold(self, result, timestamp=None):
        """
        Advance the hold timer with an already classified frame.

        Args:
            result: GestureResult from recognize()
            timestamp: Frame time in seconds (defaults to now)

        Returns:
            GestureType on the frame the hold completes, otherwise None
        """
        if timestamp is None:
            timestamp = time.time()

        # Cooldown after a fire: leave state untouched
        if self.last_fire_ts is not None and timestamp - self.last_fire_ts < self.cooldown:
            return None

        if self._awaiting_release is not None:
            if result.gesture == self._awaiting_release:
                return None
            self._awaiting_release = None

        if result.gesture == self.last_gesture and self.gesture_start_ts is not None:
            self.gesture_hold_time = timestamp - self.gesture_start_ts
        else:
            self.last_gesture = result.gesture
            self.gesture_start_ts = timestamp
            self.gesture_hold_time = 0.0

        if self.gesture_hold_time >= self.hold_time and result.gesture != GestureType.NONE:
            fired = self.last_gesture
            self.last_fire_ts = timestamp
            self.last_gesture = None
            self.gesture_start_ts = None
            self.gesture_hold_time = 0.0
            if self.require_release:
                self._awaiting_release = fired
            logger.info("Gesture fired: %s", fired.value)
            return fired

        return None

    def get_hold_progress(self):
        """Hold progress of the current gesture in [0, 1]."""
        if self.gesture_start_ts is None:
            return 0.0
        return min(1.0, self.gesture_hold_time / self.hold_time)

    def get_current_gesture(self):
        return self.last_gesture

    def set_hold_time(self, seconds):
        self.hold_time = check_positive("hold_time", seconds)

    def set_cooldown(self, seconds):
        self.cooldown = check_non_negative("cooldown", seconds)

    def release(self):
        """The hand left the frame: drop the hold timer and any pending release."""
        self.last_gesture = None
        self.gesture_start_ts = None
        self.gesture_hold_time = 0.0
        self._awaiting_release = None

    def reset(self):
        self.release()
        self.last_fire_ts = None
