"""
Finger Counting Module
Raised-finger detection from 21 hand landmarks and the gesture decision table
"""

from dataclasses import dataclass
from enum import Enum

from .exceptions import InvalidParameterError
from .landmarks import as_landmark_array, require_hand_landmarks

# MediaPipe Hands landmark indices
WRIST = 0
THUMB_IP = 3
THUMB_TIP = 4
INDEX_MCP = 5
MIDDLE_MCP = 9
PINKY_MCP = 17

# (tip, pip) pairs for the four fingers that bend vertically
FINGER_JOINTS = {
    "index": (8, 6),
    "middle": (12, 10),
    "ring": (16, 14),
    "pinky": (20, 18),
}

FINGER_NAMES = ("Thumb", "Index", "Middle", "Ring", "Pinky")


class GestureType(str, Enum):
    FIST = "fist"
    OPEN_PALM = "openPalm"
    THUMBS_UP = "thumbsUp"
    THUMBS_DOWN = "thumbsDown"
    PEACE_SIGN = "peaceSign"
    POINT_UP = "pointUp"
    THREE_FINGERS = "threeFingers"
    FOUR_FINGERS = "fourFingers"
    ROCK_SIGN = "rockSign"
    CALL_ME = "callMe"
    ONE_FINGER = "oneFinger"
    TWO_FINGERS = "twoFingers"
    FIVE_FINGERS = "fiveFingers"
    NONE = "none"


class Handedness(str, Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class FingerStates:
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    def as_tuple(self):
        return (self.thumb, self.index, self.middle, self.ring, self.pinky)

    def count(self):
        return sum(self.as_tuple())

    def to_dict(self):
        return {
            "thumb": self.thumb,
            "index": self.index,
            "middle": self.middle,
            "ring": self.ring,
            "pinky": self.pinky,
        }


@dataclass
class FingerCountResult:
    count: int
    fingers: list              # names of raised fingers, thumb first
    finger_states: FingerStates
    gesture: GestureType

    def to_dict(self):
        return {
            "count": self.count,
            "fingers": list(self.fingers),
            "finger_states": self.finger_states.to_dict(),
            "gesture": self.gesture.value,
        }


# Exact (thumb, index, middle, ring, pinky) patterns. Thumb-only is resolved
# to thumbsUp / thumbsDown by thumb direction in classify_gesture().
GESTURE_PATTERNS = {
    (False, False, False, False, False): GestureType.FIST,
    (True, False, False, False, False): GestureType.THUMBS_UP,
    (False, True, False, False, False): GestureType.POINT_UP,
    (False, True, True, False, False): GestureType.PEACE_SIGN,
    (False, True, True, True, False): GestureType.THREE_FINGERS,
    (False, True, True, True, True): GestureType.FOUR_FINGERS,
    (True, True, True, True, True): GestureType.OPEN_PALM,
    (False, True, False, False, True): GestureType.ROCK_SIGN,
    (True, False, False, False, True): GestureType.CALL_ME,
}

GESTURES_BY_COUNT = {
    1: GestureType.ONE_FINGER,
    2: GestureType.TWO_FINGERS,
    3: GestureType.THREE_FINGERS,
    4: GestureType.FOUR_FINGERS,
    5: GestureType.FIVE_FINGERS,
}


def parse_handedness(handedness):
    """
    Normalize a handedness label.

    Accepts a Handedness value or a "left" / "right" string in any case
    (MediaPipe reports "Left" / "Right").
    """
    if isinstance(handedness, Handedness):
        return handedness
    try:
        return Handedness(str(handedness).strip().lower())
    except ValueError:
        raise InvalidParameterError("handedness", handedness, "must be 'left' or 'right'") from None


def finger_states(landmarks, handedness=Handedness.RIGHT):
    """
    Determine which fingers are raised.

    The thumb moves sideways, so it is compared on x against its IP joint
    (mirrored for the left hand). The other fingers are raised when the tip
    is above the PIP joint (smaller y, image y grows downward).

    Args:
        landmarks: 21-point hand landmark set
        handedness: "left" or "right"

    Returns:
        FingerStates
    """
    pts = as_landmark_array(landmarks)
    require_hand_landmarks(pts)
    hand = parse_handedness(handedness)

    if hand == Handedness.RIGHT:
        thumb = pts[THUMB_TIP][0] < pts[THUMB_IP][0]
    else:
        thumb = pts[THUMB_TIP][0] > pts[THUMB_IP][0]

    raised = {name: pts[tip][1] < pts[pip][1] for name, (tip, pip) in FINGER_JOINTS.items()}

    return FingerStates(
        thumb=bool(thumb),
        index=bool(raised["index"]),
        middle=bool(raised["middle"]),
        ring=bool(raised["ring"]),
        pinky=bool(raised["pinky"]),
    )


def classify_gesture(states, landmarks=None):
    """
    Map finger states to a gesture.

    Exact patterns are checked first, then the finger count, then NONE.

    Args:
        states: FingerStates
        landmarks: Hand landmarks, needed to tell thumbsUp from thumbsDown

    Returns:
        GestureType
    """
    gesture = GESTURE_PATTERNS.get(states.as_tuple())

    if gesture == GestureType.THUMBS_UP and landmarks is not None:
        pts = as_landmark_array(landmarks)
        if pts[THUMB_TIP][1] >= pts[WRIST][1]:
            gesture = GestureType.THUMBS_DOWN

    if gesture is not None:
        return gesture
    return GESTURES_BY_COUNT.get(states.count(), GestureType.NONE)


def count_fingers(landmarks, handedness=Handedness.RIGHT):
    """
    Count raised fingers and classify the hand shape.

    Args:
        landmarks: 21-point hand landmark set
        handedness: "left" or "right"

    Returns:
        FingerCountResult
    """
    pts = as_landmark_array(landmarks)
    states = finger_states(pts, handedness)
    raised = [name for name, up in zip(FINGER_NAMES, states.as_tuple()) if up]

    return FingerCountResult(
        count=len(raised),
        fingers=raised,
        finger_states=states,
        gesture=classify_gesture(states, pts),
    )


def is_hand_open(landmarks, handedness=Handedness.RIGHT):
    return count_fingers(landmarks, handedness).count >= 4


def is_hand_closed(landmarks, handedness=Handedness.RIGHT):
    return count_fingers(landmarks, handedness).count == 0


def hand_orientation(landmarks):
    """
    Guess whether the palm or the back of the hand faces the camera.

    Returns:
        "palm" when the knuckles are closer to the camera than the wrist, else "back"
    """
    pts = as_landmark_array(landmarks)
    require_hand_landmarks(pts)
    avg_z = (pts[INDEX_MCP][2] + pts[MIDDLE_MCP][2] + pts[PINKY_MCP][2]) / 3.0
    return "palm" if avg_z < pts[WRIST][2] else "back"
