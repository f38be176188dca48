"""
Shared fixtures: synthetic face (478-point) and hand (21-point) landmark sets
"""

import numpy as np
import pytest

from facesignals.landmarks import FACE_LANDMARK_COUNT_REFINED, HAND_LANDMARK_COUNT

OPEN_LID_GAP = 0.03     # lid opening -> EAR 0.3
CLOSED_LID_GAP = 0.004  # -> EAR 0.04


def _set_eye(pts, corners, upper, lower, x0, y, lid_gap):
    p1, p4 = corners
    pts[p1] = (x0, y, 0.0)
    pts[p4] = (x0 + 0.10, y, 0.0)
    for (top, bottom), dx in zip(zip(upper, lower), (0.03, 0.07)):
        pts[top] = (x0 + dx, y - lid_gap / 2, 0.0)
        pts[bottom] = (x0 + dx, y + lid_gap / 2, 0.0)


def build_face(left_open=True, right_open=True, mouth_gap=0.002, nose_offset=(0.0, 0.0),
               brow_lift=0.0, count=FACE_LANDMARK_COUNT_REFINED):
    """
    Build a frontal face landmark array.

    Both eyes are 0.1 wide (EAR 0.3 open, 0.04 closed), the outer eye corners
    are level, and the nose sits on the vertical midline.
    """
    pts = np.full((count, 3), 0.5)
    pts[:, 2] = 0.0

    left_gap = OPEN_LID_GAP if left_open else CLOSED_LID_GAP
    right_gap = OPEN_LID_GAP if right_open else CLOSED_LID_GAP
    # left eye: 33 outer, 133 inner; lids (160, 144) and (158, 153)
    _set_eye(pts, (33, 133), (160, 158), (144, 153), 0.35, 0.40, left_gap)
    # right eye: 362 inner, 263 outer; lids (385, 380) and (387, 373)
    _set_eye(pts, (362, 263), (385, 387), (380, 373), 0.55, 0.40, right_gap)

    dx, dy = nose_offset
    pts[1] = (0.5 + dx, 0.55 + dy, 0.0)   # nose tip
    pts[4] = (0.5 + dx, 0.50 + dy, 0.0)   # tracking point
    pts[10] = (0.5, 0.20, 0.0)            # forehead
    pts[152] = (0.5, 0.85, 0.0)           # chin

    # mouth
    pts[13] = (0.5, 0.703 - mouth_gap / 2, 0.0)
    pts[14] = (0.5, 0.703 + mouth_gap / 2, 0.0)
    pts[61] = (0.42, 0.705, 0.0)
    pts[291] = (0.58, 0.705, 0.0)

    # eyebrows
    for idx in (70, 63, 105, 66, 107, 300, 293, 334, 296, 336):
        pts[idx] = (pts[idx][0], 0.33 - brow_lift, 0.0)

    return pts


FINGER_X = {"index": 0.45, "middle": 0.50, "ring": 0.55, "pinky": 0.60}
FINGER_IDS = {"index": (5, 6, 7, 8), "middle": (9, 10, 11, 12), "ring": (13, 14, 15, 16), "pinky": (17, 18, 19, 20)}


def build_hand(thumb=True, index=True, middle=True, ring=True, pinky=True, handedness="right", thumb_down=False):
    """
    Build an upright hand landmark array (wrist at the bottom of the image).

    Raised fingers put the tip above the PIP joint; a raised thumb points
    away from the palm (left in the image for a right hand).
    """
    pts = np.zeros((HAND_LANDMARK_COUNT, 3))
    pts[0] = (0.5, 0.9, 0.0)  # wrist

    side = -1.0 if handedness == "right" else 1.0
    pts[1] = (0.5 + side * 0.04, 0.85, -0.01)
    pts[2] = (0.5 + side * 0.07, 0.80, -0.02)
    if thumb_down:
        pts[3] = (0.5 + side * 0.10, 0.92, -0.02)
        pts[4] = (0.5 + side * 0.15, 0.96, -0.02)
    else:
        pts[3] = (0.5 + side * 0.10, 0.75, -0.02)
        tip_dx = 0.15 if thumb else 0.05
        pts[4] = (0.5 + side * tip_dx, 0.70, -0.02)

    for name, raised in (("index", index), ("middle", middle), ("ring", ring), ("pinky", pinky)):
        mcp, pip, dip, tip = FINGER_IDS[name]
        x = FINGER_X[name]
        pts[mcp] = (x, 0.75, -0.05)
        pts[pip] = (x, 0.60, -0.05)
        pts[dip] = (x, 0.52 if raised else 0.66, -0.05)
        pts[tip] = (x, 0.45 if raised else 0.70, -0.05)

    return pts


@pytest.fixture
def make_face():
    return build_face


@pytest.fixture
def make_hand():
    return build_hand


@pytest.fixture
def face():
    return build_face()


@pytest.fixture
def open_hand():
    return build_hand()


@pytest.fixture
def fist():
    return build_hand(thumb=False, index=False, middle=False, ring=False, pinky=False)
