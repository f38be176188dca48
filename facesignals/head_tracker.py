"""
Head Tracking Module
Calibration-relative head position with exponential smoothing and
screen mapping for head-driven cursor control
"""

import logging
from dataclasses import dataclass

from .config import (
    CALIBRATED_RANGE_X,
    CALIBRATED_RANGE_Y,
    CURSOR_DEAD_ZONE,
    CURSOR_SPEED,
    DEFAULT_CENTER_X,
    DEFAULT_CENTER_Y,
    DEFAULT_RANGE_X,
    DEFAULT_RANGE_Y,
    HEAD_NEUTRAL_THRESHOLD,
    HEAD_SMOOTHING_FACTOR,
)
from .exceptions import InvalidParameterError
from .geometry import clamp, safe_ratio
from .head_pose_estimator import POSE_INDICES, estimate_head_pose
from .landmarks import as_landmark_array, require_landmarks
from .validation import check_non_negative, check_number, check_positive

logger = logging.getLogger("facesignals.head_tracker")

# Nose landmark used as the cursor anchor
TRACKING_POINT = 4


@dataclass
class CalibrationData:
    center_x: float = DEFAULT_CENTER_X
    center_y: float = DEFAULT_CENTER_Y
    range_x: float = DEFAULT_RANGE_X
    range_y: float = DEFAULT_RANGE_Y
    is_calibrated: bool = False

    def to_dict(self):
        return {
            "center_x": self.center_x,
            "center_y": self.center_y,
            "range_x": self.range_x,
            "range_y": self.range_y,
            "is_calibrated": self.is_calibrated,
        }


@dataclass
class HeadPosition:
    x: float      # -1 (left) .. 1 (right)
    y: float      # -1 (up) .. 1 (down)
    tilt: float   # roll, radians
    yaw: float
    pitch: float

    def to_dict(self):
        return {
            "x": round(self.x, 4),
            "y": round(self.y, 4),
            "tilt": round(self.tilt, 4),
            "yaw": round(self.yaw, 4),
            "pitch": round(self.pitch, 4),
        }


class HeadTracker:
    """
    Maps the nose position into a smoothed [-1, 1] range per axis.

    Positions are relative to the current calibration; calibrate() takes the
    current nose position as the new centre.
    """

    def __init__(self, calibration=None, smoothing_factor=HEAD_SMOOTHING_FACTOR):
        self.calibration = calibration or CalibrationData()
        self.smoothing_factor = clamp(check_number("smoothing_factor", smoothing_factor), 0.0, 1.0)
        self.smoothed_x = 0.0
        self.smoothed_y = 0.0

    def set_calibration(self, calibration):
        if calibration.range_x <= 0 or calibration.range_y <= 0:
            raise InvalidParameterError("calibration", calibration, "ranges must be greater than 0")
        self.calibration = calibration

    def set_smoothing(self, factor):
        """Set the smoothing factor; values are clamped to [0, 1]."""
        self.smoothing_factor = clamp(check_number("smoothing_factor", factor), 0.0, 1.0)

    def track(self, landmarks):
        """
        Track head position for one frame.

        Args:
            landmarks: Face landmark set

        Returns:
            HeadPosition
        """
        pts = as_landmark_array(landmarks)
        require_landmarks(pts, POSE_INDICES + (TRACKING_POINT,))
        nose = pts[TRACKING_POINT]

        raw_x = clamp(safe_ratio(nose[0] - self.calibration.center_x, self.calibration.range_x), -1.0, 1.0)
        raw_y = clamp(safe_ratio(nose[1] - self.calibration.center_y, self.calibration.range_y), -1.0, 1.0)

        factor = self.smoothing_factor
        self.smoothed_x = self.smoothed_x * factor + raw_x * (1 - factor)
        self.smoothed_y = self.smoothed_y * factor + raw_y * (1 - factor)

        pose = estimate_head_pose(pts)
        return HeadPosition(
            x=self.smoothed_x,
            y=self.smoothed_y,
            tilt=pose.roll,
            yaw=pose.yaw,
            pitch=pose.pitch,
        )

    def calibrate(self, landmarks):
        """
        Use the current nose position as the centre of the movement range.

        Args:
            landmarks: Face landmark set captured while the user looks straight ahead

        Returns:
            CalibrationData
        """
        pts = as_landmark_array(landmarks)
        require_landmarks(pts, (TRACKING_POINT,))
        nose = pts[TRACKING_POINT]

        self.calibration = CalibrationData(
            center_x=float(nose[0]),
            center_y=float(nose[1]),
            range_x=CALIBRATED_RANGE_X,
            range_y=CALIBRATED_RANGE_Y,
            is_calibrated=True,
        )
        self.reset()
        logger.info("Head tracker calibrated at (%.3f, %.3f)", nose[0], nose[1])
        return self.calibration

    def reset(self):
        self.smoothed_x = 0.0
        self.smoothed_y = 0.0


def is_head_neutral(position, threshold=HEAD_NEUTRAL_THRESHOLD):
    """True when the head is centred and not tilted."""
    return abs(position.x) < threshold and abs(position.y) < threshold and abs(position.tilt) < 0.1


def head_position_to_screen(position, screen_width, screen_height, speed=CURSOR_SPEED, dead_zone=CURSOR_DEAD_ZONE):
    """
    Convert a head position into screen pixel coordinates.

    Args:
        position: HeadPosition (or anything with x / y in [-1, 1])
        screen_width: Screen width in pixels
        screen_height: Screen height in pixels
        speed: Multiplier applied after the dead zone
        dead_zone: Offsets with magnitude below this snap to the centre

    Returns:
        Tuple of (x, y) in pixels
    """
    x = 0.0 if abs(position.x) < dead_zone else position.x
    y = 0.0 if abs(position.y) < dead_zone else position.y

    x *= speed
    y *= speed

    screen_x = clamp((x + 1) / 2, 0.0, 1.0)
    screen_y = clamp((y + 1) / 2, 0.0, 1.0)
    return screen_x * screen_width, screen_y * screen_height


class CursorMapper:
    """Holds the runtime-tunable cursor speed and dead zone."""

    def __init__(self, speed=CURSOR_SPEED, dead_zone=CURSOR_DEAD_ZONE):
        self.speed = check_positive("speed", speed)
        self.dead_zone = self._check_dead_zone(dead_zone)

    @staticmethod
    def _check_dead_zone(value):
        value = check_non_negative("dead_zone", value)
        if value >= 1.0:
            raise InvalidParameterError("dead_zone", value, "must be below 1")
        return value

    def set_speed(self, speed):
        self.speed = check_positive("speed", speed)

    def set_dead_zone(self, dead_zone):
        self.dead_zone = self._check_dead_zone(dead_zone)

    def to_screen(self, position, screen_width, screen_height):
        return head_position_to_screen(position, screen_width, screen_height, self.speed, self.dead_zone)
