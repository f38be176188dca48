"""
Head Pose Estimation Module
Approximates head pitch, yaw and roll from a handful of face landmarks
"""

import math
from collections import deque
from dataclasses import dataclass

import numpy as np

from .config import SLEEP_PITCH_THRESHOLD
from .geometry import angle_2d, safe_ratio
from .landmarks import as_landmark_array, require_landmarks
from .validation import check_positive_int

# MediaPipe Face Mesh landmark indices
NOSE_TIP = 1
FOREHEAD = 10
CHIN = 152
LEFT_EYE_OUTER = 33
RIGHT_EYE_OUTER = 263

POSE_INDICES = (NOSE_TIP, FOREHEAD, CHIN, LEFT_EYE_OUTER, RIGHT_EYE_OUTER)


@dataclass
class HeadPose:
    """Head rotation in radians (approximate, not a full 6-DOF solve)"""
    pitch: float  # nodding; larger = nose lower relative to the forehead
    yaw: float    # turning left/right
    roll: float   # tilting side to side

    def to_dict(self):
        return {"pitch": round(self.pitch, 4), "yaw": round(self.yaw, 4), "roll": round(self.roll, 4)}


def estimate_head_pose(landmarks):
    """
    Estimate head pose from nose, forehead, chin and outer eye corners.

    pitch = atan2((nose.y - forehead.y) / face_height, 1)
    yaw   = atan2(2 * (nose.x - eye_center.x), eye_distance)
    roll  = angle of the left-to-right eye corner vector

    Zero-length reference distances give 0.0 for the affected angle.

    Args:
        landmarks: Face landmark set

    Returns:
        HeadPose
    """
    pts = as_landmark_array(landmarks)
    require_landmarks(pts, POSE_INDICES)

    nose = pts[NOSE_TIP]
    forehead = pts[FOREHEAD]
    chin = pts[CHIN]
    left_eye = pts[LEFT_EYE_OUTER]
    right_eye = pts[RIGHT_EYE_OUTER]

    face_height = abs(forehead[1] - chin[1])
    pitch = math.atan2(safe_ratio(nose[1] - forehead[1], face_height), 1.0)

    eye_center_x = (left_eye[0] + right_eye[0]) / 2.0
    eye_distance = abs(right_eye[0] - left_eye[0])
    yaw = math.atan2((nose[0] - eye_center_x) * 2.0, eye_distance) if eye_distance else 0.0

    roll = angle_2d(left_eye, right_eye)

    return HeadPose(pitch=pitch, yaw=yaw, roll=roll)


def is_head_down(landmarks, threshold=SLEEP_PITCH_THRESHOLD):
    return estimate_head_pose(landmarks).pitch > threshold


class HeadPoseEstimator:
    """
    Estimates head pose and optionally smooths it over recent frames.

    With the default window of 1 the output is the raw per-frame estimate,
    which is what the sleep detector consumes.
    """

    def __init__(self, smooth_window=1):
        """
        Initialize head pose estimator.

        Args:
            smooth_window: Number of frames to average angles over
        """
        self._angle_history = deque(maxlen=check_positive_int("smooth_window", smooth_window))

    def estimate(self, landmarks):
        """
        Estimate head pose for one frame.

        Returns:
            HeadPose averaged over the smoothing window
        """
        pose = estimate_head_pose(landmarks)
        self._angle_history.append((pose.pitch, pose.yaw, pose.roll))

        if len(self._angle_history) == 1:
            return pose

        pitch_s, yaw_s, roll_s = np.mean(np.array(self._angle_history), axis=0)
        return HeadPose(pitch=float(pitch_s), yaw=float(yaw_s), roll=float(roll_s))

    def reset(self):
        self._angle_history.clear()
