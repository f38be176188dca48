"""
Session Module
Owns one instance of every detector and runs them per frame
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from .blink_detector import BlinkDetectionResult, BlinkDetector
from .break_reminder import BreakReminder
from .config import DetectorSettings
from .exceptions import InsufficientLandmarksError
from .eye_gesture_detector import EyeGestureDetector, EyeState, WinkSide
from .eyebrow_detector import EyebrowDetector, EyebrowState
from .fatigue_detector import FatigueDetector
from .finger_counter import GestureType, Handedness
from .gesture_recognizer import GestureAction, GestureRecognizer, GestureResult, action_for_gesture
from .head_pose_estimator import HeadPose, HeadPoseEstimator
from .head_tracker import CursorMapper, HeadPosition, HeadTracker
from .landmarks import FACE_LANDMARK_COUNT, as_landmark_array, require_landmarks
from .mouth_gesture_detector import MouthGestureDetector, MouthState
from .sleep_detector import SleepDetectionResult, SleepDetector

logger = logging.getLogger("facesignals.session")


@dataclass
class FaceFrameResult:
    """Everything derived from one face frame; only face_detected is set when no usable face was seen."""
    face_detected: bool
    blink: Optional[BlinkDetectionResult] = None
    blink_count: int = 0
    eyes: Optional[EyeState] = None
    wink: Optional[WinkSide] = None
    mouth: Optional[MouthState] = None
    eyebrows: Optional[EyebrowState] = None
    head_pose: Optional[HeadPose] = None
    head_position: Optional[HeadPosition] = None
    cursor: Optional[tuple] = None
    sleep: Optional[SleepDetectionResult] = None

    def to_dict(self):
        def _maybe(value):
            return value.to_dict() if value is not None else None

        return {
            "face_detected": self.face_detected,
            "blink": _maybe(self.blink),
            "blink_count": self.blink_count,
            "eyes": _maybe(self.eyes),
            "wink": self.wink.value if self.wink is not None else None,
            "mouth": _maybe(self.mouth),
            "eyebrows": _maybe(self.eyebrows),
            "head_pose": _maybe(self.head_pose),
            "head_position": _maybe(self.head_position),
            "cursor": self.cursor,
            "sleep": _maybe(self.sleep),
        }


@dataclass
class HandFrameResult:
    hand_detected: bool
    gesture: GestureType = GestureType.NONE
    recognition: Optional[GestureResult] = None
    held_gesture: Optional[GestureType] = None
    action: Optional[GestureAction] = None
    hold_progress: float = 0.0

    def to_dict(self):
        return {
            "hand_detected": self.hand_detected,
            "gesture": self.gesture.value,
            "recognition": self.recognition.to_dict() if self.recognition is not None else None,
            "held_gesture": self.held_gesture.value if self.held_gesture is not None else None,
            "action": self.action.action if self.action is not None else None,
            "hold_progress": round(self.hold_progress, 3),
        }


class FaceSignalSession:
    """
    One subject's detector set, alive between start() and stop().

    Frames are pushed in with process_face() / process_hand(). A frame with
    too few landmarks is treated as a dropped frame: it is logged and a
    neutral result is returned. A dropped face frame changes no detector
    state; a missing or dropped hand frame releases any held gesture.
    """

    def __init__(self, settings=None, screen_size=None, custom_actions=None, fatigue_enabled=True):
        """
        Initialize session.

        Args:
            settings: DetectorSettings (defaults from config)
            screen_size: Optional (width, height) used to map head position to cursor pixels
            custom_actions: Optional {GestureType: GestureAction} overrides
            fatigue_enabled: Feed the fatigue detector while running
        """
        self.blink_detector = BlinkDetector()
        self.eye_detector = EyeGestureDetector()
        self.mouth_detector = MouthGestureDetector()
        self.eyebrow_detector = EyebrowDetector()
        self.head_pose_estimator = HeadPoseEstimator()
        self.head_tracker = HeadTracker()
        self.cursor_mapper = CursorMapper()
        self.sleep_detector = SleepDetector()
        self.fatigue_detector = FatigueDetector()
        self.gesture_recognizer = GestureRecognizer()
        self.break_reminder = BreakReminder()

        self.screen_size = screen_size
        self.custom_actions = custom_actions
        self.fatigue_enabled = fatigue_enabled

        self.is_running = False
        self._last_face_landmarks = None

        self.settings = settings or DetectorSettings.from_config()
        self.apply_settings(self.settings)

    def start(self, timestamp=None):
        """Reset every detector and begin a new fatigue session."""
        if timestamp is None:
            timestamp = time.time()
        for detector in (
            self.blink_detector,
            self.eye_detector,
            self.mouth_detector,
            self.eyebrow_detector,
            self.head_pose_estimator,
            self.head_tracker,
            self.sleep_detector,
            self.gesture_recognizer,
        ):
            detector.reset()
        self.break_reminder.acknowledge()
        self.fatigue_detector.start_session(timestamp)
        self._last_face_landmarks = None
        self.is_running = True
        logger.info("Session started")

    def stop(self):
        self.fatigue_detector.end_session()
        self._last_face_landmarks = None
        self.is_running = False
        logger.info("Session stopped")

    def apply_settings(self, settings):
        """
        Push runtime tunables into the detectors through their setters.

        Raises:
            InvalidParameterError: If any value is out of range
        """
        self.blink_detector.set_threshold(settings.ear_threshold)
        self.blink_detector.set_consecutive_frames(settings.blink_consec_frames)
        self.eye_detector.set_thresholds(
            open_threshold=settings.eye_open_threshold,
            closed_threshold=settings.eye_closed_threshold,
            wink_diff=settings.wink_diff_threshold,
        )
        self.eye_detector.set_wink_duration(settings.wink_min_seconds, settings.wink_max_seconds)
        self.mouth_detector.set_threshold(settings.mouth_open_threshold)
        self.eyebrow_detector.set_threshold(settings.eyebrow_raise_threshold)
        self.sleep_detector.set_thresholds(
            eye_closed_threshold=settings.sleep_eye_closed_frames,
            head_down_threshold=settings.sleep_head_down_frames,
            pitch_threshold=settings.sleep_pitch_threshold,
            ear_threshold=settings.ear_threshold,
        )
        self.fatigue_detector.set_break_interval(settings.break_interval_minutes)
        self.gesture_recognizer.set_hold_time(settings.gesture_hold_seconds)
        self.gesture_recognizer.set_cooldown(settings.gesture_cooldown_seconds)
        self.head_tracker.set_smoothing(settings.head_smoothing_factor)
        self.cursor_mapper.set_speed(settings.cursor_speed)
        self.cursor_mapper.set_dead_zone(settings.cursor_dead_zone)
        self.settings = settings
        logger.debug("Settings applied: %s", settings.to_dict())

    def process_face(self, landmarks, timestamp=None):
        """
        Run every face detector on one frame.

        Args:
            landmarks: Face landmark set, or None when no face was found
            timestamp: Frame time in seconds (defaults to now)

        Returns:
            FaceFrameResult
        """
        if timestamp is None:
            timestamp = time.time()
        if landmarks is None:
            self._last_face_landmarks = None
            return FaceFrameResult(face_detected=False)

        try:
            pts = as_landmark_array(landmarks)
            require_landmarks(pts, (FACE_LANDMARK_COUNT - 1,))
        except (InsufficientLandmarksError, ValueError) as e:
            logger.warning("Dropping face frame: %s", e)
            return FaceFrameResult(face_detected=False)

        self._last_face_landmarks = pts

        blink = self.blink_detector.detect(pts)
        eyes = self.eye_detector.detect(pts)
        wink = self.eye_detector.update_wink(eyes, timestamp)
        mouth = self.mouth_detector.detect(pts)
        eyebrows = self.eyebrow_detector.detect(pts)
        head_pose = self.head_pose_estimator.estimate(pts)
        head_position = self.head_tracker.track(pts)
        sleep = self.sleep_detector.update(blink.avg_ear < self.sleep_detector.ear_threshold, head_pose.pitch, timestamp)

        cursor = None
        if self.screen_size is not None:
            cursor = self.cursor_mapper.to_screen(head_position, *self.screen_size)

        if self.is_running and self.fatigue_enabled:
            self.fatigue_detector.process_eye_state(eyes.left_open, eyes.right_open, timestamp)
            self.fatigue_detector.process_mouth_state(mouth.is_open, mouth.open_ratio, timestamp)
            self.fatigue_detector.process_head_position(head_position.y)

        return FaceFrameResult(
            face_detected=True,
            blink=blink,
            blink_count=self.blink_detector.blink_count,
            eyes=eyes,
            wink=wink,
            mouth=mouth,
            eyebrows=eyebrows,
            head_pose=head_pose,
            head_position=head_position,
            cursor=cursor,
            sleep=sleep,
        )

    def process_hand(self, landmarks, handedness=Handedness.RIGHT, timestamp=None):
        """
        Classify one hand frame and run hold detection.

        Args:
            landmarks: 21-point hand landmark set, or None when no hand was found
            handedness: "left" or "right"
            timestamp: Frame time in seconds (defaults to now)

        Returns:
            HandFrameResult
        """
        if timestamp is None:
            timestamp = time.time()
        if landmarks is None:
            self.gesture_recognizer.release()
            return HandFrameResult(hand_detected=False)

        try:
            recognition = self.gesture_recognizer.recognize(landmarks, handedness)
        except (InsufficientLandmarksError, ValueError) as e:
            logger.warning("Dropping hand frame: %s", e)
            self.gesture_recognizer.release()
            return HandFrameResult(hand_detected=False)

        held = self.gesture_recognizer.update_hold(recognition, timestamp)
        return HandFrameResult(
            hand_detected=True,
            gesture=recognition.gesture,
            recognition=recognition,
            held_gesture=held,
            action=action_for_gesture(held, self.custom_actions) if held is not None else None,
            hold_progress=self.gesture_recognizer.get_hold_progress(),
        )

    def calibrate(self):
        """
        Calibrate head tracking and eyebrows from the last good face frame.

        Returns:
            CalibrationData, or None when no face has been seen
        """
        if self._last_face_landmarks is None:
            logger.warning("Calibration skipped: no face landmarks available")
            return None
        calibration = self.head_tracker.calibrate(self._last_face_landmarks)
        self.eyebrow_detector.calibrate(self._last_face_landmarks)
        return calibration

    def fatigue_state(self, timestamp=None):
        return self.fatigue_detector.get_fatigue_state(timestamp)

    def check_break(self, timestamp=None):
        """
        Returns:
            BreakReminderData when a new break reminder is due, else None
        """
        return self.break_reminder.process(self.fatigue_detector.get_fatigue_state(timestamp))

    def record_break(self, timestamp=None):
        self.fatigue_detector.record_break(timestamp)
        self.break_reminder.acknowledge()
