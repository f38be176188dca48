import math

import pytest

from facesignals.exceptions import InsufficientLandmarksError, InvalidParameterError
from facesignals.head_pose_estimator import HeadPoseEstimator, estimate_head_pose, is_head_down
from facesignals.head_tracker import (
    CalibrationData,
    CursorMapper,
    HeadPosition,
    HeadTracker,
    head_position_to_screen,
    is_head_neutral,
)


class TestHeadPose:
    def test_frontal_face(self, face):
        pose = estimate_head_pose(face)
        assert pose.yaw == pytest.approx(0.0)
        assert pose.roll == pytest.approx(0.0)
        # nose 0.35 below the forehead on a 0.65 tall face
        assert pose.pitch == pytest.approx(math.atan2(0.35 / 0.65, 1.0))

    def test_turned_head_has_yaw(self, make_face):
        pose = estimate_head_pose(make_face(nose_offset=(0.05, 0.0)))
        assert pose.yaw > 0

    def test_tilted_head_has_roll(self, face):
        pts = face.copy()
        pts[263][1] += 0.05
        assert estimate_head_pose(pts).roll > 0

    def test_degenerate_face_height(self, face):
        pts = face.copy()
        pts[152] = pts[10]
        assert estimate_head_pose(pts).pitch == 0.0

    def test_lowered_nose_is_head_down(self, make_face):
        assert is_head_down(make_face(nose_offset=(0.0, 0.2)), threshold=0.6)
        assert not is_head_down(make_face(), threshold=0.6)

    def test_smoothing_window(self, face, make_face):
        estimator = HeadPoseEstimator(smooth_window=2)
        first = estimator.estimate(face)
        second = estimator.estimate(make_face(nose_offset=(0.05, 0.0)))
        assert 0 < second.yaw < estimate_head_pose(make_face(nose_offset=(0.05, 0.0))).yaw
        assert first.yaw == pytest.approx(0.0)

    def test_insufficient_landmarks(self, face):
        with pytest.raises(InsufficientLandmarksError):
            estimate_head_pose(face[:200])


class TestHeadTracker:
    def test_calibrate_then_track_is_centered(self, make_face):
        pts = make_face(nose_offset=(0.1, -0.05))
        tracker = HeadTracker()
        calibration = tracker.calibrate(pts)
        assert calibration.is_calibrated
        position = tracker.track(pts)
        assert position.x == pytest.approx(0.0)
        assert position.y == pytest.approx(0.0)

    def test_smoothing(self, make_face):
        tracker = HeadTracker()
        pts = make_face(nose_offset=(0.15, 0.0))  # raw x = 0.15 / 0.3 = 0.5
        first = tracker.track(pts)
        assert first.x == pytest.approx(0.5 * 0.3)
        for _ in range(50):
            last = tracker.track(pts)
        assert last.x == pytest.approx(0.5, abs=1e-3)

    def test_position_is_clamped(self, make_face):
        tracker = HeadTracker(smoothing_factor=0.0)
        position = tracker.track(make_face(nose_offset=(0.45, 0.0)))
        assert position.x == pytest.approx(1.0)

    def test_smoothing_factor_is_clamped(self):
        tracker = HeadTracker()
        tracker.set_smoothing(3.0)
        assert tracker.smoothing_factor == 1.0

    def test_smoothing_factor_must_be_a_number(self):
        with pytest.raises(InvalidParameterError):
            HeadTracker().set_smoothing("smooth")
        with pytest.raises(InvalidParameterError):
            HeadTracker(smoothing_factor=float("nan"))

    def test_rejects_empty_range(self):
        with pytest.raises(InvalidParameterError):
            HeadTracker().set_calibration(CalibrationData(range_x=0.0))

    def test_neutral(self):
        assert is_head_neutral(HeadPosition(0.05, -0.05, 0.0, 0.0, 0.0))
        assert not is_head_neutral(HeadPosition(0.5, 0.0, 0.0, 0.0, 0.0))


class TestCursorMapping:
    def test_dead_zone_and_speed(self):
        position = HeadPosition(0.02, -0.5, 0.0, 0.0, 0.0)
        x, y = head_position_to_screen(position, 1000, 800, speed=1.5, dead_zone=0.05)
        assert x == pytest.approx(500.0)
        assert y == pytest.approx(100.0)

    def test_screen_edges_clamped(self):
        x, y = head_position_to_screen(HeadPosition(1.0, 1.0, 0.0, 0.0, 0.0), 1920, 1080)
        assert (x, y) == (1920, 1080)

    def test_setters_validate(self):
        mapper = CursorMapper()
        with pytest.raises(InvalidParameterError):
            mapper.set_speed(-1.0)
        with pytest.raises(InvalidParameterError):
            mapper.set_dead_zone(1.0)
        mapper.set_dead_zone(0.0)
        assert mapper.to_screen(HeadPosition(0.02, 0.0, 0.0, 0.0, 0.0), 100, 100)[0] > 50
