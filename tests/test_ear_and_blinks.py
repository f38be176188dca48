import numpy as np
import pytest

from facesignals.blink_detector import BlinkDetector, BlinkState
from facesignals.ear_detector import (
    LEFT_EYE,
    are_eyes_closed,
    calculate_average_ear,
    calculate_ear,
    calculate_eye_ears,
)
from facesignals.exceptions import InsufficientLandmarksError, InvalidParameterError
from facesignals.geometry import angle_2d, clamp, mean_y, safe_ratio
from facesignals.landmarks import Landmark, as_landmark_array


class TestLandmarks:
    def test_accepts_tuples_and_named_points(self):
        pts = as_landmark_array([(0.1, 0.2), Landmark(0.3, 0.4, 0.5)])
        assert pts.shape == (2, 3)
        assert pts[0].tolist() == [0.1, 0.2, 0.0]
        assert pts[1].tolist() == [0.3, 0.4, 0.5]

    def test_accepts_landmark_list_objects(self):
        class Result:
            landmark = [Landmark(0.1, 0.2, 0.3)]

        assert as_landmark_array(Result()).tolist() == [[0.1, 0.2, 0.3]]

    def test_none_is_empty(self):
        assert as_landmark_array(None).shape == (0, 3)

    def test_rejects_bad_array_shape(self):
        with pytest.raises(ValueError):
            as_landmark_array(np.zeros((4, 5)))

    def test_rejects_malformed_points(self):
        with pytest.raises(ValueError):
            as_landmark_array([(0.1,)])
        with pytest.raises(ValueError):
            as_landmark_array([0.5])


class TestGeometry:
    def test_safe_ratio_zero_denominator(self):
        assert safe_ratio(1.0, 0.0) == 0.0
        assert safe_ratio(1.0, 0.0, default=-1.0) == -1.0

    def test_angle_of_coincident_points(self):
        assert angle_2d((0.3, 0.3), (0.3, 0.3)) == 0.0

    def test_mean_y_and_clamp(self):
        pts = np.array([[0.0, 0.2, 0.0], [0.0, 0.4, 0.0]])
        assert mean_y(pts, (0, 1)) == pytest.approx(0.3)
        assert clamp(2.0, -1.0, 1.0) == 1.0


class TestEAR:
    def test_open_eyes(self, face):
        ears = calculate_eye_ears(face)
        assert ears.left == pytest.approx(0.3)
        assert ears.right == pytest.approx(0.3)
        assert ears.avg == pytest.approx(0.3)

    def test_closed_eyes(self, make_face):
        closed = make_face(left_open=False, right_open=False)
        assert calculate_average_ear(closed) == pytest.approx(0.04)
        assert are_eyes_closed(closed)

    def test_non_negative_and_zero_for_degenerate_eye(self, face):
        pts = face.copy()
        pts[133] = pts[33]  # corners coincide
        assert calculate_ear(pts, LEFT_EYE) == 0.0
        assert calculate_average_ear(face) >= 0.0

    def test_scale_invariant(self, face):
        scaled = face.copy()
        scaled[:, :2] = scaled[:, :2] * 3.0 + 0.7
        assert calculate_average_ear(scaled) == pytest.approx(calculate_average_ear(face))

    def test_insufficient_landmarks(self, face):
        with pytest.raises(InsufficientLandmarksError):
            calculate_average_ear(face[:100])

    def test_insufficient_landmarks_is_an_index_error(self, face):
        with pytest.raises(IndexError):
            calculate_ear(face[:50], LEFT_EYE)


class TestBlinkDetector:
    def _feed(self, detector, ears):
        for ear in ears:
            detector.update(ear, ear)

    def test_two_closed_frames_count_one_blink(self):
        detector = BlinkDetector()
        self._feed(detector, [0.1, 0.1, 0.25])
        assert detector.blink_count == 1

    def test_single_closed_frame_is_noise(self):
        detector = BlinkDetector()
        self._feed(detector, [0.1, 0.25])
        assert detector.blink_count == 0

    def test_state_follows_frames(self):
        detector = BlinkDetector()
        result = detector.update(0.1, 0.1)
        assert result.is_blinking
        assert detector.state == BlinkState.CLOSING
        detector.update(0.3, 0.3)
        assert detector.state == BlinkState.OPEN

    def test_detect_from_landmarks(self, face, make_face):
        detector = BlinkDetector()
        closed = make_face(left_open=False, right_open=False)
        for pts in (closed, closed, face):
            detector.detect(pts)
        assert detector.blink_count == 1

    def test_reset_blink_count(self):
        detector = BlinkDetector()
        self._feed(detector, [0.1, 0.1, 0.3])
        detector.reset_blink_count()
        assert detector.blink_count == 0

    def test_setters_validate(self):
        detector = BlinkDetector()
        with pytest.raises(InvalidParameterError):
            detector.set_threshold(-0.1)
        with pytest.raises(InvalidParameterError):
            detector.set_threshold(float("nan"))
        with pytest.raises(InvalidParameterError):
            detector.set_consecutive_frames(0)
        detector.set_consecutive_frames(3)
        self._feed(detector, [0.1, 0.1, 0.3])
        assert detector.blink_count == 0

    def test_bad_frame_leaves_state_untouched(self, face):
        detector = BlinkDetector()
        detector.update(0.1, 0.1)
        with pytest.raises(InsufficientLandmarksError):
            detector.detect(face[:10])
        detector.update(0.1, 0.1)
        detector.update(0.3, 0.3)
        assert detector.blink_count == 1
