import pytest

from facesignals.blink_analyzer import BlinkAnalyzer
from facesignals.break_reminder import BreakReminder, get_break_reminder_data
from facesignals.exceptions import InvalidParameterError
from facesignals.fatigue_detector import FatigueDetector, FatigueState
from facesignals.head_droop_detector import HeadDroopDetector
from facesignals.perclos_calculator import PERCLOSCalculator
from facesignals.score_calculator import FatigueLevel, ScoreCalculator
from facesignals.yawn_detector import YawnDetector


def _blink(analyzer, start, duration):
    analyzer.update(False, False, start)
    return analyzer.update(True, True, start + duration)


class TestBlinkAnalyzer:
    def test_logs_normal_blink(self):
        analyzer = BlinkAnalyzer()
        assert _blink(analyzer, 10.0, 0.2) == pytest.approx(0.2)
        assert analyzer.calculate_blink_rate(11.0) == 1
        assert analyzer.get_avg_blink_duration() == pytest.approx(0.2)

    def test_rejects_too_short_and_too_long(self):
        analyzer = BlinkAnalyzer()
        assert _blink(analyzer, 10.0, 0.01) is None
        assert _blink(analyzer, 20.0, 1.0) is None
        assert analyzer.calculate_blink_rate(21.0) == 0

    def test_one_eye_closed_is_not_a_blink(self):
        analyzer = BlinkAnalyzer()
        analyzer.update(False, True, 1.0)
        assert analyzer.update(True, True, 1.2) is None

    def test_default_duration_without_blinks(self):
        assert BlinkAnalyzer().get_avg_blink_duration() == pytest.approx(0.2)

    def test_rate_window_and_eviction(self):
        analyzer = BlinkAnalyzer()
        _blink(analyzer, 10.0, 0.1)
        assert analyzer.calculate_blink_rate(71.0) == 0
        _blink(analyzer, 200.0, 0.1)
        assert len(analyzer.blink_timestamps) == 1

    def test_current_closed_duration(self):
        analyzer = BlinkAnalyzer()
        analyzer.update(False, False, 3.0)
        assert analyzer.get_current_closed_duration(3.5) == pytest.approx(0.5)


class TestPERCLOS:
    def test_zero_until_enough_frames(self):
        calc = PERCLOSCalculator()
        for _ in range(9):
            calc.update(False, False)
        assert calc.calculate() == 0.0
        calc.update(False, False)
        assert calc.calculate() == pytest.approx(100.0)

    def test_window_percentage(self):
        calc = PERCLOSCalculator()
        for _ in range(15):
            calc.update(False, False)
        for _ in range(15):
            calc.update(True, False)
        assert calc.calculate() == pytest.approx(50.0)
        for _ in range(15):
            calc.update(True, True)
        # the closed frames have slid out of the 30-frame window
        assert calc.calculate() == 0.0


class TestYawnDetector:
    def test_sustained_wide_mouth_is_one_yawn(self):
        detector = YawnDetector()
        counted = [detector.update(True, 0.8, t * 0.5) for t in range(5)]  # 0.0 .. 2.0
        assert counted == [False, False, False, False, True]
        assert detector.yawn_count == 1

    def test_cooldown_between_yawns(self):
        detector = YawnDetector()
        for t in range(9):  # 0.0 .. 4.0
            detector.update(True, 0.8, t * 0.5)
        assert detector.yawn_count == 1
        detector.update(True, 0.8, 7.5)
        assert detector.yawn_count == 2

    def test_small_opening_is_not_a_yawn(self):
        detector = YawnDetector()
        for t in range(10):
            detector.update(True, 0.5, float(t))
        assert detector.yawn_count == 0

    def test_closing_resets_timer(self):
        detector = YawnDetector()
        detector.update(True, 0.8, 0.0)
        detector.update(True, 0.8, 1.5)
        detector.update(False, 0.0, 1.6)
        detector.update(True, 0.8, 1.7)
        assert not detector.update(True, 0.8, 3.0)
        assert detector.get_current_yawn_duration() == pytest.approx(1.3)


class TestHeadDroop:
    def _baseline(self, detector):
        for _ in range(30):
            detector.update(0.0)

    def test_no_baseline_no_droop(self):
        detector = HeadDroopDetector()
        for _ in range(29):
            assert not detector.update(0.5)
        assert detector.baseline is None

    def test_sustained_droop_counts_once(self):
        detector = HeadDroopDetector()
        self._baseline(detector)
        for _ in range(30):
            detector.update(0.3)
        assert detector.baseline == pytest.approx(0.0)
        assert detector.droop_events == 1

    def test_single_frame_dip_is_ignored(self):
        detector = HeadDroopDetector()
        self._baseline(detector)
        detector.update(0.3)
        detector.update(0.0)
        assert detector.droop_events == 0

    def test_rearms_after_recovery(self):
        detector = HeadDroopDetector()
        self._baseline(detector)
        for y in [0.3] * 10 + [0.0] * 10 + [0.3] * 10:
            detector.update(y)
        assert detector.droop_events == 2


class TestScoreCalculator:
    def test_monotone_in_yawns_and_droops(self):
        calc = ScoreCalculator()
        yawn_scores = [calc.calculate_score(17, 0.2, yawn_count=n) for n in range(8)]
        droop_scores = [calc.calculate_score(17, 0.2, head_droop_events=n) for n in range(8)]
        assert yawn_scores == sorted(yawn_scores)
        assert droop_scores == sorted(droop_scores)

    def test_clamped(self):
        calc = ScoreCalculator()
        score = calc.calculate_score(0, 1.0, yawn_count=1000, head_droop_events=1000,
                                     perclos=100.0, session_seconds=10 * 3600)
        assert score == 100
        assert calc.calculate_score(17, 0.2) == 0

    def test_point_schedule(self):
        calc = ScoreCalculator()
        assert calc.calculate_score(2, 0.2) == 30
        assert calc.calculate_score(10, 0.2) == 20
        assert calc.calculate_score(30, 0.2) == 15
        assert calc.calculate_score(22, 0.2) == 10
        assert calc.calculate_score(17, 0.45) == 20
        assert calc.calculate_score(17, 0.35) == 10
        assert calc.calculate_score(17, 0.2, perclos=25.0) == 25
        assert calc.calculate_score(17, 0.2, session_seconds=1.5 * 3600) == 5

    @pytest.mark.parametrize("score, level", [
        (0, FatigueLevel.FRESH),
        (19, FatigueLevel.FRESH),
        (20, FatigueLevel.MILD),
        (40, FatigueLevel.MODERATE),
        (60, FatigueLevel.SEVERE),
        (100, FatigueLevel.SEVERE),
    ])
    def test_levels(self, score, level):
        assert ScoreCalculator().classify_level(score) == level


class TestFatigueDetector:
    def test_fresh_session_state(self):
        detector = FatigueDetector()
        detector.start_session(0.0)
        state = detector.get_fatigue_state(60.0)
        # no blinks in the last minute: +30 for a very low blink rate
        assert state.score == 30
        assert state.level == FatigueLevel.MILD
        assert state.time_until_break == pytest.approx(1740.0)
        assert not state.should_take_break

    def test_break_due_after_interval(self):
        detector = FatigueDetector(break_interval_minutes=30)
        detector.start_session(0.0)
        state = detector.get_fatigue_state(1800.0)
        assert state.time_until_break == 0
        assert state.should_take_break

    def test_break_due_on_high_score(self):
        detector = FatigueDetector()
        detector.start_session(0.0)
        detector.yawn_detector.yawn_count = 3
        state = detector.get_fatigue_state(10.0)
        assert state.score >= 60
        assert state.should_take_break

    def test_record_break(self):
        detector = FatigueDetector()
        detector.start_session(0.0)
        detector.yawn_detector.yawn_count = 3
        detector.head_droop_detector.droop_events = 1
        detector.record_break(1800.0)
        assert detector.yawn_detector.yawn_count == 1
        assert detector.head_droop_detector.droop_events == 0
        assert detector.get_fatigue_state(1860.0).time_until_break == pytest.approx(1740.0)

    def test_start_session_resets(self):
        detector = FatigueDetector()
        detector.yawn_detector.yawn_count = 5
        detector.start_session(0.0)
        assert detector.get_metrics(1.0).yawn_count == 0

    def test_metrics_from_frames(self):
        detector = FatigueDetector()
        detector.start_session(0.0)
        for i in range(10):
            t = 1.0 + i
            detector.process_eye_state(False, False, t)
            detector.process_eye_state(True, True, t + 0.15)
        metrics = detector.get_metrics(20.0)
        assert metrics.blink_rate == 10
        assert metrics.avg_blink_duration == pytest.approx(0.15)
        assert metrics.perclos == pytest.approx(50.0)
        assert metrics.session_duration == pytest.approx(20.0)

    def test_warnings(self):
        detector = FatigueDetector()
        detector.start_session(0.0)
        detector.yawn_detector.yawn_count = 3
        warnings = detector.get_warnings(10.0)
        assert "Multiple yawns detected - you may be getting tired." in warnings
        assert "Reduced blink rate detected - try blinking more often." in warnings
        assert "High fatigue detected. Please take a break immediately." in warnings

    def test_break_interval_validated(self):
        with pytest.raises(InvalidParameterError):
            FatigueDetector().set_break_interval(0)


class TestBreakReminder:
    def test_reminder_data_by_level(self):
        data = get_break_reminder_data(FatigueState(FatigueLevel.SEVERE, 70, True, 0.0))
        assert data.is_visible
        assert data.suggested_break_duration == 300
        assert get_break_reminder_data(FatigueState(FatigueLevel.FRESH, 0, True, 0.0)).suggested_break_duration == 60

    def test_raised_once_until_acknowledged(self):
        reminder = BreakReminder()
        due = FatigueState(FatigueLevel.MODERATE, 45, True, 0.0)
        assert reminder.process(due).suggested_break_duration == 180
        assert reminder.process(due) is None
        reminder.acknowledge()
        assert reminder.process(due) is not None

    def test_dip_below_break_level_does_not_rearm(self):
        reminder = BreakReminder()
        due = FatigueState(FatigueLevel.SEVERE, 60, True, 600.0)
        not_due = FatigueState(FatigueLevel.MODERATE, 58, False, 600.0)
        assert reminder.process(due) is not None
        assert reminder.process(not_due) is None
        assert reminder.process(due) is None
