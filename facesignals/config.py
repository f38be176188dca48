"""
Configuration file for all detector thresholds and settings

Every value here is a default. Any numeric setting can be overridden with a
FACESIGNALS_<NAME> environment variable (or a .env file in the working
directory), and every detector also exposes setters for runtime tuning.
"""

import os
from dataclasses import dataclass, fields

from dotenv import load_dotenv

load_dotenv()  # Load .env file if it exists

ENV_PREFIX = "FACESIGNALS_"


def _env_float(name, default):
    """
    Read a float override from the environment.

    Args:
        name: Setting name without the FACESIGNALS_ prefix
        default: Value used when the variable is unset

    Returns:
        Float value

    Raises:
        ValueError: If the variable is set but is not a number
    """
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None


def _env_int(name, default):
    return int(_env_float(name, default))


# Eye Aspect Ratio (EAR) thresholds
EAR_THRESHOLD = _env_float("EAR_THRESHOLD", 0.21)             # avg EAR below => eyes closed
BLINK_CONSEC_FRAMES = _env_int("BLINK_CONSEC_FRAMES", 2)      # closed frames needed to count a blink

# Wink detection (smoothed per-eye EAR)
EYE_HISTORY_SIZE = _env_int("EYE_HISTORY_SIZE", 5)
EYE_OPEN_THRESHOLD = _env_float("EYE_OPEN_THRESHOLD", 0.22)   # smoothed EAR above => eye open
EYE_BOTH_CLOSED_THRESHOLD = _env_float("EYE_BOTH_CLOSED_THRESHOLD", 0.18)
WINK_DIFF_THRESHOLD = _env_float("WINK_DIFF_THRESHOLD", 0.08)  # min |left - right| EAR gap
WINK_MIN_SECONDS = _env_float("WINK_MIN_SECONDS", 0.10)
WINK_MAX_SECONDS = _env_float("WINK_MAX_SECONDS", 0.50)

# Mouth
MOUTH_HISTORY_SIZE = _env_int("MOUTH_HISTORY_SIZE", 5)
MOUTH_OPEN_THRESHOLD = _env_float("MOUTH_OPEN_THRESHOLD", 0.03)  # height / width
MOUTH_YAWN_SCALE = 0.2                # openness of a full yawn, used for open_ratio
SMILE_THRESHOLD = 0.005               # corner lift above lip midpoint (normalized units)
SMILE_INTENSITY_SCALE = 100.0

# Eyebrows
EYEBROW_RAISE_THRESHOLD = _env_float("EYEBROW_RAISE_THRESHOLD", 0.015)

# Head tracking / cursor
HEAD_SMOOTHING_FACTOR = _env_float("HEAD_SMOOTHING_FACTOR", 0.7)
CURSOR_SPEED = _env_float("CURSOR_SPEED", 1.5)
CURSOR_DEAD_ZONE = _env_float("CURSOR_DEAD_ZONE", 0.05)
DEFAULT_CENTER_X = 0.5
DEFAULT_CENTER_Y = 0.5
DEFAULT_RANGE_X = 0.3
DEFAULT_RANGE_Y = 0.2
CALIBRATED_RANGE_X = 0.25             # comfortable head movement range after calibration
CALIBRATED_RANGE_Y = 0.15
HEAD_NEUTRAL_THRESHOLD = 0.1

# Sleep detection (frame counts assume ~30 fps)
SLEEP_EYE_CLOSED_FRAMES = _env_int("SLEEP_EYE_CLOSED_FRAMES", 45)   # ~1.5s
SLEEP_HEAD_DOWN_FRAMES = _env_int("SLEEP_HEAD_DOWN_FRAMES", 30)     # ~1s
SLEEP_PITCH_THRESHOLD = _env_float("SLEEP_PITCH_THRESHOLD", 0.25)   # radians (~14 degrees)
SLEEP_FRAME_DECAY = 2
SLEEP_EYE_SCORE_MAX = 60
SLEEP_HEAD_SCORE_MAX = 40

# Fatigue: blink log
BLINK_HISTORY_SECONDS = 120           # keep 2 minutes of blinks
BLINK_RATE_WINDOW = 60                # seconds
BLINK_MIN_SECONDS = 0.05
BLINK_MAX_SECONDS = 0.50
NORMAL_BLINK_SECONDS = 0.20
LONG_BLINK_SECONDS = 0.40

# Fatigue: PERCLOS-like closed-frame percentage
PERCLOS_WINDOW_FRAMES = 30
PERCLOS_MIN_FRAMES = 10

# Fatigue: yawns
YAWN_OPEN_RATIO = 0.6
YAWN_DURATION_SECONDS = 2.0
YAWN_COOLDOWN_SECONDS = 5.0

# Fatigue: head droop
HEAD_BASELINE_SAMPLES = 30
HEAD_HISTORY_SIZE = 60
HEAD_DROOP_THRESHOLD = 0.15           # 15% below baseline
HEAD_DROOP_RECENT_SAMPLES = 10
HEAD_DROOP_CONFIRM_FACTOR = 0.8

# Fatigue: blink rate bands (per minute)
DROWSY_BLINK_RATE_MIN = 4
DROWSY_BLINK_RATE_MAX = 14
FATIGUE_BLINK_RATE_MIN = 20
FATIGUE_BLINK_RATE_MAX = 26

# Fatigue score levels
SCORE_MILD = 20
SCORE_MODERATE = 40
SCORE_SEVERE = 60
BREAK_INTERVAL_MINUTES = _env_float("BREAK_INTERVAL_MINUTES", 30)

# Hand gestures
GESTURE_HOLD_SECONDS = _env_float("GESTURE_HOLD_SECONDS", 0.3)
GESTURE_COOLDOWN_SECONDS = _env_float("GESTURE_COOLDOWN_SECONDS", 0.5)
GESTURE_REQUIRE_RELEASE = True        # a fired gesture must be released before it can fire again

# Color extraction
COLOR_MIN_BRIGHTNESS = 20
COLOR_MAX_BRIGHTNESS = 240
COLOR_QUANT_STEP = 32

# Logging
LOG_LEVEL = os.getenv(ENV_PREFIX + "LOG_LEVEL", "INFO")


@dataclass
class DetectorSettings:
    """
    Runtime tunables for one session.

    Built from the module defaults with from_config() and pushed into the
    detectors with FaceSignalSession.apply_settings(); each value goes
    through the owning detector's setter, so invalid values are rejected
    there.
    """
    ear_threshold: float = EAR_THRESHOLD
    blink_consec_frames: int = BLINK_CONSEC_FRAMES
    eye_open_threshold: float = EYE_OPEN_THRESHOLD
    eye_closed_threshold: float = EYE_BOTH_CLOSED_THRESHOLD
    wink_diff_threshold: float = WINK_DIFF_THRESHOLD
    wink_min_seconds: float = WINK_MIN_SECONDS
    wink_max_seconds: float = WINK_MAX_SECONDS
    mouth_open_threshold: float = MOUTH_OPEN_THRESHOLD
    eyebrow_raise_threshold: float = EYEBROW_RAISE_THRESHOLD
    sleep_eye_closed_frames: int = SLEEP_EYE_CLOSED_FRAMES
    sleep_head_down_frames: int = SLEEP_HEAD_DOWN_FRAMES
    sleep_pitch_threshold: float = SLEEP_PITCH_THRESHOLD
    break_interval_minutes: float = BREAK_INTERVAL_MINUTES
    gesture_hold_seconds: float = GESTURE_HOLD_SECONDS
    gesture_cooldown_seconds: float = GESTURE_COOLDOWN_SECONDS
    head_smoothing_factor: float = HEAD_SMOOTHING_FACTOR
    cursor_speed: float = CURSOR_SPEED
    cursor_dead_zone: float = CURSOR_DEAD_ZONE

    @classmethod
    def from_config(cls):
        """Snapshot the current module-level defaults."""
        return cls()

    def to_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}
