"""
facesignals - Face and Hand Landmark Signal Processing

This package turns per-frame face and hand landmarks into debounced signals:
- EAR calculation and blink detection
- Wink, mouth and eyebrow gestures
- Head pose estimation and head-driven cursor tracking
- Sleep detection
- Fatigue scoring (blink analysis, PERCLOS, yawns, head droop) and break reminders
- Finger counting and held-gesture recognition
- Facial color extraction
"""

from .config import DetectorSettings
from .exceptions import FaceSignalsError, InsufficientLandmarksError, InvalidParameterError
from .logger import setup_logging
from .session import FaceSignalSession

__version__ = "1.0.0"

__all__ = [
    "DetectorSettings",
    "FaceSignalSession",
    "FaceSignalsError",
    "InsufficientLandmarksError",
    "InvalidParameterError",
    "setup_logging",
]
