"""
Facial Color Extraction Module
Samples skin, hair and eye colors from a BGR frame using face landmarks
"""

import logging
from dataclasses import dataclass

import cv2
import numpy as np

from .config import COLOR_MAX_BRIGHTNESS, COLOR_MIN_BRIGHTNESS, COLOR_QUANT_STEP
from .landmarks import FACE_LANDMARK_COUNT_REFINED, as_landmark_array

logger = logging.getLogger("facesignals.colors")

# MediaPipe Face Mesh regions
LEFT_CHEEK_INDICES = [205, 206, 207, 187, 123, 116, 117, 118]
RIGHT_CHEEK_INDICES = [425, 426, 427, 411, 352, 345, 346, 347]
FOREHEAD_INDICES = [10, 67, 109, 297, 338, 151, 108, 69]   # hair is sampled just above this
LEFT_IRIS_INDICES = [468, 469, 470, 471, 472]               # refined landmarks only
RIGHT_IRIS_INDICES = [473, 474, 475, 476, 477]

FALLBACK_RGB = (128, 128, 128)
DEFAULT_EYE_RGB = (100, 80, 60)


@dataclass
class FacialColors:
    skin_color: str
    skin_color_name: str
    hair_color: str
    hair_color_name: str
    eye_color: str
    eye_color_name: str

    def to_dict(self):
        return {
            "skin_color": self.skin_color,
            "skin_color_name": self.skin_color_name,
            "hair_color": self.hair_color,
            "hair_color_name": self.hair_color_name,
            "eye_color": self.eye_color,
            "eye_color_name": self.eye_color_name,
        }


def default_colors():
    return FacialColors(
        skin_color="#c9a080",
        skin_color_name="Medium",
        hair_color="#3d2314",
        hair_color_name="Dark Brown",
        eye_color="#6b4423",
        eye_color_name="Brown",
    )


def rgb_to_hex(r, g, b):
    return "#{:02x}{:02x}{:02x}".format(int(r), int(g), int(b))


def hex_to_rgb(hex_color):
    """Parse "#rrggbb" (leading # optional); returns None for malformed input."""
    value = hex_color.lstrip("#")
    if len(value) != 6:
        return None
    try:
        return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return None


def color_name(hex_color):
    """Coarse everyday name for a hex color."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return "Unknown"
    r, g, b = rgb
    brightness = (r + g + b) / 3

    if brightness < 50:
        return "Black"
    if brightness > 200 and r > 180 and g > 180 and b > 180:
        return "White"
    if r > g and r > b:
        if r > 150 and g < 100 and b < 100:
            return "Red"
        if r > 150 and g > 100:
            return "Orange"
        return "Brown"
    if g > r and g > b:
        return "Green"
    if b > r and b > g:
        if b > 150 and r < 100 and g < 150:
            return "Blue"
        return "Purple"
    if abs(r - g) < 30 and abs(g - b) < 30:
        return "Gray"
    return "Mixed"


def skin_tone_name(rgb):
    brightness = sum(rgb) / 3
    if brightness > 200:
        return "Fair"
    if brightness > 170:
        return "Light"
    if brightness > 140:
        return "Medium"
    if brightness > 100:
        return "Olive"
    if brightness > 70:
        return "Tan"
    return "Dark"


def hair_color_name(rgb):
    r, g, b = rgb
    brightness = (r + g + b) / 3

    if brightness < 40:
        return "Black"
    if brightness > 180 and r > 200 and g > 180:
        return "Blonde"
    if r > g + 30 and r > b + 30:
        return "Ginger" if brightness > 120 else "Auburn"
    if brightness < 80:
        return "Dark Brown"
    if brightness < 120:
        return "Brown"
    if brightness > 160:
        return "Light Brown"
    return "Brown"


def eye_color_name(rgb):
    r, g, b = rgb
    if b > r + 20 and b > g + 20:
        return "Blue"
    if g > r and g > b - 20:
        return "Green"
    if r > 80 and g > 60 and b < r and abs(r - g) < 40:
        return "Hazel"
    if abs(r - g) < 20 and abs(g - b) < 20 and r > 100:
        return "Gray"
    return "Brown"


def region_bounds(points, indices, width, height):
    """
    Pixel bounding box (x, y, w, h) around the given normalized landmarks.

    Args:
        points: (N, 3) landmark array
        indices: Landmark indices that outline the region
        width: Frame width in pixels
        height: Frame height in pixels

    Returns:
        Tuple (x, y, w, h) with w, h >= 1 and x, y >= 0
    """
    pixel_pts = points[indices, :2] * np.array([width, height], dtype=np.float64)
    x, y, w, h = cv2.boundingRect(np.floor(pixel_pts).astype(np.int32))
    return max(0, x), max(0, y), max(1, w), max(1, h)


def _region_pixels(rgb_frame, region):
    x, y, w, h = region
    return rgb_frame[y:y + h, x:x + w].reshape(-1, 3).astype(np.float64)


def average_color(rgb_frame, region):
    """
    Mean color of a region, ignoring shadows and highlights.

    Returns:
        (r, g, b) ints; mid gray when no usable pixel remains
    """
    pixels = _region_pixels(rgb_frame, region)
    if pixels.size == 0:
        return FALLBACK_RGB

    brightness = pixels.mean(axis=1)
    usable = pixels[(brightness > COLOR_MIN_BRIGHTNESS) & (brightness < COLOR_MAX_BRIGHTNESS)]
    if len(usable) == 0:
        return FALLBACK_RGB

    r, g, b = np.round(usable.mean(axis=0)).astype(int)
    return int(r), int(g), int(b)


def dominant_color(rgb_frame, region):
    """
    Most common color of a region after coarse quantization.

    Pixels are binned by COLOR_QUANT_STEP per channel; the result is the mean
    of the actual pixels in the largest bin.

    Returns:
        (r, g, b) ints; mid gray for an empty region
    """
    pixels = _region_pixels(rgb_frame, region)
    if pixels.size == 0:
        return FALLBACK_RGB

    bins = (pixels // COLOR_QUANT_STEP).astype(np.int32)
    _, inverse, counts = np.unique(bins, axis=0, return_inverse=True, return_counts=True)
    inverse = inverse.reshape(-1)
    winner = int(np.argmax(counts))

    r, g, b = np.round(pixels[inverse == winner].mean(axis=0)).astype(int)
    return int(r), int(g), int(b)


def _blend(c1, c2):
    return tuple(int(round((a + b) / 2)) for a, b in zip(c1, c2))


def extract_facial_colors(frame, landmarks):
    """
    Estimate skin, hair and eye colors for the face in `frame`.

    Skin is the average of both cheeks, hair the dominant color of a band
    the height of the forehead region directly above it, and eyes the
    dominant iris color when refined (478-point) landmarks are present.

    Args:
        frame: BGR image (H, W, 3) as delivered by OpenCV
        landmarks: Face landmark set for the same frame

    Returns:
        FacialColors (defaults when the frame or landmarks are unusable)
    """
    if frame is None or not hasattr(frame, "shape") or frame.ndim != 3 or frame.shape[2] != 3:
        return default_colors()
    height, width = frame.shape[:2]
    if width == 0 or height == 0:
        return default_colors()

    pts = as_landmark_array(landmarks)
    required = max(LEFT_CHEEK_INDICES + RIGHT_CHEEK_INDICES + FOREHEAD_INDICES) + 1
    if len(pts) < required:
        logger.debug("Color extraction skipped: %d landmarks", len(pts))
        return default_colors()

    rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    # Skin color from cheeks
    left_cheek = average_color(rgb_frame, region_bounds(pts, LEFT_CHEEK_INDICES, width, height))
    right_cheek = average_color(rgb_frame, region_bounds(pts, RIGHT_CHEEK_INDICES, width, height))
    skin = _blend(left_cheek, right_cheek)

    # Hair color from the band above the forehead
    fx, fy, fw, fh = region_bounds(pts, FOREHEAD_INDICES, width, height)
    hair_region = (fx, max(0, fy - fh), fw, min(fh, fy))
    hair = dominant_color(rgb_frame, hair_region)

    # Eye color from the irises (refined landmarks only)
    eye = DEFAULT_EYE_RGB
    if len(pts) >= FACE_LANDMARK_COUNT_REFINED:
        left_iris = dominant_color(rgb_frame, region_bounds(pts, LEFT_IRIS_INDICES, width, height))
        right_iris = dominant_color(rgb_frame, region_bounds(pts, RIGHT_IRIS_INDICES, width, height))
        eye = _blend(left_iris, right_iris)

    return FacialColors(
        skin_color=rgb_to_hex(*skin),
        skin_color_name=skin_tone_name(skin),
        hair_color=rgb_to_hex(*hair),
        hair_color_name=hair_color_name(hair),
        eye_color=rgb_to_hex(*eye),
        eye_color_name=eye_color_name(eye),
    )
