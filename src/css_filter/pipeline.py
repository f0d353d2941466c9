# pipeline.py – forward model of the CSS filter chain applied to black
#   invert → sepia → saturate → hue-rotate → brightness → contrast
#   every stage clamps to [0, 255] before the next one sees the colour

from __future__ import annotations

import math
from enum import IntEnum
from typing import NamedTuple, Sequence

import numpy as np

from .color import RGB


class Param(IntEnum):
    INVERT = 0
    SEPIA = 1
    SATURATE = 2
    HUE_ROTATE = 3
    BRIGHTNESS = 4
    CONTRAST = 5


class FilterParams(NamedTuple):
    """Filter amounts in CSS percent; hue_rotate in 0–100 units (×3.6 → deg)."""

    invert: float
    sepia: float
    saturate: float
    hue_rotate: float
    brightness: float
    contrast: float

    @classmethod
    def from_array(cls, values: Sequence[float]) -> "FilterParams":
        if len(values) != len(Param):
            raise ValueError(f"expected {len(Param)} filter values, got {len(values)}")
        return cls(*(float(v) for v in values))


PARAM_MAX = np.array([100.0, 100.0, 7500.0, 100.0, 200.0, 200.0])
HUE_UNITS_TO_DEG = 3.6

# --- constants ---------------------------------------------------------------
_BLACK = np.zeros(3)
_IDENTITY = np.eye(3)
_SEPIA = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ]
)
# luma weights shared by saturate and hue-rotate (W3C Filter Effects)
_LUMA = np.tile([0.213, 0.715, 0.072], (3, 1))
_SAT_DELTA = _IDENTITY - _LUMA
_HUE_COS = np.array(
    [
        [0.787, -0.715, -0.072],
        [-0.213, 0.285, -0.072],
        [-0.213, -0.715, 0.928],
    ]
)
_HUE_SIN = np.array(
    [
        [-0.213, -0.715, 0.928],
        [0.143, 0.140, -0.283],
        [-0.787, 0.715, 0.072],
    ]
)


def _clamp(rgb: np.ndarray) -> np.ndarray:
    return np.clip(rgb, 0.0, 255.0)


def _multiply(rgb: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return _clamp(matrix @ rgb)


def _linear(rgb: np.ndarray, slope: float, intercept: float) -> np.ndarray:
    return _clamp(rgb * slope + intercept * 255.0)


# --- filter stages (amounts already normalised) ------------------------------
def invert(rgb: np.ndarray, amount: float) -> np.ndarray:
    return _clamp((amount + rgb / 255.0 * (1.0 - 2.0 * amount)) * 255.0)


def sepia(rgb: np.ndarray, amount: float) -> np.ndarray:
    # (1 - amount) of the way back towards identity
    return _multiply(rgb, _SEPIA + (_IDENTITY - _SEPIA) * (1.0 - amount))


def saturate(rgb: np.ndarray, amount: float) -> np.ndarray:
    return _multiply(rgb, _LUMA + _SAT_DELTA * amount)


def hue_rotate(rgb: np.ndarray, degrees: float) -> np.ndarray:
    rad = math.radians(degrees)
    return _multiply(rgb, _LUMA + _HUE_COS * math.cos(rad) + _HUE_SIN * math.sin(rad))


def brightness(rgb: np.ndarray, amount: float) -> np.ndarray:
    return _linear(rgb, amount, 0.0)


def contrast(rgb: np.ndarray, amount: float) -> np.ndarray:
    return _linear(rgb, amount, -(0.5 * amount) + 0.5)


def render(values: Sequence[float]) -> np.ndarray:
    """Run the filter chain over black; returns float64 RGB in [0, 255]."""
    rgb = _BLACK
    rgb = invert(rgb, values[Param.INVERT] / 100)
    rgb = sepia(rgb, values[Param.SEPIA] / 100)
    rgb = saturate(rgb, values[Param.SATURATE] / 100)
    rgb = hue_rotate(rgb, values[Param.HUE_ROTATE] * HUE_UNITS_TO_DEG)
    rgb = brightness(rgb, values[Param.BRIGHTNESS] / 100)
    rgb = contrast(rgb, values[Param.CONTRAST] / 100)
    return rgb


def apply_filters(values: Sequence[float]) -> RGB:
    r, g, b = render(values)
    return RGB(float(r), float(g), float(b))


# --- range fixing ------------------------------------------------------------
def fix_value(value: float, position: int) -> float:
    """Clamp one amount to [0, max]; hue-rotate wraps instead of clamping."""
    mx = float(PARAM_MAX[position])
    if position == Param.HUE_ROTATE:
        if value > mx:
            return math.fmod(value, mx)
        if value < 0:
            return mx + math.fmod(value, mx)
    return min(mx, max(0.0, value))


def fix_values(values: np.ndarray) -> np.ndarray:
    """Vectorised fix_value over a whole parameter vector."""
    out = np.clip(values, 0.0, PARAM_MAX)
    h = values[Param.HUE_ROTATE]
    mx = PARAM_MAX[Param.HUE_ROTATE]
    if h > mx:
        out[Param.HUE_ROTATE] = np.fmod(h, mx)
    elif h < 0:
        out[Param.HUE_ROTATE] = mx + np.fmod(h, mx)
    return out


__all__ = [
    "Param",
    "FilterParams",
    "PARAM_MAX",
    "HUE_UNITS_TO_DEG",
    "invert",
    "sepia",
    "saturate",
    "hue_rotate",
    "brightness",
    "contrast",
    "render",
    "apply_filters",
    "fix_value",
    "fix_values",
]
