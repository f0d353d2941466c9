"""RGB / HSL helpers and the colour-string front door.

Hue, saturation and lightness are all reported on a 0–100 scale so the
loss function can sum them directly with the RGB channel deltas.
"""

from __future__ import annotations

import re
import string
from typing import Any, Mapping, NamedTuple, Sequence, Union


class RGB(NamedTuple):
    r: float
    g: float
    b: float


class HSL(NamedTuple):
    h: float
    s: float
    l: float


ColorInput = Union[str, RGB, Sequence[float], Mapping[str, float]]


class InvalidColorFormat(ValueError):
    """Raised when a colour string is neither hex nor rgb(r, g, b)."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f'Invalid color format: "{value}". Expected hex (#ff5733) '
            "or RGB (rgb(255, 87, 51), or 255, 87, 51)"
        )


def clamp(value: float) -> float:
    return min(255, max(0, value))


def clamp_rgb(rgb: RGB | Sequence[float] | Mapping[str, float]) -> RGB:
    if isinstance(rgb, Mapping):
        return RGB(clamp(rgb["r"]), clamp(rgb["g"]), clamp(rgb["b"]))
    r, g, b = rgb
    return RGB(clamp(r), clamp(g), clamp(b))


def rgb_to_hsl(rgb: Sequence[float]) -> HSL:
    r, g, b = (float(c) / 255.0 for c in rgb)
    mx = max(r, g, b)
    mn = min(r, g, b)
    h = s = 0.0
    l = (mx + mn) / 2

    if mx != mn:
        d = mx - mn
        s = d / (2 - mx - mn) if l > 0.5 else d / (mx + mn)
        if mx == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif mx == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h /= 6

    return HSL(h * 100, s * 100, l * 100)


# --- parsing -----------------------------------------------------------------

_RGB_FUNC = re.compile(r"rgb\s*\(\s*([0-9]+)\s*,\s*([0-9]+)\s*,\s*([0-9]+)\s*\)", re.I)
_RGB_BARE = re.compile(r"^\s*([0-9]+)\s*,\s*([0-9]+)\s*,\s*([0-9]+)\s*$")


def hex_to_rgb(s: str) -> RGB | None:
    """'#f53', 'ff5733', '#AaBbCc' → RGB; anything else → None."""
    raw = s[1:] if s.startswith("#") else s
    if not raw or not all(c in string.hexdigits for c in raw):
        return None
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    if len(raw) != 6:
        return None
    r, g, b = (int(raw[i : i + 2], 16) for i in (0, 2, 4))
    return RGB(r, g, b)


def parse_rgb(s: str) -> RGB | None:
    """'rgb(255, 87, 51)' or '255,87,51' → RGB, channels above 255 clamped."""
    m = _RGB_FUNC.search(s) or _RGB_BARE.match(s)
    if not m:
        return None
    return RGB(*(clamp(int(v, 10)) for v in m.groups()))


def parse_color(color: ColorInput) -> RGB:
    if isinstance(color, str):
        rgb = hex_to_rgb(color) or parse_rgb(color)
        if rgb is None:
            raise InvalidColorFormat(color)
        return rgb
    return clamp_rgb(color)


__all__ = [
    "RGB",
    "HSL",
    "ColorInput",
    "InvalidColorFormat",
    "clamp",
    "clamp_rgb",
    "rgb_to_hsl",
    "hex_to_rgb",
    "parse_rgb",
    "parse_color",
]
