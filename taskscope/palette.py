"""Colours and colour palettes for drawing task bars."""

from __future__ import annotations

import math
from dataclasses import dataclass

_U16 = 0xFFFF
_HUE_UNDEFINED = _U16


def _round(x: float) -> int:
    return math.floor(x + 0.5)


@dataclass(frozen=True)
class Color:
    """An 8-bit-per-channel RGBA colour."""

    red: int
    green: int
    blue: int
    alpha: int = 255

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue, self.alpha):
            if not 0 <= channel <= 255:
                raise ValueError(f"colour channel out of range: {channel}")

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse '#RGB', '#RRGGBB' or '#AARRGGBB'."""
        if not text.startswith("#"):
            raise ValueError(f"not a hex colour: {text!r}")
        digits = text[1:]
        if not digits or any(c not in "0123456789abcdefABCDEF" for c in digits):
            raise ValueError(f"not a hex colour: {text!r}")
        if len(digits) == 3:
            r, g, b = (int(c * 2, 16) for c in digits)
            return cls(r, g, b)
        if len(digits) == 6:
            return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
        if len(digits) == 8:
            return cls(
                int(digits[2:4], 16),
                int(digits[4:6], 16),
                int(digits[6:8], 16),
                int(digits[0:2], 16),
            )
        raise ValueError(f"not a hex colour: {text!r}")

    @classmethod
    def from_hsv(cls, hue: int, saturation: int, value: int, alpha: int = 255) -> Color:
        """Build a colour from hue (0-359, or -1 for achromatic) and 0-255 components."""
        if not -1 <= hue <= 359:
            raise ValueError(f"hue out of range: {hue}")
        for part in (saturation, value, alpha):
            if not 0 <= part <= 255:
                raise ValueError(f"HSV component out of range: {part}")
        hue16 = _HUE_UNDEFINED if hue == -1 else hue * 100
        return cls._from_hsv16(hue16, saturation * 0x101, value * 0x101, alpha * 0x101)

    @classmethod
    def _from_hsv16(cls, hue: int, saturation: int, value: int, alpha: int) -> Color:
        v = value / _U16
        if saturation == 0 or hue == _HUE_UNDEFINED:
            r = g = b = v
        else:
            h = 0.0 if hue == 36000 else hue / 6000.0
            s = saturation / _U16
            i = int(h)
            f = h - i
            p = v * (1.0 - s)
            if i & 1:
                q = v * (1.0 - s * f)
                r, g, b = {1: (q, v, p), 3: (p, q, v), 5: (v, p, q)}[i]
            else:
                t = v * (1.0 - s * (1.0 - f))
                r, g, b = {0: (v, t, p), 2: (p, v, t), 4: (t, p, v)}[i]
        return cls(
            _round(r * _U16) >> 8,
            _round(g * _U16) >> 8,
            _round(b * _U16) >> 8,
            alpha >> 8,
        )

    def _to_hsv16(self) -> tuple[int, int, int, int]:
        r = self.red * 0x101 / _U16
        g = self.green * 0x101 / _U16
        b = self.blue * 0x101 / _U16
        high = max(r, g, b)
        delta = high - min(r, g, b)
        value = _round(high * _U16)
        if abs(delta) <= 1e-12:
            return _HUE_UNDEFINED, 0, value, self.alpha * 0x101
        saturation = _round((delta / high) * _U16)
        if r == high:
            hue = (g - b) / delta
        elif g == high:
            hue = 2.0 + (b - r) / delta
        else:
            hue = 4.0 + (r - g) / delta
        hue *= 60.0
        if hue < 0.0:
            hue += 360.0
        return _round(hue * 100), saturation, value, self.alpha * 0x101

    def lighter(self, factor: int = 150) -> Color:
        """Return a lighter colour; factor 100 keeps the brightness, below 100 darkens."""
        factor = int(factor)
        if factor <= 0:
            return self
        if factor < 100:
            return self._darker(10000 // factor)
        hue, saturation, value, alpha = self._to_hsv16()
        value = (factor * value) // 100
        if value > _U16:
            saturation = max(0, saturation - (value - _U16))
            value = _U16
        return Color._from_hsv16(hue, saturation, value, alpha)

    def _darker(self, factor: int) -> Color:
        if factor <= 0:
            return self
        if factor < 100:
            return self.lighter(10000 // factor)
        hue, saturation, value, alpha = self._to_hsv16()
        return Color._from_hsv16(hue, saturation, (value * 100) // factor, alpha)

    def hex(self) -> str:
        """'#RRGGBB', or '#AARRGGBB' when the colour is not opaque."""
        rgb = f"{self.red:02X}{self.green:02X}{self.blue:02X}"
        if self.alpha == 255:
            return f"#{rgb}"
        return f"#{self.alpha:02X}{rgb}"


# A set of 26 colours chosen to be easy to tell apart.
_ALPHABET = (
    "#F0A3FF", "#0075DC", "#993F00", "#4C005C", "#191919",
    "#005C31", "#2BCE48", "#FFCC99", "#808080", "#94FFB5",
    "#8F7C00", "#9DCC00", "#C20088", "#003380", "#FFA405",
    "#FFA8BB", "#426600", "#FF0010", "#5EF1F2", "#00998F",
    "#E0FF66", "#740AFF", "#990000", "#FFFF80", "#FFFF00",
    "#FF5005",
)

# A generated set of 64 distinct colours.
_ALPHABET2 = (
    "#A06787", "#59E240", "#E8A22F", "#64E2DB", "#D14DE0",
    "#3C6E3C", "#547AD9", "#DE412C", "#492518", "#D2DD80",
    "#E44094", "#D37C68", "#C6C0DE", "#315470", "#978E72",
    "#DAE43F", "#903587", "#8C2B1F", "#DD435E", "#50A837",
    "#5BE8B0", "#4E4586", "#D5DBB1", "#5A93CA", "#4C9DA6",
    "#997D22", "#396056", "#9266D9", "#66E47C", "#682452",
    "#E07427", "#28321E", "#8EA23C", "#CE77C3", "#2B253D",
    "#51B26F", "#7A4A1E", "#DDAB9E", "#A9E063", "#AEEAA5",
    "#9FE12D", "#50511E", "#7A5B52", "#9C8CD2", "#E0A85D",
    "#983948", "#52937A", "#E17C98", "#9D9B9F", "#D846BA",
    "#C6DED7", "#76C6E3", "#D5BF38", "#7FCAA9", "#83A86E",
    "#D9C284", "#E0A9D3", "#9B844C", "#B5376F", "#BB6232",
    "#47721E", "#511827", "#5E445D", "#72788B",
)

_GOLDEN_RATIO = 0.618033988749895


def color_alphabet() -> list[Color]:
    """The 26-colour distinguishable alphabet."""
    return [Color.from_hex(text) for text in _ALPHABET]


def color_alphabet2() -> list[Color]:
    """The 64-colour generated palette."""
    return [Color.from_hex(text) for text in _ALPHABET2]


def golden_ratio_colors(count: int) -> list[Color]:
    """Return count + 1 colours spread by the golden ratio around the hue circle."""
    if count < 0:
        raise ValueError(f"colour count must not be negative: {count}")
    total = count + 1
    return [
        Color.from_hsv(int(math.floor(_GOLDEN_RATIO * 360 / total * i * 6)) % 128, 245, 230, 255)
        for i in range(total)
    ]