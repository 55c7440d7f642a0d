"""Color parsing/formatting shared by the token builder, matcher and CSS renderers."""

import math
import re
from typing import Optional

_HEX = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGB = re.compile(r"^rgba?\(\s*([^)]*)\)$", re.IGNORECASE)
_HSL = re.compile(r"^hsla?\(", re.IGNORECASE)

MAX_RGB_DISTANCE = math.sqrt(3 * 255 ** 2)


def _channel(value: float) -> int:
    return max(0, min(255, round(value * 255)))


def _alpha(value: float) -> str:
    return f"{round(value, 3):g}"


def is_figma_color(value) -> bool:
    return isinstance(value, dict) and all(k in value for k in ("r", "g", "b"))


def rgba_string(color: dict, opacity: float = 1) -> str:
    """Figma {r,g,b,a} (0..1) → 'rgba(51, 102, 255, 1)'."""
    a = color.get("a", 1) * (opacity if opacity is not None else 1)
    return (f"rgba({_channel(color.get('r', 0))}, {_channel(color.get('g', 0))}, "
            f"{_channel(color.get('b', 0))}, {_alpha(a)})")


def hex_string(color: dict) -> str:
    """Hex when fully opaque, rgba otherwise."""
    if color.get("a", 1) < 1:
        return rgba_string(color)
    return "#" + "".join(f"{_channel(color.get(k, 0)):02X}" for k in ("r", "g", "b"))


def looks_like_color(value) -> bool:
    if is_figma_color(value):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip()
    return bool(_HEX.match(text) or _RGB.match(text) or _HSL.match(text))


def parse_color(value) -> Optional[tuple]:
    """Parse hex / rgb() / rgba() / Figma dict → (r, g, b, a) on a 0-255 scale."""
    if is_figma_color(value):
        return (_channel(value["r"]), _channel(value["g"]), _channel(value["b"]), value.get("a", 1))
    if not isinstance(value, str):
        return None
    text = value.strip()
    m = _HEX.match(text)
    if m:
        digits = m.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        a = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1
        return (r, g, b, a)
    m = _RGB.match(text)
    if m:
        parts = [p.strip() for p in re.split(r"[,\s/]+", m.group(1)) if p.strip()]
        if len(parts) < 3:
            return None
        try:
            r, g, b = (float(p.rstrip("%")) * (2.55 if p.endswith("%") else 1) for p in parts[:3])
            a = float(parts[3].rstrip("%")) / (100 if parts[3].endswith("%") else 1) if len(parts) > 3 else 1
        except ValueError:
            return None
        return (r, g, b, a)
    return None


def rgb_distance(a: tuple, b: tuple) -> float:
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a[:3], b[:3])))
