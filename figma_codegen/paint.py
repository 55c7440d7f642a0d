"""
IRS paint / blend / effect → CSS.

Unsupported Figma features degrade to documented approximations:
  - diamond gradients render as a 45deg linear gradient
  - nested gradients are flattened into 11 blended stops
  - LINEAR_BURN / LINEAR_DODGE map to the closest blend mode plus a filter
"""

import math
from typing import Optional

from .colors import rgba_string
from .templating import format_number, px

BLEND_MODES = {
    "NORMAL": "normal",
    "PASS_THROUGH": "normal",
    "MULTIPLY": "multiply",
    "SCREEN": "screen",
    "OVERLAY": "overlay",
    "DARKEN": "darken",
    "LIGHTEN": "lighten",
    "COLOR_DODGE": "color-dodge",
    "COLOR_BURN": "color-burn",
    "HARD_LIGHT": "hard-light",
    "SOFT_LIGHT": "soft-light",
    "DIFFERENCE": "difference",
    "EXCLUSION": "exclusion",
    "HUE": "hue",
    "SATURATION": "saturation",
    "COLOR": "color",
    "LUMINOSITY": "luminosity",
}

# (mix-blend-mode, filter) approximations
_BLEND_WORKAROUNDS = {
    "LINEAR_BURN": ("multiply", "brightness(0.8) contrast(1.2)"),
    "LINEAR_DODGE": ("screen", "brightness(1.2) contrast(0.8)"),
}

_IMAGE_SIZE = {"FILL": "cover", "FIT": "contain", "CROP": "cover", "TILE": "auto"}

_NESTED_STEPS = 10


def requires_isolation(blend_mode: Optional[str]) -> bool:
    return bool(blend_mode) and blend_mode not in ("NORMAL", "PASS_THROUGH") \
        and (blend_mode in BLEND_MODES or blend_mode in _BLEND_WORKAROUNDS)


def blend_mode_css(blend_mode: Optional[str]) -> list[tuple[str, str]]:
    if not blend_mode or blend_mode in ("NORMAL", "PASS_THROUGH"):
        return []
    if blend_mode in BLEND_MODES:
        return [("mix-blend-mode", BLEND_MODES[blend_mode])]
    if blend_mode in _BLEND_WORKAROUNDS:
        mode, css_filter = _BLEND_WORKAROUNDS[blend_mode]
        return [("mix-blend-mode", mode), ("filter", css_filter)]
    return []


# ─── Gradients ───

def _stop_list(stops: list[dict], opacity: float) -> str:
    parts = []
    for stop in stops:
        position = format_number(stop.get("position", 0) * 100)
        parts.append(f"{rgba_string(stop.get('color', {}), opacity)} {position}%")
    return ", ".join(parts)


def gradient_angle(paint: dict) -> float:
    """Linear angle in CSS degrees from the transform or handle positions."""
    transform = paint.get("gradientTransform")
    if transform and len(transform) >= 1 and len(transform[0]) >= 2:
        a, b = transform[0][0], transform[0][1]
        angle = math.degrees(math.atan2(b, a)) + 90
    else:
        handles = paint.get("gradientHandlePositions")
        if not handles or len(handles) < 2:
            return 180.0
        start, end = handles[0], handles[1]
        angle = math.degrees(math.atan2(end.get("y", 0) - start.get("y", 0),
                                        end.get("x", 0) - start.get("x", 0))) + 90
    return round(angle % 360, 2)


def _center(paint: dict) -> str:
    handles = paint.get("gradientHandlePositions")
    if handles:
        start = handles[0]
        return f"{format_number(start.get('x', 0.5) * 100)}% {format_number(start.get('y', 0.5) * 100)}%"
    return "50% 50%"


def gradient_to_css(paint: dict, bbox: Optional[dict] = None) -> str:
    stops = _stop_list(paint.get("gradientStops") or [], paint.get("opacity", 1))
    kind = paint.get("gradientType", "linear")
    if kind == "radial":
        shape = "ellipse"
        if bbox and bbox.get("width") == bbox.get("height"):
            shape = "circle"
        return f"radial-gradient({shape} at {_center(paint)}, {stops})"
    if kind == "angular":
        return f"conic-gradient(from {format_number(gradient_angle(paint))}deg at {_center(paint)}, {stops})"
    if kind == "diamond":
        return f"linear-gradient(45deg, {stops})"
    return f"linear-gradient({format_number(gradient_angle(paint))}deg, {stops})"


def _color_at(stops: list[dict], t: float) -> dict:
    """Linear interpolation of a stop list at position t."""
    if not stops:
        return {"r": 0, "g": 0, "b": 0, "a": 0}
    ordered = sorted(stops, key=lambda s: s.get("position", 0))
    if t <= ordered[0].get("position", 0):
        return ordered[0]["color"]
    for left, right in zip(ordered, ordered[1:]):
        lp, rp = left.get("position", 0), right.get("position", 0)
        if lp <= t <= rp:
            f = 0 if rp == lp else (t - lp) / (rp - lp)
            return {k: left["color"].get(k, 1 if k == "a" else 0) * (1 - f) + right["color"].get(k, 1 if k == "a" else 0) * f
                    for k in ("r", "g", "b", "a")}
    return ordered[-1]["color"]


def nested_gradient_to_css(paint: dict, bbox: Optional[dict] = None) -> str:
    """Flatten a gradient nested inside a parent gradient into blended stops."""
    parent = paint.get("parentGradient")
    if not parent or parent.get("type") != "gradient":
        return gradient_to_css(paint, bbox)
    blended = []
    for i in range(_NESTED_STEPS + 1):
        t = i / _NESTED_STEPS
        outer = _color_at(parent.get("gradientStops") or [], t)
        inner = _color_at(paint.get("gradientStops") or [], t)
        color = {k: outer.get(k, 1 if k == "a" else 0) * (1 - t) + inner.get(k, 1 if k == "a" else 0) * t
                 for k in ("r", "g", "b", "a")}
        blended.append({"position": t, "color": color})
    return gradient_to_css({**paint, "gradientStops": blended}, bbox)


# ─── Fills ───

def _layer(paint: dict, bbox: Optional[dict], last: bool) -> Optional[str]:
    paint_type = paint.get("type")
    if paint_type == "solid":
        color = rgba_string(paint.get("color", {}), paint.get("opacity", 1))
        # only the bottom background layer may be a bare color
        return color if last else f"linear-gradient({color}, {color})"
    if paint_type == "gradient":
        return nested_gradient_to_css(paint, bbox)
    if paint_type == "image" and paint.get("imageUrl"):
        size = _IMAGE_SIZE.get(paint.get("scaleMode", "FILL"), "cover")
        repeat = "repeat" if paint.get("scaleMode") == "TILE" else "no-repeat"
        return f'url("{paint["imageUrl"]}") center / {size} {repeat}'
    return None


def fills_to_css(fills: list[dict], bbox: Optional[dict] = None) -> list[tuple[str, str]]:
    paints = [f for f in fills or [] if f.get("type") in ("solid", "gradient", "image")]
    if not paints:
        return []
    if len(paints) == 1:
        paint = paints[0]
        if paint["type"] == "solid":
            return [("background-color", rgba_string(paint.get("color", {}), paint.get("opacity", 1)))]
        if paint["type"] == "gradient":
            return [("background", nested_gradient_to_css(paint, bbox))]
        layer = _layer(paint, bbox, last=True)
        return [("background", layer)] if layer else []

    # Figma lists paints bottom → top; CSS lists layers top → bottom
    ordered = list(reversed(paints))
    layers = [_layer(p, bbox, last=(i == len(ordered) - 1)) for i, p in enumerate(ordered)]
    layers = [layer for layer in layers if layer]
    return [("background", ", ".join(layers))] if layers else []


def background_value(fills: list[dict], bbox: Optional[dict] = None) -> Optional[str]:
    """Single ``background`` value for inline styles."""
    declarations = fills_to_css(fills, bbox)
    return declarations[0][1] if declarations else None


# ─── Effects / strokes ───

def effects_to_css(effects: list[dict]) -> list[tuple[str, str]]:
    shadows, filters, backdrop = [], [], []
    for effect in effects or []:
        if not effect.get("visible", True):
            continue
        kind = effect.get("type")
        if kind in ("drop-shadow", "inner-shadow"):
            offset = effect.get("offset") or {}
            shadow = (f"{px(offset.get('x', 0))} {px(offset.get('y', 0))} {px(effect.get('radius', 0))} "
                      f"{px(effect.get('spread', 0) or 0)} {rgba_string(effect.get('color') or {})}")
            shadows.append(("inset " if kind == "inner-shadow" else "") + shadow)
        elif kind == "layer-blur":
            filters.append(f"blur({px(effect.get('radius', 0))})")
        elif kind == "background-blur":
            backdrop.append(f"blur({px(effect.get('radius', 0))})")
    out = []
    if shadows:
        out.append(("box-shadow", ", ".join(shadows)))
    if filters:
        out.append(("filter", " ".join(filters)))
    if backdrop:
        out.append(("backdrop-filter", " ".join(backdrop)))
    return out


def strokes_to_css(strokes: list[dict], strategy: str = "outline") -> list[tuple[str, str]]:
    solid = [s for s in strokes or [] if s.get("type") == "solid"]
    if not solid:
        return []
    stroke = solid[0]
    color = rgba_string(stroke.get("color") or {})
    width = px(stroke.get("width", 1))
    if stroke.get("position") == "outside" or strategy == "outline":
        return [("outline", f"{width} solid {color}"), ("outline-offset", "0")]
    return [("box-shadow", f"inset 0 0 0 {width} {color}")]


def radius_css(node: dict) -> list[tuple[str, str]]:
    radii = node.get("rectangleCornerRadii")
    if radii and len(set(radii)) > 1:
        return [("border-radius", " ".join(px(r) for r in radii))]
    radius = node.get("cornerRadius")
    if radius is None and radii:
        radius = radii[0]
    if radius:
        return [("border-radius", px(radius))]
    return []
