"""Vector geometry and text-on-path → inline SVG markup."""

from typing import Optional

from .colors import rgba_string
from .paint import gradient_angle
from .templating import format_number, kebab_case, xml_escape

VECTOR_TYPES = ("VECTOR", "BOOLEAN_OPERATION", "STAR", "POLYGON")


def is_vector_graphic(node: dict) -> bool:
    return node.get("type") in VECTOR_TYPES


def has_text_path(node: dict) -> bool:
    return node.get("type") == "TEXT" and bool((node.get("textPath") or {}).get("data"))


def _svg_id(node: dict, suffix: str) -> str:
    return f"{kebab_case(str(node.get('id') or node.get('name') or 'node'))}-{suffix}"


def _size(node: dict) -> tuple[str, str]:
    bbox = node.get("boundingBox") or {}
    return format_number(bbox.get("width", 24) or 24), format_number(bbox.get("height", 24) or 24)


def _gradient_def(paint: dict, gradient_id: str) -> str:
    stops = "".join(
        f'<stop offset="{format_number(stop.get("position", 0) * 100)}%" '
        f'stop-color="{rgba_string(stop.get("color") or {}, paint.get("opacity", 1))}"/>'
        for stop in paint.get("gradientStops") or []
    )
    if paint.get("gradientType") in ("radial", "diamond"):
        return f'<radialGradient id="{gradient_id}">{stops}</radialGradient>'
    angle = gradient_angle(paint)
    return (f'<linearGradient id="{gradient_id}" gradientTransform="rotate({format_number(angle - 90)} .5 .5)">'
            f"{stops}</linearGradient>")


def vector_to_svg(node: dict) -> str:
    """Vector / boolean-op / star / polygon node → standalone SVG string."""
    width, height = _size(node)
    defs = []
    fill = "none"
    for index, paint in enumerate(node.get("fills") or []):
        if paint.get("type") == "solid":
            fill = rgba_string(paint.get("color") or {}, paint.get("opacity", 1))
            break
        if paint.get("type") == "gradient":
            gradient_id = _svg_id(node, f"gradient-{index}")
            defs.append(_gradient_def(paint, gradient_id))
            fill = f"url(#{gradient_id})"
            break

    stroke_attrs = ""
    for stroke in node.get("strokes") or []:
        if stroke.get("type") == "solid":
            stroke_attrs = (f' stroke="{rgba_string(stroke.get("color") or {})}"'
                            f' stroke-width="{format_number(stroke.get("width", 1))}"')
            break

    paths = []
    for path in node.get("vectorPaths") or []:
        rule = ' fill-rule="evenodd"' if str(path.get("windingRule", "")).upper() == "EVENODD" else ""
        paths.append(f'<path d="{xml_escape(path.get("data", ""))}" fill="{fill}"{rule}{stroke_attrs}/>')

    parts = [f'<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}" '
             f'fill="none" xmlns="http://www.w3.org/2000/svg">']
    if defs:
        parts.append("<defs>" + "".join(defs) + "</defs>")
    parts.extend(paths)
    parts.append("</svg>")
    return "".join(parts)


def text_path_svg(node: dict) -> Optional[str]:
    """TEXT node with curve data → SVG with <textPath>; None when no curve data."""
    if not has_text_path(node):
        return None
    width, height = _size(node)
    path_id = _svg_id(node, "text-path")
    typography = node.get("typography") or {}
    fill = "currentColor"
    for paint in node.get("fills") or []:
        if paint.get("type") == "solid":
            fill = rgba_string(paint.get("color") or {}, paint.get("opacity", 1))
            break
    text_attrs = (f' font-family="{xml_escape(typography.get("fontFamily", "Inter"))}"'
                  f' font-size="{format_number(typography.get("fontSize", 16))}"'
                  f' font-weight="{format_number(typography.get("fontWeight", 400))}"'
                  f' fill="{fill}"')
    return (f'<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}" '
            f'xmlns="http://www.w3.org/2000/svg">'
            f'<defs><path id="{path_id}" d="{xml_escape(node["textPath"]["data"])}"/></defs>'
            f'<text{text_attrs}><textPath href="#{path_id}">{xml_escape(node.get("characters", ""))}</textPath></text>'
            f"</svg>")
