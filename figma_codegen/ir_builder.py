"""
ir_builder.py — Raw Figma node tree → Structural IR (IRS)

Captures per node:
  ✅ Auto layout → flex descriptor (axis, alignment, gap, padding)
  ✅ Fills → solid / gradient (transform + nested parent) / image paints
  ✅ Strokes → solid paint with width + position
  ✅ Effects → drop/inner shadow, layer/background blur
  ✅ TEXT style → typography descriptor
  ✅ Vector geometry / text-on-path data for the renderers
  ✅ Bound variables → property → variable id
  ✅ Name → roleHint, slot name, z-order index

Document level: variant matrix, slot definitions, layout intent, CSS hint
flags and the variant → semantic state mapping.
"""

import json
import logging
import os
import re
from datetime import datetime, timezone
from typing import Optional

from .tree import count_nodes, walk

logger = logging.getLogger(__name__)

IRS_VERSION = "1.0.0"

_JUSTIFY = {
    "MIN": "flex-start",
    "CENTER": "center",
    "MAX": "flex-end",
    "SPACE_BETWEEN": "space-between",
    "SPACE_AROUND": "space-around",
}
_ALIGN = {
    "MIN": "flex-start",
    "CENTER": "center",
    "MAX": "flex-end",
    "STRETCH": "stretch",
    "BASELINE": "baseline",
}
_GRADIENT_TYPES = {
    "GRADIENT_LINEAR": "linear",
    "GRADIENT_RADIAL": "radial",
    "GRADIENT_ANGULAR": "angular",
    "GRADIENT_DIAMOND": "diamond",
}
_EFFECT_TYPES = {
    "DROP_SHADOW": "drop-shadow",
    "INNER_SHADOW": "inner-shadow",
    "LAYER_BLUR": "layer-blur",
    "BACKGROUND_BLUR": "background-blur",
}
_SIZING_INTENT = {"FIXED": "fixed", "FILL": "fluid"}
_NEUTRAL_BLEND_MODES = {"NORMAL", "PASS_THROUGH"}

# (substring, slot base name, slot type); first hit wins
_SLOT_VOCABULARY = (
    ("label", "label", "text"),
    ("icon", "icon", "icon"),
    ("content", "content", "content"),
    ("action", "action", "action"),
    ("prefix", "prefix", "prefix"),
    ("suffix", "suffix", "suffix"),
    ("helper", "helperText", "text"),
    ("error", "errorText", "text"),
)
_POSITION_HINT = re.compile(r"left|right|top|bottom|start|end|before|after")

# Non-default states are checked first so "Size=Default, State=Hover" is a hover variant.
_STATE_RULES = (
    (("disabled", "disable"), "disabled"),
    (("pressed", "active"), "pressed"),
    (("focus",), "focus"),
    (("hover",), "hover"),
    (("default", "normal"), "default"),
)


def infer_role_hint(name: str) -> Optional[str]:
    lower = (name or "").lower()
    if "button" in lower or "btn" in lower:
        return "button-root"
    if "icon" in lower:
        if "left" in lower:
            return "icon-left"
        if "right" in lower:
            return "icon-right"
        return "icon"
    if "label" in lower or "text" in lower:
        return "label"
    if "dialog" in lower or "modal" in lower or "overlay" in lower:
        return "dialog-overlay"
    if "input" in lower or "field" in lower:
        return "input-root"
    return None


def bucket_state(text: str) -> str:
    """Variant name (plus property values) → default/hover/pressed/focus/disabled/custom."""
    lower = (text or "").lower()
    for needles, state in _STATE_RULES:
        if any(n in lower for n in needles):
            return state
    return "custom"


def parse_variant_name(name: str) -> dict:
    """'State=Hover, Size=Large' → {'State': 'Hover', 'Size': 'Large'}."""
    props = {}
    for part in (name or "").split(","):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        if key.strip():
            props[key.strip()] = value.strip()
    return props


def _variant_properties(raw: dict) -> dict:
    props = raw.get("variantProperties")
    if isinstance(props, dict):
        return {str(k): str(v) for k, v in props.items()}
    return {}


def extract_variants(raw_root: dict) -> list[dict]:
    if raw_root.get("type") == "COMPONENT_SET":
        variants = []
        for child in raw_root.get("children") or []:
            if not isinstance(child, dict):
                continue
            # REST payloads only carry the variant in the layer name
            props = _variant_properties(child) or parse_variant_name(child.get("name", ""))
            if props:
                variants.append({
                    "name": child.get("name", ""),
                    "properties": props,
                    "nodeId": child.get("id", ""),
                })
        return variants
    props = _variant_properties(raw_root)
    if props:
        return [{
            "name": raw_root.get("name", ""),
            "properties": props,
            "nodeId": raw_root.get("id", ""),
        }]
    return []


def build_state_mapping(variants: list[dict]) -> list[dict]:
    mapping = []
    for variant in variants:
        text = " ".join([variant["name"], *variant["properties"].values()])
        mapping.append({"figmaVariant": variant["name"], "semanticState": bucket_state(text)})
    return mapping


class StructuralIRBuilder:

    def __init__(self, extracted_at: Optional[str] = None):
        self.extracted_at = extracted_at
        self.slots: list[dict] = []
        self._slot_names: set[str] = set()
        self._visited: set[int] = set()

    def build(self, raw_root: dict, figma_url: str = "", file_key: str = "") -> dict:
        self.slots = []
        self._slot_names = set()
        self._visited = set()

        tree = self._convert_tree(raw_root or {})
        variants = extract_variants(raw_root or {})

        return {
            "version": IRS_VERSION,
            "meta": {
                "name": (raw_root or {}).get("name") or "Unnamed",
                "figmaUrl": figma_url,
                "nodeId": (raw_root or {}).get("id", ""),
                "type": (raw_root or {}).get("type", "FRAME"),
                "componentType": self._component_type(raw_root or {}),
                "extractedAt": self.extracted_at or datetime.now(timezone.utc).isoformat(),
                "sourceFileKey": file_key,
            },
            "tree": tree,
            "variants": variants,
            "slots": self.slots,
            "layoutIntent": self._layout_intent(raw_root or {}),
            "visualHints": self._visual_hints(tree),
            "stateMapping": build_state_mapping(variants),
            "stats": {"nodeCount": count_nodes(tree)},
        }

    @staticmethod
    def _component_type(raw: dict) -> str:
        node_type = raw.get("type")
        if node_type == "COMPONENT_SET":
            return "component-set"
        if node_type == "COMPONENT":
            return "component"
        return "frame"

    # ════════════════════════════════════════════════════════════
    # Node Conversion
    # ════════════════════════════════════════════════════════════

    def _convert_tree(self, raw_root: dict) -> Optional[dict]:
        # 明確的 stack，維持 pre-order，slot 命名順序不變
        roots: list[dict] = []
        stack = [(raw_root, 0, roots)]
        while stack:
            raw, z_index, siblings = stack.pop()
            node = self._convert_node(raw, z_index)
            if node is None:
                continue
            siblings.append(node)
            raw_children = raw.get("children") or []
            for index in range(len(raw_children) - 1, -1, -1):
                stack.append((raw_children[index], index, node["children"]))
        return roots[0] if roots else None

    def _convert_node(self, raw: dict, z_index: int) -> Optional[dict]:
        """Single node → IRS node with an empty ``children`` list."""
        if not isinstance(raw, dict) or id(raw) in self._visited:
            return None
        self._visited.add(id(raw))

        name = raw.get("name") or ""
        node_type = raw.get("type") or "FRAME"
        node: dict = {
            "id": raw.get("id", ""),
            "name": name,
            "type": node_type,
            "zIndex": z_index,
        }

        role = infer_role_hint(name)
        if role:
            node["roleHint"] = role

        bbox = raw.get("absoluteBoundingBox")
        if isinstance(bbox, dict):
            node["boundingBox"] = {
                "x": bbox.get("x", 0),
                "y": bbox.get("y", 0),
                "width": bbox.get("width", 0),
                "height": bbox.get("height", 0),
            }

        layout = self._build_layout(raw)
        if layout:
            node["layout"] = layout

        fills = [self._build_paint(p) for p in raw.get("fills") or [] if self._paint_visible(p)]
        if fills:
            node["fills"] = fills
        strokes = [self._build_stroke(p, raw) for p in raw.get("strokes") or [] if self._paint_visible(p)]
        if strokes:
            node["strokes"] = strokes
        effects = [self._build_effect(e) for e in raw.get("effects") or [] if isinstance(e, dict)]
        if effects:
            node["effects"] = effects

        if node_type == "TEXT":
            node["typography"] = self._build_typography(raw.get("style") or {})
            if raw.get("characters") is not None:
                node["characters"] = str(raw["characters"])
            text_path = raw.get("textPath")
            if isinstance(text_path, dict) and text_path.get("data"):
                node["textPath"] = {"data": text_path["data"]}

        constraints = raw.get("constraints")
        if isinstance(constraints, dict):
            node["constraints"] = {
                "horizontal": str(constraints.get("horizontal", "")).lower(),
                "vertical": str(constraints.get("vertical", "")).lower(),
            }
        if raw.get("blendMode"):
            node["blendMode"] = raw["blendMode"]
        if raw.get("opacity") is not None:
            node["opacity"] = raw["opacity"]
        if isinstance(raw.get("cornerRadius"), (int, float)):
            node["cornerRadius"] = raw["cornerRadius"]
        radii = raw.get("rectangleCornerRadii")
        if isinstance(radii, list) and len(radii) == 4:
            node["rectangleCornerRadii"] = list(radii)

        vector_paths = self._vector_paths(raw)
        if vector_paths:
            node["vectorPaths"] = vector_paths
        bound = self._bound_variables(raw)
        if bound:
            node["boundVariables"] = bound
        props = _variant_properties(raw)
        if props:
            node["variantProperties"] = props

        slot = self._assign_slot(name, node["id"])
        if slot:
            node["slotName"] = slot

        node["children"] = []
        return node

    @staticmethod
    def _paint_visible(paint) -> bool:
        return isinstance(paint, dict) and paint.get("visible", True) is not False

    def _build_layout(self, raw: dict) -> Optional[dict]:
        mode = raw.get("layoutMode")
        if mode not in ("HORIZONTAL", "VERTICAL"):
            return None
        layout = {
            "display": "flex",
            "flexDirection": "row" if mode == "HORIZONTAL" else "column",
            "justifyContent": _JUSTIFY.get(raw.get("primaryAxisAlignItems", "MIN"), "flex-start"),
            "alignItems": _ALIGN.get(raw.get("counterAxisAlignItems", "MIN"), "flex-start"),
            "gap": raw.get("itemSpacing", 0) or 0,
            "padding": {
                "top": raw.get("paddingTop", 0) or 0,
                "right": raw.get("paddingRight", 0) or 0,
                "bottom": raw.get("paddingBottom", 0) or 0,
                "left": raw.get("paddingLeft", 0) or 0,
            },
        }
        if raw.get("layoutWrap") == "WRAP":
            layout["flexWrap"] = "wrap"
        return layout

    # ─── Paint ───

    @staticmethod
    def _color(color: Optional[dict]) -> dict:
        color = color or {}
        return {
            "r": color.get("r", 0),
            "g": color.get("g", 0),
            "b": color.get("b", 0),
            "a": color.get("a", 1),
        }

    def _build_paint(self, paint: dict) -> dict:
        paint_type = paint.get("type")
        opacity = paint.get("opacity", 1)
        if paint_type == "SOLID":
            return {"type": "solid", "color": self._color(paint.get("color")), "opacity": opacity}
        if paint_type in _GRADIENT_TYPES:
            gradient = {
                "type": "gradient",
                "gradientType": _GRADIENT_TYPES[paint_type],
                "gradientStops": [
                    {"position": stop.get("position", 0), "color": self._color(stop.get("color"))}
                    for stop in paint.get("gradientStops") or []
                ],
                "opacity": opacity,
            }
            if paint.get("gradientTransform"):
                gradient["gradientTransform"] = paint["gradientTransform"]
            if paint.get("gradientHandlePositions"):
                gradient["gradientHandlePositions"] = paint["gradientHandlePositions"]
            if isinstance(paint.get("parentGradient"), dict):
                gradient["parentGradient"] = self._build_paint(paint["parentGradient"])
            return gradient
        if paint_type == "IMAGE":
            image = {
                "type": "image",
                "imageUrl": paint.get("imageRef") or paint.get("imageHash") or "",
                "scaleMode": paint.get("scaleMode", "FILL"),
                "opacity": opacity,
            }
            if paint.get("imageTransform"):
                image["imageTransform"] = paint["imageTransform"]
            if paint.get("imageCrop"):
                image["imageCrop"] = paint["imageCrop"]
            return image
        return {"type": "none"}

    def _build_stroke(self, paint: dict, raw: dict) -> dict:
        if paint.get("type") != "SOLID":
            return {"type": "none"}
        return {
            "type": "solid",
            "color": self._color(paint.get("color")),
            "width": raw.get("strokeWeight") or 1,
            "position": str(raw.get("strokeAlign", "INSIDE")).lower(),
        }

    def _build_effect(self, effect: dict) -> dict:
        effect_type = _EFFECT_TYPES.get(effect.get("type"))
        if effect_type is None:
            return {"type": "drop-shadow", "radius": 0, "visible": False}
        out = {
            "type": effect_type,
            "radius": effect.get("radius", 0),
            "visible": effect.get("visible", True) is not False,
        }
        if effect_type in ("drop-shadow", "inner-shadow"):
            offset = effect.get("offset") or {}
            out["color"] = self._color(effect.get("color"))
            out["offset"] = {"x": offset.get("x", 0), "y": offset.get("y", 0)}
            out["spread"] = effect.get("spread", 0)
        return out

    # ─── Text ───

    def _build_typography(self, style: dict) -> dict:
        return {
            "fontFamily": style.get("fontFamily") or "Inter",
            "fontSize": style.get("fontSize") or 16,
            "fontWeight": style.get("fontWeight") or 400,
            "lineHeight": self._line_height(style),
            "letterSpacing": f"{style.get('letterSpacing', 0) or 0}px",
            "textAlign": self._text_align(style.get("textAlignHorizontal")),
            "textDecoration": {"UNDERLINE": "underline", "STRIKETHROUGH": "line-through"}.get(
                style.get("textDecoration"), "none"),
            "textTransform": {"UPPER": "uppercase", "LOWER": "lowercase", "TITLE": "capitalize"}.get(
                style.get("textCase"), "none"),
        }

    @staticmethod
    def _line_height(style: dict) -> str:
        line_height = style.get("lineHeight")
        if isinstance(line_height, dict):
            unit = line_height.get("unit")
            if unit == "PIXELS":
                return f"{line_height.get('value')}px"
            if unit == "PERCENT":
                return f"{line_height.get('value')}%"
            return "normal"
        unit = style.get("lineHeightUnit")
        if unit == "INTRINSIC_%":
            return "normal"
        if unit == "FONT_SIZE_%" and style.get("lineHeightPercentFontSize") is not None:
            return f"{style['lineHeightPercentFontSize']}%"
        if style.get("lineHeightPx") is not None:
            return f"{style['lineHeightPx']}px"
        return "normal"

    @staticmethod
    def _text_align(align: Optional[str]) -> str:
        if align == "JUSTIFIED":
            return "justify"
        return (align or "LEFT").lower()

    # ─── Geometry & bindings ───

    @staticmethod
    def _vector_paths(raw: dict) -> list[dict]:
        if raw.get("type") not in ("VECTOR", "BOOLEAN_OPERATION", "STAR", "POLYGON", "LINE", "ELLIPSE"):
            return []
        paths = []
        for entry in raw.get("vectorPaths") or raw.get("fillGeometry") or []:
            if not isinstance(entry, dict):
                continue
            data = entry.get("data") or entry.get("path")
            if data:
                paths.append({"data": data, "windingRule": entry.get("windingRule", "NONZERO")})
        return paths

    @staticmethod
    def _bound_variables(raw: dict) -> dict:
        bound = raw.get("boundVariables")
        if not isinstance(bound, dict):
            return {}
        out = {}
        for prop, ref in bound.items():
            if isinstance(ref, list):
                ref = next((r for r in ref if isinstance(r, dict) and r.get("id")), None)
            if isinstance(ref, dict) and ref.get("id"):
                out[prop] = ref["id"]
        return out

    # ─── Slots ───

    def _assign_slot(self, name: str, node_id: str) -> Optional[str]:
        lower = name.lower()
        for needle, base, slot_type in _SLOT_VOCABULARY:
            if needle in lower:
                break
        else:
            return None

        slot_name = base
        if slot_name in self._slot_names:
            slot_name = None
            hint = _POSITION_HINT.search(lower)
            if hint:
                candidate = base + hint.group(0).capitalize()
                if candidate not in self._slot_names:
                    slot_name = candidate
            if slot_name is None:
                n = 2
                while f"{base}{n}" in self._slot_names:
                    n += 1
                slot_name = f"{base}{n}"

        self._slot_names.add(slot_name)
        self.slots.append({
            "name": slot_name,
            "type": slot_type,
            "required": "required" in lower or "*" in name,
            "nodeId": node_id,
        })
        return slot_name

    # ─── Document-level hints ───

    @staticmethod
    def _layout_intent(raw: dict) -> dict:
        if raw.get("layoutSizingHorizontal") or raw.get("layoutSizingVertical"):
            horizontal = raw.get("layoutSizingHorizontal")
            vertical = raw.get("layoutSizingVertical")
        elif raw.get("layoutMode") == "VERTICAL":
            horizontal = raw.get("counterAxisSizingMode")
            vertical = raw.get("primaryAxisSizingMode")
        else:
            horizontal = raw.get("primaryAxisSizingMode")
            vertical = raw.get("counterAxisSizingMode")
        return {
            "horizontal": _SIZING_INTENT.get(horizontal, "intrinsic"),
            "vertical": _SIZING_INTENT.get(vertical, "intrinsic"),
        }

    @staticmethod
    def _visual_hints(tree: Optional[dict]) -> dict:
        requires_pseudo = requires_mask = requires_filter = False
        for node in walk(tree):
            for stroke in node.get("strokes", []):
                if stroke.get("position") in ("inside", "center"):
                    requires_pseudo = True
            if node.get("type") == "TEXT" and any(f.get("type") == "gradient" for f in node.get("fills", [])):
                requires_mask = True
            if node.get("blendMode") and node["blendMode"] not in _NEUTRAL_BLEND_MODES:
                requires_filter = True
        return {
            "requiresPseudo": requires_pseudo,
            "requiresMask": requires_mask,
            "requiresFilterWorkaround": requires_filter,
            "strokeMappingStrategy": "pseudo" if requires_pseudo else "outline",
        }


def build_irs(raw_root: dict, figma_url: str = "", file_key: str = "",
              extracted_at: Optional[str] = None) -> dict:
    irs = StructuralIRBuilder(extracted_at=extracted_at).build(raw_root, figma_url, file_key)
    logger.debug("IRS built for %r: %d nodes, %d slots, %d variants",
                 irs["meta"]["name"], irs["stats"]["nodeCount"], len(irs["slots"]), len(irs["variants"]))
    return irs


def preview_tree(node: Optional[dict], indent: int = 0) -> str:
    """除錯用：印出 IRS 節點樹（roleHint / slot）."""
    if not node:
        return ""
    lines = []
    for current, depth in walk(node, with_depth=True):
        prefix = "  " * (indent + depth)
        label = f"{prefix}├─ {current.get('name') or '???'}  [{current.get('type', '?')}]"
        if current.get("roleHint"):
            label += f"  ({current['roleHint']})"
        if current.get("slotName"):
            label += f"  {{slot: {current['slotName']}}}"
        lines.append(label)
    return "\n".join(lines)


def save_ir(ir_doc: dict, output_dir: str = ".figma-codegen", filename: str = "irs.json") -> str:
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(ir_doc, f, indent=2, ensure_ascii=False)
    return path
