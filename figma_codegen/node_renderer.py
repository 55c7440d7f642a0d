"""
IRS node tree → JSX markup.

  - vector / boolean-op / star / polygon → inline SVG block
  - TEXT with curve data → SVG <textPath> block, plain text otherwise
  - anything else → element picked from roleHint, with inline dimensions,
    opacity and background as literals or token references
"""

import json
from typing import Optional

from .colors import rgba_string
from .paint import background_value
from .templating import INDENT, jsx_attr, jsx_text, kebab_case, style_object, ts_string
from .token_matcher import css_var
from .vector import is_vector_graphic, text_path_svg, vector_to_svg

_ROLE_TAGS = {
    "button-root": "button",
    "input-root": "input",
    "label": "label",
    "icon": "span",
    "icon-left": "span",
    "icon-right": "span",
    "dialog-overlay": "div",
}
_VOID_TAGS = {"input"}


def build_style_token_table(irt: Optional[dict] = None, token_matches: Optional[list] = None) -> dict[str, str]:
    """Figma variable id → CSS custom property reference.

    A matched project token takes precedence over the variable's own name.
    """
    table = {}
    for token in (irt or {}).get("tokens", []):
        if token.get("sourceVariableId"):
            table[token["sourceVariableId"]] = css_var(token["name"])
    for match in token_matches or []:
        matched = match.get("matchedToken")
        if matched and match.get("figmaVarId"):
            table[match["figmaVarId"]] = matched["cssVar"]
    return table


def token_ref(node: dict, prop: str, tokens: Optional[dict]) -> Optional[str]:
    if not tokens:
        return None
    var_id = (node.get("boundVariables") or {}).get(prop)
    return tokens.get(var_id) if var_id else None


def inline_style(node: dict, tokens: Optional[dict] = None) -> dict:
    style = {}
    bbox = node.get("boundingBox") or {}
    for key in ("width", "height"):
        ref = token_ref(node, key, tokens)
        if ref:
            style[key] = ref
        elif bbox.get(key):
            style[key] = bbox[key]

    ref = token_ref(node, "opacity", tokens)
    if ref:
        style["opacity"] = ref
    elif node.get("opacity") is not None and node["opacity"] != 1:
        style["opacity"] = node["opacity"]

    ref = token_ref(node, "fills", tokens)
    if node.get("type") == "TEXT":
        solid = next((f for f in node.get("fills") or [] if f.get("type") == "solid"), None)
        color = ref or (rgba_string(solid["color"], solid.get("opacity", 1)) if solid else None)
        if color:
            style["color"] = color
    else:
        background = ref or background_value(node.get("fills") or [], bbox)
        if background:
            style["background"] = background
    return style


def element_tag(node: dict) -> str:
    if node.get("type") == "TEXT":
        return "span"
    return _ROLE_TAGS.get(node.get("roleHint"), "div")


def class_name(node: dict) -> str:
    return kebab_case(node.get("name") or node.get("type") or "node")


def _common_attrs(node: dict, tokens: Optional[dict]) -> list[str]:
    attrs = [jsx_attr("className", class_name(node))]
    slot = node.get("slotName")
    if slot:
        attrs.append(jsx_attr("data-slot", slot))
        attrs.append(jsx_attr("id", f"{slot}-id"))
    style = inline_style(node, tokens)
    if style:
        attrs.append(f"style={{{style_object(style)}}}")
    return attrs


def _svg_block(node: dict, svg: str, pad: str, label: Optional[str] = None) -> str:
    attrs = [jsx_attr("className", class_name(node))]
    if label:
        attrs.extend([jsx_attr("role", "img"), jsx_attr("aria-label", label)])
    else:
        attrs.append(jsx_attr("aria-hidden", "true"))
    return f"{pad}<div {' '.join(attrs)} dangerouslySetInnerHTML={{{{ __html: {ts_string(svg)} }}}} />"


def render_node(node: dict, level: int = 0, tokens: Optional[dict] = None,
                slots: Optional[dict] = None) -> str:
    """``slots`` maps slot name → prop local; slot content overrides the design text."""
    pad = INDENT * level
    slot_local = (slots or {}).get(node.get("slotName"))

    if is_vector_graphic(node):
        return _svg_block(node, vector_to_svg(node), pad)

    if node.get("type") == "TEXT":
        svg = text_path_svg(node)
        if svg:
            return _svg_block(node, svg, pad, label=node.get("characters") or node.get("name"))
        attrs = " ".join(_common_attrs(node, tokens))
        text = jsx_text(node.get("characters", ""))
        if slot_local:
            text = "{" + slot_local + " ?? " + json.dumps(node.get("characters", ""), ensure_ascii=False) + "}"
        if not text:
            return f"{pad}<span {attrs} />"
        return f"{pad}<span {attrs}>{text}</span>"

    tag = element_tag(node)
    attrs = _common_attrs(node, tokens)
    if tag == "button":
        attrs.insert(0, jsx_attr("type", "button"))
    attr_text = " ".join(attrs)
    children = render_children(node, level + 1, tokens, slots)
    if slot_local and not children and tag not in _VOID_TAGS:
        children = f"{INDENT * (level + 1)}{{{slot_local}}}"
    if tag in _VOID_TAGS or not children:
        return f"{pad}<{tag} {attr_text} />"
    return f"{pad}<{tag} {attr_text}>\n{children}\n{pad}</{tag}>"


def render_children(node: dict, level: int = 0, tokens: Optional[dict] = None,
                    slots: Optional[dict] = None) -> str:
    return "\n".join(render_node(child, level, tokens, slots) for child in node.get("children") or [])
