"""IRS root + IML states → component stylesheet."""

from typing import Optional

from .node_renderer import token_ref
from .paint import blend_mode_css, effects_to_css, fills_to_css, radius_css, requires_isolation, strokes_to_css
from .templating import class_segment, css_block, css_comment, px

_STATE_SELECTORS = {
    "hover": ":hover",
    "pressed": ":active",
    "focus": ":focus-visible",
}


def _flex_css(layout: Optional[dict]) -> list[tuple[str, str]]:
    if not layout:
        return []
    out = [
        ("display", layout.get("display", "flex")),
        ("flex-direction", layout.get("flexDirection", "row")),
        ("justify-content", layout.get("justifyContent", "flex-start")),
        ("align-items", layout.get("alignItems", "flex-start")),
    ]
    if layout.get("gap"):
        out.append(("gap", px(layout["gap"])))
    padding = layout.get("padding") or {}
    sides = [padding.get(k, 0) for k in ("top", "right", "bottom", "left")]
    if any(sides):
        out.append(("padding", " ".join(px(v) for v in sides)))
    if layout.get("flexWrap"):
        out.append(("flex-wrap", layout["flexWrap"]))
    return out


def _merge_shadows(declarations: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Stroke and effect shadows must share one ``box-shadow`` declaration."""
    shadows = [value for prop, value in declarations if prop == "box-shadow"]
    out = []
    for prop, value in declarations:
        if prop != "box-shadow":
            out.append((prop, value))
        elif shadows:
            out.append(("box-shadow", ", ".join(shadows)))
            shadows = []
    return out


def root_declarations(root: dict, tokens: Optional[dict] = None, stroke_strategy: str = "outline") -> list[tuple[str, str]]:
    declarations = []
    blend = root.get("blendMode")
    if requires_isolation(blend):
        declarations.append(("isolation", "isolate"))

    ref = token_ref(root, "fills", tokens)
    if ref:
        declarations.append(("background", ref))
    else:
        declarations.extend(fills_to_css(root.get("fills") or [], root.get("boundingBox")))
    declarations.extend(blend_mode_css(blend))

    ref = token_ref(root, "cornerRadius", tokens) or token_ref(root, "topLeftRadius", tokens)
    if ref:
        declarations.append(("border-radius", ref))
    else:
        declarations.extend(radius_css(root))

    declarations.extend(_flex_css(root.get("layout")))
    declarations.extend(strokes_to_css(root.get("strokes") or [], stroke_strategy))
    declarations.extend(effects_to_css(root.get("effects") or []))
    return _merge_shadows(declarations)


def _match_comment(token_matches: Optional[list]) -> list[str]:
    matched = [m for m in token_matches or [] if m.get("matchedToken")]
    if not matched:
        return []
    lines = ["/* Design tokens matched to project tokens:"]
    for match in matched:
        token = match["matchedToken"]
        lines.append(f" *   {match['figmaVarName']} → {token['cssVar']} ({match['confidence']:.2f})".replace("*/", "* /"))
    lines.append(" */")
    return ["\n".join(lines)]


def render_styles(name: str, base_class: str, irs: dict, iml: dict,
                  tokens: Optional[dict] = None, token_matches: Optional[list] = None) -> str:
    root = irs.get("tree") or {}
    strategy = (irs.get("visualHints") or {}).get("strokeMappingStrategy", "outline")
    blocks = [css_comment(f"{name} styles, generated from Figma")]
    blocks.extend(_match_comment(token_matches))
    blocks.append(css_block(f".{base_class}", root_declarations(root, tokens, strategy)))

    # 手動覆寫用的空 block
    seen = set()
    for variant in irs.get("variants") or []:
        props = variant.get("properties") or {}
        if not props:
            continue
        selector = f".{base_class}" + "".join(
            f".{base_class}--{class_segment(key)}-{class_segment(value)}" for key, value in props.items())
        if selector in seen:
            continue
        seen.add(selector)
        blocks.append(css_block(selector, comment=f"Variant: {variant.get('name', '')}"))

    for state in iml.get("states") or []:
        if state["name"] in ("default", "disabled"):
            continue
        selector = f".{base_class}--{class_segment(state['name'])}"
        pseudo = _STATE_SELECTORS.get(state["name"])
        if pseudo:
            selector = f".{base_class}{pseudo}, {selector}"
        blocks.append(css_block(selector, comment=f"State: {state['name']}"))

    blocks.append(css_block(
        f".{base_class}:disabled,\n.{base_class}[aria-disabled='true'],\n.{base_class}--disabled",
        [("opacity", "0.5"), ("cursor", "not-allowed")],
    ))
    return "\n\n".join(blocks) + "\n"
