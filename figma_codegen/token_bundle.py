"""
token_bundle.py — IRT → CSS custom properties

  :root { ... }                 default-mode value of every token, grouped by type
  [data-theme="<mode>"] { ... } one block per additional mode
"""

import logging
from typing import Optional

from .templating import css_comment, format_number
from .token_ir import TOKEN_TYPES, is_alias
from .token_matcher import css_var, normalize_token_name

logger = logging.getLogger(__name__)

_PX_TYPES = {"spacing", "sizing", "radius"}


def css_value(token_type: str, value, names_by_id: Optional[dict] = None,
              known: Optional[set] = None) -> Optional[str]:
    """IRT token value → CSS value; None when an alias points at no known token."""
    if is_alias(value):
        target = (names_by_id or {}).get(value.get("id"))
        if target and target in (known or set()):
            return css_var(target)
        return None
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        if token_type in _PX_TYPES:
            return "0" if value == 0 else f"{format_number(value)}px"
        return format_number(value)
    return str(value)


def _declaration(token: dict, value, names_by_id: dict, known: set) -> str:
    prop = f"--{normalize_token_name(token['name'])}"
    css = css_value(token["type"], value, names_by_id, known)
    if css is None:
        logger.warning("Token %r has an unresolved alias; skipped in CSS bundle", token["name"])
        return f"  {css_comment(f'{prop}: unresolved alias')}"
    return f"  {prop}: {css};"


def _mode_names(irt: dict) -> list[str]:
    return list((irt.get("modeValues") or {}).keys())


def compile_token_css(irt: Optional[dict]) -> str:
    tokens = (irt or {}).get("tokens") or []
    names_by_id = {t.get("sourceVariableId"): t["name"] for t in tokens if t.get("sourceVariableId")}
    known = {t["name"] for t in tokens}

    lines = [css_comment("Design tokens generated from Figma"),
             css_comment(f"Token count: {len(tokens)}"), "", ":root {"]
    for token_type in TOKEN_TYPES:
        group = [t for t in tokens if t.get("type") == token_type]
        if not group:
            continue
        lines.append(f"  {css_comment(token_type.capitalize() + ' tokens')}")
        for token in group:
            lines.append(_declaration(token, token.get("value"), names_by_id, known))
    lines.append("}")

    for mode in _mode_names(irt or {}):
        overrides = [t for t in tokens
                     if mode in (t.get("modes") or {}) and t["modes"][mode] != t.get("value")]
        if not overrides:
            continue
        lines.append("")
        lines.append(f'[data-theme="{mode}"] {{')
        for token in overrides:
            lines.append(_declaration(token, token["modes"][mode], names_by_id, known))
        lines.append("}")
    return "\n".join(lines) + "\n"


def token_manifest(irt: Optional[dict]) -> dict[str, str]:
    """Figma variable name → ``var(--name)`` reference."""
    return {t["name"]: css_var(t["name"]) for t in (irt or {}).get("tokens") or []}
