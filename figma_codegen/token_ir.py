"""
Token IR (IRT): Figma local variables → semantic design tokens.

Alias chains are followed iteratively with a visited set and a depth bound;
a cycle, a dangling id or an over-long chain leaves the mode's original alias
marker in place and logs a warning.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .colors import hex_string, is_figma_color, looks_like_color, parse_color, rgb_distance, rgba_string
from .tree import walk

logger = logging.getLogger(__name__)

IRT_VERSION = "1.0.0"
DEFAULT_MAX_ALIAS_DEPTH = 10

TOKEN_TYPES = ("color", "spacing", "typography", "sizing", "radius", "shadow", "opacity", "other")

_SCOPE_TYPES = {
    "ALL_FILLS": "color",
    "FRAME_FILL": "color",
    "SHAPE_FILL": "color",
    "TEXT_FILL": "color",
    "STROKE_COLOR": "color",
    "EFFECT_COLOR": "color",
    "GAP": "spacing",
    "CORNER_RADIUS": "radius",
    "WIDTH_HEIGHT": "sizing",
    "STROKE_FLOAT": "sizing",
    "OPACITY": "opacity",
    "FONT_FAMILY": "typography",
    "FONT_STYLE": "typography",
    "FONT_WEIGHT": "typography",
    "FONT_SIZE": "typography",
    "LINE_HEIGHT": "typography",
    "LETTER_SPACING": "typography",
    "PARAGRAPH_SPACING": "typography",
    "PARAGRAPH_INDENT": "typography",
    "TEXT_CONTENT": "typography",
    "EFFECT_FLOAT": "shadow",
}

# Checked in order; "border-radius" must hit radius before "border" hits color.
_NAME_RULES = (
    (("font", "typography", "line-height", "letter-spacing", "text-style"), "typography"),
    (("opacity", "alpha"), "opacity"),
    (("radius", "corner", "rounded"), "radius"),
    (("shadow", "elevation", "blur"), "shadow"),
    (("spacing", "space", "gap", "padding", "margin"), "spacing"),
    (("size", "width", "height"), "sizing"),
    (("color", "colour", "background", "bg", "text", "border", "fill", "icon", "surface", "foreground"), "color"),
)

# FLOAT variables never become colors; "border" alone means a border radius.
_FLOAT_NAME_RULES = (
    (("opacity", "alpha"), "opacity"),
    (("radius", "corner", "rounded"), "radius"),
    (("spacing", "space", "gap", "padding", "margin"), "spacing"),
    (("size", "width", "height"), "sizing"),
    (("border",), "radius"),
)

_DIMENSION = re.compile(r"^-?\d+(\.\d+)?(px|rem|em|pt)$")

# near-identical values inside one type become "derived" graph edges
_DERIVED_COLOR_DISTANCE = 2.0
_DERIVED_NUMERIC_DIFF = 0.1


def is_alias(value) -> bool:
    return isinstance(value, dict) and value.get("type") == "VARIABLE_ALIAS"


@dataclass
class AliasResolution:
    value: Any
    resolved: bool
    chain: list = field(default_factory=list)


def _mode_for(variable: dict, mode_id: str, collections: dict) -> Optional[str]:
    values = variable.get("valuesByMode") or {}
    if mode_id in values:
        return mode_id
    collection = collections.get(variable.get("variableCollectionId"), {})
    default_mode = collection.get("defaultModeId")
    if default_mode in values:
        return default_mode
    return next(iter(values), None)


def resolve_alias(variable_id: str, mode_id: str, variables: dict,
                  collections: Optional[dict] = None,
                  max_depth: int = DEFAULT_MAX_ALIAS_DEPTH) -> AliasResolution:
    """Follow one variable's mode value through its alias chain."""
    collections = collections or {}
    variable = variables.get(variable_id)
    if variable is None:
        logger.warning("Variable %s not found; leaving unresolved", variable_id)
        return AliasResolution(None, False, [variable_id])

    marker = (variable.get("valuesByMode") or {}).get(mode_id)
    value = marker
    chain = [variable_id]
    visited = {variable_id}
    current_mode = mode_id

    while is_alias(value):
        target_id = value.get("id")
        if len(chain) - 1 >= max_depth:
            logger.warning("Alias chain for %s (mode %s) exceeds depth %d: %s",
                           variable_id, mode_id, max_depth, " -> ".join(chain))
            return AliasResolution(marker, False, chain)
        if target_id in visited:
            logger.warning("Cyclic alias for %s (mode %s): %s",
                           variable_id, mode_id, " -> ".join(chain + [str(target_id)]))
            return AliasResolution(marker, False, chain + [target_id])
        target = variables.get(target_id)
        if target is None:
            logger.warning("Alias target %s of %s (mode %s) not found", target_id, variable_id, mode_id)
            return AliasResolution(marker, False, chain + [target_id])
        visited.add(target_id)
        chain.append(target_id)
        current_mode = _mode_for(target, current_mode, collections)
        value = (target.get("valuesByMode") or {}).get(current_mode)

    return AliasResolution(value, True, chain)


def format_token_value(value: Any, resolved_type: str = ""):
    """Resolved raw value → IR value. Alias markers pass through untouched."""
    if is_alias(value):
        return dict(value)
    if is_figma_color(value):
        return rgba_string(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return int(value) if float(value).is_integer() else value
    if value is None:
        return ""
    return str(value)


def infer_token_type(name: str, scopes: Optional[Iterable[str]] = None, value: Any = None,
                     resolved_type: str = "") -> str:
    """Scopes first, then the variable's resolvedType, then name rules, then the value."""
    for scope in scopes or ():
        token_type = _SCOPE_TYPES.get(scope)
        if token_type:
            return token_type

    lower = (name or "").lower()
    if resolved_type == "COLOR":
        return "color"
    if resolved_type == "FLOAT":
        for needles, token_type in _FLOAT_NAME_RULES:
            if any(n in lower for n in needles):
                return token_type
        return "sizing"

    for needles, token_type in _NAME_RULES:
        if any(n in lower for n in needles):
            return token_type

    if looks_like_color(value):
        return "color"
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return "spacing"
    if isinstance(value, str) and _DIMENSION.match(value.strip()):
        return "spacing"
    return "other"


def semantic_token_name(name: str, token_type: str) -> str:
    """'Primary/500' + color → 'color.primary.500'."""
    dotted = re.sub(r"[/\s]+", ".", (name or "").strip()).lower().strip(".")
    if token_type == "other":
        return dotted
    if dotted == token_type or dotted.startswith(token_type + "."):
        dotted = dotted[len(token_type):].lstrip(".")
    return f"{token_type}.{dotted}" if dotted else token_type


def _bound_ids(value) -> list[str]:
    if isinstance(value, dict):
        if value.get("id") and value.get("type", "VARIABLE_ALIAS") == "VARIABLE_ALIAS":
            return [value["id"]]
        ids = []
        for inner in value.values():
            ids.extend(_bound_ids(inner))
        return ids
    if isinstance(value, list):
        ids = []
        for inner in value:
            ids.extend(_bound_ids(inner))
        return ids
    return []


def _as_variable_table(variables) -> dict:
    if isinstance(variables, dict):
        return variables
    return {v["id"]: v for v in variables or [] if isinstance(v, dict) and v.get("id")}


class TokenIRBuilder:

    def __init__(self, max_alias_depth: int = DEFAULT_MAX_ALIAS_DEPTH):
        self.max_alias_depth = max_alias_depth

    def build(self, variables, collections: Optional[dict] = None,
              nodes: Optional[Iterable[dict]] = None) -> dict:
        variables = _as_variable_table(variables)
        collections = collections or {}

        tokens = []
        mode_values: dict[str, dict] = {}
        names_by_id: dict[str, str] = {}
        alias_edges = []

        for var_id, variable in variables.items():
            names_by_id[var_id] = variable.get("name") or var_id

        for var_id, variable in variables.items():
            name = names_by_id[var_id]
            resolved_type = variable.get("resolvedType", "")
            collection = collections.get(variable.get("variableCollectionId"), {})
            mode_names = {m.get("modeId"): m.get("name") for m in collection.get("modes", [])}
            default_mode = _mode_for(variable, collection.get("defaultModeId", ""), collections)

            modes = {}
            raw_default = None
            for mode_id, raw_value in (variable.get("valuesByMode") or {}).items():
                result = resolve_alias(var_id, mode_id, variables, collections, self.max_alias_depth)
                value = format_token_value(result.value, resolved_type)
                mode_name = mode_names.get(mode_id) or mode_id
                modes[mode_name] = value
                mode_values.setdefault(mode_name, {})[name] = value
                if mode_id == default_mode:
                    raw_default = result.value
                if is_alias(raw_value) and raw_value.get("id") in names_by_id:
                    edge = {"from": name, "to": names_by_id[raw_value["id"]], "relationship": "alias"}
                    if edge not in alias_edges:
                        alias_edges.append(edge)

            token_type = infer_token_type(name, variable.get("scopes"), raw_default, resolved_type)
            default_value = modes.get(mode_names.get(default_mode) or default_mode, "")
            token = {
                "name": name,
                "semanticName": semantic_token_name(name, token_type),
                "value": default_value,
                "type": token_type,
                "modes": modes,
                "sourceVariableId": var_id,
            }
            if collection.get("name"):
                token["collection"] = collection["name"]
            if variable.get("description"):
                token["description"] = variable["description"]
            first_hop = (variable.get("valuesByMode") or {}).get(default_mode)
            if is_alias(first_hop) and first_hop.get("id") in names_by_id:
                token["aliasOf"] = names_by_id[first_hop["id"]]
            tokens.append(token)

        return {
            "version": IRT_VERSION,
            "tokens": tokens,
            "modeValues": mode_values,
            "tokenGraph": {
                "nodes": [t["name"] for t in tokens],
                "edges": alias_edges + self._derived_edges(tokens),
            },
            "tokenUsage": self._usage_index(nodes or [], names_by_id),
        }

    @staticmethod
    def _derived_edges(tokens: list[dict]) -> list[dict]:
        edges = []
        for i, a in enumerate(tokens):
            if is_alias(a["value"]) or "aliasOf" in a:
                continue
            for b in tokens[i + 1:]:
                if b["type"] != a["type"] or is_alias(b["value"]) or "aliasOf" in b:
                    continue
                if _values_near(a["value"], b["value"]):
                    edges.append({"from": b["name"], "to": a["name"], "relationship": "derived"})
        return edges

    @staticmethod
    def _usage_index(nodes: Iterable[dict], names_by_id: dict) -> dict[str, list[str]]:
        usage: dict[str, list[str]] = {}
        for root in nodes:
            for node in walk(root):
                for var_id in _bound_ids(node.get("boundVariables") or {}):
                    token_name = names_by_id.get(var_id)
                    if token_name is None:
                        continue
                    node_ids = usage.setdefault(token_name, [])
                    if node.get("id") not in node_ids:
                        node_ids.append(node.get("id"))
        return usage


def _values_near(a, b) -> bool:
    if isinstance(a, (int, float)) and isinstance(b, (int, float)) \
            and not isinstance(a, bool) and not isinstance(b, bool):
        return abs(a - b) < _DERIVED_NUMERIC_DIFF
    ca, cb = parse_color(a), parse_color(b)
    if ca and cb:
        return rgb_distance(ca, cb) < _DERIVED_COLOR_DISTANCE and abs(ca[3] - cb[3]) < 0.01
    return False


def build_irt(variables, collections: Optional[dict] = None, nodes: Optional[Iterable[dict]] = None,
              max_alias_depth: int = DEFAULT_MAX_ALIAS_DEPTH) -> dict:
    irt = TokenIRBuilder(max_alias_depth=max_alias_depth).build(variables, collections, nodes)
    logger.debug("IRT built: %d tokens, %d modes", len(irt["tokens"]), len(irt["modeValues"]))
    return irt


def matchable_variables(variables, collections: Optional[dict] = None,
                        max_alias_depth: int = DEFAULT_MAX_ALIAS_DEPTH) -> list[dict]:
    """Variables resolved to their default-mode value, in the shape the token matcher expects."""
    variables = _as_variable_table(variables)
    collections = collections or {}
    out = []
    for var_id, variable in variables.items():
        collection = collections.get(variable.get("variableCollectionId"), {})
        mode_id = _mode_for(variable, collection.get("defaultModeId", ""), collections)
        if mode_id is None:
            continue
        value = resolve_alias(var_id, mode_id, variables, collections, max_alias_depth).value
        resolved_type = str(variable.get("resolvedType", "")).lower()
        if is_alias(value):
            formatted = ""
        elif is_figma_color(value):
            formatted = hex_string(value)
        elif isinstance(value, (int, float)) and not isinstance(value, bool) and resolved_type == "float":
            formatted = f"{format_token_value(value)}px"
        else:
            formatted = "" if value is None else str(value)
        out.append({
            "id": var_id,
            "name": variable.get("name") or var_id,
            "value": formatted,
            "type": resolved_type,
        })
    return out
