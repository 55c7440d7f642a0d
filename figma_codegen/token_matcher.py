"""
Token matcher: reconcile Figma variables with a project's own token catalog.

Scoring per (variable, token) pair, type-gated:
  - normalized names equal              → 1.0, stops the search
  - name score = 0.5·edit + 0.3·containment + 0.2·shared parts, kept when > 0.7
  - color value similarity > 0.95       → max(0.3·name + 0.7·value, 0.9·value)
  - numeric value similarity > 0.99     → max(0.4·name + 0.6·value, 0.95·value)

Tokens are visited in name order and only a strictly better score replaces the
current best, so ties go to the lexicographically smallest token name.
"""

import re
from typing import Iterable, Optional

from rapidfuzz.distance import Levenshtein

from .colors import MAX_RGB_DISTANCE, parse_color, rgb_distance

NAME_THRESHOLD = 0.7
COLOR_THRESHOLD = 0.95
NUMERIC_THRESHOLD = 0.99

_NUMERIC_TOKEN_TYPES = {"spacing", "sizing", "radius"}
_KNOWN_TYPES = {"color", "float", "number", "spacing", "sizing", "radius",
                "typography", "shadow", "opacity", "string", "boolean"}
_NUMBER = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px|rem|em|pt|%)?\s*$")


def normalize_token_name(name: str) -> str:
    """'Color/Primary.500' → 'color-primary-500'."""
    slug = (name or "").lower()
    slug = re.sub(r"[/.\s_]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def css_var(name: str) -> str:
    return f"var(--{normalize_token_name(name)})"


def levenshtein(a: str, b: str) -> int:
    return Levenshtein.distance(a or "", b or "")


def name_similarity(a: str, b: str) -> float:
    """Weighted similarity of two already-normalized names."""
    if not a or not b:
        return 0.0
    longest = max(len(a), len(b))
    edit = Levenshtein.normalized_similarity(a, b)
    containment = min(len(a), len(b)) / longest if (a in b or b in a) else 0.0
    parts_a, parts_b = set(a.split("-")), set(b.split("-"))
    parts = len(parts_a & parts_b) / max(len(parts_a), len(parts_b))
    return 0.5 * edit + 0.3 * containment + 0.2 * parts


def color_similarity(a, b) -> Optional[float]:
    ca, cb = parse_color(a), parse_color(b)
    if ca is None or cb is None:
        return None
    return 1 - rgb_distance(ca, cb) / MAX_RGB_DISTANCE


def _number(value) -> Optional[tuple]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value), ""
    if isinstance(value, str):
        m = _NUMBER.match(value)
        if m:
            return float(m.group(1)), m.group(2) or ""
    return None


def numeric_similarity(a, b) -> Optional[float]:
    na, nb = _number(a), _number(b)
    if na is None or nb is None:
        return None
    if na[1] and nb[1] and na[1] != nb[1]:
        return None
    largest = max(abs(na[0]), abs(nb[0]))
    if largest == 0:
        return 1.0
    return 1 - abs(na[0] - nb[0]) / largest


def types_compatible(variable_type: str, token_type: str) -> bool:
    vt, tt = (variable_type or "").lower(), (token_type or "").lower()
    if vt not in _KNOWN_TYPES or tt not in _KNOWN_TYPES:
        return True
    if vt == "color" or tt == "color":
        return vt == tt
    if vt in ("float", "number"):
        return tt in _NUMERIC_TOKEN_TYPES
    if vt in _NUMERIC_TOKEN_TYPES:
        return tt in _NUMERIC_TOKEN_TYPES or tt in ("float", "number")
    return vt == tt


def _score(variable: dict, ext_name: str, token: dict, token_name: str) -> float:
    name_score = name_similarity(ext_name, token_name)
    confidence = name_score if name_score > NAME_THRESHOLD else 0.0

    color = color_similarity(variable.get("value"), token.get("value"))
    if color is not None:
        if color > COLOR_THRESHOLD:
            confidence = max(confidence, 0.3 * name_score + 0.7 * color, 0.9 * color)
        return confidence

    numeric = numeric_similarity(variable.get("value"), token.get("value"))
    if numeric is not None and numeric > NUMERIC_THRESHOLD:
        confidence = max(confidence, 0.4 * name_score + 0.6 * numeric, 0.95 * numeric)
    return confidence


def match_variable(variable: dict, tokens: Iterable[dict]) -> dict:
    ext_name = normalize_token_name(variable.get("name", ""))
    best: Optional[dict] = None
    best_confidence = 0.0

    for token in sorted(tokens, key=lambda t: str(t.get("name", ""))):
        if not types_compatible(variable.get("type", ""), token.get("type", "")):
            continue
        token_name = normalize_token_name(token.get("name", ""))
        if token_name and token_name == ext_name:
            best, best_confidence = token, 1.0
            break
        confidence = _score(variable, ext_name, token, token_name)
        if confidence > best_confidence:
            best, best_confidence = token, confidence

    matched = None
    if best is not None:
        matched = {
            "name": best.get("name", ""),
            "value": best.get("value", ""),
            "type": best.get("type", ""),
            "cssVar": css_var(best.get("name", "")),
        }
    return {
        "figmaVarName": variable.get("name", ""),
        "figmaVarId": variable.get("id", ""),
        "matchedToken": matched,
        "confidence": round(best_confidence, 4),
    }


def match_tokens(variables: Iterable[dict], tokens: Iterable[dict]) -> list[dict]:
    tokens = list(tokens)
    return [match_variable(variable, tokens) for variable in variables]
