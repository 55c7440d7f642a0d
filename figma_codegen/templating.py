"""
Small templating layer shared by every emitter.

Indentation, identifier sanitization and escaping for TSX / CSS / SVG text
live here so the renderers only assemble lines.
"""

import html
import json
import re
from typing import Iterable, Optional, Union

INDENT = "  "

_JS_RESERVED = {
    "break", "case", "catch", "class", "const", "continue", "default", "delete",
    "do", "else", "export", "extends", "finally", "for", "function", "if",
    "import", "in", "instanceof", "let", "new", "return", "super", "switch",
    "this", "throw", "try", "typeof", "var", "void", "while", "with", "yield",
}


def _join_words(name: str) -> str:
    safe = "".join(ch if ch.isalnum() else " " for ch in name or "")
    return "".join(p[:1].upper() + p[1:] for p in safe.split())


def _digit_prefix(fallback: str) -> str:
    # 前綴本身也必須能當識別字開頭
    return fallback if fallback[:1].isalpha() or fallback[:1] == "_" else "_"


def pascal_case(name: str, fallback: str = "Unnamed") -> str:
    """Always a valid identifier; a digit-leading result gets ``fallback`` (or ``_``) in front."""
    out = _join_words(name)
    if not out:
        return fallback
    if out[0].isdigit():
        out = _digit_prefix(fallback) + out
    return out


def camel_case(name: str, fallback: str = "value") -> str:
    pascal = _join_words(name)
    if not pascal:
        return fallback
    out = pascal[:1].lower() + pascal[1:]
    if out[0].isdigit():
        out = _digit_prefix(fallback) + pascal
    if out in _JS_RESERVED:
        out += "Value"
    return out


def kebab_case(name: str) -> str:
    out = []
    prev_lower = False
    for ch in name or "":
        if ch.isalnum():
            if ch.isupper() and prev_lower:
                out.append("-")
            out.append(ch.lower())
            prev_lower = ch.islower() or ch.isdigit()
        else:
            out.append("-")
            prev_lower = False
    slug = "".join(out).strip("-")
    while "--" in slug:
        slug = slug.replace("--", "-")
    return slug or "unnamed"


def unique_name(base: str, used: set) -> str:
    """Return ``base`` or ``base2``, ``base3``... and record it in ``used``."""
    candidate = base
    n = 2
    while candidate in used:
        candidate = f"{base}{n}"
        n += 1
    used.add(candidate)
    return candidate


def ts_string(value: str) -> str:
    """Single-quoted TS/JS string literal."""
    escaped = (str(value)
               .replace("\\", "\\\\")
               .replace("'", "\\'")
               .replace("\n", "\\n")
               .replace("\r", "\\r"))
    return f"'{escaped}'"


def ts_literal(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return ts_string(value)


def jsx_text(text: str) -> str:
    """Text child for JSX; anything JSX would reinterpret goes through an expression."""
    text = str(text)
    if not text:
        return ""
    if any(ch in text for ch in "{}<>\n") or text != text.strip() or "&" in text:
        return "{" + json.dumps(text, ensure_ascii=False) + "}"
    return text


def xml_escape(text: str) -> str:
    return html.escape(str(text), quote=True)


def format_number(value: Union[int, float]) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(round(float(value), 3))


def px(value: Union[int, float]) -> str:
    return "0" if value == 0 else f"{format_number(value)}px"


def jsx_attr(name: str, value) -> str:
    if isinstance(value, bool):
        return f"{name}={{{'true' if value else 'false'}}}"
    if isinstance(value, (int, float)):
        return f"{name}={{{format_number(value)}}}"
    value = str(value)
    if '"' in value or "\n" in value:
        return f"{name}={{{ts_string(value)}}}"
    return f'{name}="{value}"'


def style_object(style: dict) -> str:
    """{'width': 120, 'background': 'red'} → "{ width: 120, background: 'red' }"."""
    items = [f"{key}: {ts_literal(value)}" for key, value in style.items()]
    return "{ " + ", ".join(items) + " }" if items else "{}"


def css_block(selector: str, declarations: Optional[Iterable] = None, comment: Optional[str] = None,
              level: int = 0) -> str:
    """CSS rule block; ``declarations`` is a list of (property, value) pairs."""
    pad = INDENT * level
    lines = [f"{pad}{selector} {{"]
    if comment:
        lines.append(f"{pad}{INDENT}{css_comment(comment)}")
    for prop, value in declarations or []:
        lines.append(f"{pad}{INDENT}{prop}: {value};")
    lines.append(f"{pad}}}")
    return "\n".join(lines)


def css_comment(text: str) -> str:
    return "/* " + str(text).replace("*/", "* /") + " */"


def class_segment(value) -> str:
    """Class-name fragment; mirrors the ``toClassName`` helper emitted into components."""
    segment = re.sub(r"[^a-z0-9]+", "-", str(value).lower()).strip("-")
    return segment or "x"


def doc_comment(text: str, level: int = 0) -> str:
    return f"{INDENT * level}/** {str(text).replace('*/', '* /')} */"
