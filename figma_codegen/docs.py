"""MDX documentation page for a generated component."""

from typing import Optional

from .generator import collect_props, component_name
from .story import variant_groups

MAX_TOKEN_ROWS = 20


def _code(text) -> str:
    return "`" + str(text).replace("`", "'").replace("|", "\\|") + "`"


def _cell(text) -> str:
    return str(text).replace("|", "\\|").replace("\n", " ")


def _usage(name: str, irs: dict, text: str) -> list[str]:
    label = next((s["name"] for s in irs.get("slots") or [] if s["name"].startswith("label")), None)
    lines = ["```tsx", f"import {{ {name} }} from './{name}';", ""]
    if label:
        lines.append(f'<{name} {label}="{text}" />')
    else:
        lines.append(f"<{name}>{text}</{name}>")
    lines.append("```")
    return lines


def render_docs(name: str, irs: dict, irt: Optional[dict], iml: dict) -> str:
    comp = component_name(name)
    meta = irs.get("meta") or {}
    category = iml.get("componentCategory", "unknown")
    out = [f"# {comp}", "",
           f"{comp} is a React component generated from Figma (archetype: {_code(category)}).", ""]
    if meta.get("figmaUrl"):
        out += [f"**Figma Design:** [View in Figma]({meta['figmaUrl']})", ""]

    out += ["## Usage", ""] + _usage(comp, irs, comp) + [""]

    groups = variant_groups(irs)
    if groups:
        out += ["## Variants", ""]
        for variant in groups:
            properties = variant.get("properties") or {}
            out += [f"### {' '.join(properties.values()) or variant.get('name', '')}", "", "```tsx", f"<{comp}"]
            out += [f'  {key}="{value}"' for key, value in properties.items()]
            out += ["/>", "```", ""]

    out += ["## Props", "", "| Prop | Type | Description |", "|------|------|-------------|"]
    for prop in collect_props(irs, iml):
        out.append(f"| {_code(prop.key.strip(chr(39)))} | {_code(prop.ts_type)} | {_cell(prop.doc or '-')} |")
    out.append("")

    tokens = (irt or {}).get("tokens") or []
    if tokens:
        out += ["## Design Tokens", "", "| Token | Value | Type |", "|-------|-------|------|"]
        for token in tokens[:MAX_TOKEN_ROWS]:
            value = token.get("value")
            if isinstance(value, dict):
                value = f"alias → {token.get('aliasOf', value.get('id', '?'))}"
            out.append(f"| {_code(token['name'])} | {_code(value)} | {token['type']} |")
        if len(tokens) > MAX_TOKEN_ROWS:
            out.append(f"\n_{len(tokens) - MAX_TOKEN_ROWS} more tokens not shown._")
        out.append("")

    aria = iml.get("aria") or {}
    out += ["## Accessibility", ""]
    if aria.get("role"):
        out.append(f"- **ARIA Role:** {_code(aria['role'])}")
    if aria.get("ariaLabel"):
        out.append(f"- **ARIA Label:** {_code(aria['ariaLabel'])}")
    if aria.get("ariaLabelledBy"):
        out.append(f"- **ARIA Labelled By:** {_code(aria['ariaLabelledBy'])}")
    if aria.get("ariaDescribedBy"):
        out.append(f"- **ARIA Described By:** {_code(aria['ariaDescribedBy'])}")
    keyboard = iml.get("keyboard") or []
    if keyboard:
        out += ["", "### Keyboard Navigation", "", "| Key | Action |", "|-----|--------|"]
        out += [f"| {_code(k['key'])} | {k['action']} |" for k in keyboard]
    out.append("")

    states = iml.get("states") or []
    if states:
        out += ["## States", ""]
        for state in states:
            trigger = f" (trigger: {_code(state['trigger'])})" if state.get("trigger") else ""
            out.append(f"- **{state['name']}**{trigger}")
        out.append("")
    return "\n".join(out)
