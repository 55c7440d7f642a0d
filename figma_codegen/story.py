"""Storybook CSF3 story file for a generated component."""

from .templating import INDENT, pascal_case, ts_literal, ts_string, unique_name

MAX_VARIANT_STORIES = 10

_PSEUDO_STATES = {"hover": "hover", "pressed": "active", "focus": "focus"}


def _content_arg(props: list, text: str) -> str:
    label = next((p for p in props if p.kind == "slot" and p.source.startswith("label")), None)
    key = label.local if label else "children"
    return f"{INDENT * 2}{key}: {ts_string(text)},"


def _story(export_name: str, args: list[str], description: str, extra: list[str] = ()) -> list[str]:
    lines = [f"export const {export_name}: Story = {{", f"{INDENT}args: {{"]
    lines.extend(args)
    lines.append(f"{INDENT}}},")
    lines.append(f"{INDENT}parameters: {{")
    lines.extend(extra)
    lines.append(f"{INDENT * 2}docs: {{ description: {{ story: {ts_string(description)} }} }},")
    lines.append(f"{INDENT}}},")
    lines.append("};")
    lines.append("")
    return lines


def variant_groups(irs: dict) -> list[dict]:
    """First variant of each property-key signature, capped at ``MAX_VARIANT_STORIES``."""
    seen, out = set(), []
    for variant in irs.get("variants") or []:
        signature = tuple(sorted((variant.get("properties") or {}).keys()))
        if signature in seen:
            continue
        seen.add(signature)
        out.append(variant)
        if len(out) >= MAX_VARIANT_STORIES:
            break
    return out


def _a11y_rules(iml: dict) -> list[str]:
    aria = iml.get("aria") or {}
    rules = []
    if aria.get("ariaLabel"):
        rules.append("aria-label")
    if aria.get("ariaLabelledBy"):
        rules.append("aria-labelledby")
    if iml.get("componentCategory") in ("button", "iconButton"):
        rules.append("button-name")
    return rules


def render_story(name: str, irs: dict, iml: dict, props: list) -> str:
    lines = [
        "import type { Meta, StoryObj } from '@storybook/react';",
        f"import {{ {name} }} from './{name}';",
        "",
        f"const meta: Meta<typeof {name}> = {{",
        f"{INDENT}title: {ts_string('Components/' + name)},",
        f"{INDENT}component: {name},",
        f"{INDENT}tags: ['autodocs'],",
        f"{INDENT}parameters: {{",
        f"{INDENT * 2}docs: {{ description: {{ component: {ts_string(name + ' component generated from Figma.')} }} }},",
        f"{INDENT * 2}a11y: {{",
        f"{INDENT * 3}config: {{",
        f"{INDENT * 4}rules: [",
    ]
    for rule in _a11y_rules(iml):
        lines.append(f"{INDENT * 5}{{ id: {ts_string(rule)}, enabled: true }},")
    lines.extend([f"{INDENT * 4}],", f"{INDENT * 3}}},", f"{INDENT * 2}}},", f"{INDENT}}},"])

    variant_props = [p for p in props if p.kind == "variant"]
    if variant_props:
        lines.append(f"{INDENT}argTypes: {{")
        for prop in variant_props:
            options = ", ".join(ts_string(v) for v in prop.values)
            lines.append(f"{INDENT * 2}{prop.local}: {{ control: 'select', options: [{options}] }},")
        lines.append(f"{INDENT}}},")
    lines.extend(["};", "", "export default meta;", f"type Story = StoryObj<typeof {name}>;", ""])

    used = {"Default", "meta"}
    lines.extend(_story("Default", [_content_arg(props, name)], f"Default {name}."))

    locals_by_key = {p.source: p.local for p in variant_props}
    for index, variant in enumerate(variant_groups(irs), start=1):
        properties = variant.get("properties") or {}
        label = " ".join(properties.values())
        if any(ch.isalnum() for ch in label):
            story_name = pascal_case(label, fallback="Variant")[:30]
        else:
            story_name = f"Variant{index}"
        story_name = unique_name(story_name, used)
        args = [f"{INDENT * 2}{locals_by_key.get(key, key)}: {ts_string(value)},"
                for key, value in properties.items() if key in locals_by_key]
        args.append(_content_arg(props, f"{name} {story_name}"))
        summary = ", ".join(f'{key}="{value}"' for key, value in properties.items())
        lines.extend(_story(story_name, args, f"{name} with {summary}."))

    aria = iml.get("aria") or {}
    if aria.get("ariaLabel") or aria.get("ariaLabelledBy"):
        args = [_content_arg(props, f"Accessible {name}")]
        if aria.get("ariaLabel") and any(p.local == "ariaLabel" for p in props):
            args.append(f"{INDENT * 2}'aria-label': {ts_literal(aria['ariaLabel'])},")
        lines.extend(_story(unique_name("AccessibilityExample", used), args,
                            f"{name} with accessibility attributes."))

    for state in iml.get("states") or []:
        state_name = state["name"]
        if state_name == "default":
            continue
        args = [_content_arg(props, f"{name} ({state_name})")]
        extra = []
        if state_name == "disabled" and any(p.local == "disabled" for p in props):
            args.append(f"{INDENT * 2}disabled: true,")
        if state_name in _PSEUDO_STATES:
            extra.append(f"{INDENT * 2}pseudo: {{ {_PSEUDO_STATES[state_name]}: true }},")
        export_name = unique_name(pascal_case(state_name, fallback="State"), used)
        lines.extend(_story(export_name, args, f"{name} in {state_name} state.", extra))

    return "\n".join(lines)
