"""
generator.py — IRS + IRT + IML → React component artifacts

Four text artifacts per component:
  ✅ <Name>.tsx          component, one template per archetype family
  ✅ <Name>.types.ts     props interface (variants, slots, ARIA, handlers)
  ✅ <Name>.styles.css   root rule, variant/state blocks, disabled rules
  ✅ <Name>.stories.tsx  Storybook CSF stories

Generation is a pure function of its inputs: no clock, no randomness, and
every collection is emitted in IR order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .classifier import ARCHETYPES
from .node_renderer import build_style_token_table, render_node
from .story import render_story
from .stylesheet import render_styles
from .templating import (
    INDENT,
    camel_case,
    class_segment,
    doc_comment,
    jsx_attr,
    jsx_text,
    kebab_case,
    pascal_case,
    ts_literal,
    ts_string,
    unique_name,
)
from .tree import walk

logger = logging.getLogger(__name__)

_RESERVED_LOCALS = {
    "React", "className", "children", "tokenOverrides", "disabled",
    "ariaLabel", "ariaLabelledBy", "ariaDescribedBy",
    "onClick", "onFocus", "onBlur", "onOpenChange", "onKeyboardAction",
    "interactionState", "setInteractionState", "isOpen", "setIsOpen",
    "overrideStyles", "componentClassName", "toClassName", "handleKeyDown",
    "inputId", "event", "next",
}

# public handler props, in declaration order
_EVENT_TYPES = {
    "onClick": "(event: React.MouseEvent<HTMLElement>) => void",
    "onFocus": "(event: React.FocusEvent<HTMLElement>) => void",
    "onBlur": "(event: React.FocusEvent<HTMLElement>) => void",
    "onOpenChange": "(open: boolean) => void",
}

_ARIA_PROPS = (
    ("ariaLabel", "aria-label"),
    ("ariaLabelledBy", "aria-labelledby"),
    ("ariaDescribedBy", "aria-describedby"),
)

_CONDITIONS = {
    "!isMouseInside": "!event.currentTarget.contains(event.relatedTarget as Node | null)",
}

_KEY_NAMES = {"Space": " "}


@dataclass
class PropSpec:
    key: str
    local: str
    ts_type: str
    doc: str = ""
    kind: str = ""
    source: str = ""
    values: list = field(default_factory=list)

    @property
    def binding(self) -> str:
        return self.local if self.key == self.local else f"{self.key}: {self.local}"


@dataclass
class GeneratedCode:
    component: str
    types: str
    styles: str
    story: str
    content_source: str = "children"

    def as_dict(self) -> dict:
        return {
            "component": self.component,
            "types": self.types,
            "styles": self.styles,
            "story": self.story,
        }


def component_name(name: str) -> str:
    return pascal_case(name, fallback="Component")


def variant_axes(irs: dict) -> list[tuple[str, list[str]]]:
    """Variant property keys with their observed values, in first-seen order."""
    axes: dict[str, list[str]] = {}
    for variant in irs.get("variants") or []:
        for key, value in (variant.get("properties") or {}).items():
            values = axes.setdefault(key, [])
            if value not in values:
                values.append(value)
    return list(axes.items())


def _state_names(iml: dict) -> list[str]:
    return [s["name"] for s in iml.get("states") or []] or ["default"]


def collect_props(irs: dict, iml: dict, key_handler: bool = False) -> list[PropSpec]:
    used = set(_RESERVED_LOCALS)
    props = []
    for key, values in variant_axes(irs):
        local = unique_name(camel_case(key), used)
        props.append(PropSpec(local, local, " | ".join(ts_string(v) for v in values),
                              doc=f'Figma variant property "{key}".', kind="variant", source=key, values=values))
    for slot in irs.get("slots") or []:
        local = unique_name(camel_case(slot["name"]), used)
        props.append(PropSpec(local, local, "React.ReactNode",
                              doc=f'Content for the "{slot["name"]}" slot.', kind="slot", source=slot["name"]))

    if "disabled" in _state_names(iml):
        props.append(PropSpec("disabled", "disabled", "boolean", kind="base"))

    aria = iml.get("aria") or {}
    for field_name, attr in _ARIA_PROPS:
        if aria.get(field_name):
            props.append(PropSpec(f"'{attr}'", field_name, "string", kind="aria", source=field_name))

    triggers = {rule.get("trigger") for rule in iml.get("interactions") or []}
    for trigger, ts_type in _EVENT_TYPES.items():
        if trigger in triggers:
            props.append(PropSpec(trigger, trigger, ts_type, kind="event", source=trigger))
    if key_handler:
        props.append(PropSpec("onKeyboardAction", "onKeyboardAction",
                              "(action: string, event: React.KeyboardEvent<HTMLElement>) => void",
                              doc="Called with the mapped action for handled keys.", kind="event"))

    props.append(PropSpec("tokenOverrides", "tokenOverrides", "Record<string, string>",
                          doc="Design-token overrides applied as CSS custom properties.", kind="base"))
    props.append(PropSpec("className", "className", "string", kind="base"))
    props.append(PropSpec("children", "children", "React.ReactNode", kind="base"))
    return props


# ════════════════════════════════════════════════════════════
# Types
# ════════════════════════════════════════════════════════════

def render_types(name: str, iml: dict, props: list[PropSpec]) -> str:
    lines = ["import type * as React from 'react';", ""]
    states = _state_names(iml)
    if len(states) > 1:
        lines.append(f"export type {name}State = {' | '.join(ts_string(s) for s in states)};")
        lines.append("")
    lines.append(f"export interface {name}Props {{")
    for prop in props:
        if prop.doc:
            lines.append(doc_comment(prop.doc, 1))
        lines.append(f"{INDENT}{prop.key}?: {prop.ts_type};")
    lines.append("}")
    return "\n".join(lines) + "\n"


# ════════════════════════════════════════════════════════════
# Component templates
# ════════════════════════════════════════════════════════════

@dataclass
class RenderContext:
    name: str
    base_class: str
    irs: dict
    iml: dict
    tokens: dict
    props: list[PropSpec]
    namespace: Optional[str] = None
    primitive: Optional[str] = None
    key_handler: bool = False
    used: set = field(default_factory=set)
    needs_open: bool = False
    needs_input_id: bool = False
    content_source: str = "children"

    @property
    def category(self) -> str:
        return self.iml.get("componentCategory", "unknown")

    @property
    def multi_state(self) -> bool:
        return len(_state_names(self.iml)) > 1

    def prop(self, kind: str, source: str) -> Optional[PropSpec]:
        return next((p for p in self.props if p.kind == kind and p.source == source), None)

    def has_prop(self, local: str) -> bool:
        return any(p.local == local for p in self.props)

    def use(self, local: str) -> str:
        self.used.add(local)
        return local


def _action_statement(ctx: RenderContext, rule: dict) -> Optional[str]:
    action = rule.get("action")
    if action == "setState" and ctx.multi_state:
        return f"setInteractionState({ts_string(rule.get('target', 'default'))});"
    if action == "open":
        ctx.needs_open = True
        return "setIsOpen(true);"
    if action == "close":
        ctx.needs_open = True
        return "setIsOpen(false);"
    return None


def _handler_attrs(ctx: RenderContext, exclude: tuple = ()) -> list[str]:
    groups: dict[str, list[dict]] = {}
    for rule in ctx.iml.get("interactions") or []:
        trigger = rule.get("trigger", "")
        if trigger and trigger not in exclude:
            groups.setdefault(trigger, []).append(rule)

    attrs = []
    for trigger, rules in groups.items():
        statements = []
        for rule in rules:
            statement = _action_statement(ctx, rule)
            if not statement:
                continue
            condition = rule.get("condition")
            if condition:
                statement = f"if ({_CONDITIONS.get(condition, condition)}) {statement}"
            if statement not in statements:
                statements.append(statement)
        forward = trigger in _EVENT_TYPES and ctx.has_prop(trigger)
        if forward:
            ctx.use(trigger)
        if not statements:
            if forward:
                attrs.append(f"{trigger}={{{trigger}}}")
            continue
        if forward:
            statements.append(f"{trigger}?.(event);")
        param = "event" if any("event" in s for s in statements) else ""
        attrs.append(f"{trigger}={{({param}) => {{ {' '.join(statements)} }}}}")
    return attrs


def _aria_attrs(ctx: RenderContext, include_role: bool = True) -> list[str]:
    out = []
    for key, value in (ctx.iml.get("aria") or {}).items():
        if value is None:
            continue
        if key == "role":
            if include_role:
                out.append(jsx_attr("role", value))
            continue
        if not key.startswith("aria") or len(key) <= 4:
            continue
        attr = "aria-" + key[4:].lower()
        prop = ctx.prop("aria", key)
        if prop:
            out.append(f"{attr}={{{ctx.use(prop.local)} ?? {ts_literal(value)}}}")
        elif key == "ariaExpanded" and ctx.needs_open:
            out.append("aria-expanded={isOpen}")
        else:
            out.append(jsx_attr(attr, value))
    return out


def _root_attrs(ctx: RenderContext, include_role: bool = True) -> list[str]:
    attrs = ["className={componentClassName}", "style={overrideStyles}"]
    ctx.use("className")
    ctx.use("tokenOverrides")
    if ctx.multi_state:
        attrs.append("data-state={interactionState}")
    attrs.extend(_aria_attrs(ctx, include_role))
    return attrs


def _element(tag: str, attrs: list[str], content: list[str], level: int) -> list[str]:
    pad = INDENT * level
    lines = [f"{pad}<{tag}"] + [f"{pad}{INDENT}{a}" for a in attrs]
    if not content:
        lines.append(f"{pad}/>")
        return lines
    lines.append(f"{pad}>")
    lines.extend(content)
    lines.append(f"{pad}</{tag}>")
    return lines


def _slot_markup(ctx: RenderContext, prop: PropSpec, level: int, tag: str = "span", extra: str = "") -> str:
    local = ctx.use(prop.local)
    attrs = [jsx_attr("className", f"{ctx.base_class}__{kebab_case(prop.source)}"),
             jsx_attr("data-slot", prop.source), jsx_attr("id", f"{prop.source}-id")]
    if extra:
        attrs.append(extra)
    return f"{INDENT * level}{{{local} && <{tag} {' '.join(attrs)}>{{{local}}}</{tag}>}}"


def _children_placeholder(ctx: RenderContext, level: int) -> list[str]:
    ctx.content_source = "children"
    return [f"{INDENT * level}{{{ctx.use('children')}}}"]


def _content(ctx: RenderContext, level: int) -> list[str]:
    """Structural sub-tree first, then slots, then the children placeholder."""
    root = ctx.irs.get("tree") or {}
    children = root.get("children") or []
    if children:
        ctx.content_source = "tree"
        if ctx.irs.get("meta", {}).get("componentType") == "component-set":
            children = children[:1]
        in_tree = {node.get("slotName") for child in children for node in walk(child)}
        slots = {p.source: ctx.use(p.local) for p in ctx.props if p.kind == "slot" and p.source in in_tree}
        return [render_node(child, level, ctx.tokens, slots) for child in children]
    slots = [p for p in ctx.props if p.kind == "slot"]
    if slots:
        ctx.content_source = "slots"
        return [_slot_markup(ctx, p, level) for p in slots]
    return _children_placeholder(ctx, level)


def _key_handler_attrs(ctx: RenderContext) -> list[str]:
    if not ctx.key_handler:
        return []
    ctx.use("onKeyboardAction")
    return ["tabIndex={0}", "onKeyDown={handleKeyDown}"]


def _button_template(ctx: RenderContext) -> list[str]:
    attrs = ['type="button"'] + _root_attrs(ctx, include_role=False)
    if ctx.has_prop("disabled"):
        attrs.append(f"disabled={{{ctx.use('disabled')}}}")
    attrs.extend(_handler_attrs(ctx))
    return _element("button", attrs, _content(ctx, 3), 2)


def _input_template(ctx: RenderContext) -> list[str]:
    ctx.needs_input_id = True
    field_tag = "textarea" if ctx.category == "textarea" else "input"
    slots = {p.source: p for p in ctx.props if p.kind == "slot"}
    before = [p for name, p in slots.items() if name.startswith(("label", "prefix"))]
    after = [p for name, p in slots.items() if p not in before]

    content = []
    for prop in before:
        if prop.source.startswith("label"):
            content.append(_slot_markup(ctx, prop, 3, tag="label", extra="htmlFor={inputId}"))
        else:
            content.append(_slot_markup(ctx, prop, 3))

    field_attrs = [jsx_attr("className", f"{ctx.base_class}__field"), "id={inputId}"]
    field_attrs.extend(_aria_attrs(ctx, include_role=False))
    if ctx.has_prop("disabled"):
        field_attrs.append(f"disabled={{{ctx.use('disabled')}}}")
    field_attrs.extend(_handler_attrs(ctx))
    content.extend(_element(field_tag, field_attrs, [], 3))

    for prop in after:
        content.append(_slot_markup(ctx, prop, 3))
    if slots:
        ctx.content_source = "slots"
    else:
        content.extend(_children_placeholder(ctx, 3))

    attrs = ["className={componentClassName}", "style={overrideStyles}"]
    ctx.use("className")
    ctx.use("tokenOverrides")
    if ctx.multi_state:
        attrs.append("data-state={interactionState}")
    return _element("div", attrs, content, 2)


def _trigger_label(ctx: RenderContext, fallback: str) -> str:
    label = next((p for p in ctx.props if p.kind == "slot" and p.source.startswith("label")), None)
    if label:
        return f"{{{ctx.use(label.local)} ?? {ts_string(fallback)}}}"
    return jsx_text(fallback)


def _listbox_template(ctx: RenderContext) -> list[str]:
    ctx.needs_open = True
    ns = ctx.namespace
    if ns is None:
        attrs = _root_attrs(ctx) + _handler_attrs(ctx) + _key_handler_attrs(ctx)
        listbox = _element("div", [jsx_attr("className", f"{ctx.base_class}__listbox"), 'id="listbox-id"',
                                   'role="listbox"', "hidden={!isOpen}"], _content(ctx, 4), 3)
        return _element("div", attrs, listbox, 2)

    pad = INDENT * 2
    lines = [f"{pad}<{ns}.Root open={{isOpen}} onOpenChange={{setIsOpen}}>"]
    if ns == "Select":
        trigger_attrs = _root_attrs(ctx, include_role=False) + _handler_attrs(ctx)
        trigger_content = [
            f"{pad}{INDENT * 2}<Select.Value placeholder={{{ts_string('Select an option')}}} />",
            f"{pad}{INDENT * 2}<Select.Icon className=\"{ctx.base_class}__icon\" />",
        ]
        lines.extend(_element("Select.Trigger", trigger_attrs, trigger_content, 3))
        lines.append(f"{pad}{INDENT}<Select.Portal>")
        lines.append(f"{pad}{INDENT * 2}<Select.Content className=\"{ctx.base_class}__content\" position=\"popper\">")
        lines.append(f"{pad}{INDENT * 3}<Select.Viewport id=\"listbox-id\">")
        lines.extend(_content(ctx, 7))
        lines.append(f"{pad}{INDENT * 3}</Select.Viewport>")
        lines.append(f"{pad}{INDENT * 2}</Select.Content>")
        lines.append(f"{pad}{INDENT}</Select.Portal>")
    else:
        lines.append(f"{pad}{INDENT}<{ns}.Trigger asChild>")
        trigger_attrs = ['type="button"'] + _root_attrs(ctx) + _handler_attrs(ctx)
        lines.extend(_element("button", trigger_attrs, [f"{pad}{INDENT * 3}{_trigger_label(ctx, 'Select an option')}"], 4))
        lines.append(f"{pad}{INDENT}</{ns}.Trigger>")
        lines.append(f"{pad}{INDENT}<{ns}.Portal>")
        lines.append(f"{pad}{INDENT * 2}<{ns}.Content className=\"{ctx.base_class}__content\" id=\"listbox-id\" role=\"listbox\">")
        lines.extend(_content(ctx, 6))
        lines.append(f"{pad}{INDENT * 2}</{ns}.Content>")
        lines.append(f"{pad}{INDENT}</{ns}.Portal>")
    lines.append(f"{pad}</{ns}.Root>")
    return lines


def _dialog_template(ctx: RenderContext) -> list[str]:
    ctx.needs_open = True
    ns = ctx.namespace
    pad = INDENT * 2
    trigger_label = _trigger_label(ctx, "Open")

    if ns is None:
        lines = [f"{pad}<>"]
        lines.append(f"{pad}{INDENT}<button type=\"button\" className=\"{ctx.base_class}__trigger\" "
                     f"onClick={{() => setIsOpen(true)}}>")
        lines.append(f"{pad}{INDENT * 2}{trigger_label}")
        lines.append(f"{pad}{INDENT}</button>")
        lines.append(f"{pad}{INDENT}{{isOpen && (")
        lines.append(f"{pad}{INDENT * 2}<div className=\"{ctx.base_class}__overlay\" role=\"presentation\">")
        attrs = _root_attrs(ctx) + _handler_attrs(ctx, exclude=("onOpenChange",)) + _key_handler_attrs(ctx)
        lines.extend(_element("div", attrs, _content(ctx, 6), 5))
        lines.append(f"{pad}{INDENT * 2}</div>")
        lines.append(f"{pad}{INDENT})}}")
        lines.append(f"{pad}</>")
        return lines

    on_change = "setIsOpen"
    if ctx.has_prop("onOpenChange"):
        on_change = f"(next) => {{ setIsOpen(next); {ctx.use('onOpenChange')}?.(next); }}"
    lines = [f"{pad}<{ns}.Root open={{isOpen}} onOpenChange={{{on_change}}}>"]
    lines.append(f"{pad}{INDENT}<{ns}.Trigger asChild>")
    lines.append(f"{pad}{INDENT * 2}<button type=\"button\" className=\"{ctx.base_class}__trigger\">"
                 f"{trigger_label}</button>")
    lines.append(f"{pad}{INDENT}</{ns}.Trigger>")
    lines.append(f"{pad}{INDENT}<{ns}.Portal>")
    lines.append(f"{pad}{INDENT * 2}<{ns}.Overlay className=\"{ctx.base_class}__overlay\" />")
    attrs = _root_attrs(ctx, include_role=False) + _handler_attrs(ctx, exclude=("onOpenChange",))
    content = [f"{pad}{INDENT * 4}<{ns}.Title className=\"{ctx.base_class}__title\" id=\"dialog-title\">"
               f"{jsx_text(ctx.irs.get('meta', {}).get('name') or ctx.name)}</{ns}.Title>"]
    content.extend(_content(ctx, 6))
    lines.extend(_element(f"{ns}.Content", attrs, content, 4))
    lines.append(f"{pad}{INDENT}</{ns}.Portal>")
    lines.append(f"{pad}</{ns}.Root>")
    return lines


def _generic_template(ctx: RenderContext) -> list[str]:
    attrs = _root_attrs(ctx)
    if ctx.has_prop("disabled") and "ariaDisabled" not in (ctx.iml.get("aria") or {}):
        attrs.append(f"aria-disabled={{{ctx.use('disabled')} || undefined}}")
    attrs.extend(_handler_attrs(ctx))
    attrs.extend(_key_handler_attrs(ctx))
    return _element("div", attrs, _content(ctx, 3), 2)


_TEMPLATES: dict[str, Callable[[RenderContext], list[str]]] = {
    "button": _button_template,
    "iconButton": _button_template,
    "input": _input_template,
    "textarea": _input_template,
    "combobox": _listbox_template,
    "select": _listbox_template,
    "dialog": _dialog_template,
    "modal": _dialog_template,
}


def select_template(category: str) -> Callable[[RenderContext], list[str]]:
    template = _TEMPLATES.get(category)
    if template is None:
        if category not in ARCHETYPES:
            logger.warning("Unknown archetype %r; falling back to the generic container template", category)
        template = _generic_template
    return template


def _namespace(iml: dict, template: Callable) -> tuple[Optional[str], Optional[str]]:
    if template not in (_listbox_template, _dialog_template):
        return None, None
    for primitive in iml.get("requiredPrimitives") or []:
        if primitive.startswith("@radix-ui/react-"):
            return pascal_case(primitive[len("@radix-ui/react-"):]), primitive
    return None, None


def _uses_key_handler(iml: dict, template: Callable, namespace: Optional[str]) -> bool:
    if not iml.get("keyboard"):
        return False
    if template is _generic_template:
        return True
    return namespace is None and template in (_listbox_template, _dialog_template)


def _key_handler_lines(ctx: RenderContext) -> list[str]:
    pad = INDENT
    lines = [f"{pad}const handleKeyDown = (event: React.KeyboardEvent<HTMLElement>) => {{",
             f"{pad * 2}switch (event.key) {{"]
    seen = set()
    for mapping in ctx.iml.get("keyboard") or []:
        key = _KEY_NAMES.get(mapping["key"], mapping["key"])
        if key in seen:
            continue
        seen.add(key)
        lines.append(f"{pad * 3}case {ts_string(key)}:")
        if mapping.get("preventDefault"):
            lines.append(f"{pad * 4}event.preventDefault();")
        if ctx.needs_open and mapping["action"] in ("open", "close"):
            lines.append(f"{pad * 4}setIsOpen({'true' if mapping['action'] == 'open' else 'false'});")
        lines.append(f"{pad * 4}onKeyboardAction?.({ts_string(mapping['action'])}, event);")
        lines.append(f"{pad * 4}break;")
    lines.append(f"{pad * 3}default:")
    lines.append(f"{pad * 4}break;")
    lines.append(f"{pad * 2}}}")
    lines.append(f"{pad}}};")
    return lines


def render_component(ctx: RenderContext, template: Callable[[RenderContext], list[str]]) -> str:
    body = template(ctx)
    name, base = ctx.name, ctx.base_class
    variant_props = [p for p in ctx.props if p.kind == "variant"]
    for prop in variant_props:
        ctx.use(prop.local)

    lines = ["import React from 'react';"]
    if ctx.namespace and ctx.primitive:
        lines.append(f"import * as {ctx.namespace} from '{ctx.primitive}';")
    type_names = [f"{name}Props"] + ([f"{name}State"] if ctx.multi_state else [])
    lines.append(f"import type {{ {', '.join(type_names)} }} from './{name}.types';")
    lines.append(f"import './{name}.styles.css';")
    lines.append("")
    if variant_props:
        lines.append("const toClassName = (value: string) =>")
        lines.append(f"{INDENT}value.toLowerCase().replace(/[^a-z0-9]+/g, '-').replace(/^-+|-+$/g, '') || 'x';")
        lines.append("")

    lines.append(f"export const {name}: React.FC<{name}Props> = ({{")
    for prop in ctx.props:
        if prop.local in ctx.used:
            lines.append(f"{INDENT}{prop.binding},")
    lines.append("}) => {")

    if ctx.needs_input_id:
        lines.append(f"{INDENT}const inputId = React.useId();")
    if ctx.multi_state:
        lines.append(f"{INDENT}const [interactionState, setInteractionState] = "
                     f"React.useState<{name}State>('default');")
    if ctx.needs_open:
        lines.append(f"{INDENT}const [isOpen, setIsOpen] = React.useState(false);")
    lines.append(f"{INDENT}const overrideStyles = tokenOverrides")
    lines.append(f"{INDENT * 2}? (Object.fromEntries(")
    lines.append(f"{INDENT * 4}Object.entries(tokenOverrides).map(([token, value]) => [`--${{token}}`, value]),")
    lines.append(f"{INDENT * 3}) as React.CSSProperties)")
    lines.append(f"{INDENT * 2}: undefined;")

    lines.append(f"{INDENT}const componentClassName = [")
    lines.append(f"{INDENT * 2}{ts_string(base)},")
    if ctx.multi_state:
        lines.append(f"{INDENT * 2}interactionState !== 'default' && `{base}--${{interactionState}}`,")
    for prop in variant_props:
        lines.append(f"{INDENT * 2}{prop.local} && `{base}--{class_segment(prop.source)}-"
                     f"${{toClassName(String({prop.local}))}}`,")
    if "disabled" in ctx.used:
        lines.append(f"{INDENT * 2}disabled && {ts_string(base + '--disabled')},")
    lines.append(f"{INDENT * 2}className,")
    lines.append(f"{INDENT}].filter(Boolean).join(' ');")

    if ctx.key_handler:
        lines.append("")
        lines.extend(_key_handler_lines(ctx))

    lines.append("")
    lines.append(f"{INDENT}return (")
    lines.extend(body)
    lines.append(f"{INDENT});")
    lines.append("};")
    lines.append("")
    lines.append(f"{name}.displayName = {ts_string(name)};")
    lines.append("")
    lines.append(f"export default {name};")
    return "\n".join(lines) + "\n"


def generate(name: str, irs: dict, irt: Optional[dict], iml: dict,
             token_matches: Optional[list] = None) -> GeneratedCode:
    """IRS + IRT + IML (+ optional token matches) → component/types/styles/story text."""
    comp_name = component_name(name)
    base_class = kebab_case(comp_name)
    category = iml.get("componentCategory", "unknown")
    template = select_template(category)
    namespace, primitive = _namespace(iml, template)
    key_handler = _uses_key_handler(iml, template, namespace)
    props = collect_props(irs, iml, key_handler=key_handler)
    tokens = build_style_token_table(irt, token_matches)

    ctx = RenderContext(
        name=comp_name,
        base_class=base_class,
        irs=irs,
        iml=iml,
        tokens=tokens,
        props=props,
        namespace=namespace,
        primitive=primitive,
        key_handler=key_handler,
    )
    component = render_component(ctx, template)
    return GeneratedCode(
        component=component,
        types=render_types(comp_name, iml, props),
        styles=render_styles(comp_name, base_class, irs, iml, tokens, token_matches),
        story=render_story(comp_name, irs, iml, props),
        content_source=ctx.content_source,
    )
