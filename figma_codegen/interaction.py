"""
Interaction model (IML): IRS + classifier output → states, ARIA mapping,
keyboard map and interaction rules.
"""

from typing import Optional

IML_VERSION = "1.0.0"

STATE_TRIGGERS = {
    "default": "",
    "hover": ":hover",
    "pressed": ":active",
    "focus": ":focus",
    "disabled": ":disabled",
    "custom": "",
}

_ENTER_SPACE_ACTIVATE = [
    {"key": "Enter", "action": "activate", "preventDefault": True},
    {"key": "Space", "action": "activate", "preventDefault": True},
]

_LISTBOX_KEYS = [
    {"key": "Enter", "action": "open", "target": "listbox", "preventDefault": True},
    {"key": "Escape", "action": "close", "target": "listbox", "preventDefault": True},
    {"key": "ArrowDown", "action": "selectNext", "target": "option", "preventDefault": True},
    {"key": "ArrowUp", "action": "selectPrevious", "target": "option", "preventDefault": True},
    {"key": "Home", "action": "selectFirst", "target": "option", "preventDefault": True},
    {"key": "End", "action": "selectLast", "target": "option", "preventDefault": True},
]

KEYBOARD_MAPS = {
    "button": _ENTER_SPACE_ACTIVATE,
    "iconButton": _ENTER_SPACE_ACTIVATE,
    "link": [{"key": "Enter", "action": "activate", "preventDefault": False}],
    "combobox": _LISTBOX_KEYS,
    "select": _LISTBOX_KEYS,
    "dialog": [
        {"key": "Escape", "action": "close", "preventDefault": True},
        {"key": "Tab", "action": "trapFocus", "preventDefault": False},
    ],
    "modal": [
        {"key": "Escape", "action": "close", "preventDefault": True},
        {"key": "Tab", "action": "trapFocus", "preventDefault": False},
    ],
    "menu": [
        {"key": "Escape", "action": "close", "preventDefault": True},
        {"key": "ArrowDown", "action": "selectNext", "target": "menuitem", "preventDefault": True},
        {"key": "ArrowUp", "action": "selectPrevious", "target": "menuitem", "preventDefault": True},
        {"key": "Enter", "action": "activate", "target": "menuitem", "preventDefault": True},
        {"key": "Space", "action": "activate", "target": "menuitem", "preventDefault": True},
    ],
    "checkbox": [
        {"key": "Space", "action": "toggle", "preventDefault": True},
    ],
    "switch": [
        {"key": "Enter", "action": "toggle", "preventDefault": True},
        {"key": "Space", "action": "toggle", "preventDefault": True},
    ],
    "radio": [
        {"key": "ArrowDown", "action": "selectNext", "preventDefault": True},
        {"key": "ArrowRight", "action": "selectNext", "preventDefault": True},
        {"key": "ArrowUp", "action": "selectPrevious", "preventDefault": True},
        {"key": "ArrowLeft", "action": "selectPrevious", "preventDefault": True},
    ],
    "slider": [
        {"key": "ArrowRight", "action": "increase", "preventDefault": True},
        {"key": "ArrowUp", "action": "increase", "preventDefault": True},
        {"key": "ArrowLeft", "action": "decrease", "preventDefault": True},
        {"key": "ArrowDown", "action": "decrease", "preventDefault": True},
        {"key": "Home", "action": "setMin", "preventDefault": True},
        {"key": "End", "action": "setMax", "preventDefault": True},
    ],
}
KEYBOARD_MAPS["dropdown"] = KEYBOARD_MAPS["menu"]

# (state, enter trigger, leave trigger)
_STATE_RULE_PAIRS = (
    ("hover", "onMouseEnter", "onMouseLeave"),
    ("pressed", "onMouseDown", "onMouseUp"),
    ("focus", "onFocus", "onBlur"),
)


def build_states(irs: dict, category: str) -> list[dict]:
    """One entry per semantic state, ``default`` first."""
    ordered = ["default"]
    for entry in irs.get("stateMapping") or []:
        state = entry.get("semanticState", "custom")
        if state not in ordered:
            ordered.append(state)

    states = []
    for name in ordered:
        state = {"name": name, "trigger": STATE_TRIGGERS.get(name, ""), "changes": {}}
        if name == "disabled":
            state["ariaAttributes"] = {"aria-disabled": "true"}
        elif name == "focus" and category in ("combobox", "select"):
            state["ariaAttributes"] = {"aria-expanded": "true"}
        states.append(state)
    return states


def _first_slot(slots: list[dict], *prefixes: str) -> Optional[str]:
    for slot in slots:
        if any(slot["name"].startswith(p) for p in prefixes):
            return slot["name"]
    return None


def refine_aria(suggested: dict, slots: list[dict], category: str) -> dict:
    aria = dict(suggested or {})
    label = _first_slot(slots, "label")
    if label:
        aria["ariaLabelledBy"] = f"{label}-id"
    described = [s for s in (_first_slot(slots, "helperText", "description"),
                             _first_slot(slots, "errorText")) if s]
    if described:
        aria["ariaDescribedBy"] = " ".join(f"{s}-id" for s in described)
    if category in ("combobox", "select"):
        options = _first_slot(slots, "list", "options")
        if options:
            aria["ariaControls"] = f"{options}-id"
    return aria


def keyboard_map(category: str) -> list[dict]:
    return [dict(entry) for entry in KEYBOARD_MAPS.get(category, [])]


def interaction_rules(category: str, states: list[dict]) -> list[dict]:
    rules = []
    if category in ("button", "iconButton", "link"):
        rules.append({"trigger": "onClick", "action": "activate", "target": "button"})
    if category in ("combobox", "select", "menu", "dropdown"):
        rules.append({"trigger": "onFocus", "action": "open", "target": "listbox"})
        rules.append({"trigger": "onBlur", "action": "close", "target": "listbox",
                      "condition": "!isMouseInside"})
    if category in ("dialog", "modal"):
        rules.append({"trigger": "onOpenChange", "action": "toggle", "target": "dialog"})

    names = {state["name"] for state in states}
    for state, enter, leave in _STATE_RULE_PAIRS:
        if state in names:
            rules.append({"trigger": enter, "action": "setState", "target": state})
            rules.append({"trigger": leave, "action": "setState", "target": "default"})
    return rules


def build_iml(irs: dict, intelligence: dict) -> dict:
    category = intelligence.get("category", "unknown")
    states = build_states(irs, category)
    return {
        "version": IML_VERSION,
        "componentCategory": category,
        "states": states,
        "aria": refine_aria(intelligence.get("suggestedARIA", {}), irs.get("slots", []), category),
        "keyboard": keyboard_map(category),
        "interactions": interaction_rules(category, states),
        "requiredPrimitives": list(intelligence.get("requiredPrimitives", [])),
    }
