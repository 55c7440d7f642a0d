"""
Component classifier: IRS → archetype + confidence + required primitives.

Two rule chains run over the same IRS. Name rules are ordered most specific
first; structural rules read a feature vector collected from the tree. A name
hit (0.9) always beats a structural hit (0.7).
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .tree import max_depth, walk

ARCHETYPES = (
    "button", "iconButton", "input", "textarea", "combobox", "select",
    "dialog", "modal", "popover", "tooltip", "menu", "dropdown",
    "checkbox", "radio", "switch", "slider", "card", "badge",
    "avatar", "link", "text", "container", "unknown",
)

NAME_CONFIDENCE = 0.9
STRUCTURE_CONFIDENCE = 0.7

PRIMITIVES = {
    "combobox": ["@radix-ui/react-popover"],
    "select": ["@radix-ui/react-select"],
    "dialog": ["@radix-ui/react-dialog"],
    "modal": ["@radix-ui/react-dialog"],
    "popover": ["@radix-ui/react-popover"],
    "tooltip": ["@radix-ui/react-tooltip"],
    "menu": ["@radix-ui/react-dropdown-menu"],
    "dropdown": ["@radix-ui/react-dropdown-menu"],
    "checkbox": ["@radix-ui/react-checkbox"],
    "radio": ["@radix-ui/react-radio-group"],
    "switch": ["@radix-ui/react-switch"],
    "slider": ["@radix-ui/react-slider"],
    "avatar": ["@radix-ui/react-avatar"],
}


@dataclass
class StructureFeatures:
    has_text: bool = False
    has_icon: bool = False
    has_input: bool = False
    has_list: bool = False
    has_overlay: bool = False
    has_checkbox: bool = False
    has_radio: bool = False
    has_slider: bool = False
    depth: int = 0
    interaction_count: int = 0


def _has(*needles: str) -> Callable[[str], bool]:
    return lambda name: any(n in name for n in needles)


# (predicate over lowercased name, archetype), evaluated top to bottom
_NAME_RULES: list[tuple[Callable[[str], bool], str]] = [
    (lambda n: ("button" in n or "btn" in n) and "icon" in n, "iconButton"),
    (_has("button", "btn"), "button"),
    (_has("textarea", "text-area", "multiline"), "textarea"),
    (_has("input", "textfield", "text-field", "text field"), "input"),
    (_has("combobox", "combo-box", "autocomplete"), "combobox"),
    (lambda n: "dropdown" in n and "menu" in n, "dropdown"),
    (_has("select", "dropdown"), "select"),
    (_has("modal"), "modal"),
    (_has("dialog"), "dialog"),
    (_has("popover", "pop-up"), "popover"),
    (_has("tooltip"), "tooltip"),
    (_has("menu"), "menu"),
    (_has("checkbox", "check-box"), "checkbox"),
    (lambda n: "radio" in n and "group" not in n, "radio"),
    (_has("switch", "toggle"), "switch"),
    (_has("slider", "range"), "slider"),
    (_has("card"), "card"),
    (_has("badge", "tag", "chip"), "badge"),
    (_has("avatar", "profile-picture"), "avatar"),
    (_has("link", "anchor"), "link"),
]

_STRUCTURE_RULES: list[tuple[Callable[[StructureFeatures, int], bool], str]] = [
    (lambda f, slots: (f.has_text or f.has_icon) and not f.has_input and not f.has_list and slots <= 2, "button"),
    (lambda f, slots: f.has_input and f.has_list, "combobox"),
    (lambda f, slots: f.has_input, "input"),
    (lambda f, slots: f.has_overlay and f.depth > 2, "dialog"),
    (lambda f, slots: f.has_list, "menu"),
    (lambda f, slots: f.has_checkbox, "checkbox"),
    (lambda f, slots: f.has_radio, "radio"),
    (lambda f, slots: f.has_slider, "slider"),
    (lambda f, slots: f.depth > 1, "card"),
]


def classify_by_name(name: str) -> str:
    lower = (name or "").lower()
    for predicate, archetype in _NAME_RULES:
        if predicate(lower):
            return archetype
    return "unknown"


def analyze_structure(irs: dict) -> StructureFeatures:
    features = StructureFeatures()
    features.depth = max_depth(irs.get("tree"))
    for node in walk(irs.get("tree")):
        name = (node.get("name") or "").lower()
        node_type = node.get("type", "")
        if node_type == "TEXT" or "text" in name or "label" in name:
            features.has_text = True
        if "icon" in name or node_type in ("VECTOR", "BOOLEAN_OPERATION"):
            features.has_icon = True
        if "input" in name or "field" in name:
            features.has_input = True
        if "list" in name or "item" in name or "option" in name:
            features.has_list = True
        if "overlay" in name or "backdrop" in name or "modal" in name:
            features.has_overlay = True
        if "checkbox" in name or "check" in name:
            features.has_checkbox = True
        if "radio" in name:
            features.has_radio = True
        if "slider" in name or "track" in name or "thumb" in name:
            features.has_slider = True
        if node.get("variantProperties"):
            features.interaction_count += 1
    return features


def classify_by_structure(features: StructureFeatures, slot_count: int) -> str:
    for predicate, archetype in _STRUCTURE_RULES:
        if predicate(features, slot_count):
            return archetype
    return "unknown"


def suggest_aria(category: str, features: Optional[StructureFeatures] = None) -> dict:
    features = features or StructureFeatures()
    if category == "button":
        aria = {"role": "button"}
        if not features.has_text:
            aria["ariaLabel"] = "Button"
        return aria
    if category == "iconButton":
        return {"role": "button", "ariaLabel": "Icon button"}
    if category in ("input", "textarea"):
        return {"role": "textbox"}
    if category == "combobox":
        return {"role": "combobox", "ariaExpanded": False, "ariaControls": "listbox-id",
                "ariaAutocomplete": "list"}
    if category == "select":
        return {"role": "combobox", "ariaExpanded": False, "ariaControls": "listbox-id"}
    if category in ("dialog", "modal"):
        return {"role": "dialog", "ariaModal": True, "ariaLabelledBy": "dialog-title"}
    if category == "popover":
        return {"role": "dialog"}
    if category == "tooltip":
        return {"role": "tooltip"}
    if category in ("menu", "dropdown"):
        return {"role": "menu"}
    if category == "checkbox":
        return {"role": "checkbox", "ariaChecked": False}
    if category == "radio":
        return {"role": "radio", "ariaChecked": False}
    if category == "switch":
        return {"role": "switch", "ariaChecked": False}
    if category == "slider":
        return {"role": "slider", "ariaValueMin": 0, "ariaValueMax": 100, "ariaValueNow": 50}
    if category == "card":
        return {"role": "article"}
    if category == "badge":
        return {"role": "status"}
    if category == "avatar":
        return {"role": "img", "ariaLabel": "Avatar"}
    if category == "link":
        return {"role": "link"}
    return {}


def classify(irs: dict) -> dict:
    """IRS → ComponentIntelligence record."""
    features = analyze_structure(irs)
    category = classify_by_name(irs.get("meta", {}).get("name", ""))
    if category != "unknown":
        confidence, source = NAME_CONFIDENCE, "name"
    else:
        source = "structure"
        category = classify_by_structure(features, len(irs.get("slots", [])))
        confidence = STRUCTURE_CONFIDENCE if category != "unknown" else 0.0

    return {
        "category": category,
        "confidence": confidence,
        "detectedFrom": source,
        "requiredPrimitives": list(PRIMITIVES.get(category, [])),
        "suggestedARIA": suggest_aria(category, features),
        "slotPatterns": [slot["name"] for slot in irs.get("slots", [])],
        "features": {
            "hasText": features.has_text,
            "hasIcon": features.has_icon,
            "hasInput": features.has_input,
            "hasList": features.has_list,
            "hasOverlay": features.has_overlay,
            "hasCheckbox": features.has_checkbox,
            "hasRadio": features.has_radio,
            "hasSlider": features.has_slider,
            "depth": features.depth,
            "interactionCount": features.interaction_count,
        },
    }
