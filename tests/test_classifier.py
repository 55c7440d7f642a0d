"""分類器：名稱規則優先，結構規則其次."""
import pytest

from figma_codegen.classifier import (
    NAME_CONFIDENCE,
    STRUCTURE_CONFIDENCE,
    analyze_structure,
    classify,
    classify_by_name,
    suggest_aria,
)
from figma_codegen.ir_builder import build_irs

from conftest import text_node


@pytest.mark.parametrize("name,expected", [
    ("Icon Button", "iconButton"),
    ("btn/icon-only", "iconButton"),
    ("Button/Primary", "button"),
    ("Multiline Text Area", "textarea"),
    ("Text Field", "input"),
    ("Autocomplete", "combobox"),
    ("Dropdown Menu", "dropdown"),
    ("Dropdown", "select"),
    ("Confirm Modal", "modal"),
    ("Alert Dialog", "dialog"),
    ("Tooltip", "tooltip"),
    ("Context Menu", "menu"),
    ("Radio", "radio"),
    ("Radio Group", "unknown"),
    ("Toggle", "switch"),
    ("Product Card", "card"),
    ("Status Chip", "badge"),
    ("Container", "unknown"),
    ("", "unknown"),
])
def test_name_rules(name, expected):
    assert classify_by_name(name) == expected


class TestClassify:
    def test_name_hit(self, raw_button):
        intel = classify(build_irs(raw_button))
        assert intel["category"] == "button"
        assert intel["confidence"] == NAME_CONFIDENCE
        assert intel["detectedFrom"] == "name"
        assert intel["suggestedARIA"] == {"role": "button"}
        assert intel["slotPatterns"] == ["label"]
        assert intel["requiredPrimitives"] == []

    def test_icon_button_by_name(self):
        raw = {"id": "8:1", "name": "Icon Button", "type": "FRAME", "children": [
            {"id": "8:2", "name": "Glyph", "type": "VECTOR"},
        ]}
        intel = classify(build_irs(raw))
        assert intel["category"] == "iconButton"
        assert intel["confidence"] == 0.9
        assert intel["detectedFrom"] == "name"

    def test_structure_fallback(self):
        raw = {"id": "9:1", "name": "Widget", "type": "FRAME",
               "children": [text_node("9:2", "Caption", "Go")]}
        intel = classify(build_irs(raw))
        assert intel["category"] == "button"
        assert intel["confidence"] == STRUCTURE_CONFIDENCE
        assert intel["detectedFrom"] == "structure"

    def test_structure_combobox(self):
        raw = {"id": "9:1", "name": "Picker", "type": "FRAME", "children": [
            {"id": "9:2", "name": "Search field", "type": "FRAME", "children": []},
            {"id": "9:3", "name": "Options list", "type": "FRAME", "children": []},
        ]}
        intel = classify(build_irs(raw))
        assert intel["category"] == "combobox"
        assert intel["requiredPrimitives"] == ["@radix-ui/react-popover"]
        assert intel["features"]["hasInput"] and intel["features"]["hasList"]

    def test_unknown(self, raw_empty_frame):
        intel = classify(build_irs(raw_empty_frame))
        assert intel["category"] == "unknown"
        assert intel["confidence"] == 0.0
        assert intel["suggestedARIA"] == {}

    def test_features_from_variants(self, raw_component_set):
        features = analyze_structure(build_irs(raw_component_set))
        assert features.has_text is True
        assert features.depth == 2


def test_suggest_aria_icon_only_button():
    assert suggest_aria("button")["ariaLabel"] == "Button"
    assert suggest_aria("dialog")["ariaModal"] is True
    assert suggest_aria("unknown") == {}
