"""命名 / escaping helpers 與色彩轉換."""
import pytest

from figma_codegen.colors import hex_string, looks_like_color, parse_color, rgba_string
from figma_codegen.templating import (
    camel_case,
    class_segment,
    css_block,
    jsx_attr,
    jsx_text,
    kebab_case,
    pascal_case,
    ts_string,
    unique_name,
)


@pytest.mark.parametrize("raw,pascal,camel,kebab", [
    ("Button/Primary", "ButtonPrimary", "buttonPrimary", "button-primary"),
    ("icon right", "IconRight", "iconRight", "icon-right"),
    ("helperText", "HelperText", "helperText", "helper-text"),
])
def test_case_conversions(raw, pascal, camel, kebab):
    assert pascal_case(raw) == pascal
    assert camel_case(raw) == camel
    assert kebab_case(raw) == kebab


def test_reserved_and_empty_names():
    assert camel_case("default") == "defaultValue"
    assert camel_case("***") == "value"
    assert kebab_case("") == "unnamed"


def test_unique_name():
    used = {"label"}
    assert unique_name("label", used) == "label2"
    assert unique_name("label", used) == "label3"
    assert used == {"label", "label2", "label3"}


def test_escaping():
    assert ts_string("it's\nhere") == "'it\\'s\\nhere'"
    assert jsx_text("Save") == "Save"
    assert jsx_text("{x}") == '{"{x}"}'
    assert jsx_attr("title", 'say "hi"') == "title={'say \"hi\"'}"
    assert jsx_attr("tabIndex", 0) == "tabIndex={0}"
    assert class_segment("Extra Large!") == "extra-large"


def test_css_block():
    assert css_block(".a", [("color", "red")], comment="x */ y") == ".a {\n  /* x * / y */\n  color: red;\n}"


def test_colors():
    assert rgba_string({"r": 1, "g": 1, "b": 1, "a": 0.5}, opacity=0.5) == "rgba(255, 255, 255, 0.25)"
    assert hex_string({"r": 0.2, "g": 0.4, "b": 1.0}) == "#3366FF"
    assert hex_string({"r": 0, "g": 0, "b": 0, "a": 0.5}) == "rgba(0, 0, 0, 0.5)"
    assert parse_color("#fff") == (255, 255, 255, 1)
    assert parse_color("rgba(10, 20, 30, 0.5)") == (10.0, 20.0, 30.0, 0.5)
    assert parse_color("tomato") is None
    assert looks_like_color("hsl(0, 0%, 0%)")
    assert not looks_like_color(12)


def test_digit_leading_names_stay_identifiers():
    assert pascal_case("16") == "Unnamed16"
    assert pascal_case("16 large", fallback="Variant") == "Variant16Large"
    assert pascal_case("32", fallback="") == "_32"
    assert pascal_case("32", fallback="9") == "_32"
    assert camel_case("2xl") == "value2xl"
