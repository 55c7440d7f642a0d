"""共用假資料：Figma raw node / variable table."""
import pytest


def solid(r, g, b, a=1.0, **extra):
    paint = {"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": a}}
    paint.update(extra)
    return paint


def text_node(node_id, name, characters="", **extra):
    node = {
        "id": node_id,
        "name": name,
        "type": "TEXT",
        "characters": characters,
        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 40, "height": 16},
        "style": {"fontFamily": "Inter", "fontSize": 14, "fontWeight": 500, "lineHeightPx": 20},
        "fills": [solid(1, 1, 1)],
    }
    node.update(extra)
    return node


@pytest.fixture
def raw_button():
    return {
        "id": "1:1",
        "name": "Button/Primary",
        "type": "FRAME",
        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 120, "height": 40},
        "layoutMode": "HORIZONTAL",
        "primaryAxisAlignItems": "CENTER",
        "counterAxisAlignItems": "CENTER",
        "itemSpacing": 8,
        "paddingLeft": 16,
        "paddingRight": 16,
        "paddingTop": 8,
        "paddingBottom": 8,
        "cornerRadius": 6,
        "fills": [solid(0.2, 0.4, 1.0)],
        "variantProperties": {"state": "hover"},
        "children": [text_node("1:2", "Label", "Click me")],
    }


@pytest.fixture
def raw_empty_frame():
    return {
        "id": "2:1",
        "name": "Container",
        "type": "FRAME",
        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 200, "height": 100},
        "children": [],
    }


@pytest.fixture
def raw_component_set():
    def variant(node_id, name):
        return {
            "id": node_id,
            "name": name,
            "type": "COMPONENT",
            "absoluteBoundingBox": {"x": 0, "y": 0, "width": 120, "height": 40},
            "fills": [solid(0.2, 0.4, 1.0)],
            "children": [text_node(f"{node_id}:t", "Label", "Save")],
        }

    return {
        "id": "3:1",
        "name": "Action Button",
        "type": "COMPONENT_SET",
        "children": [
            variant("3:2", "State=Default, Size=Small"),
            variant("3:3", "State=Hover, Size=Small"),
            variant("3:4", "State=Disabled, Size=Large"),
        ],
    }


@pytest.fixture
def raw_input():
    return {
        "id": "4:1",
        "name": "Text Input",
        "type": "FRAME",
        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 240, "height": 64},
        "children": [
            text_node("4:2", "Label", "Email"),
            {"id": "4:3", "name": "Field", "type": "FRAME", "children": []},
            text_node("4:4", "Helper text", "We never share it"),
        ],
    }


@pytest.fixture
def collections():
    return {
        "VC:1": {
            "id": "VC:1",
            "name": "Theme",
            "defaultModeId": "m:light",
            "modes": [{"modeId": "m:light", "name": "light"}, {"modeId": "m:dark", "name": "dark"}],
        }
    }


@pytest.fixture
def variables():
    return {
        "V:primary": {
            "id": "V:primary",
            "name": "color/primary/500",
            "resolvedType": "COLOR",
            "variableCollectionId": "VC:1",
            "valuesByMode": {
                "m:light": {"r": 0.2, "g": 0.4, "b": 1.0, "a": 1},
                "m:dark": {"r": 0.4, "g": 0.6, "b": 1.0, "a": 1},
            },
        },
        "V:brand": {
            "id": "V:brand",
            "name": "color/brand",
            "resolvedType": "COLOR",
            "variableCollectionId": "VC:1",
            "valuesByMode": {
                "m:light": {"type": "VARIABLE_ALIAS", "id": "V:primary"},
                "m:dark": {"type": "VARIABLE_ALIAS", "id": "V:primary"},
            },
        },
        "V:gap": {
            "id": "V:gap",
            "name": "spacing/md",
            "resolvedType": "FLOAT",
            "variableCollectionId": "VC:1",
            "valuesByMode": {"m:light": 16, "m:dark": 16},
        },
    }


@pytest.fixture
def cyclic_variables():
    return {
        "V:a": {"id": "V:a", "name": "color/a", "resolvedType": "COLOR",
                "valuesByMode": {"m:1": {"type": "VARIABLE_ALIAS", "id": "V:b"}}},
        "V:b": {"id": "V:b", "name": "color/b", "resolvedType": "COLOR",
                "valuesByMode": {"m:1": {"type": "VARIABLE_ALIAS", "id": "V:a"}}},
    }
