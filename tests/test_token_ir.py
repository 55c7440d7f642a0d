"""Token IR：alias 解析、型別推斷、token graph."""
import logging

from figma_codegen.schemas import validate_irt
from figma_codegen.token_ir import (
    TokenIRBuilder,
    build_irt,
    format_token_value,
    infer_token_type,
    matchable_variables,
    resolve_alias,
    semantic_token_name,
)


class TestResolveAlias:
    def test_literal_value(self, variables):
        result = resolve_alias("V:primary", "m:light", variables)
        assert result.resolved is True
        assert result.value == {"r": 0.2, "g": 0.4, "b": 1.0, "a": 1}
        assert result.chain == ["V:primary"]

    def test_follows_alias_in_same_mode(self, variables, collections):
        result = resolve_alias("V:brand", "m:dark", variables, collections)
        assert result.resolved is True
        assert result.value["g"] == 0.6
        assert result.chain == ["V:brand", "V:primary"]

    def test_cycle_returns_marker(self, cyclic_variables, caplog):
        with caplog.at_level(logging.WARNING, logger="figma_codegen.token_ir"):
            result = resolve_alias("V:a", "m:1", cyclic_variables)
        assert result.resolved is False
        assert result.value == {"type": "VARIABLE_ALIAS", "id": "V:b"}
        assert "Cyclic alias" in caplog.text

    def test_depth_bound(self):
        chain = {}
        for i in range(5):
            chain[f"V:{i}"] = {"id": f"V:{i}", "name": f"n{i}",
                               "valuesByMode": {"m": {"type": "VARIABLE_ALIAS", "id": f"V:{i + 1}"}}}
        chain["V:5"] = {"id": "V:5", "name": "n5", "valuesByMode": {"m": 4}}
        assert resolve_alias("V:0", "m", chain, max_depth=10).value == 4
        short = resolve_alias("V:0", "m", chain, max_depth=2)
        assert short.resolved is False
        assert short.value == {"type": "VARIABLE_ALIAS", "id": "V:1"}

    def test_dangling_target(self):
        table = {"V:x": {"id": "V:x", "name": "x",
                         "valuesByMode": {"m": {"type": "VARIABLE_ALIAS", "id": "V:gone"}}}}
        result = resolve_alias("V:x", "m", table)
        assert result.resolved is False
        assert result.chain == ["V:x", "V:gone"]

    def test_unknown_variable(self):
        assert resolve_alias("V:nope", "m", {}).resolved is False


class TestTyping:
    def test_scope_wins(self):
        assert infer_token_type("anything", ["CORNER_RADIUS"]) == "radius"

    def test_name_rules(self):
        assert infer_token_type("font/body/size") == "typography"
        assert infer_token_type("spacing/md") == "spacing"
        assert infer_token_type("surface/raised") == "color"

    def test_resolved_type_beats_name(self):
        assert infer_token_type("border/default", resolved_type="FLOAT") == "radius"
        assert infer_token_type("border/width", resolved_type="FLOAT") == "sizing"
        assert infer_token_type("text/muted", resolved_type="FLOAT") == "sizing"
        assert infer_token_type("layer/alpha", resolved_type="FLOAT") == "opacity"
        assert infer_token_type("spacing/md", resolved_type="FLOAT") == "spacing"
        assert infer_token_type("radius/size", resolved_type="FLOAT") == "radius"
        assert infer_token_type("spacing/accent", resolved_type="COLOR") == "color"

    def test_scope_still_beats_resolved_type(self):
        assert infer_token_type("border", ["CORNER_RADIUS"], resolved_type="COLOR") == "radius"

    def test_float_border_variable_is_not_a_color(self):
        irt = build_irt({"V:1": {"name": "border/default", "resolvedType": "FLOAT", "valuesByMode": {"m": 1}}})
        token = irt["tokens"][0]
        assert token["type"] == "radius"
        assert token["semanticName"] == "radius.border.default"

    def test_value_fallback(self):
        assert infer_token_type("brand-x", value="#FF0000") == "color"
        assert infer_token_type("misc", value=8) == "spacing"
        assert infer_token_type("misc", value="hello") == "other"

    def test_semantic_name(self):
        assert semantic_token_name("color/primary/500", "color") == "color.primary.500"
        assert semantic_token_name("Primary/500", "color") == "color.primary.500"
        assert semantic_token_name("misc thing", "other") == "misc.thing"

    def test_format_value(self):
        assert format_token_value({"r": 1, "g": 0, "b": 0, "a": 1}) == "rgba(255, 0, 0, 1)"
        assert format_token_value(16.0) == 16
        assert format_token_value(None) == ""
        assert format_token_value({"type": "VARIABLE_ALIAS", "id": "V:1"}) == {"type": "VARIABLE_ALIAS", "id": "V:1"}


class TestBuilder:
    def test_tokens_and_modes(self, variables, collections):
        irt = build_irt(variables, collections)
        by_name = {t["name"]: t for t in irt["tokens"]}
        primary = by_name["color/primary/500"]
        assert primary["type"] == "color"
        assert primary["value"] == "rgba(51, 102, 255, 1)"
        assert primary["modes"] == {"light": "rgba(51, 102, 255, 1)", "dark": "rgba(102, 153, 255, 1)"}
        assert primary["collection"] == "Theme"
        assert by_name["color/brand"]["aliasOf"] == "color/primary/500"
        assert by_name["spacing/md"]["value"] == 16
        assert set(irt["modeValues"]) == {"light", "dark"}
        validate_irt(irt)

    def test_alias_edges(self, variables, collections):
        edges = build_irt(variables, collections)["tokenGraph"]["edges"]
        assert {"from": "color/brand", "to": "color/primary/500", "relationship": "alias"} in edges

    def test_derived_edges(self):
        table = {
            "V:1": {"id": "V:1", "name": "space/a", "resolvedType": "FLOAT", "valuesByMode": {"m": 8}},
            "V:2": {"id": "V:2", "name": "space/b", "resolvedType": "FLOAT", "valuesByMode": {"m": 8.05}},
            "V:3": {"id": "V:3", "name": "space/c", "resolvedType": "FLOAT", "valuesByMode": {"m": 12}},
        }
        edges = build_irt(table)["tokenGraph"]["edges"]
        assert edges == [{"from": "space/b", "to": "space/a", "relationship": "derived"}]

    def test_cyclic_variables_keep_marker(self, cyclic_variables):
        irt = TokenIRBuilder().build(cyclic_variables)
        values = {t["name"]: t["value"] for t in irt["tokens"]}
        assert values["color/a"] == {"type": "VARIABLE_ALIAS", "id": "V:b"}
        validate_irt(irt)

    def test_usage_index(self, variables, collections):
        node = {"id": "1:1", "boundVariables": {"fills": [{"type": "VARIABLE_ALIAS", "id": "V:primary"}]},
                "children": [{"id": "1:2", "boundVariables": {"itemSpacing": {"type": "VARIABLE_ALIAS", "id": "V:gap"}}}]}
        usage = build_irt(variables, collections, [node])["tokenUsage"]
        assert usage == {"color/primary/500": ["1:1"], "spacing/md": ["1:2"]}

    def test_list_input(self, variables, collections):
        irt = build_irt(list(variables.values()), collections)
        assert len(irt["tokens"]) == 3


def test_matchable_variables(variables, collections):
    out = {v["name"]: v for v in matchable_variables(variables, collections)}
    assert out["color/primary/500"]["value"] == "#3366FF"
    assert out["color/primary/500"]["type"] == "color"
    assert out["color/brand"]["value"] == "#3366FF"
    assert out["spacing/md"]["value"] == "16px"
    assert out["spacing/md"]["type"] == "float"
