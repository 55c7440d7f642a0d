"""End-to-end pipeline：compile_component + save_artifacts."""
import json
import os
from unittest.mock import patch

import pytest

from figma_codegen.pipeline import compile_component, save_artifacts
from figma_codegen.schemas import IRValidationError

PROJECT_TOKENS = [
    {"name": "Brand Primary", "value": "#3366FF", "type": "color"},
    {"name": "space-4", "value": "16px", "type": "spacing"},
]


class TestCompile:
    def test_button(self, raw_button, variables, collections):
        result = compile_component(raw_button, variables, collections, extracted_at="t")
        assert result.name == "ButtonPrimary"
        assert result.intelligence["category"] == "button"
        assert result.code.content_source == "tree"
        assert result.token_matches == []
        assert "--color-primary-500: rgba(51, 102, 255, 1);" in result.token_css
        assert result.docs.startswith("# ButtonPrimary")
        assert result.irs["meta"]["extractedAt"] == "t"

    def test_project_token_matching(self, raw_button, variables, collections):
        result = compile_component(raw_button, variables, collections, project_tokens=PROJECT_TOKENS)
        by_name = {m["figmaVarName"]: m for m in result.token_matches}
        assert by_name["color/primary/500"]["matchedToken"]["cssVar"] == "var(--brand-primary)"
        assert by_name["spacing/md"]["matchedToken"]["name"] == "space-4"
        assert result.unmatched_variables == []

    def test_unmatched_variables(self, raw_button, variables, collections):
        tokens = [{"name": "space-9", "value": "36px", "type": "spacing"}]
        result = compile_component(raw_button, variables, collections, project_tokens=tokens)
        assert result.unmatched_variables == ["color/primary/500", "color/brand", "spacing/md"]

    def test_empty_container(self, raw_empty_frame):
        result = compile_component(raw_empty_frame)
        assert result.intelligence["category"] == "unknown"
        assert result.code.content_source == "children"
        assert result.irt["tokens"] == []

    def test_invalid_stage_output_raises(self, raw_button):
        bad_iml = {"version": "1.0.0", "componentCategory": "button", "states": []}
        with patch("figma_codegen.pipeline.build_iml", return_value=bad_iml):
            with pytest.raises(IRValidationError) as exc:
                compile_component(raw_button)
        assert exc.value.kind == "IML"

    def test_cyclic_variables_do_not_fail(self, raw_button, cyclic_variables):
        result = compile_component(raw_button, cyclic_variables)
        assert "--color-a: var(--color-b);" in result.token_css

    def test_manifest(self, raw_component_set):
        manifest = compile_component(raw_component_set).manifest()
        assert manifest["component"] == "ActionButton"
        assert manifest["archetype"] == "button"
        assert manifest["contentSource"] == "tree"
        assert manifest["counts"]["variants"] == 3
        assert manifest["counts"]["states"] == 3


class TestSaveArtifacts:
    def test_writes_all_files(self, tmp_path, raw_button, variables, collections):
        result = compile_component(raw_button, variables, collections)
        written = save_artifacts(result, str(tmp_path))
        component_dir = tmp_path / "ButtonPrimary"
        names = sorted(os.path.relpath(p, component_dir) for p in written)
        assert names == sorted([
            "ButtonPrimary.tsx", "ButtonPrimary.types.ts", "ButtonPrimary.styles.css",
            "ButtonPrimary.stories.tsx", "ButtonPrimary.mdx", "tokens.css",
            os.path.join(".ir", "irs.json"), os.path.join(".ir", "irt.json"), os.path.join(".ir", "iml.json"),
            "manifest.json",
        ])
        assert (component_dir / "ButtonPrimary.tsx").read_text(encoding="utf-8") == result.code.component
        manifest = json.loads((component_dir / "manifest.json").read_text(encoding="utf-8"))
        assert manifest["tokenVars"]["spacing/md"] == "var(--spacing-md)"
        irs = json.loads((component_dir / ".ir" / "irs.json").read_text(encoding="utf-8"))
        assert irs["meta"]["name"] == "Button/Primary"

    def test_optional_outputs_and_snapshot_dir(self, tmp_path, raw_empty_frame):
        result = compile_component(raw_empty_frame)
        snapshots = tmp_path / "snaps"
        written = save_artifacts(result, str(tmp_path / "out"), snapshot_dir=str(snapshots),
                                 docs=False, token_css=False)
        assert not any(p.endswith((".mdx", "tokens.css")) for p in written)
        assert (snapshots / "iml.json").exists()
        assert (tmp_path / "out" / "Container" / "Container.tsx").exists()
