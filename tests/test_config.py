"""設定檔載入：警告但不拋例外."""
import json
import logging

import pytest

from figma_codegen.config import load_config, load_project_tokens, settings_from_config, validate_config


def _write(tmp_path, data, name="figma-codegen.config.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestLoadConfig:
    def test_missing_file_returns_empty(self, tmp_path):
        assert load_config(str(tmp_path / "nope.json")) == {}

    def test_non_object_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="figma_codegen.config"):
            assert load_config(_write(tmp_path, [1, 2])) == {}
        assert "[config]" in caplog.text

    def test_valid_config_loaded(self, tmp_path):
        cfg = {"output": {"dir": "out"}, "watch": {"debounce": 0.5}}
        assert load_config(_write(tmp_path, cfg)) == cfg


class TestValidateConfig:
    @pytest.mark.parametrize("cfg,fragment", [
        ({"outptu": {}}, "outptu"),
        ({"output": {"folder": "x"}}, "folder"),
        ({"output": {"docs": "yes"}}, "output.docs"),
        ({"tokens": {"maxAliasDepth": True}}, "tokens.maxAliasDepth"),
        ({"tokens": {"maxAliasDepth": 0}}, "maxAliasDepth"),
        ({"figma": "token"}, "[figma]"),
        ({"tokens": {"projectTokens": "/definitely/missing.json"}}, "/definitely/missing.json"),
    ])
    def test_warnings(self, caplog, cfg, fragment):
        with caplog.at_level(logging.WARNING, logger="figma_codegen.config"):
            validate_config(cfg)
        assert fragment in caplog.text

    def test_clean_config_is_quiet(self, caplog):
        with caplog.at_level(logging.WARNING, logger="figma_codegen.config"):
            validate_config({"figma": {"fileKey": "abc"}, "watch": {"debounce": 2}})
        assert caplog.text == ""


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FIGMA_TOKEN", raising=False)
        settings = settings_from_config({})
        assert settings.token is None
        assert settings.output_dir == "./generated"
        assert settings.snapshot_dir is None
        assert settings.max_alias_depth == 10
        assert settings.debounce == 1.0
        assert settings.write_docs is True

    def test_env_token_fallback(self, monkeypatch):
        monkeypatch.setenv("FIGMA_TOKEN", "env-token")
        assert settings_from_config({}).token == "env-token"
        assert settings_from_config({"figma": {"personalAccessToken": "cfg"}}).token == "cfg"

    def test_values(self):
        settings = settings_from_config({
            "output": {"dir": "out", "snapshotDir": "snaps", "docs": False},
            "tokens": {"maxAliasDepth": 3, "projectTokens": "tokens.json"},
            "watch": {"debounce": 0},
        })
        assert (settings.output_dir, settings.snapshot_dir, settings.write_docs) == ("out", "snaps", False)
        assert settings.max_alias_depth == 3
        assert settings.project_tokens == "tokens.json"
        assert settings.debounce == 0.0

    def test_invalid_values_fall_back(self):
        settings = settings_from_config({"tokens": {"maxAliasDepth": 0}, "watch": {"debounce": -1}, "output": []})
        assert settings.max_alias_depth == 10
        assert settings.debounce == 1.0
        assert settings.output_dir == "./generated"


class TestProjectTokens:
    def test_none(self):
        assert load_project_tokens(None) == []

    def test_list_and_wrapper(self, tmp_path):
        tokens = [{"name": "space-4", "value": "16px", "type": "spacing"}, {"value": "no name"}]
        assert load_project_tokens(_write(tmp_path, tokens, "a.json")) == tokens[:1]
        assert load_project_tokens(_write(tmp_path, {"tokens": tokens}, "b.json")) == tokens[:1]

    def test_wrong_shape(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="figma_codegen.config"):
            assert load_project_tokens(_write(tmp_path, {"tokens": "nope"})) == []
        assert "token" in caplog.text
