"""Figma REST client 與本地 export 載入（不打真實 API）."""
import json
import logging
from unittest.mock import MagicMock

import pytest
import requests

from figma_codegen.figma_reader import FigmaAPIClient, find_node, load_export, parse_figma_url


def _response(payload=None, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload or {}
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(response=resp)
    return resp


class TestParseFigmaUrl:
    def test_design_url(self):
        assert parse_figma_url("https://www.figma.com/design/abc123/Kit?node-id=1-2") == ("abc123", "1:2")

    def test_file_url_without_node(self):
        assert parse_figma_url("https://www.figma.com/file/XYZ/My-File") == ("XYZ", None)

    def test_not_figma(self):
        with pytest.raises(ValueError):
            parse_figma_url("https://example.com/nothing")


class TestClient:
    def setup_method(self):
        self.client = FigmaAPIClient("tok-123")
        self.client.session = MagicMock()

    def test_token_header(self):
        assert FigmaAPIClient("tok-123").session.headers["X-Figma-Token"] == "tok-123"

    def test_get_node(self):
        self.client.session.get.return_value = _response({"nodes": {"1:2": {"document": {"id": "1:2"}}}})
        assert self.client.get_node("abc", "1:2") == {"id": "1:2"}
        url = self.client.session.get.call_args[0][0]
        assert url == "https://api.figma.com/v1/files/abc/nodes"
        assert self.client.session.get.call_args[1]["params"] == {"ids": "1:2"}

    def test_get_node_missing(self):
        self.client.session.get.return_value = _response({"nodes": {"1:2": None}})
        with pytest.raises(KeyError):
            self.client.get_node("abc", "1:2")

    def test_http_error_propagates(self):
        self.client.session.get.return_value = _response(status=404)
        with pytest.raises(requests.HTTPError):
            self.client.get_file_nodes("abc", ["1:2"])

    def test_variables_forbidden_degrades(self, caplog):
        self.client.session.get.return_value = _response(status=403)
        with caplog.at_level(logging.WARNING, logger="figma_codegen.figma_reader"):
            assert self.client.get_local_variables("abc") == ({}, {})
        assert "403" in caplog.text

    def test_fetch_component(self, variables, collections):
        self.client.session.get.side_effect = [
            _response({"nodes": {"1:2": {"document": {"id": "1:2", "name": "Button"}}}}),
            _response({"meta": {"variables": variables, "variableCollections": collections}}),
        ]
        export = self.client.fetch_component("abc", "1:2")
        assert export.document["name"] == "Button"
        assert export.variables == variables
        assert export.collections == collections
        assert export.figma_url == "https://www.figma.com/design/abc?node-id=1-2"


class TestLoadExport:
    def test_nodes_response(self, tmp_path, raw_button):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"nodes": {"1:1": {"document": raw_button}}}), encoding="utf-8")
        export = load_export(path, "1:1")
        assert export.document["name"] == "Button/Primary"
        assert export.variables == {}

    def test_document_with_node_id(self, tmp_path, raw_component_set, variables, collections):
        data = {
            "document": {"id": "0:0", "name": "Page", "type": "CANVAS", "children": [raw_component_set]},
            "variables": variables,
            "variableCollections": list(collections.values()),
            "fileKey": "abc",
            "figmaUrl": "https://www.figma.com/design/abc",
        }
        path = tmp_path / "export.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        export = load_export(str(path), "3:1")
        assert export.document["name"] == "Action Button"
        assert export.collections == collections
        assert export.file_key == "abc"

    def test_missing_node(self, tmp_path, raw_button):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"document": raw_button}), encoding="utf-8")
        with pytest.raises(KeyError):
            load_export(path, "9:9")

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_export(path)


def test_find_node(raw_component_set):
    assert find_node(raw_component_set, "3:3:t")["characters"] == "Save"
    assert find_node(raw_component_set, "nope") is None
