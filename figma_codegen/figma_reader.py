"""
Figma REST API 讀取與本地 export 載入

  - FigmaAPIClient: component node tree + local variable table
  - parse_figma_url: design URL → (file key, node id)
  - load_export: offline JSON export → FigmaExport
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlparse

import requests

from .tree import index_nodes

logger = logging.getLogger(__name__)

_FILE_PATH_SEGMENTS = ("file", "design", "proto", "board")


@dataclass
class FigmaExport:
    """Raw inputs for one compile: the component node plus the variable table."""
    document: dict
    variables: dict = field(default_factory=dict)
    collections: dict = field(default_factory=dict)
    file_key: str = ""
    figma_url: str = ""


class FigmaAPIClient:
    """Figma REST API 唯讀封裝."""

    BASE_URL = "https://api.figma.com/v1"

    def __init__(self, token: str, timeout: float = 30.0):
        self.token = token
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "X-Figma-Token": token,
            "Content-Type": "application/json",
        })

    def get_file_nodes(self, file_key: str, node_ids: list) -> dict:
        url = f"{self.BASE_URL}/files/{file_key}/nodes"
        params = {"ids": ",".join(node_ids)}
        resp = self.session.get(url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def get_node(self, file_key: str, node_id: str) -> dict:
        """單一節點的 document；不存在時拋 KeyError."""
        data = self.get_file_nodes(file_key, [node_id])
        entry = (data.get("nodes") or {}).get(node_id)
        if not entry or not entry.get("document"):
            raise KeyError(f"node {node_id} not found in file {file_key}")
        return entry["document"]

    def get_local_variables(self, file_key: str) -> tuple[dict, dict]:
        """(variables, collections); non-enterprise plans get 403 → empty tables."""
        url = f"{self.BASE_URL}/files/{file_key}/variables/local"
        resp = self.session.get(url, timeout=self.timeout)
        if resp.status_code == 403:
            logger.warning("Variables API returned 403 for file %s; continuing without variables", file_key)
            return {}, {}
        resp.raise_for_status()
        meta = resp.json().get("meta") or {}
        return meta.get("variables") or {}, meta.get("variableCollections") or {}

    def fetch_component(self, file_key: str, node_id: str) -> FigmaExport:
        document = self.get_node(file_key, node_id)
        variables, collections = self.get_local_variables(file_key)
        return FigmaExport(
            document=document,
            variables=variables,
            collections=collections,
            file_key=file_key,
            figma_url=f"https://www.figma.com/design/{file_key}?node-id={node_id.replace(':', '-')}",
        )


def parse_figma_url(url: str) -> tuple[str, Optional[str]]:
    """'https://www.figma.com/design/KEY/Name?node-id=1-2' → ('KEY', '1:2')."""
    parsed = urlparse(url)
    segments = [s for s in parsed.path.split("/") if s]
    file_key = ""
    for i, segment in enumerate(segments[:-1]):
        if segment in _FILE_PATH_SEGMENTS:
            file_key = segments[i + 1]
            break
    if not file_key:
        raise ValueError(f"not a Figma file URL: {url}")
    node_id = (parse_qs(parsed.query).get("node-id") or [None])[0]
    if node_id:
        node_id = node_id.replace("-", ":")
    return file_key, node_id


def find_node(document: Optional[dict], node_id: str) -> Optional[dict]:
    return index_nodes(document).get(node_id)


def _document_from(data: dict, node_id: Optional[str]) -> dict:
    if isinstance(data.get("nodes"), dict):
        entries = data["nodes"]
        entry = entries.get(node_id) if node_id else next(iter(entries.values()), None)
        if not entry or not entry.get("document"):
            raise KeyError(f"node {node_id} not found in export")
        return entry["document"]
    document = data.get("document")
    if not isinstance(document, dict):
        raise KeyError("export has no 'document' or 'nodes' entry")
    if node_id:
        node = find_node(document, node_id)
        if node is None:
            raise KeyError(f"node {node_id} not found in export")
        return node
    return document


def load_export(path, node_id: Optional[str] = None) -> FigmaExport:
    """載入本地 JSON export（自訂格式或 REST 回應原樣存檔）."""
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"'{path}' is not a JSON object")

    meta = data.get("meta") if isinstance(data.get("meta"), dict) else {}
    variables = data.get("variables", meta.get("variables")) or {}
    collections = data.get("variableCollections", meta.get("variableCollections")) or {}
    if isinstance(collections, list):
        collections = {c["id"]: c for c in collections if isinstance(c, dict) and c.get("id")}
    return FigmaExport(
        document=_document_from(data, node_id),
        variables=variables,
        collections=collections,
        file_key=data.get("fileKey", ""),
        figma_url=data.get("figmaUrl", ""),
    )
