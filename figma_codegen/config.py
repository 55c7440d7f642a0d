"""設定檔載入與基本驗證."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "figma-codegen.config.json"

# 各區塊已知欄位（用於拼字提示）與預期型別
_KNOWN_SECTION_KEYS = {
    "figma": {"personalAccessToken": str, "fileKey": str, "nodeId": str},
    "output": {"dir": str, "snapshotDir": str, "docs": bool, "tokenCss": bool},
    "tokens": {"maxAliasDepth": int, "projectTokens": str},
    "watch": {"debounce": (int, float)},
}


def _warn(msg: str) -> None:
    logger.warning("[config] %s", msg)


def validate_config(cfg: dict) -> None:
    """對 config 做基本欄位驗證，記錄警告但不拋例外。"""
    if not cfg:
        return

    # 頂層未知欄位
    for key in cfg:
        if key not in _KNOWN_SECTION_KEYS:
            known = ", ".join(sorted(_KNOWN_SECTION_KEYS))
            _warn(f"未知頂層欄位 '{key}'（已知欄位：{known}）")

    for section, known_keys in _KNOWN_SECTION_KEYS.items():
        section_cfg = cfg.get(section, {})
        if not isinstance(section_cfg, dict):
            _warn(f"[{section}] 應為 JSON 物件，目前是 {type(section_cfg).__name__}")
            continue
        for key, value in section_cfg.items():
            expected = known_keys.get(key)
            if expected is None:
                known = ", ".join(sorted(known_keys))
                _warn(f"[{section}] 未知欄位 '{key}'（已知欄位：{known}）")
            elif not isinstance(value, expected) or (isinstance(value, bool) and expected is not bool):
                _warn(f"{section}.{key} 型別不符，目前是 {type(value).__name__}")

    depth = cfg.get("tokens", {}).get("maxAliasDepth") if isinstance(cfg.get("tokens"), dict) else None
    if isinstance(depth, int) and depth < 1:
        _warn(f"tokens.maxAliasDepth 應 >= 1，目前是 {depth}")

    # projectTokens 存在性提示（不強制，可能是 CI 環境）
    tokens_path = cfg.get("tokens", {}).get("projectTokens") if isinstance(cfg.get("tokens"), dict) else None
    if isinstance(tokens_path, str) and not Path(tokens_path).exists():
        _warn(f"tokens.projectTokens '{tokens_path}' 不存在")


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """載入 JSON 設定檔，不存在則回傳空 dict；存在則做基本驗證。"""
    path = Path(config_path)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        cfg: Any = json.load(f)
    if not isinstance(cfg, dict):
        _warn(f"'{config_path}' 格式錯誤，應為 JSON 物件，回傳空設定。")
        return {}
    validate_config(cfg)
    return cfg


@dataclass
class CodegenSettings:
    token: Optional[str] = None
    file_key: Optional[str] = None
    node_id: Optional[str] = None
    output_dir: str = "./generated"
    snapshot_dir: Optional[str] = None
    write_docs: bool = True
    write_token_css: bool = True
    max_alias_depth: int = 10
    project_tokens: Optional[str] = None
    debounce: float = 1.0


def _section(cfg: dict, name: str) -> dict:
    value = (cfg or {}).get(name)
    return value if isinstance(value, dict) else {}


def settings_from_config(cfg: Optional[dict]) -> CodegenSettings:
    figma, output = _section(cfg, "figma"), _section(cfg, "output")
    tokens, watch = _section(cfg, "tokens"), _section(cfg, "watch")
    depth = tokens.get("maxAliasDepth")
    debounce = watch.get("debounce")
    return CodegenSettings(
        token=figma.get("personalAccessToken") or os.environ.get("FIGMA_TOKEN"),
        file_key=figma.get("fileKey"),
        node_id=figma.get("nodeId"),
        output_dir=output.get("dir", "./generated"),
        snapshot_dir=output.get("snapshotDir"),
        write_docs=bool(output.get("docs", True)),
        write_token_css=bool(output.get("tokenCss", True)),
        max_alias_depth=depth if isinstance(depth, int) and depth >= 1 else 10,
        project_tokens=tokens.get("projectTokens"),
        debounce=float(debounce) if isinstance(debounce, (int, float)) and debounce >= 0 else 1.0,
    )


def load_project_tokens(path: Optional[str]) -> list[dict]:
    """JSON list of {name, value, type}; a {"tokens": [...]} wrapper is accepted too."""
    if not path:
        return []
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("tokens", [])
    if not isinstance(data, list):
        _warn(f"'{path}' 應為 token 陣列，忽略。")
        return []
    return [t for t in data if isinstance(t, dict) and t.get("name")]
