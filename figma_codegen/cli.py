#!/usr/bin/env python3
"""
figma-codegen CLI — Figma component → React code

  figma-codegen generate <figma-url>        # REST → component files
  figma-codegen compile export.json         # offline export → component files
  figma-codegen watch export.json           # recompile on export change
  figma-codegen inspect export.json         # IRS tree / archetype preview
  figma-codegen tokens export.json          # token CSS bundle only
"""

import argparse
import asyncio
import json
import logging
import os
import threading
import time

import requests
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from figma_codegen import __version__

from .classifier import classify
from .config import DEFAULT_CONFIG_PATH, CodegenSettings, load_config, load_project_tokens, settings_from_config
from .figma_reader import FigmaAPIClient, FigmaExport, load_export, parse_figma_url
from .ir_builder import build_irs, preview_tree
from .pipeline import CompileResult, compile_component, save_artifacts
from .schemas import IRValidationError
from .token_bundle import compile_token_css
from .token_ir import build_irt

logger = logging.getLogger(__name__)

# 由 CLI 捕捉並轉成 ❌ 訊息的錯誤
_HANDLED_ERRORS = (IRValidationError, requests.RequestException, FileNotFoundError,
                   json.JSONDecodeError, KeyError, ValueError)


def _settings(args, config: dict) -> CodegenSettings:
    settings = settings_from_config(config)
    if getattr(args, "output", None):
        settings.output_dir = args.output
    if getattr(args, "project_tokens", None):
        settings.project_tokens = args.project_tokens
    return settings


def _compile_export(export: FigmaExport, settings: CodegenSettings) -> CompileResult:
    return compile_component(
        export.document,
        export.variables,
        export.collections,
        project_tokens=load_project_tokens(settings.project_tokens),
        figma_url=export.figma_url,
        file_key=export.file_key,
        max_alias_depth=settings.max_alias_depth,
    )


def _report(result: CompileResult, written: list) -> None:
    intel = result.intelligence
    print(f"   ✅ {result.name}: {intel['category']} ({intel['confidence']:.2f} via {intel['detectedFrom']})")
    print(f"   📄 {len(written)} files → {os.path.dirname(written[0])}")
    if result.code and result.code.content_source == "children":
        print("   ⚠️  No child markup or slots found; component renders {children} only.")
    if result.unmatched_variables:
        print(f"   ⚠️  {len(result.unmatched_variables)} variables without a project token match")


def _compile_and_save(export: FigmaExport, settings: CodegenSettings) -> CompileResult:
    result = _compile_export(export, settings)
    snapshots = os.path.join(settings.snapshot_dir, result.name) if settings.snapshot_dir else None
    written = save_artifacts(result, settings.output_dir, snapshot_dir=snapshots,
                             docs=settings.write_docs, token_css=settings.write_token_css)
    _report(result, written)
    return result


def cmd_generate(args, config: dict) -> int:
    """Generate: 從 Figma REST API 讀取元件並產生程式碼."""
    settings = _settings(args, config)
    file_key, node_id = args.file_key or settings.file_key, args.node_id or settings.node_id
    if args.url:
        file_key, url_node = parse_figma_url(args.url)
        node_id = url_node or node_id

    if not settings.token:
        print(f"❌ 請設定 FIGMA_TOKEN 環境變數，或在 {args.config} 的 figma.personalAccessToken 設定。")
        print("   取得方式：Figma → Settings → Personal access tokens → 新增")
        return 1
    if not file_key or not node_id:
        print("❌ 請提供 Figma URL（含 node-id），或使用 --file-key / --node-id。")
        return 1

    print(f"📥 Fetching {node_id} from Figma file {file_key}")
    client = FigmaAPIClient(settings.token)
    try:
        export = client.fetch_component(file_key, node_id)
    except requests.HTTPError as e:
        status = getattr(e.response, "status_code", None)
        if status == 403:
            print("❌ Figma API 403：Token 無效或已過期，請重新產生 FIGMA_TOKEN。")
        elif status == 404:
            print(f"❌ Figma API 404：找不到檔案 '{file_key}'，請確認 file key 是否正確。")
        else:
            print(f"❌ Figma API 錯誤：{e}")
        return 1
    if args.url:
        export.figma_url = args.url
    _compile_and_save(export, settings)
    return 0


def cmd_compile(args, config: dict) -> int:
    """Compile: 離線 export JSON → 元件檔案."""
    settings = _settings(args, config)
    print(f"🛠️  Compiling {args.export}")
    export = load_export(args.export, args.node_id or settings.node_id)
    _compile_and_save(export, settings)
    return 0


def cmd_inspect(args, config: dict) -> int:
    """預覽 IRS 樹與分類結果."""
    export = load_export(args.export, args.node_id or settings_from_config(config).node_id)
    irs = build_irs(export.document, export.figma_url, export.file_key)
    intel = classify(irs)
    print(f"👁️  {irs['meta']['name']} ({irs['meta']['componentType']})")
    print(preview_tree(irs["tree"]))
    print(f"\nArchetype: {intel['category']} ({intel['confidence']:.2f} via {intel['detectedFrom']})")
    if irs["slots"]:
        print("Slots: " + ", ".join(s["name"] for s in irs["slots"]))
    if irs["variants"]:
        print(f"Variants: {len(irs['variants'])}")
    print(f"Total nodes: {irs['stats']['nodeCount']}")
    return 0


def cmd_tokens(args, config: dict) -> int:
    """只輸出 token CSS bundle."""
    settings = _settings(args, config)
    export = load_export(args.export)
    irt = build_irt(export.variables, export.collections, [export.document], settings.max_alias_depth)
    css = compile_token_css(irt)
    path = args.out or os.path.join(settings.output_dir, "tokens.css")
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(css)
    print(f"✅ {len(irt['tokens'])} tokens → {path}")
    return 0


class ChangeHandler(FileSystemEventHandler):
    """檔案變更事件處理器，帶 debounce 防抖，只處理被監看的檔案。"""

    def __init__(self, callback, loop: asyncio.AbstractEventLoop, watched_paths, debounce: float = 1.0):
        self.callback = callback
        self.loop = loop
        self.watched_paths = {os.path.abspath(p) for p in watched_paths}
        self.last_trigger = 0.0
        self.debounce_seconds = debounce

    def on_modified(self, event):
        if event.is_directory:
            return
        if os.path.abspath(event.src_path) not in self.watched_paths:
            return
        current_time = time.time()
        if current_time - self.last_trigger < self.debounce_seconds:
            return
        self.last_trigger = current_time
        print(f"\n🔄 File changed: {event.src_path}")
        # loop 在獨立執行緒中 run_forever，重新編譯依序執行
        asyncio.run_coroutine_threadsafe(self.callback(), self.loop)


def cmd_watch(args, config: dict) -> int:
    """Watch: 監聽 export / token 檔案變更並自動重新編譯."""
    settings = _settings(args, config)
    watched = [args.export] + ([settings.project_tokens] if settings.project_tokens else [])
    print(f"👀 Watching {', '.join(watched)}")
    print("   Press Ctrl+C to stop.")

    loop = asyncio.new_event_loop()

    async def compile_task():
        try:
            _compile_and_save(load_export(args.export, args.node_id or settings.node_id), settings)
        except _HANDLED_ERRORS as e:
            print(f"   ❌ Compile failed: {e}")
            logger.debug("watch recompile failed", exc_info=True)

    def run_loop():
        asyncio.set_event_loop(loop)
        loop.run_forever()

    loop_thread = threading.Thread(target=run_loop, daemon=True)
    loop_thread.start()

    # 初始編譯一次
    asyncio.run_coroutine_threadsafe(compile_task(), loop).result(timeout=120)

    event_handler = ChangeHandler(compile_task, loop, watched, debounce=settings.debounce)
    observer = Observer()
    for directory in sorted({os.path.dirname(os.path.abspath(p)) for p in watched}):
        observer.schedule(event_handler, path=directory, recursive=False)
    observer.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n👋 Stopping watch...")
        observer.stop()
    finally:
        observer.join()
        loop.call_soon_threadsafe(loop.stop)
    return 0


_COMMANDS = {
    "generate": cmd_generate,
    "compile": cmd_compile,
    "watch": cmd_watch,
    "inspect": cmd_inspect,
    "tokens": cmd_tokens,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Figma component → React/TypeScript code generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config path")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    gen_p = sub.add_parser("generate", help="Figma REST → component files")
    gen_p.add_argument("url", nargs="?", help="Figma design URL with node-id")
    gen_p.add_argument("--file-key", help="Figma file key")
    gen_p.add_argument("--node-id", help="Component node id (e.g. 1:2)")
    gen_p.add_argument("--output", help="Output directory")
    gen_p.add_argument("--project-tokens", help="Project token catalog JSON")

    for name, help_text in (("compile", "Offline export → component files"),
                            ("watch", "Recompile when the export changes")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("export", help="Export JSON path")
        p.add_argument("--node-id", help="Component node id inside the export")
        p.add_argument("--output", help="Output directory")
        p.add_argument("--project-tokens", help="Project token catalog JSON")

    inspect_p = sub.add_parser("inspect", help="Preview IRS tree and archetype")
    inspect_p.add_argument("export", help="Export JSON path")
    inspect_p.add_argument("--node-id", help="Component node id inside the export")

    tokens_p = sub.add_parser("tokens", help="Write token CSS bundle")
    tokens_p.add_argument("export", help="Export JSON path")
    tokens_p.add_argument("--out", help="Output CSS path")
    tokens_p.add_argument("--output", help="Output directory")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    command = _COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1
    try:
        return command(args, load_config(args.config))
    except IRValidationError as e:
        print(f"❌ {e}")
    except requests.RequestException as e:
        print(f"❌ Figma API 錯誤：{e}")
    except FileNotFoundError as e:
        print(f"❌ 找不到檔案：{e.filename or e}")
    except json.JSONDecodeError as e:
        print(f"❌ JSON 格式錯誤：{e}")
    except (KeyError, ValueError) as e:
        print(f"❌ {e}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
