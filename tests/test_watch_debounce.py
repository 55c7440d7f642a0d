"""
Watch Mode / ChangeHandler debounce 單元測試
不需要真實檔案系統事件，用 mock event 物件測試過濾、防抖與 loop 排程邏輯。
"""
import asyncio
import os
import time
from unittest.mock import MagicMock, patch

from figma_codegen.cli import ChangeHandler


# ─── helper: 建立假 FileModifiedEvent ────────────────────────────────────────

def make_event(src_path: str, is_directory: bool = False):
    ev = MagicMock()
    ev.is_directory = is_directory
    ev.src_path = src_path
    return ev


# ─── ChangeHandler.on_modified 過濾邏輯 ──────────────────────────────────────

class TestChangeHandlerFilter:
    """測試 on_modified 的過濾條件：目錄、非監看檔案、callback 呼叫。"""

    def setup_method(self):
        self.loop = asyncio.new_event_loop()

        self.callback = MagicMock()
        self.handler = ChangeHandler(self.callback, self.loop,
                                     ["/work/export.json", "/work/tokens.json"], debounce=0.0)

    def teardown_method(self):
        self.loop.close()

    def test_directory_event_ignored(self):
        ev = make_event("/work", is_directory=True)
        with patch("asyncio.run_coroutine_threadsafe") as mock_run:
            self.handler.on_modified(ev)
            mock_run.assert_not_called()

    def test_unwatched_file_ignored(self):
        for path in ["/work/other.json", "/work/export.json.swp", "/elsewhere/export.json"]:
            with patch("asyncio.run_coroutine_threadsafe") as mock_run:
                self.handler.on_modified(make_event(path))
                mock_run.assert_not_called()

    def test_watched_files_trigger_callback(self):
        for path in ["/work/export.json", "/work/tokens.json"]:
            with patch("asyncio.run_coroutine_threadsafe") as mock_run:
                self.handler.last_trigger = 0  # 重置 debounce
                self.handler.on_modified(make_event(path))
                mock_run.assert_called_once()
        assert self.callback.call_count == 2

    def test_relative_watched_path_matches_absolute_event(self):
        handler = ChangeHandler(MagicMock(), self.loop, ["export.json"], debounce=0.0)
        with patch("asyncio.run_coroutine_threadsafe") as mock_run:
            handler.on_modified(make_event(os.path.abspath("export.json")))
            mock_run.assert_called_once()

    def test_callback_receives_correct_loop(self):
        with patch("asyncio.run_coroutine_threadsafe") as mock_run:
            self.handler.on_modified(make_event("/work/export.json"))
            # 第二個位置參數是 loop
            assert mock_run.call_args[0][1] is self.loop


# ─── ChangeHandler debounce 邏輯 ─────────────────────────────────────────────

class TestChangeHandlerDebounce:
    """測試防抖：短時間內重複觸發只呼叫一次 callback。"""

    def setup_method(self):
        self.loop = asyncio.new_event_loop()

        self.handler = ChangeHandler(MagicMock(), self.loop, ["/work/export.json"], debounce=0.5)

    def teardown_method(self):
        self.loop.close()

    def test_debounce_blocks_rapid_events(self):
        ev = make_event("/work/export.json")
        with patch("asyncio.run_coroutine_threadsafe") as mock_run:
            self.handler.on_modified(ev)
            # 立即再觸發（在 debounce 視窗內）
            self.handler.on_modified(ev)
            self.handler.on_modified(ev)
            assert mock_run.call_count == 1

    def test_debounce_allows_event_after_window(self):
        ev = make_event("/work/export.json")
        with patch("asyncio.run_coroutine_threadsafe") as mock_run:
            self.handler.on_modified(ev)
            assert mock_run.call_count == 1

            # 模擬時間過了超過 debounce 視窗
            self.handler.last_trigger = time.time() - 1.0

            self.handler.on_modified(ev)
            assert mock_run.call_count == 2

    def test_debounce_timestamp_updated(self):
        before = time.time() - 0.01
        with patch("asyncio.run_coroutine_threadsafe"):
            self.handler.on_modified(make_event("/work/export.json"))
            assert self.handler.last_trigger >= before
