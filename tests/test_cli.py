"""
Tests for the SyncShip Client command loop, log cleanup and directory watcher
"""

import io
import os
import sys
import threading
import time
from pathlib import Path
from types import SimpleNamespace

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from syncship.client.cli import (
    run_command_loop, run_sync, format_error, cleanup_old_logs, LOG_FILE_PREFIX
)
from syncship.client.models import SyncBucket, SyncFailure, SyncReport
from syncship.client.watcher import DebounceHandler, DirectoryWatcher
from syncship.protocol.exceptions import SyncShipConflictError, SyncShipTransportError
from syncship.protocol.status_codes import SyncStatusCode


class FakeSyncOperations:
    def __init__(self, report=None, error=None):
        self.report = report or SyncReport()
        self.error = error
        self.list_calls = 0
        self.sync_calls = 0

    def show_list(self):
        self.list_calls += 1
        return "Listing files."

    def perform_sync(self):
        self.sync_calls += 1
        if self.error:
            raise self.error
        return self.report


def test_command_loop():
    sync_ops = FakeSyncOperations()
    out = io.StringIO()

    run_command_loop(sync_ops, io.StringIO("list\n\nSYNC\ndance\nexit\nlist\n"), out)

    assert sync_ops.list_calls == 1
    assert sync_ops.sync_calls == 1
    assert "Huh?" in out.getvalue()
    assert out.getvalue().rstrip().endswith("Client stopped.")


def test_command_loop_stops_at_end_of_input():
    out = io.StringIO()
    run_command_loop(FakeSyncOperations(), io.StringIO("list\n"), out)

    assert "Client stopped." in out.getvalue()


def test_sync_errors_are_printed():
    out = io.StringIO()
    error = SyncShipConflictError("The file checksum does not match the original checksum.",
                                  SyncStatusCode.FILE_CONFLICT)

    assert not run_sync(FakeSyncOperations(error=error), out)
    assert out.getvalue().strip() == "Error 412: The file checksum does not match the original checksum."


def test_report_failures_are_printed():
    report = SyncReport()
    report.add_failure(SyncFailure("a.txt", SyncBucket.CLIENT_MODIFIED, 412, "conflict"))
    out = io.StringIO()

    assert not run_sync(FakeSyncOperations(report=report), out)
    assert "Error 412: conflict (a.txt)" in out.getvalue()


def test_format_error_without_status():
    assert format_error(SyncShipTransportError("Cannot connect")) == "Error: Cannot connect"


def test_cleanup_old_logs(tmp_path):
    config = SimpleNamespace(get=lambda key, default=None: 7)

    current = tmp_path / f"{LOG_FILE_PREFIX}current.log"
    old = tmp_path / f"{LOG_FILE_PREFIX}old.log"
    recent = tmp_path / f"{LOG_FILE_PREFIX}recent.log"
    unrelated = tmp_path / "other.log"
    for path in (current, old, recent, unrelated):
        path.write_text("log")

    ten_days_ago = time.time() - 10 * 86400
    for path in (current, old, unrelated):
        os.utime(path, (ten_days_ago, ten_days_ago))

    assert cleanup_old_logs(config, current) == 1
    assert current.exists()
    assert not old.exists()
    assert recent.exists()
    assert unrelated.exists()


def test_report_summary():
    report = SyncReport()
    report.record(SyncBucket.CLIENT_NEW)
    report.record(SyncBucket.UNMODIFIED)
    report.record(SyncBucket.UNMODIFIED)

    assert report.success
    assert report.total_processed == 3
    assert report.summary().startswith("1 uploaded, 0 updated")
    assert report.summary().endswith("2 unmodified, 0 failed")


# ==================== Watcher ====================

def test_debounce_handler_coalesces_events():
    fired = []
    done = threading.Event()

    def callback():
        fired.append(1)
        done.set()

    handler = DebounceHandler(callback, debounce_seconds=0.2)
    event = SimpleNamespace(is_directory=False, event_type="modified", src_path="a.txt")
    for _ in range(5):
        handler.on_any_event(event)

    assert done.wait(timeout=5)
    time.sleep(0.3)
    assert fired == [1]


def test_debounce_handler_ignores_events_while_paused():
    fired = threading.Event()
    handler = DebounceHandler(fired.set, debounce_seconds=0.05)
    handler.paused = True

    handler.on_any_event(SimpleNamespace(is_directory=False, event_type="created", src_path="a.txt"))
    handler.on_any_event(SimpleNamespace(is_directory=True, event_type="created", src_path="dir"))

    assert not fired.wait(timeout=0.3)


def test_directory_watcher_triggers_on_new_file(tmp_path):
    triggered = threading.Event()
    watcher = DirectoryWatcher(tmp_path, triggered.set, debounce_seconds=0.1)
    watcher.start()
    try:
        assert watcher.is_running
        (tmp_path / "new.txt").write_bytes(b"data")
        assert triggered.wait(timeout=5)
    finally:
        watcher.stop()

    assert not watcher.is_running


def test_directory_watcher_pause_drops_pending_sync(tmp_path):
    triggered = threading.Event()
    watcher = DirectoryWatcher(tmp_path, triggered.set, debounce_seconds=0.3)

    watcher.handler.on_any_event(SimpleNamespace(is_directory=False, event_type="modified", src_path="x"))
    watcher.pause()

    assert not triggered.wait(timeout=0.6)
    watcher.resume()
    assert not watcher.handler.paused
