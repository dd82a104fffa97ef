"""
Tests for the sync pass in SyncShip Client

Runs a real server on a free loopback port and syncs a client directory against it.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from syncship.client.api import SyncClient
from syncship.client.managers import FileManager, ChecksumManager
from syncship.client.models import SyncBucket
from syncship.client.operations import SyncOperations
from syncship.protocol.checksum import calculate_checksum
from syncship.protocol.exceptions import SyncShipConflictError, SyncShipTransportError
from syncship.protocol.models import SyncedFile
from syncship.server.file_storage import FileStorage
from syncship.server.sync_server import SyncServer


class CountingClient(SyncClient):
    """SyncClient that counts the calls which transfer or change files"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []

    def get_file(self, name):
        self.calls.append(("get", name))
        return super().get_file(name)

    def add_file(self, name, content):
        self.calls.append(("add", name))
        return super().add_file(name, content)

    def update_file(self, name, original_checksum, content):
        self.calls.append(("update", name))
        return super().update_file(name, original_checksum, content)

    def delete_file(self, name, checksum):
        self.calls.append(("delete", name))
        return super().delete_file(name, checksum)


@pytest.fixture
def storage(tmp_path):
    storage = FileStorage(str(tmp_path / "server"))
    storage.InitializeStorage()
    return storage


@pytest.fixture
def sync_env(tmp_path, storage):
    server = SyncServer(storage, host="127.0.0.1", port=0)
    server.Start()

    client = CountingClient("127.0.0.1", server.Port)
    file_mgr = FileManager(tmp_path / "client")
    file_mgr.ensure_directory()
    checksum_mgr = ChecksumManager(tmp_path / "client", tmp_path / "checksums")
    checksum_mgr.ensure_directory()

    yield SyncOperations(client, file_mgr, checksum_mgr)

    server.Stop()
    server.WaitUntilStopped(timeout=5)


def _seed_server(storage, name, content, original_checksum=""):
    outcome = storage.HandlePut(original_checksum, SyncedFile(name, calculate_checksum(content), content))
    assert outcome.is_ok
    return outcome.checksum


def test_scenario_upload_new_file(sync_env, storage):
    """Scenario A: a new local file is uploaded and gets a baseline"""
    sync_env.file_mgr.save_file_content("a.txt", b"alpha")

    report = sync_env.perform_sync()

    assert report.success
    assert report.processed[SyncBucket.CLIENT_NEW] == 1
    assert (storage.storage_root / "a.txt").read_bytes() == b"alpha"
    assert sync_env.checksum_mgr.get_checksum("a.txt") == calculate_checksum(b"alpha")


def test_scenario_download_new_file(sync_env, storage):
    """Scenario B: a file only on the server is downloaded"""
    _seed_server(storage, "b.txt", b"bravo")

    report = sync_env.perform_sync()

    assert report.processed[SyncBucket.SERVER_NEW] == 1
    assert sync_env.file_mgr.get_file_content("b.txt") == b"bravo"
    assert sync_env.checksum_mgr.get_checksum("b.txt") == calculate_checksum(b"bravo")


def test_scenario_upload_modified_file(sync_env, storage):
    """Scenario C: a local edit on top of the baseline is uploaded as an update"""
    sync_env.file_mgr.save_file_content("c.txt", b"v1")
    sync_env.perform_sync()

    sync_env.file_mgr.save_file_content("c.txt", b"v2")
    assert sync_env.get_classification().find_bucket("c.txt") == SyncBucket.CLIENT_MODIFIED

    report = sync_env.perform_sync()

    assert report.processed[SyncBucket.CLIENT_MODIFIED] == 1
    assert (storage.storage_root / "c.txt").read_bytes() == b"v2"
    assert sync_env.checksum_mgr.get_checksum("c.txt") == calculate_checksum(b"v2")


def test_server_change_is_downloaded(sync_env, storage):
    sync_env.file_mgr.save_file_content("d.txt", b"v1")
    sync_env.perform_sync()

    _seed_server(storage, "d.txt", b"v2 from elsewhere", calculate_checksum(b"v1"))
    report = sync_env.perform_sync()

    assert report.processed[SyncBucket.SERVER_MODIFIED] == 1
    assert report.soft_conflicts == []
    assert sync_env.file_mgr.get_file_content("d.txt") == b"v2 from elsewhere"


def test_both_sides_changed_server_wins_with_soft_conflict(sync_env, storage):
    sync_env.file_mgr.save_file_content("e.txt", b"v1")
    sync_env.perform_sync()

    _seed_server(storage, "e.txt", b"server edit", calculate_checksum(b"v1"))
    sync_env.file_mgr.save_file_content("e.txt", b"client edit")

    report = sync_env.perform_sync()

    assert report.soft_conflicts == ["e.txt"]
    assert sync_env.file_mgr.get_file_content("e.txt") == b"server edit"


def test_deletions_propagate(sync_env, storage):
    sync_env.file_mgr.save_file_content("local-delete.txt", b"1")
    sync_env.file_mgr.save_file_content("remote-delete.txt", b"2")
    sync_env.perform_sync()

    sync_env.file_mgr.delete_file("local-delete.txt")
    storage.HandleDelete("remote-delete.txt", calculate_checksum(b"2"))

    report = sync_env.perform_sync()

    assert report.processed[SyncBucket.CLIENT_DELETED] == 1
    assert report.processed[SyncBucket.SERVER_DELETED] == 1
    assert not storage.FileExists("local-delete.txt")
    assert not sync_env.file_mgr.file_exists("remote-delete.txt")
    assert sync_env.checksum_mgr.get_checksum("local-delete.txt") is None
    assert sync_env.checksum_mgr.get_checksum("remote-delete.txt") is None


def test_sync_is_idempotent(sync_env, storage):
    sync_env.file_mgr.save_file_content("one.txt", b"1")
    _seed_server(storage, "two.txt", b"2")
    sync_env.perform_sync()

    sync_env.client.calls.clear()
    assert sync_env.get_classification().is_synchronized

    report = sync_env.perform_sync()

    assert report.success
    assert report.processed[SyncBucket.UNMODIFIED] == 2
    assert report.total_processed == 2
    assert sync_env.client.calls == []

    print("Idempotence tests passed")


def test_unmodified_files_heal_missing_baseline(sync_env, storage):
    sync_env.file_mgr.save_file_content("f.txt", b"same")
    _seed_server(storage, "f.txt", b"same")

    sync_env.perform_sync()

    assert sync_env.checksum_mgr.get_checksum("f.txt") == calculate_checksum(b"same")


def test_case_variant_names_update_the_server_file(sync_env, storage):
    """A local A.txt pairs with the server's a.txt and edits update a.txt"""
    _seed_server(storage, "a.txt", b"same")
    sync_env.file_mgr.save_file_content("A.txt", b"same")

    report = sync_env.perform_sync()
    assert report.processed[SyncBucket.UNMODIFIED] == 1

    sync_env.file_mgr.save_file_content("A.txt", b"edited")
    report = sync_env.perform_sync()

    assert report.success, report.failures
    assert report.processed[SyncBucket.CLIENT_MODIFIED] == 1
    assert (storage.storage_root / "a.txt").read_bytes() == b"edited"
    assert [record.name for record in storage.ListFiles()] == ["a.txt"]
    assert sync_env.file_mgr.get_file_names() == ["A.txt"]
    assert sync_env.get_classification().is_synchronized


def test_case_variant_conflict_converges(sync_env, storage):
    """Server notes.txt overwrites the differing local Notes.txt once, then stays in sync"""
    _seed_server(storage, "notes.txt", b"server copy")
    sync_env.file_mgr.save_file_content("Notes.txt", b"client copy")

    report = sync_env.perform_sync()

    assert report.soft_conflicts == ["notes.txt"]
    assert report.processed[SyncBucket.SERVER_MODIFIED] == 1
    assert sync_env.file_mgr.get_file_names() == ["Notes.txt"]
    assert sync_env.file_mgr.get_file_content("Notes.txt") == b"server copy"

    for _ in range(3):
        report = sync_env.perform_sync()
        assert report.success
        assert report.soft_conflicts == []
        assert report.total_processed == report.processed[SyncBucket.UNMODIFIED] == 1
        assert sync_env.file_mgr.get_file_names() == ["Notes.txt"]

    assert sync_env.get_classification().is_synchronized


def test_show_list_labels(sync_env, storage):
    sync_env.file_mgr.save_file_content("synced.txt", b"s")
    sync_env.perform_sync()

    sync_env.file_mgr.save_file_content("local.txt", b"l")
    _seed_server(storage, "remote.txt", b"r")

    report = sync_env.show_list()

    assert report.splitlines() == [
        "Listing files.",
        "UNVERSIONED:",
        "  local.txt",
        "PENDING:",
        "  remote.txt",
        "UNMODIFIED:",
        "  synced.txt",
    ]


def test_failed_bucket_is_abandoned_and_pass_continues(sync_env, storage):
    """Test one failure skips the rest of its bucket, not the remaining buckets"""
    sync_env.file_mgr.save_file_content("new1.txt", b"1")
    sync_env.file_mgr.save_file_content("new2.txt", b"2")
    _seed_server(storage, "pending.txt", b"p")

    def rejecting_add(name, content):
        sync_env.client.calls.append(("add", name))
        raise SyncShipConflictError("already there")

    sync_env.client.add_file = rejecting_add

    report = sync_env.perform_sync()

    assert not report.success
    assert len(report.failures) == 1
    assert report.failures[0].bucket == SyncBucket.CLIENT_NEW
    assert report.failures[0].message == "already there"
    assert [call for call in sync_env.client.calls if call[0] == "add"] == [("add", "new1.txt")]

    # Baselines only change after confirmed success
    assert sync_env.checksum_mgr.get_checksum("new1.txt") is None
    assert sync_env.file_mgr.get_file_content("pending.txt") == b"p"


def test_list_failure_propagates(tmp_path):
    client = SyncClient("127.0.0.1", 1, connect_timeout=1)
    file_mgr = FileManager(tmp_path)
    sync_ops = SyncOperations(client, file_mgr, ChecksumManager(tmp_path, tmp_path / "checksums"))

    with pytest.raises(SyncShipTransportError):
        sync_ops.perform_sync()
    assert not sync_ops.is_syncing


def test_watcher_paused_during_sync(sync_env):
    events = []

    class RecordingWatcher:
        def pause(self):
            events.append(("pause", sync_env.is_syncing))

        def resume(self):
            events.append(("resume", sync_env.is_syncing))

    sync_env.watcher = RecordingWatcher()
    sync_env.perform_sync()

    assert events == [("pause", True), ("resume", True)]
