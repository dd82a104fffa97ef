"""
Tests for the optimistic-concurrency file storage in SyncShip Server

Covers the Put and Delete acceptance rules, name validation and atomic writes.
"""

import sys
import threading
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from syncship.protocol.checksum import calculate_checksum
from syncship.protocol.models import FileRecord, SyncedFile
from syncship.protocol.status_codes import SyncStatusCode
from syncship.server.file_storage import FileStorage, ValidateFileName, TEMP_FILE_PREFIX


@pytest.fixture
def storage(tmp_path):
    storage = FileStorage(str(tmp_path / "storage"))
    storage.InitializeStorage()
    return storage


def _file(name, content):
    return SyncedFile(name, calculate_checksum(content), content)


def test_put_new_file(storage):
    outcome = storage.HandlePut("", _file("a.txt", b"first"))

    assert outcome.status == SyncStatusCode.OK
    assert outcome.checksum == calculate_checksum(b"first")
    assert (storage.storage_root / "a.txt").read_bytes() == b"first"


def test_put_rules(storage):
    """Test Put succeeds iff (absent and no original) or (present and original matches)"""
    storage.HandlePut("", _file("a.txt", b"v1"))
    v1 = calculate_checksum(b"v1")

    # Present and no original checksum
    outcome = storage.HandlePut("", _file("a.txt", b"v2"))
    assert outcome.status == SyncStatusCode.FILE_CONFLICT

    # Absent but an original checksum
    outcome = storage.HandlePut(v1, _file("missing.txt", b"v2"))
    assert outcome.status == SyncStatusCode.NOT_FOUND

    # Present with the current checksum
    outcome = storage.HandlePut(v1, _file("a.txt", b"v2"))
    assert outcome.status == SyncStatusCode.OK
    assert outcome.checksum == calculate_checksum(b"v2")

    # Present with a stale checksum (lost update)
    outcome = storage.HandlePut(v1, _file("a.txt", b"v3"))
    assert outcome.status == SyncStatusCode.FILE_CONFLICT
    assert (storage.storage_root / "a.txt").read_bytes() == b"v2"

    print("Put rule tests passed")


def test_put_with_unrelated_original_checksum_conflicts(storage):
    """An original checksum equal to neither "" nor the current checksum is a conflict"""
    storage.HandlePut("", _file("d.txt", b"server copy"))

    outcome = storage.HandlePut(calculate_checksum(b"something else"), _file("d.txt", b"client copy"))

    assert outcome.status == SyncStatusCode.FILE_CONFLICT
    assert (storage.storage_root / "d.txt").read_bytes() == b"server copy"


def test_delete_requires_checksum(storage):
    storage.HandlePut("", _file("a.txt", b"data"))

    outcome = storage.HandleDelete("a.txt", "")

    assert outcome.status == SyncStatusCode.BAD_REQUEST
    assert storage.FileExists("a.txt")


def test_delete_rules(storage):
    storage.HandlePut("", _file("a.txt", b"data"))

    assert storage.HandleDelete("missing.txt", "abc").status == SyncStatusCode.NOT_FOUND
    assert storage.HandleDelete("a.txt", calculate_checksum(b"other")).status == SyncStatusCode.FILE_CONFLICT
    assert storage.FileExists("a.txt")

    outcome = storage.HandleDelete("a.txt", calculate_checksum(b"data"))
    assert outcome.status == SyncStatusCode.OK
    assert not storage.FileExists("a.txt")


def test_put_then_get_round_trip(storage):
    content = bytes(range(256))
    storage.HandlePut("", _file("bin.dat", content))

    outcome, file = storage.HandleGet("bin.dat")

    assert outcome.status == SyncStatusCode.OK
    assert file.content == content
    assert file.checksum == calculate_checksum(content)


def test_get_missing_file(storage):
    outcome, file = storage.HandleGet("missing.txt")

    assert outcome.status == SyncStatusCode.NOT_FOUND
    assert file is None


def test_list_files(storage):
    storage.HandlePut("", _file("b.txt", b"b"))
    storage.HandlePut("", _file("a.txt", b"a"))
    (storage.storage_root / "subdir").mkdir()
    (storage.storage_root / f"{TEMP_FILE_PREFIX}partial").write_bytes(b"x")

    outcome, files = storage.HandleList()

    assert outcome.status == SyncStatusCode.OK
    assert files == [FileRecord("a.txt", calculate_checksum(b"a")),
                     FileRecord("b.txt", calculate_checksum(b"b"))]


def test_invalid_names_are_rejected(storage):
    for name in ["", ".", "..", "../escape.txt", "sub/file.txt", "sub\\file.txt", f"{TEMP_FILE_PREFIX}x"]:
        assert ValidateFileName(name) is not None, name
        assert storage.HandlePut("", _file(name, b"x")).status == SyncStatusCode.BAD_REQUEST
        assert storage.HandleDelete(name, "abc").status == SyncStatusCode.BAD_REQUEST

    assert ValidateFileName("notes v2.txt") is None
    assert not (storage.storage_root.parent / "escape.txt").exists()


def test_names_match_stored_files_case_insensitively(storage):
    storage.HandlePut("", _file("Report.txt", b"v1"))
    v1 = calculate_checksum(b"v1")

    # A case variant of a stored file is not a new file
    assert storage.HandlePut("", _file("report.txt", b"other")).status == SyncStatusCode.FILE_CONFLICT

    outcome = storage.HandlePut(v1, _file("REPORT.txt", b"v2"))
    assert outcome.status == SyncStatusCode.OK
    assert storage.ListFiles() == [FileRecord("Report.txt", calculate_checksum(b"v2"))]
    assert [f.name for f in storage.ListFiles()] == ["Report.txt"]

    outcome, file = storage.HandleGet("report.TXT")
    assert outcome.status == SyncStatusCode.OK
    assert file.name == "Report.txt"
    assert file.content == b"v2"

    assert storage.HandleDelete("rePort.txt", calculate_checksum(b"v2")).status == SyncStatusCode.OK
    assert storage.ListFiles() == []


def test_error_messages_leave_out_file_name(storage):
    name = "a{b.txt"

    outcome, _ = storage.HandleGet(name)
    assert outcome.status == SyncStatusCode.NOT_FOUND
    assert outcome.message == "File not found."

    assert storage.HandlePut("abc", _file(name, b"x")).message == "File not found."
    assert storage.HandleDelete(name, "abc").message == "File not found."
    assert "{" not in storage.HandlePut("", _file("{/x", b"x")).message


def test_concurrent_updates_admit_one_writer(storage):
    """Test the checksum compare and the write form one critical section"""
    storage.HandlePut("", _file("shared.txt", b"base"))
    base = calculate_checksum(b"base")

    outcomes = []
    outcomes_lock = threading.Lock()

    def writer(index):
        outcome = storage.HandlePut(base, _file("shared.txt", f"writer {index}".encode()))
        with outcomes_lock:
            outcomes.append(outcome.status)

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count(SyncStatusCode.OK) == 1
    assert outcomes.count(SyncStatusCode.FILE_CONFLICT) == 9
