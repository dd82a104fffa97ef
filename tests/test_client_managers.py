"""
Tests for the SyncShip Client managers

Covers baseline checksum storage, local file I/O and configuration defaults.
"""

import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from syncship.client.managers import ChecksumManager, ConfigManager, FileManager, DEFAULT_CONFIG
from syncship.protocol.checksum import calculate_checksum


def test_checksum_manager_baselines(tmp_path):
    checksum_dir = tmp_path / "checksums"
    manager = ChecksumManager(tmp_path / "files", checksum_dir)
    manager.ensure_directory()

    assert manager.get_checksum("a.txt") is None

    manager.save_checksum("a.txt", "abc123")
    assert manager.get_checksum("a.txt") == "abc123"
    assert (checksum_dir / "a.txt.checksum").read_text() == "abc123"

    manager.save_checksum("a.txt", "def456")
    assert manager.get_checksum("a.txt") == "def456"

    manager.delete_checksum("a.txt")
    assert manager.get_checksum("a.txt") is None

    # Deleting a missing baseline is a no-op
    manager.delete_checksum("a.txt")

    print("Baseline checksum tests passed")


def test_checksum_manager_empty_baseline_file(tmp_path):
    manager = ChecksumManager(tmp_path, tmp_path)
    (tmp_path / "a.txt.checksum").write_text("")

    assert manager.get_checksum("a.txt") is None


def test_checksum_manager_baselines_ignore_case(tmp_path):
    manager = ChecksumManager(tmp_path, tmp_path)

    manager.save_checksum("Notes.TXT", "abc123")

    assert manager.get_checksum("notes.txt") == "abc123"
    assert (tmp_path / "notes.txt.checksum").is_file()

    manager.delete_checksum("NOTES.txt")
    assert manager.get_checksum("Notes.TXT") is None


def test_checksum_manager_create_checksum(tmp_path):
    (tmp_path / "a.txt").write_bytes(b"content")
    manager = ChecksumManager(tmp_path, tmp_path / "checksums")

    assert manager.create_checksum("a.txt") == calculate_checksum(b"content")


def test_file_manager(tmp_path):
    manager = FileManager(tmp_path / "files")
    manager.ensure_directory()

    manager.save_file_content("b.txt", b"bee")
    manager.save_file_content("a.txt", b"long original content")
    manager.save_file_content("a.txt", b"short")
    manager.save_file_content("empty.txt", None)
    (tmp_path / "files" / "subdir").mkdir()

    assert manager.get_file_names() == ["a.txt", "b.txt", "empty.txt"]
    assert manager.get_file_content("a.txt") == b"short"
    assert manager.get_file_content("empty.txt") == b""
    assert manager.file_exists("b.txt")

    manager.delete_file("b.txt")
    manager.delete_file("b.txt")
    assert not manager.file_exists("b.txt")


def test_config_manager_creates_defaults(tmp_path):
    config_file = tmp_path / "config.json"
    manager = ConfigManager(config_file)

    config = manager.load_config()

    assert config == DEFAULT_CONFIG
    assert json.loads(config_file.read_text()) == DEFAULT_CONFIG
    assert manager.get("server_port") == 8733
    assert manager.get("framing") == "length"


def test_config_manager_merges_missing_keys(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"server_host": "sync.example.org"}))

    manager = ConfigManager(config_file)
    manager.load_config()

    assert manager.get("server_host") == "sync.example.org"
    assert manager.get("checksum_directory") == DEFAULT_CONFIG["checksum_directory"]

    manager.set("server_port", 9000)
    assert json.loads(config_file.read_text())["server_port"] == 9000
