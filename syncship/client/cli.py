"""
SyncShip Client - CLI Mode Module

Runs a single operation (list or sync) or the interactive command loop.
Logs to the console and to a timestamped file.

Author: SyncShip Project
"""

import sys
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional, TextIO

from syncship.protocol.exceptions import SyncShipError
from syncship.protocol.framing import get_framing
from syncship.client.api import SyncClient
from syncship.client.managers import ConfigManager, FileManager, ChecksumManager
from syncship.client.operations import SyncOperations
from syncship.client.watcher import DirectoryWatcher


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

LOG_FILE_PREFIX = "syncship-client-"


def setup_cli_logging(config_manager: ConfigManager, log_directory: str = "logs") -> Path:
    """
    Setup logging with a timestamped log file.

    Creates log file with format: syncship-client-YYYY-MM-DD-HH-MM-SS.log
    in the log directory.

    Args:
        config_manager: ConfigManager instance for log settings
        log_directory: Directory for log files

    Returns:
        Path to the created log file
    """
    log_level = config_manager.get("log_level", "INFO")

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_dir = Path(log_directory)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{LOG_FILE_PREFIX}{timestamp}.log"

    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)  # Also output to console
        ]
    )

    logger = logging.getLogger(__name__)
    logger.info(f"SyncShip Client - Log file: {log_file}")
    logger.info(f"Log level: {log_level}")

    return log_file


def cleanup_old_logs(config_manager: ConfigManager, current_log: Path) -> int:
    """
    Delete log files older than retention period.

    Args:
        config_manager: ConfigManager instance for retention settings
        current_log: Path to current log file (never deleted)

    Returns:
        Number of deleted log files
    """
    logger = logging.getLogger(__name__)
    retention_days = config_manager.get("log_retention_days", 30)

    if retention_days <= 0:
        return 0  # Retention disabled

    cutoff_time = datetime.now().timestamp() - (retention_days * 86400)

    deleted_count = 0
    for log_file in current_log.parent.glob(f"{LOG_FILE_PREFIX}*.log"):
        if log_file == current_log:
            continue

        try:
            if log_file.stat().st_mtime < cutoff_time:
                log_file.unlink()
                deleted_count += 1
        except OSError as e:
            logger.warning(f"Failed to delete old log file {log_file}: {e}")

    if deleted_count > 0:
        logger.info(f"Deleted {deleted_count} old log file(s)")
    return deleted_count


def build_sync_operations(config_manager: ConfigManager) -> SyncOperations:
    """
    Create the sync client, managers and sync operations from configuration.

    Creates the file and checksum directories if they don't exist.

    Raises:
        ValueError: If the configured framing is unknown
    """
    framing = get_framing(config_manager.get("framing"), float(config_manager.get("idle_timeout")))

    sync_client = SyncClient(
        config_manager.get("server_host"),
        int(config_manager.get("server_port")),
        framing=framing,
        read_timeout=float(config_manager.get("read_timeout")),
        connect_timeout=float(config_manager.get("connect_timeout"))
    )

    file_mgr = FileManager(config_manager.get("file_directory"))
    file_mgr.ensure_directory()

    checksum_mgr = ChecksumManager(config_manager.get("file_directory"),
                                   config_manager.get("checksum_directory"))
    checksum_mgr.ensure_directory()

    return SyncOperations(sync_client, file_mgr, checksum_mgr)


def format_error(error: SyncShipError) -> str:
    """Render an error as 'Error <status>: <message>'"""
    if error.status_code is None:
        return f"Error: {error.message}"
    return f"Error {int(error.status_code)}: {error.message}"


def run_sync(sync_ops: SyncOperations, out: TextIO = sys.stdout) -> bool:
    """
    Run one sync pass and print any errors.

    Returns:
        True if every operation succeeded
    """
    try:
        report = sync_ops.perform_sync()
    except SyncShipError as e:
        print(format_error(e), file=out)
        return False

    for failure in report.failures:
        status = failure.status_code if failure.status_code is not None else "-"
        print(f"Error {status}: {failure.message} ({failure.name})", file=out)
    return report.success


def run_command_loop(sync_ops: SyncOperations, stream: Optional[TextIO] = None,
                     out: TextIO = sys.stdout):
    """
    Read commands until 'exit' or end of input.

    Commands: list, sync, exit. Anything else prints 'Huh?'.
    """
    stream = stream or sys.stdin
    print("Client started.\nYou can type commands now.\n", file=out)

    for line in stream:
        command = line.strip().lower()
        if not command:
            continue

        if command == "list":
            try:
                sync_ops.show_list()
            except SyncShipError as e:
                print(format_error(e), file=out)
        elif command == "sync":
            run_sync(sync_ops, out)
        elif command == "exit":
            break
        else:
            print("Huh?", file=out)

    print("Client stopped.", file=out)


def run_cli_operation(operation: Optional[str], config_file: Optional[str] = None) -> int:
    """
    Execute a client operation.

    Process:
    1. Load configuration
    2. Setup logging to timestamped file
    3. Build the sync client and managers
    4. Run list, sync, or the interactive loop (with the watcher if enabled)
    5. Return appropriate exit code

    Args:
        operation: "list", "sync", or None for the interactive loop
        config_file: Optional path to the configuration file

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    config_mgr = ConfigManager(config_file)
    try:
        config_mgr.load_config()
    except (OSError, ValueError) as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    log_file = setup_cli_logging(config_mgr)
    cleanup_old_logs(config_mgr, log_file)
    logger = logging.getLogger(__name__)

    try:
        sync_ops = build_sync_operations(config_mgr)
    except (OSError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    try:
        if operation == "list":
            sync_ops.show_list()
            return EXIT_SUCCESS

        if operation == "sync":
            return EXIT_SUCCESS if run_sync(sync_ops) else EXIT_FAILURE

        watcher = None
        if config_mgr.get("watch_enabled"):
            watcher = DirectoryWatcher(
                sync_ops.file_mgr.file_directory,
                lambda: run_sync(sync_ops),
                float(config_mgr.get("watch_debounce_seconds"))
            )
            sync_ops.watcher = watcher
            watcher.start()

        try:
            run_command_loop(sync_ops)
        finally:
            if watcher:
                watcher.stop()
        return EXIT_SUCCESS

    except SyncShipError as e:
        logger.error(format_error(e))
        return EXIT_FAILURE

    except KeyboardInterrupt:
        logger.warning("Operation cancelled by user (Ctrl+C)")
        return EXIT_FAILURE
