"""
SyncShip Server - Main Entry Point

Starts the sync listener on top of the file storage and runs until 'exit'
is typed or the process is interrupted.
"""

import argparse
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from syncship.protocol.framing import get_framing
from syncship.server.file_storage import FileStorage
from syncship.server.managers import ConfigManager
from syncship.server.sync_server import SyncServer

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def SetupLogging(log_level: str = "INFO", log_directory: str = "logs") -> Path:
    """
    Configure logging to write to both console and file

    Returns:
        Path to the log file
    """
    logs_dir = Path(log_directory)
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_filename = logs_dir / f"syncship-server-{datetime.now().strftime('%Y-%m-%d')}.log"

    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            # Console handler
            logging.StreamHandler(),
            # File handler with rotation (max 10MB per file, keep 10 backup files)
            RotatingFileHandler(
                log_filename,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=10,
                encoding='utf-8'
            )
        ]
    )
    return log_filename


def BuildServer(config: ConfigManager, port_override: Optional[int] = None) -> SyncServer:
    """
    Create the file storage and the listener from configuration

    Raises:
        ValueError: If the configured framing is unknown
    """
    storage = FileStorage(config.Get("file_directory"))
    storage.InitializeStorage()

    port = port_override if port_override is not None else int(config.Get("listen_port"))

    return SyncServer(
        storage,
        host=config.Get("listen_host"),
        port=port,
        framing=get_framing(config.Get("framing"), float(config.Get("idle_timeout"))),
        read_timeout=float(config.Get("read_timeout"))
    )


def RunCommandLoop(server: SyncServer) -> None:
    """Block until 'exit' is typed or stdin closes"""
    print("Type 'exit' to stop the server.\n")
    for line in sys.stdin:
        command = line.strip().lower()
        if command == "exit":
            break
        if command == "status":
            print(f"Server is {server.Status.value} on port {server.Port}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='SyncShip - File Synchronization Server')
    parser.add_argument('--config', help='Path to the server configuration file')
    parser.add_argument('--port', type=int, help='Listening port (overrides config)')
    args = parser.parse_args(argv)

    config = ConfigManager(args.config)
    try:
        config.LoadConfig()
    except (OSError, ValueError) as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    log_file = SetupLogging(config.Get("log_level"), config.Get("log_directory"))
    logger.info(f"SyncShip Server starting up - Log file: {log_file}")

    try:
        server = BuildServer(config, args.port)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    try:
        server.Start()
    except OSError:
        return EXIT_FAILURE

    try:
        RunCommandLoop(server)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        server.Stop()
        server.WaitUntilStopped(timeout=5)

    logger.info("Shutdown complete")
    return EXIT_SUCCESS


if __name__ == '__main__':
    sys.exit(main())
