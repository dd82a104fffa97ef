"""
SyncShip Client - File Manager

Plain file I/O on the synchronized directory. Only top-level files are synced;
subdirectories are ignored.

Author: SyncShip Project
"""

import logging
from pathlib import Path
from typing import List, Union

# Configure logging
logger = logging.getLogger(__name__)


class FileManager:
    """
    Reads and writes files in the client file directory.

    Responsibilities:
    - List the names of the top-level files
    - Read, write and delete files by name
    """

    def __init__(self, file_directory: Union[str, Path]):
        self.file_directory = Path(file_directory)

    def ensure_directory(self):
        """Create the file directory if it doesn't exist."""
        self.file_directory.mkdir(parents=True, exist_ok=True)

    def get_file_path(self, name: str) -> Path:
        return self.file_directory / name

    def get_file_names(self) -> List[str]:
        """
        List the names of all top-level files.

        Returns:
            Sorted list of file names
        """
        return sorted(p.name for p in self.file_directory.iterdir() if p.is_file())

    def get_file_content(self, name: str) -> bytes:
        with open(self.get_file_path(name), 'rb') as f:
            return f.read()

    def save_file_content(self, name: str, content: bytes):
        """
        Write content to a file, replacing any existing content.

        Args:
            name: File name
            content: File content (None writes an empty file)
        """
        with open(self.get_file_path(name), 'wb') as f:
            f.write(content or b"")
        logger.debug(f"Saved {name} ({len(content or b'')} bytes)")

    def delete_file(self, name: str):
        """Delete a file if it exists."""
        path = self.get_file_path(name)
        if path.is_file():
            path.unlink()
            logger.debug(f"Deleted {name}")

    def file_exists(self, name: str) -> bool:
        return self.get_file_path(name).is_file()
