"""
SyncShip Client - Checksum Manager

Computes fresh checksums of local files and persists the baseline checksums:
the checksum each file had the last time client and server agreed on it.
Each baseline is stored as a one-line text file named <file name>.checksum
in the checksum directory. File names match case-insensitively, so the
baseline file is named after the case-folded file name.

Author: SyncShip Project
"""

import logging
from pathlib import Path
from typing import Optional, Union

from syncship.protocol.checksum import calculate_file_checksum

# Configure logging
logger = logging.getLogger(__name__)


CHECKSUM_FILE_SUFFIX = ".checksum"


class ChecksumManager:
    """
    Manages baseline checksums.

    Responsibilities:
    - Calculate the current checksum of a local file
    - Get, save and delete the baseline checksum of a file
    """

    def __init__(self, file_directory: Union[str, Path], checksum_directory: Union[str, Path]):
        """
        Initialize checksum manager.

        Args:
            file_directory: Directory holding the synchronized files
            checksum_directory: Directory holding the baseline checksum files
        """
        self.file_directory = Path(file_directory)
        self.checksum_directory = Path(checksum_directory)

    def ensure_directory(self):
        """Create the checksum directory if it doesn't exist."""
        self.checksum_directory.mkdir(parents=True, exist_ok=True)

    def _get_checksum_path(self, name: str) -> Path:
        return self.checksum_directory / f"{name.casefold()}{CHECKSUM_FILE_SUFFIX}"

    def create_checksum(self, name: str) -> str:
        """
        Calculate the current checksum of a local file.

        Args:
            name: File name in the file directory

        Returns:
            Lowercase hex checksum
        """
        return calculate_file_checksum(self.file_directory / name)

    def get_checksum(self, name: str) -> Optional[str]:
        """
        Get the baseline checksum of a file.

        Returns:
            Baseline checksum, or None if no baseline is stored
        """
        path = self._get_checksum_path(name)
        if not path.is_file():
            return None

        with open(path, 'r', encoding='utf-8') as f:
            checksum = f.readline().strip()
        return checksum or None

    def save_checksum(self, name: str, checksum: str):
        """Store (or replace) the baseline checksum of a file."""
        with open(self._get_checksum_path(name), 'w', encoding='utf-8') as f:
            f.write(checksum)
        logger.debug(f"Baseline for {name} set to {checksum}")

    def delete_checksum(self, name: str):
        """Remove the baseline checksum of a file if one is stored."""
        path = self._get_checksum_path(name)
        if path.is_file():
            path.unlink()
            logger.debug(f"Baseline for {name} removed")
