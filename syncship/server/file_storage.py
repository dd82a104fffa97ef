"""
SyncShip Server - File Storage

This module stores synchronized files on the server and guards every write with an
optimistic-concurrency check:
- PUT with an empty original checksum only creates files that do not exist yet
- PUT with an original checksum only replaces a file whose current checksum matches
- DELETE always requires the checksum of the file being deleted

Checksum equality is the only gate; there are no version counters or timestamps.
The check and the write for one file name run under a per-file lock. Names match
stored files case-insensitively.
"""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from syncship.protocol.checksum import calculate_checksum, calculate_file_checksum
from syncship.protocol.models import FileRecord, SyncedFile, SyncOutcome
from syncship.server.handlers import SyncRequestHandler

logger = logging.getLogger(__name__)


DEFAULT_STORAGE_ROOT = "storage"
TEMP_FILE_PREFIX = ".syncship-"


def ValidateFileName(name: Optional[str]) -> Optional[str]:
    """
    Validate a file name received from a client

    Files are stored flat in the storage directory, so names must not contain
    path separators or refer to the directory itself. Messages leave the name
    out; they travel as plain JSON text.

    Args:
        name: Decoded file name

    Returns:
        Error message if the name is invalid, None otherwise
    """
    if not name:
        return "No file name specified."
    if name in (".", ".."):
        return "Invalid file name."
    if "/" in name or "\\" in name or "\x00" in name:
        return "File name must not contain path separators."
    if name.startswith(TEMP_FILE_PREFIX):
        return "File name uses a reserved prefix."
    return None


class FileStorage(SyncRequestHandler):
    """
    Flat directory of synchronized files with checksum-guarded writes

    Responsibilities:
    - List stored files with fresh checksums
    - Serve file content
    - Accept or reject PUT and DELETE based on checksum comparison
    - Write files atomically
    """

    def __init__(self, storage_root: str = DEFAULT_STORAGE_ROOT):
        """
        Initialize file storage

        Args:
            storage_root: Directory holding the synchronized files
        """
        self.storage_root = Path(storage_root)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def InitializeStorage(self) -> None:
        """Create the storage directory if it doesn't exist"""
        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            logger.info(f"Storage directory ready: {self.storage_root.absolute()}")
        except Exception as e:
            logger.error(f"Failed to initialize storage: {str(e)}")
            raise

    # ==================== Path and Lock Helpers ====================

    def GetFilePath(self, name: str) -> Path:
        """Resolve a file name to its path in storage"""
        return self.storage_root / name

    def ResolveFileName(self, name: str) -> str:
        """
        Find the stored spelling of a file name

        Names match case-insensitively: when no file has exactly this name but one
        differs only in case, the stored name is returned. Unknown names are
        returned unchanged.
        """
        if self.GetFilePath(name).is_file():
            return name

        key = name.casefold()
        for file_path in self.storage_root.iterdir():
            if file_path.name.startswith(TEMP_FILE_PREFIX) or not file_path.is_file():
                continue
            if file_path.name.casefold() == key:
                return file_path.name
        return name

    def FileExists(self, name: str) -> bool:
        return self.GetFilePath(name).is_file()

    def CalculateFileChecksum(self, name: str) -> str:
        """Calculate the current checksum of a stored file"""
        return calculate_file_checksum(self.GetFilePath(name))

    def _GetFileLock(self, name: str) -> threading.Lock:
        """Get the lock serializing check-then-write for one file name"""
        key = name.casefold()
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def _WriteFileAtomic(self, name: str, content: bytes) -> None:
        """Write content to a temporary file and move it into place"""
        fd, temp_path = tempfile.mkstemp(prefix=TEMP_FILE_PREFIX, dir=self.storage_root)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.GetFilePath(name))
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    # ==================== Request Handlers ====================

    def ListFiles(self) -> List[FileRecord]:
        """
        List all stored files with freshly calculated checksums

        Returns:
            List of FileRecord sorted by name
        """
        records = []
        for file_path in sorted(self.storage_root.iterdir()):
            if not file_path.is_file() or file_path.name.startswith(TEMP_FILE_PREFIX):
                continue
            records.append(FileRecord(file_path.name, calculate_file_checksum(file_path)))
        return records

    def HandleList(self) -> Tuple[SyncOutcome, List[FileRecord]]:
        files = self.ListFiles()
        logger.info(f"Listed {len(files)} files")
        return SyncOutcome.Ok(), files

    def HandleGet(self, name: str) -> Tuple[SyncOutcome, Optional[SyncedFile]]:
        """
        Retrieve one stored file

        Returns:
            (Ok, SyncedFile) or (BadRequest/NotFound, None)
        """
        logger.info(f"Retrieving file '{name}'")

        error = ValidateFileName(name)
        if error:
            logger.warning(f"Rejected GET: {error}")
            return SyncOutcome.BadRequest(error), None

        stored_name = self.ResolveFileName(name)
        try:
            with open(self.GetFilePath(stored_name), 'rb') as f:
                content = f.read()
        except (FileNotFoundError, IsADirectoryError):
            logger.info(f"File '{name}' not found")
            return SyncOutcome.NotFound("File not found."), None

        checksum = calculate_checksum(content)
        logger.info(f"File '{stored_name}' retrieved ({len(content)} bytes, checksum {checksum})")
        return SyncOutcome.Ok(checksum), SyncedFile(stored_name, checksum, content)

    def HandlePut(self, original_checksum: str, file: SyncedFile) -> SyncOutcome:
        """
        Create or replace a stored file

        Rules:
        - name empty -> BadRequest
        - file missing and original checksum given -> NotFound
        - file present and no original checksum -> FileConflict
        - file present and current checksum != original checksum -> FileConflict
        - otherwise write and return Ok with the checksum of the written bytes

        A file whose name differs only in case counts as present and keeps its
        stored spelling when replaced.

        Args:
            original_checksum: Checksum the client last saw, or empty for a new file
            file: File name and content to store

        Returns:
            SyncOutcome
        """
        original_checksum = original_checksum or ""
        logger.info(f"Putting file '{file.name}' with original checksum '{original_checksum}'")

        error = ValidateFileName(file.name)
        if error:
            logger.warning(f"Rejected PUT: {error}")
            return SyncOutcome.BadRequest(error)

        with self._GetFileLock(file.name):
            stored_name = self.ResolveFileName(file.name)
            file_exists = self.FileExists(stored_name)

            if not file_exists and original_checksum:
                logger.warning(f"File '{file.name}' not found but an original checksum was specified")
                return SyncOutcome.NotFound("File not found.")

            if file_exists and not original_checksum:
                logger.warning(f"File '{stored_name}' exists but no original checksum was specified")
                return SyncOutcome.FileConflict(
                    "The file already exists but no original checksum was specified."
                )

            if file_exists:
                current_checksum = self.CalculateFileChecksum(stored_name)
                if current_checksum != original_checksum:
                    logger.warning(
                        f"File '{stored_name}' original checksum {original_checksum} "
                        f"does not match current checksum {current_checksum}"
                    )
                    return SyncOutcome.FileConflict(
                        "The file checksum does not match the original checksum."
                    )

            self._WriteFileAtomic(stored_name, file.content)

        new_checksum = calculate_checksum(file.content)
        logger.info(f"File '{stored_name}' saved ({len(file.content)} bytes, checksum {new_checksum})")
        return SyncOutcome.Ok(new_checksum)

    def HandleDelete(self, name: str, checksum: str) -> SyncOutcome:
        """
        Delete a stored file

        Rules:
        - name empty -> BadRequest
        - checksum empty -> BadRequest (deletes always require proof of the current state)
        - file missing -> NotFound
        - current checksum != checksum -> FileConflict
        - otherwise delete and return Ok
        """
        logger.info(f"Deleting file '{name}' with checksum '{checksum}'")

        error = ValidateFileName(name)
        if error:
            logger.warning(f"Rejected DELETE: {error}")
            return SyncOutcome.BadRequest(error)

        if not checksum:
            logger.warning(f"Checksum not specified for file '{name}'")
            return SyncOutcome.BadRequest("No checksum specified.")

        with self._GetFileLock(name):
            stored_name = self.ResolveFileName(name)
            if not self.FileExists(stored_name):
                logger.info(f"File '{name}' not found")
                return SyncOutcome.NotFound("File not found.")

            current_checksum = self.CalculateFileChecksum(stored_name)
            if current_checksum != checksum:
                logger.warning(
                    f"File '{stored_name}' specified checksum {checksum} "
                    f"does not match current checksum {current_checksum}"
                )
                return SyncOutcome.FileConflict(
                    "The file checksum does not match the specified checksum."
                )

            self.GetFilePath(stored_name).unlink()

        logger.info(f"File '{stored_name}' deleted")
        return SyncOutcome.Ok()
