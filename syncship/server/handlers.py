"""
SyncShip Server - Request Handler Interface

Defines the operations the listener dispatches to, one method per request verb.
An implementation is injected into SyncServer at construction.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from syncship.protocol.models import FileRecord, SyncedFile, SyncOutcome


class SyncRequestHandler(ABC):
    """Server-side operations behind the LIST, GET, PUT and DELETE verbs"""

    @abstractmethod
    def HandleList(self) -> Tuple[SyncOutcome, List[FileRecord]]:
        """Return the names and current checksums of all stored files"""

    @abstractmethod
    def HandleGet(self, name: str) -> Tuple[SyncOutcome, Optional[SyncedFile]]:
        """Return one stored file with its checksum and content"""

    @abstractmethod
    def HandlePut(self, original_checksum: str, file: SyncedFile) -> SyncOutcome:
        """
        Create or replace a file

        An empty original_checksum means the file must not exist yet; otherwise it
        must equal the checksum of the stored file.
        """

    @abstractmethod
    def HandleDelete(self, name: str, checksum: str) -> SyncOutcome:
        """Delete a file whose current checksum equals checksum"""
