"""
SyncShip Client - Classification Result Model

Contains the SyncBucket enum and the ClassificationResult produced by the
three-way comparison of server files, client files and baseline checksums.

Author: SyncShip Project
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from syncship.protocol.models import FileRecord


class SyncBucket(Enum):
    """
    Enum representing the sync state of one file name.

    States:
    - CLIENT_NEW: Only the client has the file and it was never synced
    - CLIENT_MODIFIED: Client copy changed since the last sync, server copy did not
    - CLIENT_DELETED: Client removed a synced file that the server still holds
    - SERVER_NEW: Only the server has the file and the client never saw it
    - SERVER_MODIFIED: Server copy changed since the last sync (wins if both changed)
    - SERVER_DELETED: Server removed a synced file that the client still holds
    - UNMODIFIED: Both sides hold identical content
    """
    CLIENT_NEW = "client_new"
    CLIENT_MODIFIED = "client_modified"
    CLIENT_DELETED = "client_deleted"
    SERVER_NEW = "server_new"
    SERVER_MODIFIED = "server_modified"
    SERVER_DELETED = "server_deleted"
    UNMODIFIED = "unmodified"


# Order in which a sync pass processes the buckets: server-affecting first
BUCKET_ORDER = [
    SyncBucket.CLIENT_NEW,
    SyncBucket.CLIENT_MODIFIED,
    SyncBucket.CLIENT_DELETED,
    SyncBucket.SERVER_NEW,
    SyncBucket.SERVER_MODIFIED,
    SyncBucket.SERVER_DELETED,
    SyncBucket.UNMODIFIED
]

# Labels used when listing the classification
BUCKET_LABELS = {
    SyncBucket.CLIENT_NEW: "UNVERSIONED",
    SyncBucket.CLIENT_MODIFIED: "MODIFIED",
    SyncBucket.CLIENT_DELETED: "REMOVED",
    SyncBucket.SERVER_NEW: "PENDING",
    SyncBucket.SERVER_MODIFIED: "OUTDATED",
    SyncBucket.SERVER_DELETED: "OBSOLETE",
    SyncBucket.UNMODIFIED: "UNMODIFIED"
}


@dataclass
class ClassificationResult:
    """
    Every file name on either side, placed in exactly one bucket.

    Records in client-side buckets (client-new, client-modified, server-deleted,
    unmodified) carry the client's checksum; the others carry the server's.
    Matched names are spelled as the server spells them.
    soft_conflicts lists the names that changed on both sides and were
    classified server-modified.
    """
    client_new: List[FileRecord] = field(default_factory=list)
    client_modified: List[FileRecord] = field(default_factory=list)
    client_deleted: List[FileRecord] = field(default_factory=list)
    server_new: List[FileRecord] = field(default_factory=list)
    server_modified: List[FileRecord] = field(default_factory=list)
    server_deleted: List[FileRecord] = field(default_factory=list)
    unmodified: List[FileRecord] = field(default_factory=list)
    soft_conflicts: List[str] = field(default_factory=list)

    def get_bucket(self, bucket: SyncBucket) -> List[FileRecord]:
        return getattr(self, bucket.value)

    def add(self, bucket: SyncBucket, record: FileRecord):
        self.get_bucket(bucket).append(record)

    def find_bucket(self, name: str) -> Optional[SyncBucket]:
        """
        Find the bucket holding a file name (case-insensitive).

        Returns:
            SyncBucket, or None if the name was not classified
        """
        key = name.casefold()
        for bucket in BUCKET_ORDER:
            if any(record.key == key for record in self.get_bucket(bucket)):
                return bucket
        return None

    def counts(self) -> Dict[SyncBucket, int]:
        return {bucket: len(self.get_bucket(bucket)) for bucket in BUCKET_ORDER}

    @property
    def is_synchronized(self) -> bool:
        """True if every classified file is unmodified"""
        return all(not self.get_bucket(bucket) for bucket in BUCKET_ORDER
                   if bucket != SyncBucket.UNMODIFIED)

    def __iter__(self) -> Iterator[FileRecord]:
        for bucket in BUCKET_ORDER:
            yield from self.get_bucket(bucket)

    def __len__(self) -> int:
        return sum(len(self.get_bucket(bucket)) for bucket in BUCKET_ORDER)
