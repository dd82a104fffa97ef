"""
SyncShip Client - Sync Report Model

Summary of one sync pass: how many files each bucket processed and which
operations failed.

Author: SyncShip Project
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from syncship.client.models.classification_result import BUCKET_ORDER, SyncBucket


@dataclass
class SyncFailure:
    """One failed operation; the rest of its bucket was skipped"""
    name: str
    bucket: SyncBucket
    status_code: Optional[int]
    message: str


@dataclass
class SyncReport:
    processed: Dict[SyncBucket, int] = field(
        default_factory=lambda: {bucket: 0 for bucket in BUCKET_ORDER}
    )
    failures: List[SyncFailure] = field(default_factory=list)
    soft_conflicts: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def total_processed(self) -> int:
        return sum(self.processed.values())

    def record(self, bucket: SyncBucket):
        """Count one successfully processed file"""
        self.processed[bucket] += 1

    def add_failure(self, failure: SyncFailure):
        self.failures.append(failure)

    def summary(self) -> str:
        """
        Render a one-line summary of the pass.

        Example: "2 uploaded, 1 updated, 0 deleted on server, 1 downloaded,
        0 refreshed, 0 deleted locally, 5 unmodified, 0 failed"
        """
        p = self.processed
        return (
            f"{p[SyncBucket.CLIENT_NEW]} uploaded, "
            f"{p[SyncBucket.CLIENT_MODIFIED]} updated, "
            f"{p[SyncBucket.CLIENT_DELETED]} deleted on server, "
            f"{p[SyncBucket.SERVER_NEW]} downloaded, "
            f"{p[SyncBucket.SERVER_MODIFIED]} refreshed, "
            f"{p[SyncBucket.SERVER_DELETED]} deleted locally, "
            f"{p[SyncBucket.UNMODIFIED]} unmodified, "
            f"{len(self.failures)} failed"
        )
