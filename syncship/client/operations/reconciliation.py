"""
SyncShip Client - Reconciliation

Three-way comparison of the server's files, the client's files and the
baseline checksums. Every name present on either side lands in exactly one
bucket of the ClassificationResult.

Author: SyncShip Project
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from syncship.protocol.models import FileRecord
from syncship.client.models import ClassificationResult, ReconciledFile, SyncBucket

# Configure logging
logger = logging.getLogger(__name__)


def classify_files(server_files: Iterable[FileRecord], client_files: Iterable[FileRecord],
                   get_baseline: Callable[[str], Optional[str]]) -> ClassificationResult:
    """
    Classify every file name into one sync bucket.

    Process:
    1. For each server file, find the client file with the same name (case-insensitive)
       - Same checksum: unmodified
       - Different checksum and baseline == server checksum: client-modified
       - Different checksum otherwise: server-modified (server wins); if the baseline
         also differs from the client checksum, both sides changed and the name is
         recorded as a soft conflict
       - No client file and no baseline: server-new
       - No client file but a baseline: client-deleted
    2. For each client file left unmatched
       - No baseline: client-new
       - Baseline: server-deleted

    Args:
        server_files: Files listed by the server
        client_files: Local files with freshly calculated checksums
        get_baseline: Returns the baseline checksum for a name, or None/"" if absent

    Returns:
        ClassificationResult of ReconciledFile records named with the server's
        spelling and carrying the client's spelling as local_name
    """
    result = ClassificationResult()

    # Unmatched client files by case-folded name, in listing order
    remaining: Dict[str, List[FileRecord]] = {}
    for client_file in client_files:
        remaining.setdefault(client_file.key, []).append(client_file)

    for server_file in server_files:
        candidates = remaining.get(server_file.key)

        if candidates:
            client_file = candidates.pop(0)
            if not candidates:
                del remaining[server_file.key]

            if client_file.checksum == server_file.checksum:
                result.add(SyncBucket.UNMODIFIED,
                           ReconciledFile(server_file.name, client_file.checksum, client_file.name))
                continue

            baseline = get_baseline(server_file.name)
            if baseline == server_file.checksum:
                result.add(SyncBucket.CLIENT_MODIFIED,
                           ReconciledFile(server_file.name, client_file.checksum, client_file.name))
            else:
                if baseline != client_file.checksum:
                    logger.warning(
                        f"{server_file.name} changed on both client and server; "
                        f"the server copy will overwrite the local edit"
                    )
                    result.soft_conflicts.append(server_file.name)
                result.add(SyncBucket.SERVER_MODIFIED,
                           ReconciledFile(server_file.name, server_file.checksum, client_file.name))
        else:
            baseline = get_baseline(server_file.name)
            record = ReconciledFile(server_file.name, server_file.checksum)
            if not baseline:
                result.add(SyncBucket.SERVER_NEW, record)
            else:
                result.add(SyncBucket.CLIENT_DELETED, record)

    for candidates in remaining.values():
        for client_file in candidates:
            baseline = get_baseline(client_file.name)
            record = ReconciledFile(client_file.name, client_file.checksum)
            if not baseline:
                result.add(SyncBucket.CLIENT_NEW, record)
            else:
                result.add(SyncBucket.SERVER_DELETED, record)

    logger.debug(f"Classified {len(result)} files: " + ", ".join(
        f"{bucket.value}={count}" for bucket, count in result.counts().items() if count
    ))
    return result
