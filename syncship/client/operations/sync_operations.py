"""
SyncShip Client - Sync Operations Module

Implements the List and Sync operations. A sync pass lists the server's files,
checksums the local files, classifies every name against the baseline checksums
and then works through the buckets in a fixed order: server-affecting buckets
first, client-affecting buckets after, unmodified files last.

The baseline for a file changes only after the operation for that file
succeeded. A failed operation skips the rest of its bucket; the pass continues
with the next bucket.

Author: SyncShip Project
"""

import logging
import threading
from typing import List

from syncship.protocol.checksum import calculate_checksum
from syncship.protocol.exceptions import SyncShipError, SyncShipProtocolError
from syncship.protocol.models import FileRecord
from syncship.client.models import (
    BUCKET_LABELS, BUCKET_ORDER, ClassificationResult, ReconciledFile, SyncBucket,
    SyncFailure, SyncReport
)
from syncship.client.operations.reconciliation import classify_files

# Configure logging
logger = logging.getLogger(__name__)


# Log messages announcing each bucket during a sync pass
BUCKET_MESSAGES = {
    SyncBucket.CLIENT_NEW: "Uploading new files to server...",
    SyncBucket.CLIENT_MODIFIED: "Uploading modified files to server...",
    SyncBucket.CLIENT_DELETED: "Removing files from server...",
    SyncBucket.SERVER_NEW: "Downloading new files from server...",
    SyncBucket.SERVER_MODIFIED: "Downloading modified files from server...",
    SyncBucket.SERVER_DELETED: "Removing obsolete files...",
    SyncBucket.UNMODIFIED: "Saving checksums of unmodified files..."
}


class SyncOperations:
    """
    Handles file synchronization with the server.

    Responsibilities:
    - Classify local and server files against the baseline
    - Render the classification (List operation)
    - Execute the corrective actions per bucket (Sync operation)
    - Keep the baseline checksums up to date
    - Serialize sync passes and pause the directory watcher during a pass
    """

    def __init__(self, sync_client, file_manager, checksum_manager):
        """
        Initialize sync operations handler.

        Args:
            sync_client: SyncClient instance for server communication
            file_manager: FileManager instance for local file I/O
            checksum_manager: ChecksumManager instance for checksums and baselines
        """
        self.client = sync_client
        self.file_mgr = file_manager
        self.checksum_mgr = checksum_manager
        self.watcher = None
        self._sync_lock = threading.Lock()

    @property
    def is_syncing(self) -> bool:
        return self._sync_lock.locked()

    # ==================== Classification ====================

    def get_local_files(self) -> List[FileRecord]:
        """
        List local files with freshly calculated checksums.

        Files that disappear between listing and hashing are skipped.
        """
        files = []
        for name in self.file_mgr.get_file_names():
            try:
                files.append(FileRecord(name, self.checksum_mgr.create_checksum(name)))
            except FileNotFoundError:
                logger.debug(f"{name} vanished while listing local files")
        return files

    def get_classification(self) -> ClassificationResult:
        """
        Classify all client and server files.

        Raises:
            SyncShipError: If the server's file list cannot be retrieved
        """
        server_files = self.client.list_files()
        client_files = self.get_local_files()
        logger.info(f"Server has {len(server_files)} files, client has {len(client_files)} files")

        return classify_files(server_files, client_files, self.checksum_mgr.get_checksum)

    def show_list(self) -> str:
        """
        Log and return the classification grouped by label.

        Returns:
            Multi-line report; empty buckets are omitted
        """
        result = self.get_classification()

        lines = ["Listing files."]
        for bucket in BUCKET_ORDER:
            records = result.get_bucket(bucket)
            if not records:
                continue
            lines.append(f"{BUCKET_LABELS[bucket]}:")
            lines.extend(f"  {record.name}" for record in records)

        if result.soft_conflicts:
            lines.append("CONFLICTS (server copy wins):")
            lines.extend(f"  {name}" for name in result.soft_conflicts)

        report = "\n".join(lines)
        logger.info(report)
        return report

    # ==================== Sync Pass ====================

    def perform_sync(self) -> SyncReport:
        """
        Run one sync pass.

        Passes never overlap: a pass started while another one runs waits for it.

        Returns:
            SyncReport with per-bucket counts and failures

        Raises:
            SyncShipError: If the server's file list cannot be retrieved
        """
        with self._sync_lock:
            if self.watcher is not None:
                self.watcher.pause()
            try:
                return self._run_sync_pass()
            finally:
                if self.watcher is not None:
                    self.watcher.resume()

    def _run_sync_pass(self) -> SyncReport:
        logger.info("File syncing started.")

        result = self.get_classification()
        report = SyncReport(soft_conflicts=list(result.soft_conflicts))

        for bucket in BUCKET_ORDER:
            records = result.get_bucket(bucket)
            if not records:
                continue

            logger.info(BUCKET_MESSAGES[bucket])
            for record in records:
                try:
                    self._process_file(bucket, record)
                except SyncShipError as e:
                    logger.error(f"Failed to process {record.name} ({bucket.value}): {e}")
                    report.add_failure(SyncFailure(
                        name=record.name,
                        bucket=bucket,
                        status_code=int(e.status_code) if e.status_code is not None else None,
                        message=e.message
                    ))
                    logger.warning(f"Skipping the remaining {bucket.value} files for this pass")
                    break
                except (OSError, ValueError) as e:
                    logger.error(f"Failed to process {record.name} locally ({bucket.value}): {e}")
                    report.add_failure(SyncFailure(
                        name=record.name, bucket=bucket, status_code=None, message=str(e)
                    ))
                    logger.warning(f"Skipping the remaining {bucket.value} files for this pass")
                    break

                report.record(bucket)

        if report.success:
            logger.info(f"File syncing finished: {report.summary()}")
        else:
            logger.warning(f"File syncing finished with errors: {report.summary()}")
        return report

    def _process_file(self, bucket: SyncBucket, record: ReconciledFile):
        """
        Execute the corrective action for one file and update its baseline.

        Requests to the server use the server's spelling of the name; local
        file I/O uses the client's spelling.
        """
        name = record.name
        local_name = record.local_name

        if bucket == SyncBucket.CLIENT_NEW:
            synced = self.client.add_file(name, self.file_mgr.get_file_content(local_name))
            self.checksum_mgr.save_checksum(name, synced.checksum)
            logger.info(f"Uploaded {name}")

        elif bucket == SyncBucket.CLIENT_MODIFIED:
            original_checksum = self.checksum_mgr.get_checksum(name)
            synced = self.client.update_file(name, original_checksum, self.file_mgr.get_file_content(local_name))
            self.checksum_mgr.save_checksum(name, synced.checksum)
            logger.info(f"Updated {name} on server")

        elif bucket == SyncBucket.CLIENT_DELETED:
            self.client.delete_file(name, self.checksum_mgr.get_checksum(name))
            self.checksum_mgr.delete_checksum(name)
            logger.info(f"Deleted {name} from server")

        elif bucket in (SyncBucket.SERVER_NEW, SyncBucket.SERVER_MODIFIED):
            self._download_file(name, local_name)

        elif bucket == SyncBucket.SERVER_DELETED:
            self.file_mgr.delete_file(local_name)
            self.checksum_mgr.delete_checksum(name)
            logger.info(f"Deleted local copy of {local_name}")

        elif bucket == SyncBucket.UNMODIFIED:
            self.checksum_mgr.save_checksum(name, record.checksum)

    def _download_file(self, name: str, local_name: str):
        """Download a file, verify its checksum and write it under its local name"""
        synced = self.client.get_file(name)

        actual_checksum = calculate_checksum(synced.content)
        if actual_checksum != synced.checksum:
            logger.error(f"Checksum mismatch for {name}: expected {synced.checksum}, got {actual_checksum}")
            raise SyncShipProtocolError(f"Checksum verification failed for {name}")

        self.file_mgr.save_file_content(local_name, synced.content)
        self.checksum_mgr.save_checksum(name, synced.checksum)
        logger.info(f"Downloaded {name} ({len(synced.content)} bytes)")
