"""
SyncShip Protocol - Checksum Calculation

SHA-1 content checksums used by client and server for change and conflict detection.
Checksums are lowercase hex strings without separators, so independently computed
checksums of identical bytes always compare equal.

Not a security boundary: the hash only detects changes between cooperating peers.
"""

import hashlib
from pathlib import Path
from typing import BinaryIO, Union

from syncship.protocol.constants import BUFFER_SIZE, CONTENT_HASH_ALGORITHM


def calculate_checksum(data: bytes) -> str:
    """
    Calculate the checksum of an in-memory byte string.

    Args:
        data: Raw bytes

    Returns:
        Lowercase hex digest
    """
    return hashlib.new(CONTENT_HASH_ALGORITHM, data).hexdigest()


def calculate_stream_checksum(stream: BinaryIO, chunk_size: int = BUFFER_SIZE) -> str:
    """
    Calculate the checksum of a binary stream, reading it in chunks.

    Args:
        stream: Readable binary stream positioned at the start of the content
        chunk_size: Size of chunks to read

    Returns:
        Lowercase hex digest
    """
    digest = hashlib.new(CONTENT_HASH_ALGORITHM)
    while chunk := stream.read(chunk_size):
        digest.update(chunk)
    return digest.hexdigest()


def calculate_file_checksum(file_path: Union[str, Path]) -> str:
    """
    Calculate the checksum of a file on disk without loading it into memory.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    with open(file_path, 'rb') as f:
        return calculate_stream_checksum(f)
