"""
SyncShip Protocol Package

Wire protocol shared by the SyncShip client and server.
"""

from .constants import PROTOCOL_VERSION, DEFAULT_PORT
from .status_codes import SyncStatusCode
from .checksum import calculate_checksum, calculate_file_checksum
from .framing import Framing, LengthPrefixedFraming, BraceCountingFraming, get_framing

__all__ = [
    'PROTOCOL_VERSION',
    'DEFAULT_PORT',
    'SyncStatusCode',
    'calculate_checksum',
    'calculate_file_checksum',
    'Framing',
    'LengthPrefixedFraming',
    'BraceCountingFraming',
    'get_framing'
]
