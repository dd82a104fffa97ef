"""
SyncShip Protocol - Protocol Error Exception

Exception raised for malformed headers or bodies and protocol version mismatches.
"""

from .sync_error import SyncShipError


class SyncShipProtocolError(SyncShipError):
    """Exception for messages that do not follow the wire protocol."""
    pass
