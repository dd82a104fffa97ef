"""
SyncShip Protocol - Transport Error Exception

Exception raised when a connection cannot be established or an exchange cannot complete.
"""

from .sync_error import SyncShipError


class SyncShipTransportError(SyncShipError):
    """Exception for connection and socket I/O failures."""
    pass
