"""
SyncShip Protocol - Conflict Error Exception

Exception raised when the server rejects a write or delete because its current
checksum differs from the one the client expected.
"""

from .sync_error import SyncShipError


class SyncShipConflictError(SyncShipError):
    """Exception for checksum conflicts (lost-update prevention)."""
    pass
