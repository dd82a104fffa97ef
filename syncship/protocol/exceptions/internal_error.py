"""
SyncShip Protocol - Internal Error Exception
"""

from .sync_error import SyncShipError


class SyncShipInternalError(SyncShipError):
    """Exception for unexpected server-side faults."""
    pass
