"""
SyncShip Protocol - Not Found Error Exception
"""

from .sync_error import SyncShipError


class SyncShipNotFoundError(SyncShipError):
    """Exception for requests on files the server does not have."""
    pass
