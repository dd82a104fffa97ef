"""
SyncShip Protocol - Validation Error Exception

Exception raised when the server answers BadRequest.
"""

from .sync_error import SyncShipError


class SyncShipValidationError(SyncShipError):
    """Exception for requests rejected because of missing or invalid fields."""
    pass
