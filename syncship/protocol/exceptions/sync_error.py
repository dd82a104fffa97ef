"""
SyncShip Protocol - Base Sync Error

Base exception class for all sync-related errors.
"""

from typing import Optional

from syncship.protocol.status_codes import SyncStatusCode


class SyncShipError(Exception):
    """
    Base exception for sync errors.

    Carries the response status code when the error originates from a server response.
    """

    def __init__(self, message: str, status_code: Optional[SyncStatusCode] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{int(self.status_code)} {self.status_code.name}: {self.message}"
        return self.message
