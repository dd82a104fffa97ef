"""
SyncShip Protocol - Exceptions Package

Contains all exception classes shared by the SyncShip client and server.
"""

from typing import Optional

from syncship.protocol.status_codes import SyncStatusCode

from .sync_error import SyncShipError
from .transport_error import SyncShipTransportError
from .protocol_error import SyncShipProtocolError
from .validation_error import SyncShipValidationError
from .not_found_error import SyncShipNotFoundError
from .conflict_error import SyncShipConflictError
from .internal_error import SyncShipInternalError

_STATUS_EXCEPTIONS = {
    SyncStatusCode.BAD_REQUEST: SyncShipValidationError,
    SyncStatusCode.NOT_FOUND: SyncShipNotFoundError,
    SyncStatusCode.FILE_CONFLICT: SyncShipConflictError,
    SyncStatusCode.INTERNAL_SERVER_ERROR: SyncShipInternalError,
}


def raise_for_status(status: SyncStatusCode, message: Optional[str] = None) -> None:
    """
    Raise the exception matching a non-Ok response status.

    Args:
        status: Status code from the response body
        message: Optional server message; the status name is used when empty

    Raises:
        SyncShipError: Subclass matching the status, or SyncShipProtocolError for unknown codes
    """
    if status == SyncStatusCode.OK:
        return

    text = message or status.name
    exception_class = _STATUS_EXCEPTIONS.get(status, SyncShipProtocolError)
    raise exception_class(text, status)


__all__ = [
    'SyncShipError',
    'SyncShipTransportError',
    'SyncShipProtocolError',
    'SyncShipValidationError',
    'SyncShipNotFoundError',
    'SyncShipConflictError',
    'SyncShipInternalError',
    'raise_for_status'
]
