"""
SyncShip Protocol - Status Codes

Status codes carried in every response body.
"""

from enum import IntEnum


class SyncStatusCode(IntEnum):
    """Response status of a sync request"""
    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    FILE_CONFLICT = 412
    INTERNAL_SERVER_ERROR = 500
