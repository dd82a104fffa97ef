"""
SyncShip Protocol - Sync Outcome Model

Dataclass returned by every server-side request handler.
"""

from dataclasses import dataclass
from typing import Optional

from syncship.protocol.status_codes import SyncStatusCode


@dataclass
class SyncOutcome:
    """
    Result of servicing one request

    checksum is set by successful writes to the checksum of the stored bytes.
    """
    status: SyncStatusCode
    message: Optional[str] = None
    checksum: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status == SyncStatusCode.OK

    @classmethod
    def Ok(cls, checksum: Optional[str] = None) -> "SyncOutcome":
        return cls(SyncStatusCode.OK, checksum=checksum)

    @classmethod
    def BadRequest(cls, message: str) -> "SyncOutcome":
        return cls(SyncStatusCode.BAD_REQUEST, message)

    @classmethod
    def NotFound(cls, message: Optional[str] = None) -> "SyncOutcome":
        return cls(SyncStatusCode.NOT_FOUND, message)

    @classmethod
    def FileConflict(cls, message: str) -> "SyncOutcome":
        return cls(SyncStatusCode.FILE_CONFLICT, message)

    @classmethod
    def InternalServerError(cls, message: Optional[str] = None) -> "SyncOutcome":
        return cls(SyncStatusCode.INTERNAL_SERVER_ERROR, message)
