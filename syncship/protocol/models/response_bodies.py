"""
SyncShip Protocol - Response Body Models

Pydantic models for JSON response bodies. Every body carries the status code.
"""

from typing import List, Optional
from pydantic import BaseModel

from syncship.protocol.status_codes import SyncStatusCode


class ResponseBody(BaseModel):
    """Fields common to all responses"""
    status: SyncStatusCode


class ErrorResponseBody(ResponseBody):
    message: Optional[str] = None


class ListFileEntry(BaseModel):
    name: str
    checksum: str


class ListResponseBody(ResponseBody):
    files: List[ListFileEntry] = []


class GetResponseBody(ResponseBody):
    name: str
    checksum: str
    content: str


class PutResponseBody(ResponseBody):
    checksum: Optional[str] = None


class DeleteResponseBody(ResponseBody):
    pass
