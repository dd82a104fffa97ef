"""
SyncShip Protocol - Models Package

This package contains the models shared by client and server:
- entities: dataclasses for files and handler outcomes
- bodies: Pydantic models for JSON request and response bodies
"""

from .file_record import FileRecord
from .synced_file import SyncedFile
from .sync_outcome import SyncOutcome
from .request_bodies import GetRequestBody, PutRequestBody, DeleteRequestBody
from .response_bodies import (
    ResponseBody,
    ErrorResponseBody,
    ListFileEntry,
    ListResponseBody,
    GetResponseBody,
    PutResponseBody,
    DeleteResponseBody
)

__all__ = [
    'FileRecord',
    'SyncedFile',
    'SyncOutcome',
    'GetRequestBody',
    'PutRequestBody',
    'DeleteRequestBody',
    'ResponseBody',
    'ErrorResponseBody',
    'ListFileEntry',
    'ListResponseBody',
    'GetResponseBody',
    'PutResponseBody',
    'DeleteResponseBody',
]
