"""
SyncShip Protocol - Request Body Models

Pydantic models for JSON request bodies. Names and content are base64 strings.
Fields are optional so that the server can report each missing field separately.
"""

from typing import Optional
from pydantic import BaseModel


class GetRequestBody(BaseModel):
    name: Optional[str] = None


class PutRequestBody(BaseModel):
    name: Optional[str] = None
    checksum: Optional[str] = None
    original_checksum: Optional[str] = None  # Empty string: the file must not exist yet
    content: Optional[str] = None


class DeleteRequestBody(BaseModel):
    name: Optional[str] = None
    checksum: Optional[str] = None
