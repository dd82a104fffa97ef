"""
SyncShip Protocol - Synced File Model

Dataclass for a fully materialized file exchanged through GET and PUT.
"""

from dataclasses import dataclass, field


@dataclass
class SyncedFile:
    """File name, checksum and raw content"""
    name: str
    checksum: str
    content: bytes = field(repr=False)
