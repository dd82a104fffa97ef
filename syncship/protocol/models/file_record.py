"""
SyncShip Protocol - File Record Model

Dataclass identifying one file by name and current content checksum.
"""

from dataclasses import dataclass


@dataclass(frozen=True, eq=False)
class FileRecord:
    """
    Name and checksum of one file on the client or the server.

    Equality compares the name case-insensitively and the checksum exactly.
    """
    name: str
    checksum: str

    @property
    def key(self) -> str:
        """Case-folded name used for matching files across sides"""
        return self.name.casefold()

    def __eq__(self, other) -> bool:
        if not isinstance(other, FileRecord):
            return NotImplemented
        return self.key == other.key and self.checksum == other.checksum

    def __hash__(self) -> int:
        return hash((self.key, self.checksum))
