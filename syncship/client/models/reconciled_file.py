"""
SyncShip Client - Reconciled File Model

A classified file record that remembers how each side spells the name.

Author: SyncShip Project
"""

from dataclasses import dataclass

from syncship.protocol.models import FileRecord


@dataclass(frozen=True, eq=False)
class ReconciledFile(FileRecord):
    """
    FileRecord whose name is the server's spelling, plus the client's spelling.

    Names match case-insensitively, so a client file A.txt pairs with the
    server file a.txt. Requests to the server use name; local file I/O uses
    local_name. For files present on one side only both spellings are equal.
    """
    local_name: str = ""

    def __post_init__(self):
        if not self.local_name:
            object.__setattr__(self, "local_name", self.name)
