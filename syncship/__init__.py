"""
SyncShip - Checksum-based directory synchronization over a private TCP protocol.

Subpackages:
- protocol: wire format, checksums and exceptions shared by client and server
- client: sync client, reconciliation engine and CLI
- server: optimistic-concurrency file storage and TCP listener
"""

__version__ = "1.0.0"
