"""
SyncShip Server Package

Optimistic-concurrency file storage behind a TCP listener.
"""

from .handlers import SyncRequestHandler
from .file_storage import FileStorage
from .sync_server import SyncServer, ServerStatus

__all__ = [
    'SyncRequestHandler',
    'FileStorage',
    'SyncServer',
    'ServerStatus'
]
