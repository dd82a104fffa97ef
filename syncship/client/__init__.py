"""
SyncShip Client

Synchronizes a local directory with a SyncShip server.

Author: SyncShip Project
"""

from .api import SyncClient
from .operations import SyncOperations, classify_files

__all__ = ['SyncClient', 'SyncOperations', 'classify_files']
