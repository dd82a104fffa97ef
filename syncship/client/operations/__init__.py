"""
SyncShip Client - Operations Package

This package contains the reconciliation function and the sync operations class.
"""

from .reconciliation import classify_files
from .sync_operations import SyncOperations

__all__ = ['classify_files', 'SyncOperations']
