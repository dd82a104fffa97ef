"""
SyncShip Client - API Package

This package contains the sync protocol client.
"""

from .sync_client import SyncClient

__all__ = ['SyncClient']
