"""
SyncShip Client - Models Package

Contains data models and enumerations used by the client.

Author: SyncShip Project
"""

from .classification_result import (
    SyncBucket,
    ClassificationResult,
    BUCKET_ORDER,
    BUCKET_LABELS
)
from .reconciled_file import ReconciledFile
from .sync_report import SyncFailure, SyncReport

__all__ = [
    'SyncBucket',
    'ClassificationResult',
    'BUCKET_ORDER',
    'BUCKET_LABELS',
    'ReconciledFile',
    'SyncFailure',
    'SyncReport'
]
