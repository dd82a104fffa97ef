"""
SyncShip Client - Managers Package

Contains manager classes for configuration, local files and baseline checksums.

Author: SyncShip Project
"""

from .config_manager import ConfigManager, DEFAULT_CONFIG
from .file_manager import FileManager
from .checksum_manager import ChecksumManager

__all__ = [
    'ConfigManager',
    'DEFAULT_CONFIG',
    'FileManager',
    'ChecksumManager'
]
