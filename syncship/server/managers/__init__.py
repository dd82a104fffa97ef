"""
SyncShip Server - Managers Package
"""

from .config_manager import ConfigManager, DEFAULT_CONFIG

__all__ = [
    'ConfigManager',
    'DEFAULT_CONFIG'
]
