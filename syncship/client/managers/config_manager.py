"""
SyncShip Client - Configuration Manager

Handles loading and saving client configuration from/to config.json.

Author: SyncShip Project
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from syncship.protocol.constants import (
    DEFAULT_PORT, DEFAULT_READ_TIMEOUT, DEFAULT_IDLE_TIMEOUT, DEFAULT_CONNECT_TIMEOUT,
    FRAMING_LENGTH
)

# Configure logging
logger = logging.getLogger(__name__)


DEFAULT_CONFIG_FILE = "config.json"

# Default configuration values
DEFAULT_CONFIG = {
    "server_host": "127.0.0.1",
    "server_port": DEFAULT_PORT,
    "file_directory": "files",
    "checksum_directory": "checksums",  # Baseline checksums, one <name>.checksum file each
    "framing": FRAMING_LENGTH,  # "length" or "brace"; must match the server
    "read_timeout": DEFAULT_READ_TIMEOUT,
    "idle_timeout": DEFAULT_IDLE_TIMEOUT,
    "connect_timeout": DEFAULT_CONNECT_TIMEOUT,
    "watch_enabled": True,
    "watch_debounce_seconds": 1.0,
    "log_level": "INFO",
    "log_retention_days": 30
}


class ConfigManager:
    """
    Manages client configuration.

    Responsibilities:
    - Load/save config.json (working directory unless a path is given)
    - Merge missing keys with defaults
    - Provide configuration values to other modules
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to the configuration file
        """
        self.config_file = Path(config_file) if config_file else Path.cwd() / DEFAULT_CONFIG_FILE
        self.config: Dict[str, Any] = {}

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from the config file.
        Creates default config if file doesn't exist.

        Returns:
            Configuration dictionary
        """
        if self.config_file.exists():
            logger.debug(f"Loading configuration from {self.config_file}")
            with open(self.config_file, 'r') as f:
                self.config = json.load(f)
            # Merge with defaults for any missing keys
            for key, value in DEFAULT_CONFIG.items():
                if key not in self.config:
                    self.config[key] = value
            logger.info("Configuration loaded successfully")
        else:
            logger.info(f"Configuration file not found, creating default at {self.config_file}")
            self.config = DEFAULT_CONFIG.copy()
            self.save_config()

        return self.config

    def save_config(self):
        """Save current configuration to the config file."""
        logger.debug(f"Saving configuration to {self.config_file}")
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, 'w') as f:
            json.dump(self.config, f, indent=2)
        logger.debug("Configuration saved successfully")

    def get(self, key: str, default=None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        """
        Set configuration value and save to file.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value
        self.save_config()
