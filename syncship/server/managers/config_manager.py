"""
SyncShip Server - Configuration Manager

Handles loading and saving server configuration from/to a JSON file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from syncship.protocol.constants import (
    DEFAULT_PORT, DEFAULT_READ_TIMEOUT, DEFAULT_IDLE_TIMEOUT, FRAMING_LENGTH
)

# Configure logging
logger = logging.getLogger(__name__)


DEFAULT_CONFIG_FILE = "server_config.json"

# Default configuration values
DEFAULT_CONFIG = {
    "listen_host": "0.0.0.0",
    "listen_port": DEFAULT_PORT,
    "file_directory": "storage",
    "framing": FRAMING_LENGTH,  # "length" or "brace"; must match the clients
    "read_timeout": DEFAULT_READ_TIMEOUT,
    "idle_timeout": DEFAULT_IDLE_TIMEOUT,  # ends a message under brace framing
    "log_level": "INFO",
    "log_directory": "logs"
}


class ConfigManager:
    """
    Manages server configuration.

    Responsibilities:
    - Load/save the configuration file
    - Merge missing keys with defaults
    - Provide configuration values to the server entry point
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to the configuration file (default: server_config.json in the working directory)
        """
        self.config_file = Path(config_file) if config_file else Path.cwd() / DEFAULT_CONFIG_FILE
        self.config: Dict[str, Any] = {}

    def LoadConfig(self) -> Dict[str, Any]:
        """
        Load configuration, creating a default file if none exists

        Returns:
            Configuration dictionary
        """
        if self.config_file.exists():
            logger.debug(f"Loading configuration from {self.config_file}")
            with open(self.config_file, 'r') as f:
                self.config = json.load(f)
            for key, value in DEFAULT_CONFIG.items():
                if key not in self.config:
                    self.config[key] = value
            logger.info("Configuration loaded successfully")
        else:
            logger.info(f"Configuration file not found, creating default at {self.config_file}")
            self.config = DEFAULT_CONFIG.copy()
            self.SaveConfig()

        return self.config

    def SaveConfig(self) -> None:
        logger.debug(f"Saving configuration to {self.config_file}")
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, 'w') as f:
            json.dump(self.config, f, indent=2)

    def Get(self, key: str, default=None) -> Any:
        return self.config.get(key, default)

    def Set(self, key: str, value: Any) -> None:
        """Set configuration value and save to file"""
        self.config[key] = value
        self.SaveConfig()
