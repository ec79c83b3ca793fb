"""
RCPanel - Configuration Manager

Handles loading and saving configuration from/to config.json.
Manages OS credential store integration for the RC password.

Author: RCPanel Project
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any

# Configure logging
logger = logging.getLogger(__name__)

# Service name used for the OS credential store
KEYRING_SERVICE = "RCPanel"

# Default configuration values
DEFAULT_CONFIG = {
    "backend": "http",  # "http" (rclone rcd) or "embedded" (librclone in-process)
    "rclone_url": "http://localhost:5572",
    "rclone_user": None,  # Username stored in config, password in OS credential store
    "library_path": None,  # None means search for librclone
    "listen_host": "127.0.0.1",
    "listen_port": 8080,
    "log_level": "INFO",
    "log_retention_days": 30,
    "poll_interval_seconds": 2
}

# Environment variables overriding config.json
ENVIRONMENT_OVERRIDES = {
    "RCLONE_URL": "rclone_url",
    "RCLONE_USER": "rclone_user",
    "RCPANEL_BACKEND": "backend",
    "RCLONE_LIBRARY": "library_path"
}

# Environment variable holding the RC password (never stored in config.json)
PASSWORD_ENV_VAR = "RCLONE_PASS"

BACKENDS = ("http", "embedded")


class ConfigManager:
    """
    Manages configuration and credentials.

    Responsibilities:
    - Load/save config.json next to the executable (same location as logs folder)
    - Apply environment variable overrides
    - Store/retrieve the RC password from the OS credential store via keyring
    - Provide configuration values to other modules
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory holding config.json (defaults to the
                        executable's directory when frozen, else the working directory)
        """
        if config_dir is not None:
            base_dir = Path(config_dir)
        elif getattr(sys, 'frozen', False):
            # Running as compiled executable
            base_dir = Path(sys.executable).parent
        else:
            # Running as script
            base_dir = Path.cwd()

        self.base_dir = base_dir
        self.config_file = base_dir / "config.json"
        self.config: Dict[str, Any] = {}
        # Contents of config.json; environment and command line overrides never land here
        self.file_config: Dict[str, Any] = {}

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from config.json, then apply environment overrides.
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
            self.file_config = dict(self.config)
            logger.info("Configuration loaded successfully")
        else:
            logger.info(f"Configuration file not found, creating default at {self.config_file}")
            self.config = DEFAULT_CONFIG.copy()
            self.file_config = DEFAULT_CONFIG.copy()
            self.save_config()

        self.apply_environment()
        return self.config

    def apply_environment(self, environ: Optional[Dict[str, str]] = None):
        """
        Override configuration values from environment variables.
        Overrides are not written back to config.json.
        """
        environ = os.environ if environ is None else environ
        for env_var, key in ENVIRONMENT_OVERRIDES.items():
            value = environ.get(env_var)
            if value:
                logger.debug(f"Using {env_var} for '{key}'")
                self.config[key] = value

    def validate(self) -> Optional[str]:
        """
        Check the configuration for values the server cannot start with.

        Returns:
            Error message, or None if the configuration is usable
        """
        backend = self.get("backend")
        if backend not in BACKENDS:
            return f"Invalid backend '{backend}' (expected one of: {', '.join(BACKENDS)})"
        if backend == "http" and not self.get("rclone_url"):
            return "rclone_url is required for the http backend"
        try:
            port = int(self.get("listen_port"))
        except (TypeError, ValueError):
            return f"Invalid listen_port '{self.get('listen_port')}'"
        if not 0 < port < 65536:
            return f"Invalid listen_port '{port}'"
        return None

    def save_config(self):
        """Save the file configuration (without overrides) to config.json."""
        logger.debug(f"Saving configuration to {self.config_file}")
        with open(self.config_file, 'w') as f:
            json.dump(self.file_config, f, indent=2)
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
        Set configuration value and save it to file.

        Other values in config.json are left as loaded, even when an
        environment variable or command line argument overrides them.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value
        self.file_config[key] = value
        self.save_config()

    def store_credentials(self, username: str, password: str):
        """
        Store RC credentials.

        Args:
            username: Username to store (in config.json)
            password: Password to store (securely in OS credential store)
        """
        import keyring

        logger.info(f"Storing credentials for RC user: {username}")

        # Store username in config.json
        self.set("rclone_user", username)

        # Store password in OS credential store
        keyring.set_password(KEYRING_SERVICE, username, password)

        logger.debug("Credentials stored successfully")

    def get_credentials(self) -> Optional[tuple[str, str]]:
        """
        Retrieve RC credentials.

        The password comes from RCLONE_PASS if set, otherwise from the OS
        credential store.

        Returns:
            Tuple of (username, password) or None if no username is configured
        """
        import keyring
        from keyring.errors import KeyringError

        username = self.get("rclone_user")
        if not username:
            logger.debug("No RC username configured")
            return None

        password = os.environ.get(PASSWORD_ENV_VAR)
        if password:
            return (username, password)

        logger.debug("Retrieving RC password from OS credential store")
        try:
            password = keyring.get_password(KEYRING_SERVICE, username)
        except KeyringError as e:
            logger.warning(f"OS credential store unavailable: {e}")
            password = None

        if not password:
            logger.warning(f"No password found in credential store for RC user: {username}")
            password = ""

        return (username, password)
