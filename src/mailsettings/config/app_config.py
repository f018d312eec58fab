"""
Application configuration management for the mailsettings screen.
"""

import os
import toml
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

from ..utils.logging_setup import get_logger

logger = get_logger(__name__)


class ApiConfig(BaseModel):
    """Backend endpoint settings."""

    base_url: str = Field(default="http://localhost:4420", description="Base URL of the mail backend")
    settings_path: str = Field(default="/api/settings", description="Settings load/save endpoint")
    autoconfig_path: str = Field(default="/api/settings/account/new", description="Account autoconfiguration endpoint")
    timeout: int = Field(default=30, description="Request timeout in seconds")


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(default="INFO", description="Log level name")
    console_output: bool = Field(default=True, description="Also log to stdout")


class AppConfig:
    """
    Main application configuration class.

    Manages loading, saving, and accessing configuration settings from TOML files.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize application configuration.

        Args:
            config_dir: Custom configuration directory. If None, uses default.
        """
        self.config_dir = config_dir or self._get_default_config_dir()
        self.config_file = self.config_dir / "mailsettings.toml"

        self.api = ApiConfig()
        self.logging = LoggingConfig()

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.load()

    def _get_default_config_dir(self) -> Path:
        """
        Get the default configuration directory based on the operating system.

        Returns:
            Path: Default configuration directory.
        """
        if os.name == "posix":
            xdg_config = os.environ.get("XDG_CONFIG_HOME")
            if xdg_config:
                return Path(xdg_config) / "mailsettings"
            return Path.home() / ".config" / "mailsettings"
        return Path.home() / ".mailsettings"

    def load(self) -> None:
        """
        Load configuration from TOML file.

        Creates default configuration if file doesn't exist.
        """
        if not self.config_file.exists():
            self.save()
            return

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                config_data = toml.load(f)

            if "api" in config_data:
                self.api = ApiConfig(**config_data["api"])
            if "logging" in config_data:
                self.logging = LoggingConfig(**config_data["logging"])

        except Exception as e:
            logger.warning(f"Failed to load configuration from {self.config_file}: {e}")

    def save(self) -> None:
        """
        Save current configuration to TOML file.
        """
        config_data = {
            "api": self.api.model_dump(),
            "logging": self.logging.model_dump(),
        }

        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                toml.dump(config_data, f)
        except Exception as e:
            logger.warning(f"Failed to save configuration to {self.config_file}: {e}")

    def get_data_dir(self) -> Path:
        """
        Get the data directory for logs and other local state.

        Returns:
            Path: Data directory path.
        """
        if os.name == "posix":
            xdg_data = os.environ.get("XDG_DATA_HOME")
            if xdg_data:
                data_dir = Path(xdg_data) / "mailsettings"
            else:
                data_dir = Path.home() / ".local" / "share" / "mailsettings"
        else:
            data_dir = Path.home() / ".mailsettings" / "data"

        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_log_file(self) -> Path:
        """
        Get the log file path (its directory is created by setup_logging).

        Returns:
            Path: Log file path under the data directory.
        """
        return self.get_data_dir() / "logs" / "mailsettings.log"

    def url_for(self, path: str) -> str:
        """Join a backend path onto the configured base URL."""
        return f"{self.api.base_url.rstrip('/')}/{path.lstrip('/')}"
