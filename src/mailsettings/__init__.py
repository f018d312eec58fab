"""
Mail Settings

Settings screen for a desktop mail client: account management with
automatic configuration, plus general and sync preferences.

License: GPL v3.0
Version: 0.1.0-dev
"""

__version__ = "0.1.0-dev"
__license__ = "GPL v3.0"
__description__ = "Settings screen and account onboarding for a desktop mail client"

# Package level imports for convenience
from .config.app_config import AppConfig
from .utils.logging_setup import setup_logging

__all__ = [
    "AppConfig",
    "setup_logging",
]
