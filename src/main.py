#!/usr/bin/env python3
"""
Mail Settings - Application Entry Point

Loads the current settings from the mail backend and opens the settings
window. The window closes itself after a successful save.
"""

import sys
from pathlib import Path

# Add the mailsettings package to Python path
sys.path.insert(0, str(Path(__file__).parent))

from PyQt6.QtWidgets import QApplication, QMessageBox

from mailsettings.config.app_config import AppConfig
from mailsettings.core.api.settings_client import SettingsApiClient, RequestError
from mailsettings.core.settings import SettingsModel
from mailsettings.gui.settings.settings_window import SettingsWindow
from mailsettings.gui.settings.workers import QtProbeLauncher
from mailsettings.utils.logging_setup import setup_logging, get_logger


def setup_application() -> QApplication:
    """
    Set up the QApplication with application metadata.

    Returns:
        QApplication: Configured application instance.
    """
    app = QApplication(sys.argv)
    app.setApplicationName("Mail Settings")
    app.setApplicationVersion("0.1.0-dev")
    return app


def main() -> int:
    """
    Main application entry point.

    Returns:
        int: Exit code (0 for success, non-zero for error).
    """
    config = AppConfig()
    setup_logging(config)
    logger = get_logger(__name__)

    app = setup_application()
    client = SettingsApiClient(config)

    try:
        settings = client.get_settings()
    except RequestError as e:
        logger.error(f"Failed to load settings: {e}")
        QMessageBox.critical(
            None,
            "Settings Error",
            f"Could not load settings from {config.api.base_url}:\n{e}"
        )
        return 1

    launcher = QtProbeLauncher(client)
    model = SettingsModel.from_settings(settings, launcher)

    window = SettingsWindow(model, client)
    window.show()
    logger.info(f"Settings window opened with {len(model.accounts)} accounts")

    exit_code = app.exec()
    launcher.wait()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
