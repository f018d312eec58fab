"""
HTTP client for the mail backend's settings endpoints.

Covers loading the initial settings, probing a new account for automatic
configuration, and saving the edited settings.
"""

from typing import Any, Dict, Optional

import requests

from ...utils.logging_setup import get_logger
from ...config.app_config import AppConfig
from ..settings.errors import PersistenceFailure

logger = get_logger(__name__)


class RequestError(Exception):
    """
    A backend request failed.

    Attributes:
        status_code: HTTP status, or None if the server was never reached
        data: Decoded JSON body of the error response, if any
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 data: Optional[Any] = None):
        super().__init__(message)
        self.status_code = status_code
        self.data = data


class SettingsApiClient:
    """
    Talks to the backend settings API.

    The settings model uses "systemSettings"/"styleSettings" internally; the
    backend stores them as "system"/"style". The key mapping happens here.
    """

    def __init__(self, config: AppConfig):
        """
        Initialize the client.

        Args:
            config: Application configuration (base URL, paths, timeout)
        """
        self.config = config
        self.timeout = config.api.timeout
        self.logger = logger

    def get_settings(self) -> Dict[str, Any]:
        """
        Fetch the current settings.

        Returns:
            Dict: Settings with optional accounts/system/style/columns sections

        Raises:
            RequestError: If the request fails
        """
        data = self._request("GET", self.config.api.settings_path)
        if isinstance(data, dict) and isinstance(data.get("settings"), dict):
            data = data["settings"]
        return data or {}

    def autoconfigure_account(self, username: str, password: str) -> Dict[str, Any]:
        """
        Ask the backend to work out connection settings for a new account.

        Never raises for request failures: an error response body is returned
        as-is, and an unreachable backend yields an equivalent negative
        payload, so callers can treat both the same way.

        Returns:
            Dict: {connected, settings[, error_message, error_type]}
        """
        payload = {"username": username, "password": password}
        try:
            return self._request("POST", self.config.api.autoconfig_path, payload) or {}
        except RequestError as e:
            if isinstance(e.data, dict) and "connected" in e.data:
                return e.data

            self.logger.warning(f"Autoconfiguration request failed: {e}")
            return {
                "connected": False,
                "settings": {},
                "error_message": str(e),
                "error_type": "connection",
            }

    def save_settings(self, snapshot: Dict[str, Any]) -> None:
        """
        Persist a settings snapshot.

        Args:
            snapshot: {accounts, systemSettings, styleSettings, columns}

        Raises:
            PersistenceFailure: If the backend did not accept the settings
        """
        body = {
            "accounts": snapshot["accounts"],
            "system": snapshot["systemSettings"],
            "style": snapshot["styleSettings"],
            "columns": snapshot["columns"],
        }
        try:
            self._request("POST", self.config.api.settings_path, body)
        except RequestError as e:
            raise PersistenceFailure(f"Backend rejected settings: {e}", cause=e) from e

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = self.config.url_for(path)
        self.logger.debug(f"{method} {url}")

        try:
            if method == "GET":
                response = requests.get(url, timeout=self.timeout)
            else:
                response = requests.post(url, json=payload, timeout=self.timeout)

        except requests.exceptions.Timeout as e:
            raise RequestError(f"Request to {path} timed out") from e

        except requests.exceptions.ConnectionError as e:
            raise RequestError(f"Could not connect to {self.config.api.base_url}") from e

        except requests.exceptions.RequestException as e:
            raise RequestError(f"Request to {path} failed: {e}") from e

        data = self._decode(response)

        if response.status_code >= 400:
            raise RequestError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                data=data,
            )

        return data

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

