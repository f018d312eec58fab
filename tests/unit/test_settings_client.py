"""
Unit tests for the backend settings client.

All HTTP calls are mocked; no backend is needed.
"""

import tempfile
import pytest
import requests
from pathlib import Path
from unittest.mock import Mock, patch

from mailsettings.config.app_config import AppConfig
from mailsettings.core.api.settings_client import (
    SettingsApiClient, RequestError
)
from mailsettings.core.settings import SettingsModel, PersistenceFailure, Phase


class SyncProbeLauncher:
    """Runs autoconfiguration on the calling thread and reports straight back."""

    def __init__(self, client):
        self.client = client

    def __call__(self, payload, callback):
        callback(self.client.autoconfigure_account(payload["username"], payload["password"]))


def make_response(status_code=200, data=None):
    response = Mock()
    response.status_code = status_code
    response.content = b"{}" if data is not None else b""
    response.json.return_value = data
    return response


class TestSettingsApiClient:
    """Test cases for the SettingsApiClient class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config = AppConfig(config_dir=Path(self.temp_dir.name))
        self.config.api.base_url = "http://backend.test:4420/"
        self.client = SettingsApiClient(self.config)

    def teardown_method(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()

    @patch('requests.get')
    def test_get_settings(self, mock_get):
        mock_get.return_value = make_response(data={"accounts": {}, "columns": []})

        settings = self.client.get_settings()

        assert settings == {"accounts": {}, "columns": []}
        mock_get.assert_called_once_with(
            "http://backend.test:4420/api/settings", timeout=30
        )

    @patch('requests.get')
    def test_get_settings_unwraps_settings_key(self, mock_get):
        mock_get.return_value = make_response(data={"settings": {"system": {"sync_days": 5}}})

        assert self.client.get_settings() == {"system": {"sync_days": 5}}

    @patch('requests.get')
    def test_get_settings_connection_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(RequestError) as exc_info:
            self.client.get_settings()

        assert exc_info.value.status_code is None

    @patch('requests.post')
    def test_autoconfigure_success(self, mock_post):
        mock_post.return_value = make_response(data={"connected": True, "settings": {"a": 1}})

        result = self.client.autoconfigure_account("me@example.com", "secret")

        assert result == {"connected": True, "settings": {"a": 1}}
        mock_post.assert_called_once_with(
            "http://backend.test:4420/api/settings/account/new",
            json={"username": "me@example.com", "password": "secret"},
            timeout=30,
        )

    @patch('requests.post')
    def test_autoconfigure_error_body_used_as_payload(self, mock_post):
        body = {"connected": False, "settings": {"a": 1},
                "error_message": "bad login", "error_type": "auth"}
        mock_post.return_value = make_response(status_code=400, data=body)

        assert self.client.autoconfigure_account("me@example.com", "secret") == body

    @patch('requests.post')
    def test_autoconfigure_unreachable_backend(self, mock_post):
        mock_post.side_effect = requests.exceptions.Timeout()

        result = self.client.autoconfigure_account("me@example.com", "secret")

        assert result["connected"] is False
        assert result["settings"] == {}
        assert result["error_type"] == "connection"
        assert "timed out" in result["error_message"]

    @patch('requests.post')
    def test_autoconfigure_server_error_without_body(self, mock_post):
        mock_post.return_value = make_response(status_code=500)

        result = self.client.autoconfigure_account("me@example.com", "secret")

        assert result["connected"] is False
        assert "500" in result["error_message"]

    @patch('requests.post')
    def test_save_settings_maps_keys(self, mock_post):
        mock_post.return_value = make_response(data={})

        self.client.save_settings({
            "accounts": {"Work": {"a": 1}},
            "systemSettings": {"sync_days": 7},
            "styleSettings": {"header_background": "#fff"},
            "columns": ["inbox"],
        })

        mock_post.assert_called_once_with(
            "http://backend.test:4420/api/settings",
            json={
                "accounts": {"Work": {"a": 1}},
                "system": {"sync_days": 7},
                "style": {"header_background": "#fff"},
                "columns": ["inbox"],
            },
            timeout=30,
        )

    @patch('requests.post')
    def test_save_settings_failure(self, mock_post):
        mock_post.return_value = make_response(status_code=500, data={"error": "disk full"})

        with pytest.raises(PersistenceFailure) as exc_info:
            self.client.save_settings({
                "accounts": {}, "systemSettings": {}, "styleSettings": {}, "columns": None,
            })

        assert isinstance(exc_info.value.cause, RequestError)
        assert exc_info.value.cause.data == {"error": "disk full"}

    @patch('requests.post')
    def test_model_save_failure_is_reported(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")
        model = SettingsModel(SyncProbeLauncher(self.client), accounts={"Work": {"a": 1}})

        assert not model.save(self.client.save_settings)
        assert model.accounts == {"Work": {"a": 1}}


class TestAddAccountThroughClient:
    """Test running the add-account flow against the client synchronously."""

    def setup_method(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.client = SettingsApiClient(AppConfig(config_dir=Path(self.temp_dir.name)))
        self.model = SettingsModel(SyncProbeLauncher(self.client))
        flow = self.model.onboarding
        flow.start()
        flow.update_form("name", "Work")
        flow.update_form("username", "me@example.com")
        flow.update_form("password", "secret")

    def teardown_method(self):
        self.temp_dir.cleanup()

    @patch('requests.post')
    def test_autoconfigured_account_added(self, mock_post):
        mock_post.return_value = make_response(data={"connected": True, "settings": {"a": 1}})

        self.model.onboarding.submit()

        assert self.model.accounts == {"Work": {"a": 1}}
        assert self.model.onboarding.phase is Phase.IDLE

    @patch('requests.post')
    def test_transport_failure_falls_back_to_manual(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")

        self.model.onboarding.submit()

        draft = self.model.onboarding.draft
        assert draft.phase is Phase.MANUAL_CONFIG
        assert draft.error_kind == "connection"
        assert draft.draft_settings == {}
        assert self.model.accounts == {}


if __name__ == "__main__":
    pytest.main([__file__])
