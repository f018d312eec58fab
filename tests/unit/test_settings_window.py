"""
Unit tests for the settings window's new account form.

Runs against the offscreen Qt platform; no display is needed.
"""

import os
import sys
from unittest.mock import Mock

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

app = QApplication.instance() or QApplication(sys.argv)

from mailsettings.core.settings import SettingsModel, Phase
from mailsettings.gui.settings.settings_window import SettingsWindow


class PendingLauncher:
    """Launcher whose requests never answer unless told to."""

    def __init__(self):
        self.calls = []

    def __call__(self, payload, callback):
        self.calls.append((payload, callback))

    def respond(self, response):
        self.calls[-1][1](response)


class TestNewAccountForm:
    """Test the add-account form while autoconfiguration is running."""

    def setup_method(self):
        self.launcher = PendingLauncher()
        self.model = SettingsModel(
            self.launcher,
            system_settings={"sync_days": 7},
            style_settings={"header_background": "#fff"},
        )
        self.window = SettingsWindow(self.model, Mock())

        self.model.onboarding.toggle()
        self.window.name_edit.textEdited.emit("Work")
        self.window.username_edit.textEdited.emit("me@example.com")
        self.window.password_edit.textEdited.emit("secret")
        self.window.submit_new_account()

    def teardown_method(self):
        self.window.reject()

    def test_typing_while_submitting_is_ignored(self):
        self.window.name_edit.textEdited.emit("Work2")
        self.window.username_edit.textEdited.emit("other@example.com")
        self.window.password_edit.textEdited.emit("hunter2")

        draft = self.model.onboarding.draft
        assert draft.phase is Phase.SUBMITTING
        assert draft.name == "Work"
        assert draft.username == "me@example.com"
        assert len(self.launcher.calls) == 1

    def test_form_read_only_while_submitting(self):
        assert self.window.name_edit.isReadOnly()
        assert self.window.username_edit.isReadOnly()
        assert self.window.password_edit.isReadOnly()
        assert not self.window.add_account_btn.isEnabled()

    def test_second_submit_is_ignored(self):
        self.window.submit_new_account()

        assert len(self.launcher.calls) == 1
        assert self.model.onboarding.phase is Phase.SUBMITTING

    def test_success_adds_account_row(self):
        self.launcher.respond({"connected": True, "settings": {"imap_host": "imap.example.com"}})

        assert self.model.accounts == {"Work": {"imap_host": "imap.example.com"}}
        assert "Work" in self.window.account_widgets
        assert self.window.add_account_stack.currentIndex() == SettingsWindow.PAGE_ADD_BUTTON

    def test_failure_shows_manual_form(self):
        self.launcher.respond({
            "connected": False,
            "settings": {},
            "error_message": "bad login",
            "error_type": "auth",
        })

        assert self.model.onboarding.phase is Phase.MANUAL_CONFIG
        assert self.window.manual_widget is not None
        assert self.window.add_account_stack.currentIndex() == SettingsWindow.PAGE_MANUAL


class TestPreferenceFields:
    """Test the general and sync preference fields."""

    def setup_method(self):
        self.model = SettingsModel(
            PendingLauncher(),
            system_settings={"sync_days": 7},
            style_settings={"header_background": "#fff"},
        )
        self.window = SettingsWindow(self.model, Mock())

    def teardown_method(self):
        self.window.reject()

    def test_fields_show_model_values(self):
        assert self.window.field_edits[("systemSettings", "sync_days")].text() == "7"
        assert self.window.field_edits[("styleSettings", "header_background")].text() == "#fff"
        assert self.window.field_edits[("systemSettings", "batch_size")].text() == ""

    def test_editing_field_updates_model(self):
        self.window.field_edits[("systemSettings", "sync_days")].textEdited.emit("30")

        assert self.model.get_field("systemSettings", "sync_days") == 30
