"""
Settings window.

Renders the settings model: configured accounts, the add-account form
(or the manual configuration form when autoconfiguration failed), and the
general and sync preferences. Nothing is stored until "Save all settings".
"""

from typing import Dict, Optional, Tuple
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox, QLabel,
    QLineEdit, QPushButton, QScrollArea, QStackedWidget, QWidget, QMessageBox
)
from PyQt6.QtGui import QIntValidator

from ...core.api.settings_client import SettingsApiClient
from ...core.settings import (
    SettingsModel, ValidationError, Phase, SettingField, SETTINGS_SECTIONS, all_fields
)
from ...utils.logging_setup import get_logger
from .account_widget import AccountWidget
from .form_values import parse_setting

logger = get_logger(__name__)


class SettingsWindow(QDialog):
    """Main settings dialog."""

    PAGE_ADD_BUTTON = 0
    PAGE_FORM = 1
    PAGE_MANUAL = 2

    def __init__(self, model: SettingsModel, client: SettingsApiClient, parent=None):
        super().__init__(parent)
        self.model = model
        self.client = client

        self.account_widgets: Dict[str, AccountWidget] = {}
        self.field_edits: Dict[Tuple[str, str], QLineEdit] = {}
        self.manual_widget: Optional[AccountWidget] = None
        self._rendered_accounts = None
        self._rendered_manual = None

        self.setWindowTitle("Settings")
        self.resize(700, 800)

        self.setup_ui()
        self.model.add_listener(self.refresh)
        self.refresh()

    def setup_ui(self):
        """Setup the settings window UI."""
        outer = QVBoxLayout(self)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        content = QWidget()
        layout = QVBoxLayout(content)
        scroll.setWidget(content)
        outer.addWidget(scroll)

        # Accounts
        accounts_group = QGroupBox("Accounts")
        accounts_layout = QVBoxLayout(accounts_group)
        note = QLabel("changes will not be saved until you save all settings at the bottom of the page")
        note.setStyleSheet("QLabel { color: #777; }")
        accounts_layout.addWidget(note)

        self.accounts_container = QWidget()
        self.accounts_layout = QVBoxLayout(self.accounts_container)
        self.accounts_layout.setContentsMargins(0, 0, 0, 0)
        accounts_layout.addWidget(self.accounts_container)

        self.add_account_stack = QStackedWidget()
        self.add_account_stack.addWidget(self._build_add_button())
        self.add_account_stack.addWidget(self._build_new_account_form())
        self.manual_container = QWidget()
        self.manual_layout = QVBoxLayout(self.manual_container)
        self.manual_layout.setContentsMargins(0, 0, 0, 0)
        self.add_account_stack.addWidget(self.manual_container)
        accounts_layout.addWidget(self.add_account_stack)

        layout.addWidget(accounts_group)

        # Preferences
        for title, fields in SETTINGS_SECTIONS:
            layout.addWidget(self._build_section(title, fields))

        layout.addStretch()

        button_layout = QHBoxLayout()
        button_layout.addStretch()
        self.save_btn = QPushButton("Save all settings →")
        self.save_btn.clicked.connect(self.save_settings)
        button_layout.addWidget(self.save_btn)
        outer.addLayout(button_layout)

    def _build_add_button(self) -> QWidget:
        page = QWidget()
        layout = QHBoxLayout(page)
        add_btn = QPushButton("Add new account")
        add_btn.clicked.connect(self.model.onboarding.toggle)
        layout.addWidget(add_btn)
        layout.addStretch()
        return page

    def _build_new_account_form(self) -> QWidget:
        page = QGroupBox("New Account")
        layout = QVBoxLayout(page)

        self.new_account_error = QLabel()
        self.new_account_error.setStyleSheet("QLabel { color: #c0392b; }")
        layout.addWidget(self.new_account_error)

        form = QFormLayout()
        self.name_edit = QLineEdit()
        form.addRow("Account Name:", self.name_edit)
        self.username_edit = QLineEdit()
        form.addRow("Email:", self.username_edit)
        self.password_edit = QLineEdit()
        self.password_edit.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Password:", self.password_edit)
        layout.addLayout(form)

        self.name_edit.textEdited.connect(lambda text: self.edit_new_account("name", text))
        self.username_edit.textEdited.connect(lambda text: self.edit_new_account("username", text))
        self.password_edit.textEdited.connect(lambda text: self.edit_new_account("password", text))

        button_layout = QHBoxLayout()
        self.add_account_btn = QPushButton("Add Account")
        self.add_account_btn.setDefault(True)
        self.add_account_btn.clicked.connect(self.submit_new_account)
        button_layout.addWidget(self.add_account_btn)

        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.model.onboarding.cancel)
        button_layout.addWidget(cancel_btn)
        button_layout.addStretch()
        layout.addLayout(button_layout)

        return page

    def _build_section(self, title: str, fields) -> QGroupBox:
        group = QGroupBox(title)
        layout = QFormLayout(group)

        for setting in fields:
            edit = QLineEdit()
            edit.setToolTip(setting.help_text)
            if setting.numeric:
                edit.setValidator(QIntValidator())
            edit.textEdited.connect(
                lambda text, s=setting: self.update_setting(s, text)
            )
            layout.addRow(f"{setting.label}:", edit)
            self.field_edits[(setting.container, setting.key)] = edit

        return group

    def update_setting(self, setting: SettingField, text: str):
        self.model.update_field(setting.container, setting.key, parse_setting(text, setting.numeric))

    def edit_new_account(self, field_name: str, text: str):
        # The form stays on screen, read-only, while a request is running
        if self.model.onboarding.phase is not Phase.FORM_ENTRY:
            logger.debug(f"Ignoring edit to '{field_name}' while {self.model.onboarding.phase.value}")
            return
        self.model.onboarding.update_form(field_name, text)

    def submit_new_account(self):
        """Validate the new account form and start autoconfiguration."""
        if self.model.onboarding.phase is not Phase.FORM_ENTRY:
            return
        try:
            self.model.onboarding.submit()
        except ValidationError as e:
            # Already recorded on the form state; refresh shows it
            logger.debug(f"New account form invalid: {e.reason}")

    def refresh(self):
        """Bring every widget in line with the model."""
        self._refresh_accounts()
        self._refresh_onboarding()
        self._refresh_fields()

    def _refresh_accounts(self):
        accounts = self.model.accounts
        if accounts == self._rendered_accounts:
            return
        self._rendered_accounts = accounts

        for widget in self.account_widgets.values():
            self.accounts_layout.removeWidget(widget)
            widget.deleteLater()
        self.account_widgets.clear()

        for row in self.model.account_rows():
            widget = AccountWidget(row)
            widget.account_updated.connect(self.model.update_account)
            widget.account_deleted.connect(self.model.delete_account)
            self.accounts_layout.addWidget(widget)
            self.account_widgets[row.account_id] = widget

    def _refresh_onboarding(self):
        draft = self.model.onboarding.draft

        if draft.phase is Phase.MANUAL_CONFIG:
            self._show_manual_config()
            self.add_account_stack.setCurrentIndex(self.PAGE_MANUAL)
            return

        self._clear_manual_config()

        if draft.phase in (Phase.FORM_ENTRY, Phase.SUBMITTING):
            self._set_text(self.name_edit, draft.name)
            self._set_text(self.username_edit, draft.username)
            self._set_text(self.password_edit, draft.password)
            for edit in (self.name_edit, self.username_edit, self.password_edit):
                edit.setReadOnly(draft.is_pending)
            self.new_account_error.setText(draft.error or "")
            self.new_account_error.setVisible(bool(draft.error))
            self.add_account_btn.setEnabled(not draft.is_pending)
            self.add_account_btn.setText("Connecting..." if draft.is_pending else "Add Account")
            self.add_account_stack.setCurrentIndex(self.PAGE_FORM)
        else:
            self.add_account_stack.setCurrentIndex(self.PAGE_ADD_BUTTON)

    def _show_manual_config(self):
        row = self.model.new_account_row()
        key = (row.account_id, row.error, row.error_kind)
        if self.manual_widget is not None and key == self._rendered_manual:
            return

        self._clear_manual_config()
        self._rendered_manual = key
        self.manual_widget = AccountWidget(row, always_editing=True)
        self.manual_widget.account_updated.connect(
            lambda _account_id, settings: self.model.onboarding.complete_manual(settings)
        )
        self.manual_widget.account_deleted.connect(lambda _account_id: self.model.onboarding.cancel())
        self.manual_layout.addWidget(self.manual_widget)

    def _clear_manual_config(self):
        if self.manual_widget is None:
            return
        self.manual_layout.removeWidget(self.manual_widget)
        self.manual_widget.deleteLater()
        self.manual_widget = None
        self._rendered_manual = None

    def _refresh_fields(self):
        for setting in all_fields():
            edit = self.field_edits[(setting.container, setting.key)]
            value = self.model.get_field(setting.container, setting.key)
            self._set_text(edit, "" if value is None else str(value))

    @staticmethod
    def _set_text(edit: QLineEdit, text: str):
        # Only touch the widget when needed so the cursor stays put
        if edit.text() != text:
            edit.setText(text)

    def save_settings(self):
        """Save everything and close the window."""
        self.save_btn.setEnabled(False)
        try:
            saved = self.model.save(self.client.save_settings)
        finally:
            self.save_btn.setEnabled(True)

        if saved:
            self.accept()
            return

        QMessageBox.warning(
            self,
            "Save Failed",
            f"Settings could not be saved:\n{self.model.last_save_error}\n\n"
            "Your changes have been kept; try saving again."
        )

    def done(self, result: int):
        self.model.close()
        super().done(result)
