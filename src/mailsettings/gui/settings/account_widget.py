"""
Account row widget for the settings window.

Renders one account's settings and reports edits back through signals;
it never touches the settings model directly.
"""

from typing import Any, Dict, Optional
from PyQt6.QtWidgets import (
    QGroupBox, QVBoxLayout, QHBoxLayout, QFormLayout, QLabel,
    QLineEdit, QPushButton, QWidget
)
from PyQt6.QtCore import pyqtSignal

from ...core.settings import AccountRow
from ...utils.logging_setup import get_logger
from .form_values import coerce_value, flatten_settings, unflatten_settings, with_template

logger = get_logger(__name__)


class AccountWidget(QGroupBox):
    """Displays and edits one account."""

    account_updated = pyqtSignal(str, dict)  # account_id, settings
    account_deleted = pyqtSignal(str)  # account_id

    def __init__(self, row: AccountRow, always_editing: bool = False,
                 parent: Optional[QWidget] = None):
        super().__init__(row.account_id, parent)
        self.row = row
        self.always_editing = always_editing
        self.editing = always_editing

        settings = with_template(row.account_settings) if always_editing else row.account_settings
        self.values = flatten_settings(settings)
        self.edits: Dict[str, QLineEdit] = {}

        self.setup_ui()

    def setup_ui(self):
        """Build the widget for the current mode."""
        layout = QVBoxLayout(self)

        if self.row.error:
            kind = f" ({self.row.error_kind})" if self.row.error_kind else ""
            error_label = QLabel(f"{self.row.error}{kind}")
            error_label.setObjectName("error")
            error_label.setStyleSheet("QLabel#error { color: #c0392b; }")
            error_label.setWordWrap(True)
            layout.addWidget(error_label)

        self.form_container = QWidget()
        self.form_layout = QFormLayout(self.form_container)
        layout.addWidget(self.form_container)

        self.summary_label = QLabel(self._summary())
        layout.addWidget(self.summary_label)

        button_layout = QHBoxLayout()
        button_layout.addStretch()

        self.edit_btn = QPushButton("Edit")
        self.edit_btn.clicked.connect(self.start_editing)
        button_layout.addWidget(self.edit_btn)

        self.save_btn = QPushButton("Add account" if self.always_editing else "Update")
        self.save_btn.clicked.connect(self.save)
        button_layout.addWidget(self.save_btn)

        self.cancel_btn = QPushButton("Cancel")
        self.cancel_btn.clicked.connect(self.cancel)
        button_layout.addWidget(self.cancel_btn)

        self.delete_btn = QPushButton("Delete")
        self.delete_btn.clicked.connect(lambda: self.account_deleted.emit(self.row.account_id))
        button_layout.addWidget(self.delete_btn)

        layout.addLayout(button_layout)

        self._build_form()
        self._update_mode()

    def _build_form(self):
        for path, value in self.values.items():
            edit = QLineEdit("" if value is None else str(value))
            if "password" in path:
                edit.setEchoMode(QLineEdit.EchoMode.Password)
            self.form_layout.addRow(f"{path}:", edit)
            self.edits[path] = edit

    def _summary(self) -> str:
        imap = self.row.account_settings.get("imap_connection") or {}
        smtp = self.row.account_settings.get("smtp_connection") or {}
        parts = [
            f"{label} {conf.get('username', '')}@{conf.get('host', '')}"
            for label, conf in (("IMAP", imap), ("SMTP", smtp)) if conf
        ]
        return " / ".join(parts)

    def _update_mode(self):
        self.form_container.setVisible(self.editing)
        self.summary_label.setVisible(not self.editing)
        self.edit_btn.setVisible(not self.editing)
        self.save_btn.setVisible(self.editing)
        # The draft form is abandoned with cancel, saved accounts with delete
        self.cancel_btn.setVisible(self.editing)
        self.delete_btn.setVisible(not self.always_editing)

    def start_editing(self):
        self.editing = True
        self._update_mode()

    def cancel(self):
        if self.always_editing:
            self.account_deleted.emit(self.row.account_id)
            return

        for path, edit in self.edits.items():
            value = self.values[path]
            edit.setText("" if value is None else str(value))
        self.editing = False
        self._update_mode()

    def collect_settings(self) -> Dict[str, Any]:
        """Current form contents as a nested settings dict."""
        flat = {
            path: coerce_value(self.values[path], edit.text())
            for path, edit in self.edits.items()
        }
        return unflatten_settings(flat)

    def save(self):
        settings = self.collect_settings()
        logger.debug(f"Account form saved for '{self.row.account_id}'")
        self.account_updated.emit(self.row.account_id, settings)
        if not self.always_editing:
            self.editing = False
            self._update_mode()
