"""
Editable settings model for the settings screen.

Holds the accounts mapping plus the system and style preference
containers, and owns the add-account workflow. Every mutation builds a new
container instead of editing the current one in place, so anything that
captured an earlier container keeps seeing a consistent value.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ...utils.logging_setup import get_logger
from .errors import InvariantViolation, PersistenceFailure
from .fields import CONTAINERS, STYLE_SETTINGS, SYSTEM_SETTINGS
from .onboarding import AccountOnboardingFlow, ProbeLauncher

logger = get_logger(__name__)

# Receives the snapshot; raises PersistenceFailure if it could not be stored.
Persister = Callable[[Dict[str, Any]], None]


@dataclass
class AccountRow:
    """Props handed to whatever renders a single account."""
    account_id: str
    account_settings: Dict[str, Any]
    error: Optional[str] = None
    error_kind: Optional[str] = None


class SettingsModel:
    """
    Single source of truth for the settings being edited.

    Nothing is written back until save() is called.
    """

    def __init__(self, probe_launcher: ProbeLauncher,
                 accounts: Optional[Dict[str, Dict[str, Any]]] = None,
                 system_settings: Optional[Dict[str, Any]] = None,
                 style_settings: Optional[Dict[str, Any]] = None,
                 columns: Any = None):
        """
        Initialize the settings model.

        Args:
            probe_launcher: Starts account autoconfiguration requests
            accounts: Account id -> account settings
            system_settings: General/sync preferences
            style_settings: Cosmetic preferences
            columns: Opaque value saved back unchanged
        """
        self._accounts: Dict[str, Dict[str, Any]] = dict(accounts or {})
        self._containers: Dict[str, Dict[str, Any]] = {
            SYSTEM_SETTINGS: dict(system_settings or {}),
            STYLE_SETTINGS: dict(style_settings or {}),
        }
        self.columns = columns
        self.last_save_error: Optional[PersistenceFailure] = None
        self._listeners: List[Callable[[], None]] = []
        self.logger = logger

        self.onboarding = AccountOnboardingFlow(
            probe_launcher,
            has_account=self.has_account,
            add_account=self._add_account,
            on_change=self._notify,
        )

    @classmethod
    def from_settings(cls, settings: Dict[str, Any],
                      probe_launcher: ProbeLauncher) -> "SettingsModel":
        """
        Build a model from the settings object loaded from the backend.

        Args:
            settings: Object with optional accounts/system/style/columns sections
            probe_launcher: Starts account autoconfiguration requests
        """
        return cls(
            probe_launcher,
            accounts=settings.get("accounts"),
            system_settings=settings.get("system"),
            style_settings=settings.get("style"),
            columns=settings.get("columns"),
        )

    @property
    def accounts(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._accounts)

    @property
    def system_settings(self) -> Dict[str, Any]:
        return dict(self._containers[SYSTEM_SETTINGS])

    @property
    def style_settings(self) -> Dict[str, Any]:
        return dict(self._containers[STYLE_SETTINGS])

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback run after every change to the model."""
        self._listeners.append(callback)

    def has_account(self, account_id: str) -> bool:
        return account_id in self._accounts

    def account_rows(self) -> List[AccountRow]:
        return [
            AccountRow(account_id=account_id, account_settings=dict(settings))
            for account_id, settings in self._accounts.items()
        ]

    def new_account_row(self) -> Optional[AccountRow]:
        """Props for the manual configuration form, if it is showing."""
        draft = self.onboarding.draft
        if draft.draft_settings is None:
            return None
        return AccountRow(
            account_id=draft.name,
            account_settings=draft.draft_settings,
            error=draft.error,
            error_kind=draft.error_kind,
        )

    def delete_account(self, account_id: str) -> None:
        """Remove an account. Unknown ids are ignored."""
        if account_id not in self._accounts:
            self.logger.debug(f"Delete of unknown account '{account_id}' ignored")
            return

        self._accounts = {
            key: value for key, value in self._accounts.items()
            if key != account_id
        }
        self.logger.info(f"Deleted account '{account_id}'")
        self._notify()

    def update_account(self, account_id: str, new_settings: Dict[str, Any]) -> None:
        """
        Replace the settings of an existing account.

        Raises:
            InvariantViolation: If the account does not exist
        """
        if account_id not in self._accounts:
            raise InvariantViolation(f"Cannot update unknown account '{account_id}'")

        self._accounts = {**self._accounts, account_id: dict(new_settings)}
        self.logger.info(f"Updated account '{account_id}'")
        self._notify()

    def update_field(self, container_key: str, field_key: str, value: Any) -> None:
        """
        Set one preference inside systemSettings or styleSettings.

        Raises:
            InvariantViolation: If container_key is not a settings container
        """
        container = self._container(container_key)
        self._containers = {
            **self._containers,
            container_key: {**container, field_key: value},
        }
        self.logger.debug(f"Set {container_key}.{field_key}")
        self._notify()

    def get_field(self, container_key: str, field_key: str) -> Any:
        return self._container(container_key).get(field_key)

    def snapshot(self) -> Dict[str, Any]:
        """The full object handed to persistence on save."""
        return {
            "accounts": {key: dict(value) for key, value in self._accounts.items()},
            "systemSettings": dict(self._containers[SYSTEM_SETTINGS]),
            "styleSettings": dict(self._containers[STYLE_SETTINGS]),
            "columns": self.columns,
        }

    def save(self, persist: Persister) -> bool:
        """
        Submit the current snapshot for persistence.

        A failed save leaves the model untouched and can simply be retried.

        Args:
            persist: Persistence collaborator

        Returns:
            bool: True if the settings were saved
        """
        try:
            persist(self.snapshot())
        except PersistenceFailure as e:
            self.logger.error(f"Failed to save settings: {e}")
            self.last_save_error = e
            self._notify()
            return False

        self.last_save_error = None
        self.logger.info(f"Saved settings ({len(self._accounts)} accounts)")
        return True

    def close(self) -> None:
        """End the editing session without saving."""
        self.onboarding.close()
        self._listeners.clear()

    def _add_account(self, account_id: str, settings: Dict[str, Any]) -> None:
        if account_id in self._accounts:
            raise InvariantViolation(f"Account '{account_id}' already exists")

        self._accounts = {**self._accounts, account_id: dict(settings)}
        self.logger.info(f"Added account '{account_id}'")

    def _container(self, container_key: str) -> Dict[str, Any]:
        if container_key not in CONTAINERS:
            raise InvariantViolation(f"Unknown settings container: {container_key}")
        return self._containers[container_key]

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()
