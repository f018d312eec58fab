"""
Add-account workflow for the settings screen.

Adding an account happens in two phases. First the user enters an account
name, username and password and the backend tries to autoconfigure the
connection. If that fails the user is dropped into a manual configuration
form pre-filled with whatever partial settings the probe found.

The workflow is an explicit state machine; each phase is its own dataclass
carrying only the fields that phase needs.
"""

import enum
from dataclasses import dataclass, field, replace
from functools import partial
from typing import Any, Callable, ClassVar, Dict, Optional, Union

from ...utils.logging_setup import get_logger
from .errors import InvariantViolation, ProbeFailure, ValidationError

logger = get_logger(__name__)

ProbeCallback = Callable[[Dict[str, Any]], None]
# Called with the {username, password} payload and a callback to hand the
# probe response to once it arrives.
ProbeLauncher = Callable[[Dict[str, str], ProbeCallback], None]


class Phase(enum.Enum):
    """Onboarding phases."""
    IDLE = "idle"
    FORM_ENTRY = "form_entry"
    SUBMITTING = "submitting"
    MANUAL_CONFIG = "manual_config"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Idle:
    phase: ClassVar[Phase] = Phase.IDLE


@dataclass(frozen=True)
class FormEntry:
    phase: ClassVar[Phase] = Phase.FORM_ENTRY
    name: str = ""
    username: str = ""
    password: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class Submitting:
    phase: ClassVar[Phase] = Phase.SUBMITTING
    name: str
    username: str
    password: str
    attempt: int


@dataclass(frozen=True)
class ManualConfig:
    phase: ClassVar[Phase] = Phase.MANUAL_CONFIG
    name: str
    settings: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    error_kind: Optional[str] = None


@dataclass(frozen=True)
class Completed:
    phase: ClassVar[Phase] = Phase.COMPLETED
    name: str
    settings: Dict[str, Any] = field(default_factory=dict)


OnboardingState = Union[Idle, FormEntry, Submitting, ManualConfig, Completed]


@dataclass(frozen=True)
class OnboardingDraft:
    """Flat, read-only view of the onboarding state for display code."""
    phase: Phase = Phase.IDLE
    name: str = ""
    username: str = ""
    password: str = ""
    error: Optional[str] = None
    error_kind: Optional[str] = None
    is_pending: bool = False
    draft_settings: Optional[Dict[str, Any]] = None

    @classmethod
    def from_state(cls, state: OnboardingState) -> "OnboardingDraft":
        if isinstance(state, FormEntry):
            return cls(phase=state.phase, name=state.name, username=state.username,
                       password=state.password, error=state.error)
        if isinstance(state, Submitting):
            return cls(phase=state.phase, name=state.name, username=state.username,
                       password=state.password, is_pending=True)
        if isinstance(state, ManualConfig):
            return cls(phase=state.phase, name=state.name, error=state.error,
                       error_kind=state.error_kind, draft_settings=dict(state.settings))
        if isinstance(state, Completed):
            return cls(phase=state.phase, name=state.name, draft_settings=dict(state.settings))
        return cls()


class AccountOnboardingFlow:
    """
    State machine for adding one new account.

    The flow does not own the accounts mapping. It is handed a lookup used
    for the duplicate-name check and a merge function called when a new
    account is ready.
    """

    FORM_FIELDS = ("name", "username", "password")

    def __init__(self, probe_launcher: ProbeLauncher,
                 has_account: Callable[[str], bool],
                 add_account: Callable[[str, Dict[str, Any]], None],
                 on_change: Optional[Callable[[], None]] = None):
        """
        Initialize the onboarding flow.

        Args:
            probe_launcher: Starts an autoconfiguration request
            has_account: Returns True if an account id is already taken
            add_account: Merges a finished account into the accounts mapping
            on_change: Called after every state change
        """
        self.probe_launcher = probe_launcher
        self._has_account = has_account
        self._add_account = add_account
        self._on_change = on_change
        self.state: OnboardingState = Idle()
        self._attempts = 0
        self._closed = False
        self.logger = logger

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def is_pending(self) -> bool:
        return isinstance(self.state, Submitting)

    @property
    def draft(self) -> OnboardingDraft:
        return OnboardingDraft.from_state(self.state)

    def start(self) -> None:
        """Open the new-account form."""
        if isinstance(self.state, FormEntry):
            return
        self._require(Idle, "start adding an account")
        self._set_state(FormEntry())

    def toggle(self) -> None:
        """Show the new-account form, or hide it discarding anything typed."""
        if isinstance(self.state, Idle):
            self._set_state(FormEntry())
        elif isinstance(self.state, FormEntry):
            self._set_state(Idle())
        else:
            raise InvariantViolation(f"Cannot toggle the account form while {self.phase.value}")

    def update_form(self, field_name: str, value: str) -> None:
        """Set one of name/username/password on the new-account form."""
        state = self._require(FormEntry, "edit the account form")
        if field_name not in self.FORM_FIELDS:
            raise InvariantViolation(f"Unknown account form field: {field_name}")
        self._set_state(replace(state, **{field_name: value}))

    def submit(self) -> int:
        """
        Validate the form and start autoconfiguration.

        Returns:
            int: Attempt token of the request that was started

        Raises:
            ValidationError: Missing field or duplicate account name. The
                form stays open with the error message attached.
        """
        state = self._require(FormEntry, "submit the account form")

        if not (state.name and state.username and state.password):
            self._reject(state, ValidationError(
                ValidationError.MISSING_FIELD,
                "Missing name, email or password!",
            ))

        if self._has_account(state.name):
            self._reject(state, ValidationError(
                ValidationError.DUPLICATE_NAME,
                f"There is already an account called {state.name}",
            ))

        self._attempts += 1
        attempt = self._attempts

        self._set_state(Submitting(
            name=state.name,
            username=state.username,
            password=state.password,
            attempt=attempt,
        ))

        self.logger.info(f"Autoconfiguring new account '{state.name}' (attempt {attempt})")
        payload = {"username": state.username, "password": state.password}
        self.probe_launcher(payload, partial(self._on_probe_response, attempt))
        return attempt

    def update_draft(self, settings: Dict[str, Any]) -> None:
        """Replace the draft settings being edited in manual configuration."""
        state = self._require(ManualConfig, "edit draft settings")
        self._set_state(replace(state, settings=dict(settings)))

    def complete_manual(self, settings: Optional[Dict[str, Any]] = None) -> None:
        """
        Add the manually configured account without probing again.

        Args:
            settings: Edited settings; defaults to the current draft
        """
        state = self._require(ManualConfig, "complete manual configuration")
        final = dict(settings) if settings is not None else dict(state.settings)
        self._complete(state.name, final)

    def cancel(self) -> bool:
        """
        Abandon the add-account attempt.

        An in-flight autoconfiguration request cannot be cancelled; calling
        this while submitting does nothing.

        Returns:
            bool: True if the flow is now idle
        """
        if isinstance(self.state, Idle):
            return True
        if isinstance(self.state, Submitting):
            self.logger.warning(
                f"Cannot cancel '{self.state.name}' while autoconfiguration is running"
            )
            return False
        self._set_state(Idle())
        return True

    def close(self) -> None:
        """End the session; results still in flight will be discarded."""
        self._closed = True
        self.state = Idle()

    def _on_probe_response(self, attempt: int, response: Optional[Dict[str, Any]]) -> None:
        if self._closed:
            self.logger.debug(f"Discarding autoconfiguration result for attempt {attempt}: session closed")
            return

        state = self.state
        if not isinstance(state, Submitting) or state.attempt != attempt:
            self.logger.warning(f"Ignoring stale autoconfiguration result for attempt {attempt}")
            return

        response = response or {}
        if response.get("connected"):
            self.logger.info(f"Autoconfiguration succeeded for '{state.name}'")
            self._complete(state.name, dict(response.get("settings") or {}))
            return

        failure = ProbeFailure.from_response(response)
        self.logger.info(
            f"Autoconfiguration failed for '{state.name}' ({failure.kind}): {failure.message}"
        )
        self._set_state(ManualConfig(
            name=state.name,
            settings=failure.settings,
            error=failure.message,
            error_kind=failure.kind,
        ))

    def _complete(self, name: str, settings: Dict[str, Any]) -> None:
        # Merge first so a rejected merge leaves the flow where it was
        self._add_account(name, settings)
        self._set_state(Completed(name=name, settings=settings))
        self._set_state(Idle())

    def _reject(self, state: FormEntry, error: ValidationError) -> None:
        self.logger.info(f"New account form rejected: {error.reason}")
        self._set_state(replace(state, error=error.message))
        raise error

    def _require(self, state_type, action: str):
        if not isinstance(self.state, state_type):
            raise InvariantViolation(f"Cannot {action} while {self.phase.value}")
        return self.state

    def _set_state(self, state: OnboardingState) -> None:
        if state.phase is not self.state.phase:
            self.logger.debug(f"Onboarding: {self.state.phase.value} -> {state.phase.value}")
        self.state = state
        if self._on_change is not None:
            self._on_change()
