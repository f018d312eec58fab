"""
Error types raised by the settings model and onboarding flow.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class SettingsError(Exception):
    """Base class for settings screen errors."""
    pass


class ValidationError(SettingsError):
    """
    Add-account form failed its local checks.

    Never sent over the network; the onboarding phase is left unchanged.
    """

    MISSING_FIELD = "missing field"
    DUPLICATE_NAME = "duplicate account name"

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class InvariantViolation(SettingsError):
    """Programming error: the model was asked to do something impossible."""
    pass


class PersistenceFailure(SettingsError):
    """Saving the settings snapshot failed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


@dataclass
class ProbeFailure:
    """Negative autoconfiguration outcome. Drives the manual fallback."""
    message: Optional[str] = None
    kind: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "ProbeFailure":
        return cls(
            message=response.get("error_message"),
            kind=response.get("error_type"),
            settings=dict(response.get("settings") or {}),
        )
