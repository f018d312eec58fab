"""
Settings screen model and add-account workflow.
"""

from .errors import (
    SettingsError, ValidationError, InvariantViolation,
    PersistenceFailure, ProbeFailure,
)
from .fields import SettingField, SETTINGS_SECTIONS, SYSTEM_SETTINGS, STYLE_SETTINGS, all_fields
from .onboarding import (
    AccountOnboardingFlow, OnboardingDraft, Phase,
    Idle, FormEntry, Submitting, ManualConfig, Completed,
)
from .settings_model import SettingsModel, AccountRow

__all__ = [
    'SettingsError',
    'ValidationError',
    'InvariantViolation',
    'PersistenceFailure',
    'ProbeFailure',
    'SettingField',
    'SETTINGS_SECTIONS',
    'all_fields',
    'SYSTEM_SETTINGS',
    'STYLE_SETTINGS',
    'AccountOnboardingFlow',
    'OnboardingDraft',
    'Phase',
    'Idle',
    'FormEntry',
    'Submitting',
    'ManualConfig',
    'Completed',
    'SettingsModel',
    'AccountRow',
]
