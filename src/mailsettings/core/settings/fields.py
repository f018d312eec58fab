"""
Preference fields shown on the settings screen.
"""

from dataclasses import dataclass
from typing import Tuple

SYSTEM_SETTINGS = "systemSettings"
STYLE_SETTINGS = "styleSettings"

CONTAINERS = (SYSTEM_SETTINGS, STYLE_SETTINGS)


@dataclass(frozen=True)
class SettingField:
    """A single editable preference inside one of the settings containers."""
    container: str
    key: str
    label: str
    help_text: str
    numeric: bool = False


# (section title, fields) in display order
SETTINGS_SECTIONS: Tuple[Tuple[str, Tuple[SettingField, ...]], ...] = (
    ("General", (
        SettingField(STYLE_SETTINGS, "header_background", "Header background",
                     "header background colour"),
        SettingField(SYSTEM_SETTINGS, "undo_ms", "Undo time (ms)",
                     "length of time to undo actions", numeric=True),
    )),
    ("Sync", (
        SettingField(SYSTEM_SETTINGS, "sync_days", "Sync days",
                     "number of days emails to sync", numeric=True),
        SettingField(SYSTEM_SETTINGS, "batch_size", "Batch size",
                     "number of emails to fetch at once", numeric=True),
        SettingField(SYSTEM_SETTINGS, "initial_batches", "Initial batches",
                     "initial number of batches to fetch", numeric=True),
    )),
)


def all_fields() -> Tuple[SettingField, ...]:
    """Every known field, flattened across sections."""
    return tuple(f for _, fields in SETTINGS_SECTIONS for f in fields)
