"""
Conversions between account settings and flat form fields.
"""

from typing import Any, Dict

# Fields the manual configuration form always offers, even when the
# autoconfiguration probe returned nothing for them.
MANUAL_CONFIG_TEMPLATE: Dict[str, Dict[str, Any]] = {
    "imap_connection": {"host": "", "port": 993, "username": "", "password": "", "ssl": True},
    "smtp_connection": {"host": "", "port": 587, "username": "", "password": "", "ssl": True},
}

TRUE_VALUES = ("true", "1", "yes", "on")


def flatten_settings(settings: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested settings into dotted keys."""
    flat = {}
    for key, value in settings.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(flatten_settings(value, f"{path}."))
        else:
            flat[path] = value
    return flat


def unflatten_settings(flat: Dict[str, Any]) -> Dict[str, Any]:
    """Inverse of flatten_settings."""
    settings: Dict[str, Any] = {}
    for path, value in flat.items():
        node = settings
        *parents, leaf = path.split(".")
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value
    return settings


def coerce_value(original: Any, text: str) -> Any:
    """Convert edited text back to the type of the value it replaces."""
    if isinstance(original, bool):
        return text.strip().lower() in TRUE_VALUES
    if isinstance(original, int):
        try:
            return int(text)
        except ValueError:
            return text
    if original is None and not text:
        return None
    return text


def with_template(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in any manual configuration fields the draft is missing."""
    merged = {key: dict(value) for key, value in MANUAL_CONFIG_TEMPLATE.items()}
    for key, value in settings.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def parse_setting(text: str, numeric: bool) -> Any:
    """Value stored for a preference field; empty input clears it."""
    if not text:
        return None
    if numeric:
        try:
            return int(text)
        except ValueError:
            return text
    return text
