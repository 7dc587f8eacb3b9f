"""Utility helpers for application QSettings access."""
from PyQt5.QtCore import QSettings

from .app_constants import SETTINGS_ORG, SETTINGS_APP

_TRUE_STRINGS = ("1", "true", "yes", "on")


def get_app_settings(*, org: str = SETTINGS_ORG, app: str = SETTINGS_APP) -> QSettings:
    """Return a QSettings instance using the default org/app identifiers."""
    return QSettings(org, app)


def coerce_bool(raw, default: bool = False) -> bool:
    """Interpret a stored settings value as a boolean.

    INI-backed QSettings hands booleans back as strings, so both forms are accepted.
    """
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return default
    if isinstance(raw, str):
        return raw.strip().lower() in _TRUE_STRINGS
    return bool(raw)


__all__ = ["coerce_bool", "get_app_settings", "QSettings"]
