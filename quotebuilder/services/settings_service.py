"""Application settings service built on QSettings."""
from __future__ import annotations

from PyQt5.QtCore import QSettings

from quotebuilder.domain.quote_models import DEFAULT_CURRENCY_CODE
from quotebuilder.exceptions import SettingsError
from quotebuilder.infrastructure.app_constants import DRAFT_PATH, SETTINGS_APP, SETTINGS_ORG
from quotebuilder.infrastructure.settings import coerce_bool

DRAFT_BACKENDS = ("settings", "file", "memory")


class SettingsService:
    def __init__(self, settings=None) -> None:
        self._settings = settings if settings is not None else QSettings(SETTINGS_ORG, SETTINGS_APP)

    # --- New quote defaults --------------------------------------------
    def load_default_currency(self) -> str:
        code = self._settings.value("quote/default_currency", DEFAULT_CURRENCY_CODE)
        code = str(code or "").strip().upper()
        return code or DEFAULT_CURRENCY_CODE

    def save_default_currency(self, code: str) -> None:
        self._settings.setValue("quote/default_currency", code.strip().upper())
        self._settings.sync()

    def load_tax_inclusive_default(self) -> bool:
        return coerce_bool(self._settings.value("quote/tax_inclusive_default", False))

    def save_tax_inclusive_default(self, value: bool) -> None:
        self._settings.setValue("quote/tax_inclusive_default", bool(value))
        self._settings.sync()

    # --- Draft storage -------------------------------------------------
    def load_draft_backend(self) -> str:
        backend = str(self._settings.value("drafts/backend", "settings") or "settings")
        backend = backend.strip().lower()
        if backend not in DRAFT_BACKENDS:
            raise SettingsError(
                f"Unknown draft backend {backend!r}; expected one of {', '.join(DRAFT_BACKENDS)}"
            )
        return backend

    def save_draft_backend(self, backend: str) -> None:
        if backend not in DRAFT_BACKENDS:
            raise SettingsError(f"Unknown draft backend {backend!r}")
        self._settings.setValue("drafts/backend", backend)
        self._settings.sync()

    def load_draft_path(self) -> str:
        return str(self._settings.value("drafts/path", DRAFT_PATH) or DRAFT_PATH)

    def load_draft_encryption_enabled(self) -> bool:
        return coerce_bool(self._settings.value("drafts/encrypt", False))

    # --- Convenience ---------------------------------------------------
    def get(self, key: str, default=None):
        return self._settings.value(key, default)

    def set(self, key: str, value) -> None:
        self._settings.setValue(key, value)
        self._settings.sync()

    def raw(self):
        return self._settings
