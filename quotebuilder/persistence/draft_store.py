"""Single-slot asynchronous storage for the in-progress quote draft.

Every store holds at most one blob. ``save`` overwrites it and ``load``
returns it (or ``None`` when the slot is empty). Failures at the storage
boundary surface as :class:`DraftStoreError`.
"""
from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

from quotebuilder.exceptions import DraftEncryptionError, DraftStoreError
from quotebuilder.infrastructure.app_constants import DRAFT_LOGGER_NAME
from quotebuilder.security.encryption import decrypt_text, derive_key, encrypt_text, get_or_create_salt

SETTINGS_SLOT_KEY = "drafts/current_quote"


class DraftStore(Protocol):
    """Contract the quote state manager relies on."""

    async def save(self, blob: str) -> None:
        """Overwrite the slot with ``blob``."""

    async def load(self) -> Optional[str]:
        """Return the stored blob, or ``None`` when nothing has been saved."""


class InMemoryDraftStore:
    """Process-local slot with an optional simulated I/O delay."""

    def __init__(self, initial: Optional[str] = None, *, delay: float = 0.0) -> None:
        self._slot = initial
        self._delay = delay

    @property
    def blob(self) -> Optional[str]:
        return self._slot

    async def save(self, blob: str) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)
        self._slot = blob

    async def load(self) -> Optional[str]:
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._slot


class SettingsDraftStore:
    """Keep the draft under a single QSettings key."""

    def __init__(self, settings, *, key: str = SETTINGS_SLOT_KEY) -> None:
        self._settings = settings
        self._key = key

    async def save(self, blob: str) -> None:
        try:
            self._settings.setValue(self._key, blob)
            self._settings.sync()
        except Exception as exc:
            raise DraftStoreError(f"Failed to write draft to settings: {exc}") from exc

    async def load(self) -> Optional[str]:
        try:
            value = self._settings.value(self._key)
        except Exception as exc:
            raise DraftStoreError(f"Failed to read draft from settings: {exc}") from exc
        if value is None:
            return None
        return str(value)


class FileDraftStore:
    """Keep the draft in one UTF-8 file, optionally AES-GCM encrypted.

    Writes go to a temporary sibling which then replaces the target, so a
    crash mid-write never leaves a truncated draft behind.
    """

    def __init__(
        self,
        path: Union[str, os.PathLike],
        *,
        key: Optional[bytes] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._path = Path(path)
        self._key = key
        self._logger = logger or logging.getLogger(DRAFT_LOGGER_NAME)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def encrypted(self) -> bool:
        return self._key is not None

    async def save(self, blob: str) -> None:
        payload = encrypt_text(blob, self._key) if self._key is not None else blob
        try:
            await asyncio.to_thread(self._write, payload)
        except OSError as exc:
            raise DraftStoreError(f"Failed to write draft file {self._path}: {exc}") from exc
        self._logger.debug("Draft written to %s (%d chars)", self._path, len(payload))

    async def load(self) -> Optional[str]:
        try:
            payload = await asyncio.to_thread(self._read)
        except OSError as exc:
            raise DraftStoreError(f"Failed to read draft file {self._path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise DraftStoreError(f"Draft file {self._path} is not valid UTF-8: {exc}") from exc
        if payload is None or self._key is None:
            return payload
        try:
            return decrypt_text(payload, self._key)
        except DraftEncryptionError:
            self._logger.error("Encrypted draft %s could not be opened", self._path)
            raise

    def _write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=str(self._path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except OSError:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def _read(self) -> Optional[str]:
        if not self._path.exists():
            return None
        return self._path.read_text(encoding="utf-8")


def build_draft_store(
    settings_service,
    *,
    passphrase: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> DraftStore:
    """Create the draft store selected in settings."""
    logger = logger or logging.getLogger(DRAFT_LOGGER_NAME)
    backend = settings_service.load_draft_backend()
    if backend == "memory":
        logger.info("Using in-memory draft store; drafts will not survive restart")
        return InMemoryDraftStore()
    if backend == "settings":
        logger.info("Using settings-backed draft store")
        return SettingsDraftStore(settings_service.raw())

    path = settings_service.load_draft_path()
    key = None
    if settings_service.load_draft_encryption_enabled():
        if not passphrase:
            raise DraftEncryptionError("Draft encryption is enabled but no passphrase was supplied.")
        salt = get_or_create_salt(settings_service.raw(), logger)
        key = derive_key(passphrase, salt, logger=logger)
    logger.info("Using file draft store at %s (encrypted=%s)", path, key is not None)
    return FileDraftStore(path, key=key, logger=logger)
