"""At-rest encryption for file-backed quote drafts.

Encryption Algorithm: AES-256-GCM
- Nonce: 96 bits, random per draft write, stored in front of the ciphertext
- Tag: 128 bits, appended by AESGCM; a tampered or foreign draft fails to open

Key Derivation: PBKDF2-HMAC-SHA256
- Iterations: 100,000 (DEFAULT_KDF_ITERATIONS)
- Salt: 128 bits, generated once and kept in settings under ``security/draft_salt``

The on-disk form is ``base64(nonce + ciphertext)`` so the draft stays a text blob.
"""
from __future__ import annotations

import base64
import binascii
import logging
import os
import time
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from quotebuilder.exceptions import DraftEncryptionError

SALT_SETTINGS_KEY = "security/draft_salt"
DEFAULT_SALT_BYTES = 16
DEFAULT_KDF_ITERATIONS = 100_000
NONCE_BYTES = 12


def get_or_create_salt(
    settings,
    logger: Optional[logging.Logger] = None,
    *,
    settings_key: str = SALT_SETTINGS_KEY,
    length: int = DEFAULT_SALT_BYTES,
) -> bytes:
    """Return the stored draft salt, creating and persisting one when absent."""
    salt_b64 = settings.value(settings_key)
    if salt_b64:
        try:
            return base64.b64decode(salt_b64, validate=True)
        except (binascii.Error, ValueError) as exc:
            if logger:
                logger.warning("Failed to decode stored draft salt: %s. Regenerating.", exc)

    if logger:
        logger.info("Generating new draft salt")
    salt = os.urandom(length)
    settings.setValue(settings_key, base64.b64encode(salt).decode("ascii"))
    settings.sync()
    return salt


def derive_key(
    passphrase: str,
    salt: bytes,
    *,
    iterations: int = DEFAULT_KDF_ITERATIONS,
    logger: Optional[logging.Logger] = None,
) -> bytes:
    """Derive a 32-byte AES key from ``passphrase`` using PBKDF2."""
    if not passphrase:
        raise ValueError("Passphrase cannot be empty for key derivation.")
    if not salt:
        raise ValueError("Salt cannot be empty for key derivation.")

    start = time.time()
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    key = kdf.derive(passphrase.encode("utf-8"))
    if logger:
        logger.debug("Draft key derived in %.2f seconds", time.time() - start)
    return key


def encrypt_text(plaintext: str, key: bytes) -> str:
    """Encrypt ``plaintext`` and return the base64 text envelope."""
    if not key:
        raise DraftEncryptionError("Encryption key is required.")
    nonce = os.urandom(NONCE_BYTES)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.b64encode(nonce + ciphertext).decode("ascii")


def decrypt_text(envelope: str, key: bytes) -> str:
    """Decrypt a base64 envelope produced by :func:`encrypt_text`."""
    if not key:
        raise DraftEncryptionError("Encryption key is required.")
    try:
        payload = base64.b64decode(envelope, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DraftEncryptionError("Encrypted draft is not valid base64.") from exc
    if len(payload) <= NONCE_BYTES:
        raise DraftEncryptionError("Encrypted draft is incomplete or missing nonce.")

    nonce, ciphertext = payload[:NONCE_BYTES], payload[NONCE_BYTES:]
    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as exc:
        raise DraftEncryptionError("Draft failed authentication (wrong key or tampered).") from exc
    return plaintext.decode("utf-8")
