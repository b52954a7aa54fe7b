"""Encryption of free-text reading notes before they reach SQLite.

A note such as "dizzy after the 10k, skipped lunch" says more about a person
than the glucose value next to it, so only notes are encrypted. Metric,
value and timestamp columns stay in the clear because ``latest_by_type``
filters and orders on them.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


class FieldEncryptor:
    """Fernet wrapper for the ``notes_enc`` column of ``vital_readings``.

    Values are JSON-encoded first, so a note round-trips as the same ``str``
    and a missing note stays missing.

    Usage::

        encryptor = FieldEncryptor(settings.encryption_key)
        token = encryptor.encrypt("post-run reading, still sweating")
        encryptor.decrypt(token)  # "post-run reading, still sweating"
        encryptor.encrypt(None)   # "" and stored as NULL
    """

    def __init__(self, key: str) -> None:
        """Bind to the ``ENCRYPTION_KEY`` the reading history was written with.

        Raises:
            EncryptionError: If the key is blank or not a Fernet key.
                ``create_service`` treats this as "no persistence".
        """
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.encode())
        except ValueError as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, data: Any) -> str:
        """Token for a note (or any JSON value); ``None`` gives ``""``.

        Raises:
            EncryptionError: If ``data`` is not JSON-serializable.
        """
        if data is None:
            return ""
        try:
            plaintext = json.dumps(data, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Encryption failed: {exc}") from exc
        return self._fernet.encrypt(plaintext).decode("utf-8")

    def decrypt(self, token: str) -> Any:
        """Note text back from a ``notes_enc`` token; ``""`` gives ``None``.

        Raises:
            EncryptionError: If the row was written under a different
                ``ENCRYPTION_KEY`` or the token was altered.
        """
        if not token:
            return None
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        return json.loads(plaintext)

    @staticmethod
    def generate_key() -> str:
        """A fresh key suitable for the ``ENCRYPTION_KEY`` setting."""
        return Fernet.generate_key().decode("utf-8")
