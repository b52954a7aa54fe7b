"""Tests for FieldEncryptor (Fernet encryption of reading notes)."""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from meditrack.core.storage.encryption import EncryptionError, FieldEncryptor


class TestRoundTrip:
    @pytest.mark.parametrize("data", [
        "felt dizzy after run",
        {"context": "post-meal", "minutes": 45},
        42,
        ["a", "b"],
    ])
    def test_round_trip(self, field_encryptor: FieldEncryptor, data):
        token = field_encryptor.encrypt(data)
        assert isinstance(token, str)
        assert token != ""
        assert field_encryptor.decrypt(token) == data

    def test_none_is_empty(self, field_encryptor: FieldEncryptor):
        assert field_encryptor.encrypt(None) == ""
        assert field_encryptor.decrypt("") is None

    def test_tokens_are_not_plaintext(self, field_encryptor: FieldEncryptor):
        assert "dizzy" not in field_encryptor.encrypt("felt dizzy")

    def test_unserializable_raises(self, field_encryptor: FieldEncryptor):
        with pytest.raises(EncryptionError, match="Encryption failed"):
            field_encryptor.encrypt(object())


class TestKeyValidation:
    @pytest.mark.parametrize("key", ["", "   "])
    def test_empty_key_raises(self, key):
        with pytest.raises(EncryptionError, match="must not be empty"):
            FieldEncryptor(key)

    def test_invalid_key_raises(self):
        with pytest.raises(EncryptionError, match="Invalid encryption key"):
            FieldEncryptor("not-a-valid-fernet-key")

    def test_generate_key_is_usable(self):
        FieldEncryptor(FieldEncryptor.generate_key())


class TestCorruptData:
    def test_wrong_key_cannot_decrypt(self, field_encryptor: FieldEncryptor):
        token = field_encryptor.encrypt("private note")
        other = FieldEncryptor(Fernet.generate_key().decode())
        with pytest.raises(EncryptionError, match="invalid token"):
            other.decrypt(token)

    def test_tampered_token_raises(self, field_encryptor: FieldEncryptor):
        token = field_encryptor.encrypt("private note")
        with pytest.raises(EncryptionError):
            field_encryptor.decrypt(token[:-5] + "XXXXX")
