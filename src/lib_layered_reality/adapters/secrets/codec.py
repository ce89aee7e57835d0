"""Authenticated encryption for the secrets file.

Purpose
-------
Implement the :class:`lib_layered_reality.application.ports.SecretCodec`
protocol with AES-256-GCM from ``cryptography``.

Format
------
* Keys are 64 hexadecimal characters (32 bytes), the form printed by
  :meth:`AesGcmCodec.generate_key`.
* Ciphertext is ``nonce (12 bytes) || encrypted payload || tag (16 bytes)``.

Invalid keys raise :class:`InvalidKeyError`; a wrong key or tampered content
raises :class:`DecryptionFailedError`. Neither message includes key material
or ciphertext.
"""

from __future__ import annotations

import binascii
import os
from typing import Final

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ...domain.errors import DecryptionFailedError, InvalidKeyError

_KEY_BYTES: Final[int] = 32
_NONCE_BYTES: Final[int] = 12
_TAG_BYTES: Final[int] = 16


class AesGcmCodec:
    """Encrypt and decrypt byte payloads with a hex-encoded AES-256 key.

    Examples
    --------
    >>> codec = AesGcmCodec()
    >>> key = codec.generate_key()
    >>> codec.decrypt(key, codec.encrypt(key, "pass: mellon"))
    b'pass: mellon'
    """

    def generate_key(self) -> str:
        """Return a fresh random key as 64 hex characters."""

        return AESGCM.generate_key(bit_length=_KEY_BYTES * 8).hex()

    def encrypt(self, key: str, plaintext: bytes | str) -> bytes:
        """Encrypt *plaintext* under *key* with a random nonce."""

        payload = plaintext.encode("utf-8") if isinstance(plaintext, str) else plaintext
        nonce = os.urandom(_NONCE_BYTES)
        return nonce + _cipher(key).encrypt(nonce, payload, None)

    def decrypt(self, key: str, ciphertext: bytes) -> bytes:
        """Return the plaintext of *ciphertext*, verifying its authentication tag."""

        cipher = _cipher(key)
        if len(ciphertext) < _NONCE_BYTES + _TAG_BYTES:
            raise DecryptionFailedError("ciphertext is too short")
        nonce, body = ciphertext[:_NONCE_BYTES], ciphertext[_NONCE_BYTES:]
        try:
            return cipher.decrypt(nonce, body, None)
        except InvalidTag as exc:
            raise DecryptionFailedError("authentication failed") from exc


def _cipher(key: str) -> AESGCM:
    """Build an :class:`AESGCM` instance from a hex *key*.

    Raises
    ------
    InvalidKeyError
        When *key* is not 64 hexadecimal characters.

    Examples
    --------
    >>> _cipher("")
    Traceback (most recent call last):
    ...
    lib_layered_reality.domain.errors.InvalidKeyError: Key must be 64 hexadecimal characters
    """

    message = f"Key must be {_KEY_BYTES * 2} hexadecimal characters"
    if not isinstance(key, str) or len(key) != _KEY_BYTES * 2:
        raise InvalidKeyError(message)
    try:
        raw = binascii.unhexlify(key)
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyError(message) from exc
    return AESGCM(raw)
