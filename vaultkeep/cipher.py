"""
AES-256-GCM over the whole payload.

A token is base64(nonce (12 bytes) + ciphertext + tag (16 bytes)), so it
carries everything but the key.
"""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import CipherError, EncryptionError
from .kdf import SecretKey

NONCE_LENGTH = 12
TAG_LENGTH = 16


def encrypt(key: SecretKey, plaintext: bytes) -> str:
    nonce = os.urandom(NONCE_LENGTH)
    try:
        ciphertext = AESGCM(key.buffer).encrypt(nonce, plaintext, None)
    except (ValueError, TypeError, OverflowError) as e:
        raise EncryptionError(str(e)) from e
    return base64.b64encode(nonce + ciphertext).decode("ascii")


def decrypt(key: SecretKey, token: str) -> bytes:
    try:
        data = base64.b64decode(token.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as e:
        raise CipherError("Malformed token") from e

    if len(data) < NONCE_LENGTH + TAG_LENGTH:
        raise CipherError("Token too short")

    # only the canonical encoding; b64decode ignores stray bits in the last character
    if base64.b64encode(data).decode("ascii") != token:
        raise CipherError("Malformed token")

    nonce, ciphertext = data[:NONCE_LENGTH], data[NONCE_LENGTH:]
    try:
        return AESGCM(key.buffer).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise CipherError("Authentication failed") from e
