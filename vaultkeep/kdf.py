"""
Master password -> 256-bit key, via Argon2id.

The salt travels as unpadded base64 text so it can sit in the vault file
next to the ciphertext.
"""

from __future__ import annotations

import base64
import binascii
import ctypes
import hmac
import os
from dataclasses import dataclass

from argon2.exceptions import Argon2Error
from argon2.low_level import Type, hash_secret_raw

from .errors import KdfError

KEY_LENGTH = 32
SALT_LENGTH = 16
MIN_SALT_LENGTH = 8


@dataclass(frozen=True)
class KdfParams:
    time_cost: int = 3
    memory_cost: int = 65536  # KiB
    parallelism: int = 1


DEFAULT_KDF_PARAMS = KdfParams()


class SecretKey:
    """
    Fixed-length symmetric key held in a mutable buffer.

    ``wipe()`` zeroes the buffer in place, so no readable copy survives a
    lock. The key refuses to be copied or pickled.
    """

    __slots__ = ("_buf", "_wiped")

    def __init__(self, material: bytes | bytearray):
        if len(material) != KEY_LENGTH:
            raise ValueError(f"Key must be {KEY_LENGTH} bytes, got {len(material)}")
        self._buf = bytearray(material)
        self._wiped = False
        if isinstance(material, bytearray):
            _zero(material)

    @property
    def buffer(self) -> bytearray:
        if self._wiped:
            raise ValueError("Key has been wiped")
        return self._buf

    @property
    def wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        if self._wiped:
            return
        _zero(self._buf)
        self._wiped = True

    def __len__(self) -> int:
        return KEY_LENGTH

    def __eq__(self, other):
        if not isinstance(other, SecretKey):
            return NotImplemented
        return hmac.compare_digest(self.buffer, other.buffer)

    __hash__ = None

    def __repr__(self) -> str:
        return f"<SecretKey wiped={self._wiped}>"

    def __copy__(self):
        raise TypeError("SecretKey cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("SecretKey cannot be copied")

    def __reduce__(self):
        raise TypeError("SecretKey cannot be pickled")

    def __del__(self):
        if getattr(self, "_buf", None) is not None:
            self.wipe()


def _zero(buf: bytearray) -> None:
    if buf:
        ctypes.memset(ctypes.addressof(ctypes.c_char.from_buffer(buf)), 0, len(buf))


def generate_salt() -> str:
    return base64.b64encode(os.urandom(SALT_LENGTH)).decode().rstrip("=")


def decode_salt(salt: str) -> bytes:
    padded = salt + "=" * (-len(salt) % 4)
    try:
        raw = base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise KdfError(f"Invalid salt encoding: {e}") from e
    if len(raw) < MIN_SALT_LENGTH:
        raise KdfError(f"Salt too short: {len(raw)} bytes")
    return raw


def derive_key(password: str, salt: str, params: KdfParams = DEFAULT_KDF_PARAMS) -> SecretKey:
    try:
        raw = hash_secret_raw(
            secret=password.encode("utf-8", "surrogatepass"),
            salt=decode_salt(salt),
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=KEY_LENGTH,
            type=Type.ID,
        )
    except Argon2Error as e:
        raise KdfError(str(e)) from e
    return SecretKey(raw)
