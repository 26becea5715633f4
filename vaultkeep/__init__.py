"""
vaultkeep: a local, password-protected secret store.

One encrypted JSON file holds passwords, API keys, notes, database
credentials and tokens. Argon2id turns the master password into a key and
AES-256-GCM seals the whole collection.
"""

__version__ = "0.1.0"

from .errors import (
    AlreadyExists,
    CipherError,
    DuplicateName,
    EncryptionError,
    KdfError,
    NotInitialized,
    SecretNotFound,
    SerializationError,
    UnsupportedVersion,
    VaultError,
    VaultIOError,
    VaultLocked,
    WrongPassword,
)
from .kdf import KdfParams, SecretKey, derive_key, generate_salt
from .models import ApiKey, DbCredential, Entry, Note, Password, SecretType, Token, VaultData
from .vault import Vault

__all__ = [
    "AlreadyExists",
    "ApiKey",
    "CipherError",
    "DbCredential",
    "DuplicateName",
    "EncryptionError",
    "Entry",
    "KdfError",
    "KdfParams",
    "Note",
    "NotInitialized",
    "Password",
    "SecretKey",
    "SecretNotFound",
    "SecretType",
    "SerializationError",
    "Token",
    "UnsupportedVersion",
    "Vault",
    "VaultData",
    "VaultError",
    "VaultIOError",
    "VaultLocked",
    "WrongPassword",
    "derive_key",
    "generate_salt",
]
