"""
The vault engine.

A ``Vault`` is Uninitialized (no file), Locked (file, no key) or Unlocked
(key in memory, secrets decrypted into ``data``). Every mutation writes the
whole collection back to disk before it becomes visible in memory.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from . import cipher
from .errors import (
    AlreadyExists,
    CipherError,
    DuplicateName,
    NotInitialized,
    SecretNotFound,
    SerializationError,
    VaultError,
    VaultLocked,
    WrongPassword,
)
from .kdf import DEFAULT_KDF_PARAMS, KdfParams, SecretKey, derive_key, generate_salt
from .models import (
    ApiKey,
    DbCredential,
    Entry,
    Note,
    Password,
    SecretType,
    Token,
    VaultData,
    utcnow,
)
from .storage import FORMAT_VERSION, VaultFile, load_vault_file, save_vault_file

logger = logging.getLogger(__name__)


class Vault:
    def __init__(self, path: Path | str, kdf_params: KdfParams = DEFAULT_KDF_PARAMS):
        self.path = Path(path)
        self.kdf_params = kdf_params
        self.data = VaultData()
        self._key: Optional[SecretKey] = None
        self._salt = ""
        self._created_at: Optional[datetime] = None

    def __repr__(self) -> str:
        state = "unlocked" if self.is_unlocked else "locked"
        return f"<Vault {self.path} {state}>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.lock()

    @property
    def exists(self) -> bool:
        return self.path.exists()

    @property
    def is_unlocked(self) -> bool:
        return self._key is not None and not self._key.wiped

    # ------------------ Lifecycle ------------------

    def init(self, master_password: str, force: bool = False) -> None:
        """
        Create an empty vault protected by ``master_password``.

        With ``force`` an existing vault file is overwritten, which makes its
        secrets unrecoverable even with the old password.
        """
        if not force and self.exists:
            raise AlreadyExists()

        salt = generate_salt()
        key = derive_key(master_password, salt, self.kdf_params)

        self._discard_key()
        self._key = key
        self._salt = salt
        self._created_at = utcnow()
        try:
            self._commit(VaultData())
        except VaultError:
            self._reset()
            raise

        logger.info("Initialized vault at %s", self.path)

    def init_force(self, master_password: str) -> None:
        self.init(master_password, force=True)

    def unlock(self, master_password: str) -> None:
        if not self.exists:
            raise NotInitialized()

        vault_file = load_vault_file(self.path)
        key = derive_key(master_password, vault_file.salt, self.kdf_params)

        try:
            plaintext = cipher.decrypt(key, vault_file.encrypted_data)
        except CipherError:
            key.wipe()
            logger.warning("Failed unlock attempt for %s", self.path)
            raise WrongPassword() from None

        try:
            data = VaultData.model_validate_json(plaintext)
        except ValidationError as e:
            key.wipe()
            raise SerializationError(f"Decrypted vault contents are malformed: {e}") from e

        self._discard_key()
        self._key = key
        self._salt = vault_file.salt
        self._created_at = vault_file.created_at
        self.data = data

        logger.info("Unlocked vault at %s", self.path)

    def lock(self) -> None:
        was_unlocked = self.is_unlocked
        self._reset()
        if was_unlocked:
            logger.info("Locked vault at %s", self.path)

    def save(self) -> None:
        self._persist(self.data)

    def _persist(self, data: VaultData) -> None:
        if not self.is_unlocked:
            raise VaultLocked()

        try:
            payload = data.model_dump_json().encode("utf-8")
        except PydanticSerializationError as e:
            raise SerializationError(str(e)) from e

        now = utcnow()
        vault_file = VaultFile(
            version=FORMAT_VERSION,
            salt=self._salt,
            encrypted_data=cipher.encrypt(self._key, payload),
            created_at=self._created_at or now,
            modified_at=now,
        )
        save_vault_file(self.path, vault_file)

    def _commit(self, data: VaultData) -> None:
        # memory only changes once the new collection is safely on disk
        self._persist(data)
        self.data = data

    def _discard_key(self) -> None:
        if self._key is not None:
            self._key.wipe()
        self._key = None

    def _reset(self) -> None:
        self._discard_key()
        self._salt = ""
        self._created_at = None
        self.data = VaultData()

    def _require_unlocked(self) -> None:
        if not self.is_unlocked:
            raise VaultLocked()

    # ------------------ Entries ------------------

    def add(self, entry: Entry, kind: Optional[SecretType] = None) -> Entry:
        actual = SecretType.for_entry(entry)
        if kind is not None and actual is not kind:
            raise TypeError(f"Expected a {kind} entry, got a {actual} entry")
        kind = actual
        self._require_unlocked()

        entries = self.data.collection(kind)
        if any(e.name == entry.name for e in entries):
            raise DuplicateName(entry.name)

        self._commit(self.data.with_collection(kind, [*entries, entry]))
        logger.debug("Added %s %r", kind, entry.name)
        return entry

    def get(self, kind: SecretType, id_or_name: str) -> Optional[Entry]:
        self._require_unlocked()
        idx = self.data.find(kind, id_or_name)
        if idx is None:
            return None
        return self.data.collection(kind)[idx]

    def delete(self, kind: SecretType, id_or_name: str) -> Entry:
        self._require_unlocked()
        idx = self.data.find(kind, id_or_name)
        if idx is None:
            raise SecretNotFound(id_or_name)

        entries = list(self.data.collection(kind))
        removed = entries.pop(idx)
        self._commit(self.data.with_collection(kind, entries))
        logger.debug("Deleted %s %r", kind, removed.name)
        return removed

    def entries(self, kind: SecretType) -> list[Entry]:
        self._require_unlocked()
        return list(self.data.collection(kind))

    # Passwords

    def add_password(self, password: Password) -> Password:
        return self.add(password, SecretType.PASSWORD)

    def get_password(self, id_or_name: str) -> Optional[Password]:
        return self.get(SecretType.PASSWORD, id_or_name)

    def delete_password(self, id_or_name: str) -> Password:
        return self.delete(SecretType.PASSWORD, id_or_name)

    def list_passwords(self) -> list[Password]:
        return self.entries(SecretType.PASSWORD)

    # API keys

    def add_api_key(self, api_key: ApiKey) -> ApiKey:
        return self.add(api_key, SecretType.API_KEY)

    def get_api_key(self, id_or_name: str) -> Optional[ApiKey]:
        return self.get(SecretType.API_KEY, id_or_name)

    def delete_api_key(self, id_or_name: str) -> ApiKey:
        return self.delete(SecretType.API_KEY, id_or_name)

    def list_api_keys(self) -> list[ApiKey]:
        return self.entries(SecretType.API_KEY)

    # Notes

    def add_note(self, note: Note) -> Note:
        return self.add(note, SecretType.NOTE)

    def get_note(self, id_or_name: str) -> Optional[Note]:
        return self.get(SecretType.NOTE, id_or_name)

    def delete_note(self, id_or_name: str) -> Note:
        return self.delete(SecretType.NOTE, id_or_name)

    def list_notes(self) -> list[Note]:
        return self.entries(SecretType.NOTE)

    # Database credentials

    def add_db_credential(self, cred: DbCredential) -> DbCredential:
        return self.add(cred, SecretType.DB_CREDENTIAL)

    def get_db_credential(self, id_or_name: str) -> Optional[DbCredential]:
        return self.get(SecretType.DB_CREDENTIAL, id_or_name)

    def delete_db_credential(self, id_or_name: str) -> DbCredential:
        return self.delete(SecretType.DB_CREDENTIAL, id_or_name)

    def list_db_credentials(self) -> list[DbCredential]:
        return self.entries(SecretType.DB_CREDENTIAL)

    # Tokens

    def add_token(self, token: Token) -> Token:
        return self.add(token, SecretType.TOKEN)

    def get_token(self, id_or_name: str) -> Optional[Token]:
        return self.get(SecretType.TOKEN, id_or_name)

    def delete_token(self, id_or_name: str) -> Token:
        return self.delete(SecretType.TOKEN, id_or_name)

    def list_tokens(self) -> list[Token]:
        return self.entries(SecretType.TOKEN)
