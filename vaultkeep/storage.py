"""
On-disk envelope: version, salt, encrypted payload and timestamps, as JSON.
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import SerializationError, UnsupportedVersion, VaultIOError
from .models import as_utc

FORMAT_VERSION = 1


class VaultFile(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    version: int
    salt: str
    encrypted_data: str
    created_at: datetime
    modified_at: datetime

    @field_validator("created_at", "modified_at", mode="before")
    @classmethod
    def parse_timestamp(cls, value):
        # strict mode refuses strings for datetimes; the file stores ISO-8601 text
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value)
            except ValueError as e:
                raise ValueError(f"invalid timestamp: {value!r}") from e
        return value

    @field_validator("created_at", "modified_at")
    @classmethod
    def assume_utc(cls, value):
        return as_utc(value)


# ------------------ Codec ------------------

def dumps_vault_file(vault_file: VaultFile) -> str:
    return vault_file.model_dump_json(indent=2)


def loads_vault_file(text: str | bytes) -> VaultFile:
    try:
        raw = json.loads(text)
    except (ValueError, UnicodeDecodeError) as e:
        raise SerializationError(f"Vault file is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise SerializationError("Vault file must contain a JSON object")

    # check the version before the other fields so an unknown format fails fast
    version = raw.get("version")
    if version is None:
        raise SerializationError("Vault file has no version")
    if type(version) is not int or version != FORMAT_VERSION:
        raise UnsupportedVersion(version)

    try:
        return VaultFile.model_validate(raw)
    except ValidationError as e:
        raise SerializationError(f"Malformed vault file: {e}") from e


# ------------------ Files ------------------

def load_vault_file(path: Path) -> VaultFile:
    try:
        text = Path(path).read_bytes()
    except OSError as e:
        raise VaultIOError(f"Could not read vault file {path}: {e}") from e
    return loads_vault_file(text)


def save_vault_file(path: Path, vault_file: VaultFile) -> None:
    """Write the envelope atomically: temp file, fsync, then rename over ``path``."""
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    data = dumps_vault_file(vault_file).encode("utf-8")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise VaultIOError(f"Could not write vault file {path}: {e}") from e
