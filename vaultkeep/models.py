from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


DEFAULT_PORTS = {
    "postgres": 5432,
    "postgresql": 5432,
    "mysql": 3306,
    "mongodb": 27017,
}


class Entry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def default_updated_at(self):
        # updated_at starts equal to created_at and is not refreshed afterwards
        if self.updated_at is None:
            object.__setattr__(self, "updated_at", self.created_at)
        return self

    def summary(self) -> str:
        return self.name


class Password(Entry):
    password: str
    username: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None

    def summary(self) -> str:
        parts = [self.name]
        if self.username:
            parts.append(self.username)
        if self.url:
            parts.append(self.url)
        return " | ".join(parts)


class ApiKey(Entry):
    key: str
    service: Optional[str] = None
    description: Optional[str] = None

    def summary(self) -> str:
        return f"{self.name} ({self.service})" if self.service else self.name


class Note(Entry):
    content: str

    def summary(self) -> str:
        lines = self.content.splitlines()
        first = lines[0] if lines else ""
        if len(first) > 40:
            first = first[:37] + "..."
        return f"{self.name}: {first}" if first else self.name


class DbCredential(Entry):
    host: str
    port: Optional[int] = Field(default=None, ge=0, le=65535)
    database: str
    username: str
    password: str
    db_type: Optional[str] = None
    description: Optional[str] = None

    def connection_string(self) -> str:
        db_type = self.db_type or "postgres"
        port = self.port if self.port is not None else DEFAULT_PORTS.get(db_type, 5432)
        scheme = "mongodb" if db_type == "mongodb" else db_type
        return f"{scheme}://{self.username}:{self.password}@{self.host}:{port}/{self.database}"

    def summary(self) -> str:
        return f"{self.name} ({self.db_type or 'postgres'} @ {self.host})"


class Token(Entry):
    token: str
    token_type: Optional[str] = None
    expires_at: Optional[datetime] = None
    description: Optional[str] = None

    @field_validator("expires_at")
    @classmethod
    def expiry_assume_utc(cls, value):
        return as_utc(value)

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < utcnow()

    def summary(self) -> str:
        label = f"{self.name} ({self.token_type})" if self.token_type else self.name
        if self.is_expired():
            label += " [expired]"
        return label


class SecretType(str, Enum):
    PASSWORD = "password"
    API_KEY = "api-key"
    NOTE = "note"
    DB_CREDENTIAL = "db-credential"
    TOKEN = "token"

    def __str__(self) -> str:
        return self.value

    def __format__(self, spec: str) -> str:
        return format(self.value, spec)

    @property
    def model(self) -> type[Entry]:
        return _MODELS[self]

    @property
    def attr(self) -> str:
        return _ATTRS[self]

    @classmethod
    def for_entry(cls, entry: Entry) -> SecretType:
        for kind, model in _MODELS.items():
            if type(entry) is model:
                return kind
        raise TypeError(f"Not a vault entry: {type(entry).__name__}")


_MODELS = {
    SecretType.PASSWORD: Password,
    SecretType.API_KEY: ApiKey,
    SecretType.NOTE: Note,
    SecretType.DB_CREDENTIAL: DbCredential,
    SecretType.TOKEN: Token,
}

_ATTRS = {
    SecretType.PASSWORD: "passwords",
    SecretType.API_KEY: "api_keys",
    SecretType.NOTE: "notes",
    SecretType.DB_CREDENTIAL: "db_credentials",
    SecretType.TOKEN: "tokens",
}


class VaultData(BaseModel):
    """The decrypted payload: one insertion-ordered list per secret kind."""

    passwords: list[Password] = Field(default_factory=list)
    api_keys: list[ApiKey] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)
    db_credentials: list[DbCredential] = Field(default_factory=list)
    tokens: list[Token] = Field(default_factory=list)

    def collection(self, kind: SecretType) -> list:
        return getattr(self, kind.attr)

    def find(self, kind: SecretType, id_or_name: str) -> Optional[int]:
        """Index of the first entry matching by id, else by name."""
        entries = self.collection(kind)
        for i, entry in enumerate(entries):
            if entry.id == id_or_name:
                return i
        for i, entry in enumerate(entries):
            if entry.name == id_or_name:
                return i
        return None

    def with_collection(self, kind: SecretType, entries: list) -> VaultData:
        return self.model_copy(update={kind.attr: entries})

    def counts(self) -> dict[SecretType, int]:
        return {kind: len(self.collection(kind)) for kind in SecretType}

    def is_empty(self) -> bool:
        return not any(self.counts().values())
