"""Shared fixtures: cheap Argon2 parameters and throwaway vault paths."""

from __future__ import annotations

import pytest

from vaultkeep.kdf import KdfParams
from vaultkeep.vault import Vault

MASTER = "correct-horse"


@pytest.fixture
def fast_kdf() -> KdfParams:
    return KdfParams(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def vault_path(tmp_path):
    return tmp_path / "vault.json"


@pytest.fixture
def vault(vault_path, fast_kdf):
    """An initialized, unlocked vault."""
    v = Vault(vault_path, kdf_params=fast_kdf)
    v.init(MASTER)
    yield v
    v.lock()


@pytest.fixture
def clean_env(monkeypatch):
    for key in ["VAULTKEEP_PATH", "VAULTKEEP_LOG_LEVEL"]:
        monkeypatch.delenv(key, raising=False)
