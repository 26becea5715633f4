import logging
from pathlib import Path

from vaultkeep.config import DEFAULT_VAULT_PATH, configure_logging, resolve_vault_path


def test_default_path(clean_env):
    assert resolve_vault_path() == DEFAULT_VAULT_PATH.expanduser()


def test_env_overrides_default(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv("VAULTKEEP_PATH", str(tmp_path / "env.json"))
    assert resolve_vault_path() == tmp_path / "env.json"


def test_explicit_overrides_env(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv("VAULTKEEP_PATH", str(tmp_path / "env.json"))
    assert resolve_vault_path(tmp_path / "flag.json") == tmp_path / "flag.json"


def test_tilde_expanded(clean_env):
    assert resolve_vault_path("~/v.json") == Path.home() / "v.json"


def test_log_level_from_env(clean_env, monkeypatch):
    monkeypatch.setenv("VAULTKEEP_LOG_LEVEL", "info")
    configure_logging()
    assert logging.getLogger().level == logging.INFO


def test_bad_log_level_falls_back(clean_env):
    configure_logging("chatty")
    assert logging.getLogger().level == logging.WARNING
