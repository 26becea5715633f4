import builtins

import pytest

from vaultkeep import prompts


@pytest.fixture
def typed(monkeypatch):
    def _typed(*lines):
        replies = iter(lines)
        monkeypatch.setattr(builtins, "input", lambda *args: next(replies))

    return _typed


def test_number_blank_is_none(typed):
    typed("")
    assert prompts.prompt_number("Port:") is None


def test_number_blank_uses_default(typed):
    typed("")
    assert prompts.prompt_number("Port:", default=7) == 7


def test_number_asks_again_until_integer(typed, capsys):
    typed("abc", "4.5", "42")
    assert prompts.prompt_number("Port:") == 42
    assert capsys.readouterr().out.count("valid integer") == 2


def test_text_is_stripped(typed):
    typed("  mail  ")
    assert prompts.prompt_text("Name:") == "mail"


def test_optional_blank_is_none(typed):
    typed("   ")
    assert prompts.prompt_optional("URL:") is None
