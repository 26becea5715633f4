from typing import Optional

from rich import print
from rich.prompt import Confirm, IntPrompt, Prompt

MIN_MASTER_PASSWORD_LENGTH = 8


def prompt_password(prompt: str) -> str:
    return Prompt.ask(f"[cyan]{prompt}[/cyan]", password=True)


def prompt_text(prompt: str) -> str:
    return Prompt.ask(f"[cyan]{prompt}[/cyan]", default="", show_default=False).strip()


def prompt_optional(prompt: str) -> Optional[str]:
    return prompt_text(prompt) or None


def prompt_confirm(prompt: str, default: bool = False) -> bool:
    return Confirm.ask(f"[cyan]{prompt}[/cyan]", default=default)


def prompt_new_password(prompt: str) -> str:
    while True:
        password = prompt_password(prompt)
        if len(password) < MIN_MASTER_PASSWORD_LENGTH:
            print(f"[red]Password must be at least {MIN_MASTER_PASSWORD_LENGTH} characters.[/red]")
            continue

        confirm = prompt_password("Confirm password:")
        if password != confirm:
            print("[red]Passwords do not match. Try again.[/red]")
            continue

        return password


def prompt_number(prompt: str, default: Optional[int] = None) -> Optional[int]:
    """Re-asks until the answer is an integer; blank input returns ``default``."""
    return IntPrompt.ask(f"[cyan]{prompt}[/cyan]", default=default, show_default=default is not None)
