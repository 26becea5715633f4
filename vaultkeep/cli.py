import argparse
import shlex
from datetime import datetime
from typing import Optional

from rich import print
from rich.markup import escape
from rich.table import Table

from . import __version__, generators, prompts
from .config import configure_logging, resolve_vault_path
from .errors import VaultError
from .models import ApiKey, DbCredential, Entry, Note, Password, SecretType, Token, as_utc
from .vault import Vault

SECRET_FIELDS = {"password", "key", "token", "content"}
MASK = "********"
TYPE_CHOICES = [kind.value for kind in SecretType]

# ------------------ Helpers ------------------

def open_vault(args) -> Vault:
    return Vault(resolve_vault_path(args.vault))


def unlock(vault: Vault) -> Vault:
    vault.unlock(prompts.prompt_password("Master password:"))
    return vault


def _prompt_port() -> Optional[int]:
    while True:
        port = prompts.prompt_number("Port (blank for default):")
        if port is None or 0 <= port <= 65535:
            return port
        print("[red]Invalid port[/red]")


def _prompt_expiry() -> Optional[datetime]:
    while True:
        value = prompts.prompt_optional("Expires at (ISO-8601, blank for never):")
        if value is None:
            return None
        try:
            return as_utc(datetime.fromisoformat(value))
        except ValueError:
            print("[red]Invalid date, expected e.g. 2030-01-31T12:00:00[/red]")


def _secret_value(label: str, generate: bool, generator) -> str:
    if generate or prompts.prompt_confirm(f"Generate {label}?", default=False):
        value = generator()
        print(f"[green]Generated {label}:[/green] {escape(value)}")
        return value
    return prompts.prompt_password(f"{label.capitalize()}:")


def build_entry(kind: SecretType, generate: bool = False) -> Entry:
    name = prompts.prompt_text("Name:")
    while not name:
        print("[red]Name is required[/red]")
        name = prompts.prompt_text("Name:")

    if kind is SecretType.PASSWORD:
        return Password(
            name=name,
            username=prompts.prompt_optional("Username:"),
            password=_secret_value("password", generate, generators.generate_password),
            url=prompts.prompt_optional("URL:"),
            description=prompts.prompt_optional("Description:"),
        )
    if kind is SecretType.API_KEY:
        return ApiKey(
            name=name,
            key=_secret_value("key", generate, generators.generate_api_key),
            service=prompts.prompt_optional("Service:"),
            description=prompts.prompt_optional("Description:"),
        )
    if kind is SecretType.NOTE:
        return Note(name=name, content=prompts.prompt_text("Content:"))
    if kind is SecretType.DB_CREDENTIAL:
        return DbCredential(
            name=name,
            db_type=prompts.prompt_optional("Database type (postgres, mysql, mongodb, ...):"),
            host=prompts.prompt_text("Host:"),
            port=_prompt_port(),
            database=prompts.prompt_text("Database:"),
            username=prompts.prompt_text("Username:"),
            password=prompts.prompt_password("Password:"),
            description=prompts.prompt_optional("Description:"),
        )
    return Token(
        name=name,
        token=_secret_value("token", generate, generators.generate_jwt_secret),
        token_type=prompts.prompt_optional("Token type (jwt, oauth, bearer, ...):"),
        expires_at=_prompt_expiry(),
        description=prompts.prompt_optional("Description:"),
    )


def render_entry(entry: Entry, show: bool = False) -> Table:
    table = Table(title=f"{SecretType.for_entry(entry)}: {escape(entry.name)}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for field, value in entry.model_dump().items():
        if value is None:
            continue
        if field in SECRET_FIELDS and not show:
            value = MASK
        table.add_row(field, escape(str(value)))

    if isinstance(entry, DbCredential):
        conn = entry.connection_string()
        if not show:
            conn = conn.replace(f":{entry.password}@", f":{MASK}@", 1)
        table.add_row("connection_string", escape(conn))
    if isinstance(entry, Token):
        table.add_row("expired", "[red]yes[/red]" if entry.is_expired() else "no")
    return table


def render_list(vault: Vault, kinds) -> Table:
    table = Table(title=str(vault.path))
    table.add_column("Type", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Summary")
    table.add_column("Created")

    for kind in kinds:
        for entry in vault.entries(kind):
            table.add_row(
                str(kind),
                entry.id,
                escape(entry.summary()),
                entry.created_at.strftime("%Y-%m-%d %H:%M"),
            )
    return table


def _kinds(type_name: Optional[str]):
    return [SecretType(type_name)] if type_name else list(SecretType)

# ------------------ Commands ------------------

def cmd_init(args) -> int:
    vault = open_vault(args)
    if vault.exists:
        if not args.force:
            print("[red]Vault already exists. Use --force to reinitialize.[/red]")
            return 1
        print("[yellow]This permanently destroys the existing vault and every secret in it.[/yellow]")
        if not args.yes and not prompts.prompt_confirm("Overwrite the existing vault?", default=False):
            print("Aborted")
            return 1

    password = prompts.prompt_new_password("Create master password:")
    vault.init(password, force=args.force)
    vault.lock()
    print(f"[green]Vault initialized at {vault.path}[/green]")
    return 0


def cmd_add(args) -> int:
    kind = SecretType(args.type)
    with unlock(open_vault(args)) as vault:
        entry = vault.add(build_entry(kind, generate=args.generate), kind)
    print(f"[green]Added {kind} '{escape(entry.name)}'[/green] ({entry.id})")
    return 0


def cmd_get(args) -> int:
    kind = SecretType(args.type)
    with unlock(open_vault(args)) as vault:
        entry = vault.get(kind, args.id_or_name)
        if entry is None:
            print(f"[red]No {kind} named '{escape(args.id_or_name)}'[/red]")
            return 1
        print(render_entry(entry, show=args.show))
    return 0


def cmd_list(args) -> int:
    with unlock(open_vault(args)) as vault:
        if vault.data.is_empty():
            print("[yellow]Vault is empty[/yellow]")
            return 0
        print(render_list(vault, _kinds(args.type)))
    return 0


def cmd_delete(args) -> int:
    kind = SecretType(args.type)
    with unlock(open_vault(args)) as vault:
        if not args.yes and not prompts.prompt_confirm(f"Delete {kind} '{args.id_or_name}'?", default=False):
            print("Aborted")
            return 1
        removed = vault.delete(kind, args.id_or_name)
    print(f"[green]Deleted {kind} '{escape(removed.name)}'[/green]")
    return 0


def cmd_generate(args) -> int:
    if args.length is not None and args.what not in ("password", "key"):
        print(f"[red]--length does not apply to {args.what}; it has a fixed size[/red]")
        return 2
    if args.what == "password":
        value = generators.generate_password(24 if args.length is None else args.length, not args.no_symbols)
    elif args.what == "key":
        value = generators.generate_random_key(32 if args.length is None else args.length)
    elif args.what == "jwt":
        value = generators.generate_jwt_secret()
    else:
        value = generators.generate_api_key()
    print(escape(value))
    return 0


SHELL_HELP = "Commands: list [type], get <type> <id|name>, delete <type> <id|name>, genpass, help, exit"


def cmd_shell(args) -> int:
    with unlock(open_vault(args)) as vault:
        print("[green]Vault unlocked![/green] Type 'help' for commands.")
        while True:
            try:
                line = prompts.prompt_text("vault>")
            except EOFError:
                break
            try:
                words = shlex.split(line)
            except ValueError as e:
                print(f"[red]{escape(str(e))}[/red]")
                continue
            if not words:
                continue

            cmd, rest = words[0].lower(), words[1:]
            if cmd in ("exit", "quit"):
                break
            try:
                run_shell_command(vault, cmd, rest)
            except VaultError as e:
                print(f"[red]{escape(str(e))}[/red]")
    print("[green]Goodbye![/green]")
    return 0


def run_shell_command(vault: Vault, cmd: str, rest: list) -> None:
    if cmd == "help":
        print(escape(SHELL_HELP))
    elif cmd == "list":
        if rest and rest[0] not in TYPE_CHOICES:
            print(f"[red]Unknown type '{escape(rest[0])}'[/red]")
            return
        print(render_list(vault, _kinds(rest[0] if rest else None)))
    elif cmd in ("get", "delete") and len(rest) == 2 and rest[0] in TYPE_CHOICES:
        kind = SecretType(rest[0])
        if cmd == "get":
            entry = vault.get(kind, rest[1])
            if entry is None:
                print("[red]Entry not found[/red]")
            else:
                print(render_entry(entry))
        else:
            removed = vault.delete(kind, rest[1])
            print(f"[green]Deleted {kind} '{escape(removed.name)}'[/green]")
    elif cmd == "genpass":
        print(escape(generators.generate_password()))
    else:
        print("[red]Unknown command[/red]")

# ------------------ CLI ------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vaultkeep", description="Local encrypted secret vault")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--vault", metavar="PATH", help="vault file (default: $VAULTKEEP_PATH or ~/.vaultkeep/vault.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="create a new vault")
    p.add_argument("--force", action="store_true", help="overwrite an existing vault")
    p.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("add", help="add a secret")
    p.add_argument("type", choices=TYPE_CHOICES)
    p.add_argument("-g", "--generate", action="store_true", help="generate the secret value")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("get", help="show a secret")
    p.add_argument("type", choices=TYPE_CHOICES)
    p.add_argument("id_or_name")
    p.add_argument("-s", "--show", action="store_true", help="reveal secret values")
    p.set_defaults(func=cmd_get)

    p = sub.add_parser("list", help="list secrets")
    p.add_argument("type", nargs="?", choices=TYPE_CHOICES)
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("delete", help="delete a secret")
    p.add_argument("type", choices=TYPE_CHOICES)
    p.add_argument("id_or_name")
    p.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("generate", help="generate a random secret")
    p.add_argument("what", choices=["password", "key", "jwt", "api-key"])
    p.add_argument("-l", "--length", type=int, help="password or key only")
    p.add_argument("--no-symbols", action="store_true")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("shell", help="interactive session")
    p.set_defaults(func=cmd_shell)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)

    try:
        return args.func(args)
    except VaultError as e:
        print(f"[red]{escape(str(e))}[/red]")
        return 1
    except ValueError as e:
        print(f"[red]{escape(str(e))}[/red]")
        return 1
    except KeyboardInterrupt:
        print("\n[red]Interrupted[/red]")
        return 130
