"""
MezmurHub CLI - server launcher and account maintenance.

Accounts are created here rather than through the web panel; ``set-admin``
grants or revokes the admin flag on an existing account.
"""

import argparse
import getpass
import sys
from typing import Optional

from loguru import logger
from rich.console import Console
from rich.table import Table

from mezmurhub.context import AppContext
from mezmurhub.core.config import ensure_directories, get_log_file_path, load_config
from mezmurhub.core.output import setup_loguru
from mezmurhub.domain.auth import AuthError, DuplicateUserError

console = Console()


def _load_context() -> AppContext:
    config = load_config()
    ensure_directories(config)
    setup_loguru(
        get_log_file_path(config),
        level=config.logging.level,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
        console_output=config.logging.console_output,
    )
    return AppContext.create(config)


def run_serve(host: Optional[str], port: Optional[int], reload: bool) -> int:
    """Run the web backend with uvicorn.

    Returns:
        Exit code (0 for success)
    """
    import uvicorn

    config = load_config()
    host = host or config.web.host
    port = port or config.web.port
    logger.info(f"Starting MezmurHub admin API on {host}:{port}")
    uvicorn.run("web.backend.main:app", host=host, port=port, reload=reload)
    return 0


def run_init_db() -> int:
    ctx = _load_context()
    console.print(
        f"[green]Catalog store ready[/green] (backend: {ctx.config.store.backend})"
    )
    return 0


def run_create_user(email: str, password: Optional[str], admin: bool) -> int:
    """Create an account, prompting for the password when not given.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    ctx = _load_context()
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            console.print("[red]Passwords do not match[/red]")
            return 1

    try:
        user = ctx.auth.create_user(email, password, is_admin=admin)
    except (AuthError, DuplicateUserError) as e:
        console.print(f"[red]{e}[/red]")
        return 1

    role = "admin" if user.is_admin else "user"
    console.print(f"[green]Created {role} {user.email}[/green] ({user.uid})")
    return 0


def run_set_admin(email: str, revoke: bool) -> int:
    ctx = _load_context()
    try:
        user = ctx.auth.set_admin(email, is_admin=not revoke)
    except AuthError as e:
        console.print(f"[red]{e}[/red]")
        return 1

    state = "is now" if user.is_admin else "is no longer"
    console.print(f"[green]{user.email} {state} an admin[/green]")
    return 0


def run_list_users() -> int:
    ctx = _load_context()
    users = ctx.auth.list_users()
    if not users:
        console.print("[yellow]No users yet. Create one with 'mezmurhub create-user'.[/yellow]")
        return 0

    table = Table(title="Users")
    table.add_column("Email")
    table.add_column("Admin", justify="center")
    table.add_column("Created")
    table.add_column("UID", style="dim")
    for user in users:
        table.add_row(
            user.email, "yes" if user.is_admin else "", user.created_at or "", user.uid
        )
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mezmurhub",
        description="MezmurHub - song and lyrics catalog admin",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the admin web API")
    serve_parser.add_argument("--host", help="Bind address (default from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default from config)")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes"
    )

    subparsers.add_parser("init-db", help="Create or migrate the catalog database")

    create_parser = subparsers.add_parser("create-user", help="Create an account")
    create_parser.add_argument("email", help="Sign-in email address")
    create_parser.add_argument(
        "--password", help="Password (prompted for when omitted)"
    )
    create_parser.add_argument(
        "--admin", action="store_true", help="Grant the admin flag"
    )

    admin_parser = subparsers.add_parser(
        "set-admin", help="Grant the admin flag to an existing account"
    )
    admin_parser.add_argument("email", help="Email of the account")
    admin_parser.add_argument(
        "--revoke", action="store_true", help="Revoke the admin flag instead"
    )

    subparsers.add_parser("list-users", help="List accounts")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the mezmurhub command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.subcommand == "serve":
        return run_serve(args.host, args.port, args.reload)
    elif args.subcommand == "init-db":
        return run_init_db()
    elif args.subcommand == "create-user":
        return run_create_user(args.email, args.password, args.admin)
    elif args.subcommand == "set-admin":
        return run_set_admin(args.email, args.revoke)
    elif args.subcommand == "list-users":
        return run_list_users()

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
