"""Init command implementation."""

from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel

from ..config import Config, ConfigModel, save_config
from ..db import init_database, validate_connection
from .state import console, get_state


def init_command(
    ctx: typer.Context,
    account: str = typer.Option("savetoink", "--account", "-a", help="Account the CLI saves articles under"),
    backend: str = typer.Option("postgres", "--backend", help="Store backend (postgres, memory)"),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("savetoink", "--db-name", help="Database name"),
    db_user: str = typer.Option("savetoink", "--db-user", help="Database user"),
    destination_email: Optional[str] = typer.Option(
        None,
        "--destination-email",
        help="E-reader email address; enables sending when given with --sender-email",
    ),
    sender_email: Optional[str] = typer.Option(None, "--sender-email", help="From address"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Write the configuration file and create the article table."""
    console.print(Panel.fit("📚 savetoink - Initialization", style="bold blue"))

    config_path = Config(get_state(ctx).config_path).config_path
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists: {config_path} (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)

    config = ConfigModel(
        account=account,
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "SAVETOINK_DB_PASSWORD",
        },
        storage={"backend": backend},
        email={
            "enabled": bool(destination_email and sender_email),
            "sender_email": sender_email,
            "destination_email": destination_email,
        },
    )

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    if backend == "postgres":
        _init_postgres(Config(config_path, model=config), config_path)
    else:
        console.print(f"[dim]Backend '{backend}' needs no schema[/dim]")

    console.print(
        Panel(
            f"[green]✅ savetoink initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n\n"
            f"Next steps:\n"
            f"1. Set Mailjet credentials: [bold]export MAILJET_API_KEY=... MAILJET_API_SECRET=...[/bold]\n"
            f"2. Run: [bold]savetoink articles add https://example.com/post[/bold]",
            style="green",
        )
    )


def _init_postgres(config: Config, config_path: Path) -> None:
    console.print("\n[bold]Testing database connection...[/bold]")
    db_config = config.get_db_config()

    if not validate_connection(db_config):
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export SAVETOINK_DB_PASSWORD=your_password[/bold]\n"
            f"Re-run with [bold]--force[/bold] after fixing {config_path}."
        )
        raise typer.Exit(1)

    console.print("✅ Database connection successful")

    console.print("\n[bold]Initializing database schema...[/bold]")
    try:
        init_database(db_config, config.config.storage.table_name)
        console.print("✅ Database schema initialized")
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)
