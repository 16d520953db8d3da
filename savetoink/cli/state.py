"""Shared CLI state: config loading and error reporting."""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

import psycopg
import typer
from rich.console import Console
from rich.markup import escape

from ..config import Config
from ..errors import NotFoundError, SaveToInkError
from ..logging_utils import setup_logging

console = Console()


class CLIState:
    """Options given before the subcommand."""

    def __init__(self, config_path: Optional[Path] = None, log_level: Optional[str] = None) -> None:
        self.config_path = config_path
        self.log_level = log_level
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        """Load the configuration once and set up logging from it."""
        if self._config is None:
            config = Config(self.config_path)
            try:
                level = config.config.logging.level
            except FileNotFoundError:
                console.print(f"[red]Config file not found: {config.config_path}[/red]")
                console.print("Run [bold]savetoink init[/bold] first.")
                raise typer.Exit(1)
            except ValueError as e:
                console.print(f"[red]❌ {e}[/red]")
                raise typer.Exit(1)
            setup_logging(self.log_level or level)
            self._config = config
        return self._config


def set_state(ctx: typer.Context, config_path: Optional[Path], log_level: Optional[str]) -> None:
    ctx.obj = CLIState(config_path, log_level)


def get_state(ctx: typer.Context) -> CLIState:
    if not isinstance(ctx.obj, CLIState):
        ctx.obj = CLIState()
    return ctx.obj


@contextmanager
def report_errors() -> Generator[None, None, None]:
    """Print savetoink errors and exit with status 1."""
    try:
        yield
    except NotFoundError as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(1)
    except SaveToInkError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)
    except psycopg.Error as e:
        console.print(f"[red]❌ Database error: {escape(str(e))}[/red]")
        console.print("Check the database and run [bold]savetoink init[/bold] if the schema is missing.")
        raise typer.Exit(1)
