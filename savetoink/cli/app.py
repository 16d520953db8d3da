"""Main CLI application."""

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .articles import articles_app
from .convert import convert_command
from .init import init_command
from .state import set_state

app = typer.Typer(
    name="savetoink",
    help="Save web articles as EPUB documents and send them to your e-reader",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        envvar="SAVETOINK_CONFIG",
        help="Path to config.yaml (default: ~/.config/savetoink/config.yaml)",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override the configured log level",
    ),
) -> None:
    """Save web articles as EPUB documents and send them to your e-reader."""
    set_state(ctx, config_path, log_level)


# Register commands
app.command("init")(init_command)
app.command("convert")(convert_command)
app.add_typer(articles_app, name="articles", help="Manage saved articles")


if __name__ == "__main__":
    app()
