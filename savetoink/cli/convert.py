"""Convert command implementation."""

from pathlib import Path
from typing import Optional

import typer

from ..db import InMemoryArticleStore
from ..delivery import generate_filename
from ..service import build_service
from .state import console, get_state, report_errors


def convert_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Article URL"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output EPUB path (default: derived from the title)",
    ),
    send: bool = typer.Option(False, "--send", help="Email the EPUB instead of writing a file"),
    subject: str = typer.Option("", "--subject", "-s", help="Custom email subject"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show article metadata"),
) -> None:
    """Convert one article to EPUB without saving it."""
    config = get_state(ctx).config
    service = build_service(config, store=InMemoryArticleStore(config.config.storage))

    with report_errors():
        console.print(f"[dim]Fetching {url}...[/dim]")
        result = service.process(url)
        article = result.article

        if verbose:
            console.print(f"[bold]{article.title}[/bold]")
            if article.author:
                console.print(f"Author: {article.author}")
            if article.source_domain:
                console.print(f"Source: {article.source_domain}")
            console.print(f"Words: {article.word_count} ({article.reading_time_minutes} min)")

        if send:
            missing = config.missing_email_settings()
            if not service.send_enabled or missing:
                console.print("[red]❌ Email sending is not configured.[/red]")
                for setting in missing:
                    console.print(f"  missing: {setting}")
                raise typer.Exit(1)

            receipt = service.send(result, subject)
            console.print(f"[green]✅ Sent '{article.title}' to {receipt.delivered_to}[/green]")
            return

        path = service.write_to_file(result, output or Path(generate_filename(article)))
        console.print(f"[green]✅ Wrote {len(result.document)} bytes to {path}[/green]")
