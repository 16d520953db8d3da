"""Saved article commands."""

from contextlib import contextmanager
from typing import Callable, Generator, Optional, TypeVar

import typer
from rich.panel import Panel
from rich.table import Table

from ..errors import BackendUnavailableError, DeliveryNotRecordedError
from ..models import Article, DeliveryStatus
from ..service import ArticleService, build_service
from .state import console, get_state, report_errors

articles_app = typer.Typer(help="Manage saved articles")

T = TypeVar("T")

_STATUS_STYLES = {
    DeliveryStatus.PENDING: "yellow",
    DeliveryStatus.DELIVERING: "cyan",
    DeliveryStatus.DELIVERED: "green",
    DeliveryStatus.FAILED: "red",
}

ACCOUNT_OPTION = typer.Option(None, "--account", "-a", help="Account (default: from config)")


@contextmanager
def open_service(ctx: typer.Context) -> Generator[ArticleService, None, None]:
    """Build the service for one command and close its store afterwards."""
    service = build_service(get_state(ctx).config)
    try:
        yield service
    finally:
        service.store.close()


def resolve_account(ctx: typer.Context, account: Optional[str]) -> str:
    return account or get_state(ctx).config.config.account


def format_status(article: Article) -> str:
    style = _STATUS_STYLES.get(article.delivery_status, "white")
    return f"[{style}]{article.delivery_status.value}[/{style}]"


def record_outcome(service: ArticleService, deliver: Callable[[], T]) -> T:
    """Run a delivery, retrying once to store an outcome the store dropped."""
    try:
        return deliver()
    except DeliveryNotRecordedError as e:
        console.print("[yellow]Delivery finished but was not recorded, retrying...[/yellow]")
        try:
            recorded = service.delivery.record(e.article)
        except BackendUnavailableError:
            console.print(
                "[red]❌ Could not record the delivery outcome. Do not resend; check the store.[/red]"
            )
            raise typer.Exit(1)
        console.print(f"Recorded status: {format_status(recorded)}")
        raise typer.Exit(0)


@articles_app.command("add")
def articles_add(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Article URL"),
    account: Optional[str] = ACCOUNT_OPTION,
) -> None:
    """Save an article and deliver it when email sending is enabled."""
    account = resolve_account(ctx, account)

    with report_errors(), open_service(ctx) as service:
        console.print(f"[dim]Fetching {url}...[/dim]")
        result = record_outcome(service, lambda: service.create_article(url, account))

    article = result.article
    console.print(f"[green]✅ {result.message}[/green]")
    console.print(f"ID: {article.id}")
    console.print(f"Title: {article.title}")
    console.print(f"Status: {format_status(article)}")
    if article.delivery_error:
        console.print(f"[red]Error: {article.delivery_error}[/red]")


@articles_app.command("list")
def articles_list(
    ctx: typer.Context,
    page: int = typer.Option(1, "--page", "-p", help="Page number (1-based)"),
    page_size: Optional[int] = typer.Option(None, "--page-size", "-n", help="Articles per page"),
    account: Optional[str] = ACCOUNT_OPTION,
) -> None:
    """List saved articles, newest first."""
    account = resolve_account(ctx, account)

    with report_errors(), open_service(ctx) as service:
        result = service.list_articles(account, page, page_size)

    if not result.articles:
        console.print("[yellow]No articles found.[/yellow]")
        return

    table = Table(title=f"Articles ({result.total} total, page {result.page})")
    table.add_column("ID prefix", style="dim", no_wrap=True)
    table.add_column("Title", style="cyan")
    table.add_column("Source", style="magenta")
    table.add_column("Min", style="green", justify="right")
    table.add_column("Status")
    table.add_column("Added", style="blue")

    for article in result.articles:
        table.add_row(
            article.id[:8],
            article.title or article.url,
            article.source_domain,
            str(article.reading_time_minutes),
            format_status(article),
            f"{article.created_at:%Y-%m-%d %H:%M}" if article.created_at else "",
        )

    console.print(table)
    if result.has_more:
        console.print(f"[dim]More articles: --page {result.page + 1}[/dim]")


@articles_app.command("show")
def articles_show(
    ctx: typer.Context,
    article_id: str = typer.Argument(..., help="Article ID or a unique prefix of it"),
    content: bool = typer.Option(False, "--content", help="Print the extracted HTML body"),
    account: Optional[str] = ACCOUNT_OPTION,
) -> None:
    """Show one saved article."""
    account = resolve_account(ctx, account)

    with report_errors(), open_service(ctx) as service:
        article_id = service.resolve_article_id(account, article_id)
        article = service.get_article(account, article_id)

    details = [
        f"URL: {article.url}",
        f"Author: {article.author or '-'}",
        f"Source: {article.site_name or article.source_domain or '-'}",
        f"Words: {article.word_count} ({article.reading_time_minutes} min)",
        f"Status: {format_status(article)} (attempts: {article.delivery_attempt_count})",
    ]
    if article.delivery_error:
        details.append(f"Last error: {article.delivery_error}")
    if article.delivered_to:
        details.append(f"Delivered to: {article.delivered_to} via {article.delivered_by}")
    if article.created_at:
        details.append(f"Added: {article.created_at:%Y-%m-%d %H:%M}")

    console.print(Panel("\n".join(details), title=article.title or "Untitled", subtitle=article.id))
    if content:
        console.print(article.content, markup=False)


@articles_app.command("delete")
def articles_delete(
    ctx: typer.Context,
    article_id: str = typer.Argument(..., help="Article ID or a unique prefix of it"),
    account: Optional[str] = ACCOUNT_OPTION,
) -> None:
    """Delete one saved article."""
    account = resolve_account(ctx, account)

    with report_errors(), open_service(ctx) as service:
        article_id = service.resolve_article_id(account, article_id)
        deleted = service.delete_article(account, article_id)

    if deleted:
        console.print(f"[green]✅ Deleted article {article_id}[/green]")
    else:
        console.print(f"[yellow]No article {article_id} for account {account}[/yellow]")


@articles_app.command("purge")
def articles_purge(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    account: Optional[str] = ACCOUNT_OPTION,
) -> None:
    """Delete every saved article of the account."""
    account = resolve_account(ctx, account)

    if not yes:
        typer.confirm(f"Delete all articles of account '{account}'?", abort=True)

    with report_errors(), open_service(ctx) as service:
        deleted = service.delete_all_articles(account)

    console.print(f"[green]✅ Deleted {deleted} articles[/green]")


@articles_app.command("refresh")
def articles_refresh(
    ctx: typer.Context,
    article_id: str = typer.Argument(..., help="Article ID or a unique prefix of it"),
    account: Optional[str] = ACCOUNT_OPTION,
) -> None:
    """Re-extract a saved article, keeping its delivery history."""
    account = resolve_account(ctx, account)

    with report_errors(), open_service(ctx) as service:
        article_id = service.resolve_article_id(account, article_id)
        article = service.refresh_article(account, article_id)

    console.print(f"[green]✅ Refreshed '{article.title}' ({article.word_count} words)[/green]")


@articles_app.command("retry")
def articles_retry(
    ctx: typer.Context,
    article_id: str = typer.Argument(..., help="Article ID or a unique prefix of it"),
    subject: str = typer.Option("", "--subject", "-s", help="Custom email subject"),
    account: Optional[str] = ACCOUNT_OPTION,
) -> None:
    """Retry delivery of a pending or failed article."""
    account = resolve_account(ctx, account)

    with report_errors(), open_service(ctx) as service:
        article_id = service.resolve_article_id(account, article_id)
        article = record_outcome(
            service, lambda: service.retry_delivery(account, article_id, subject)
        )

    console.print(f"Status: {format_status(article)} (attempts: {article.delivery_attempt_count})")
    if article.delivery_status != DeliveryStatus.DELIVERED:
        console.print(f"[red]Error: {article.delivery_error}[/red]")
        raise typer.Exit(1)
