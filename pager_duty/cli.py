"""CLI application and commands for pd."""

from __future__ import annotations

import json
import logging
import sys
from importlib.metadata import version
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from pager_duty.config import CONFIG_FILE, DEFAULT_LIMIT, load_config, load_timezone, load_token, save_config
from pager_duty.connection import Connection, PagerDutyError

# Key masking threshold
MIN_TOKEN_LENGTH_FOR_MASKING = 8

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        print(f"pd {version('pager-duty-connection')}")
        raise typer.Exit


app = typer.Typer(
    name="pd",
    help="Query the PagerDuty REST API.",
    no_args_is_help=True,
)


@app.callback()
def _main(
    _version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log HTTP requests.")] = False,
) -> None:
    """Query the PagerDuty REST API."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(name)s: %(message)s")


console = Console()


def _connect(token: str | None) -> Connection:
    token = token or load_token()
    if not token:
        console.print("[red]Error: No API token. Set PAGERDUTY_TOKEN or run: pd config --set-token TOKEN[/red]")
        raise typer.Exit(1)
    try:
        tz = load_timezone()
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None
    return Connection(token, timezone=tz)


def _parse_params(params: list[str] | None) -> dict[str, Any]:
    """Turn KEY=VALUE pairs into options; repeated keys become lists."""
    options: dict[str, Any] = {}
    for item in params or []:
        if "=" not in item:
            console.print(f"[red]Error: Use format KEY=VALUE, got '{item}'[/red]")
            raise typer.Exit(1)
        key, value = item.split("=", 1)
        key = key.strip()
        if key in options:
            existing = options[key]
            options[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            options[key] = value
    return options


@app.command()
def users(
    query: Annotated[str | None, typer.Option("--query", "-q", help="Filter users by name or email")] = None,
    page: Annotated[int, typer.Option("--page", "-p", help="Page number (1-based)")] = 1,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Users per page")] = DEFAULT_LIMIT,
    token: Annotated[str | None, typer.Option("--token", help="PagerDuty API token")] = None,
) -> None:
    """List users with their email addresses."""
    options: dict[str, Any] = {"page": page, "limit": limit}
    if query:
        options["query"] = query

    try:
        with _connect(token) as pd:
            response = pd.get("users", options)
    except PagerDutyError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    found = response.get("users", []) if isinstance(response, dict) else []
    logger.info("found %d user(s)", len(found))

    table = Table(title="Users")
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    for user in found:
        table.add_row(str(user.get("name", "")), str(user.get("email", "")))
    console.print(table)

    if isinstance(response, dict) and response.get("more"):
        console.print(f"[dim]More results: pd users --page {page + 1}[/dim]")


@app.command()
def get(
    path: Annotated[str, typer.Argument(help="API path, e.g. incidents or /services/PXXXXXX")],
    param: Annotated[list[str] | None, typer.Option("--param", "-P", help="Query parameter (KEY=VALUE)")] = None,
    page: Annotated[int, typer.Option("--page", "-p", help="Page number (1-based)")] = 1,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Results per page")] = DEFAULT_LIMIT,
    token: Annotated[str | None, typer.Option("--token", help="PagerDuty API token")] = None,
) -> None:
    """GET an API path and print the response as JSON."""
    options = _parse_params(param)
    options.update(page=page, limit=limit)

    try:
        with _connect(token) as pd:
            response = pd.get(path, options)
    except PagerDutyError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    console.print_json(json.dumps(response, default=str))


@app.command()
def config(
    show: Annotated[bool, typer.Option("--show", help="Show current config")] = False,
    set_token: Annotated[str | None, typer.Option("--set-token", help="Set PagerDuty API token")] = None,
    set_timezone: Annotated[
        str | None, typer.Option("--set-timezone", help="Timezone for parsed timestamps (e.g. Europe/Berlin)")
    ] = None,
) -> None:
    """Manage configuration."""
    if set_token or set_timezone:
        cfg = load_config()
        if "api" not in cfg:
            cfg["api"] = {}
        if set_token:
            cfg["api"]["token"] = set_token
        if set_timezone:
            cfg["api"]["timezone"] = set_timezone
        save_config(cfg)
        console.print(f"[green]Config saved to {CONFIG_FILE}[/green]")
        if not show:
            return

    console.print(f"[bold]Config file:[/bold] {CONFIG_FILE}")
    console.print(f"[bold]Config exists:[/bold] {CONFIG_FILE.exists()}")

    key = load_token()
    if key:
        masked = key[:4] + "..." + key[-4:] if len(key) > MIN_TOKEN_LENGTH_FOR_MASKING else "***"
        console.print(f"[bold]API token:[/bold] {masked}")
    else:
        console.print("[bold]API token:[/bold] [yellow]Not set[/yellow]")

    try:
        console.print(f"[bold]Timezone:[/bold] {load_timezone()}")
    except ValueError as e:
        console.print(f"[bold]Timezone:[/bold] [red]{e}[/red]")

    console.print()
    console.print("[dim]Set token with:    pd config --set-token YOUR_TOKEN[/dim]")
    console.print("[dim]Set timezone with: pd config --set-timezone Europe/Berlin[/dim]")


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    sys.exit(main())
