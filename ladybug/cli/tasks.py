"""CLI commands that evaluate or apply configured tasks on a single issue."""

import asyncio
from pathlib import Path

import typer
from rich.table import Table

from ..errors import LadybugError
from ..rules.runner import apply_marks, check_rules, try_rule
from .context import build_tracker, configure_logging, console, resolve_config
from .options import (
    CONFIG_FILE_OPTION,
    CONFIG_PATH_OPTION,
    ISSUE_NUMBER_OPTION,
    ORG_OPTION,
    REPO_OPTION,
    TOKEN_OPTION,
    VERBOSE_OPTION,
)


def check_rule(
    names: list[str] | None = typer.Argument(
        None, help="Tasks to check (all scheduled tasks when omitted)"
    ),
    org: str = ORG_OPTION,
    repo: str = REPO_OPTION,
    issue_number: int = ISSUE_NUMBER_OPTION,
    token: str | None = TOKEN_OPTION,
    config_path: str = CONFIG_PATH_OPTION,
    config_file: Path | None = CONFIG_FILE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show each task's query and whether the issue currently matches it.

    Nothing is applied to the issue.
    """
    configure_logging(verbose)
    tracker = build_tracker(org, repo, token)

    async def _check():
        config = await resolve_config(tracker, config_file, config_path)
        return await check_rules(config, tracker, issue_number, names or [])

    try:
        checks = asyncio.run(_check())
    except (LadybugError, ValueError) as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not checks:
        console.print("[yellow]No scheduled tasks configured[/yellow]")
        return

    table = Table(title=f"Tasks for #{issue_number}")
    table.add_column("Task", style="cyan")
    table.add_column("Query")
    table.add_column("Found")
    for check in checks:
        if check.error:
            table.add_row(check.name, f"[red]{check.error}[/red]", "")
        elif check.missing:
            table.add_row(check.name, "[red]Not found in configuration[/red]", "")
        else:
            table.add_row(check.name, check.query, "✅" if check.found else "❌")
    console.print(table)


def try_rule_command(
    name: str = typer.Argument(..., help="Scheduled task to apply"),
    org: str = ORG_OPTION,
    repo: str = REPO_OPTION,
    issue_number: int = ISSUE_NUMBER_OPTION,
    token: str | None = TOKEN_OPTION,
    config_path: str = CONFIG_PATH_OPTION,
    config_file: Path | None = CONFIG_FILE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Apply one scheduled task's actions to an issue immediately."""
    configure_logging(verbose)
    tracker = build_tracker(org, repo, token)

    async def _try():
        config = await resolve_config(tracker, config_file, config_path)
        issue = await tracker.get_issue(issue_number)
        return await try_rule(config, tracker, issue, name)

    try:
        log = asyncio.run(_try())
    except (LadybugError, ValueError) as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        raise typer.Exit(1)

    if log is None:
        console.print(f"❌ [red]Error: task '{name}' not found in configuration[/red]")
        raise typer.Exit(1)
    calls = ", ".join(log.methods) or "nothing to do"
    console.print(f"✅ Applied '{name}' to #{issue_number}: {calls}")


def mark(
    names: list[str] = typer.Argument(..., help="Mark actions to apply"),
    org: str = ORG_OPTION,
    repo: str = REPO_OPTION,
    issue_number: int = ISSUE_NUMBER_OPTION,
    token: str | None = TOKEN_OPTION,
    config_path: str = CONFIG_PATH_OPTION,
    config_file: Path | None = CONFIG_FILE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Apply one or more mark actions to an issue."""
    configure_logging(verbose)
    tracker = build_tracker(org, repo, token)

    async def _mark():
        config = await resolve_config(tracker, config_file, config_path)
        issue = await tracker.get_issue(issue_number)
        return await apply_marks(config, tracker, issue, names)

    try:
        result = asyncio.run(_mark())
    except (LadybugError, ValueError) as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        raise typer.Exit(1)

    for name in result.applied:
        console.print(f"✅ Applied '{name}' to #{issue_number}")
    for error in result.invalid.values():
        console.print(f"❌ [red]{error}[/red]")
    for name, error in result.failed.items():
        console.print(f"❌ [red]Failed to apply '{name}': {error}[/red]")
    if result.unknown:
        console.print(
            f"❌ [red]Not found in configuration: {', '.join(result.unknown)}[/red]"
        )
    if result.unknown or result.invalid or result.failed:
        raise typer.Exit(1)
