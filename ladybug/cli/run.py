"""CLI command for the scheduled housekeeping sweep."""

import asyncio
import time
from pathlib import Path

import typer
from rich.table import Table

from ..errors import LadybugError
from ..rules.runner import RuleRunResult, run_all
from .context import build_tracker, configure_logging, console, resolve_config
from .options import (
    CONFIG_FILE_OPTION,
    CONFIG_PATH_OPTION,
    INTERVAL_OPTION,
    ORG_OPTION,
    REPO_OPTION,
    TOKEN_OPTION,
    VERBOSE_OPTION,
)


def _summary_table(results: list[RuleRunResult]) -> Table:
    table = Table(title="Scheduled tasks")
    table.add_column("Task", style="cyan")
    table.add_column("Matched")
    table.add_column("Failed")
    table.add_column("Status")
    for result in results:
        status = f"[red]skipped: {result.error}[/red]" if result.skipped else "ok"
        table.add_row(
            result.name,
            ", ".join(f"#{n}" for n in result.matched) or "-",
            ", ".join(f"#{n}" for n in result.failed) or "-",
            status,
        )
    return table


async def _sweep(tracker, config_file: Path | None, config_path: str):
    config = await resolve_config(tracker, config_file, config_path)
    return await run_all(config, tracker)


def run(
    org: str = ORG_OPTION,
    repo: str = REPO_OPTION,
    token: str | None = TOKEN_OPTION,
    config_path: str = CONFIG_PATH_OPTION,
    config_file: Path | None = CONFIG_FILE_OPTION,
    interval: int | None = INTERVAL_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Run every scheduled task once, or repeatedly with --interval.

    Configuration is re-read before each sweep, so edits to ladybug.yml apply
    from the next sweep on.

    Examples:
        # Single sweep, e.g. from cron
        ladybug run --org myorg --repo myrepo

        # Sweep every 15 minutes
        ladybug run --org myorg --repo myrepo --interval 900
    """
    configure_logging(verbose)
    tracker = build_tracker(org, repo, token)

    while True:
        try:
            results = asyncio.run(_sweep(tracker, config_file, config_path))
        except (LadybugError, ValueError) as e:
            console.print(f"❌ [red]Error: {e}[/red]")
            if interval is None:
                raise typer.Exit(1)
        except Exception as e:
            console.print(f"❌ [red]Unexpected error: {e}[/red]")
            if interval is None:
                raise typer.Exit(1)
        else:
            console.print(_summary_table(results))
            if interval is None and any(r.skipped or r.failed for r in results):
                raise typer.Exit(1)

        if interval is None:
            return
        time.sleep(interval)
