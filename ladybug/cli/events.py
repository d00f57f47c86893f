"""CLI commands for webhook payloads and duplicate diagnostics."""

import asyncio
import json
from pathlib import Path

import typer

from ..duplicates import collect_duplicate_edges, find_duplicate_cycles
from ..errors import LadybugError
from ..events import handle_event, payload_repo
from .context import build_tracker, configure_logging, console, resolve_config
from .options import (
    CONFIG_FILE_OPTION,
    CONFIG_PATH_OPTION,
    ORG_OPTION,
    ORG_OPTION_OPTIONAL,
    REPO_OPTION,
    REPO_OPTION_OPTIONAL,
    TOKEN_OPTION,
    VERBOSE_OPTION,
)


def handle_event_command(
    event: str = typer.Option(
        ..., "--event", "-e", help="Event name, e.g. 'issues' or 'issues.closed'"
    ),
    payload_file: Path = typer.Option(
        ..., "--payload", "-p", help="JSON file holding the webhook payload"
    ),
    org: str | None = ORG_OPTION_OPTIONAL,
    repo: str | None = REPO_OPTION_OPTIONAL,
    token: str | None = TOKEN_OPTION,
    config_path: str = CONFIG_PATH_OPTION,
    config_file: Path | None = CONFIG_FILE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Handle one webhook delivery read from a file.

    Examples:
        ladybug handle-event --event issue_comment --payload delivery.json
        ladybug handle-event --event issues.closed --payload closed.json
    """
    configure_logging(verbose)
    try:
        payload = json.loads(payload_file.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"❌ [red]Error: cannot read payload: {e}[/red]")
        raise typer.Exit(1)

    scope = payload_repo(payload)
    owner = org or (scope.owner if scope else None)
    name = repo or (scope.name if scope else None)
    if not owner or not name:
        console.print(
            "❌ [red]Error: --org and --repo are required when the payload "
            "has no repository[/red]"
        )
        raise typer.Exit(1)
    tracker = build_tracker(owner, name, token)

    async def _handle():
        config = await resolve_config(tracker, config_file, config_path)
        return await handle_event(event, payload, config, tracker)

    try:
        handled = asyncio.run(_handle())
    except (LadybugError, ValueError) as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        raise typer.Exit(1)

    if handled:
        console.print(f"✅ Handled {handled}")
    else:
        console.print(f"[yellow]Ignored {event}[/yellow]")


def check_cycles(
    org: str = ORG_OPTION,
    repo: str = REPO_OPTION,
    token: str | None = TOKEN_OPTION,
    config_path: str = CONFIG_PATH_OPTION,
    config_file: Path | None = CONFIG_FILE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Report duplicate relations that form cycles.

    Cycles are not prevented when issues are marked, and closing one issue of
    a cycle can close and reopen the others in turn. This only reports them.
    """
    configure_logging(verbose)
    tracker = build_tracker(org, repo, token)

    async def _collect():
        config = await resolve_config(tracker, config_file, config_path)
        if config.duplicated_issues is None:
            return None
        return await collect_duplicate_edges(config.duplicated_issues, tracker)

    try:
        edges = asyncio.run(_collect())
    except (LadybugError, ValueError) as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        raise typer.Exit(1)

    if edges is None:
        console.print("[yellow]Duplicate tracking is disabled[/yellow]")
        return

    cycles = find_duplicate_cycles(edges)
    if not cycles:
        console.print(f"✅ No cycles among {len(edges)} duplicate relations")
        return
    for cycle in cycles:
        chain = " → ".join(f"#{n}" for n in cycle + cycle[:1])
        console.print(f"⚠️  [yellow]Duplicate cycle: {chain}[/yellow]")
    raise typer.Exit(1)
