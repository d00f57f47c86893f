"""Shared setup for CLI commands: logging, tracker and configuration."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..config import AppConfig, fetch_config, load_config
from ..github_client.client import GitHubClient
from ..github_client.models import RepoRef
from ..github_client.tracker import IssueTracker

console = Console()


def configure_logging(verbose: bool) -> None:
    """Send log records through rich, at DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )
    # PyGitHub logs every request at DEBUG
    logging.getLogger("github").setLevel(logging.WARNING)


def build_tracker(org: str, repo: str, token: str | None = None) -> IssueTracker:
    """Create a tracker for org/repo, exiting with an error if no token is set."""
    try:
        client = GitHubClient(token)
    except ValueError as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        raise typer.Exit(1)
    return IssueTracker(client, RepoRef(owner=org, name=repo))


async def resolve_config(
    tracker: IssueTracker, config_file: Path | None, config_path: str
) -> AppConfig:
    """Load configuration from a local file if given, else from the repository."""
    if config_file is not None:
        return load_config(config_file.read_text())
    return await fetch_config(tracker, config_path)
