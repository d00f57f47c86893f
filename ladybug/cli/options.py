"""Standardized CLI option definitions for consistent shorthand mappings."""

import typer

from ..config import DEFAULT_CONFIG_PATH

ORG_OPTION = typer.Option(..., "--org", "-o", help="Repository owner")
REPO_OPTION = typer.Option(..., "--repo", "-r", help="GitHub repository name")
ORG_OPTION_OPTIONAL = typer.Option(
    None, "--org", "-o", help="Repository owner (defaults to the payload's)"
)
REPO_OPTION_OPTIONAL = typer.Option(
    None, "--repo", "-r", help="Repository name (defaults to the payload's)"
)

ISSUE_NUMBER_OPTION = typer.Option(
    ..., "--issue-number", "-i", help="Issue or pull request number"
)

TOKEN_OPTION = typer.Option(
    None, "--token", help="GitHub token (defaults to GITHUB_TOKEN env var)"
)

CONFIG_PATH_OPTION = typer.Option(
    DEFAULT_CONFIG_PATH,
    "--config-path",
    envvar="LADYBUG_CONFIG_PATH",
    help="Path of the configuration file inside the repository",
)

CONFIG_FILE_OPTION = typer.Option(
    None,
    "--config-file",
    "-c",
    help="Local configuration file to use instead of the repository's",
)

INTERVAL_OPTION = typer.Option(
    None,
    "--interval",
    envvar="LADYBUG_INTERVAL",
    help="Repeat the sweep every N seconds (runs once when omitted)",
)

VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
