"""Test main CLI functionality."""

from typer.testing import CliRunner

from ladybug import __version__
from ladybug.cli.main import app

runner = CliRunner(env={"NO_COLOR": "1"})


def test_version_command() -> None:
    """Test version command."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"Ladybug v{__version__}" in result.stdout


def test_help_lists_commands() -> None:
    """Test that every command is registered."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Declarative issue housekeeping" in result.stdout
    for command in [
        "run",
        "check-rule",
        "try-rule",
        "mark",
        "handle-event",
        "check-cycles",
        "version",
    ]:
        assert command in result.stdout


def test_missing_token() -> None:
    """Test that commands needing GitHub fail cleanly without a token."""
    result = runner.invoke(
        app,
        ["run", "--org", "octo", "--repo", "widgets"],
        env={"GITHUB_TOKEN": None, "LADYBUG_INTERVAL": None},
    )
    assert result.exit_code == 1
    assert "GitHub token is required" in result.stdout


def test_version_uses_shared_console() -> None:
    """Test that commands and log output share one console."""
    from ladybug.cli import context, main

    assert main.console is context.console
