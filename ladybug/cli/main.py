"""Main CLI entry point."""

import typer

from .context import console
from .events import check_cycles, handle_event_command
from .run import run
from .tasks import check_rule, mark, try_rule_command

app = typer.Typer(
    name="ladybug",
    help="Declarative issue housekeeping for GitHub repositories",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command(name="run", context_settings={"help_option_names": ["-h", "--help"]})(run)
app.command(
    name="check-rule", context_settings={"help_option_names": ["-h", "--help"]}
)(check_rule)
app.command(
    name="try-rule", context_settings={"help_option_names": ["-h", "--help"]}
)(try_rule_command)
app.command(name="mark", context_settings={"help_option_names": ["-h", "--help"]})(
    mark
)
app.command(
    name="handle-event", context_settings={"help_option_names": ["-h", "--help"]}
)(handle_event_command)
app.command(
    name="check-cycles", context_settings={"help_option_names": ["-h", "--help"]}
)(check_cycles)


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def version() -> None:
    """Show version information."""
    from ladybug import __version__

    console.print(f"Ladybug v{__version__}")


if __name__ == "__main__":
    app()
