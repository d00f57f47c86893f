"""Slash commands posted as issue comments.

A command is a comment line of the form ``/<name> <arguments>``:

- ``/checktask [task ...]`` reports each task's query and whether this issue
  matches it, without applying anything. No names checks every task.
- ``/trytask <task>`` applies one task's actions to this issue immediately.
- ``/mark <action> [action ...]`` applies named mark actions to this issue.
"""

import logging
import re

from pydantic import BaseModel

from .config import AppConfig
from .errors import ConfigurationError
from .github_client.models import GitHubIssue
from .rules.runner import RuleCheck, apply_marks, check_rules, try_rule

logger = logging.getLogger(__name__)

COMMAND_PATTERN = re.compile(r"^/(\w+)\b *(.*)?$", re.MULTILINE)


class Command(BaseModel):
    name: str
    arguments: str = ""

    @property
    def words(self) -> list[str]:
        return self.arguments.split()


def parse_command(body: str | None) -> Command | None:
    """Return the first slash command in a comment body, if any."""
    if not body:
        return None
    match = COMMAND_PATTERN.search(body)
    if not match:
        return None
    return Command(name=match.group(1), arguments=(match.group(2) or "").strip())


def format_checks(checks: list[RuleCheck]) -> str:
    """Render /checktask results as a markdown table."""
    if not checks:
        return "`/checktask` couldn't find any scheduled task."
    rows = []
    for check in checks:
        if check.error:
            rows.append(f"| `{check.name}` | {check.error} | |")
        elif check.missing:
            rows.append(f"| `{check.name}` | Not found in configuration | |")
        else:
            mark = ":heavy_check_mark:" if check.found else ":x:"
            rows.append(f"| `{check.name}` | `{check.query}` | {mark} |")
    return "| Task | Query | Found |\n| - | - | - |\n" + "\n".join(rows)


async def handle_command(
    config: AppConfig, tracker, issue: GitHubIssue, body: str | None
) -> str | None:
    """Run the slash command in ``body`` against ``issue``.

    Returns:
        The reply posted on the issue, or None if no reply was needed
    """
    command = parse_command(body)
    if command is None:
        return None

    reply = None
    if command.name == "checktask":
        checks = await check_rules(config, tracker, issue.number, command.words)
        reply = format_checks(checks)
    elif command.name == "trytask":
        try:
            log = await try_rule(config, tracker, issue, command.arguments)
        except ConfigurationError as e:
            reply = f"`/trytask` couldn't use the target scheduled task: {e}"
        else:
            if log is None:
                reply = "`/trytask` couldn't find the target scheduled task."
    elif command.name == "mark":
        result = await apply_marks(config, tracker, issue, command.words)
        problems = []
        if result.unknown:
            keys = ", ".join(f"`{name}`" for name in result.unknown)
            problems.append(f"`/mark` couldn't find these keys in configuration: {keys}")
        for name, error in result.invalid.items():
            problems.append(f"`/mark` couldn't use `{name}`: {error}")
        for name, error in result.failed.items():
            problems.append(f"`/mark` couldn't apply `{name}`: {error}")
        if problems:
            reply = "\n".join(problems)
    else:
        logger.debug(f"Ignoring unknown command /{command.name}")
        return None

    if reply:
        await tracker.create_comment(issue.number, reply)
    return reply
