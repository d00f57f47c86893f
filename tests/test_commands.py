"""Tests for slash commands in issue comments."""

import pytest

from ladybug.commands import format_checks, handle_command, parse_command
from ladybug.config import load_config
from ladybug.rules.runner import RuleCheck

CONFIG = """
scheduled_tasks:
  unlabeled:
    if_state: open
    if_label: no
    add_labels: triage
  stale:
    if_state: closed
    comment: bye
  broken:
    if_updated: later
mark_actions:
  invalid:
    replace_labels: "Status: Invalid"
    set_state: closed
"""


@pytest.fixture
def config():
    return load_config(CONFIG)


class TestParseCommand:
    """Test command extraction from comment bodies."""

    def test_with_arguments(self) -> None:
        """Test a command with arguments."""
        command = parse_command("/mark invalid  wontfix")
        assert command.name == "mark"
        assert command.words == ["invalid", "wontfix"]

    def test_without_arguments(self) -> None:
        """Test a bare command."""
        command = parse_command("/checktask")
        assert command.name == "checktask"
        assert command.arguments == ""
        assert command.words == []

    def test_on_later_line(self) -> None:
        """Test that commands are found on any line."""
        command = parse_command("Let me check.\n/trytask stale\nthanks")
        assert command.name == "trytask"
        assert command.arguments == "stale"

    @pytest.mark.parametrize("body", [None, "", "no command here", "a /mark b"])
    def test_no_command(self, body: str | None) -> None:
        """Test bodies without a command."""
        assert parse_command(body) is None


class TestFormatChecks:
    """Test the /checktask reply."""

    def test_table(self) -> None:
        """Test found, not found and missing rows."""
        reply = format_checks(
            [
                RuleCheck(name="a", query="repo:o/r", found=True),
                RuleCheck(name="b", query="repo:o/r state:closed", found=False),
                RuleCheck(name="c"),
            ]
        )
        assert reply == (
            "| Task | Query | Found |\n"
            "| - | - | - |\n"
            "| `a` | `repo:o/r` | :heavy_check_mark: |\n"
            "| `b` | `repo:o/r state:closed` | :x: |\n"
            "| `c` | Not found in configuration | |"
        )

    def test_empty(self) -> None:
        """Test the reply when no task is configured."""
        assert format_checks([]) == "`/checktask` couldn't find any scheduled task."


class TestHandleCommand:
    """Test running commands against an issue."""

    @pytest.mark.asyncio
    async def test_checktask_replies_with_table(
        self, config, fake_tracker, issue_factory
    ) -> None:
        """Test that /checktask reports without applying actions."""
        issue = fake_tracker.add(issue_factory(3))

        reply = await handle_command(
            config, fake_tracker, issue, "/checktask unlabeled stale nope"
        )

        assert "| `unlabeled` | `repo:octo/widgets state:open no:label` |" in reply
        assert ":heavy_check_mark:" in reply
        assert "| `nope` | Not found in configuration | |" in reply
        assert fake_tracker.comments[3] == [reply]
        assert fake_tracker.issues[3].labels == []

    @pytest.mark.asyncio
    async def test_checktask_reports_invalid_rule(
        self, config, fake_tracker, issue_factory
    ) -> None:
        """Test that a malformed task shows its error instead of failing."""
        issue = fake_tracker.add(issue_factory(3))
        reply = await handle_command(config, fake_tracker, issue, "/checktask broken")
        assert "Invalid scheduled task 'broken'" in reply

    @pytest.mark.asyncio
    async def test_trytask_applies(self, config, fake_tracker, issue_factory) -> None:
        """Test that /trytask applies the task silently."""
        issue = fake_tracker.add(issue_factory(3))
        reply = await handle_command(config, fake_tracker, issue, "/trytask stale")
        assert reply is None
        assert fake_tracker.comments[3] == ["bye"]

    @pytest.mark.asyncio
    async def test_trytask_unknown(self, config, fake_tracker, issue_factory) -> None:
        """Test the reply for an unknown task."""
        issue = fake_tracker.add(issue_factory(3))
        reply = await handle_command(config, fake_tracker, issue, "/trytask nope")
        assert reply == "`/trytask` couldn't find the target scheduled task."

    @pytest.mark.asyncio
    async def test_mark_reports_unknown_keys(
        self, config, fake_tracker, issue_factory
    ) -> None:
        """Test that known marks apply and unknown ones are listed."""
        issue = fake_tracker.add(issue_factory(3, labels=["bug"]))

        reply = await handle_command(
            config, fake_tracker, issue, "/mark invalid foo bar"
        )

        assert reply == (
            "`/mark` couldn't find these keys in configuration: `foo`, `bar`"
        )
        assert fake_tracker.issues[3].label_names == ["Status: Invalid"]
        assert fake_tracker.issues[3].state == "closed"

    @pytest.mark.asyncio
    async def test_unknown_command(self, config, fake_tracker, issue_factory) -> None:
        """Test that other slash commands are ignored."""
        issue = fake_tracker.add(issue_factory(3))
        assert await handle_command(config, fake_tracker, issue, "/shrug") is None
        assert fake_tracker.calls == []

    @pytest.mark.asyncio
    async def test_mark_reports_failed_marks(
        self, config, fake_tracker, issue_factory
    ) -> None:
        """Test that API failures are replied instead of aborting the command."""
        issue = fake_tracker.add(issue_factory(3, labels=["bug"]))
        fake_tracker.fail("replace_labels", 3)

        reply = await handle_command(config, fake_tracker, issue, "/mark invalid foo")

        assert reply == (
            "`/mark` couldn't find these keys in configuration: `foo`\n"
            "`/mark` couldn't apply `invalid`: boom"
        )
        assert fake_tracker.comments[3] == [reply]
