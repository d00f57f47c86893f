"""Turn action sets into executors that apply their effects to one issue."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, Field

from ..config import ActionSet, RuleSet
from ..github_client.models import GitHubIssue

logger = logging.getLogger(__name__)

PLACEHOLDERS = ("${AT_AUTHOR}", "${AT_ASSIGNEE}", "${AUTHOR}", "${ASSIGNEE}")


class TrackerCall(BaseModel):
    """One attempted tracker call."""

    method: str
    args: dict[str, Any] = Field(default_factory=dict)


class ExecutionLog(BaseModel):
    """Calls an executor attempted against one issue."""

    issue_number: int
    calls: list[TrackerCall] = Field(default_factory=list)

    @property
    def methods(self) -> list[str]:
        return [call.method for call in self.calls]


Executor = Callable[[GitHubIssue], Awaitable[ExecutionLog]]


def render_comment(template: str, issue: GitHubIssue) -> str:
    """Substitute author and assignee placeholders in a comment template.

    ``${AUTHOR}`` and ``${ASSIGNEE}`` become logins, ``${AT_AUTHOR}`` and
    ``${AT_ASSIGNEE}`` become @-mentions. Multiple assignees are space-separated;
    a missing author or no assignees substitute the empty string.
    """
    authors = [issue.user.login] if issue.user else []
    assignees = issue.assignee_logins
    replacements = {
        "${AT_AUTHOR}": " ".join(f"@{login}" for login in authors),
        "${AT_ASSIGNEE}": " ".join(f"@{login}" for login in assignees),
        "${AUTHOR}": " ".join(authors),
        "${ASSIGNEE}": " ".join(assignees),
    }
    body = template
    for placeholder in PLACEHOLDERS:
        body = body.replace(placeholder, replacements[placeholder])
    return body


def labels_without(current: list[str], targets: list[str]) -> list[str]:
    """Return ``current`` minus ``targets``, without duplicates, order preserved."""
    remaining: list[str] = []
    for label in current:
        if label not in targets and label not in remaining:
            remaining.append(label)
    return remaining


def build_executor(actions: ActionSet | None, tracker) -> Executor | None:
    """Build an executor for an action set.

    The executor applies the configured effects to one issue in a fixed order:
    remove labels, add labels, replace labels, comment, set state, lock or
    unlock, remove assignees, add assignees. Every effect except the comment
    sets an absolute end state, so applying an executor twice leaves the issue
    as applying it once does. A failing call aborts the remaining effects for
    that issue.

    Args:
        actions: Validated action set, or None if it is not configured
        tracker: Repository-scoped IssueTracker

    Returns:
        Async callable taking an issue snapshot, or None if ``actions`` is None
    """
    if actions is None:
        return None

    async def execute(issue: GitHubIssue) -> ExecutionLog:
        log = ExecutionLog(issue_number=issue.number)

        async def call(method: str, **kwargs: Any) -> None:
            log.calls.append(TrackerCall(method=method, args=kwargs))
            await getattr(tracker, method)(issue.number, **kwargs)

        if actions.remove_labels:
            await call(
                "replace_labels",
                labels=labels_without(issue.label_names, actions.remove_labels),
            )
        if actions.add_labels:
            await call("add_labels", labels=list(actions.add_labels))
        if actions.replace_labels:
            await call("replace_labels", labels=list(actions.replace_labels))
        if actions.comment:
            await call("create_comment", body=render_comment(actions.comment, issue))
        if actions.set_state:
            await call("update_state", state=actions.set_state)
        if actions.set_locked is False:
            await call("unlock")
        elif actions.set_locked:
            await call("lock", reason=actions.set_locked)
        if actions.remove_assignees:
            if actions.removes_all_assignees:
                assignees = issue.assignee_logins
            else:
                assignees = list(actions.remove_assignees)
            if assignees:
                await call("remove_assignees", assignees=assignees)
        if actions.add_assignees:
            await call("add_assignees", assignees=list(actions.add_assignees))

        logger.debug(f"Applied {log.methods} to #{issue.number}")
        return log

    return execute


def build_rule_executor(rules: RuleSet, name: str, tracker) -> Executor | None:
    """Build the executor of a named scheduled task.

    Returns:
        Executor, or None when no task with this name is configured

    Raises:
        ConfigurationError: If the task exists but is malformed
    """
    rule = rules.lookup(name)
    if rule is None:
        return None
    return build_executor(rule.actions, tracker)
