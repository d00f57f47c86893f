"""Test configuration and fixtures."""

import shlex
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from ladybug.errors import ApiError
from ladybug.github_client.models import GitHubIssue, GitHubLabel, GitHubUser, RepoRef

FIXED_NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_issue(
    number: int,
    state: str = "open",
    labels: list[str] | None = None,
    assignees: list[str] | None = None,
    author: str | None = "reporter",
    body: str | None = None,
    **extra: Any,
) -> GitHubIssue:
    return GitHubIssue(
        number=number,
        title=f"Issue {number}",
        body=body,
        state=state,
        labels=[GitHubLabel(name=name) for name in labels or []],
        assignees=[GitHubUser(login=login) for login in assignees or []],
        user=GitHubUser(login=author, id=1) if author else None,
        **extra,
    )


class FakeTracker:
    """In-memory stand-in for IssueTracker.

    Holds issue state and metadata so tests can assert on end state, records
    every call, and supports a small subset of the search syntax.
    """

    def __init__(self, repo: RepoRef | None = None):
        self.repo = repo or RepoRef(owner="octo", name="widgets")
        self.issues: dict[int, GitHubIssue] = {}
        self.metadata: dict[int, dict[str, Any]] = {}
        self.comments: dict[int, list[str]] = {}
        self.lock_reasons: dict[int, str] = {}
        self.calls: list[tuple[str, int | str, dict[str, Any]]] = []
        self.failures: dict[tuple[str, int | str], Exception] = {}
        self.search_override: dict[str, list[int]] = {}
        self.config_text: str | None = None

    def add(self, issue: GitHubIssue, **metadata: Any) -> GitHubIssue:
        self.issues[issue.number] = issue
        if metadata:
            self.metadata[issue.number] = dict(metadata)
        return issue

    def fail(
        self, method: str, target: int | str, exc: Exception | None = None
    ) -> None:
        self.failures[(method, target)] = exc or ApiError("boom", status=500)

    def methods(self, number: int | None = None) -> list[str]:
        return [m for m, n, _ in self.calls if number is None or n == number]

    def _record(self, method: str, number: int, **kwargs: Any) -> None:
        self.calls.append((method, number, kwargs))
        if (method, number) in self.failures:
            raise self.failures[(method, number)]

    def _update(self, number: int, **changes: Any) -> None:
        self.issues[number] = self.issues[number].model_copy(update=changes)

    def _matches(self, issue: GitHubIssue, query: str) -> bool:
        for token in shlex.split(query):
            negate = token.startswith("-")
            key, _, value = token.lstrip("-").partition(":")
            if key in ("is", "state") and value in ("open", "closed"):
                ok = issue.state == value
            elif key == "label":
                ok = value in issue.label_names
            elif key == "no" and value == "label":
                ok = not issue.labels
            elif key == "no" and value == "assignee":
                ok = not issue.assignees
            elif key == "type" or (key == "is" and value in ("issue", "pr")):
                ok = issue.is_pull_request == (value == "pr")
            else:
                ok = True
            if ok == negate:
                return False
        return True

    async def search_issues(self, query: str) -> list[GitHubIssue]:
        self._record("search_issues", query)
        if query in self.search_override:
            return [self.issues[n] for n in self.search_override[query]]
        return [i for i in self.issues.values() if self._matches(i, query)]

    async def get_issue(self, number: int) -> GitHubIssue:
        self._record("get_issue", number)
        return self.issues[number]

    async def add_labels(self, number: int, labels: list[str]) -> None:
        self._record("add_labels", number, labels=labels)
        names = self.issues[number].label_names
        names += [label for label in labels if label not in names]
        self._update(number, labels=[GitHubLabel(name=n) for n in names])

    async def replace_labels(self, number: int, labels: list[str]) -> None:
        self._record("replace_labels", number, labels=labels)
        self._update(number, labels=[GitHubLabel(name=n) for n in labels])

    async def remove_label(self, number: int, label: str) -> None:
        self._record("remove_label", number, label=label)
        names = [n for n in self.issues[number].label_names if n != label]
        self._update(number, labels=[GitHubLabel(name=n) for n in names])

    async def create_comment(self, number: int, body: str) -> None:
        self._record("create_comment", number, body=body)
        self.comments.setdefault(number, []).append(body)

    async def update_state(self, number: int, state: str) -> None:
        self._record("update_state", number, state=state)
        self._update(number, state=state)

    async def lock(self, number: int, reason: str) -> None:
        self._record("lock", number, reason=reason)
        self.lock_reasons[number] = reason
        self._update(number, locked=True)

    async def unlock(self, number: int) -> None:
        self._record("unlock", number)
        self.lock_reasons.pop(number, None)
        self._update(number, locked=False)

    async def add_assignees(self, number: int, assignees: list[str]) -> None:
        self._record("add_assignees", number, assignees=assignees)
        logins = self.issues[number].assignee_logins
        logins += [login for login in assignees if login not in logins]
        self._update(number, assignees=[GitHubUser(login=x) for x in logins])

    async def remove_assignees(self, number: int, assignees: list[str]) -> None:
        self._record("remove_assignees", number, assignees=assignees)
        logins = [x for x in self.issues[number].assignee_logins if x not in assignees]
        self._update(number, assignees=[GitHubUser(login=x) for x in logins])

    async def get_metadata(self, number: int, key: str) -> Any:
        self._record("get_metadata", number, key=key)
        return self.metadata.get(number, {}).get(key)

    async def set_metadata(self, number: int, key: str, value: Any) -> None:
        self._record("set_metadata", number, key=key, value=value)
        stored = self.metadata.setdefault(number, {})
        if value is None:
            stored.pop(key, None)
        else:
            stored[key] = value

    async def get_config_text(self, path: str) -> str | None:
        self._record("get_config_text", path)
        return self.config_text


@pytest.fixture
def fake_tracker() -> FakeTracker:
    """Fresh in-memory tracker for octo/widgets."""
    return FakeTracker()


@pytest.fixture
def issue_factory() -> Callable[..., GitHubIssue]:
    """Factory for GitHubIssue snapshots."""
    return make_issue


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
