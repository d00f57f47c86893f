"""Asynchronous issue-tracker capability bound to one repository.

The rule engine, duplicate tracking and peer-label handling depend only on this
interface. Each call runs the blocking PyGitHub client in a worker thread so
that many issues can be processed concurrently on one event loop.
"""

import asyncio
from typing import Any

from .client import GitHubClient
from .models import GitHubIssue, RepoRef


class IssueTracker:
    """Repository-scoped async wrapper around GitHubClient."""

    def __init__(self, client: GitHubClient, repo: RepoRef):
        self.client = client
        self.repo = repo

    async def _call(self, method: str, *args: Any) -> Any:
        func = getattr(self.client, method)
        return await asyncio.to_thread(func, self.repo.owner, self.repo.name, *args)

    async def search_issues(self, query: str) -> list[GitHubIssue]:
        return await asyncio.to_thread(self.client.search_issues, query)

    async def get_issue(self, number: int) -> GitHubIssue:
        return await self._call("get_issue", number)

    async def add_labels(self, number: int, labels: list[str]) -> None:
        await self._call("add_labels", number, labels)

    async def replace_labels(self, number: int, labels: list[str]) -> None:
        await self._call("replace_labels", number, labels)

    async def remove_label(self, number: int, label: str) -> None:
        await self._call("remove_label", number, label)

    async def create_comment(self, number: int, body: str) -> None:
        await self._call("create_comment", number, body)

    async def update_state(self, number: int, state: str) -> None:
        await self._call("update_state", number, state)

    async def lock(self, number: int, reason: str) -> None:
        await self._call("lock", number, reason)

    async def unlock(self, number: int) -> None:
        await self._call("unlock", number)

    async def add_assignees(self, number: int, assignees: list[str]) -> None:
        await self._call("add_assignees", number, assignees)

    async def remove_assignees(self, number: int, assignees: list[str]) -> None:
        await self._call("remove_assignees", number, assignees)

    async def get_metadata(self, number: int, key: str) -> Any:
        return await self._call("get_metadata", number, key)

    async def set_metadata(self, number: int, key: str, value: Any) -> None:
        await self._call("set_metadata", number, key, value)

    async def get_config_text(self, path: str) -> str | None:
        return await self._call("get_config_text", path)
