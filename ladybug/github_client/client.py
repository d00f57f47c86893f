"""GitHub API client using PyGitHub."""

import logging
import os

from github import Github
from github.GithubException import GithubException, UnknownObjectException
from github.Issue import Issue
from github.Label import Label
from github.NamedUser import NamedUser
from github.Repository import Repository

from ..errors import ApiError
from .metadata import read_metadata, set_metadata_value
from .models import GitHubIssue, GitHubLabel, GitHubUser

logger = logging.getLogger(__name__)


class GitHubClient:
    """Synchronous GitHub API client covering the calls ladybug makes."""

    def __init__(self, token: str | None = None):
        """Initialize GitHub client with authentication.

        Args:
            token: GitHub personal access token. If None, reads from
                GITHUB_TOKEN env var.
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise ValueError(
                "GitHub token is required. Set GITHUB_TOKEN environment variable."
            )

        self.github = Github(self.token)

    def _convert_user(self, github_user: NamedUser) -> GitHubUser:
        """Convert PyGitHub user to our model."""
        return GitHubUser(login=github_user.login, id=github_user.id)

    def _convert_label(self, github_label: Label) -> GitHubLabel:
        """Convert PyGitHub label to our model."""
        return GitHubLabel(
            name=github_label.name,
            color=github_label.color or "",
            description=github_label.description,
        )

    def _convert_issue(self, github_issue: Issue) -> GitHubIssue:
        """Convert PyGitHub issue to our model."""
        pull_request = None
        if github_issue.pull_request is not None:
            pull_request = {"html_url": github_issue.pull_request.html_url}

        return GitHubIssue(
            number=github_issue.number,
            title=github_issue.title or "",
            body=github_issue.body,
            state=github_issue.state,
            labels=[self._convert_label(label) for label in github_issue.labels],
            assignees=[self._convert_user(user) for user in github_issue.assignees],
            user=self._convert_user(github_issue.user) if github_issue.user else None,
            comments=github_issue.comments,
            locked=bool(github_issue.locked),
            created_at=github_issue.created_at,
            updated_at=github_issue.updated_at,
            pull_request=pull_request,
        )

    def get_repository(self, org: str, repo: str) -> Repository:
        """Get repository object."""
        try:
            return self.github.get_repo(f"{org}/{repo}")
        except UnknownObjectException:
            raise ValueError(f"Repository {org}/{repo} not found")

    def _get_issue(self, org: str, repo: str, issue_number: int) -> Issue:
        # lazy: the issue request below reports a missing repository too
        repository = self.github.get_repo(f"{org}/{repo}", lazy=True)
        try:
            return repository.get_issue(issue_number)
        except UnknownObjectException:
            raise ValueError(f"Issue #{issue_number} not found in {org}/{repo}")

    def get_issue(self, org: str, repo: str, issue_number: int) -> GitHubIssue:
        """Get a specific issue."""
        try:
            return self._convert_issue(self._get_issue(org, repo, issue_number))
        except GithubException as e:
            raise ApiError.from_github(e, f"Fetching issue #{issue_number}") from e

    def search_issues(self, query: str) -> list[GitHubIssue]:
        """Run a search query and return every matching issue or pull request.

        Args:
            query: Search query in GitHub's issue search syntax

        Returns:
            List of GitHubIssue objects in the order GitHub returned them
        """
        logger.debug(f"Searching with query: {query}")
        try:
            return [self._convert_issue(issue) for issue in self.github.search_issues(query)]
        except GithubException as e:
            raise ApiError.from_github(e, f"Searching '{query}'") from e

    def add_labels(
        self, org: str, repo: str, issue_number: int, labels: list[str]
    ) -> None:
        """Add labels to an issue, keeping the labels it already has."""
        try:
            self._get_issue(org, repo, issue_number).add_to_labels(*labels)
        except GithubException as e:
            raise ApiError.from_github(e, f"Adding labels to #{issue_number}") from e
        logger.debug(f"Added labels to issue #{issue_number}: {labels}")

    def replace_labels(
        self, org: str, repo: str, issue_number: int, labels: list[str]
    ) -> None:
        """Update issue labels by replacing all current labels.

        Args:
            org: Organization name
            repo: Repository name
            issue_number: Issue number
            labels: List of label names to set on the issue

        Raises:
            ValueError: If repository or issue not found
            ApiError: For other API errors
        """
        try:
            self._get_issue(org, repo, issue_number).set_labels(*labels)
        except GithubException as e:
            raise ApiError.from_github(e, f"Replacing labels on #{issue_number}") from e
        logger.debug(f"Replaced labels for issue #{issue_number}: {labels}")

    def remove_label(self, org: str, repo: str, issue_number: int, label: str) -> None:
        """Remove a single label. A label that is not attached is ignored."""
        try:
            self._get_issue(org, repo, issue_number).remove_from_labels(label)
        except UnknownObjectException:
            logger.debug(f"Label '{label}' was not attached to #{issue_number}")
        except GithubException as e:
            raise ApiError.from_github(e, f"Removing label from #{issue_number}") from e

    def create_comment(self, org: str, repo: str, issue_number: int, body: str) -> None:
        """Add a comment to an issue."""
        try:
            self._get_issue(org, repo, issue_number).create_comment(body)
        except GithubException as e:
            raise ApiError.from_github(e, f"Commenting on #{issue_number}") from e
        logger.debug(f"Added comment to issue #{issue_number}")

    def update_state(self, org: str, repo: str, issue_number: int, state: str) -> None:
        """Set an issue's state to 'open' or 'closed'."""
        try:
            self._get_issue(org, repo, issue_number).edit(state=state)
        except GithubException as e:
            raise ApiError.from_github(e, f"Setting #{issue_number} {state}") from e

    def lock(self, org: str, repo: str, issue_number: int, reason: str) -> None:
        """Lock an issue's conversation with the given reason."""
        try:
            self._get_issue(org, repo, issue_number).lock(reason)
        except GithubException as e:
            raise ApiError.from_github(e, f"Locking #{issue_number}") from e

    def unlock(self, org: str, repo: str, issue_number: int) -> None:
        """Unlock an issue's conversation."""
        try:
            self._get_issue(org, repo, issue_number).unlock()
        except GithubException as e:
            raise ApiError.from_github(e, f"Unlocking #{issue_number}") from e

    def add_assignees(
        self, org: str, repo: str, issue_number: int, assignees: list[str]
    ) -> None:
        try:
            self._get_issue(org, repo, issue_number).add_to_assignees(*assignees)
        except GithubException as e:
            raise ApiError.from_github(e, f"Assigning #{issue_number}") from e

    def remove_assignees(
        self, org: str, repo: str, issue_number: int, assignees: list[str]
    ) -> None:
        try:
            self._get_issue(org, repo, issue_number).remove_from_assignees(*assignees)
        except GithubException as e:
            raise ApiError.from_github(e, f"Unassigning #{issue_number}") from e

    def get_metadata(self, org: str, repo: str, issue_number: int, key: str):
        """Read one metadata value stored in the issue body, or None."""
        try:
            body = self._get_issue(org, repo, issue_number).body
        except GithubException as e:
            raise ApiError.from_github(e, f"Reading metadata of #{issue_number}") from e
        return read_metadata(body).get(key)

    def set_metadata(
        self, org: str, repo: str, issue_number: int, key: str, value
    ) -> None:
        """Store one metadata value in the issue body; None deletes the key."""
        try:
            issue = self._get_issue(org, repo, issue_number)
            issue.edit(body=set_metadata_value(issue.body, key, value))
        except GithubException as e:
            raise ApiError.from_github(e, f"Writing metadata of #{issue_number}") from e

    def get_config_text(self, org: str, repo: str, path: str) -> str | None:
        """Fetch a text file from the repository's default branch.

        Returns:
            File contents, or None if the file does not exist
        """
        try:
            contents = self.get_repository(org, repo).get_contents(path)
        except UnknownObjectException:
            return None
        except GithubException as e:
            raise ApiError.from_github(e, f"Fetching {path}") from e
        if isinstance(contents, list):
            raise ApiError(f"{path} is a directory, expected a file")
        return contents.decoded_content.decode("utf-8")
