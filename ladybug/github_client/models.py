"""Pydantic models for GitHub data structures.

These models map directly to GitHub's REST API v3 response structures and to the
``issue`` object carried by issue and issue_comment webhook payloads.
API Reference: https://docs.github.com/en/rest/issues
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RepoRef(BaseModel):
    """Repository scope that every tracker call is bound to."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., description="Repository owner (user or organization)")
    name: str = Field(..., description="Repository name")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, value: str) -> "RepoRef":
        """Build a RepoRef from an ``owner/name`` string."""
        owner, sep, name = value.partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Invalid repository '{value}'. Expected owner/name")
        return cls(owner=owner, name=name)


class GitHubUser(BaseModel):
    """GitHub user model representing a user account.

    Maps to GitHub REST API User object.
    API Reference: https://docs.github.com/en/rest/users/users
    """

    login: str = Field(..., description="GitHub username/login (string)")
    id: int | None = Field(None, description="Unique user identifier (integer)")


class GitHubLabel(BaseModel):
    """GitHub label model representing repository labels.

    Maps to GitHub REST API Label object.
    API Reference: https://docs.github.com/en/rest/issues/labels
    """

    name: str = Field(..., description="Name of the label (string)")
    color: str = Field(
        "", description="Hexadecimal color code without leading # (string)"
    )
    description: str | None = Field(
        None, description="Short description of the label (string, max 100 characters)"
    )


class GitHubIssue(BaseModel):
    """GitHub issue model representing repository issues and pull requests.

    Maps to GitHub REST API Issue object. Pull requests share the same shape and
    carry a non-empty ``pull_request`` object.
    API Reference: https://docs.github.com/en/rest/issues/issues
    """

    number: int = Field(..., description="Issue number within the repository (integer)")
    title: str = Field("", description="Short description/title of the issue (string)")
    body: str | None = Field(
        None, description="Detailed description of the issue in markdown (string)"
    )
    state: str = Field(..., description="Current state: 'open', 'closed' (string)")
    labels: list[GitHubLabel] = Field(
        default_factory=list, description="Array of labels attached to the issue"
    )
    assignees: list[GitHubUser] = Field(
        default_factory=list, description="Users assigned to the issue"
    )
    user: GitHubUser | None = Field(
        None, description="Creator/author of the issue (absent for deleted accounts)"
    )
    comments: int = Field(0, description="Number of comments on the issue (integer)")
    locked: bool = Field(False, description="Whether the conversation is locked")
    created_at: datetime | None = Field(
        None, description="Timestamp of issue creation (ISO 8601)"
    )
    updated_at: datetime | None = Field(
        None, description="Timestamp of last issue update (ISO 8601)"
    )
    pull_request: dict[str, Any] | None = Field(
        None, description="Pull request links, present only for pull requests"
    )

    @property
    def label_names(self) -> list[str]:
        return [label.name for label in self.labels]

    @property
    def assignee_logins(self) -> list[str]:
        return [assignee.login for assignee in self.assignees]

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None
