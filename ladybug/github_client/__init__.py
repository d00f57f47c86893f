"""GitHub client package for API interaction."""

from .client import GitHubClient
from .models import GitHubIssue, GitHubLabel, GitHubUser, RepoRef
from .tracker import IssueTracker

__all__ = [
    "GitHubClient",
    "IssueTracker",
    "GitHubUser",
    "GitHubLabel",
    "GitHubIssue",
    "RepoRef",
]
