"""Exception types shared across ladybug."""

from github.GithubException import GithubException


class LadybugError(Exception):
    """Base class for ladybug errors."""


class ConfigurationError(LadybugError):
    """Raised when ladybug.yml contains an unknown or malformed value."""


class ApiError(LadybugError):
    """Raised when a call to the GitHub API fails.

    Attributes:
        status: HTTP status returned by GitHub, if any
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status

    @classmethod
    def from_github(cls, exc: GithubException, context: str) -> "ApiError":
        """Wrap a PyGitHub exception with a short description of the failed call."""
        detail = exc.data.get("message") if isinstance(exc.data, dict) else None
        return cls(f"{context}: {detail or exc}", status=exc.status)
