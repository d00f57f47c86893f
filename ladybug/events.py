"""Route GitHub webhook events to the handlers that react to them.

Receiving the webhook (HTTP endpoint, signature verification) is left to the
hosting layer; it passes the event name and decoded JSON payload here. Events
may arrive out of order or more than once, and every handler is safe to repeat.
"""

import logging
from typing import Any

from .commands import handle_command
from .config import AppConfig
from .duplicates import chain_close, chain_reopen, handle_comment
from .github_client.models import GitHubIssue, RepoRef
from .peer_labels import remove_peer_labels

logger = logging.getLogger(__name__)


def event_key(event: str, payload: dict[str, Any]) -> str:
    """Combine an event name with the payload action, e.g. "issues.closed"."""
    if "." in event or not payload.get("action"):
        return event
    return f"{event}.{payload['action']}"


def payload_repo(payload: dict[str, Any]) -> RepoRef | None:
    """Extract the repository an event belongs to."""
    repository = payload.get("repository")
    if not repository:
        return None
    return RepoRef(owner=repository["owner"]["login"], name=repository["name"])


async def handle_event(
    event: str, payload: dict[str, Any], config: AppConfig, tracker
) -> str | None:
    """Dispatch one webhook delivery.

    Args:
        event: Event name, either "issues" / "issue_comment" with the action
            taken from the payload, or already combined like "issues.closed"
        payload: Decoded webhook payload
        config: Configuration loaded for this delivery
        tracker: IssueTracker scoped to the payload's repository

    Returns:
        The combined event key if it was handled, None if it was ignored
    """
    key = event_key(event, payload)
    if "issue" not in payload:
        logger.debug(f"Ignoring {key}: no issue in payload")
        return None
    issue = GitHubIssue.model_validate(payload["issue"])

    if key == "issues.labeled":
        await remove_peer_labels(
            config.peer_labels, tracker, issue, payload["label"]["name"]
        )
    elif key == "issues.closed":
        await chain_close(config.duplicated_issues, tracker, issue)
    elif key == "issues.reopened":
        await chain_reopen(config.duplicated_issues, tracker, issue)
    elif key in (
        "issue_comment.created",
        "issue_comment.edited",
        "issue_comment.deleted",
    ):
        action = key.split(".", 1)[1]
        body = payload["comment"].get("body")
        previous = payload.get("changes", {}).get("body", {}).get("from")
        await handle_comment(
            config.duplicated_issues, tracker, action, issue, body, previous
        )
        if action == "created":
            await handle_command(config, tracker, issue, body)
    else:
        logger.debug(f"Ignoring {key}")
        return None
    return key
