"""Keep at most one label per namespace prefix such as "Status:"."""

import logging
import re

from .github_client.models import GitHubIssue

logger = logging.getLogger(__name__)

PEER_PATTERN = re.compile(r"^(.+:)")


def peer_prefix(label: str) -> str | None:
    """Return the namespace prefix of a label, including the trailing colon."""
    match = PEER_PATTERN.match(label)
    return match.group(1) if match else None


def exclusive_labels(current: list[str], attached: str) -> list[str] | None:
    """Compute the label set after attaching ``attached``.

    Every other label sharing the attached label's prefix is dropped; labels
    outside the namespace are kept in their original order.

    Returns:
        The new label set, or None if ``attached`` has no namespace prefix
    """
    prefix = peer_prefix(attached)
    if prefix is None:
        return None
    labels = [label for label in current if not label.startswith(prefix)]
    labels.append(attached)
    return labels


async def remove_peer_labels(
    enabled: bool, tracker, issue: GitHubIssue, attached: str
) -> list[str] | None:
    """Drop labels that share a namespace with a newly attached label.

    Args:
        enabled: The ``peer_labels`` configuration toggle
        tracker: Repository-scoped IssueTracker
        issue: Issue snapshot from the labeled event, including ``attached``
        attached: Name of the label that was just attached

    Returns:
        The label set written to the issue, or None if nothing had to change
    """
    if not enabled:
        return None
    labels = exclusive_labels(issue.label_names, attached)
    if labels is None:
        return None
    if set(labels) == set(issue.label_names) | {attached}:
        # no peers attached
        return None
    logger.info(f"Removing peers of '{attached}' from #{issue.number}: {labels}")
    await tracker.replace_labels(issue.number, labels)
    return labels
