"""Duplicate tracking driven by "Duplicate of #N" comments.

An issue becomes a duplicate when a comment starting with ``Duplicate of #N``
is posted on it while it is open. The target number is stored in the issue's
metadata under ``duplicateOf`` and the duplicated label replaces all other
labels. Editing or deleting the comment clears the relation again.

When an issue is closed or reopened, open (or closed) issues that are direct
duplicates of it follow along. Only direct duplicates are handled; longer
chains advance one hop per close/reopen event. Cycles are not prevented, see
``find_duplicate_cycles`` for a diagnostic.
"""

import asyncio
import logging
import re
from collections.abc import Mapping

from .config import DuplicatedIssuesConfig
from .github_client.models import GitHubIssue

logger = logging.getLogger(__name__)

DUPLICATE_PATTERN = re.compile(r"^Duplicate of #(\d+)")
METADATA_KEY = "duplicateOf"


def match_duplicate(body: str | None) -> int | None:
    """Return the issue number referenced by a "Duplicate of #N" comment."""
    if not body:
        return None
    match = DUPLICATE_PATTERN.match(body)
    return int(match.group(1)) if match else None


def _as_issue_number(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


async def mark_duplicate(
    config: DuplicatedIssuesConfig, tracker, issue: GitHubIssue, duplicate_of: int
) -> None:
    """Record ``issue`` as a duplicate of ``duplicate_of`` and label it."""
    logger.info(f"Marking issue #{issue.number} as dup of #{duplicate_of}")
    await tracker.set_metadata(issue.number, METADATA_KEY, duplicate_of)
    await tracker.replace_labels(issue.number, [config.label])


async def unmark_duplicate(
    config: DuplicatedIssuesConfig, tracker, issue: GitHubIssue, duplicate_of: int
) -> None:
    """Clear the duplicate relation of ``issue`` and remove the duplicated label."""
    logger.info(f"Unmarking issue #{issue.number} as dup of #{duplicate_of}")
    await tracker.set_metadata(issue.number, METADATA_KEY, None)
    await tracker.remove_label(issue.number, config.label)


async def handle_comment(
    config: DuplicatedIssuesConfig | None,
    tracker,
    action: str,
    issue: GitHubIssue,
    body: str | None,
    previous_body: str | None = None,
) -> str | None:
    """Update the duplicate relation for a comment lifecycle event.

    Args:
        config: Duplicate tracking settings, None when disabled
        tracker: Repository-scoped IssueTracker
        action: Comment event action: "created", "edited" or "deleted"
        issue: Issue the comment belongs to
        body: Current comment body (the removed body for deletions)
        previous_body: Body before an edit, if it changed

    Returns:
        "marked", "unmarked", or None when nothing changed
    """
    if config is None or issue.state != "open":
        return None

    current = match_duplicate(body)
    if action == "created":
        if current is not None:
            await mark_duplicate(config, tracker, issue, current)
            return "marked"
    elif action == "edited":
        before = match_duplicate(previous_body)
        if current is not None:
            await mark_duplicate(config, tracker, issue, current)
            return "marked"
        if before is not None:
            await unmark_duplicate(config, tracker, issue, before)
            return "unmarked"
    elif action == "deleted":
        if current is not None:
            await unmark_duplicate(config, tracker, issue, current)
            return "unmarked"
    return None


async def _cascade(
    config: DuplicatedIssuesConfig,
    tracker,
    issue: GitHubIssue,
    from_state: str,
    to_state: str,
) -> list[int]:
    query = (
        f"is:issue is:{from_state} "
        f'label:"{config.label}" '
        f"repo:{tracker.repo.full_name}"
    )
    candidates = await tracker.search_issues(query)

    async def follow(other: GitHubIssue) -> int | None:
        duplicate_of = await tracker.get_metadata(other.number, METADATA_KEY)
        if _as_issue_number(duplicate_of) != issue.number:
            return None
        logger.info(f"Chain setting issue #{other.number} {to_state}")
        await tracker.update_state(other.number, to_state)
        return other.number

    outcomes = await asyncio.gather(
        *(follow(other) for other in candidates), return_exceptions=True
    )
    changed = []
    for other, outcome in zip(candidates, outcomes):
        if isinstance(outcome, Exception):
            logger.error(f"Could not set #{other.number} {to_state}: {outcome}")
        elif isinstance(outcome, BaseException):
            raise outcome
        elif outcome is not None:
            changed.append(outcome)
    return changed


async def chain_close(
    config: DuplicatedIssuesConfig | None, tracker, issue: GitHubIssue
) -> list[int]:
    """Close open duplicates of a just-closed issue and summarize on it.

    Returns:
        Numbers of the issues that were closed
    """
    if config is None or not config.chain_close:
        return []
    closed = await _cascade(config, tracker, issue, "open", "closed")
    if closed:
        await tracker.create_comment(
            issue.number,
            "Closed other issues that were marked as duplicates of this one: "
            + ", ".join(f"#{number}" for number in closed),
        )
    return closed


async def chain_reopen(
    config: DuplicatedIssuesConfig | None, tracker, issue: GitHubIssue
) -> list[int]:
    """Reopen closed duplicates of a just-reopened issue and summarize on it.

    Returns:
        Numbers of the issues that were reopened
    """
    if config is None or not config.chain_reopen:
        return []
    reopened = await _cascade(config, tracker, issue, "closed", "open")
    if reopened:
        await tracker.create_comment(
            issue.number,
            "Reopened other issues that were marked as duplicates of this one: "
            + ", ".join(f"#{number}" for number in reopened),
        )
    return reopened


def find_duplicate_cycles(edges: Mapping[int, int]) -> list[list[int]]:
    """Find cycles in the duplicate relation.

    Each issue has at most one outgoing edge, so every cycle is found by
    following edges from each unvisited issue until a visited one is reached.

    Args:
        edges: Mapping of duplicate issue number to the issue it duplicates

    Returns:
        Each cycle as a list of issue numbers, starting from its smallest member
    """
    visited: set[int] = set()
    cycles = []
    for start in sorted(edges):
        path: list[int] = []
        on_path: set[int] = set()
        node: int | None = start
        while node is not None and node not in visited:
            visited.add(node)
            path.append(node)
            on_path.add(node)
            node = edges.get(node)
        if node is not None and node in on_path:
            cycle = path[path.index(node) :]
            pivot = cycle.index(min(cycle))
            cycles.append(cycle[pivot:] + cycle[:pivot])
    return cycles


async def collect_duplicate_edges(
    config: DuplicatedIssuesConfig, tracker
) -> dict[int, int]:
    """Read the duplicate relation of every issue carrying the duplicated label."""
    issues = await tracker.search_issues(
        f'is:issue label:"{config.label}" repo:{tracker.repo.full_name}'
    )
    values = await asyncio.gather(
        *(tracker.get_metadata(issue.number, METADATA_KEY) for issue in issues)
    )
    edges = {}
    for issue, value in zip(issues, values):
        target = _as_issue_number(value)
        if target is not None:
            edges[issue.number] = target
    return edges
