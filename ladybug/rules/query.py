"""Compile scheduled task predicates into GitHub search queries."""

from datetime import datetime

from ..config import RulePredicates, RuleSet
from ..errors import ConfigurationError
from ..github_client.models import RepoRef
from ..utils.durations import format_timestamp, subtract_duration, utc_now

NO_VALUE = "no"


def _label_clauses(labels: list[str], negate: bool) -> list[str]:
    prefix = "-" if negate else ""
    return [
        f"{prefix}no:label" if label == NO_VALUE else f'{prefix}label:"{label}"'
        for label in labels
    ]


def _older_than(field: str, duration: str, now: datetime) -> str:
    try:
        moment = subtract_duration(duration, now)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    return f"{field}:<{format_timestamp(moment)}"


def compile_predicates(
    predicates: RulePredicates, repo: RepoRef, now: datetime | None = None
) -> str:
    """Build a search query from a task's predicates.

    Every predicate contributes one clause (list values one clause per item);
    clauses are space-joined, which GitHub search treats as AND. Relative
    durations are resolved against ``now``, so the same predicates produce a
    sliding window when compiled on successive runs.

    Args:
        predicates: Validated predicates of one task
        repo: Repository the query is scoped to
        now: Reference instant for durations, defaults to the current time

    Returns:
        GitHub search query string

    Example:
        >>> compile_predicates(
        ...     RulePredicates(if_state="open", if_label=["bug", "no"]),
        ...     RepoRef(owner="octo", name="widgets"),
        ... )
        'repo:octo/widgets state:open label:"bug" no:label'
    """
    now = now or utc_now()
    chunks = [f"repo:{repo.full_name}"]

    if predicates.if_type:
        chunks.append(f"type:{predicates.if_type}")
    if predicates.if_state:
        chunks.append(f"state:{predicates.if_state}")
    if predicates.if_created:
        chunks.append(_older_than("created", predicates.if_created, now))
    if predicates.if_updated:
        chunks.append(_older_than("updated", predicates.if_updated, now))
    if predicates.if_label:
        chunks.extend(_label_clauses(predicates.if_label, negate=False))
    if predicates.if_no_label:
        chunks.extend(_label_clauses(predicates.if_no_label, negate=True))
    if predicates.if_author:
        chunks.append(f"author:{predicates.if_author}")
    if predicates.if_not_author:
        chunks.append(f"-author:{predicates.if_not_author}")
    if predicates.if_assignee:
        if predicates.if_assignee == NO_VALUE:
            chunks.append("no:assignee")
        else:
            chunks.append(f"assignee:{predicates.if_assignee}")
    if predicates.if_not_assigned:
        chunks.append(f"-assignee:{predicates.if_not_assigned}")
    if predicates.if_comments is not None:
        chunks.append(f"comments:<={predicates.if_comments}")
    if predicates.if_review:
        chunks.append(f"review:{predicates.if_review}")
    if predicates.if_reviewed_by:
        chunks.append(f"reviewed-by:{predicates.if_reviewed_by}")
    if predicates.if_linked:
        chunks.append(f"linked:{predicates.if_linked}")
    if predicates.if_no_linked:
        chunks.append(f"-linked:{predicates.if_no_linked}")

    return " ".join(chunks)


def compile_query(
    rules: RuleSet, name: str, repo: RepoRef, now: datetime | None = None
) -> str | None:
    """Compile the query of a named scheduled task.

    Returns:
        The query string, or None when no task with this name is configured

    Raises:
        ConfigurationError: If the task exists but its predicates are malformed
    """
    rule = rules.lookup(name)
    if rule is None:
        return None
    return compile_predicates(rule.predicates, repo, now)
