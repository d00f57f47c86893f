"""Run scheduled tasks and the single-issue diagnostic paths."""

import asyncio
import logging
from datetime import datetime

from pydantic import BaseModel, Field

from ..config import AppConfig, RuleSet
from ..errors import ConfigurationError
from ..github_client.models import GitHubIssue
from .executor import ExecutionLog, build_executor, build_rule_executor
from .query import compile_query

logger = logging.getLogger(__name__)


class RuleRunResult(BaseModel):
    """Outcome of one scheduled task in one run."""

    name: str
    query: str | None = None
    matched: list[int] = Field(default_factory=list)
    failed: dict[int, str] = Field(
        default_factory=dict, description="Issue number to error message"
    )
    error: str | None = Field(None, description="Why the task was skipped")

    @property
    def skipped(self) -> bool:
        return self.error is not None


class RuleCheck(BaseModel):
    """Whether an issue currently matches a task's query."""

    name: str
    query: str | None = None
    found: bool = False
    error: str | None = None

    @property
    def missing(self) -> bool:
        return self.query is None and self.error is None


class MarkResult(BaseModel):
    """Outcome of applying mark actions to one issue."""

    applied: list[str] = Field(default_factory=list)
    unknown: list[str] = Field(default_factory=list)
    invalid: dict[str, str] = Field(default_factory=dict)
    failed: dict[str, str] = Field(
        default_factory=dict, description="Mark name to the error that stopped it"
    )


async def run_rule(
    rules: RuleSet, name: str, tracker, now: datetime | None = None
) -> RuleRunResult:
    """Search for a task's matching issues and apply its actions to each.

    Matched issues are processed concurrently. A failure on one issue is
    recorded and does not affect the others.
    """
    logger.info(f"Processing task {name}")
    try:
        query = compile_query(rules, name, tracker.repo, now)
        executor = build_rule_executor(rules, name, tracker)
    except ConfigurationError as e:
        logger.error(f"Skipping task {name}: {e}")
        return RuleRunResult(name=name, error=str(e))

    if query is None or executor is None:
        return RuleRunResult(name=name, error="Not found in configuration")

    try:
        issues = await tracker.search_issues(query)
    except Exception as e:
        logger.error(f"Skipping task {name}, search failed: {e}")
        return RuleRunResult(name=name, query=query, error=str(e))

    result = RuleRunResult(
        name=name, query=query, matched=[issue.number for issue in issues]
    )
    logger.info(f"Query: {query} -> [{', '.join(str(n) for n in result.matched)}]")

    outcomes = await asyncio.gather(
        *(executor(issue) for issue in issues), return_exceptions=True
    )
    for issue, outcome in zip(issues, outcomes):
        if isinstance(outcome, Exception):
            logger.error(f"Task {name} failed on #{issue.number}: {outcome}")
            result.failed[issue.number] = str(outcome)
        elif isinstance(outcome, BaseException):
            raise outcome
    return result


async def run_all(
    config: AppConfig, tracker, now: datetime | None = None
) -> list[RuleRunResult]:
    """Run every scheduled task concurrently.

    Tasks are independent: two tasks may modify the same issue in the same run,
    in no particular order.
    """
    rules = config.rules
    return list(
        await asyncio.gather(*(run_rule(rules, name, tracker, now) for name in rules))
    )


async def check_rules(
    config: AppConfig,
    tracker,
    issue_number: int,
    names: list[str] | None = None,
    now: datetime | None = None,
) -> list[RuleCheck]:
    """Report whether an issue matches each task's query, without applying it.

    Args:
        config: Loaded configuration
        tracker: Repository-scoped IssueTracker
        issue_number: Issue to look for in each task's search results
        names: Tasks to check; all scheduled tasks when empty

    Returns:
        One RuleCheck per requested name, in order
    """
    rules = config.rules
    checks = []
    for name in names or rules.names():
        try:
            query = compile_query(rules, name, tracker.repo, now)
        except ConfigurationError as e:
            checks.append(RuleCheck(name=name, error=str(e)))
            continue
        if query is None:
            checks.append(RuleCheck(name=name))
            continue

        issues = await tracker.search_issues(query)
        found = any(issue.number == issue_number for issue in issues)
        checks.append(RuleCheck(name=name, query=query, found=found))
    return checks


async def try_rule(
    config: AppConfig, tracker, issue: GitHubIssue, name: str
) -> ExecutionLog | None:
    """Apply one task's actions to a single issue regardless of its query.

    Returns:
        Log of attempted calls, or None when the task is not configured

    Raises:
        ConfigurationError: If the task is malformed
    """
    executor = build_rule_executor(config.rules, name, tracker)
    if executor is None:
        return None
    logger.info(f"Trying task {name} on #{issue.number}")
    return await executor(issue)


async def apply_marks(
    config: AppConfig, tracker, issue: GitHubIssue, names: list[str]
) -> MarkResult:
    """Apply named mark actions to a single issue, in the given order.

    Each mark is applied independently. Problems with one mark are recorded
    and the remaining marks are still applied.
    """
    marks = config.marks
    result = MarkResult()
    for name in names:
        try:
            executor = build_executor(marks.lookup(name), tracker)
        except ConfigurationError as e:
            result.invalid[name] = str(e)
            continue
        if executor is None:
            result.unknown.append(name)
            continue
        logger.info(f"Marking #{issue.number} with {name}")
        try:
            await executor(issue)
        except Exception as e:
            logger.error(f"Mark {name} failed on #{issue.number}: {e}")
            result.failed[name] = str(e)
            continue
        result.applied.append(name)
    return result
