"""Declarative rule engine: query compiler, action executors and runner."""

from .executor import ExecutionLog, build_executor, build_rule_executor
from .query import compile_predicates, compile_query
from .runner import (
    MarkResult,
    RuleCheck,
    RuleRunResult,
    apply_marks,
    check_rules,
    run_all,
    run_rule,
    try_rule,
)

__all__ = [
    "ExecutionLog",
    "MarkResult",
    "RuleCheck",
    "RuleRunResult",
    "apply_marks",
    "build_executor",
    "build_rule_executor",
    "check_rules",
    "compile_predicates",
    "compile_query",
    "run_all",
    "run_rule",
    "try_rule",
]
