"""Configuration models and loading for ladybug.yml.

The configuration file lives in the target repository and is re-read for every
scheduled run and every webhook event. Top-level keys replace the defaults.

Example::

    peer_labels: true
    duplicated_issues:
      label: "Status: Duplicated"
      chain_close: true
      chain_reopen: false
    scheduled_tasks:
      stale:
        if_state: open
        if_updated: 30 days
        if_no_label: "Status: Pinned"
        add_labels: "Status: Stale"
        comment: "${AT_AUTHOR} is this still relevant?"
    mark_actions:
      wontfix:
        replace_labels: "Status: Won't fix"
        set_state: closed
"""

import logging
from collections.abc import Iterator, Mapping
from typing import Annotated, Any, Generic, Literal, TypeVar

import yaml
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .errors import ConfigurationError
from .utils.durations import parse_duration

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".github/ladybug.yml"
DEFAULT_DUPLICATED_LABEL = "Status: Duplicated"

PREDICATE_PREFIX = "if_"
ALL_ASSIGNEES = "all"


def _one_or_many(value: Any) -> Any:
    if isinstance(value, str):
        return [value]
    return value


OneOrMany = Annotated[list[str], BeforeValidator(_one_or_many)]

LockReason = Literal["off-topic", "too heated", "resolved", "spam"]


class RulePredicates(BaseModel):
    """Filter conditions of a scheduled task; each compiles to query clauses."""

    model_config = ConfigDict(extra="forbid")

    if_type: Literal["issue", "pr"] | None = None
    if_state: Literal["open", "closed"] | None = None
    if_created: str | None = Field(None, description="Older than this duration")
    if_updated: str | None = Field(None, description="Untouched for this duration")
    if_label: OneOrMany | None = None
    if_no_label: OneOrMany | None = None
    if_author: str | None = None
    if_not_author: str | None = None
    if_assignee: str | None = Field(None, description="'no' or a login")
    if_not_assigned: str | None = None
    if_comments: int | None = Field(None, ge=0)
    if_review: Literal["none", "required", "approved", "changes_requested"] | None = (
        None
    )
    if_reviewed_by: str | None = None
    if_linked: Literal["issue", "pr"] | None = None
    if_no_linked: Literal["issue", "pr"] | None = None

    # YAML 1.1 reads a bare `no` as false
    @field_validator("if_label", "if_no_label", mode="before")
    @classmethod
    def _bare_no_label(cls, value: Any) -> Any:
        return ["no"] if value is False else value

    @field_validator("if_assignee", mode="before")
    @classmethod
    def _bare_no_assignee(cls, value: Any) -> Any:
        return "no" if value is False else value

    @field_validator("if_created", "if_updated")
    @classmethod
    def _check_duration(cls, value: str | None) -> str | None:
        if value is not None:
            parse_duration(value)
        return value


class ActionSet(BaseModel):
    """Effects applied to one issue, executed in field order."""

    model_config = ConfigDict(extra="forbid")

    remove_labels: OneOrMany | None = None
    add_labels: OneOrMany | None = None
    replace_labels: OneOrMany | None = None
    comment: str | None = None
    set_state: Literal["open", "closed"] | None = None
    set_locked: Literal[False] | LockReason | None = None
    remove_assignees: OneOrMany | None = Field(
        None, description="Logins to unassign, or 'all' for every current assignee"
    )
    add_assignees: OneOrMany | None = None

    @property
    def removes_all_assignees(self) -> bool:
        return self.remove_assignees == [ALL_ASSIGNEES]


class RuleConfig(BaseModel):
    """A named scheduled task: predicates select issues, actions change them."""

    name: str
    predicates: RulePredicates = Field(default_factory=RulePredicates)
    actions: ActionSet = Field(default_factory=ActionSet)


def _validation_message(kind: str, name: str, error: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or name}: {err['msg']}"
        for err in error.errors()
    )
    subject = f"{kind} '{name}'" if name else kind
    return f"Invalid {subject}: {details}"


def _as_mapping(kind: str, name: str, raw: Any) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Invalid {kind} '{name}': expected a mapping")
    return dict(raw)


def parse_rule(name: str, raw: Any) -> RuleConfig:
    """Validate one scheduled task block.

    Keys starting with ``if_`` are predicates; every other key is an action.

    Raises:
        ConfigurationError: If a key is unknown or a value has the wrong shape
    """
    data = _as_mapping("scheduled task", name, raw)
    predicates = {
        k: v for k, v in data.items() if str(k).startswith(PREDICATE_PREFIX)
    }
    actions = {
        k: v for k, v in data.items() if not str(k).startswith(PREDICATE_PREFIX)
    }
    try:
        return RuleConfig(
            name=name,
            predicates=RulePredicates.model_validate(predicates),
            actions=ActionSet.model_validate(actions),
        )
    except ValidationError as e:
        raise ConfigurationError(_validation_message("scheduled task", name, e)) from e


def parse_action_set(name: str, raw: Any) -> ActionSet:
    """Validate one mark action block (actions only, no predicates)."""
    data = _as_mapping("mark action", name, raw)
    try:
        return ActionSet.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(_validation_message("mark action", name, e)) from e


T = TypeVar("T")


class _NamedBlocks(Generic[T]):
    """Named configuration blocks validated on lookup.

    Validation is per name so that one malformed block does not prevent the
    others from being used.
    """

    def __init__(self, raw: Mapping[str, Any] | None = None):
        self._raw = {str(name): block for name, block in (raw or {}).items()}

    def _parse(self, name: str, raw: Any) -> T:
        raise NotImplementedError

    def names(self) -> list[str]:
        return list(self._raw)

    def __contains__(self, name: object) -> bool:
        return name in self._raw

    def __iter__(self) -> Iterator[str]:
        return iter(self._raw)

    def __len__(self) -> int:
        return len(self._raw)

    def lookup(self, name: str) -> T | None:
        """Return the validated block, or None if no block has this name.

        Raises:
            ConfigurationError: If the block exists but is malformed
        """
        if name not in self._raw:
            return None
        return self._parse(name, self._raw[name])


class RuleSet(_NamedBlocks[RuleConfig]):
    """The ``scheduled_tasks`` block."""

    def _parse(self, name: str, raw: Any) -> RuleConfig:
        return parse_rule(name, raw)


class MarkSet(_NamedBlocks[ActionSet]):
    """The ``mark_actions`` block."""

    def _parse(self, name: str, raw: Any) -> ActionSet:
        return parse_action_set(name, raw)


class DuplicatedIssuesConfig(BaseModel):
    """Settings for duplicate tracking and chain closing/reopening."""

    model_config = ConfigDict(extra="forbid")

    label: str = DEFAULT_DUPLICATED_LABEL
    chain_close: bool = True
    chain_reopen: bool = True


class AppConfig(BaseModel):
    """Complete ladybug.yml configuration merged over the defaults."""

    peer_labels: bool = True
    duplicated_issues: DuplicatedIssuesConfig | None = Field(
        default_factory=DuplicatedIssuesConfig,
        description="Duplicate tracking settings, None when disabled",
    )
    scheduled_tasks: dict[Any, Any] = Field(default_factory=dict)
    mark_actions: dict[Any, Any] = Field(default_factory=dict)

    @field_validator("duplicated_issues", mode="before")
    @classmethod
    def _duplicated_toggle(cls, value: Any) -> Any:
        if value is False or value is None:
            return None
        if value is True:
            return {}
        return value

    @field_validator("scheduled_tasks", "mark_actions", mode="before")
    @classmethod
    def _empty_block(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def rules(self) -> RuleSet:
        return RuleSet(self.scheduled_tasks)

    @property
    def marks(self) -> MarkSet:
        return MarkSet(self.mark_actions)


def load_config(text: str | None) -> AppConfig:
    """Parse ladybug.yml text and merge it over the defaults.

    Args:
        text: YAML document, or None when the repository has no config file

    Returns:
        AppConfig with defaults for every key the file leaves out

    Raises:
        ConfigurationError: If the YAML is invalid or a top-level block is malformed
    """
    if text is None or not text.strip():
        return AppConfig()

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration: {e}") from e

    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping at the top level")

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(_validation_message("configuration", "", e)) from e


async def fetch_config(tracker, path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Fetch and parse the configuration file from the tracker's repository."""
    text = await tracker.get_config_text(path)
    if text is None:
        logger.debug(f"No {path} in {tracker.repo.full_name}, using defaults")
    return load_config(text)
