"""Duration parsing for relative time predicates.

Durations are written as ``"<amount> <unit>"``, for example ``"5 minutes"``,
``"2 weeks"`` or ``"3 M"``. Months and years are approximated as 30 and 365
days, which is precise enough for GitHub search date filtering.
"""

import re
from datetime import datetime, timedelta, timezone

DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([A-Za-z]+)\s*$")

# Short forms are case-sensitive: "M" is months, "m" is minutes
_SHORT_UNITS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "M": timedelta(days=30),
    "y": timedelta(days=365),
}

_LONG_UNITS = {
    "second": timedelta(seconds=1),
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _unit_length(unit: str) -> timedelta | None:
    if unit in _SHORT_UNITS:
        return _SHORT_UNITS[unit]
    name = unit.lower()
    if name.endswith("s"):
        name = name[:-1]
    return _LONG_UNITS.get(name)


def parse_duration(value: str) -> timedelta:
    """Parse a duration string into a timedelta.

    Args:
        value: Duration such as "5 minutes", "10 hours" or "2 w"

    Returns:
        The equivalent timedelta

    Raises:
        ValueError: If the amount or unit is not recognized
    """
    match = DURATION_PATTERN.match(value)
    if not match:
        raise ValueError(
            f"Invalid duration '{value}'. Expected '<amount> <unit>', "
            f"e.g. '5 minutes' or '2 weeks'"
        )

    amount, unit = int(match.group(1)), match.group(2)
    length = _unit_length(unit)
    if length is None:
        raise ValueError(
            f"Unknown duration unit '{unit}' in '{value}'. Supported units: "
            f"seconds, minutes, hours, days, weeks, months, years"
        )
    return amount * length


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def subtract_duration(value: str, now: datetime | None = None) -> datetime:
    """Return the instant ``value`` before ``now`` (defaults to the current time)."""
    return (now or utc_now()) - parse_duration(value)


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as a UTC timestamp accepted by GitHub search."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
