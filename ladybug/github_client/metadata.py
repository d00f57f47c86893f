"""Per-issue key/value metadata stored in the issue body.

GitHub has no native storage for app data on an issue, so values are kept as
JSON inside a hidden HTML comment appended to the issue body::

    <!-- ladybug = {"duplicateOf": 42} -->

The comment is invisible in the rendered issue and survives edits of the
surrounding text.
"""

import json
import re
from typing import Any

METADATA_PATTERN = re.compile(r"\n*<!-- ladybug = (\{.*?\}) -->", re.DOTALL)


def read_metadata(body: str | None) -> dict[str, Any]:
    """Extract the metadata mapping from an issue body.

    Args:
        body: Issue body, possibly None for issues without a description

    Returns:
        Stored metadata, or an empty dict when none is present or it is unreadable
    """
    if not body:
        return {}
    match = METADATA_PATTERN.search(body)
    if not match:
        return {}
    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def write_metadata(body: str | None, data: dict[str, Any]) -> str:
    """Return ``body`` with its metadata comment replaced by ``data``.

    Keys whose value is None are dropped. When nothing remains, the metadata
    comment is removed entirely.
    """
    text = METADATA_PATTERN.sub("", body or "")
    payload = {key: value for key, value in data.items() if value is not None}
    if not payload:
        return text
    return f"{text}\n\n<!-- ladybug = {json.dumps(payload, sort_keys=True)} -->"


def set_metadata_value(body: str | None, key: str, value: Any) -> str:
    """Set a single metadata key on an issue body, deleting it when value is None."""
    data = read_metadata(body)
    data[key] = value
    return write_metadata(body, data)
