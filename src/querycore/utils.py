"""Utility functions for querycore.

Shared helpers used by the compiler, the dispatcher and the batch collector.
"""

import json
from enum import Enum
from datetime import date, datetime
from typing import Any, Iterator, Sequence

from .exceptions import InvalidConfigError


# ===========================================================================
# Core utilities
# ===========================================================================


def chunk_iter(seq: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    """Yield successive chunks from a sequence."""
    if size <= 0:
        yield seq
        return
    for i in range(0, len(seq), size):
        yield seq[i : i + size]


# ===========================================================================
# Stable identity keys
# ===========================================================================


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    if hasattr(value, "model_dump") and callable(value.model_dump):
        return value.model_dump(mode="json")
    return repr(value)


def stable_key(value: Any) -> str:
    """Return a deterministic string for any JSON-like value or pydantic model.

    Two structurally equal values always produce the same key, independent of
    dict insertion order.
    """
    if value is None:
        return "null"
    return json.dumps(value, sort_keys=True, default=_json_default, separators=(",", ":"))


# ===========================================================================
# Settings validation
# ===========================================================================


def validate_key_separator(separator: str) -> str:
    """Validate FILTER_KEY_SEPARATOR setting value.

    Raises:
        InvalidConfigError: If the separator is empty or contains whitespace
    """
    if not separator or any(ch.isspace() for ch in separator):
        raise InvalidConfigError(
            "Filter key separator must be a non-empty string without whitespace",
            config_key="FILTER_KEY_SEPARATOR",
            value=separator,
        )
    return separator
