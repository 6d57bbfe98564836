"""Type aliases for querycore package.

This module provides reusable type definitions shared by the filter
compiler and the field resolver.
"""

from typing import Any, Dict, Mapping, Sequence


class _Unset:
    """Marker for a value that was not provided at all (distinct from null)."""

    _instance = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Unset, ())


UNSET = _Unset()

# Untyped nested filter input, e.g. {"AND": [{"age_gt": 5}], "posts_some": {...}}
RawFilterInput = Mapping[str, Any]

# Raw query arguments for a relation field: where/orderBy/skip/after/before/first/last
RawArguments = Mapping[str, Any]

# Record identity
RecordId = str
RecordIds = Sequence[str]

# Dict form of a compiled filter (see FilterExpression.to_raw)
RawFilterDict = Dict[str, Any]
