"""Classification of untyped filter input.

Raw input arrives as plain Python data (usually decoded JSON). `classify`
decides once which of the allowed shapes a value has, so the compiler can
branch on a closed set of variants instead of probing types repeatedly:

- `RawAbsent`: the value was not provided at all (`UNSET`)
- `RawPrimitive`: a scalar primitive, including an explicit null (`None`)
- `RawSequence`: an ordered list/tuple of classified items
- `RawMapping`: a nested string-keyed mapping, left unclassified below its keys
- `RawUnsupported`: anything else (sets, arbitrary objects)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from enum import Enum
from typing import Any, Tuple, Union

from pydantic import BaseModel, ConfigDict

from querycore.types import UNSET

__all__ = (
    "RawAbsent",
    "RawPrimitive",
    "RawSequence",
    "RawMapping",
    "RawUnsupported",
    "RawShape",
    "classify",
)

_PRIMITIVE_TYPES = (str, bool, int, float, datetime, Enum)


class _RawBase(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class RawAbsent(_RawBase):
    pass


class RawPrimitive(_RawBase):
    value: Any = None

    @property
    def is_null(self) -> bool:
        return self.value is None


class RawSequence(_RawBase):
    items: Tuple[Any, ...] = ()
    original: Any = None

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def all_mappings(self) -> bool:
        return bool(self.items) and all(isinstance(i, RawMapping) for i in self.items)

    @property
    def all_primitives(self) -> bool:
        return all(isinstance(i, RawPrimitive) for i in self.items)


class RawMapping(_RawBase):
    entries: Any = None

    def items(self):
        return self.entries.items()


class RawUnsupported(_RawBase):
    value: Any = None


RawShape = Union[RawAbsent, RawPrimitive, RawSequence, RawMapping, RawUnsupported]


def classify(value: Any) -> RawShape:
    """Return the raw shape of `value` without interpreting it against a schema."""
    if value is UNSET:
        return RawAbsent()
    if value is None or isinstance(value, _PRIMITIVE_TYPES):
        return RawPrimitive(value=value)
    if isinstance(value, Mapping):
        return RawMapping(entries=value)
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return RawSequence(items=tuple(classify(v) for v in value), original=value)
    return RawUnsupported(value=value)
