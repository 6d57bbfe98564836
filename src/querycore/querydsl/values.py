"""Typed filter values.

Every value that ends up in a compiled filter is one of the variants below,
tagged with the scalar type it was coerced to. Instances are produced by
`querycore.querydsl.coercion` only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict

__all__ = (
    "StringValue",
    "IntValue",
    "FloatValue",
    "BooleanValue",
    "IdValue",
    "DateTimeValue",
    "JsonValue",
    "EnumValue",
    "NullValue",
    "ListValue",
    "TypedValue",
)


class _ValueBase(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    def to_raw(self) -> Any:
        """Return the plain Python value as a client would send it."""
        return getattr(self, "value")


class StringValue(_ValueBase):
    kind: Literal["String"] = "String"
    value: str


class IntValue(_ValueBase):
    kind: Literal["Int"] = "Int"
    value: int


class FloatValue(_ValueBase):
    kind: Literal["Float"] = "Float"
    value: float


class BooleanValue(_ValueBase):
    kind: Literal["Boolean"] = "Boolean"
    value: bool


class IdValue(_ValueBase):
    kind: Literal["ID"] = "ID"
    value: str


class DateTimeValue(_ValueBase):
    kind: Literal["DateTime"] = "DateTime"
    value: datetime

    def to_raw(self) -> str:
        return self.value.isoformat()


class JsonValue(_ValueBase):
    kind: Literal["Json"] = "Json"
    value: Any = None


class EnumValue(_ValueBase):
    kind: Literal["Enum"] = "Enum"
    value: str


class NullValue(_ValueBase):
    kind: Literal["Null"] = "Null"

    def to_raw(self) -> None:
        return None


class ListValue(_ValueBase):
    kind: Literal["List"] = "List"
    values: Tuple["TypedValue", ...] = ()

    def to_raw(self) -> list:
        return [v.to_raw() for v in self.values]


TypedValue = Union[
    StringValue,
    IntValue,
    FloatValue,
    BooleanValue,
    IdValue,
    DateTimeValue,
    JsonValue,
    EnumValue,
    NullValue,
    ListValue,
]

ListValue.model_rebuild()

