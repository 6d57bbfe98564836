"""Value coercion engine.

Converts raw primitive values into `TypedValue` instances for a declared
scalar type. Conversion is strict: a value is accepted only when its native
Python type maps onto the target type without guessing. Numeric strings are
never turned into numbers and floats are never truncated to ints.

Absence and null stay distinct: coercing `UNSET` returns `None` (no value),
coercing `None` returns `NullValue`.
"""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from querycore.constants import TypeIdentifier
from querycore.exceptions import CoercionError
from querycore.types import UNSET

from .values import (
    BooleanValue,
    DateTimeValue,
    EnumValue,
    FloatValue,
    IdValue,
    IntValue,
    JsonValue,
    ListValue,
    NullValue,
    StringValue,
    TypedValue,
)

__all__ = (
    "ValueCoercer",
    "value_coercer",
    "coerce",
    "coerce_for_field",
)


class ValueCoercer:
    """Convert raw values to typed values for each `TypeIdentifier`."""

    def __init__(self) -> None:
        self._converters: Dict[TypeIdentifier, Callable[[Any, Optional[Sequence[str]]], Optional[TypedValue]]] = {
            TypeIdentifier.STRING: self._to_string,
            TypeIdentifier.INT: self._to_int,
            TypeIdentifier.FLOAT: self._to_float,
            TypeIdentifier.BOOLEAN: self._to_boolean,
            TypeIdentifier.ID: self._to_id,
            TypeIdentifier.DATETIME: self._to_datetime,
            TypeIdentifier.JSON: self._to_json,
            TypeIdentifier.ENUM: self._to_enum,
        }

    def coerce(
        self,
        raw_value: Any,
        type_identifier: TypeIdentifier,
        is_list: bool = False,
        *,
        field_name: Optional[str] = None,
        enum_values: Optional[Iterable[str]] = None,
    ) -> Optional[TypedValue]:
        """Coerce `raw_value` to `type_identifier`.

        Args:
            raw_value: Primitive, `None`, `UNSET`, or a sequence of primitives when `is_list`
            type_identifier: Target scalar type
            is_list: Whether a list of values is expected
            field_name: Field name used in error context
            enum_values: Allowed names when the target is an Enum

        Returns:
            The typed value, `NullValue` for `None`, or `None` when the value is absent

        Raises:
            CoercionError: If the value cannot be represented as the target type
        """
        if raw_value is UNSET:
            return None
        if raw_value is None:
            return NullValue()

        type_identifier = TypeIdentifier(type_identifier)
        allowed = tuple(enum_values) if enum_values is not None else None

        if is_list:
            if isinstance(raw_value, (str, bytes)) or not isinstance(raw_value, (list, tuple)):
                raise CoercionError(
                    "Expected a list of values",
                    field=field_name,
                    expected_type=f"[{type_identifier.value}]",
                    raw_value=raw_value,
                )
            return ListValue(values=tuple(self._coerce_one(v, type_identifier, field_name, allowed) for v in raw_value))

        return self._coerce_one(raw_value, type_identifier, field_name, allowed)

    def _coerce_one(
        self,
        raw_value: Any,
        type_identifier: TypeIdentifier,
        field_name: Optional[str],
        enum_values: Optional[Sequence[str]],
    ) -> TypedValue:
        if raw_value is None:
            return NullValue()
        converter = self._converters[type_identifier]
        try:
            typed = converter(raw_value, enum_values)
        except (TypeError, ValueError, OverflowError) as e:
            raise CoercionError(
                str(e) or "Invalid value",
                field=field_name,
                expected_type=type_identifier.value,
                raw_value=raw_value,
            ) from e
        if typed is None:
            raise CoercionError(
                f"Cannot coerce {type(raw_value).__name__} to {type_identifier.value}",
                field=field_name,
                expected_type=type_identifier.value,
                raw_value=raw_value,
            )
        return typed

    # ------------------------------------------------------------------
    # Per-type converters: return None to reject the value
    # ------------------------------------------------------------------
    @staticmethod
    def _to_string(value: Any, _: Optional[Sequence[str]]) -> Optional[TypedValue]:
        if isinstance(value, str):
            return StringValue(value=value)
        return None

    @staticmethod
    def _to_int(value: Any, _: Optional[Sequence[str]]) -> Optional[TypedValue]:
        # bool is an int subclass but never a number here
        if isinstance(value, int) and not isinstance(value, bool):
            return IntValue(value=value)
        return None

    @staticmethod
    def _to_float(value: Any, _: Optional[Sequence[str]]) -> Optional[TypedValue]:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return FloatValue(value=float(value))
        return None

    @staticmethod
    def _to_boolean(value: Any, _: Optional[Sequence[str]]) -> Optional[TypedValue]:
        if isinstance(value, bool):
            return BooleanValue(value=value)
        return None

    @staticmethod
    def _to_id(value: Any, _: Optional[Sequence[str]]) -> Optional[TypedValue]:
        if isinstance(value, str):
            return IdValue(value=value)
        if isinstance(value, int) and not isinstance(value, bool):
            return IdValue(value=str(value))
        return None

    @staticmethod
    def _to_datetime(value: Any, _: Optional[Sequence[str]]) -> Optional[TypedValue]:
        if isinstance(value, datetime):
            return DateTimeValue(value=value)
        if isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            # raises ValueError for non ISO-8601 input
            return DateTimeValue(value=datetime.fromisoformat(text))
        return None

    @staticmethod
    def _to_json(value: Any, _: Optional[Sequence[str]]) -> Optional[TypedValue]:
        if isinstance(value, str):
            try:
                return JsonValue(value=json.loads(value))
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON: {e.msg}") from e
        if isinstance(value, (dict, list, tuple, int, float, bool)):
            return JsonValue(value=list(value) if isinstance(value, tuple) else value)
        return None

    @staticmethod
    def _to_enum(value: Any, enum_values: Optional[Sequence[str]]) -> Optional[TypedValue]:
        if isinstance(value, Enum):
            value = value.name
        if not isinstance(value, str):
            return None
        if enum_values is not None and value not in enum_values:
            if not enum_values:
                raise ValueError(f"'{value}' is not a declared value; the enum has none")
            raise ValueError(f"'{value}' is not one of: {', '.join(enum_values)}")
        return EnumValue(value=value)


value_coercer = ValueCoercer()


def coerce(
    raw_value: Any,
    type_identifier: TypeIdentifier,
    is_list: bool = False,
    **kwargs: Any,
) -> Optional[TypedValue]:
    """Module-level shortcut for `value_coercer.coerce`."""
    return value_coercer.coerce(raw_value, type_identifier, is_list, **kwargs)


def coerce_for_field(field: Any, raw_value: Any, is_list: Optional[bool] = None) -> Optional[TypedValue]:
    """Coerce a value for a scalar schema field, honouring its enum values.

    `is_list` defaults to the field's own list flag.
    """
    return value_coercer.coerce(
        raw_value,
        field.type_identifier,
        field.is_list if is_list is None else is_list,
        field_name=field.name,
        enum_values=field.enum_values,
    )
