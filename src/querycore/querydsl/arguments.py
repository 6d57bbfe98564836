"""Query arguments for list and relation fetches.

A `QueryArguments` instance bundles the compiled `where` filter with ordering
and pagination (`orderBy`, `skip`, `after`, `before`, `first`, `last`). It is
part of the identity of a deferred relation fetch, so `identity()` must be
deterministic for structurally equal arguments.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from querycore.constants import OrderDirection
from querycore.exceptions import InvalidArgumentError
from querycore.schema import Model, RelationField, ScalarField
from querycore.settings import QueryCoreSettings
from querycore.settings import settings as api_settings
from querycore.types import UNSET, RawArguments
from querycore.utils import stable_key

from .compiler import FilterCompiler
from .expressions import FilterExpression

__all__ = (
    "OrderBy",
    "QueryArguments",
    "LIST_ARGUMENTS",
    "SINGLE_ARGUMENTS",
    "connection_arguments",
    "extract_query_arguments",
)

LIST_ARGUMENTS: Tuple[str, ...] = ("where", "orderBy", "skip", "after", "before", "first", "last")
SINGLE_ARGUMENTS: Tuple[str, ...] = ("where",)


class OrderBy(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: ScalarField
    direction: OrderDirection = OrderDirection.ASC

    def to_raw(self) -> str:
        return f"{self.field.name}_{self.direction.value}"


class QueryArguments(BaseModel):
    model_config = ConfigDict(frozen=True)

    where: Optional[FilterExpression] = None
    order_by: Optional[OrderBy] = None
    skip: Optional[int] = None
    after: Optional[str] = None
    before: Optional[str] = None
    first: Optional[int] = None
    last: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in type(self).model_fields)

    def to_raw(self, separator: str = "_") -> Dict[str, Any]:
        """Plain argument mapping, omitting unset arguments."""
        out: Dict[str, Any] = {}
        if self.where is not None:
            out["where"] = self.where.to_raw(separator)
        if self.order_by is not None:
            out["orderBy"] = self.order_by.to_raw()
        for name in ("skip", "after", "before", "first", "last"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out

    def identity(self) -> str:
        """Deterministic key; equal for structurally equal arguments."""
        return stable_key(self.to_raw())

    @classmethod
    def from_raw(
        cls,
        model: Model,
        raw_args: Optional[RawArguments],
        compiler: FilterCompiler,
        config: Optional[QueryCoreSettings] = None,
    ) -> "QueryArguments":
        """Build arguments for fetching records of `model`.

        Raises:
            InvalidArgumentError: For malformed ordering or pagination values
            UnknownFilterKey, CoercionError, MalformedFilterShape: From compiling `where`
        """
        config = config or api_settings
        raw_args = {k: v for k, v in (raw_args or {}).items() if v is not UNSET and v is not None}

        where = None
        if "where" in raw_args:
            where = compiler.compile(raw_args["where"], model)

        max_items = config.PAGINATION_MAX_ITEMS
        return cls(
            where=where,
            order_by=_parse_order_by(model, raw_args.get("orderBy")),
            skip=_non_negative_int("skip", raw_args.get("skip")),
            after=_cursor("after", raw_args.get("after")),
            before=_cursor("before", raw_args.get("before")),
            first=_non_negative_int("first", raw_args.get("first"), max_items),
            last=_non_negative_int("last", raw_args.get("last"), max_items),
        )


def connection_arguments(field: Union[ScalarField, RelationField]) -> Tuple[str, ...]:
    """Names of the arguments a field accepts when selected.

    Scalar and hidden fields take none, to-one relations only `where`,
    to-many relations the full list set.
    """
    if field.is_hidden or isinstance(field, ScalarField):
        return ()
    return LIST_ARGUMENTS if field.is_list else SINGLE_ARGUMENTS


def extract_query_arguments(
    field: Union[ScalarField, RelationField],
    raw_args: Optional[RawArguments],
    compiler: FilterCompiler,
    config: Optional[QueryCoreSettings] = None,
) -> Optional[QueryArguments]:
    """Validate and build the query arguments given at a relation field's call site.

    Returns None for fields that take no arguments.

    Raises:
        InvalidArgumentError: If an argument is not accepted by the field
    """
    provided = {k: v for k, v in (raw_args or {}).items() if v is not UNSET}
    allowed = connection_arguments(field)
    for name in provided:
        if name not in allowed:
            raise InvalidArgumentError("Argument not accepted by field", argument=name, field=field.name)
    if not isinstance(field, RelationField):
        return None
    return QueryArguments.from_raw(field.related_model, provided, compiler, config)


def _parse_order_by(model: Model, raw: Any) -> Optional[OrderBy]:
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        name, direction = raw.get("field"), raw.get("direction") or OrderDirection.ASC.value
    elif isinstance(raw, str):
        head, sep, tail = raw.rpartition("_")
        if sep and tail.upper() in OrderDirection.__members__:
            name, direction = head, tail
        else:
            name, direction = raw, OrderDirection.ASC.value
    else:
        raise InvalidArgumentError("orderBy must be a string like 'name_ASC'", argument="orderBy", value=raw)

    try:
        direction = OrderDirection(str(direction).upper())
    except ValueError:
        raise InvalidArgumentError(
            "Invalid order direction, expected ASC or DESC", argument="orderBy", value=raw
        ) from None

    field = model.find_field(name) if isinstance(name, str) else None
    if not isinstance(field, ScalarField) or field.is_list or field.is_hidden:
        raise InvalidArgumentError("orderBy must name a visible scalar field", argument="orderBy", value=raw, model=model.name)
    return OrderBy(field=field, direction=direction)


def _non_negative_int(name: str, raw: Any, maximum: Optional[int] = None) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise InvalidArgumentError("Expected an integer", argument=name, value=raw)
    if raw < 0:
        raise InvalidArgumentError("Must be non-negative", argument=name, value=raw)
    if maximum is not None and raw > maximum:
        raise InvalidArgumentError(f"Must not exceed {maximum}", argument=name, value=raw)
    return raw


def _cursor(name: str, raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, int) and not isinstance(raw, bool):
        return str(raw)
    raise InvalidArgumentError("Cursor must be a record id", argument=name, value=raw)
