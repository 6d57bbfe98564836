"""Filter expression tree.

Compiled filters are immutable trees built from a closed set of node types:

- `Logical`: AND / OR / NOT over child expressions
- `ScalarValue`: one scalar field compared with one typed value
- `ScalarListValue`: one scalar field compared with a list of typed values
- `RelationFilter`: a relation field whose related records must (every/some/
  none/is/is_not) match a nested expression compiled against the related model
- `RelationListFilter`: a relation field with alternative nested expressions
- `Raw`: passthrough for input the compiler could not classify

`to_raw()` turns a tree back into the dict form a client would send.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from querycore.constants import LogicalOperator
from querycore.schema import RelationField, ScalarField
from querycore.types import RawFilterDict

from .operators import FilterOperator, filter_key
from .values import TypedValue

__all__ = (
    "Logical",
    "ScalarValue",
    "ScalarListValue",
    "RelationFilter",
    "RelationListFilter",
    "Raw",
    "FilterExpression",
    "match_all",
    "field_names",
)


class _ExpressionBase(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def children(self) -> Tuple["FilterExpression", ...]:
        return ()

    def walk(self) -> Iterator["FilterExpression"]:
        """Yield this node and all descendants, depth first."""
        yield self  # type: ignore[misc]
        for child in self.children():
            yield from child.walk()

    def to_raw(self, separator: str = "_") -> RawFilterDict:
        raise NotImplementedError


class Logical(_ExpressionBase):
    kind: Literal["logical"] = "logical"
    op: LogicalOperator
    operands: Tuple["FilterExpression", ...] = ()
    # True when the node combines the keys of one input mapping
    implicit: bool = False

    def children(self) -> Tuple["FilterExpression", ...]:
        return self.operands

    @property
    def is_match_all(self) -> bool:
        return self.op is LogicalOperator.AND and not self.operands

    def to_raw(self, separator: str = "_") -> RawFilterDict:
        raws = [child.to_raw(separator) for child in self.operands]
        if self.implicit:
            merged: Dict[str, Any] = {}
            for raw in raws:
                merged.update(raw)
            return merged
        if self.op is LogicalOperator.NOT and len(raws) == 1:
            return {self.op.value: raws[0]}
        return {self.op.value: raws}


class ScalarValue(_ExpressionBase):
    kind: Literal["scalar"] = "scalar"
    field: ScalarField
    operator: FilterOperator
    value: TypedValue

    def to_raw(self, separator: str = "_") -> RawFilterDict:
        return {filter_key(self.field, self.operator, separator): self.value.to_raw()}


class ScalarListValue(_ExpressionBase):
    kind: Literal["scalar_list"] = "scalar_list"
    field: ScalarField
    operator: FilterOperator
    values: Tuple[TypedValue, ...] = ()

    def to_raw(self, separator: str = "_") -> RawFilterDict:
        return {filter_key(self.field, self.operator, separator): [v.to_raw() for v in self.values]}


class RelationFilter(_ExpressionBase):
    kind: Literal["relation"] = "relation"
    field: RelationField
    operator: FilterOperator
    # None means the related record itself is compared with null
    nested: Optional["FilterExpression"] = None

    def children(self) -> Tuple["FilterExpression", ...]:
        return (self.nested,) if self.nested is not None else ()

    @property
    def is_null_check(self) -> bool:
        return self.nested is None

    def to_raw(self, separator: str = "_") -> RawFilterDict:
        key = filter_key(self.field, self.operator, separator)
        return {key: self.nested.to_raw(separator) if self.nested is not None else None}


class RelationListFilter(_ExpressionBase):
    kind: Literal["relation_list"] = "relation_list"
    field: RelationField
    operator: FilterOperator
    alternatives: Tuple["FilterExpression", ...] = ()

    def children(self) -> Tuple["FilterExpression", ...]:
        return self.alternatives

    def to_raw(self, separator: str = "_") -> RawFilterDict:
        key = filter_key(self.field, self.operator, separator)
        return {key: [alt.to_raw(separator) for alt in self.alternatives]}


class Raw(_ExpressionBase):
    kind: Literal["raw"] = "raw"
    key: str
    value: Any = None
    field: Optional[Union[ScalarField, RelationField]] = None
    operator: Optional[FilterOperator] = None

    def to_raw(self, separator: str = "_") -> RawFilterDict:
        return {self.key: self.value}


FilterExpression = Annotated[
    Union[Logical, ScalarValue, ScalarListValue, RelationFilter, RelationListFilter, Raw],
    Field(discriminator="kind"),
]

for _model in (Logical, RelationFilter, RelationListFilter):
    _model.model_rebuild()


def match_all() -> Logical:
    """Expression that matches every record (empty conjunction)."""
    return Logical(op=LogicalOperator.AND, operands=(), implicit=True)


def field_names(expression: "FilterExpression") -> List[str]:
    """Names of all fields referenced anywhere in the tree."""
    names: List[str] = []
    for node in expression.walk():
        field = getattr(node, "field", None)
        if field is not None:
            names.append(field.name)
    return names
