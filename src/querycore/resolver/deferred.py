"""Deferred fetch descriptors.

A descriptor stands for a fetch that has not happened yet. Descriptors sharing
a `group_key` are coalesced by the batch collector into one backend call over
the set of their parent ids; results are then handed back per parent id.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from querycore.querydsl.arguments import QueryArguments
from querycore.schema import Model, RelationField, ScalarField

__all__ = (
    "GroupKey",
    "ResolvedValue",
    "ScalarListFetch",
    "ToOneFetch",
    "ToManyFetch",
    "CountFetch",
    "DeferredFetch",
    "Resolution",
)

# (kind, owning model name, field name, query-arguments identity)
GroupKey = Tuple[str, str, str, str]

_NO_ARGUMENTS = "null"


def _arguments_identity(query_arguments: Optional[QueryArguments]) -> str:
    if query_arguments is None or query_arguments.is_empty:
        return _NO_ARGUMENTS
    return query_arguments.identity()


class ResolvedValue(BaseModel):
    """A field value that was available without fetching."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = None


class _DeferredBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def group_key(self) -> GroupKey:
        raise NotImplementedError


class ScalarListFetch(_DeferredBase):
    """Values of a scalar list field, stored apart from the record."""

    kind: Literal["scalar_list"] = "scalar_list"
    model: Model
    field: ScalarField
    parent_id: str

    @property
    def group_key(self) -> GroupKey:
        return (self.kind, self.model.name, self.field.name, _NO_ARGUMENTS)


class ToOneFetch(_DeferredBase):
    """At most one related record per parent.

    `model` is the related model, `parent_model` the model declaring `field`.
    """

    kind: Literal["to_one"] = "to_one"
    model: Model
    parent_model: Model
    field: RelationField
    parent_id: str
    query_arguments: Optional[QueryArguments] = None

    @property
    def group_key(self) -> GroupKey:
        return (self.kind, self.parent_model.name, self.field.name, _arguments_identity(self.query_arguments))


class ToManyFetch(_DeferredBase):
    """Zero or more related records per parent, honouring the query arguments."""

    kind: Literal["to_many"] = "to_many"
    model: Model
    parent_model: Model
    field: RelationField
    parent_id: str
    query_arguments: Optional[QueryArguments] = None

    @property
    def group_key(self) -> GroupKey:
        return (self.kind, self.parent_model.name, self.field.name, _arguments_identity(self.query_arguments))


class CountFetch(_DeferredBase):
    """Number of records of a model matching the query arguments."""

    kind: Literal["count"] = "count"
    model: Model
    query_arguments: Optional[QueryArguments] = None

    @property
    def parent_id(self) -> None:
        return None

    @property
    def group_key(self) -> GroupKey:
        return (self.kind, self.model.name, "", _arguments_identity(self.query_arguments))


DeferredFetch = Union[ScalarListFetch, ToOneFetch, ToManyFetch, CountFetch]

Resolution = Union[ResolvedValue, DeferredFetch]
