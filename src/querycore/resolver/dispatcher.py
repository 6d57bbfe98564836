"""Field resolution dispatcher.

Decides per schema field whether a value can be read straight from an
already-fetched record or has to be fetched. Fetches are never performed
here: the dispatcher returns `DeferredFetch` descriptors whose `group_key`
lets a batch collector coalesce sibling fetches into one backend call.

    dispatcher = FieldResolutionDispatcher(compiler)
    result = dispatcher.resolve(record, user_model.get_field("posts"), user_model, {"first": 10})
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from querycore.exceptions import FieldNotFoundError, SchemaInvariantViolation
from querycore.logger import Logger
from querycore.querydsl.arguments import QueryArguments, extract_query_arguments
from querycore.querydsl.compiler import FilterCompiler
from querycore.schema import Model, Record, RelationField, ScalarField
from querycore.settings import QueryCoreSettings
from querycore.types import RawArguments

from .deferred import (
    CountFetch,
    Resolution,
    ResolvedValue,
    ScalarListFetch,
    ToManyFetch,
    ToOneFetch,
)

__all__ = ("FieldResolutionDispatcher",)


class FieldResolutionDispatcher:
    """Produce resolved values or deferred fetch descriptors for record fields.

    Attributes:
        compiler: Compiles `where` arguments found at relation call sites
    """

    def __init__(self, compiler: FilterCompiler, config: Optional[QueryCoreSettings] = None) -> None:
        self.compiler = compiler
        self.config = config
        self.logger = Logger(self.__class__.__name__)

    def resolve(
        self,
        record: Optional[Record],
        field: Union[ScalarField, RelationField],
        model: Model,
        pending_query_arguments: Optional[Union[QueryArguments, RawArguments]] = None,
    ) -> Resolution:
        """Resolve `field` of `record`.

        Args:
            record: Fetched record of `model`
            field: Field being selected
            model: Model the record belongs to
            pending_query_arguments: Arguments given at the call site, raw or already built

        Returns:
            `ResolvedValue` for non-list scalars, a deferred fetch descriptor otherwise

        Raises:
            SchemaInvariantViolation: If the record is missing or lacks a stored scalar value
        """
        record = self._unwrap(record, model, field)

        if isinstance(field, ScalarField):
            if field.is_list:
                return ScalarListFetch(model=model, field=field, parent_id=record.id)
            return ResolvedValue(value=self._read_scalar(record, field, model))

        query_arguments = self._query_arguments(field, pending_query_arguments)
        if field.is_list:
            return ToManyFetch(
                model=field.related_model,
                parent_model=model,
                field=field,
                parent_id=record.id,
                query_arguments=query_arguments,
            )
        return ToOneFetch(
            model=field.related_model,
            parent_model=model,
            field=field,
            parent_id=record.id,
            query_arguments=query_arguments,
        )

    def resolve_many(
        self,
        records: Iterable[Optional[Record]],
        field: Union[ScalarField, RelationField],
        model: Model,
        pending_query_arguments: Optional[Union[QueryArguments, RawArguments]] = None,
    ) -> List[Resolution]:
        """Resolve one field for sibling records.

        Call-site arguments are built once and shared, so every relation
        descriptor of the siblings lands in the same batch group.
        """
        if isinstance(field, RelationField):
            pending_query_arguments = self._query_arguments(field, pending_query_arguments)
        results = [self.resolve(record, field, model, pending_query_arguments) for record in records]
        self.logger.debug("Resolved %s.%s for %d sibling records", model.name, field.name, len(results))
        return results

    def resolve_record(
        self,
        record: Optional[Record],
        model: Model,
        selection: Optional[Mapping[str, Optional[RawArguments]]] = None,
    ) -> Dict[str, Resolution]:
        """Resolve the selected visible fields of a record by name.

        Args:
            selection: Field name to call-site arguments; defaults to every visible field
        """
        if selection is None:
            selection = {f.name: None for f in model.visible_fields}
        out: Dict[str, Resolution] = {}
        for name, arguments in selection.items():
            field = model.get_field(name)
            if field.is_hidden:
                raise FieldNotFoundError("Field is not visible", model=model.name, field=name)
            out[name] = self.resolve(record, field, model, arguments)
        return out

    def count(
        self,
        model: Model,
        pending_query_arguments: Optional[Union[QueryArguments, RawArguments]] = None,
    ) -> CountFetch:
        """Deferred count of records of `model` matching the arguments."""
        if pending_query_arguments is not None and not isinstance(pending_query_arguments, QueryArguments):
            pending_query_arguments = QueryArguments.from_raw(model, pending_query_arguments, self.compiler, self.config)
        return CountFetch(model=model, query_arguments=pending_query_arguments)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _query_arguments(
        self,
        field: RelationField,
        pending: Optional[Union[QueryArguments, RawArguments]],
    ) -> Optional[QueryArguments]:
        if pending is None or isinstance(pending, QueryArguments):
            return pending
        return extract_query_arguments(field, pending, self.compiler, self.config)

    @staticmethod
    def _unwrap(record: Any, model: Model, field: Union[ScalarField, RelationField]) -> Record:
        if record is None:
            raise SchemaInvariantViolation(
                "Resolved record was None",
                model=model.name,
                field=field.name,
            )
        if isinstance(record, Record):
            return record
        raise SchemaInvariantViolation(
            "Expected a fetched record",
            model=model.name,
            field=field.name,
            got=type(record).__name__,
        )

    @staticmethod
    def _read_scalar(record: Record, field: ScalarField, model: Model) -> Any:
        if field.name not in record.data:
            if field.name == model.id_field_name:
                return record.id
            raise SchemaInvariantViolation(
                "Record is missing a declared field",
                model=model.name,
                field=field.name,
                record_id=record.id,
            )
        return record.data[field.name]
