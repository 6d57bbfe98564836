"""Filter operator registry.

Maps raw filter keys such as `age_gt`, `name_contains` or `posts_some` to the
field they address and the operator they denote. Legal suffixes are
enumerated per scalar type and per relation shape; every model gets a lookup
table built once from those catalogues, so a key either matches exactly one
field/operator combination or none. Field names that themselves contain the
separator (`created_at_gt`) resolve correctly because lookups are exact
matches against the table rather than string splitting.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Mapping, NamedTuple, Optional, Tuple, Union

from querycore.constants import LOGICAL_KEYS, TypeIdentifier
from querycore.exceptions import UnknownFilterKey
from querycore.logger import Logger
from querycore.schema import Model, RelationField, ScalarField, Schema
from querycore.settings import settings as api_settings
from querycore.utils import validate_key_separator

__all__ = (
    "FilterOperator",
    "FieldFilter",
    "FilterOperatorRegistry",
    "SCALAR_OPERATORS",
    "LIST_VALUE_OPERATORS",
    "filter_key",
)


class FilterOperator(str, Enum):
    EQUALS = "equals"
    NOT = "not"
    IN = "in"
    NOT_IN = "not_in"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    NOT_STARTS_WITH = "not_starts_with"
    ENDS_WITH = "ends_with"
    NOT_ENDS_WITH = "not_ends_with"
    # relation operators
    EVERY = "every"
    SOME = "some"
    NONE = "none"
    IS = "is"
    IS_NOT = "is_not"

    @property
    def suffix(self) -> str:
        """Key suffix without separator; empty for the bare-field-name operators."""
        if self in (FilterOperator.EQUALS, FilterOperator.IS):
            return ""
        if self is FilterOperator.IS_NOT:
            return "not"
        return self.value

    @property
    def is_relation_operator(self) -> bool:
        return self in _RELATION_OPERATORS


_RELATION_OPERATORS = frozenset(
    {FilterOperator.EVERY, FilterOperator.SOME, FilterOperator.NONE, FilterOperator.IS, FilterOperator.IS_NOT}
)

# Operators whose value is a list of items rather than a single item
LIST_VALUE_OPERATORS = frozenset({FilterOperator.IN, FilterOperator.NOT_IN})

_EQUALITY = (FilterOperator.EQUALS, FilterOperator.NOT)
_MEMBERSHIP = (FilterOperator.IN, FilterOperator.NOT_IN)
_ORDERING = (FilterOperator.LT, FilterOperator.LTE, FilterOperator.GT, FilterOperator.GTE)
_TEXT = (
    FilterOperator.CONTAINS,
    FilterOperator.NOT_CONTAINS,
    FilterOperator.STARTS_WITH,
    FilterOperator.NOT_STARTS_WITH,
    FilterOperator.ENDS_WITH,
    FilterOperator.NOT_ENDS_WITH,
)

SCALAR_OPERATORS: Mapping[TypeIdentifier, Tuple[FilterOperator, ...]] = {
    TypeIdentifier.STRING: _EQUALITY + _MEMBERSHIP + _ORDERING + _TEXT,
    TypeIdentifier.ID: _EQUALITY + _MEMBERSHIP + _ORDERING + _TEXT,
    TypeIdentifier.INT: _EQUALITY + _MEMBERSHIP + _ORDERING,
    TypeIdentifier.FLOAT: _EQUALITY + _MEMBERSHIP + _ORDERING,
    TypeIdentifier.DATETIME: _EQUALITY + _MEMBERSHIP + _ORDERING,
    TypeIdentifier.BOOLEAN: _EQUALITY,
    TypeIdentifier.ENUM: _EQUALITY + _MEMBERSHIP,
    TypeIdentifier.JSON: _EQUALITY,
}

# Scalar list fields compare the whole stored list
_SCALAR_LIST_OPERATORS: Tuple[FilterOperator, ...] = _EQUALITY

_TO_MANY_OPERATORS = (FilterOperator.EVERY, FilterOperator.SOME, FilterOperator.NONE)
_TO_ONE_OPERATORS = (FilterOperator.IS, FilterOperator.IS_NOT)


def filter_key(field: Union[ScalarField, RelationField], operator: FilterOperator, separator: str = "_") -> str:
    """Build the raw key addressing `field` with `operator`."""
    suffix = operator.suffix
    return f"{field.name}{separator}{suffix}" if suffix else field.name


class FieldFilter(NamedTuple):
    """Result of a registry lookup."""

    field: Optional[Union[ScalarField, RelationField]]
    operator: FilterOperator


class FilterOperatorRegistry:
    """Resolve raw filter keys against models of a schema.

    Tables are built eagerly for every model of the schema and never change
    afterwards, so lookups are safe to run concurrently.
    """

    def __init__(self, schema: Schema, separator: Optional[str] = None) -> None:
        self.schema = schema
        self.separator = validate_key_separator(separator or api_settings.FILTER_KEY_SEPARATOR)
        self.logger = Logger(self.__class__.__name__)
        self._tables: Dict[str, Dict[str, FieldFilter]] = {
            model.name: self._build_table(model) for model in schema.models
        }
        self.logger.debug("Built filter tables for %d models", len(self._tables))

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------
    @staticmethod
    def operators_for(field: Union[ScalarField, RelationField]) -> Tuple[FilterOperator, ...]:
        """Return the operators a field accepts, in declaration order."""
        if field.is_hidden:
            return ()
        if isinstance(field, RelationField):
            return _TO_MANY_OPERATORS if field.is_list else _TO_ONE_OPERATORS
        if field.is_list:
            return _SCALAR_LIST_OPERATORS
        return SCALAR_OPERATORS[field.type_identifier]

    @staticmethod
    def default_operator(field: Union[ScalarField, RelationField]) -> FilterOperator:
        """Operator implied by a bare field name."""
        if isinstance(field, RelationField):
            return FilterOperator.SOME if field.is_list else FilterOperator.IS
        return FilterOperator.EQUALS

    def key_for(self, field: Union[ScalarField, RelationField], operator: FilterOperator) -> str:
        """Inverse of `lookup`: the raw key addressing `field` with `operator`.

        A to-many relation looked up by its bare name maps back to the explicit
        `_some` key.
        """
        return filter_key(field, operator, self.separator)

    def keys(self, model: Model) -> Iterable[str]:
        return self._table(model).keys()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def lookup(self, model: Model, raw_key: str) -> FieldFilter:
        """Resolve `raw_key` on `model`.

        Raises:
            UnknownFilterKey: If no field/suffix combination matches, or the key
                is a logical combinator (those are handled by the compiler)
        """
        if raw_key in LOGICAL_KEYS:
            raise UnknownFilterKey(
                "Logical combinators are not field filters",
                key=raw_key,
                model=model.name,
            )
        found = self._table(model).get(raw_key)
        if found is None:
            raise UnknownFilterKey("Unknown filter key", key=raw_key, model=model.name)
        return found

    def _table(self, model: Model) -> Dict[str, FieldFilter]:
        table = self._tables.get(model.name)
        if table is None:
            # models outside the schema are resolved but not cached
            return self._build_table(model)
        return table

    def _build_table(self, model: Model) -> Dict[str, FieldFilter]:
        table: Dict[str, FieldFilter] = {}
        for field in model.fields:
            for operator in self.operators_for(field):
                key = filter_key(field, operator, self.separator)
                if key in table and table[key].field is not field:
                    self.logger.warning(
                        "Filter key %r on model %s is ambiguous; keeping %s",
                        key,
                        model.name,
                        table[key].field.name,
                    )
                    continue
                table[key] = FieldFilter(field, operator)
            if isinstance(field, RelationField) and field.is_list and not field.is_hidden:
                table.setdefault(field.name, FieldFilter(field, self.default_operator(field)))
        return table
