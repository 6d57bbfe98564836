"""Filter expression compiler.

Compiles untyped, nested filter input into a `FilterExpression` tree by
recursive descent over each key/value pair of the input mapping. Keys are
resolved through the `FilterOperatorRegistry`, values are converted through
the value coercion engine, and relation filters recurse into the related
model so nested keys always resolve against the model they belong to.

Typical usage:

    compiler = FilterCompiler(schema)
    expr = compiler.compile({"AND": [{"age_gt": 5}, {"age_lt": 10}]}, schema.get_model("User"))

Compilation is all-or-nothing: any unknown key, coercion failure or
malformed shape aborts the whole call.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from querycore.constants import LOGICAL_KEYS, LogicalOperator
from querycore.exceptions import MalformedFilterShape, UnknownFilterKey
from querycore.logger import Logger
from querycore.schema import Model, RelationField, ScalarField, Schema
from querycore.settings import QueryCoreSettings
from querycore.settings import settings as api_settings
from querycore.types import RawFilterInput

from .coercion import ValueCoercer, value_coercer
from .expressions import (
    FilterExpression,
    Logical,
    Raw,
    RelationFilter,
    RelationListFilter,
    ScalarListValue,
    ScalarValue,
)
from .operators import LIST_VALUE_OPERATORS, FilterOperator, FilterOperatorRegistry
from .raw import RawAbsent, RawMapping, RawPrimitive, RawSequence, RawShape, classify

__all__ = (
    "CompileMode",
    "FilterCompiler",
)


class CompileMode(str, Enum):
    NORMAL = "normal"
    # Subscription filters: additionally accept the nested-scope node key
    ALTERNATE = "alternate"


class FilterCompiler:
    """Compile raw filter mappings against the models of one schema.

    The compiler holds no per-call state; one instance can serve concurrent
    compilations.

    Attributes:
        schema: Schema whose models filters are compiled against
        registry: Operator registry built for the schema
        strict: Raise on unclassifiable shapes instead of emitting `Raw` nodes
        node_key: Nested-scope key honoured in `CompileMode.ALTERNATE`
    """

    def __init__(
        self,
        schema: Schema,
        registry: Optional[FilterOperatorRegistry] = None,
        coercer: Optional[ValueCoercer] = None,
        config: Optional[QueryCoreSettings] = None,
    ) -> None:
        config = config or api_settings
        self.schema = schema
        self.registry = registry or FilterOperatorRegistry(schema, separator=config.FILTER_KEY_SEPARATOR)
        self.coercer = coercer or value_coercer
        self.strict = config.STRICT_FILTERS
        self.node_key = config.SUBSCRIPTION_NODE_KEY
        self.logger = Logger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def compile(
        self,
        raw_input: Optional[RawFilterInput],
        model: Union[Model, str],
        mode: CompileMode = CompileMode.NORMAL,
    ) -> FilterExpression:
        """Compile `raw_input` against `model`.

        Args:
            raw_input: Nested filter mapping; `None` compiles to match-everything
            model: Model (or model name) the top-level keys belong to
            mode: `CompileMode.ALTERNATE` enables the nested-scope node key

        Returns:
            The filter expression tree

        Raises:
            UnknownFilterKey: A key matches no field/operator of its model
            CoercionError: A value cannot be converted to its field's type
            MalformedFilterShape: A value has a shape no rule accepts (strict mode)
        """
        if isinstance(model, str):
            model = self.schema.get_model(model)
        if raw_input is None:
            raw_input = {}
        shape = classify(raw_input)
        if not isinstance(shape, RawMapping):
            raise MalformedFilterShape(
                "Filter input must be a mapping",
                key=None,
                reason=f"got {type(raw_input).__name__}",
            )
        return self._compile_mapping(shape, model, CompileMode(mode))

    def compile_unique(self, raw_input: RawFilterInput, model: Union[Model, str]) -> ScalarValue:
        """Compile a unique-record selector such as `{"email": "a@b.c"}`.

        The input must name exactly one unique, visible scalar field of the model.
        """
        if isinstance(model, str):
            model = self.schema.get_model(model)
        shape = classify(raw_input)
        if not isinstance(shape, RawMapping):
            raise MalformedFilterShape("Unique selector must be a mapping", key=None, reason=type(raw_input).__name__)
        provided = [(k, v) for k, v in shape.items() if not isinstance(classify(v), RawAbsent)]
        if len(provided) != 1:
            raise MalformedFilterShape(
                "Unique selector must provide exactly one field",
                key=",".join(k for k, _ in provided) or None,
                reason=f"{len(provided)} fields provided",
            )
        key, value = provided[0]
        field = next((f for f in model.unique_fields if f.name == key), None)
        if field is None:
            raise UnknownFilterKey("Not a unique field", key=key, model=model.name)
        return ScalarValue(
            field=field,
            operator=FilterOperator.EQUALS,
            value=self.coercer.coerce(value, field.type_identifier, False, field_name=field.name, enum_values=field.enum_values),
        )

    # ------------------------------------------------------------------
    # Recursive descent
    # ------------------------------------------------------------------
    def _compile_mapping(self, mapping: RawMapping, model: Model, mode: CompileMode) -> FilterExpression:
        expressions: List[FilterExpression] = []
        for key, value in mapping.items():
            expr = self._compile_entry(key, classify(value), model, mode)
            if expr is not None:
                expressions.append(expr)
        if len(expressions) == 1:
            return expressions[0]
        return Logical(op=LogicalOperator.AND, operands=tuple(expressions), implicit=True)

    def _compile_entry(
        self, key: str, value: RawShape, model: Model, mode: CompileMode
    ) -> Optional[FilterExpression]:
        if isinstance(value, RawAbsent):
            return None

        if key in LOGICAL_KEYS:
            return self._compile_logical(LogicalOperator(key), key, value, model, mode)
        if mode is CompileMode.ALTERNATE and key == self.node_key:
            return self._compile_logical(LogicalOperator.AND, key, value, model, mode)

        field, operator = self.registry.lookup(model, key)

        if isinstance(value, RawMapping):
            if isinstance(field, RelationField):
                nested = self._compile_mapping(value, field.related_model, mode)
                return RelationFilter(field=field, operator=operator, nested=nested)
            return self._unclassified(key, value, field, operator, "mapping value on a scalar field")

        if isinstance(value, RawSequence) and value.all_mappings:
            if isinstance(field, RelationField):
                alternatives = tuple(self._compile_mapping(item, field.related_model, mode) for item in value.items)
                return RelationListFilter(field=field, operator=operator, alternatives=alternatives)
            return self._unclassified(key, value, field, operator, "list of mappings on a scalar field")

        if isinstance(value, RawSequence) and value.all_primitives and isinstance(field, ScalarField):
            if operator not in LIST_VALUE_OPERATORS and not field.is_list:
                return self._unclassified(key, value, field, operator, f"list value for operator '{operator.value}'")
            return ScalarListValue(field=field, operator=operator, values=self._coerce_items(field, value))

        if isinstance(value, RawPrimitive) and isinstance(field, ScalarField):
            if operator in LIST_VALUE_OPERATORS and not value.is_null:
                return self._unclassified(key, value, field, operator, f"operator '{operator.value}' expects a list")
            typed = self.coercer.coerce(
                value.value,
                field.type_identifier,
                False,
                field_name=field.name,
                enum_values=field.enum_values,
            )
            return ScalarValue(field=field, operator=operator, value=typed)

        if isinstance(value, RawPrimitive) and isinstance(field, RelationField):
            return RelationFilter(field=field, operator=operator, nested=self._identity_filter(field, value))

        return self._unclassified(key, value, field, operator, "unsupported value shape")

    def _compile_logical(
        self, op: LogicalOperator, key: str, value: RawShape, model: Model, mode: CompileMode
    ) -> Logical:
        if isinstance(value, RawMapping):
            operands: Tuple[FilterExpression, ...] = (self._compile_mapping(value, model, mode),)
        elif isinstance(value, RawSequence) and (value.is_empty or value.all_mappings):
            operands = tuple(self._compile_mapping(item, model, mode) for item in value.items)
        else:
            raise MalformedFilterShape(
                "Logical combinator expects a mapping or a list of mappings",
                key=key,
                reason=type(value).__name__,
            )
        return Logical(op=op, operands=operands)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _coerce_items(self, field: ScalarField, value: RawSequence):
        typed = self.coercer.coerce(
            [item.value for item in value.items],
            field.type_identifier,
            True,
            field_name=field.name,
            enum_values=field.enum_values,
        )
        return typed.values  # type: ignore[union-attr]

    def _identity_filter(self, field: RelationField, value: RawPrimitive) -> Optional[FilterExpression]:
        """Nested filter addressing the related record by identity; None for null."""
        if value.is_null:
            return None
        related = field.related_model
        id_field = related.id_field
        if id_field is None:
            raise MalformedFilterShape(
                "Related model has no identity field to compare with",
                key=field.name,
                reason=f"model {related.name} has no id field",
            )
        typed = self.coercer.coerce(value.value, id_field.type_identifier, False, field_name=id_field.name)
        return ScalarValue(field=id_field, operator=FilterOperator.EQUALS, value=typed)

    def _unclassified(
        self,
        key: str,
        value: RawShape,
        field: Optional[Union[ScalarField, RelationField]],
        operator: Optional[FilterOperator],
        reason: str,
    ) -> Raw:
        if self.strict:
            raise MalformedFilterShape("Filter value has an unsupported shape", key=key, reason=reason)
        self.logger.defect("Unclassified filter shape compiled to Raw node", key=key, reason=reason)
        return Raw(key=key, value=_unwrap(value), field=field, operator=operator)


def _unwrap(shape: RawShape) -> Any:
    if isinstance(shape, RawPrimitive):
        return shape.value
    if isinstance(shape, RawMapping):
        return shape.entries
    if isinstance(shape, RawSequence):
        return shape.original
    return getattr(shape, "value", None)
