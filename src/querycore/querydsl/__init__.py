"""Query DSL module.

Exports the filter compiler and the pieces it is built from: the operator
registry, the value coercion engine, the filter expression tree and query
arguments.
"""

from .arguments import OrderBy, QueryArguments, connection_arguments, extract_query_arguments
from .coercion import ValueCoercer, coerce, coerce_for_field, value_coercer
from .compiler import CompileMode, FilterCompiler
from .expressions import (
    FilterExpression,
    Logical,
    Raw,
    RelationFilter,
    RelationListFilter,
    ScalarListValue,
    ScalarValue,
    match_all,
)
from .operators import FieldFilter, FilterOperator, FilterOperatorRegistry

__all__ = (
    "CompileMode",
    "FilterCompiler",
    "FilterOperator",
    "FilterOperatorRegistry",
    "FieldFilter",
    "ValueCoercer",
    "value_coercer",
    "coerce",
    "coerce_for_field",
    "FilterExpression",
    "Logical",
    "ScalarValue",
    "ScalarListValue",
    "RelationFilter",
    "RelationListFilter",
    "Raw",
    "match_all",
    "OrderBy",
    "QueryArguments",
    "connection_arguments",
    "extract_query_arguments",
)
