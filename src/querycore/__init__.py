"""
querycore: compile untyped API filter input into typed filter expressions and
dispatch per-field resolution of fetched records into values or batched
relation fetches.
"""

from .abc import RecordFetcher
from .querydsl import CompileMode, FilterCompiler, FilterOperatorRegistry, QueryArguments
from .resolver import BatchCollector, FieldResolutionDispatcher
from .schema import Model, Record, RelationField, ScalarField, Schema

__version__ = "0.1.0"

__all__ = [
    "FilterCompiler",
    "FilterOperatorRegistry",
    "CompileMode",
    "QueryArguments",
    "FieldResolutionDispatcher",
    "BatchCollector",
    "RecordFetcher",
    "Model",
    "Schema",
    "ScalarField",
    "RelationField",
    "Record",
]
