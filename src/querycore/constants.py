"""
Shared constants for schema type identifiers and logical filter combinators.
"""

from enum import Enum


class TypeIdentifier(str, Enum):
    STRING = "String"
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    ID = "ID"
    DATETIME = "DateTime"
    JSON = "Json"
    ENUM = "Enum"


class LogicalOperator(str, Enum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


LOGICAL_KEYS = frozenset(op.value for op in LogicalOperator)


class OrderDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"
