"""Exceptions raised by querycore.

Filter compilation errors abort the whole compile; resolution errors are
scoped to the field and record that produced them.
"""

from typing import Any, Dict


class QueryCoreError(Exception):
    """Base exception for all querycore errors.

    Attributes:
        message: Error message
        details: Additional error context as key-value pairs
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        """Initialize exception with message and additional details.

        Args:
            message: Human-readable error message
            **kwargs: Additional context (e.g., key, model, field)
        """
        self.message = message
        self.details: Dict[str, Any] = kwargs
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.details:
            return self.message

        details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        if self.message:
            return f"{self.message} ({details_str})"
        return details_str

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"

    def __getattr__(self, name: str) -> Any:
        # Expose details as attributes, e.g. err.key, err.model
        details = self.__dict__.get("details") or {}
        if name in details:
            return details[name]
        raise AttributeError(name)


# Filter compilation
class FilterError(QueryCoreError):
    """Base exception for errors while compiling a filter input."""


class UnknownFilterKey(FilterError):
    """Raised when a filter key matches no field/operator combination of a model.

    Example:
        >>> raise UnknownFilterKey("Unknown filter key", key="age_between", model="User")
    """


class MalformedFilterShape(FilterError):
    """Raised when a filter value has a shape no compile rule accepts.

    Example:
        >>> raise MalformedFilterShape("Unsupported filter value", key="name", reason="mapping on scalar field")
    """


# Validation
class ValidationError(QueryCoreError):
    """Raised when an input value fails validation."""


class CoercionError(ValidationError):
    """Raised when a raw value cannot be converted to a field's declared type.

    Example:
        >>> raise CoercionError("Cannot coerce value", field="age", expected_type="Int", raw_value="12")
    """


class InvalidArgumentError(ValidationError):
    """Raised when a query argument (orderBy, skip, first, ...) is invalid.

    Example:
        >>> raise InvalidArgumentError("Must be non-negative", argument="skip", value=-1)
    """


# Schema
class SchemaError(QueryCoreError):
    """Base exception for schema registry lookups."""


class ModelNotFoundError(SchemaError):
    """Raised when a model name is not part of the schema."""


class FieldNotFoundError(SchemaError):
    """Raised when a field name is not declared on a model."""


class SchemaInvariantViolation(QueryCoreError):
    """Raised when data contradicts the schema in a way that indicates a defect.

    Example:
        >>> raise SchemaInvariantViolation("Record is missing a declared field", model="User", field="name")
    """


# Configuration
class ConfigurationError(QueryCoreError):
    """Raised when configuration is invalid or missing."""


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid.

    Example:
        >>> raise InvalidConfigError("Invalid config value", config_key="FILTER_KEY_SEPARATOR", value="")
    """


# Resolution
class FetchError(QueryCoreError):
    """Raised for a single deferred fetch whose batched backend call failed.

    Example:
        >>> raise FetchError("Batched fetch failed", group_key=("to_many", "User", "posts"), parent_id="u1")
    """
