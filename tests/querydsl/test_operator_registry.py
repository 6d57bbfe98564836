"""Tests for the filter operator registry."""

import pytest

from querycore.constants import TypeIdentifier
from querycore.exceptions import InvalidConfigError, UnknownFilterKey
from querycore.querydsl.operators import (
    SCALAR_OPERATORS,
    FieldFilter,
    FilterOperator,
    FilterOperatorRegistry,
    filter_key,
)
from querycore.schema import Model, ScalarField, Schema


class TestFilterOperator:
    def test_suffixes(self):
        assert FilterOperator.EQUALS.suffix == ""
        assert FilterOperator.IS.suffix == ""
        assert FilterOperator.IS_NOT.suffix == "not"
        assert FilterOperator.NOT_IN.suffix == "not_in"
        assert FilterOperator.SOME.suffix == "some"

    def test_relation_operators(self):
        assert FilterOperator.EVERY.is_relation_operator
        assert FilterOperator.IS_NOT.is_relation_operator
        assert not FilterOperator.GT.is_relation_operator

    def test_boolean_supports_equality_only(self):
        assert SCALAR_OPERATORS[TypeIdentifier.BOOLEAN] == (FilterOperator.EQUALS, FilterOperator.NOT)


class TestLookup:
    @pytest.mark.parametrize(
        "key, field, operator",
        [
            ("age", "age", FilterOperator.EQUALS),
            ("age_gt", "age", FilterOperator.GT),
            ("age_not_in", "age", FilterOperator.NOT_IN),
            ("name_contains", "name", FilterOperator.CONTAINS),
            ("name_not_starts_with", "name", FilterOperator.NOT_STARTS_WITH),
            ("email_ends_with", "email", FilterOperator.ENDS_WITH),
            ("is_active_not", "is_active", FilterOperator.NOT),
            ("created_at_gte", "created_at", FilterOperator.GTE),
            ("role_in", "role", FilterOperator.IN),
            ("nicknames", "nicknames", FilterOperator.EQUALS),
            ("posts_some", "posts", FilterOperator.SOME),
            ("posts_every", "posts", FilterOperator.EVERY),
            ("posts_none", "posts", FilterOperator.NONE),
            ("posts", "posts", FilterOperator.SOME),
            ("profile", "profile", FilterOperator.IS),
            ("profile_not", "profile", FilterOperator.IS_NOT),
        ],
    )
    def test_known_keys(self, registry, user_model, key, field, operator):
        found = registry.lookup(user_model, key)
        assert isinstance(found, FieldFilter)
        assert found.field.name == field
        assert found.operator is operator

    @pytest.mark.parametrize(
        "key",
        [
            "age_between",
            "missing",
            "is_active_gt",
            "nicknames_contains",
            "role_contains",
            "meta_in",
            "profile_some",
            "posts_is",
            "password",
            "password_contains",
        ],
    )
    def test_unknown_keys(self, registry, user_model, key):
        with pytest.raises(UnknownFilterKey) as exc:
            registry.lookup(user_model, key)
        assert exc.value.key == key
        assert exc.value.model == "User"

    @pytest.mark.parametrize("key", ["AND", "OR", "NOT"])
    def test_logical_keys_are_not_field_filters(self, registry, user_model, key):
        with pytest.raises(UnknownFilterKey):
            registry.lookup(user_model, key)

    def test_keys_resolve_per_model(self, registry, post_model):
        assert registry.lookup(post_model, "author").operator is FilterOperator.IS
        with pytest.raises(UnknownFilterKey):
            registry.lookup(post_model, "age_gt")

    def test_lookup_is_deterministic(self, registry, user_model):
        assert registry.lookup(user_model, "age_lt") == registry.lookup(user_model, "age_lt")


class TestCatalogue:
    def test_operators_for_hidden_field(self, registry, user_model):
        assert registry.operators_for(user_model.get_field("password")) == ()

    def test_operators_for_to_many(self, registry, user_model):
        assert registry.operators_for(user_model.get_field("posts")) == (
            FilterOperator.EVERY,
            FilterOperator.SOME,
            FilterOperator.NONE,
        )

    def test_default_operator(self, registry, user_model):
        assert registry.default_operator(user_model.get_field("posts")) is FilterOperator.SOME
        assert registry.default_operator(user_model.get_field("profile")) is FilterOperator.IS
        assert registry.default_operator(user_model.get_field("age")) is FilterOperator.EQUALS

    def test_key_for_is_inverse_of_lookup(self, registry, user_model):
        for key in registry.keys(user_model):
            field, operator = registry.lookup(user_model, key)
            rebuilt = registry.key_for(field, operator)
            assert registry.lookup(user_model, rebuilt) == (field, operator)

    def test_filter_key(self, user_model):
        assert filter_key(user_model.get_field("age"), FilterOperator.GT) == "age_gt"
        assert filter_key(user_model.get_field("age"), FilterOperator.EQUALS) == "age"
        assert filter_key(user_model.get_field("age"), FilterOperator.GT, "__") == "age__gt"


class TestSeparator:
    def test_custom_separator(self, schema, user_model):
        registry = FilterOperatorRegistry(schema, separator="__")
        assert registry.lookup(user_model, "created_at__gt").operator is FilterOperator.GT
        with pytest.raises(UnknownFilterKey):
            registry.lookup(user_model, "age_gt")

    def test_invalid_separator(self, schema):
        with pytest.raises(InvalidConfigError):
            FilterOperatorRegistry(schema, separator=" ")

    def test_ambiguous_key_keeps_first_field(self):
        model = Model(
            name="Item",
            fields=(
                ScalarField(name="id", type_identifier=TypeIdentifier.ID),
                ScalarField(name="price", type_identifier=TypeIdentifier.INT),
                ScalarField(name="price_gt", type_identifier=TypeIdentifier.INT),
            ),
        )
        registry = FilterOperatorRegistry(Schema(models=(model,)))
        found = registry.lookup(model, "price_gt")
        assert found.field.name == "price"
        assert found.operator is FilterOperator.GT
