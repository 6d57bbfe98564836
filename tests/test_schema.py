"""Tests for schema models: fields, models, schema linking and records."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from querycore.constants import TypeIdentifier
from querycore.exceptions import (
    FieldNotFoundError,
    ModelNotFoundError,
    SchemaError,
    SchemaInvariantViolation,
)
from querycore.schema import Model, Record, RelationField, ScalarField, Schema


def _id():
    return ScalarField(name="id", type_identifier=TypeIdentifier.ID, is_unique=True)


class TestFields:
    def test_scalar_defaults(self):
        field = ScalarField(name="age", type_identifier=TypeIdentifier.INT)
        assert field.kind == "scalar"
        assert field.is_scalar and not field.is_relation
        assert not field.is_list and not field.is_required and not field.is_unique
        assert field.is_visible
        assert field.enum_values == ()

    def test_type_identifier_from_string(self):
        field = ScalarField(name="age", type_identifier="Int")
        assert field.type_identifier is TypeIdentifier.INT

    def test_hidden_field_is_not_visible(self):
        field = ScalarField(name="password", type_identifier=TypeIdentifier.STRING, is_hidden=True)
        assert not field.is_visible

    def test_fields_are_frozen(self):
        field = ScalarField(name="age", type_identifier=TypeIdentifier.INT)
        with pytest.raises(PydanticValidationError):
            field.name = "other"

    def test_relation_never_unique(self):
        field = RelationField(name="posts", related_model_name="Post", is_list=True)
        assert field.is_relation and not field.is_scalar
        assert field.is_unique is False

    def test_unlinked_relation_raises(self):
        field = RelationField(name="posts", related_model_name="Post", is_list=True)
        with pytest.raises(SchemaInvariantViolation):
            _ = field.related_model


class TestModel:
    def test_find_and_get_field(self, user_model):
        assert user_model.find_field("age").name == "age"
        assert user_model.find_field("missing") is None
        with pytest.raises(FieldNotFoundError) as exc:
            user_model.get_field("missing")
        assert exc.value.model == "User"

    def test_field_groups(self, user_model):
        scalar_names = {f.name for f in user_model.scalar_fields}
        assert "nicknames" in scalar_names
        assert "nicknames" not in {f.name for f in user_model.scalar_non_list_fields}
        assert {f.name for f in user_model.relation_fields} == {"posts", "profile"}

    def test_unique_fields_are_visible_scalars(self, user_model):
        assert {f.name for f in user_model.unique_fields} == {"id", "email"}

    def test_visible_fields_exclude_hidden(self, user_model):
        assert "password" not in {f.name for f in user_model.visible_fields}

    def test_id_field(self, user_model):
        assert user_model.id_field.name == "id"
        assert user_model.has_visible_id_field

    def test_model_without_id(self):
        model = Model(name="Log", fields=(ScalarField(name="line", type_identifier="String"),), id_field_name=None)
        assert model.id_field is None
        assert not model.has_visible_id_field


class TestSchema:
    def test_relations_linked(self, schema):
        posts = schema.get_model("User").get_field("posts")
        assert posts.related_model is schema.get_model("Post")

    def test_contains(self, schema):
        assert "User" in schema
        assert "Nope" not in schema

    def test_get_unknown_model(self, schema):
        with pytest.raises(ModelNotFoundError):
            schema.get_model("Nope")

    def test_relation_to_unknown_model(self):
        user = Model(name="User", fields=(_id(), RelationField(name="team", related_model_name="Team")))
        with pytest.raises(ModelNotFoundError):
            Schema(models=(user,))

    def test_duplicate_model(self):
        with pytest.raises(SchemaError):
            Schema(models=(Model(name="A", fields=(_id(),)), Model(name="A", fields=(_id(),))))

    def test_duplicate_field(self):
        with pytest.raises(SchemaError):
            Schema(models=(Model(name="A", fields=(_id(), _id())),))

    def test_missing_identity_field(self):
        with pytest.raises(SchemaError):
            Schema(models=(Model(name="A", fields=(ScalarField(name="x", type_identifier="Int"),)),))

    def test_enum_field_without_values(self):
        status = ScalarField(name="status", type_identifier=TypeIdentifier.ENUM)
        with pytest.raises(SchemaError) as exc:
            Schema(models=(Model(name="A", fields=(_id(), status)),))
        assert exc.value.field == "status"

    def test_self_relation(self):
        node = Model(
            name="Node",
            fields=(_id(), RelationField(name="parent", related_model_name="Node")),
        )
        schema = Schema(models=(node,))
        assert schema.get_model("Node").get_field("parent").related_model.name == "Node"


class TestRecord:
    def test_defaults(self):
        record = Record(id="u1")
        assert record.data == {}
        assert record.type_name is None

    def test_requires_id(self):
        with pytest.raises(PydanticValidationError):
            Record(data={})
