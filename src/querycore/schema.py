"""Pydantic schemas describing models, fields and fetched records."""

from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from .constants import TypeIdentifier
from .exceptions import (
    FieldNotFoundError,
    ModelNotFoundError,
    SchemaError,
    SchemaInvariantViolation,
)


class ScalarField(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"
    name: str = Field(..., description="Field name as exposed to clients.")
    type_identifier: TypeIdentifier = Field(..., description="Primitive type tag.")
    is_list: bool = False
    is_required: bool = False
    is_unique: bool = False
    is_hidden: bool = False
    enum_values: Tuple[str, ...] = Field((), description="Allowed names for Enum fields.")

    @property
    def is_scalar(self) -> bool:
        return True

    @property
    def is_relation(self) -> bool:
        return False

    @property
    def is_visible(self) -> bool:
        return not self.is_hidden


class RelationField(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["relation"] = "relation"
    name: str = Field(..., description="Field name as exposed to clients.")
    related_model_name: str = Field(..., description="Name of the model on the other side.")
    relation_name: Optional[str] = Field(None, description="Relation descriptor shared by both sides.")
    is_list: bool = False
    is_required: bool = False
    is_hidden: bool = False

    _related_model: Optional["Model"] = PrivateAttr(default=None)

    # Compare declared attributes only; the linked model may point back at this field
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, RelationField):
            return NotImplemented
        return self.model_dump() == other.model_dump()

    def __hash__(self) -> int:
        return hash((self.name, self.related_model_name, self.relation_name, self.is_list))

    @property
    def is_scalar(self) -> bool:
        return False

    @property
    def is_relation(self) -> bool:
        return True

    @property
    def is_visible(self) -> bool:
        return not self.is_hidden

    @property
    def is_unique(self) -> bool:
        return False

    @property
    def related_model(self) -> "Model":
        """Target model, available once the field belongs to a `Schema`."""
        if self._related_model is None:
            raise SchemaInvariantViolation(
                "Relation field is not linked to a schema",
                field=self.name,
                related_model=self.related_model_name,
            )
        return self._related_model


SchemaField = Annotated[Union[ScalarField, RelationField], Field(discriminator="kind")]


class Model(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    fields: Tuple[SchemaField, ...] = ()
    id_field_name: Optional[str] = Field("id", description="Identity field, None for models without one.")

    def find_field(self, name: str) -> Optional[Union[ScalarField, RelationField]]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def get_field(self, name: str) -> Union[ScalarField, RelationField]:
        field = self.find_field(name)
        if field is None:
            raise FieldNotFoundError("Field not declared on model", model=self.name, field=name)
        return field

    @property
    def id_field(self) -> Optional[ScalarField]:
        if self.id_field_name is None:
            return None
        field = self.find_field(self.id_field_name)
        return field if isinstance(field, ScalarField) else None

    @property
    def has_visible_id_field(self) -> bool:
        return self.id_field is not None and self.id_field.is_visible

    @property
    def scalar_fields(self) -> Tuple[ScalarField, ...]:
        return tuple(f for f in self.fields if isinstance(f, ScalarField))

    @property
    def scalar_non_list_fields(self) -> Tuple[ScalarField, ...]:
        return tuple(f for f in self.scalar_fields if not f.is_list)

    @property
    def relation_fields(self) -> Tuple[RelationField, ...]:
        return tuple(f for f in self.fields if isinstance(f, RelationField))

    @property
    def unique_fields(self) -> Tuple[ScalarField, ...]:
        return tuple(f for f in self.scalar_non_list_fields if f.is_unique and f.is_visible)

    @property
    def visible_fields(self) -> Tuple[Union[ScalarField, RelationField], ...]:
        return tuple(f for f in self.fields if f.is_visible)


class Schema(BaseModel):
    """Immutable set of models with relation fields linked to their targets."""

    model_config = ConfigDict(frozen=True)

    models: Tuple[Model, ...] = ()

    _by_name: Dict[str, Model] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def link_models(self) -> "Schema":
        by_name: Dict[str, Model] = {}
        for model in self.models:
            if model.name in by_name:
                raise SchemaError("Duplicate model name", model=model.name)
            names = [f.name for f in model.fields]
            if len(names) != len(set(names)):
                raise SchemaError("Duplicate field name", model=model.name)
            if model.id_field_name is not None and model.id_field is None:
                raise SchemaError("Identity field must be a declared scalar field", model=model.name, field=model.id_field_name)
            for field in model.scalar_fields:
                if field.type_identifier is TypeIdentifier.ENUM and not field.enum_values:
                    raise SchemaError("Enum field declares no values", model=model.name, field=field.name)
            by_name[model.name] = model
        for model in self.models:
            for field in model.relation_fields:
                target = by_name.get(field.related_model_name)
                if target is None:
                    raise ModelNotFoundError(
                        "Relation points to an unknown model",
                        model=model.name,
                        field=field.name,
                        related_model=field.related_model_name,
                    )
                field._related_model = target
        self._by_name = by_name
        return self

    def get_model(self, name: str) -> Model:
        model = self._by_name.get(name)
        if model is None:
            raise ModelNotFoundError("Model not found", model=name)
        return model

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


class Record(BaseModel):
    """An already-fetched record: identity plus stored scalar data by field name."""

    id: str = Field(..., description="Identity value of the record.")
    data: Dict[str, Any] = Field(default_factory=dict, description="Stored scalar values by field name.")
    type_name: Optional[str] = Field(None, description="Concrete model name when known.")

