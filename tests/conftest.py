"""Pytest configuration and fixtures for querycore tests."""

import os
import sys

import pytest
from dotenv import load_dotenv

from querycore.constants import TypeIdentifier
from querycore.querydsl.compiler import FilterCompiler
from querycore.querydsl.operators import FilterOperatorRegistry
from querycore.resolver.batch import BatchCollector
from querycore.resolver.dispatcher import FieldResolutionDispatcher
from querycore.schema import Model, Record, RelationField, ScalarField, Schema
from querycore.settings import QueryCoreSettings

sys.path.insert(0, os.path.dirname(__file__))

from fakes.memory_fetcher import InMemoryFetcher  # noqa: E402

# Load environment variables
load_dotenv()


def _id() -> ScalarField:
    return ScalarField(name="id", type_identifier=TypeIdentifier.ID, is_required=True, is_unique=True)


@pytest.fixture(scope="session")
def schema() -> Schema:
    """Blog schema: users with posts and a profile, posts with comments."""
    user = Model(
        name="User",
        fields=(
            _id(),
            ScalarField(name="email", type_identifier=TypeIdentifier.STRING, is_unique=True),
            ScalarField(name="name", type_identifier=TypeIdentifier.STRING),
            ScalarField(name="age", type_identifier=TypeIdentifier.INT),
            ScalarField(name="score", type_identifier=TypeIdentifier.FLOAT),
            ScalarField(name="is_active", type_identifier=TypeIdentifier.BOOLEAN),
            ScalarField(name="created_at", type_identifier=TypeIdentifier.DATETIME),
            ScalarField(name="role", type_identifier=TypeIdentifier.ENUM, enum_values=("ADMIN", "MEMBER")),
            ScalarField(name="meta", type_identifier=TypeIdentifier.JSON),
            ScalarField(name="nicknames", type_identifier=TypeIdentifier.STRING, is_list=True),
            ScalarField(name="password", type_identifier=TypeIdentifier.STRING, is_hidden=True),
            RelationField(name="posts", related_model_name="Post", relation_name="PostAuthor", is_list=True),
            RelationField(name="profile", related_model_name="Profile", relation_name="UserProfile"),
        ),
    )
    post = Model(
        name="Post",
        fields=(
            _id(),
            ScalarField(name="title", type_identifier=TypeIdentifier.STRING),
            ScalarField(name="tags", type_identifier=TypeIdentifier.STRING),
            ScalarField(name="views", type_identifier=TypeIdentifier.INT),
            ScalarField(name="published", type_identifier=TypeIdentifier.BOOLEAN),
            RelationField(name="author", related_model_name="User", relation_name="PostAuthor", is_required=True),
            RelationField(name="comments", related_model_name="Comment", relation_name="PostComments", is_list=True),
        ),
    )
    comment = Model(
        name="Comment",
        fields=(
            _id(),
            ScalarField(name="text", type_identifier=TypeIdentifier.STRING),
            RelationField(name="post", related_model_name="Post", relation_name="PostComments"),
        ),
    )
    profile = Model(
        name="Profile",
        fields=(
            _id(),
            ScalarField(name="bio", type_identifier=TypeIdentifier.STRING),
        ),
    )
    return Schema(models=(user, post, comment, profile))


@pytest.fixture(scope="session")
def user_model(schema):
    return schema.get_model("User")


@pytest.fixture(scope="session")
def post_model(schema):
    return schema.get_model("Post")


@pytest.fixture
def config():
    return QueryCoreSettings(_env_file=None)


@pytest.fixture
def registry(schema, config):
    return FilterOperatorRegistry(schema, separator=config.FILTER_KEY_SEPARATOR)


@pytest.fixture
def compiler(schema, config):
    return FilterCompiler(schema, config=config)


@pytest.fixture
def lenient_compiler(schema):
    return FilterCompiler(schema, config=QueryCoreSettings(_env_file=None, STRICT_FILTERS=False))


@pytest.fixture
def dispatcher(compiler, config):
    return FieldResolutionDispatcher(compiler, config=config)


@pytest.fixture
def user_records():
    return [
        Record(id=f"u{i}", data={"id": f"u{i}", "name": f"User {i}", "age": 20 + i}, type_name="User")
        for i in range(1, 4)
    ]


@pytest.fixture
def fetcher(user_records):
    """In-memory backend seeded with users, posts and profiles."""
    backend = InMemoryFetcher()
    for record in user_records:
        backend.add("User", record)
    posts = [
        Record(id="p1", data={"title": "Hello", "views": 10, "published": True}),
        Record(id="p2", data={"title": "GraphQL batching", "views": 50, "published": True}),
        Record(id="p3", data={"title": "Draft", "views": 0, "published": False}),
        Record(id="p4", data={"title": "Another hello", "views": 30, "published": True}),
    ]
    for post in posts:
        backend.add("Post", post)
    backend.link("User", "posts", "u1", ["p1", "p2", "p3"])
    backend.link("User", "posts", "u2", ["p4"])
    backend.add("Profile", Record(id="pr1", data={"bio": "Writer"}))
    backend.link("User", "profile", "u1", ["pr1"])
    backend.set_list("User", "nicknames", "u1", ["ace", "al"])
    backend.set_list("User", "nicknames", "u2", ["bee"])
    return backend


@pytest.fixture
def collector(fetcher, config):
    return BatchCollector(fetcher, config=config)
