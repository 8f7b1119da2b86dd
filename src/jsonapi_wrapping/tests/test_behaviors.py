import datetime
import decimal

import pytest

from ..behaviors import (
    AttributeConstructorBehavior,
    AttributePathConfig,
    BehaviorBuilder,
    BehaviorVariant,
    ConstructorArgumentConfig,
    IdentifierConstructorBehavior,
    PathAttributeSetBehavior,
    PathToManyRelationshipSetBehavior,
    PathToOneRelationshipSetBehavior,
    ToManyRelationshipConstructorBehavior,
    ToManySetConfig,
    ToOneRelationshipConstructorBehavior,
    ToOneSetConfig,
    assign_path,
    validate_attribute_value,
)
from ..defaults import DefaultPropertyAccessorImpl
from ..exceptions import (
    EntityNotFoundError,
    InvalidAttributeValueError,
    InvalidDeclarationError,
    InvalidPathError,
    InvalidRelationshipError,
    MissingPropertyError,
)
from ..models import CreationData, EntityData, RelationshipType, ResourceIdentifier, TypeDescriptor
from .testing import Article, PlainEntityFetcher, Tag, Writer


@pytest.fixture
def property_accessor():
    return DefaultPropertyAccessorImpl()


@pytest.fixture
def writer_type():
    return TypeDescriptor(
        "Writer",
        readable_properties={"name": None},
        access_condition=lambda writer: writer.name != "banned",
    )


@pytest.fixture
def tag_type():
    return TypeDescriptor("Tag", readable_properties={"name": None})


@pytest.fixture
def writers():
    return {1: Writer(name="John", id=1), 2: Writer(name="banned", id=2)}


@pytest.fixture
def tags():
    return {
        1: Tag(name="python", id=1),
        2: Tag(name="php", archived=True, id=2),
        3: Tag(name="sql", id=3),
    }


@pytest.fixture
def entity_fetcher(writers, tags):
    return PlainEntityFetcher({"Writer": writers, "Tag": tags})


def not_archived(tag):
    return not tag.archived


class TestAssignPath:
    def test_assign(self, property_accessor):
        article = Article(title="Hello", writer=Writer(name="John"))
        assign_path(property_accessor, article, ["writer", "name"], "Jane")
        assert article.writer.name == "Jane"
        assign_path(property_accessor, article, ["title"], "Bye")
        assert article.title == "Bye"

    def test_through_non_object(self, property_accessor):
        article = Article(title="Hello")
        with pytest.raises(InvalidPathError):
            assign_path(property_accessor, article, ["writer", "name"], "Jane")
        with pytest.raises(InvalidPathError):
            assign_path(property_accessor, article, ["title", "length"], 3)


def test_validate_attribute_value():
    for value in [
        None,
        "x",
        1,
        1.5,
        True,
        decimal.Decimal("1.5"),
        datetime.date(2020, 1, 1),
        ["a", 1, None],
        {"a": [1, {"b": "c"}]},
    ]:
        assert validate_attribute_value("value", value) == value

    for value in [object(), {1: "a"}, b"bytes", ["a", object()]]:
        with pytest.raises(InvalidAttributeValueError) as e:
            validate_attribute_value("value", value)
        assert e.value.name == "value"


class TestAttributeConstructorBehavior:
    def test_from_request(self):
        behavior = AttributeConstructorBehavior("title")
        assert behavior.get_arguments(CreationData("Article", attributes={"title": "Hello"})) == {
            "title": "Hello"
        }
        assert behavior.get_required_attributes() == ["title"]
        assert behavior.get_optional_attributes() == []

    def test_argument_name(self):
        behavior = AttributeConstructorBehavior("headline", argument_name="title")
        assert behavior.get_arguments(
            CreationData("Article", attributes={"headline": "Hello"})
        ) == {"title": "Hello"}

    def test_fallback(self):
        behavior = AttributeConstructorBehavior("title", fallback=lambda data: "Untitled")
        assert behavior.get_arguments(CreationData("Article")) == {"title": "Untitled"}
        assert behavior.get_arguments(CreationData("Article", attributes={"title": "Hi"})) == {
            "title": "Hi"
        }
        assert behavior.get_required_attributes() == []
        assert behavior.get_optional_attributes() == ["title"]

    def test_missing(self):
        behavior = AttributeConstructorBehavior("title")
        with pytest.raises(MissingPropertyError) as e:
            behavior.get_arguments(CreationData("Article"))
        assert e.value.name == "title"


class TestIdentifierConstructorBehavior:
    def test_required(self):
        behavior = IdentifierConstructorBehavior()
        assert behavior.is_id_required()
        assert not behavior.is_id_optional()
        assert behavior.get_arguments(CreationData("Article", entity_id=42)) == {"id": 42}
        with pytest.raises(MissingPropertyError):
            behavior.get_arguments(CreationData("Article"))

    def test_fallback(self):
        behavior = IdentifierConstructorBehavior("key", fallback=lambda data: 7)
        assert not behavior.is_id_required()
        assert behavior.is_id_optional()
        assert behavior.get_arguments(CreationData("Article")) == {"key": 7}
        assert behavior.get_arguments(CreationData("Article", entity_id=42)) == {"key": 42}


class TestRelationshipConstructorBehavior:
    def test_to_one(self, writer_type, entity_fetcher, writers):
        behavior = ToOneRelationshipConstructorBehavior(
            "writer", "author", writer_type, [], entity_fetcher
        )
        data = CreationData(
            "Article", to_one_relationships={"author": ResourceIdentifier("Writer", 1)}
        )
        assert behavior.get_arguments(data) == {"writer": writers[1]}
        assert behavior.get_required_to_one_relationships() == {"author": "Writer"}
        assert behavior.get_optional_to_one_relationships() == {}

    def test_to_one_null(self, writer_type, entity_fetcher):
        behavior = ToOneRelationshipConstructorBehavior(
            "writer", "writer", writer_type, [], entity_fetcher
        )
        data = CreationData("Article", to_one_relationships={"writer": None})
        assert behavior.get_arguments(data) == {"writer": None}

    def test_to_one_restricted_by_type(self, writer_type, entity_fetcher):
        behavior = ToOneRelationshipConstructorBehavior(
            "writer", "writer", writer_type, [], entity_fetcher
        )
        data = CreationData(
            "Article", to_one_relationships={"writer": ResourceIdentifier("Writer", 2)}
        )
        with pytest.raises(EntityNotFoundError) as e:
            behavior.get_arguments(data)
        assert e.value.id == 2

    def test_to_one_wrong_type(self, writer_type, entity_fetcher):
        behavior = ToOneRelationshipConstructorBehavior(
            "writer", "writer", writer_type, [], entity_fetcher
        )
        data = CreationData("Article", to_one_relationships={"writer": ResourceIdentifier("Tag", 1)})
        with pytest.raises(InvalidRelationshipError) as e:
            behavior.get_arguments(data)
        assert e.value.expected == "Writer"
        assert e.value.actual == "Tag"

    def test_to_one_missing(self, writer_type, entity_fetcher):
        behavior = ToOneRelationshipConstructorBehavior(
            "writer", "writer", writer_type, [], entity_fetcher
        )
        with pytest.raises(MissingPropertyError):
            behavior.get_arguments(CreationData("Article"))

    def test_to_many(self, tag_type, entity_fetcher, tags):
        behavior = ToManyRelationshipConstructorBehavior(
            "tags", "tags", tag_type, [not_archived], entity_fetcher
        )
        data = CreationData(
            "Article",
            to_many_relationships={
                "tags": [ResourceIdentifier("Tag", 3), ResourceIdentifier("Tag", 1)]
            },
        )
        arguments = behavior.get_arguments(data)
        assert [tag.id for tag in arguments["tags"]] == [3, 1]
        assert behavior.get_required_to_many_relationships() == {"tags": "Tag"}

    def test_to_many_restricted_by_condition(self, tag_type, entity_fetcher):
        behavior = ToManyRelationshipConstructorBehavior(
            "tags", "tags", tag_type, [not_archived], entity_fetcher
        )
        data = CreationData(
            "Article",
            to_many_relationships={
                "tags": [ResourceIdentifier("Tag", 1), ResourceIdentifier("Tag", 2)]
            },
        )
        with pytest.raises(EntityNotFoundError) as e:
            behavior.get_arguments(data)
        assert e.value.id == 2

    def test_to_many_fallback(self, tag_type, entity_fetcher):
        behavior = ToManyRelationshipConstructorBehavior(
            "tags", "tags", tag_type, [], entity_fetcher, fallback=lambda data: []
        )
        assert behavior.get_arguments(CreationData("Article")) == {"tags": []}
        assert behavior.get_required_to_many_relationships() == {}
        assert behavior.get_optional_to_many_relationships() == {"tags": "Tag"}


class TestPathAttributeSetBehavior:
    def test_execute(self, property_accessor):
        behavior = PathAttributeSetBehavior(
            "author", Article, [], ["writer", "name"], property_accessor
        )
        article = Article(title="Hello", writer=Writer(name="John"))
        assert behavior.execute_behavior(article, EntityData("Article", {"author": "Jane"})) == []
        assert article.writer.name == "Jane"

    def test_normalized(self, property_accessor):
        behavior = PathAttributeSetBehavior(
            "slug", Article, [], ["slug"], property_accessor, normalizer=str.lower
        )
        article = Article(title="Hello")
        assert behavior.execute_behavior(
            article, EntityData("Article", {"slug": "Hello-World"})
        ) == ["slug"]
        assert article.slug == "hello-world"
        assert behavior.execute_behavior(
            article, EntityData("Article", {"slug": "hello-again"})
        ) == []
        assert article.slug == "hello-again"

    def test_normalized_to_another_type(self, property_accessor):
        behavior = PathAttributeSetBehavior(
            "slug", Article, [], ["slug"], property_accessor, normalizer=float
        )
        article = Article(title="Hello")
        assert behavior.execute_behavior(article, EntityData("Article", {"slug": 1})) == ["slug"]
        assert article.slug == 1.0
        assert isinstance(article.slug, float)
        assert behavior.execute_behavior(article, EntityData("Article", {"slug": 2.0})) == []

    def test_prepare(self, property_accessor):
        behavior = PathAttributeSetBehavior(
            "author",
            Article,
            [],
            ["writer", "name"],
            property_accessor,
            normalizer=str.strip,
        )
        writer = Writer(name="John")
        article = Article(title="Hello", writer=writer)
        prepared = behavior.prepare(article, EntityData("Article", {"author": " Jane "}))
        assert writer.name == "John"
        assert prepared.target is writer
        assert prepared.name == "name"
        assert prepared.value == "Jane"
        assert prepared.apply() == ["author"]
        assert writer.name == "Jane"

        optional = PathAttributeSetBehavior(
            "title", Article, [], ["title"], property_accessor, optional=True
        )
        assert optional.prepare(article, EntityData("Article")) is None

    def test_prepare_through_non_object(self, property_accessor):
        behavior = PathAttributeSetBehavior(
            "author", Article, [], ["writer", "name"], property_accessor
        )
        with pytest.raises(InvalidPathError):
            behavior.prepare(Article(title="Hello"), EntityData("Article", {"author": "Jane"}))

    def test_missing(self, property_accessor):
        article = Article(title="Hello")
        required = PathAttributeSetBehavior("title", Article, [], ["title"], property_accessor)
        with pytest.raises(MissingPropertyError):
            required.execute_behavior(article, EntityData("Article"))
        optional = PathAttributeSetBehavior(
            "title", Article, [], ["title"], property_accessor, optional=True
        )
        assert optional.execute_behavior(article, EntityData("Article")) == []
        assert article.title == "Hello"

    def test_invalid_value(self, property_accessor):
        behavior = PathAttributeSetBehavior("title", Article, [], ["title"], property_accessor)
        article = Article(title="Hello")
        with pytest.raises(InvalidAttributeValueError):
            behavior.execute_behavior(article, EntityData("Article", {"title": object()}))
        assert article.title == "Hello"

    def test_constraints(self, property_accessor):
        required = PathAttributeSetBehavior("title", Article, [], ["title"], property_accessor)
        assert required.get_required_attributes() == ["title"]
        assert required.get_optional_attributes() == []
        optional = PathAttributeSetBehavior(
            "title", Article, [], ["title"], property_accessor, optional=True
        )
        assert optional.get_required_attributes() == []
        assert optional.get_optional_attributes() == ["title"]

    def test_is_applicable(self, property_accessor):
        behavior = PathAttributeSetBehavior("title", Article, [], ["title"], property_accessor)
        assert behavior.is_applicable(EntityData("Article", {"title": "x"}))
        assert not behavior.is_applicable(EntityData("Article", {"slug": "x"}))

    def test_description(self, property_accessor):
        behavior = PathAttributeSetBehavior(
            "author", Article, [], ["writer", "name"], property_accessor, optional=True
        )
        assert behavior.description == (
            "Allows an attribute `author` to be present in the request body, but does not require it. "
            "The attribute will be stored in Article.writer.name. "
            "The entity does not need to match additional conditions beside the ones defined by its type."
        )
        behavior = PathAttributeSetBehavior(
            "title", Article, [lambda article: True], ["title"], property_accessor
        )
        assert behavior.description == (
            "Requires an attribute `title` to be present in the request body. "
            "The attribute will be stored in Article.title. "
            "The entity must match additional conditions beside the ones defined by its type."
        )


class TestPathRelationshipSetBehavior:
    def test_to_one(self, property_accessor, writer_type, entity_fetcher, writers):
        behavior = PathToOneRelationshipSetBehavior(
            "writer", Article, [], [], writer_type, ["writer"], property_accessor, entity_fetcher
        )
        article = Article(title="Hello")
        data = EntityData("Article", to_one_relationships={"writer": ResourceIdentifier("Writer", 1)})
        assert behavior.execute_behavior(article, data) == []
        assert article.writer is writers[1]

        data = EntityData("Article", to_one_relationships={"writer": None})
        assert behavior.execute_behavior(article, data) == []
        assert article.writer is None

    def test_to_one_restricted(self, property_accessor, writer_type, entity_fetcher):
        behavior = PathToOneRelationshipSetBehavior(
            "writer", Article, [], [], writer_type, ["writer"], property_accessor, entity_fetcher
        )
        writer = Writer(name="John")
        article = Article(title="Hello", writer=writer)
        data = EntityData("Article", to_one_relationships={"writer": ResourceIdentifier("Writer", 2)})
        with pytest.raises(EntityNotFoundError):
            behavior.execute_behavior(article, data)
        assert article.writer is writer

    def test_to_one_prepare(self, property_accessor, writer_type, entity_fetcher, writers):
        behavior = PathToOneRelationshipSetBehavior(
            "writer", Article, [], [], writer_type, ["writer"], property_accessor, entity_fetcher
        )
        article = Article(title="Hello")
        data = EntityData("Article", to_one_relationships={"writer": ResourceIdentifier("Writer", 1)})
        prepared = behavior.prepare(article, data)
        assert article.writer is None
        assert prepared.value is writers[1]
        assert prepared.apply() == []
        assert article.writer is writers[1]

    def test_to_many(self, property_accessor, tag_type, entity_fetcher, tags):
        behavior = PathToManyRelationshipSetBehavior(
            "tags",
            Article,
            [],
            [not_archived],
            tag_type,
            ["tags"],
            property_accessor,
            entity_fetcher,
            optional=True,
        )
        article = Article(title="Hello")
        assert behavior.execute_behavior(article, EntityData("Article")) == []
        assert article.tags == []

        data = EntityData(
            "Article",
            to_many_relationships={
                "tags": [ResourceIdentifier("Tag", 1), ResourceIdentifier("Tag", 3)]
            },
        )
        assert behavior.execute_behavior(article, data) == []
        assert article.tags == [tags[1], tags[3]]

        data = EntityData(
            "Article",
            to_many_relationships={
                "tags": [ResourceIdentifier("Tag", 2), ResourceIdentifier("Tag", 3)]
            },
        )
        with pytest.raises(EntityNotFoundError):
            behavior.execute_behavior(article, data)
        assert article.tags == [tags[1], tags[3]]

    def test_missing(self, property_accessor, tag_type, entity_fetcher):
        behavior = PathToManyRelationshipSetBehavior(
            "tags", Article, [], [], tag_type, ["tags"], property_accessor, entity_fetcher
        )
        with pytest.raises(MissingPropertyError):
            behavior.execute_behavior(Article(title="Hello"), EntityData("Article"))
        assert behavior.get_required_to_many_relationships() == {"tags": "Tag"}
        assert behavior.get_optional_to_many_relationships() == {}

    def test_description(self, property_accessor, tag_type, entity_fetcher):
        behavior = PathToManyRelationshipSetBehavior(
            "tags", Article, [], [not_archived], tag_type, ["tags"], property_accessor, entity_fetcher
        )
        assert behavior.description == (
            "Requires a to-many relationship `tags` to be present in the request body. "
            "The relationship will be stored in Article.tags. "
            "The related entities must match additional conditions beside the ones defined by `Tag`. "
            "The entity does not need to match additional conditions beside the ones defined by its type."
        )


class TestBehaviorBuilder:
    def test_attribute_path(self, property_accessor):
        builder = BehaviorBuilder(AttributePathConfig(property_accessor, optional=True))
        assert builder.variant is BehaviorVariant.ATTRIBUTE_PATH
        title = builder.create("title", ["title"], Article)
        author = builder.create("author", ["writer", "name"], Article)
        assert isinstance(title, PathAttributeSetBehavior)
        assert isinstance(author, PathAttributeSetBehavior)
        assert author.path == ("writer", "name")
        assert author.optional

    def test_constructor_argument(self, writer_type, entity_fetcher):
        builder = BehaviorBuilder(ConstructorArgumentConfig())
        assert builder.variant is BehaviorVariant.CONSTRUCTOR_ARGUMENT
        title = builder.create("title", ["title"], Article)
        assert isinstance(title, AttributeConstructorBehavior)
        assert title.argument_name == "title"

        builder = BehaviorBuilder(
            ConstructorArgumentConfig(
                argument_name="writer",
                relationship=RelationshipType.TO_ONE,
                entity_fetcher=entity_fetcher,
            )
        )
        author = builder.create("author", ["writer"], Article, writer_type)
        assert isinstance(author, ToOneRelationshipConstructorBehavior)
        assert author.argument_name == "writer"
        assert author.get_required_to_one_relationships() == {"author": "Writer"}

        builder = BehaviorBuilder(
            ConstructorArgumentConfig(
                relationship=RelationshipType.TO_MANY, entity_fetcher=entity_fetcher
            )
        )
        assert isinstance(
            builder.create("tags", ["tags"], Article, writer_type),
            ToManyRelationshipConstructorBehavior,
        )

    def test_relationship_set(self, property_accessor, tag_type, writer_type, entity_fetcher):
        builder = BehaviorBuilder(ToOneSetConfig(property_accessor, entity_fetcher))
        assert builder.variant is BehaviorVariant.TO_ONE_SET
        assert isinstance(
            builder.create("writer", ["writer"], Article, writer_type),
            PathToOneRelationshipSetBehavior,
        )

        builder = BehaviorBuilder(
            ToManySetConfig(property_accessor, entity_fetcher, relationship_conditions=[not_archived])
        )
        assert builder.variant is BehaviorVariant.TO_MANY_SET
        tags = builder.create("tags", ["tags"], Article, tag_type)
        assert isinstance(tags, PathToManyRelationshipSetBehavior)
        assert tags.relationship_conditions == [not_archived]

    def test_invalid_path(self, property_accessor):
        builder = BehaviorBuilder(AttributePathConfig(property_accessor))
        with pytest.raises(InvalidDeclarationError):
            builder.create("title", [], Article)
        with pytest.raises(InvalidDeclarationError):
            builder.create("title", "title", Article)

    def test_missing_relationship_type(self, property_accessor, entity_fetcher):
        builder = BehaviorBuilder(ToOneSetConfig(property_accessor, entity_fetcher))
        with pytest.raises(InvalidDeclarationError):
            builder.create("writer", ["writer"], Article)

    def test_missing_entity_fetcher(self, writer_type):
        builder = BehaviorBuilder(ConstructorArgumentConfig(relationship=RelationshipType.TO_ONE))
        with pytest.raises(InvalidDeclarationError):
            builder.create("writer", ["writer"], Article, writer_type)

    def test_unsupported_config(self):
        with pytest.raises(TypeError):
            BehaviorBuilder(object())  # type: ignore
