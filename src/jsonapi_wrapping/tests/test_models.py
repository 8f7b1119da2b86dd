import pytest

from ..exceptions import InvalidDeclarationError
from ..models import (
    CreationData,
    EntityData,
    ExpectedPropertyCollection,
    ResourceIdentifier,
    TypeDescriptor,
)


class TestTypeDescriptor:
    def test_defaults(self):
        type_ = TypeDescriptor("Article")
        assert type_.identifier == "Article"
        assert type_.available
        assert type_.referencable
        assert not type_.readable
        assert not type_.updatable
        assert not type_.creatable
        assert type_.get_readable_properties() == {}
        assert type_.get_updatable_properties(object()) == {}
        assert type_.get_initializable_properties() == {}

    def test_properties_are_frozen(self):
        readable = {"title": None}
        type_ = TypeDescriptor("Article", readable_properties=readable)
        readable["comments"] = "Comment"
        assert dict(type_.get_readable_properties()) == {"title": None}
        with pytest.raises(TypeError):
            type_.get_readable_properties()["comments"] = "Comment"  # type: ignore

    def test_empty_properties_still_grant_capability(self):
        type_ = TypeDescriptor("Article", readable_properties={}, updatable_properties={})
        assert type_.readable
        assert type_.updatable
        assert not type_.creatable

    def test_property_path(self):
        type_ = TypeDescriptor("Article", aliases={"author": ["writer", "name"], "self": []})
        assert type_.get_property_path("author") == ("writer", "name")
        assert type_.get_property_path("title") == ("title",)
        assert type_.get_property_path("self") == ()

    def test_default_aliases_are_not_shared_mutably(self):
        first = TypeDescriptor("Article")
        second = TypeDescriptor("Comment")
        assert dict(first.aliases) == {}
        with pytest.raises(TypeError):
            first.aliases["author"] = ("writer", "name")  # type: ignore
        assert second.get_property_path("author") == ("author",)

    def test_empty_identifier(self):
        with pytest.raises(InvalidDeclarationError):
            TypeDescriptor("")

    def test_string_alias(self):
        with pytest.raises(InvalidDeclarationError) as e:
            TypeDescriptor("Article", aliases={"author": "writer.name"})
        assert "author" in e.value.message


class TestEntityData:
    def test_property_names(self):
        data = EntityData(
            "Article",
            attributes={"title": "x"},
            to_one_relationships={"writer": None},
            to_many_relationships={"tags": [ResourceIdentifier("Tag", 1)]},
        )
        assert data.property_names == {"title", "writer", "tags"}

    def test_creation_data(self):
        data = CreationData("Article", attributes={"title": "x"})
        assert data.entity_id is None
        assert data.property_names == {"title"}


class TestExpectedPropertyCollection:
    def test_names(self):
        expected = ExpectedPropertyCollection(
            required_attributes=["title"],
            required_to_one_relationships={"writer": "Writer"},
            optional_attributes=["slug"],
            optional_to_many_relationships={"tags": "Tag"},
        )
        assert expected.required_names == {"title", "writer"}
        assert expected.allowed_names == {"title", "writer", "slug", "tags"}

    def test_overlap(self):
        with pytest.raises(InvalidDeclarationError):
            ExpectedPropertyCollection(required_attributes=["title"], optional_attributes=["title"])
        with pytest.raises(InvalidDeclarationError):
            ExpectedPropertyCollection(
                required_to_many_relationships={"tags": "Tag"},
                optional_to_many_relationships={"tags": "Tag"},
            )

    def test_id_both_required_and_optional(self):
        with pytest.raises(InvalidDeclarationError):
            ExpectedPropertyCollection(id_required=True, id_optional=True)
