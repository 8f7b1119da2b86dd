import pytest

from ..models import TypeDescriptor
from ..registry import PrefilledTypeRegistry
from ..type_accessor import TypeAccessor
from .testing import Article


class TestTypeAccessor:
    @pytest.fixture
    def writer_type(self):
        return TypeDescriptor("Writer", readable_properties={"name": None})

    @pytest.fixture
    def article_type(self):
        properties = {
            "title": None,
            "writer": "Writer",
            "comments": "Comment",
            "tags": "Tag",
            "related": "Article",
        }
        return TypeDescriptor(
            "Article",
            readable_properties=properties,
            updatable_properties=properties,
            initializable_properties={"title": None, "writer": "Writer"},
        )

    @pytest.fixture
    def type_accessor(self, article_type, writer_type):
        return TypeAccessor(
            PrefilledTypeRegistry(
                [
                    article_type,
                    writer_type,
                    TypeDescriptor("Comment", available=False),
                    TypeDescriptor("Tag", referencable=False),
                ]
            )
        )

    def test_readable(self, type_accessor, article_type, writer_type):
        properties = type_accessor.get_accessible_readable_properties(article_type)
        assert list(properties) == ["title", "writer", "related"]
        assert properties["title"] is None
        assert properties["writer"] is writer_type
        assert properties["related"] is article_type

    def test_updatable(self, type_accessor, article_type):
        article = Article(title="Hello")
        properties = type_accessor.get_accessible_updatable_properties(article_type, article)
        assert list(properties) == ["title", "writer", "related"]
        assert article == Article(title="Hello")

    def test_initializable(self, type_accessor, article_type, writer_type):
        properties = type_accessor.get_accessible_initializable_properties(article_type)
        assert dict(properties) == {"title": None, "writer": writer_type}

    def test_unknown_target(self, writer_type):
        type_accessor = TypeAccessor(PrefilledTypeRegistry([writer_type]))
        type_ = TypeDescriptor("Article", readable_properties={"title": None, "writer": "Author"})
        assert list(type_accessor.get_accessible_readable_properties(type_)) == ["title"]

    def test_is_accessible_target(self, type_accessor, writer_type):
        assert type_accessor.is_accessible_target(writer_type)
        assert not type_accessor.is_accessible_target(None)
        assert not type_accessor.is_accessible_target(TypeDescriptor("Comment", available=False))
        assert not type_accessor.is_accessible_target(TypeDescriptor("Tag", referencable=False))
