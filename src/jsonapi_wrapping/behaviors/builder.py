import dataclasses
import enum
import typing

from ..exceptions import InvalidDeclarationError
from ..interfaces import EntityFetcher, PropertyAccessor
from ..models import CreationData, RelationshipType, TypeDescriptor
from .attribute import AttributeConstructorBehavior, PathAttributeSetBehavior
from .base import ConstructorBehavior, PropertySetBehavior
from .relationship import (
    PathToManyRelationshipSetBehavior,
    PathToOneRelationshipSetBehavior,
    ToManyRelationshipConstructorBehavior,
    ToOneRelationshipConstructorBehavior,
)


class BehaviorVariant(enum.Enum):
    ATTRIBUTE_PATH = "attribute-path"
    """Sets an attribute at the end of a property path"""
    CONSTRUCTOR_ARGUMENT = "constructor-argument"
    """Supplies a constructor argument from an attribute or relationship"""
    TO_ONE_SET = "to-one-set"
    """Sets a to-one relationship at the end of a property path"""
    TO_MANY_SET = "to-many-set"
    """Sets a to-many relationship at the end of a property path"""


@dataclasses.dataclass(frozen=True)
class AttributePathConfig:
    variant: typing.ClassVar[BehaviorVariant] = BehaviorVariant.ATTRIBUTE_PATH

    property_accessor: PropertyAccessor
    entity_conditions: typing.Sequence[typing.Any] = ()
    optional: bool = False
    normalizer: typing.Optional[typing.Callable[[typing.Any], typing.Any]] = None


@dataclasses.dataclass(frozen=True)
class ConstructorArgumentConfig:
    variant: typing.ClassVar[BehaviorVariant] = BehaviorVariant.CONSTRUCTOR_ARGUMENT

    argument_name: typing.Optional[str] = None
    """
    The name of the constructor argument.  Defaults to the property name.
    """
    fallback: typing.Optional[typing.Callable[[CreationData], typing.Any]] = None
    relationship: typing.Optional[RelationshipType] = None
    """
    The kind of relationship the argument is taken from, :py:const:`None` for an attribute.
    """
    entity_fetcher: typing.Optional[EntityFetcher] = None
    relationship_conditions: typing.Sequence[typing.Any] = ()


@dataclasses.dataclass(frozen=True)
class ToOneSetConfig:
    variant: typing.ClassVar[BehaviorVariant] = BehaviorVariant.TO_ONE_SET

    property_accessor: PropertyAccessor
    entity_fetcher: EntityFetcher
    relationship_conditions: typing.Sequence[typing.Any] = ()
    entity_conditions: typing.Sequence[typing.Any] = ()
    optional: bool = False


@dataclasses.dataclass(frozen=True)
class ToManySetConfig:
    variant: typing.ClassVar[BehaviorVariant] = BehaviorVariant.TO_MANY_SET

    property_accessor: PropertyAccessor
    entity_fetcher: EntityFetcher
    relationship_conditions: typing.Sequence[typing.Any] = ()
    entity_conditions: typing.Sequence[typing.Any] = ()
    optional: bool = False


BehaviorConfig = typing.Union[
    AttributePathConfig,
    ConstructorArgumentConfig,
    ToOneSetConfig,
    ToManySetConfig,
]

Behavior = typing.Union[ConstructorBehavior, PropertySetBehavior]


class BehaviorBuilder:
    """
    A :py:class:`BehaviorBuilder` holds the configuration shared by the behaviors of many
    properties, and builds a behavior for each property it is applied to.

    .. code-block:: python

        optional_text = BehaviorBuilder(AttributePathConfig(accessor, optional=True))
        title = optional_text.create("title", ["title"], Article)
        author = optional_text.create("author", ["writer", "name"], Article)

    :param BehaviorConfig config: The configuration; its class determines the variant of the behaviors built.
    """

    config: BehaviorConfig

    @property
    def variant(self) -> BehaviorVariant:
        return self.config.variant

    def create(
        self,
        name: str,
        path: typing.Sequence[str],
        entity_class: type,
        relationship_type: typing.Optional[TypeDescriptor] = None,
    ) -> Behavior:
        """
        Builds the behavior for a single property.

        :param str name: The name of the property as exposed in the resource.
        :param Sequence[str] path: The path of the underlying properties, starting from the entity.
        :param type entity_class: The class of the entities the behavior is applied to.
        :param Optional[TypeDescriptor] relationship_type: The target type if the property is a relationship.
        :return: The behavior.
        """
        if isinstance(path, str) or len(path) == 0:
            raise InvalidDeclarationError(
                f"property path for {name} must be a non-empty sequence of property names"
            )
        config = self.config
        if isinstance(config, AttributePathConfig):
            return PathAttributeSetBehavior(
                name,
                entity_class,
                config.entity_conditions,
                path,
                config.property_accessor,
                config.optional,
                config.normalizer,
            )

        elif isinstance(config, ConstructorArgumentConfig):
            argument_name = config.argument_name if config.argument_name is not None else name
            if config.relationship is None:
                return AttributeConstructorBehavior(name, argument_name, config.fallback)
            relationship_type = self._require_relationship_type(name, relationship_type)
            if config.entity_fetcher is None:
                raise InvalidDeclarationError(
                    f"an entity fetcher is required to construct relationship {name}"
                )
            if config.relationship is RelationshipType.TO_ONE:
                return ToOneRelationshipConstructorBehavior(
                    argument_name,
                    name,
                    relationship_type,
                    config.relationship_conditions,
                    config.entity_fetcher,
                    config.fallback,
                )
            else:
                return ToManyRelationshipConstructorBehavior(
                    argument_name,
                    name,
                    relationship_type,
                    config.relationship_conditions,
                    config.entity_fetcher,
                    config.fallback,
                )

        elif isinstance(config, ToOneSetConfig):
            return PathToOneRelationshipSetBehavior(
                name,
                entity_class,
                config.entity_conditions,
                config.relationship_conditions,
                self._require_relationship_type(name, relationship_type),
                path,
                config.property_accessor,
                config.entity_fetcher,
                config.optional,
            )

        elif isinstance(config, ToManySetConfig):
            return PathToManyRelationshipSetBehavior(
                name,
                entity_class,
                config.entity_conditions,
                config.relationship_conditions,
                self._require_relationship_type(name, relationship_type),
                path,
                config.property_accessor,
                config.entity_fetcher,
                config.optional,
            )

        raise TypeError(f"unsupported behavior configuration: {config!r}")  # pragma: nocover

    def _require_relationship_type(
        self, name: str, relationship_type: typing.Optional[TypeDescriptor]
    ) -> TypeDescriptor:
        if relationship_type is None:
            raise InvalidDeclarationError(
                f"{self.variant.value} behavior for {name} requires a relationship type"
            )
        return relationship_type

    def __init__(self, config: BehaviorConfig):
        if not isinstance(
            config,
            (AttributePathConfig, ConstructorArgumentConfig, ToOneSetConfig, ToManySetConfig),
        ):
            raise TypeError(f"unsupported behavior configuration: {config!r}")
        self.config = config
