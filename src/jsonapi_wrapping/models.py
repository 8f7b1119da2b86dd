import dataclasses
import enum
import types
import typing

from .exceptions import InvalidDeclarationError

PropertyMapping = typing.Mapping[str, typing.Optional[str]]
"""
A mapping of property names to the identifier of the relationship's target type,
or :py:const:`None` for non-relationship properties (attributes).
"""

EMPTY_ALIASES: typing.Mapping[str, typing.Sequence[str]] = types.MappingProxyType({})


class RelationshipType(enum.Enum):
    TO_ONE = 1
    TO_MANY = 2


def _freeze_properties(
    properties: typing.Optional[PropertyMapping],
) -> typing.Optional[PropertyMapping]:
    if properties is None:
        return None
    return types.MappingProxyType(dict(properties))


class TypeDescriptor:
    """
    A :py:class:`TypeDescriptor` governs how the properties of an entity class are
    exposed as a resource.

    :param str identifier: The identifier of the type, unique within a registry.
    :param Optional[PropertyMapping] readable_properties: The properties that can be read. :py:const:`None` if the type is not readable at all.
    :param Optional[PropertyMapping] updatable_properties: The properties that can be updated. :py:const:`None` if the type is not updatable at all.
    :param Optional[PropertyMapping] initializable_properties: The properties that can be set on creation. :py:const:`None` if the type is not creatable.
    :param Mapping[str, Sequence[str]] aliases: Maps property names to the path of the underlying properties.
    :param Any access_condition: The condition an entity must satisfy to be readable or settable as a relationship target.
    :param bool available: Whether the type is currently usable.
    :param bool referencable: Whether the type may be the target of a relationship.
    :param Optional[type] entity_class: The class of the backing entities.
    """

    _identifier: str
    _readable_properties: typing.Optional[PropertyMapping]
    _updatable_properties: typing.Optional[PropertyMapping]
    _initializable_properties: typing.Optional[PropertyMapping]
    _aliases: typing.Mapping[str, typing.Tuple[str, ...]]
    _access_condition: typing.Any
    _available: bool
    _referencable: bool
    _entity_class: typing.Optional[type]

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def available(self) -> bool:
        """
        Set to :py:const:`True` if the type is currently usable.
        """
        return self._available

    @property
    def referencable(self) -> bool:
        """
        Set to :py:const:`True` if the type may be the target of a relationship.
        """
        return self._referencable

    @property
    def aliases(self) -> typing.Mapping[str, typing.Tuple[str, ...]]:
        return self._aliases

    @property
    def access_condition(self) -> typing.Any:
        return self._access_condition

    @property
    def entity_class(self) -> typing.Optional[type]:
        return self._entity_class

    @property
    def readable(self) -> bool:
        return self._readable_properties is not None

    @property
    def updatable(self) -> bool:
        return self._updatable_properties is not None

    @property
    def creatable(self) -> bool:
        return self._initializable_properties is not None

    def get_readable_properties(self) -> PropertyMapping:
        """
        Returns the properties declared readable, regardless of the availability
        of their relationship targets.
        """
        return self._readable_properties or {}

    def get_updatable_properties(self, entity: typing.Any) -> PropertyMapping:
        """
        Returns the properties declared updatable for the given entity.
        Override this to make the updatable properties depend on the state of the entity.

        :param Any entity: The entity that is about to be updated.
        """
        return self._updatable_properties or {}

    def get_initializable_properties(self) -> PropertyMapping:
        return self._initializable_properties or {}

    def get_property_path(self, name: str) -> typing.Tuple[str, ...]:
        """
        Resolves the property name to the path of the underlying properties.
        Unaliased properties resolve to themselves.
        """
        return self._aliases.get(name, (name,))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._identifier!r})"

    def __init__(
        self,
        identifier: str,
        readable_properties: typing.Optional[PropertyMapping] = None,
        updatable_properties: typing.Optional[PropertyMapping] = None,
        initializable_properties: typing.Optional[PropertyMapping] = None,
        aliases: typing.Mapping[str, typing.Sequence[str]] = EMPTY_ALIASES,
        access_condition: typing.Any = None,
        available: bool = True,
        referencable: bool = True,
        entity_class: typing.Optional[type] = None,
    ):
        if not identifier:
            raise InvalidDeclarationError("type identifier must not be empty")
        for name, path in aliases.items():
            if isinstance(path, str):
                raise InvalidDeclarationError(
                    f"alias {name} in {identifier} must be a sequence of property names"
                )
        self._identifier = identifier
        self._readable_properties = _freeze_properties(readable_properties)
        self._updatable_properties = _freeze_properties(updatable_properties)
        self._initializable_properties = _freeze_properties(initializable_properties)
        self._aliases = types.MappingProxyType(
            {name: tuple(path) for name, path in aliases.items()}
        )
        self._access_condition = access_condition
        self._available = available
        self._referencable = referencable
        self._entity_class = entity_class


@dataclasses.dataclass(frozen=True)
class ResourceIdentifier:
    """
    A reference to a single resource as found in the relationships of a request.
    """

    type: str
    id: typing.Any


@dataclasses.dataclass(frozen=True)
class EntityData:
    """
    The properties requested to be set on an entity.
    """

    type: str
    attributes: typing.Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)
    to_one_relationships: typing.Mapping[
        str, typing.Optional[ResourceIdentifier]
    ] = dataclasses.field(default_factory=dict)
    to_many_relationships: typing.Mapping[
        str, typing.Sequence[ResourceIdentifier]
    ] = dataclasses.field(default_factory=dict)

    @property
    def property_names(self) -> typing.Set[str]:
        return (
            set(self.attributes)
            | set(self.to_one_relationships)
            | set(self.to_many_relationships)
        )


@dataclasses.dataclass(frozen=True)
class CreationData(EntityData):
    """
    The properties requested to be set on an entity to be created, optionally
    accompanied with an identifier provided by the client.
    """

    entity_id: typing.Optional[typing.Any] = None


def _check_disjoint(category: str, required: typing.Iterable[str], optional: typing.Iterable[str]):
    overlap = set(required) & set(optional)
    if overlap:
        raise InvalidDeclarationError(
            f"{category} declared both required and optional: {', '.join(sorted(overlap))}"
        )


@dataclasses.dataclass(frozen=True)
class ExpectedPropertyCollection:
    """
    The properties a request for a resource type must or may contain.
    Relationship mappings map the relationship names to the identifier of the target type.
    """

    id_required: bool = False
    required_attributes: typing.Sequence[str] = ()
    required_to_one_relationships: typing.Mapping[str, str] = dataclasses.field(
        default_factory=dict
    )
    required_to_many_relationships: typing.Mapping[str, str] = dataclasses.field(
        default_factory=dict
    )
    id_optional: bool = False
    optional_attributes: typing.Sequence[str] = ()
    optional_to_one_relationships: typing.Mapping[str, str] = dataclasses.field(
        default_factory=dict
    )
    optional_to_many_relationships: typing.Mapping[str, str] = dataclasses.field(
        default_factory=dict
    )

    @property
    def required_names(self) -> typing.Set[str]:
        return (
            set(self.required_attributes)
            | set(self.required_to_one_relationships)
            | set(self.required_to_many_relationships)
        )

    @property
    def allowed_names(self) -> typing.Set[str]:
        return (
            self.required_names
            | set(self.optional_attributes)
            | set(self.optional_to_one_relationships)
            | set(self.optional_to_many_relationships)
        )

    def __post_init__(self) -> None:
        if self.id_required and self.id_optional:
            raise InvalidDeclarationError("id declared both required and optional")
        _check_disjoint("attributes", self.required_attributes, self.optional_attributes)
        _check_disjoint(
            "to-one relationships",
            self.required_to_one_relationships,
            self.optional_to_one_relationships,
        )
        _check_disjoint(
            "to-many relationships",
            self.required_to_many_relationships,
            self.optional_to_many_relationships,
        )
