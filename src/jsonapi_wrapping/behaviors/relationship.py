import typing

from ..exceptions import InvalidRelationshipError, MissingPropertyError
from ..interfaces import EntityFetcher, PropertyAccessor
from ..models import CreationData, EntityData, ResourceIdentifier, TypeDescriptor
from ..utils.formatting import format_path
from .base import ConstructorBehavior, PropertySetBehavior
from .updating import PreparedAssignment, prepare_assignment

Fallback = typing.Callable[[CreationData], typing.Any]


def _fetch_conditions(
    relationship_type: TypeDescriptor, relationship_conditions: typing.Sequence[typing.Any]
) -> typing.List[typing.Any]:
    conditions = []
    if relationship_type.access_condition is not None:
        conditions.append(relationship_type.access_condition)
    conditions.extend(relationship_conditions)
    return conditions


def _check_identifier(
    name: str, relationship_type: TypeDescriptor, identifier: ResourceIdentifier
) -> None:
    if identifier.type != relationship_type.identifier:
        raise InvalidRelationshipError(name, relationship_type.identifier, identifier.type)


def determine_to_one_relationship_value(
    entity_fetcher: EntityFetcher,
    relationship_type: TypeDescriptor,
    relationship_conditions: typing.Sequence[typing.Any],
    name: str,
    identifier: typing.Optional[ResourceIdentifier],
) -> typing.Any:
    """
    Fetches the entity referenced by the identifier.  The entity must satisfy the access
    condition of the relationship type as well as the relationship conditions.

    :return: The entity, or :py:const:`None` if no identifier is given.
    :raises InvalidRelationshipError: if the identifier refers to another type.
    :raises EntityNotFoundError: if the entity cannot be fetched.
    """
    if identifier is None:
        return None
    _check_identifier(name, relationship_type, identifier)
    return entity_fetcher.fetch_entity(
        relationship_type,
        identifier.id,
        _fetch_conditions(relationship_type, relationship_conditions),
    )


def determine_to_many_relationship_values(
    entity_fetcher: EntityFetcher,
    relationship_type: TypeDescriptor,
    relationship_conditions: typing.Sequence[typing.Any],
    name: str,
    identifiers: typing.Iterable[ResourceIdentifier],
) -> typing.List[typing.Any]:
    """
    Fetches the entities referenced by the identifiers, preserving their order.
    Every entity must satisfy the access condition of the relationship type as well as
    the relationship conditions; a single one failing fails the whole relationship.

    :raises InvalidRelationshipError: if an identifier refers to another type.
    :raises EntityNotFoundError: if an entity cannot be fetched.
    """
    identifiers = list(identifiers)
    for identifier in identifiers:
        _check_identifier(name, relationship_type, identifier)
    return entity_fetcher.fetch_entities(
        relationship_type,
        [identifier.id for identifier in identifiers],
        _fetch_conditions(relationship_type, relationship_conditions),
    )


class RelationshipConstructorBehavior(ConstructorBehavior):
    argument_name: str
    name: str
    relationship_type: TypeDescriptor
    relationship_conditions: typing.Sequence[typing.Any]
    entity_fetcher: EntityFetcher
    fallback: typing.Optional[Fallback]

    def _relationship_names(self, optional: bool) -> typing.Mapping[str, str]:
        if (self.fallback is not None) is optional:
            return {self.name: self.relationship_type.identifier}
        return {}

    def __init__(
        self,
        argument_name: str,
        name: str,
        relationship_type: TypeDescriptor,
        relationship_conditions: typing.Sequence[typing.Any],
        entity_fetcher: EntityFetcher,
        fallback: typing.Optional[Fallback] = None,
    ):
        self.argument_name = argument_name
        self.name = name
        self.relationship_type = relationship_type
        self.relationship_conditions = list(relationship_conditions)
        self.entity_fetcher = entity_fetcher
        self.fallback = fallback


class ToOneRelationshipConstructorBehavior(RelationshipConstructorBehavior):
    def get_arguments(self, creation_data: CreationData) -> typing.Mapping[str, typing.Any]:
        if self.name in creation_data.to_one_relationships:
            value = determine_to_one_relationship_value(
                self.entity_fetcher,
                self.relationship_type,
                self.relationship_conditions,
                self.name,
                creation_data.to_one_relationships[self.name],
            )
        elif self.fallback is not None:
            value = self.fallback(creation_data)
        else:
            raise MissingPropertyError(
                self.name, "no to-one relationship present and no fallback set"
            )
        return {self.argument_name: value}

    def get_required_to_one_relationships(self) -> typing.Mapping[str, str]:
        return self._relationship_names(optional=False)

    def get_optional_to_one_relationships(self) -> typing.Mapping[str, str]:
        return self._relationship_names(optional=True)


class ToManyRelationshipConstructorBehavior(RelationshipConstructorBehavior):
    def get_arguments(self, creation_data: CreationData) -> typing.Mapping[str, typing.Any]:
        if self.name in creation_data.to_many_relationships:
            values = determine_to_many_relationship_values(
                self.entity_fetcher,
                self.relationship_type,
                self.relationship_conditions,
                self.name,
                creation_data.to_many_relationships[self.name],
            )
        elif self.fallback is not None:
            values = self.fallback(creation_data)
        else:
            raise MissingPropertyError(
                self.name, "no to-many relationship present and no fallback set"
            )
        return {self.argument_name: values}

    def get_required_to_many_relationships(self) -> typing.Mapping[str, str]:
        return self._relationship_names(optional=False)

    def get_optional_to_many_relationships(self) -> typing.Mapping[str, str]:
        return self._relationship_names(optional=True)


class PathRelationshipSetBehavior(PropertySetBehavior):
    entity_class: type
    relationship_type: TypeDescriptor
    relationship_conditions: typing.Sequence[typing.Any]
    path: typing.Tuple[str, ...]
    property_accessor: PropertyAccessor
    entity_fetcher: EntityFetcher

    kind: typing.ClassVar[str]

    def _relationship_names(self, optional: bool) -> typing.Mapping[str, str]:
        if self.optional is optional:
            return {self.name: self.relationship_type.identifier}
        return {}

    @property
    def description(self) -> str:
        return (
            (
                f"Allows a {self.kind} relationship `{self.name}` to be present in the request body, but does not require it. "
                if self.optional
                else f"Requires a {self.kind} relationship `{self.name}` to be present in the request body. "
            )
            + f"The relationship will be stored in {self.entity_class.__qualname__}.{format_path(self.path)}. "
            + (
                "The related entities do not need to "
                if not self.relationship_conditions
                else "The related entities must "
            )
            + f"match additional conditions beside the ones defined by `{self.relationship_type.identifier}`. "
            + ("The entity does not need to " if not self.entity_conditions else "The entity must ")
            + "match additional conditions beside the ones defined by its type."
        )

    def __init__(
        self,
        name: str,
        entity_class: type,
        entity_conditions: typing.Sequence[typing.Any],
        relationship_conditions: typing.Sequence[typing.Any],
        relationship_type: TypeDescriptor,
        path: typing.Sequence[str],
        property_accessor: PropertyAccessor,
        entity_fetcher: EntityFetcher,
        optional: bool = False,
    ):
        super().__init__(name, entity_conditions, optional)
        self.entity_class = entity_class
        self.relationship_conditions = list(relationship_conditions)
        self.relationship_type = relationship_type
        self.path = tuple(path)
        self.property_accessor = property_accessor
        self.entity_fetcher = entity_fetcher


class PathToOneRelationshipSetBehavior(PathRelationshipSetBehavior):
    kind = "to-one"

    def prepare(
        self, entity: typing.Any, entity_data: EntityData
    ) -> typing.Optional[PreparedAssignment]:
        if self.name not in entity_data.to_one_relationships:
            if self.optional:
                return None
            raise MissingPropertyError(self.name, "required to-one relationship")

        value = determine_to_one_relationship_value(
            self.entity_fetcher,
            self.relationship_type,
            self.relationship_conditions,
            self.name,
            entity_data.to_one_relationships[self.name],
        )
        return prepare_assignment(self.property_accessor, entity, self.path, value)

    def get_required_to_one_relationships(self) -> typing.Mapping[str, str]:
        return self._relationship_names(optional=False)

    def get_optional_to_one_relationships(self) -> typing.Mapping[str, str]:
        return self._relationship_names(optional=True)


class PathToManyRelationshipSetBehavior(PathRelationshipSetBehavior):
    kind = "to-many"

    def prepare(
        self, entity: typing.Any, entity_data: EntityData
    ) -> typing.Optional[PreparedAssignment]:
        if self.name not in entity_data.to_many_relationships:
            if self.optional:
                return None
            raise MissingPropertyError(self.name, "required to-many relationship")

        values = determine_to_many_relationship_values(
            self.entity_fetcher,
            self.relationship_type,
            self.relationship_conditions,
            self.name,
            entity_data.to_many_relationships[self.name],
        )
        return prepare_assignment(self.property_accessor, entity, self.path, values)

    def get_required_to_many_relationships(self) -> typing.Mapping[str, str]:
        return self._relationship_names(optional=False)

    def get_optional_to_many_relationships(self) -> typing.Mapping[str, str]:
        return self._relationship_names(optional=True)
