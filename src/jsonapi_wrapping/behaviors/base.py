import abc
import typing

from ..models import CreationData, EntityData
from .updating import PreparedAssignment


class PropertyConstraining(metaclass=abc.ABCMeta):
    """
    A :py:class:`PropertyConstraining` declares which properties a request must or may contain.
    Relationship mappings map the relationship names to the identifier of their target type.
    Everything is neither required nor optional unless overridden.
    """

    def is_id_required(self) -> bool:
        return False

    def is_id_optional(self) -> bool:
        return False

    def get_required_attributes(self) -> typing.Sequence[str]:
        return []

    def get_optional_attributes(self) -> typing.Sequence[str]:
        return []

    def get_required_to_one_relationships(self) -> typing.Mapping[str, str]:
        return {}

    def get_optional_to_one_relationships(self) -> typing.Mapping[str, str]:
        return {}

    def get_required_to_many_relationships(self) -> typing.Mapping[str, str]:
        return {}

    def get_optional_to_many_relationships(self) -> typing.Mapping[str, str]:
        return {}


class ConstructorBehavior(PropertyConstraining):
    """
    A :py:class:`ConstructorBehavior` supplies arguments for the constructor of an entity.
    """

    @abc.abstractmethod
    def get_arguments(self, creation_data: CreationData) -> typing.Mapping[str, typing.Any]:
        """
        Derives constructor arguments from the creation request.

        :param CreationData creation_data: The properties requested for the new entity.
        :return: A mapping of argument names to their values.
        :raises MissingPropertyError: if the property is absent and no fallback is configured.
        """
        ...  # pragma: nocover


class PropertySetBehavior(PropertyConstraining):
    """
    A :py:class:`PropertySetBehavior` sets a single property of an existing entity.

    ``entity_conditions`` are conditions the entity itself must satisfy before the behavior
    may be executed, in addition to the ones defined by its type.
    """

    name: str
    entity_conditions: typing.Sequence[typing.Any]
    optional: bool

    def is_applicable(self, entity_data: EntityData) -> bool:
        """
        Returns :py:const:`True` if the request contains the property this behavior sets.
        """
        return self.name in entity_data.property_names

    @abc.abstractmethod
    def prepare(
        self, entity: typing.Any, entity_data: EntityData
    ) -> typing.Optional[PreparedAssignment]:
        """
        Validates the requested value and resolves everything needed to store it,
        without modifying the entity.

        :param Any entity: The entity that is about to be modified.
        :param EntityData entity_data: The requested properties.
        :return: The pending assignment, or :py:const:`None` if an optional property is absent.
        :raises MissingPropertyError: if a required property is absent.
        """
        ...  # pragma: nocover

    def execute_behavior(self, entity: typing.Any, entity_data: EntityData) -> typing.List[str]:
        """
        Sets the property on the entity as requested.

        The returned names denote properties that were stored but whose stored value
        differs from the requested one, e.g. because it was normalized.  They are not
        errors: the client is to be told that the resource deviates from its request.

        :param Any entity: The entity to modify.
        :param EntityData entity_data: The requested properties.
        :return: The names of the deviated properties, usually empty.
        """
        prepared = self.prepare(entity, entity_data)
        if prepared is None:
            return []
        return prepared.apply()

    @property
    @abc.abstractmethod
    def description(self) -> str:
        ...  # pragma: nocover

    def __init__(
        self, name: str, entity_conditions: typing.Sequence[typing.Any], optional: bool
    ):
        self.name = name
        self.entity_conditions = list(entity_conditions)
        self.optional = optional
