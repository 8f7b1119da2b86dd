import logging
import typing

from ..exceptions import MissingPropertyError
from ..interfaces import PropertyAccessor
from ..models import CreationData, EntityData
from ..utils.formatting import format_path
from .base import ConstructorBehavior, PropertySetBehavior
from .updating import PreparedAssignment, prepare_assignment, validate_attribute_value

logger = logging.getLogger(__name__)

Fallback = typing.Callable[[CreationData], typing.Any]


class AttributeConstructorBehavior(ConstructorBehavior):
    """
    Passes the value of an attribute to the constructor argument ``argument_name``.
    If the attribute is absent from the request, the fallback is called with the
    creation data to produce the value instead.
    """

    name: str
    argument_name: str
    fallback: typing.Optional[Fallback]

    def get_arguments(self, creation_data: CreationData) -> typing.Mapping[str, typing.Any]:
        if self.name in creation_data.attributes:
            value = validate_attribute_value(self.name, creation_data.attributes[self.name])
        elif self.fallback is not None:
            value = self.fallback(creation_data)
        else:
            raise MissingPropertyError(self.name, "no attribute present and no fallback set")
        return {self.argument_name: value}

    def get_required_attributes(self) -> typing.Sequence[str]:
        return [self.name] if self.fallback is None else []

    def get_optional_attributes(self) -> typing.Sequence[str]:
        return [] if self.fallback is None else [self.name]

    def __init__(
        self,
        name: str,
        argument_name: typing.Optional[str] = None,
        fallback: typing.Optional[Fallback] = None,
    ):
        self.name = name
        self.argument_name = argument_name if argument_name is not None else name
        self.fallback = fallback


class IdentifierConstructorBehavior(ConstructorBehavior):
    """
    Passes the identifier provided by the client to the constructor argument ``argument_name``.
    With a fallback the client may omit the identifier; without one it must provide it.
    """

    argument_name: str
    fallback: typing.Optional[Fallback]

    def get_arguments(self, creation_data: CreationData) -> typing.Mapping[str, typing.Any]:
        if creation_data.entity_id is not None:
            value = creation_data.entity_id
        elif self.fallback is not None:
            value = self.fallback(creation_data)
        else:
            raise MissingPropertyError("id", "no identifier present and no fallback set")
        return {self.argument_name: value}

    def is_id_required(self) -> bool:
        return self.fallback is None

    def is_id_optional(self) -> bool:
        return self.fallback is not None

    def __init__(self, argument_name: str = "id", fallback: typing.Optional[Fallback] = None):
        self.argument_name = argument_name
        self.fallback = fallback


class PathAttributeSetBehavior(PropertySetBehavior):
    """
    Stores the value of an attribute at the end of ``path``, starting from the entity.

    If a ``normalizer`` is given, the normalized value is stored in place of the requested
    one.  The attribute is then reported as deviated whenever the two differ in value or type.
    """

    entity_class: type
    path: typing.Tuple[str, ...]
    property_accessor: PropertyAccessor
    normalizer: typing.Optional[typing.Callable[[typing.Any], typing.Any]]

    def prepare(
        self, entity: typing.Any, entity_data: EntityData
    ) -> typing.Optional[PreparedAssignment]:
        if self.name not in entity_data.attributes:
            if self.optional:
                return None
            raise MissingPropertyError(self.name, "required attribute")

        value = validate_attribute_value(self.name, entity_data.attributes[self.name])
        stored = value if self.normalizer is None else self.normalizer(value)
        deviations: typing.List[str] = []
        # equal values of another type, e.g. 1.0 for 1, still deviate
        if type(stored) is not type(value) or stored != value:
            logger.debug("storing %r instead of %r for %s", stored, value, self.name)
            deviations.append(self.name)
        return prepare_assignment(self.property_accessor, entity, self.path, stored, deviations)

    def get_required_attributes(self) -> typing.Sequence[str]:
        return [] if self.optional else [self.name]

    def get_optional_attributes(self) -> typing.Sequence[str]:
        return [self.name] if self.optional else []

    @property
    def description(self) -> str:
        return (
            (
                f"Allows an attribute `{self.name}` to be present in the request body, but does not require it. "
                if self.optional
                else f"Requires an attribute `{self.name}` to be present in the request body. "
            )
            + f"The attribute will be stored in {self.entity_class.__qualname__}.{format_path(self.path)}. "
            + ("The entity does not need to " if not self.entity_conditions else "The entity must ")
            + "match additional conditions beside the ones defined by its type."
        )

    def __init__(
        self,
        name: str,
        entity_class: type,
        entity_conditions: typing.Sequence[typing.Any],
        path: typing.Sequence[str],
        property_accessor: PropertyAccessor,
        optional: bool = False,
        normalizer: typing.Optional[typing.Callable[[typing.Any], typing.Any]] = None,
    ):
        super().__init__(name, entity_conditions, optional)
        self.entity_class = entity_class
        self.path = tuple(path)
        self.property_accessor = property_accessor
        self.normalizer = normalizer
