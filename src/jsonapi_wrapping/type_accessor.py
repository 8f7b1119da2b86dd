import typing
from collections import OrderedDict

from .interfaces import TypeRegistry
from .models import PropertyMapping, TypeDescriptor

AccessibleProperties = typing.Mapping[str, typing.Optional[TypeDescriptor]]


class TypeAccessor:
    """
    A :py:class:`TypeAccessor` narrows the properties a type declares down to the ones
    that are actually accessible: relationships are only accessible if their target type
    is known to the registry, available, and referencable.

    :param TypeRegistry registry: The registry relationship targets are resolved against.
    """

    registry: TypeRegistry

    def is_accessible_target(self, type: typing.Optional[TypeDescriptor]) -> bool:
        return type is not None and type.available and type.referencable

    def _resolve(self, properties: PropertyMapping) -> AccessibleProperties:
        result: "OrderedDict[str, typing.Optional[TypeDescriptor]]" = OrderedDict()
        for name, target_identifier in properties.items():
            if target_identifier is None:
                result[name] = None
                continue
            target = self.registry.get_type(target_identifier)
            if self.is_accessible_target(target):
                result[name] = target
        return result

    def get_accessible_readable_properties(self, type: TypeDescriptor) -> AccessibleProperties:
        """
        Returns the readable properties of the type, mapped to the relationship's target type,
        or :py:const:`None` for attributes.
        """
        return self._resolve(type.get_readable_properties())

    def get_accessible_updatable_properties(
        self, type: TypeDescriptor, entity: typing.Any
    ) -> AccessibleProperties:
        """
        Returns the properties of the type that are updatable on the given entity in its current state.
        The entity is never modified.
        """
        return self._resolve(type.get_updatable_properties(entity))

    def get_accessible_initializable_properties(
        self, type: TypeDescriptor
    ) -> AccessibleProperties:
        return self._resolve(type.get_initializable_properties())

    def __init__(self, registry: TypeRegistry):
        self.registry = registry
