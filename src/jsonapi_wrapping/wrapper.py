import collections.abc
import logging
import typing

from .defaults import is_object
from .exceptions import (
    InvalidPathError,
    PropertyAccessError,
    ToManyRestrictedItemNotSetableError,
    ToOneRestrictedItemNotSetableError,
    TypeNotAvailableError,
    TypeNotReadableError,
    TypeNotUpdatableError,
    UnexpectedArgumentsError,
)
from .interfaces import ConditionEvaluator, PropertyAccessor, WrapperFactory
from .models import TypeDescriptor
from .type_accessor import TypeAccessor

logger = logging.getLogger(__name__)


def is_to_many_value(value: typing.Any) -> bool:
    """
    Returns :py:const:`True` if the value is a collection of related entities rather than
    a single one.  Strings, bytes and mappings count as single values.
    """
    return isinstance(value, collections.abc.Iterable) and not isinstance(
        value, (str, bytes, collections.abc.Mapping)
    )


class PropertyReader:
    """
    Turns raw relationship values into wrappers, hiding the related entities that do not
    satisfy the access condition of their type.
    """

    condition_evaluator: ConditionEvaluator

    def determine_value(
        self,
        wrap: typing.Callable[[typing.Any, TypeDescriptor], "ResourceWrapper"],
        relationship: typing.Optional[TypeDescriptor],
        value: typing.Any,
    ) -> typing.Any:
        if relationship is None or value is None:
            return value
        condition = relationship.access_condition
        if is_to_many_value(value):
            return [
                wrap(item, relationship)
                for item in value
                if self.condition_evaluator.evaluate(item, condition)
            ]
        if not self.condition_evaluator.evaluate(value, condition):
            return None
        return wrap(value, relationship)

    def __init__(self, condition_evaluator: ConditionEvaluator):
        self.condition_evaluator = condition_evaluator


class ResourceWrapper:
    """
    A :py:class:`ResourceWrapper` wraps a single entity and grants read and write access
    to its properties as far as its :py:class:`TypeDescriptor` allows.

    Reading a relationship yields the related entities wrapped themselves, so the
    restrictions of the related types apply when traversing further.
    Writing a relationship is only possible with entities satisfying the access condition
    of the relationship's target type.
    """

    _entity: typing.Any
    _type: TypeDescriptor
    _type_accessor: TypeAccessor
    _property_accessor: PropertyAccessor
    _property_reader: PropertyReader
    _condition_evaluator: ConditionEvaluator
    _wrapper_factory: WrapperFactory

    @property
    def resource_type(self) -> TypeDescriptor:
        return self._type

    @property
    def entity(self) -> typing.Any:
        return self._entity

    def access(self, name: str, *args: typing.Any) -> typing.Any:
        """
        Reads the property if no argument is given, writes the single given argument otherwise.

        :raises UnexpectedArgumentsError: if more than one argument is given.
        """
        if len(args) == 0:
            return self.read(name)
        elif len(args) == 1:
            self.write(name, args[0])
            return None
        raise UnexpectedArgumentsError(self._type, name, len(args))

    def read(self, name: str) -> typing.Any:
        """
        Returns the value of the property.  Related entities are returned as wrappers.

        :param str name: The name of the property.
        :raises TypeNotAvailableError: if the type is not available.
        :raises TypeNotReadableError: if the type is not readable.
        :raises PropertyAccessError: if the property is not accessible for reading.
        """
        if not self._type.available:
            raise TypeNotAvailableError(self._type)
        if not self._type.readable:
            raise TypeNotReadableError(self._type)

        readable_properties = self._type_accessor.get_accessible_readable_properties(self._type)
        if name not in readable_properties:
            logger.debug("denied reading %s of %s", name, self._type.identifier)
            raise PropertyAccessError(self._type, name, readable_properties.keys())

        relationship = readable_properties[name]
        value = self._property_accessor.get(self._entity, self._type.get_property_path(name))
        return self._property_reader.determine_value(
            self._wrapper_factory.create_wrapper, relationship, value
        )

    def write(self, name: str, value: typing.Any) -> None:
        """
        Sets the property to the given value.  Relationships are set to the given entities,
        not to wrappers.

        :param str name: The name of the property.
        :param Any value: The value to set.
        :raises TypeNotAvailableError: if the type is not available.
        :raises TypeNotUpdatableError: if the type is not updatable.
        :raises PropertyAccessError: if the property is not accessible for updating.
        :raises RelationshipAccessError: if a related entity does not satisfy the access condition of its type.
        """
        if not self._type.available:
            raise TypeNotAvailableError(self._type)
        if not self._type.updatable:
            raise TypeNotUpdatableError(self._type)

        updatable_properties = self._type_accessor.get_accessible_updatable_properties(
            self._type, self._entity
        )
        if name not in updatable_properties:
            logger.debug("denied updating %s of %s", name, self._type.identifier)
            raise PropertyAccessError(self._type, name, updatable_properties.keys())

        relationship = updatable_properties[name]
        path = self._type.get_property_path(name)
        if not path:
            # an empty alias denotes the entity itself, which cannot be replaced
            raise InvalidPathError(path, self._entity)
        parent_path, leaf_name = path[:-1], path[-1]
        target = self._property_accessor.get(self._entity, parent_path)
        if not is_object(target):
            raise InvalidPathError(parent_path, target)

        if isinstance(value, collections.abc.Iterator):
            value = list(value)
        self._check_setable(relationship, name, leaf_name, value)
        self._property_accessor.set(target, value, leaf_name)

    def _check_setable(
        self,
        relationship: typing.Optional[TypeDescriptor],
        name: str,
        path_name: str,
        value: typing.Any,
    ) -> None:
        # availability and referencability of the relationship were checked already
        if relationship is None:
            return

        condition = relationship.access_condition
        if is_to_many_value(value):
            for key, item in enumerate(value):
                if not self._condition_evaluator.evaluate(item, condition):
                    logger.debug(
                        "denied setting restricted item %r of %s in %s",
                        key,
                        name,
                        self._type.identifier,
                    )
                    raise ToManyRestrictedItemNotSetableError(
                        self._type, name, path_name, relationship, key
                    )
        elif value is not None and not self._condition_evaluator.evaluate(value, condition):
            logger.debug("denied setting restricted %s in %s", name, self._type.identifier)
            raise ToOneRestrictedItemNotSetableError(self._type, name, path_name, relationship)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._type.identifier!r}, {self._entity!r})"

    def __init__(
        self,
        entity: typing.Any,
        type: TypeDescriptor,
        type_accessor: TypeAccessor,
        property_accessor: PropertyAccessor,
        property_reader: PropertyReader,
        condition_evaluator: ConditionEvaluator,
        wrapper_factory: WrapperFactory,
    ):
        self._entity = entity
        self._type = type
        self._type_accessor = type_accessor
        self._property_accessor = property_accessor
        self._property_reader = property_reader
        self._condition_evaluator = condition_evaluator
        self._wrapper_factory = wrapper_factory


class ResourceWrapperFactory(WrapperFactory):
    """
    Creates :py:class:`ResourceWrapper` instances sharing the same collaborators.
    """

    type_accessor: TypeAccessor
    property_accessor: PropertyAccessor
    condition_evaluator: ConditionEvaluator
    property_reader: PropertyReader

    def create_wrapper(self, entity: typing.Any, type: TypeDescriptor) -> ResourceWrapper:
        return ResourceWrapper(
            entity,
            type,
            self.type_accessor,
            self.property_accessor,
            self.property_reader,
            self.condition_evaluator,
            self,
        )

    def __init__(
        self,
        type_accessor: TypeAccessor,
        property_accessor: PropertyAccessor,
        condition_evaluator: ConditionEvaluator,
        property_reader: typing.Optional[PropertyReader] = None,
    ):
        self.type_accessor = type_accessor
        self.property_accessor = property_accessor
        self.condition_evaluator = condition_evaluator
        self.property_reader = (
            property_reader if property_reader is not None else PropertyReader(condition_evaluator)
        )
