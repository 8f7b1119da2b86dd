"""
This module contains the interface definitions of the collaborators the wrappers
and behaviors rely on.  They need to be implemented by the backend provider,
although :py:mod:`jsonapi_wrapping.defaults` covers plain Python objects.

"""
import abc
import typing

if typing.TYPE_CHECKING:
    from .models import TypeDescriptor  # noqa: F401
    from .wrapper import ResourceWrapper  # noqa: F401


class PropertyAccessor(metaclass=abc.ABCMeta):
    """
    A :py:class:`PropertyAccessor` reads and writes values of an object by following
    a path of property names.
    """

    @abc.abstractmethod
    def get(self, target: typing.Any, path: typing.Sequence[str]) -> typing.Any:
        """
        Fetches the value at the end of the path, starting from the target object.
        An empty path yields the target itself.

        :param Any target: The object to start from.
        :param Sequence[str] path: The names of the properties to follow.
        :return: The fetched value.
        :raises InvalidPathError: if a non-leaf segment of the path is not an object.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def set(self, target: typing.Any, value: typing.Any, name: str) -> None:
        """
        Sets the property ``name`` of the target object to the given value.

        :param Any target: The object to modify.
        :param Any value: The value to set.
        :param str name: The name of the property.
        """
        ...  # pragma: nocover


class ConditionEvaluator(metaclass=abc.ABCMeta):
    """
    A :py:class:`ConditionEvaluator` decides if a value satisfies a condition.
    What a condition is depends on the implementation; to the rest of the package it is opaque.
    """

    @abc.abstractmethod
    def evaluate(self, value: typing.Any, condition: typing.Any) -> bool:
        """
        Evaluates the condition against the value.  It must not have any side effects.

        :param Any value: The value to test.
        :param Any condition: An implementation-dependent condition.
        :return: :py:const:`True` if the value satisfies the condition.
        """
        ...  # pragma: nocover

    def evaluate_all(self, value: typing.Any, conditions: typing.Iterable[typing.Any]) -> bool:
        """
        Returns :py:const:`True` if the value satisfies every condition given.
        """
        return all(self.evaluate(value, condition) for condition in conditions)


class TypeRegistry(metaclass=abc.ABCMeta):
    """
    A :py:class:`TypeRegistry` returns :py:class:`TypeDescriptor` instances for given identifiers.
    """

    @abc.abstractmethod
    def get_type(self, identifier: str) -> typing.Optional["TypeDescriptor"]:
        """
        Returns the type known by the identifier, or :py:const:`None` if there is none.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def request_type(self, identifier: str) -> "TypeDescriptor":
        """
        Returns the type known by the identifier.

        :raises UnknownTypeError: if no type is known by the identifier.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def get_type_identifiers(self) -> typing.Sequence[str]:
        ...  # pragma: nocover


class WrapperFactory(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def create_wrapper(self, entity: typing.Any, type: "TypeDescriptor") -> "ResourceWrapper":
        """
        Wraps the entity so that it is accessed as governed by the type.

        :param Any entity: The entity to wrap.
        :param TypeDescriptor type: The type that governs the access.
        :return: A new wrapper.
        """
        ...  # pragma: nocover


class EntityFetcher(metaclass=abc.ABCMeta):
    """
    An :py:class:`EntityFetcher` looks up the entities referenced by the relationships of a request.
    """

    @abc.abstractmethod
    def fetch_entity(
        self,
        type: "TypeDescriptor",
        id: typing.Any,
        conditions: typing.Sequence[typing.Any] = (),
    ) -> typing.Any:
        """
        Fetches the entity of the type identified by ``id``.

        :param TypeDescriptor type: The type of the entity.
        :param Any id: The identifier of the entity.
        :param Sequence[Any] conditions: The conditions the entity must satisfy.
        :return: The entity.
        :raises EntityNotFoundError: if no such entity exists, or it does not satisfy the conditions.
        """
        ...  # pragma: nocover

    def fetch_entities(
        self,
        type: "TypeDescriptor",
        ids: typing.Iterable[typing.Any],
        conditions: typing.Sequence[typing.Any] = (),
    ) -> typing.List[typing.Any]:
        """
        Fetches the entities of the type identified by ``ids`` in the given order.

        :raises EntityNotFoundError: if any of them cannot be fetched.
        """
        return [self.fetch_entity(type, id, conditions) for id in ids]
