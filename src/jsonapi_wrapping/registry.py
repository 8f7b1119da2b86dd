import logging
import types
import typing

from .exceptions import DuplicateTypeIdentifierError, UnknownTypeError
from .interfaces import TypeRegistry
from .models import TypeDescriptor

logger = logging.getLogger(__name__)


class PrefilledTypeRegistry(TypeRegistry):
    """
    A :py:class:`PrefilledTypeRegistry` knows the types given on construction and nothing else.
    It is meant to be built once at startup and shared afterwards.

    :param Iterable[TypeDescriptor] types: The types this registry provides.
    :raises DuplicateTypeIdentifierError: if two types share the same identifier.
    """

    _types: typing.Mapping[str, TypeDescriptor]

    def get_type(self, identifier: str) -> typing.Optional[TypeDescriptor]:
        return self._types.get(identifier)

    def request_type(self, identifier: str) -> TypeDescriptor:
        try:
            return self._types[identifier]
        except KeyError:
            raise UnknownTypeError(identifier)

    def get_type_identifiers(self) -> typing.Sequence[str]:
        return list(self._types)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._types

    def __init__(self, types_: typing.Iterable[TypeDescriptor]):
        types_by_identifier: typing.Dict[str, TypeDescriptor] = {}
        for type_ in types_:
            if type_.identifier in types_by_identifier:
                raise DuplicateTypeIdentifierError(type_.identifier)
            types_by_identifier[type_.identifier] = type_
        self._types = types.MappingProxyType(types_by_identifier)
        logger.debug("registered resource types: %s", ", ".join(types_by_identifier))
