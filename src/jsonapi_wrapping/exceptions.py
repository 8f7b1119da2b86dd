import abc
import typing

from .utils import english_enumerate
from .utils.formatting import format_path


class JSONAPIWrappingException(Exception, metaclass=abc.ABCMeta):
    message: str

    def __str__(self):
        return self.message


class InvalidDeclarationError(JSONAPIWrappingException):
    message: str

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateTypeIdentifierError(InvalidDeclarationError):
    identifier: str

    def __init__(self, identifier: str):
        super().__init__(f"duplicated type identifier detected: {identifier}")
        self.identifier = identifier


class UnknownTypeError(JSONAPIWrappingException):
    identifier: str

    @property
    def message(self):
        return f'no resource type known as "{self.identifier}"'

    def __init__(self, identifier: str):
        super().__init__(identifier)
        self.identifier = identifier


class AccessError(JSONAPIWrappingException):
    """
    A :py:class:`AccessError` is raised when a resource type as a whole denies the requested access.
    """

    type: "models.TypeDescriptor"

    def __init__(self, type: "models.TypeDescriptor"):
        super().__init__(type)
        self.type = type


class TypeNotAvailableError(AccessError):
    @property
    def message(self):
        return f'resource type "{self.type.identifier}" is not available'


class TypeNotReadableError(AccessError):
    @property
    def message(self):
        return f'resource type "{self.type.identifier}" is not readable'


class TypeNotUpdatableError(AccessError):
    @property
    def message(self):
        return f'resource type "{self.type.identifier}" is not updatable'


class UnexpectedArgumentsError(AccessError):
    name: str
    actual: int

    @property
    def message(self):
        return (
            f'unexpected number of arguments ({self.actual}) for accessing "{self.name}" '
            f'of resource type "{self.type.identifier}"; expected either 0 or 1'
        )

    def __init__(self, type: "models.TypeDescriptor", name: str, actual: int):
        super().__init__(type)
        self.name = name
        self.actual = actual


class EntityConditionError(AccessError):
    name: str

    @property
    def message(self):
        return (
            f'entity of resource type "{self.type.identifier}" does not match the conditions '
            f"required to set {self.name}"
        )

    def __init__(self, type: "models.TypeDescriptor", name: str):
        super().__init__(type)
        self.name = name


class PropertyAccessError(JSONAPIWrappingException):
    """
    A :py:class:`PropertyAccessError` is raised when the requested property is not
    among the properties currently accessible in a resource type.
    """

    type: "models.TypeDescriptor"
    name: str
    allowed: typing.Sequence[str]

    @property
    def message(self):
        if self.allowed:
            allowed = english_enumerate(self.allowed)
            return (
                f'property ({self.name}) is not available in resource type "{self.type.identifier}";'
                f" available properties are {allowed}"
            )
        else:
            return (
                f'property ({self.name}) is not available in resource type "{self.type.identifier}";'
                f" no properties are available"
            )

    def __init__(
        self, type: "models.TypeDescriptor", name: str, allowed: typing.Iterable[str] = ()
    ):
        super().__init__(type, name)
        self.type = type
        self.name = name
        self.allowed = list(allowed)


class RelationshipAccessError(JSONAPIWrappingException):
    type: "models.TypeDescriptor"
    name: str
    path_name: str
    relationship_type: "models.TypeDescriptor"

    def __init__(
        self,
        type: "models.TypeDescriptor",
        name: str,
        path_name: str,
        relationship_type: "models.TypeDescriptor",
    ):
        super().__init__(type, name)
        self.type = type
        self.name = name
        self.path_name = path_name
        self.relationship_type = relationship_type


class ToOneRestrictedItemNotSetableError(RelationshipAccessError):
    @property
    def message(self):
        return (
            f'to-one relationship ({self.name}) of resource type "{self.type.identifier}" '
            f'cannot be set to a restricted "{self.relationship_type.identifier}"'
        )


class ToManyRestrictedItemNotSetableError(RelationshipAccessError):
    key: typing.Any

    @property
    def message(self):
        return (
            f'to-many relationship ({self.name}) of resource type "{self.type.identifier}" '
            f'cannot contain a restricted "{self.relationship_type.identifier}" '
            f"(at {self.key!r})"
        )

    def __init__(
        self,
        type: "models.TypeDescriptor",
        name: str,
        path_name: str,
        relationship_type: "models.TypeDescriptor",
        key: typing.Any,
    ):
        super().__init__(type, name, path_name, relationship_type)
        self.key = key


class MissingPropertyError(JSONAPIWrappingException):
    name: str
    detail: typing.Optional[str]

    @property
    def message(self):
        return f'property ({self.name}) not supplied{" (" + self.detail + ")" if self.detail is not None else ""}'

    def __init__(self, name: str, detail: typing.Optional[str] = None):
        super().__init__(name)
        self.name = name
        self.detail = detail


class InvalidAttributeValueError(JSONAPIWrappingException):
    name: str
    actual: typing.Any
    detail: typing.Optional[str]

    @property
    def message(self):
        return f'attribute ({self.name}) contains an invalid value{" (" + self.detail + ")" if self.detail is not None else ""}: {self.actual!r}'

    def __init__(self, name: str, actual: typing.Any, detail: typing.Optional[str] = None):
        super().__init__(name)
        self.name = name
        self.actual = actual
        self.detail = detail


class InvalidRelationshipError(JSONAPIWrappingException):
    name: str
    expected: str
    actual: str

    @property
    def message(self):
        return (
            f'relationship ({self.name}) must refer to "{self.expected}" resources, '
            f'got "{self.actual}"'
        )

    def __init__(self, name: str, expected: str, actual: str):
        super().__init__(name)
        self.name = name
        self.expected = expected
        self.actual = actual


class EntityNotFoundError(JSONAPIWrappingException):
    type: "models.TypeDescriptor"
    id: typing.Any

    @property
    def message(self):
        return f'no accessible "{self.type.identifier}" found for {self.id!r}'

    def __init__(self, type: "models.TypeDescriptor", id: typing.Any):
        super().__init__(type, id)
        self.type = type
        self.id = id


class InvalidPathError(JSONAPIWrappingException):
    path: typing.Sequence[str]
    actual: typing.Any

    @property
    def message(self):
        return f"property path {format_path(self.path)} does not lead to an object: {self.actual!r}"

    def __init__(self, path: typing.Sequence[str], actual: typing.Any):
        super().__init__(path)
        self.path = path
        self.actual = actual


if typing.TYPE_CHECKING:
    from . import models  # noqa: E402
