import collections.abc
import datetime
import decimal
import typing

from ..defaults import is_object
from ..exceptions import InvalidAttributeValueError, InvalidPathError
from ..interfaces import PropertyAccessor

_attribute_scalar_types = (
    str,
    int,
    float,
    bool,
    decimal.Decimal,
    datetime.datetime,
    datetime.date,
    datetime.time,
)


class PreparedAssignment:
    """
    A value that passed every check and only waits to be stored in ``target.name``.

    :param Sequence[str] deviations: The names of the properties whose stored value will differ from the requested one.
    """

    property_accessor: PropertyAccessor
    target: typing.Any
    name: str
    value: typing.Any
    deviations: typing.Sequence[str]

    def apply(self) -> typing.List[str]:
        self.property_accessor.set(self.target, self.value, self.name)
        return list(self.deviations)

    def __init__(
        self,
        property_accessor: PropertyAccessor,
        target: typing.Any,
        name: str,
        value: typing.Any,
        deviations: typing.Sequence[str] = (),
    ):
        self.property_accessor = property_accessor
        self.target = target
        self.name = name
        self.value = value
        self.deviations = deviations


def prepare_assignment(
    property_accessor: PropertyAccessor,
    entity: typing.Any,
    path: typing.Sequence[str],
    value: typing.Any,
    deviations: typing.Sequence[str] = (),
) -> PreparedAssignment:
    """
    Follows all but the last segment of the path starting from the entity, without
    modifying anything, and returns the assignment of the last segment on the object reached.

    :raises InvalidPathError: if the object reached is not an object.
    """
    assert len(path) > 0
    parent_path, leaf_name = path[:-1], path[-1]
    target = property_accessor.get(entity, parent_path)
    if not is_object(target):
        raise InvalidPathError(parent_path, target)
    return PreparedAssignment(property_accessor, target, leaf_name, value, deviations)


def assign_path(
    property_accessor: PropertyAccessor,
    entity: typing.Any,
    path: typing.Sequence[str],
    value: typing.Any,
) -> None:
    """
    Sets the property named by the last segment of the path on the object reached by
    following the other segments from the entity.

    :raises InvalidPathError: if the object reached is not an object.
    """
    prepare_assignment(property_accessor, entity, path, value).apply()


def _is_attribute_value(value: typing.Any) -> bool:
    if value is None or isinstance(value, _attribute_scalar_types):
        return True
    elif isinstance(value, collections.abc.Mapping):
        return all(isinstance(k, str) and _is_attribute_value(v) for k, v in value.items())
    elif isinstance(value, collections.abc.Sequence) and not isinstance(value, bytes):
        return all(_is_attribute_value(v) for v in value)
    return False


def validate_attribute_value(name: str, value: typing.Any) -> typing.Any:
    """
    Ensures the value is something a request may carry as an attribute value: a scalar,
    or a list or string-keyed mapping of those.

    :raises InvalidAttributeValueError: otherwise.
    """
    if not _is_attribute_value(value):
        raise InvalidAttributeValueError(name, value, "not a scalar, list, or mapping")
    return value
