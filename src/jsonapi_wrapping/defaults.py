import collections.abc
import typing

from .exceptions import InvalidPathError
from .interfaces import ConditionEvaluator, PropertyAccessor

_scalar_types = (str, bytes, int, float, complex, bool)


def is_object(value: typing.Any) -> bool:
    """
    Returns :py:const:`True` if the value can hold properties.
    """
    return value is not None and not isinstance(value, _scalar_types)


class DefaultPropertyAccessorImpl(PropertyAccessor):
    """
    Follows paths through attributes of plain objects, and through items of mappings.
    """

    def _get_one(self, target: typing.Any, name: str) -> typing.Any:
        if isinstance(target, collections.abc.Mapping):
            return target[name]
        return getattr(target, name)

    def get(self, target: typing.Any, path: typing.Sequence[str]) -> typing.Any:
        value = target
        for i, name in enumerate(path):
            if not is_object(value):
                raise InvalidPathError(path[:i], value)
            value = self._get_one(value, name)
        return value

    def set(self, target: typing.Any, value: typing.Any, name: str) -> None:
        if isinstance(target, collections.abc.MutableMapping):
            target[name] = value
        else:
            setattr(target, name, value)


class DefaultConditionEvaluatorImpl(ConditionEvaluator):
    """
    Treats conditions as predicates, i.e. callables that take the value and return a boolean.
    :py:const:`None` stands for the condition that always holds.
    """

    def evaluate(self, value: typing.Any, condition: typing.Any) -> bool:
        if condition is None:
            return True
        if not callable(condition):
            raise TypeError(f"condition must be a callable, got {condition!r}")
        return bool(condition(value))
