import collections.abc
import dataclasses
import typing

from .exceptions import InvalidDeclarationError
from .models import PropertyMapping, TypeDescriptor
from .registry import PrefilledTypeRegistry

PropertyDeclaration = typing.Union[PropertyMapping, typing.Sequence[str]]


@dataclasses.dataclass
class Meta:
    identifier: typing.Optional[str] = None
    readable: typing.Optional[PropertyDeclaration] = None
    updatable: typing.Optional[PropertyDeclaration] = None
    initializable: typing.Optional[PropertyDeclaration] = None
    aliases: typing.Mapping[str, typing.Sequence[str]] = dataclasses.field(default_factory=dict)
    access_condition: typing.Any = None
    available: bool = True
    referencable: bool = True
    descriptor_class: typing.Type[TypeDescriptor] = TypeDescriptor


def handle_meta(meta: typing.Type) -> Meta:
    attrs = {k: getattr(meta, k) for k in vars(meta) if not k.startswith("__")}
    known = {field.name for field in dataclasses.fields(Meta)}
    unknown = set(attrs) - known
    if unknown:
        raise InvalidDeclarationError(f"unknown Meta attributes: {', '.join(sorted(unknown))}")
    return Meta(**attrs)


def normalize_properties(
    properties: typing.Optional[PropertyDeclaration],
) -> typing.Optional[PropertyMapping]:
    """
    Accepts a sequence of names as a shorthand for attributes.
    """
    if properties is None:
        return None
    elif isinstance(properties, collections.abc.Mapping):
        return properties
    elif isinstance(properties, str):
        raise InvalidDeclarationError(f"properties must be declared as a sequence: {properties!r}")
    return {name: None for name in properties}


def type_descriptor_from_meta(meta: Meta, entity_class: typing.Optional[type]) -> TypeDescriptor:
    identifier = meta.identifier
    if identifier is None:
        if entity_class is None:
            raise InvalidDeclarationError("either identifier or entity class must be given")
        identifier = entity_class.__name__
    return meta.descriptor_class(
        identifier,
        readable_properties=normalize_properties(meta.readable),
        updatable_properties=normalize_properties(meta.updatable),
        initializable_properties=normalize_properties(meta.initializable),
        aliases=meta.aliases,
        access_condition=meta.access_condition,
        available=meta.available,
        referencable=meta.referencable,
        entity_class=entity_class,
    )


class Declarative:
    """
    Collects the resource types declared on entity classes through an inner ``Meta`` class.

    .. code-block:: python

        decl = Declarative()

        @decl
        class Article:
            class Meta:
                readable = {"title": None, "comments": "Comment"}
                updatable = ["title"]

        registry = decl.build_registry()
    """

    descriptors: typing.List[TypeDescriptor]

    def __call__(self, class_: typing.Type) -> typing.Type:
        meta = getattr(class_, "Meta", None)
        if meta is None:
            raise InvalidDeclarationError(f"{class_.__qualname__} does not declare Meta")
        self.descriptors.append(type_descriptor_from_meta(handle_meta(meta), class_))
        return class_

    def build_registry(self) -> PrefilledTypeRegistry:
        return PrefilledTypeRegistry(self.descriptors)

    def __init__(self):
        self.descriptors = []
