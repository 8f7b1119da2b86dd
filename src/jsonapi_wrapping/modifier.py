import itertools
import logging
import typing

from .behaviors import ConstructorBehavior, PropertyConstraining, PropertySetBehavior
from .exceptions import EntityConditionError, InvalidDeclarationError
from .interfaces import ConditionEvaluator
from .models import CreationData, EntityData, ExpectedPropertyCollection, TypeDescriptor

logger = logging.getLogger(__name__)


def _merge_names(names: typing.Iterable[typing.Sequence[str]]) -> typing.List[str]:
    return list(dict.fromkeys(itertools.chain.from_iterable(names)))


def _merge_relationships(
    relationships: typing.Iterable[typing.Mapping[str, str]]
) -> typing.Dict[str, str]:
    result: typing.Dict[str, str] = {}
    for rels in relationships:
        result.update(rels)
    return result


class ResourceModifier:
    """
    A :py:class:`ResourceModifier` aggregates the behaviors of a resource type, both to tell
    which properties a request must or may contain and to apply them to an entity.

    :param Sequence[PropertyConstraining] behaviors: The behaviors constraining the request.
    """

    type: TypeDescriptor
    behaviors: typing.Sequence[PropertyConstraining]

    def get_expected_properties(self) -> ExpectedPropertyCollection:
        """
        Merges the properties declared by every behavior.  Relationships declared by more
        than one behavior describe the same property, so the later declaration wins.

        :raises InvalidDeclarationError: if a property ends up both required and optional.
        """
        behaviors = self.behaviors
        return ExpectedPropertyCollection(
            id_required=any(b.is_id_required() for b in behaviors),
            required_attributes=_merge_names(b.get_required_attributes() for b in behaviors),
            required_to_one_relationships=_merge_relationships(
                b.get_required_to_one_relationships() for b in behaviors
            ),
            required_to_many_relationships=_merge_relationships(
                b.get_required_to_many_relationships() for b in behaviors
            ),
            id_optional=any(b.is_id_optional() for b in behaviors),
            optional_attributes=_merge_names(b.get_optional_attributes() for b in behaviors),
            optional_to_one_relationships=_merge_relationships(
                b.get_optional_to_one_relationships() for b in behaviors
            ),
            optional_to_many_relationships=_merge_relationships(
                b.get_optional_to_many_relationships() for b in behaviors
            ),
        )

    def apply_update_behaviors(
        self,
        behaviors: typing.Iterable[PropertySetBehavior],
        entity: typing.Any,
        entity_data: EntityData,
    ) -> typing.List[str]:
        """
        Prepares every behavior first, then applies them in the given order and collects
        their deviations.  If any behavior fails to prepare, the entity is left untouched.

        :return: The names of the properties that were stored, but not as requested, without duplicates.
        """
        prepared = [behavior.prepare(entity, entity_data) for behavior in behaviors]
        deviations = _merge_names(
            assignment.apply() for assignment in prepared if assignment is not None
        )
        if deviations:
            logger.debug(
                "%s deviates from the request in %s", self.type.identifier, ", ".join(deviations)
            )
        return deviations

    def __init__(self, type: TypeDescriptor, behaviors: typing.Sequence[PropertyConstraining]):
        self.type = type
        self.behaviors = list(behaviors)


class ResourceCreator(ResourceModifier):
    """
    Creates entities by passing the arguments of the constructor behaviors to the entity class,
    then applying the post-constructor behaviors to the new entity.
    """

    constructor_behaviors: typing.Sequence[ConstructorBehavior]
    post_constructor_behaviors: typing.Sequence[PropertySetBehavior]
    entity_class: type

    def create_entity(self, creation_data: CreationData) -> typing.Tuple[typing.Any, typing.List[str]]:
        """
        :return: The new entity and the names of the deviated properties.
        """
        arguments: typing.Dict[str, typing.Any] = {}
        for behavior in self.constructor_behaviors:
            for argument_name, value in behavior.get_arguments(creation_data).items():
                if argument_name in arguments:
                    raise InvalidDeclarationError(
                        f"constructor argument {argument_name} of {self.type.identifier} "
                        f"is supplied by more than one behavior"
                    )
                arguments[argument_name] = value
        entity = self.entity_class(**arguments)
        deviations = self.apply_update_behaviors(
            self.post_constructor_behaviors, entity, creation_data
        )
        return entity, deviations

    def __init__(
        self,
        type: TypeDescriptor,
        constructor_behaviors: typing.Sequence[ConstructorBehavior],
        post_constructor_behaviors: typing.Sequence[PropertySetBehavior] = (),
        entity_class: typing.Optional[type] = None,
    ):
        super().__init__(type, [*constructor_behaviors, *post_constructor_behaviors])
        entity_class = entity_class if entity_class is not None else type.entity_class
        if entity_class is None:
            raise InvalidDeclarationError(f"no entity class known for {type.identifier}")
        self.constructor_behaviors = list(constructor_behaviors)
        self.post_constructor_behaviors = list(post_constructor_behaviors)
        self.entity_class = entity_class


class ResourceUpdater(ResourceModifier):
    """
    Updates entities by applying the update behaviors, provided the entity satisfies the
    entity conditions of every behavior that applies to the request.
    """

    update_behaviors: typing.Sequence[PropertySetBehavior]
    condition_evaluator: ConditionEvaluator

    def update_entity(self, entity: typing.Any, entity_data: EntityData) -> typing.List[str]:
        """
        :return: The names of the deviated properties.
        :raises EntityConditionError: if the entity does not satisfy the conditions of a behavior.
        """
        for behavior in self.update_behaviors:
            if behavior.is_applicable(entity_data) and not self.condition_evaluator.evaluate_all(
                entity, behavior.entity_conditions
            ):
                raise EntityConditionError(self.type, behavior.name)
        return self.apply_update_behaviors(self.update_behaviors, entity, entity_data)

    def __init__(
        self,
        type: TypeDescriptor,
        update_behaviors: typing.Sequence[PropertySetBehavior],
        condition_evaluator: ConditionEvaluator,
    ):
        super().__init__(type, update_behaviors)
        self.update_behaviors = list(update_behaviors)
        self.condition_evaluator = condition_evaluator
