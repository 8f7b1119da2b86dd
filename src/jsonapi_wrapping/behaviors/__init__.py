from .attribute import (  # noqa
    AttributeConstructorBehavior,
    IdentifierConstructorBehavior,
    PathAttributeSetBehavior,
)
from .base import ConstructorBehavior, PropertyConstraining, PropertySetBehavior  # noqa
from .builder import (  # noqa
    AttributePathConfig,
    BehaviorBuilder,
    BehaviorVariant,
    ConstructorArgumentConfig,
    ToManySetConfig,
    ToOneSetConfig,
)
from .relationship import (  # noqa
    PathToManyRelationshipSetBehavior,
    PathToOneRelationshipSetBehavior,
    ToManyRelationshipConstructorBehavior,
    ToOneRelationshipConstructorBehavior,
    determine_to_many_relationship_values,
    determine_to_one_relationship_value,
)
from .updating import (  # noqa
    PreparedAssignment,
    assign_path,
    prepare_assignment,
    validate_attribute_value,
)
