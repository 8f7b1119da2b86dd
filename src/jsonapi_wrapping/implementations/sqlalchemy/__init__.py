from .core import (  # noqa
    SQLAConditionEvaluator,
    SQLAEntityFetcher,
    build_sql_expression_from_identity,
    describe_mapped_class,
)
