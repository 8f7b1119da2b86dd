import collections.abc
import logging
import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore
from sqlalchemy.sql import ClauseElement  # type: ignore

from ...defaults import DefaultConditionEvaluatorImpl
from ...exceptions import EntityNotFoundError, InvalidDeclarationError
from ...interfaces import ConditionEvaluator, EntityFetcher
from ...models import EMPTY_ALIASES, TypeDescriptor

logger = logging.getLogger(__name__)


def _coerce(column: sa.Column, value: typing.Any) -> typing.Any:
    try:
        py_type = column.type.python_type
    except NotImplementedError:
        return value
    if value is None or isinstance(value, py_type):
        return value
    return py_type(value)


def normalize_identity(sa_mapper: orm.Mapper, id: typing.Any) -> typing.Tuple[typing.Any, ...]:
    """
    Converts an identifier, either a single value or a sequence of values for composite
    primary keys, into a tuple of values typed after the primary key columns.

    :raises ValueError: if the identifier does not fit the primary key.
    """
    if isinstance(id, str) or not isinstance(id, collections.abc.Sequence):
        id = (id,)
    pkey_cols = sa_mapper.primary_key
    if len(pkey_cols) != len(id):
        raise ValueError(f'invalid identifier: "{id}"')
    return tuple(_coerce(pkey_col, c) for pkey_col, c in zip(pkey_cols, id))


def build_sql_expression_from_identity(sa_mapper: orm.Mapper, id: typing.Any) -> ClauseElement:
    return sa.and_(
        *(
            pkey_col == c
            for pkey_col, c in zip(sa_mapper.primary_key, normalize_identity(sa_mapper, id))
        )
    )


def _mapper_for(type: TypeDescriptor) -> orm.Mapper:
    if type.entity_class is None:
        raise InvalidDeclarationError(f"no entity class known for {type.identifier}")
    return sa.inspect(type.entity_class)


class SQLAEntityFetcher(EntityFetcher):
    """
    Fetches entities through a session.  Conditions are SQL expressions against the entity
    class, e.g. ``Tag.archived == False``.
    """

    session: orm.Session

    def _query(self, sa_mapper: orm.Mapper, conditions: typing.Sequence[typing.Any]) -> orm.Query:
        return self.session.query(sa_mapper.class_).filter(
            *(condition for condition in conditions if condition is not None)
        )

    def fetch_entity(
        self,
        type: TypeDescriptor,
        id: typing.Any,
        conditions: typing.Sequence[typing.Any] = (),
    ) -> typing.Any:
        sa_mapper = _mapper_for(type)
        try:
            identity_expr = build_sql_expression_from_identity(sa_mapper, id)
        except ValueError as e:
            raise EntityNotFoundError(type, id) from e
        try:
            return self._query(sa_mapper, conditions).filter(identity_expr).one()
        except orm.exc.NoResultFound as e:
            raise EntityNotFoundError(type, id) from e

    def fetch_entities(
        self,
        type: TypeDescriptor,
        ids: typing.Iterable[typing.Any],
        conditions: typing.Sequence[typing.Any] = (),
    ) -> typing.List[typing.Any]:
        sa_mapper = _mapper_for(type)
        ids = list(ids)
        if not ids:
            return []
        identities = []
        for id in ids:
            try:
                identities.append(normalize_identity(sa_mapper, id))
            except ValueError as e:
                raise EntityNotFoundError(type, id) from e

        q = self._query(sa_mapper, conditions).filter(
            sa.or_(
                *(build_sql_expression_from_identity(sa_mapper, identity) for identity in identities)
            )
        )
        found = {tuple(sa_mapper.primary_key_from_instance(entity)): entity for entity in q}
        result = []
        for id, identity in zip(ids, identities):
            try:
                result.append(found[identity])
            except KeyError:
                raise EntityNotFoundError(type, id)
        return result

    def __init__(self, session: orm.Session):
        self.session = session


class SQLAConditionEvaluator(ConditionEvaluator):
    """
    Evaluates SQL expressions by querying whether the persistent entity satisfies them.
    Conditions that are not SQL expressions are handed over to ``fallback``, which
    defaults to :py:class:`DefaultConditionEvaluatorImpl`.
    """

    session: orm.Session
    fallback: ConditionEvaluator

    def evaluate(self, value: typing.Any, condition: typing.Any) -> bool:
        if not isinstance(condition, ClauseElement):
            return self.fallback.evaluate(value, condition)
        state = sa.inspect(value)
        identity = state.identity
        if identity is None:
            # transient and pending entities cannot be matched against the database
            logger.debug("cannot evaluate condition against unpersisted %r", value)
            return False
        sa_mapper = state.mapper
        q = self.session.query(sa_mapper.class_).filter(
            build_sql_expression_from_identity(sa_mapper, identity), condition
        )
        return bool(self.session.query(q.exists()).scalar())

    def __init__(
        self, session: orm.Session, fallback: typing.Optional[ConditionEvaluator] = None
    ):
        self.session = session
        self.fallback = fallback if fallback is not None else DefaultConditionEvaluatorImpl()


def default_type_identifier(sa_mapper: orm.Mapper) -> str:
    tables = list(sa_mapper.tables)
    if len(tables) != 1:
        raise InvalidDeclarationError(
            f"SQLAlchemy mapper is associated to multiple tables: "
            f'{", ".join(table.name for table in tables)}'
        )
    return tables[0].name


def extract_properties(
    sa_mapper: orm.Mapper,
    type_identifier: typing.Callable[[orm.Mapper], str] = default_type_identifier,
) -> typing.Dict[str, typing.Optional[str]]:
    """
    Lists the properties of a mapped class, leaving out primary and foreign key columns.
    Relationships are mapped to the identifier of their target type.
    """
    pkey_cols = set(sa_mapper.primary_key)
    properties: typing.Dict[str, typing.Optional[str]] = {}
    for column_attr in sa_mapper.column_attrs:
        columns = column_attr.columns
        if all(
            isinstance(col, sa.Column) and (col in pkey_cols or col.foreign_keys)
            for col in columns
        ):
            continue
        properties[column_attr.key] = None
    for rel in sa_mapper.relationships:
        properties[rel.key] = type_identifier(rel.mapper)
    return properties


def describe_mapped_class(
    class_: type,
    identifier: typing.Optional[str] = None,
    updatable: bool = True,
    creatable: bool = True,
    aliases: typing.Mapping[str, typing.Sequence[str]] = EMPTY_ALIASES,
    access_condition: typing.Any = None,
    type_identifier: typing.Callable[[orm.Mapper], str] = default_type_identifier,
) -> TypeDescriptor:
    """
    Derives a :py:class:`TypeDescriptor` exposing every column and relationship of a mapped
    class.  The identifiers of the types default to the names of the mapped tables.
    """
    sa_mapper = sa.inspect(class_)
    properties = extract_properties(sa_mapper, type_identifier)
    for name in aliases:
        properties.setdefault(name, None)
    return TypeDescriptor(
        identifier if identifier is not None else type_identifier(sa_mapper),
        readable_properties=properties,
        updatable_properties=properties if updatable else None,
        initializable_properties=properties if creatable else None,
        aliases=aliases,
        access_condition=access_condition,
        entity_class=class_,
    )
