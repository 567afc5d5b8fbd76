"""Query assembly from entity tables and compiled fragments.

Assembled list reads always carry a deterministic `ORDER BY` (the row
aggregator needs parent rows to be contiguous) and writes carry a
`RETURNING` projection, so a missing key yields an empty result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Any, List, Mapping, Optional, Sequence

from .contracts import DialectPort
from .entities import Column, EntitySpec
from .errors import InvariantViolation
from .query_builder import CompiledFragment, ParamBinder, compile_order_by
from .types import PositionalParams


@dataclass(frozen=True)
class Statement:
    """Executable SQL text with its positional parameters."""

    sql: str
    params: PositionalParams = ()


def assemble_list(
    entity: EntitySpec,
    where: CompiledFragment,
    dialect: DialectPort,
    *,
    requested: Optional[AbstractSet[str]] = None,
    include_relation: bool = False,
) -> Statement:
    """Assemble a list query for one entity.

    Args:
        entity: Entity table.
        where: Predicate fragment from `build_filter`; `WHERE` is added only
            when it is non-empty.
        dialect: SQL dialect.
        requested: Filter names present in the request; drives gated columns.
        include_relation: Join the entity relation for aggregation.
    """

    sql = _select_from(entity, dialect, entity.projection(requested), include_relation)
    if where:
        sql += f" WHERE {where.sql}"
    sql += compile_order_by(_ordering(entity, dialect, include_relation))
    return Statement(sql, where.params)


def assemble_get(
    entity: EntitySpec,
    key_value: Any,
    dialect: DialectPort,
    *,
    include_relation: bool = False,
) -> Statement:
    """Assemble a single-entity read by key."""

    binder = ParamBinder(dialect)
    sql = _select_from(entity, dialect, entity.columns, include_relation)
    key_sql = _column_ref(entity, dialect, entity.key, include_relation)
    sql += f" WHERE {key_sql} = {binder.bind(key_value)}"
    if include_relation and entity.relation is not None:
        relation = entity.relation
        sql += compile_order_by([dialect.qualified(relation.table, relation.order_by)])
    return Statement(sql, binder.params)


def assemble_update(
    entity: EntitySpec,
    assignments: CompiledFragment,
    key_value: Any,
    dialect: DialectPort,
) -> Statement:
    """Assemble `UPDATE ... SET ... WHERE key = $<n+1> RETURNING ...`.

    The key is always bound after every `SET` parameter.
    """

    if not assignments:
        raise InvariantViolation("UPDATE requires a non-empty SET fragment.")

    binder = ParamBinder(dialect, assignments.params)
    key_placeholder = binder.bind(key_value)
    sql = (
        f"UPDATE {dialect.q(entity.table)} SET {assignments.sql} "
        f"WHERE {dialect.q(entity.key)} = {key_placeholder}"
    )
    sql += dialect.returning_clause(_columns_sql(entity.columns, dialect))
    return Statement(sql, binder.params)


def assemble_delete(entity: EntitySpec, key_value: Any, dialect: DialectPort) -> Statement:
    """Assemble `DELETE ... WHERE key = $1 RETURNING key`."""

    binder = ParamBinder(dialect)
    key_sql = dialect.q(entity.key)
    sql = (
        f"DELETE FROM {dialect.q(entity.table)} "
        f"WHERE {key_sql} = {binder.bind(key_value)}"
    )
    sql += dialect.returning_clause(key_sql)
    return Statement(sql, binder.params)


def assemble_insert(
    table: str,
    values: CompiledFragment,
    dialect: DialectPort,
    *,
    returning: Sequence[Column],
) -> Statement:
    """Assemble `INSERT INTO table (...) VALUES (...) RETURNING ...`."""

    if not values:
        raise InvariantViolation("INSERT requires a non-empty VALUES fragment.")

    sql = f"INSERT INTO {dialect.q(table)} {values.sql}"
    sql += dialect.returning_clause(_columns_sql(returning, dialect))
    return Statement(sql, values.params)


def assemble_lookup(
    table: str,
    match: Mapping[str, Any],
    dialect: DialectPort,
    *,
    columns: Sequence[str],
) -> Statement:
    """Assemble an equality lookup on raw columns (`c1 = $1 AND c2 = $2`)."""

    if not match:
        raise InvariantViolation("Lookup requires at least one match column.")

    binder = ParamBinder(dialect)
    predicates = " AND ".join(
        f"{dialect.q(col)} = {binder.bind(value)}" for col, value in match.items()
    )
    selected = ", ".join(dialect.q(col) for col in columns)
    return Statement(
        f"SELECT {selected} FROM {dialect.q(table)} WHERE {predicates}",
        binder.params,
    )


def _select_from(
    entity: EntitySpec,
    dialect: DialectPort,
    columns: Sequence[Column],
    include_relation: bool,
) -> str:
    relation = entity.relation if include_relation else None
    if relation is None:
        return f"SELECT {_columns_sql(columns, dialect)} FROM {dialect.q(entity.table)}"

    projected: List[str] = [column.sql(dialect, entity.table) for column in columns]
    projected.extend(column.sql(dialect, relation.table) for column in relation.columns)
    join_on = (
        f"{dialect.qualified(entity.table, relation.local_key)} = "
        f"{dialect.qualified(relation.table, relation.remote_key)}"
    )
    return (
        f"SELECT {', '.join(projected)} FROM {dialect.q(entity.table)} "
        f"LEFT JOIN {dialect.q(relation.table)} ON {join_on}"
    )


def _ordering(entity: EntitySpec, dialect: DialectPort, include_relation: bool) -> List[str]:
    ordering = [
        _column_ref(entity, dialect, col, include_relation) for col in entity.order_by
    ]
    if include_relation and entity.relation is not None:
        relation = entity.relation
        ordering.append(dialect.qualified(relation.table, relation.order_by))
    return ordering


def _column_ref(
    entity: EntitySpec, dialect: DialectPort, col: str, include_relation: bool
) -> str:
    if include_relation and entity.relation is not None:
        return dialect.qualified(entity.table, col)
    return dialect.q(col)


def _columns_sql(columns: Sequence[Column], dialect: DialectPort) -> str:
    return ", ".join(column.sql(dialect) for column in columns)
