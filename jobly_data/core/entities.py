"""Declarative entity tables consumed by the generic builders and assembler.

Each entity is described once: its table, key, projection, deterministic
ordering, field translation table, filter operator table, and an optional
one-to-many relation. Builders and the assembler stay entity-agnostic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import AbstractSet, Mapping, Optional, Tuple

from .contracts import DialectPort
from .filters import F, FilterRule


@dataclass(frozen=True)
class Column:
    """One projected column.

    Attributes:
        name: Storage column name.
        alias: External name in result rows (defaults to `name`).
        gated_by: Filter names that enable this column in list queries.
            Empty means always projected.
    """

    name: str
    alias: Optional[str] = None
    gated_by: frozenset[str] = frozenset()

    @property
    def key(self) -> str:
        """Name of this column in result rows."""

        return self.alias or self.name

    def sql(self, dialect: DialectPort, table: Optional[str] = None) -> str:
        col_sql = dialect.qualified(table, self.name) if table else dialect.q(self.name)
        if self.alias and self.alias != self.name:
            return f"{col_sql} AS {dialect.q(self.alias)}"
        return col_sql


@dataclass(frozen=True)
class Relation:
    """One-to-many child relation reached through a `LEFT JOIN`.

    `columns` aliases must be unique across the joined row. Children are
    emitted as dicts keyed by storage column name, or as bare values when
    `scalar` is set (single column).
    """

    name: str
    table: str
    local_key: str
    remote_key: str
    columns: Tuple[Column, ...]
    order_by: str
    scalar: bool = False

    def __post_init__(self) -> None:
        if self.scalar and len(self.columns) != 1:
            raise ValueError("Scalar relations project exactly one column.")

    @property
    def child_fields(self) -> str | Mapping[str, str]:
        """Aggregator child mapping: output field to row key."""

        if self.scalar:
            return self.columns[0].key
        return {column.name: column.key for column in self.columns}


@dataclass(frozen=True)
class EntitySpec:
    """Everything the generic data-access path needs to know about one entity."""

    name: str
    table: str
    key: str
    columns: Tuple[Column, ...]
    order_by: Tuple[str, ...]
    translation: Mapping[str, str] = field(default_factory=dict)
    operators: Mapping[str, FilterRule] = field(default_factory=dict)
    relation: Optional[Relation] = None
    list_with_relation: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "translation", MappingProxyType(dict(self.translation)))
        object.__setattr__(self, "operators", MappingProxyType(dict(self.operators)))

    @property
    def key_field(self) -> str:
        """External name of the key column."""

        for column in self.columns:
            if column.name == self.key:
                return column.key
        return self.key

    @property
    def parent_fields(self) -> Tuple[str, ...]:
        return tuple(column.key for column in self.columns)

    def projection(self, requested: AbstractSet[str] | None = None) -> Tuple[Column, ...]:
        """Columns for a list query given the requested filter names.

        Gated columns are dropped unless one of their gating filters was
        requested. `None` means a full projection.
        """

        if requested is None:
            return self.columns
        return tuple(
            column
            for column in self.columns
            if not column.gated_by or column.gated_by & requested
        )


_EMPLOYEE_FILTERS = frozenset({"minEmployees", "maxEmployees"})

COMPANIES = EntitySpec(
    name="company",
    table="companies",
    key="handle",
    columns=(
        Column("handle"),
        Column("name"),
        Column("description"),
        Column("num_employees", "numEmployees", gated_by=_EMPLOYEE_FILTERS),
        Column("logo_url", "logoUrl"),
    ),
    order_by=("name",),
    translation={"numEmployees": "num_employees", "logoUrl": "logo_url"},
    operators={
        "nameLike": F.ilike("name"),
        "minEmployees": F.ge("num_employees"),
        "maxEmployees": F.le("num_employees"),
    },
    relation=Relation(
        name="jobs",
        table="jobs",
        local_key="handle",
        remote_key="company_handle",
        columns=(
            Column("id", "job_id"),
            Column("title", "job_title"),
            Column("salary", "job_salary"),
            Column("equity", "job_equity"),
        ),
        order_by="id",
    ),
)

JOBS = EntitySpec(
    name="job",
    table="jobs",
    key="id",
    columns=(
        Column("id"),
        Column("title"),
        Column("salary"),
        Column("equity"),
        Column("company_handle", "companyHandle"),
    ),
    order_by=("id",),
    translation={"companyHandle": "company_handle"},
    operators={
        "titleLike": F.ilike("title"),
        "minSalary": F.ge("salary"),
        "hasEquity": F.nonzero("equity"),
    },
)

USERS = EntitySpec(
    name="user",
    table="users",
    key="username",
    columns=(
        Column("username"),
        Column("first_name", "firstName"),
        Column("last_name", "lastName"),
        Column("email"),
        Column("is_admin", "isAdmin"),
    ),
    order_by=("username",),
    translation={
        "firstName": "first_name",
        "lastName": "last_name",
        "isAdmin": "is_admin",
    },
    relation=Relation(
        name="jobs",
        table="applications",
        local_key="username",
        remote_key="username",
        columns=(Column("job_id"),),
        order_by="job_id",
        scalar=True,
    ),
    list_with_relation=True,
)
