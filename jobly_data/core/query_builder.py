"""SQL fragment builders for partial updates, inserts, filtering, and sorting.

This module centralizes SQL string compilation from sparse inputs. Values never
enter the SQL text: every value is bound through `ParamBinder`, which renders
the placeholder for exactly the position the value occupies in the parameter
list. Column names are always quoted by the dialect.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .contracts import DialectPort
from .errors import EmptyInputError, InvariantViolation
from .filters import OperatorTable
from .types import PositionalParams


@dataclass(frozen=True)
class CompiledFragment:
    """Represents a compiled SQL fragment with its bound parameters."""

    sql: str
    params: PositionalParams = ()

    def __bool__(self) -> bool:
        return bool(self.sql)


class ParamBinder:
    """Appends values to a parameter list and renders matching placeholders.

    A binder can continue numbering after parameters that were already bound
    by an earlier fragment, so the next placeholder is always
    `len(params) + 1`.
    """

    def __init__(self, dialect: DialectPort, initial: Iterable[Any] = ()) -> None:
        self._dialect = dialect
        self._params: List[Any] = list(initial)

    def bind(self, value: Any) -> str:
        """Bind one value and return its placeholder."""

        self._params.append(value)
        return self._dialect.placeholder(len(self._params))

    @property
    def params(self) -> PositionalParams:
        return tuple(self._params)

    def fragment(self, sql: str) -> CompiledFragment:
        return CompiledFragment(sql, self.params)


def resolve_column(name: str, translation: Mapping[str, str]) -> str:
    """Map an external field name to its storage column (verbatim if absent)."""

    return translation.get(name) or name


def build_update(
    update: Mapping[str, Any],
    translation: Mapping[str, str],
    dialect: DialectPort,
) -> CompiledFragment:
    """Compile a sparse field mapping into the body of a `SET` clause.

    Entries are emitted in the mapping's insertion order, which is also the
    order of the returned parameters.

    Args:
        update: External field name to new value. `None` values are kept.
        translation: External field name to storage column overrides.
        dialect: SQL dialect used for identifier quoting and placeholders.

    Returns:
        Fragment like `"first_name"=$1, "email"=$2` with parameters in order.

    Raises:
        EmptyInputError: If `update` has no entries.
    """

    if not update:
        raise EmptyInputError("No data")

    binder = ParamBinder(dialect)
    assignments = [
        f"{dialect.q(resolve_column(name, translation))}={binder.bind(value)}"
        for name, value in update.items()
    ]
    return binder.fragment(", ".join(assignments))


def build_insert(
    data: Mapping[str, Any],
    translation: Mapping[str, str],
    dialect: DialectPort,
) -> CompiledFragment:
    """Compile a field mapping into `("col", ...) VALUES ($1, ...)`.

    Raises:
        EmptyInputError: If `data` has no entries.
    """

    if not data:
        raise EmptyInputError("No data")

    binder = ParamBinder(dialect)
    columns = ", ".join(dialect.q(resolve_column(name, translation)) for name in data)
    placeholders = ", ".join(binder.bind(value) for value in data.values())
    return binder.fragment(f"({columns}) VALUES ({placeholders})")


def build_filter(
    spec: Optional[Mapping[str, Any]],
    operators: OperatorTable,
    dialect: DialectPort,
) -> CompiledFragment:
    """Compile named filters into an `AND`-joined predicate list.

    The returned SQL does not include the `WHERE` keyword and is empty when no
    predicate was emitted. Presence rules (for example `hasEquity`) emit their
    predicate only for truthy values and never consume a parameter slot, so
    placeholders stay contiguous from 1.

    Args:
        spec: Filter name to value, or `None`.
        operators: Entity operator table keyed by filter name.
        dialect: SQL dialect used for quoting, placeholders, and `ILIKE`.

    Returns:
        Compiled predicate fragment and its parameters.

    Raises:
        InvariantViolation: If a filter name is not in `operators`.
    """

    if not spec:
        return CompiledFragment("")

    unknown = [name for name in spec if name not in operators]
    if unknown:
        raise InvariantViolation(
            f"Unrecognized filter(s) {unknown}; expected one of {sorted(operators)}."
        )

    binder = ParamBinder(dialect)
    clauses: List[str] = []
    for name, value in spec.items():
        rule = operators[name]
        op = dialect.like_operator if rule.op == "ILIKE" else rule.op
        col_sql = dialect.q(rule.col)

        if not rule.parametric:
            if value:
                clauses.append(f"{col_sql} {op} {rule.literal}")
            continue

        clauses.append(f"{col_sql} {op} {binder.bind(value)}")

    return binder.fragment(" AND ".join(clauses))


def compile_order_by(expressions: Sequence[str]) -> str:
    """Compile an `ORDER BY` clause from already-quoted column expressions.

    Returns:
        SQL `ORDER BY` fragment or an empty string.
    """

    if not expressions:
        return ""
    return f" ORDER BY {', '.join(expressions)}"
