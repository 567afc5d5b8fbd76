"""Filter rule primitives used to build per-entity operator tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class FilterRule:
    """Comparison semantic attached to one named filter.

    Attributes:
        col: Raw column name the predicate applies to.
        op: SQL operator. `ILIKE` is resolved through the dialect.
        literal: Right-hand side for presence rules (no bound parameter).
        parametric: Whether the rule binds the filter value as a parameter.
            Presence rules only gate whether the predicate is emitted.
    """

    col: str
    op: str
    literal: str | None = None
    parametric: bool = True


OperatorTable = Mapping[str, FilterRule]


class F:
    """Filter rule factory methods."""

    @staticmethod
    def ilike(col: str) -> FilterRule:
        """Case-insensitive pattern match (`col ILIKE $n`)."""

        return FilterRule(col=col, op="ILIKE")

    @staticmethod
    def eq(col: str) -> FilterRule:
        """Exact match (`col = $n`)."""

        return FilterRule(col=col, op="=")

    @staticmethod
    def ge(col: str) -> FilterRule:
        """Lower bound (`col >= $n`)."""

        return FilterRule(col=col, op=">=")

    @staticmethod
    def le(col: str) -> FilterRule:
        """Upper bound (`col <= $n`)."""

        return FilterRule(col=col, op="<=")

    @staticmethod
    def nonzero(col: str) -> FilterRule:
        """Numeric `col > 0`, emitted only when the filter value is truthy."""

        return FilterRule(col=col, op=">", literal="0", parametric=False)


def contains(term: str) -> str:
    """Wrap a search term so a pattern rule matches it anywhere in the column."""

    return f"%{term}%"
