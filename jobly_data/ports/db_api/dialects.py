"""Concrete SQL dialect implementations for DB-API adapters."""

from __future__ import annotations


class Dialect:
    """Base dialect that defines SQL quoting and positional placeholder behavior."""

    name: str = "generic"
    paramstyle: str = "qmark"
    quote_char: str = '"'
    like_operator: str = "LIKE"
    supports_returning: bool = True

    def q(self, ident: str) -> str:
        """Quote SQL identifier."""

        escaped = ident.replace(self.quote_char, self.quote_char * 2)
        return f"{self.quote_char}{escaped}{self.quote_char}"

    def qualified(self, table: str, ident: str) -> str:
        """Quote a table-qualified column reference."""

        return f"{self.q(table)}.{self.q(ident)}"

    def placeholder(self, position: int) -> str:
        """Return the placeholder for the 1-based parameter `position`."""

        if position < 1:
            raise ValueError(f"Parameter positions start at 1, got {position}.")
        if self.paramstyle == "dollar":
            return f"${position}"
        if self.paramstyle == "numbered":
            return f"?{position}"
        if self.paramstyle == "qmark":
            return "?"
        if self.paramstyle == "format":
            return "%s"
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")

    def returning_clause(self, columns_sql: str) -> str:
        """Return `RETURNING` clause for already-rendered columns."""

        if not self.supports_returning:
            raise NotImplementedError(
                f"{self.name} dialect has no RETURNING; write queries need it."
            )
        return f" RETURNING {columns_sql}"


class SQLiteDialect(Dialect):
    """SQLite dialect (`?1` numbered parameters, ASCII case-insensitive `LIKE`)."""

    name = "sqlite"
    paramstyle = "numbered"
    like_operator = "LIKE"


class PostgresDialect(Dialect):
    """PostgreSQL dialect (`$1` native parameters, `ILIKE`).

    Use with psycopg 3 `RawCursor` or any driver that binds server-side
    positional parameters.
    """

    name = "postgres"
    paramstyle = "dollar"
    like_operator = "ILIKE"
