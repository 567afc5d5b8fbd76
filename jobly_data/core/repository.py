"""Entity repositories built on the generic builders, assembler, and aggregator."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .aggregation import aggregate, aggregate_one
from .assembler import (
    Statement,
    assemble_delete,
    assemble_get,
    assemble_insert,
    assemble_list,
    assemble_lookup,
    assemble_update,
)
from .contracts import DatabasePort
from .entities import COMPANIES, JOBS, USERS, Column, EntitySpec
from .errors import DuplicateError, NotFoundError
from .query_builder import build_filter, build_insert, build_update
from .types import Record, RowMapping

logger = logging.getLogger(__name__)

PasswordHasher = Callable[[str], str]


class EntityRepository:
    """CRUD and filtered listing for one entity described by an `EntitySpec`.

    The repository owns no SQL of its own: it compiles fragments, assembles
    statements, runs them through the `DatabasePort`, and reshapes rows.
    """

    entity: EntitySpec
    check_duplicates: bool = False

    def __init__(self, db: DatabasePort, entity: Optional[EntitySpec] = None):
        self.db = db
        self.d = db.dialect
        if entity is not None:
            self.entity = entity

    def list(self, filters: Optional[Mapping[str, Any]] = None) -> List[Record]:
        """List records matching all `filters`, in the entity's fixed order."""

        entity = self.entity
        where = build_filter(filters, entity.operators, self.d)
        include_relation = entity.list_with_relation and entity.relation is not None
        stmt = assemble_list(
            entity,
            where,
            self.d,
            requested=frozenset(filters or ()),
            include_relation=include_relation,
        )
        rows = self._fetchall("list", stmt)
        if not include_relation:
            return [dict(row) for row in rows]
        return aggregate(rows, entity.key_field, **self._aggregation_args())

    def get(self, key: Any) -> Record:
        """Return one record (with its relation, when the entity has one).

        Raises:
            NotFoundError: If no row has this key.
        """

        entity = self.entity
        include_relation = entity.relation is not None
        stmt = assemble_get(entity, key, self.d, include_relation=include_relation)
        rows = self._fetchall("get", stmt)
        if include_relation:
            return aggregate_one(
                rows,
                entity.key_field,
                not_found=self._not_found_message(key),
                **self._aggregation_args(),
            )
        if not rows:
            raise NotFoundError(self._not_found_message(key))
        return dict(rows[0])

    def create(self, data: Mapping[str, Any]) -> Record:
        """Insert one record and return it as stored.

        Raises:
            DuplicateError: If `check_duplicates` is set and the key exists.
            EmptyInputError: If `data` is empty.
        """

        entity = self.entity
        if self.check_duplicates:
            key = data.get(entity.key_field)
            if self._exists(entity.table, {entity.key: key}):
                raise DuplicateError(f"Duplicate {entity.name}: {key}")

        values = build_insert(data, entity.translation, self.d)
        stmt = assemble_insert(entity.table, values, self.d, returning=entity.columns)
        row = self._fetchone("create", stmt)
        return dict(row) if row is not None else {}

    def update(self, key: Any, data: Mapping[str, Any]) -> Record:
        """Apply a partial update and return the updated record.

        Raises:
            EmptyInputError: If `data` is empty.
            NotFoundError: If no row has this key.
        """

        assignments = build_update(data, self.entity.translation, self.d)
        stmt = assemble_update(self.entity, assignments, key, self.d)
        row = self._fetchone("update", stmt)
        if row is None:
            raise NotFoundError(self._not_found_message(key))
        return dict(row)

    def remove(self, key: Any) -> None:
        """Delete one record.

        Raises:
            NotFoundError: If no row has this key.
        """

        stmt = assemble_delete(self.entity, key, self.d)
        if self._fetchone("remove", stmt) is None:
            raise NotFoundError(self._not_found_message(key))

    def _aggregation_args(self) -> Dict[str, Any]:
        relation = self.entity.relation
        assert relation is not None
        return {
            "parent_fields": self.entity.parent_fields,
            "child_fields": relation.child_fields,
            "children": relation.name,
        }

    def _exists(self, table: str, match: Mapping[str, Any]) -> bool:
        stmt = assemble_lookup(table, match, self.d, columns=list(match))
        return self._fetchone("lookup", stmt) is not None

    def _not_found_message(self, key: Any) -> str:
        return f"No {self.entity.name}: {key}"

    def _fetchall(self, op: str, stmt: Statement) -> List[RowMapping]:
        logger.debug("%s.%s with %d param(s)", self.entity.name, op, len(stmt.params))
        return self.db.fetchall(stmt.sql, stmt.params)

    def _fetchone(self, op: str, stmt: Statement) -> Optional[RowMapping]:
        logger.debug("%s.%s with %d param(s)", self.entity.name, op, len(stmt.params))
        return self.db.fetchone(stmt.sql, stmt.params)


class CompanyRepository(EntityRepository):
    """Companies, filterable by `nameLike`, `minEmployees`, `maxEmployees`.

    `get` nests the company's jobs as `[{id, title, salary, equity}, ...]`.
    """

    entity = COMPANIES
    check_duplicates = True


class JobRepository(EntityRepository):
    """Jobs, filterable by `titleLike`, `minSalary`, `hasEquity`."""

    entity = JOBS


class UserRepository(EntityRepository):
    """Users with the ids of the jobs they applied to nested as `jobs`.

    Passwords are passed through `password_hasher` before they are stored and
    are never part of a returned record.
    """

    entity = USERS
    check_duplicates = True

    def __init__(
        self,
        db: DatabasePort,
        *,
        password_hasher: Optional[PasswordHasher] = None,
    ):
        super().__init__(db)
        self._password_hasher = password_hasher

    def register(self, data: Mapping[str, Any]) -> Record:
        """Create a user, hashing `password` first."""

        return self.create(data)

    def create(self, data: Mapping[str, Any]) -> Record:
        return super().create(self._hash_password(data))

    def update(self, key: Any, data: Mapping[str, Any]) -> Record:
        return super().update(key, self._hash_password(data))

    def apply_for_job(self, username: str, job_id: Any) -> Dict[str, Any]:
        """Record an application of `username` to `job_id`.

        Raises:
            NotFoundError: If the user or the job does not exist.
            DuplicateError: If the application already exists.
        """

        with self.db.transaction():
            if not self._exists(USERS.table, {USERS.key: username}):
                raise NotFoundError(self._not_found_message(username))
            if not self._exists(JOBS.table, {JOBS.key: job_id}):
                raise NotFoundError(f"No {JOBS.name}: {job_id}")

            application = {"username": username, "job_id": job_id}
            if self._exists("applications", application):
                raise DuplicateError(f"Duplicate application: {username} -> {job_id}")

            values = build_insert(application, {}, self.d)
            stmt = assemble_insert(
                "applications", values, self.d, returning=(Column("job_id"),)
            )
            self._fetchone("apply", stmt)

        return {"applied": job_id}

    def _hash_password(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        payload = dict(data)
        if self._password_hasher is not None and payload.get("password"):
            payload["password"] = self._password_hasher(payload["password"])
        return payload
