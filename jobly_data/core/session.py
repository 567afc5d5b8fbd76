"""Session facade grouping the entity repositories over one database."""

from __future__ import annotations

import contextlib
from typing import Iterator, Optional

from .contracts import DatabasePort
from .repository import CompanyRepository, JobRepository, PasswordHasher, UserRepository


class Session:
    """Companies, jobs, and users repositories sharing one `DatabasePort`."""

    def __init__(
        self,
        db: DatabasePort,
        *,
        password_hasher: Optional[PasswordHasher] = None,
    ):
        self.db = db
        self.companies = CompanyRepository(db)
        self.jobs = JobRepository(db)
        self.users = UserRepository(db, password_hasher=password_hasher)

    @contextlib.contextmanager
    def begin(self) -> Iterator[Session]:
        """Yield this session inside one `db.transaction()` block."""

        with self.db.transaction():
            yield self

    def transaction(self) -> contextlib.AbstractContextManager[Session]:
        """Same as `begin()`."""

        return self.begin()
