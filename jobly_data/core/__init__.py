"""Public core API for fragment building, query assembly, and repositories."""

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
from .entities import COMPANIES, JOBS, USERS, Column, EntitySpec, Relation
from .errors import (
    DataAccessError,
    DuplicateError,
    EmptyInputError,
    InvariantViolation,
    NotFoundError,
    StorageError,
)
from .filters import F, FilterRule, OperatorTable, contains
from .query_builder import (
    CompiledFragment,
    ParamBinder,
    build_filter,
    build_insert,
    build_update,
    compile_order_by,
)
from .repository import CompanyRepository, EntityRepository, JobRepository, UserRepository
from .session import Session

__all__ = [
    "COMPANIES",
    "JOBS",
    "USERS",
    "Column",
    "EntitySpec",
    "Relation",
    "F",
    "FilterRule",
    "OperatorTable",
    "contains",
    "CompiledFragment",
    "ParamBinder",
    "build_filter",
    "build_insert",
    "build_update",
    "compile_order_by",
    "Statement",
    "assemble_delete",
    "assemble_get",
    "assemble_insert",
    "assemble_list",
    "assemble_lookup",
    "assemble_update",
    "aggregate",
    "aggregate_one",
    "EntityRepository",
    "CompanyRepository",
    "JobRepository",
    "UserRepository",
    "Session",
    "DataAccessError",
    "DuplicateError",
    "EmptyInputError",
    "InvariantViolation",
    "NotFoundError",
    "StorageError",
]
