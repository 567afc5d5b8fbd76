"""Error hierarchy raised by the data-access core and its storage port."""

from __future__ import annotations


class DataAccessError(Exception):
    """Base class for every error raised by `jobly_data`.

    `client_error` tells an outer layer whether the caller can fix the
    request (bad or missing input) or whether the failure is internal.
    """

    client_error: bool = False


class EmptyInputError(DataAccessError, ValueError):
    """A partial update or insert was called without any fields."""

    client_error = True


class InvariantViolation(DataAccessError, RuntimeError):
    """Programming error: input reached the core in a shape it never accepts."""


class NotFoundError(DataAccessError, LookupError):
    """No row matched the requested key."""

    client_error = True


class DuplicateError(DataAccessError, ValueError):
    """A row with the same natural key already exists."""

    client_error = True


class StorageError(DataAccessError):
    """The storage driver failed; the original exception is chained as `__cause__`."""
