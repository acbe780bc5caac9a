"""Data layer error hierarchy."""

from migus.errors import MigusError


class DataError(MigusError):
    """Base for all migus.data errors."""


class QueryError(DataError):
    """A SQL statement failed."""


class IntegrityError(QueryError):
    """A constraint (UNIQUE, FOREIGN KEY, NOT NULL) was violated."""


class DuplicateEmailError(DataError):
    """A user with the same email already exists."""

    def __init__(self, message: str = "Ya existe un usuario con ese email.") -> None:
        super().__init__(message)
