"""SQLite access, a dict-level ORM, and the user/session services.

Usage::

    from migus.data import Database, UserService, create_schema

    db = Database("sqlite:///storage/app.db")
    create_schema(db)
    users = UserService(db)
    user = users.create_user("Ana", "ana@example.com", "secret")
"""

from migus.data.database import Database
from migus.data.errors import DataError, DuplicateEmailError, IntegrityError, QueryError
from migus.data.models import User
from migus.data.orm import ORM, build_where
from migus.data.repositories import UserRepository
from migus.data.schema import create_schema
from migus.data.services import SessionService, UserService

__all__ = [
    "ORM",
    "DataError",
    "Database",
    "DuplicateEmailError",
    "IntegrityError",
    "QueryError",
    "SessionService",
    "User",
    "UserRepository",
    "UserService",
    "build_where",
    "create_schema",
]
