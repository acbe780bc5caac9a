"""User and login-session services.

``UserService`` carries the business rules (unique email, password
hashing) on top of ``UserRepository``. ``SessionService`` manages the
long-lived login tokens behind the ``auth_token`` cookie.
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from migus.data.database import Database
from migus.data.errors import DuplicateEmailError
from migus.data.models import User
from migus.data.repositories import TIMESTAMP_FORMAT, UserRepository, now_timestamp
from migus.security.passwords import hash_password, verify_password

logger = logging.getLogger("migus.data")

DEFAULT_SESSION_DAYS = 7


class UserService:
    __slots__ = ("_users",)

    def __init__(self, db: Database) -> None:
        self._users = UserRepository(db)

    @property
    def repository(self) -> UserRepository:
        return self._users

    def count_users(self) -> int:
        return self._users.count()

    def all_users(self) -> list[User]:
        return self._users.all()

    def get_user(self, id: int) -> User | None:
        return self._users.find(id)

    def find_by_email(self, email: str) -> User | None:
        return self._users.find_by_email(email)

    def create_user(self, name: str, email: str, password: str, role: str = "user") -> User:
        """Create a user with a hashed password.

        Raises:
            DuplicateEmailError: The email is already registered.
        """
        if self._users.find_by_email(email) is not None:
            raise DuplicateEmailError
        user = self._users.create(name, email, hash_password(password), role)
        logger.info("Created user %d <%s>", user.id, user.email)
        return user

    def login(self, email: str, password: str) -> User | None:
        """The user when the credentials match, otherwise ``None``."""
        user = self._users.find_by_email(email)
        if user is None or not verify_password(password, user.password):
            return None
        return user

    def update_password(self, id: int, password: str) -> bool:
        return self._users.update_password(id, hash_password(password))

    def update_role(self, id: int, role: str) -> bool:
        return self._users.update_role(id, role)


class SessionService:
    __slots__ = ("_db",)

    def __init__(self, db: Database) -> None:
        self._db = db

    def create_session(
        self,
        user_id: int,
        user_agent: str | None,
        ip: str | None,
        expires_at: datetime | None = None,
    ) -> str:
        """Persist a new login token for *user_id* and return it."""
        token = secrets.token_hex(32)
        if expires_at is None:
            expires_at = datetime.now(UTC) + timedelta(days=DEFAULT_SESSION_DAYS)
        self._db.execute(
            "INSERT INTO sessions (user_id, session_token, user_agent, ip_address, expires_at) "
            "VALUES (?, ?, ?, ?, ?)",
            user_id,
            token,
            user_agent,
            ip,
            _format(expires_at),
        )
        return token

    def find_user_by_token(self, token: str) -> User | None:
        """The owner of an unexpired token, or ``None``."""
        return self._db.fetch_one(
            User,
            "SELECT u.* FROM sessions s JOIN users u ON u.id = s.user_id "
            "WHERE s.session_token = ? AND (s.expires_at IS NULL OR s.expires_at > ?) "
            "LIMIT 1",
            token,
            now_timestamp(),
        )

    def delete_by_token(self, token: str) -> None:
        self._db.execute("DELETE FROM sessions WHERE session_token = ?", token)

    def delete_by_user(self, user_id: int) -> None:
        self._db.execute("DELETE FROM sessions WHERE user_id = ?", user_id)


def _format(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.strftime(TIMESTAMP_FORMAT)
