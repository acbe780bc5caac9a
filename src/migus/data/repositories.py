"""SQL for the ``users`` table. No business rules live here."""

from datetime import UTC, datetime

from migus.data.database import Database
from migus.data.models import User

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_timestamp() -> str:
    """Current UTC time in the format SQLite's ``datetime('now')`` uses."""
    return datetime.now(UTC).strftime(TIMESTAMP_FORMAT)


class UserRepository:
    __slots__ = ("_db",)

    def __init__(self, db: Database) -> None:
        self._db = db

    def all(self) -> list[User]:
        return self._db.fetch(User, "SELECT * FROM users ORDER BY id DESC")

    def find(self, id: int) -> User | None:
        return self._db.fetch_one(User, "SELECT * FROM users WHERE id = ? LIMIT 1", id)

    def find_by_email(self, email: str) -> User | None:
        return self._db.fetch_one(User, "SELECT * FROM users WHERE email = ? LIMIT 1", email)

    def create(self, name: str, email: str, hashed_password: str, role: str = "user") -> User:
        stamp = now_timestamp()
        new_id = self._db.insert(
            "INSERT INTO users (name, email, password, role, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            name,
            email,
            hashed_password,
            role,
            stamp,
            stamp,
        )
        user = self.find(new_id)
        assert user is not None
        return user

    def update_password(self, id: int, hashed_password: str) -> bool:
        return (
            self._db.execute(
                "UPDATE users SET password = ?, updated_at = ? WHERE id = ?",
                hashed_password,
                now_timestamp(),
                id,
            )
            > 0
        )

    def update_role(self, id: int, role: str) -> bool:
        return (
            self._db.execute(
                "UPDATE users SET role = ?, updated_at = ? WHERE id = ?",
                role,
                now_timestamp(),
                id,
            )
            > 0
        )

    def count(self) -> int:
        return int(self._db.fetch_val("SELECT COUNT(*) FROM users") or 0)
