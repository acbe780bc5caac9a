"""Row models."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class User:
    """One row of the ``users`` table."""

    id: int
    name: str
    email: str
    password: str
    role: str = "user"
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self, *, include_password: bool = False) -> dict[str, Any]:
        data = asdict(self)
        if not include_password:
            del data["password"]
        return data

    def session_payload(self) -> dict[str, Any]:
        """The subset cached in the session as the current user."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at,
        }
