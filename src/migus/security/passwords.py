"""Password hashing with argon2id.

Hashes are PHC-format strings produced by ``argon2-cffi``'s
``PasswordHasher`` and are safe to store in the ``users.password``
column::

    from migus.security.passwords import hash_password, verify_password

    hashed = hash_password("s3cret")
    verify_password("s3cret", hashed)  # True
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash *password* with argon2id.

    Raises:
        ValueError: If *password* is empty.
    """
    if not password:
        msg = "Password must not be empty."
        raise ValueError(msg)
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Check *password* against a stored hash. Mismatches and malformed hashes return False."""
    if not password or not hashed:
        return False
    try:
        return _hasher.verify(hashed, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hashed: str) -> bool:
    """Whether *hashed* was produced with weaker parameters than the current ones."""
    return _hasher.check_needs_rehash(hashed)
