"""Cookie parsing and Set-Cookie serialization.

``parse_cookies`` is the read side used by Request; ``SetCookie`` is the
write side attached to Response.
"""

from dataclasses import dataclass
from urllib.parse import quote, unquote


def parse_cookies(header: str | None) -> dict[str, str]:
    """Parse a ``Cookie`` header into a name-value dict.

    Values are percent-decoded. Pairs without ``=`` are skipped and a
    repeated name keeps its last value.
    """
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.strip().partition("=")
        if sep:
            cookies[name.strip()] = unquote(value.strip())
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive queued on a Response."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str | None = "Lax"

    @classmethod
    def expired(cls, name: str, path: str = "/", domain: str | None = None) -> SetCookie:
        """A directive that makes the browser drop cookie *name*."""
        return cls(name=name, value="", max_age=0, path=path, domain=domain)

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value."""
        parts = [f"{self.name}={quote(self.value, safe='')}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite}")
        return "; ".join(parts)
