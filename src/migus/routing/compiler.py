"""Path template compilation.

A template such as ``/users/{id}/posts/{slug}`` becomes an anchored
regular expression with one positional group per placeholder, plus the
ordered tuple of placeholder names::

    compile_path("/users/{id}")  ->  CompiledPath(re"^/users/([^/]+)$", ("id",))

Templates without placeholders compile to ``pattern=None``; they are
matched by exact string lookup instead.
"""

import re
from dataclasses import dataclass

PLACEHOLDER = re.compile(r"\{([a-zA-Z_][a-zA-Z0-9_-]*)\}")
SEGMENT = "([^/]+)"

_SLASHES = re.compile(r"/{2,}")


@dataclass(frozen=True, slots=True)
class CompiledPath:
    """The matcher and parameter names for one path template."""

    pattern: re.Pattern[str] | None
    params: tuple[str, ...] = ()

    @property
    def is_static(self) -> bool:
        return self.pattern is None


def compile_path(template: str) -> CompiledPath:
    """Compile *template* into a ``CompiledPath``.

    Text between placeholders is escaped, so ``.`` or ``+`` in a path
    match literally. Braces that do not wrap a valid identifier are
    left as literal text.
    """
    if "{" not in template:
        return CompiledPath(None)

    parts: list[str] = []
    params: list[str] = []
    pos = 0
    for m in PLACEHOLDER.finditer(template):
        parts.append(re.escape(template[pos : m.start()]))
        parts.append(SEGMENT)
        params.append(m.group(1))
        pos = m.end()
    if not params:
        return CompiledPath(None)
    parts.append(re.escape(template[pos:]))
    return CompiledPath(re.compile("^" + "".join(parts) + "$"), tuple(params))


def normalize_path(path: str) -> str:
    """Give *path* one leading slash, no repeated slashes, no trailing slash."""
    path = _SLASHES.sub("/", "/" + path.strip())
    return path.rstrip("/") or "/"


def join_paths(prefix: str, path: str) -> str:
    """Join a group prefix and a route path into one normalized path."""
    return normalize_path(f"{prefix}/{path}")
