"""Load route definitions from Python files.

A route file is a plain module that defines ``register(router)``::

    # routes/web.py
    def register(router):
        router.get("/", "HomeController@index")
        router.middleware("guest").get("/login", "AuthController@show_login")

Files are loaded in a fixed order: ``web``, ``api``, ``auth`` and
``admin`` first (when present), then the remaining top-level files
sorted by name, then files in subdirectories. Every file is loaded
at most once.
"""

import importlib.util
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from migus.errors import ConfigurationError

if TYPE_CHECKING:
    from migus.routing.builder import RouteBuilder

logger = logging.getLogger("migus.routing")

PRIORITY_FILES = ("web.py", "api.py", "auth.py", "admin.py")


def route_files(routes_dir: str | Path) -> list[Path]:
    """The route files under *routes_dir*, in load order."""
    root = Path(routes_dir)
    if not root.is_dir():
        msg = f"Routes directory not found: {root}"
        raise ConfigurationError(msg)

    ordered: list[Path] = []
    seen: set[Path] = set()

    def take(path: Path) -> None:
        real = path.resolve()
        if real not in seen and not path.name.startswith("_"):
            seen.add(real)
            ordered.append(path)

    for name in PRIORITY_FILES:
        candidate = root / name
        if candidate.is_file():
            take(candidate)
    for path in sorted(root.glob("*.py")):
        take(path)
    for path in sorted(root.rglob("*.py")):
        if path.parent != root:
            take(path)
    return ordered


def load_route_file(builder: RouteBuilder, path: str | Path) -> None:
    """Execute one route file and call its ``register(builder)``."""
    path = Path(path)
    if not path.is_file():
        msg = f"Route file not found: {path}"
        raise ConfigurationError(msg)

    module_name = f"migus_routes_{'_'.join(path.with_suffix('').parts[-3:])}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load route file: {path}"
        raise ConfigurationError(msg)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    register = getattr(module, "register", None)
    if not callable(register):
        msg = f"Route file {path} must define register(router)"
        raise ConfigurationError(msg)
    register(builder)
    logger.debug("Loaded routes from %s", path)


def load_route_files(builder: RouteBuilder, routes_dir: str | Path) -> list[Path]:
    """Load every route file under *routes_dir*. Returns the files loaded."""
    files = route_files(routes_dir)
    for path in files:
        load_route_file(builder, path)
    return files
