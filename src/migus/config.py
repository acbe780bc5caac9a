"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, with every
setting spelled out as a typed field instead of string-key lookups.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, secret_key="s3cr3t", database_url="sqlite:///app.db")
    """

    app_name: str = "migus framework"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    reload_dirs: tuple[str, ...] = ()

    # Security
    secret_key: str = ""

    # Handlers
    controller_namespace: str = "app.controllers"
    strict_middleware: bool = True

    # Views
    template_dir: str | Path = "templates"
    layout: str | None = "layout.html"
    autoescape: bool = True
    not_found_template: str | Path | None = "templates/notFound.html"

    # Route files
    routes_dir: str | Path = "routes"

    # Data
    database_url: str | None = None
    database_echo: bool = False

    # Sessions
    session_cookie: str = "migus_session"
    session_max_age: int = 86400
    session_secure: bool = False

    # Auth
    auth_cookie: str = "auth_token"
    auth_token_days: int = 7
    login_url: str = "/login"
    home_url: str = "/"

    @classmethod
    def from_env(cls, prefix: str = "MIGUS_", **overrides: Any) -> AppConfig:
        """Build a config from ``<prefix><FIELD>`` environment variables.

        Unset variables keep the field default. Explicit keyword
        *overrides* win over the environment::

            MIGUS_DEBUG=1 MIGUS_PORT=9000 python -m myapp
        """
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = os.environ.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            values[f.name] = _parse_env_value(f.default, raw)
        values.update(overrides)
        return cls(**values)


def _parse_env_value(default: Any, raw: str) -> Any:
    """Coerce an environment string to the type of the field default."""
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUE_VALUES
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, tuple):
        return tuple(part.strip() for part in raw.split(",") if part.strip())
    return raw
