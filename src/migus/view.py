"""Kida-backed views rendered inside a layout.

A view is rendered first; its HTML is then passed to the layout as
``content`` (already marked safe) together with the same data::

    view.render("auth/login", {"title": "Login"}, ctx=ctx)
    # renders auth/login.html, then layout.html with content=<that HTML>

When a ``DispatchContext`` is passed, templates also get ``csrf_field()``,
``csrf_token()``, ``flash(name)``, ``flash_all()``, ``old(field)``,
``current_user`` and ``request``. ``url_for`` and ``app_name`` are
environment globals.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from kida import Environment, FileSystemLoader
from kida.utils.html import Markup

from migus.config import AppConfig
from migus.http.response import DEFAULT_CONTENT_TYPE, Response

if TYPE_CHECKING:
    from migus.dispatch import DispatchContext


@dataclass(frozen=True, slots=True)
class Template:
    """Render a view as the handler's response.

    ``layout=True`` uses the app layout, ``None`` renders the view bare,
    and a string picks another layout::

        return Template("dashboard", status=200, user=user)
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)
    status: int = 200
    layout: str | bool | None = True

    def __init__(
        self,
        name: str,
        /,
        *,
        status: int = 200,
        layout: str | bool | None = True,
        **context: Any,
    ) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "layout", layout)


def template_name(name: str) -> str:
    """``"auth/login"`` -> ``"auth/login.html"``; names with a suffix are unchanged."""
    if PurePosixPath(name).suffix:
        return name
    return f"{name}.html"


def create_environment(config: AppConfig, globals_: Mapping[str, Any] | None = None) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )
    env.add_global("app_name", config.app_name)
    for name, value in (globals_ or {}).items():
        env.add_global(name, value)
    return env


class View:
    """Renders views into the layout with one kida environment."""

    __slots__ = ("env", "layout")

    def __init__(self, env: Environment, *, layout: str | None = "layout.html") -> None:
        self.env = env
        self.layout = layout

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        url_for: Callable[..., str] | None = None,
    ) -> View:
        globals_: dict[str, Any] = {}
        if url_for is not None:
            globals_["url_for"] = url_for
        return cls(create_environment(config, globals_), layout=config.layout)

    def render(
        self,
        name: str,
        data: Mapping[str, Any] | None = None,
        *,
        ctx: DispatchContext | None = None,
        layout: str | bool | None = True,
    ) -> str:
        """Render *name* and wrap it in the layout.

        Raises:
            TemplateNotFoundError: The view or the layout does not exist.
        """
        context = {**request_context(ctx), **(data or {})}
        content = self.env.get_template(template_name(name)).render(context)

        layout_name = self.layout if layout is True else (layout or None)
        if not layout_name:
            return content
        wrapper = self.env.get_template(template_name(layout_name))
        return wrapper.render({**context, "content": Markup(content)})

    def render_to_response(
        self,
        name: str,
        data: Mapping[str, Any] | None,
        response: Response,
        status: int = 200,
        *,
        ctx: DispatchContext | None = None,
        layout: str | bool | None = True,
    ) -> Response:
        html = self.render(name, data, ctx=ctx, layout=layout)
        response.set_status(status)
        response.header("Content-Type", DEFAULT_CONTENT_TYPE)
        return response.set_content(html)


def request_context(ctx: DispatchContext | None) -> dict[str, Any]:
    """Per-request template helpers bound to *ctx*."""
    if ctx is None:
        return {}
    flash = ctx.flash
    csrf = ctx.csrf
    return {
        "request": ctx.request,
        "current_user": ctx.user,
        "csrf_token": csrf.token,
        "csrf_field": csrf.field,
        "flash": lambda name: Markup(flash.render(name)),
        "flash_all": lambda: Markup(flash.render_all()),
        "old": ctx.old,
    }
