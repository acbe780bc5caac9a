"""Migus: a router-centric web framework.

Routes map ``{name}`` paths to functions, ``(Controller, "method")``
pairs or ``"Controller@method"`` strings, wrapped in named middleware.

Basic usage::

    from migus import App, AppConfig

    app = App(AppConfig(secret_key="s3cr3t"))

    def hello(request, response, name):
        return f"Hola, {name}"

    app.router.get("/hello/{name}", hello).name("hello")
    app.run()

Route groups::

    with app.router.group({"prefix": "/admin", "middleware": ["auth", "admin"]}) as admin:
        admin.get("/users", "AdminUserController@index")
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "DispatchContext",
    "Forbidden",
    "HTTPError",
    "MigusError",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "RouteBuilder",
    "Template",
    "binds",
    "capture",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import migus`` fast while providing a flat top-level API.
    """
    if name == "App":
        from migus.app import App

        return App

    if name == "AppConfig":
        from migus.config import AppConfig

        return AppConfig

    if name == "DispatchContext":
        from migus.dispatch import DispatchContext

        return DispatchContext

    if name in ("Request", "Response", "Redirect"):
        from migus import http as _http

        return getattr(_http, name)

    if name == "Template":
        from migus.view import Template

        return Template

    if name in ("RouteBuilder", "binds", "capture"):
        from migus import routing as _routing

        return getattr(_routing, name)

    if name in ("MigusError", "HTTPError", "NotFound", "Forbidden"):
        from migus import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
