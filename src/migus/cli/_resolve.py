"""Resolve ``"module:attribute"`` strings to App instances."""

import importlib

from migus.app import App


def resolve_app(import_string: str) -> App:
    """Import ``"module:attribute"`` and return the App it names.

    The attribute defaults to ``app``. A callable that is not an App is
    treated as a factory and called with no arguments.

    Raises:
        ModuleNotFoundError: The module cannot be imported.
        AttributeError: The module has no such attribute.
        TypeError: The object (or factory result) is not an ``App``.
    """
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name or "app")

    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a migus.App instance"
        raise TypeError(msg)
    return obj
