"""Middleware: the chain machinery and the built-in ``csrf``/``auth``/``guest``/``admin``.

Importing this package only loads the chain machinery. The built-ins
live in ``migus.middleware.csrf`` and ``migus.middleware.auth``.
"""

from migus.middleware.chain import Middleware, MiddlewareRegistry, Next, build_chain

__all__ = ["Middleware", "MiddlewareRegistry", "Next", "build_chain"]
