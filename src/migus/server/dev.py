"""Development server.

Starts a pounce ASGI server with the live migus App object, single
worker, reloading on file changes when debug is on.
"""

from collections.abc import Sequence


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = True,
    reload_dirs: Sequence[str] = (),
) -> None:
    """Serve *app* with pounce until interrupted.

    Pounce's ``run()`` takes an import string, but here we hold a live
    ``App`` object, so ``pounce.Server`` is driven directly.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        reload_dirs=tuple(reload_dirs),
    )
    Server(config, app).run()
