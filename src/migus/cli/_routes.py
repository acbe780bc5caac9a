"""``migus routes``: print the route table."""

import argparse
import sys

from migus.cli._resolve import resolve_app
from migus.routing.route import Route

HEADERS = ("METHOD", "PATH", "NAME", "HANDLER", "MIDDLEWARE")


def route_rows(routes: list[Route]) -> list[tuple[str, str, str, str, str]]:
    return [
        (
            route.method,
            route.path,
            route.name or "",
            route.handler.describe(),
            ", ".join(route.middleware),
        )
        for route in routes
    ]


def format_table(rows: list[tuple[str, ...]]) -> str:
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(HEADERS)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths[:-1]) + "  {}"
    lines = [fmt.format(*HEADERS), "-" * min(sum(widths) + 2 * (len(widths) - 1), 100)]
    lines.extend(fmt.format(*row) for row in rows)
    return "\n".join(line.rstrip() for line in lines)


def run_routes(args: argparse.Namespace) -> None:
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.table.routes
    if not routes:
        print("No routes registered.")
        return
    print(format_table(route_rows(routes)))
