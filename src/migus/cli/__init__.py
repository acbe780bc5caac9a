"""Migus CLI: dev server, route listing, and controller scaffolding.

Entry point registered as ``migus`` in ``pyproject.toml``::

    [project.scripts]
    migus = "migus.cli:main"
"""

import argparse
import sys

COMMANDS: dict[str, str] = {
    "run": "Start the development server",
    "routes": "List registered routes",
    "make:controller": "Generate a controller stub",
    "list": "List available commands",
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``migus`` command."""
    parser = argparse.ArgumentParser(
        prog="migus",
        description="Migus: a router-centric web framework.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- migus run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help=COMMANDS["run"])
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    # -- migus routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help=COMMANDS["routes"])
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- migus make:controller --------------------------------------------
    make_parser = subparsers.add_parser("make:controller", help=COMMANDS["make:controller"])
    make_parser.add_argument("name", help="Controller name (e.g. Curso or CursoController)")
    make_parser.add_argument(
        "--dir",
        default="app/controllers",
        help="Directory to write the controller into (default: app/controllers)",
    )

    # -- migus list -------------------------------------------------------
    subparsers.add_parser("list", help=COMMANDS["list"])

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    match args.command:
        case "run":
            from migus.cli._run import run_server

            run_server(args)
        case "routes":
            from migus.cli._routes import run_routes

            run_routes(args)
        case "make:controller":
            from migus.cli._make import make_controller

            make_controller(args)
        case "list":
            list_commands()


def list_commands() -> None:
    width = max(len(name) for name in COMMANDS)
    print("Available commands:")
    for name, description in COMMANDS.items():
        print(f"  {name:<{width}}  {description}")
