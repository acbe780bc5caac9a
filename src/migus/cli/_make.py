"""``migus make:controller``: write a controller stub."""

import argparse
import sys
from pathlib import Path

from migus.routing.handlers import controller_module

SUFFIX = "Controller"

STUB = '''"""{class_name}."""

from migus import Template


class {class_name}:
    def index(self, request, response):
        return Template("{view}", title="{class_name}")
'''


def controller_name(name: str) -> str:
    """``Curso`` -> ``CursoController``; names already suffixed are kept."""
    return name if name.endswith(SUFFIX) else f"{name}{SUFFIX}"


def view_name(class_name: str) -> str:
    """``CursoController`` -> ``curso/index``."""
    return f"{class_name.removesuffix(SUFFIX).lower()}/index"


def write_controller(name: str, directory: str | Path) -> Path:
    """Create the controller module and return its path.

    Raises:
        FileExistsError: The module already exists.
    """
    class_name = controller_name(name)
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    init = target_dir / "__init__.py"
    if not init.exists():
        init.write_text("", encoding="utf-8")

    path = target_dir / f"{controller_module(class_name)}.py"
    if path.exists():
        msg = f"Controller {class_name} already exists: {path}"
        raise FileExistsError(msg)
    path.write_text(STUB.format(class_name=class_name, view=view_name(class_name)), encoding="utf-8")
    return path


def make_controller(args: argparse.Namespace) -> None:
    try:
        path = write_controller(args.name, args.dir)
    except FileExistsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    print(f"Created controller: {path}")
