"""Tests for migus.cli: argument parsing, route listing and scaffolding."""

import sys
import types
from pathlib import Path

import pytest

from migus.app import App
from migus.cli import COMMANDS, main
from migus.cli._make import controller_name, view_name, write_controller
from migus.cli._resolve import resolve_app
from migus.cli._routes import format_table, route_rows


class HomeController:
    def index(self, request, response):
        return "home"


def _sample_app() -> App:
    app = App()
    app.router.get("/", (HomeController, "index"))
    app.router.middleware("auth").get("/users/{id}", lambda request, response, id: id).name("user.show")
    return app


@pytest.fixture
def _fake_app_module(monkeypatch: pytest.MonkeyPatch) -> None:
    mod = types.ModuleType("_fake_migus_app")
    mod.app = _sample_app()  # type: ignore[attr-defined]
    mod.empty = App()  # type: ignore[attr-defined]
    mod.factory = _sample_app  # type: ignore[attr-defined]
    mod.not_an_app = "just a string"  # type: ignore[attr-defined]
    mod.broken = lambda: 1 / 0  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_fake_migus_app", mod)


class TestArgs:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "usage" in capsys.readouterr().out

    def test_run_missing_app(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run"])
        assert exc_info.value.code == 2

    def test_list(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["list"])
        out = capsys.readouterr().out
        assert out.startswith("Available commands:")
        for name in COMMANDS:
            assert name in out


@pytest.mark.usefixtures("_fake_app_module")
class TestResolveApp:
    def test_default_attribute(self) -> None:
        assert isinstance(resolve_app("_fake_migus_app"), App)

    def test_factory_called(self) -> None:
        app = resolve_app("_fake_migus_app:factory")
        assert len(app.table) == 2

    def test_not_an_app(self) -> None:
        with pytest.raises(TypeError, match="not a migus.App"):
            resolve_app("_fake_migus_app:not_an_app")

    def test_factory_error(self) -> None:
        with pytest.raises(TypeError, match="raised an error"):
            resolve_app("_fake_migus_app:broken")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_app("_fake_migus_app:nope")


@pytest.mark.usefixtures("_fake_app_module")
class TestRoutesCommand:
    def test_rows(self) -> None:
        rows = route_rows(_sample_app().table.routes)
        assert rows[0] == ("GET", "/", "get.root", "HomeController.index", "")
        assert rows[1][0:3] == ("GET", "/users/{id}", "user.show")
        assert rows[1][4] == "auth"

    def test_table_header(self) -> None:
        table = format_table([("GET", "/", "home", "h", "")])
        header = table.splitlines()[0]
        assert header.split() == ["METHOD", "PATH", "NAME", "HANDLER", "MIDDLEWARE"]

    def test_prints_routes(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_fake_migus_app:app"])
        out = capsys.readouterr().out
        assert "/users/{id}" in out
        assert "user.show" in out

    def test_no_routes(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_fake_migus_app:empty"])
        assert capsys.readouterr().out.strip() == "No routes registered."

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "_no_such_module_here:app"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestRunCommand:
    def test_bad_import_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "_no_such_module_here:app"])
        assert exc_info.value.code == 1

    @pytest.mark.usefixtures("_fake_app_module")
    def test_calls_app_run(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[tuple] = []
        monkeypatch.setattr(App, "run", lambda self, host, port: calls.append((host, port)))
        main(["run", "_fake_migus_app:app", "--port", "9001"])
        assert calls == [(None, 9001)]


class TestMakeController:
    def test_names(self) -> None:
        assert controller_name("Curso") == "CursoController"
        assert controller_name("CursoController") == "CursoController"
        assert view_name("CursoController") == "curso/index"

    def test_writes_stub(self, tmp_path: Path) -> None:
        path = write_controller("AdminUser", tmp_path / "controllers")
        assert path.name == "admin_user_controller.py"
        assert (tmp_path / "controllers" / "__init__.py").exists()
        source = path.read_text(encoding="utf-8")
        assert "class AdminUserController:" in source
        assert 'Template("adminuser/index"' in source

    def test_refuses_overwrite(self, tmp_path: Path) -> None:
        write_controller("Curso", tmp_path)
        with pytest.raises(FileExistsError, match="already exists"):
            write_controller("Curso", tmp_path)

    def test_command(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["make:controller", "Curso", "--dir", str(tmp_path)])
        assert "Created controller:" in capsys.readouterr().out
        with pytest.raises(SystemExit) as exc_info:
            main(["make:controller", "Curso", "--dir", str(tmp_path)])
        assert exc_info.value.code == 1

    def test_generated_controller_resolves(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write_controller("Catalogo", tmp_path / "gen_controllers")
        monkeypatch.syspath_prepend(str(tmp_path))
        app = App()
        app.router.get("/", "gen_controllers.catalogo_controller.CatalogoController@index")
        assert app.table.get("GET", "/").handler.describe().endswith("@index")
