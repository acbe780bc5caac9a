"""Tests for migus.routing.handlers: resolving handler references."""

from pathlib import Path

import pytest

from migus.errors import HandlerResolutionError
from migus.routing.binding import RESPONSE, binds, capture
from migus.routing.handlers import (
    BoundFunction,
    ClassMethodRef,
    NamedControllerRef,
    controller_module,
    resolve_handler,
)


class PostController:
    def show(self, request, response, id):
        return f"post {id}"

    @binds(RESPONSE, capture(convert=int))
    def edit(self, response, id):
        return id


def _write_package(root: Path, name: str, files: dict[str, str]) -> None:
    package = root / name
    package.mkdir()
    for filename, source in files.items():
        (package / filename).write_text(source, encoding="utf-8")


class TestCallable:
    def test_function(self) -> None:
        def home(request, response):
            return "home"

        handler = resolve_handler(home)
        assert isinstance(handler, BoundFunction)
        assert handler.target() is home
        assert handler.binding is None

    def test_lambda(self) -> None:
        handler = resolve_handler(lambda request, response: "hi")
        assert isinstance(handler, BoundFunction)

    def test_declared_binding_picked_up(self) -> None:
        @binds(RESPONSE)
        def page(response):
            return "ok"

        assert resolve_handler(page).binding == (RESPONSE,)

    def test_explicit_binding_wins(self) -> None:
        @binds(RESPONSE)
        def page(response):
            return "ok"

        handler = resolve_handler(page, bind=(capture(),))
        assert len(handler.binding) == 1
        assert handler.binding[0] != RESPONSE

    def test_already_resolved_passes_through(self) -> None:
        handler = BoundFunction(print)
        assert resolve_handler(handler) is handler


class TestClassMethodPair:
    def test_resolves(self) -> None:
        handler = resolve_handler((PostController, "show"))
        assert isinstance(handler, ClassMethodRef)
        assert handler.describe() == "PostController.show"

    def test_fresh_instance_per_target(self) -> None:
        handler = resolve_handler((PostController, "show"))
        first = handler.target()
        second = handler.target()
        assert first.__self__ is not second.__self__

    def test_binding_from_method(self) -> None:
        handler = resolve_handler((PostController, "edit"))
        assert handler.binding[0] == RESPONSE

    def test_missing_method(self) -> None:
        with pytest.raises(HandlerResolutionError, match="Method not found"):
            resolve_handler((PostController, "destroy"))

    def test_malformed_tuple(self) -> None:
        with pytest.raises(HandlerResolutionError, match="Handler tuple"):
            resolve_handler(("PostController", "show"))


class TestNamedController:
    def test_dotted_module(self) -> None:
        handler = resolve_handler(f"{__name__}.PostController@show")
        assert isinstance(handler, NamedControllerRef)
        assert handler.cls is PostController
        assert handler.describe() == f"{__name__}.PostController@show"

    def test_malformed_string(self) -> None:
        with pytest.raises(HandlerResolutionError, match="Controller@method"):
            resolve_handler("PostController")

    def test_missing_class(self) -> None:
        with pytest.raises(HandlerResolutionError, match="Controller not found"):
            resolve_handler(f"{__name__}.GhostController@index")

    def test_missing_method(self) -> None:
        with pytest.raises(HandlerResolutionError, match="Method not found"):
            resolve_handler(f"{__name__}.PostController@destroy")

    def test_missing_namespace(self) -> None:
        with pytest.raises(HandlerResolutionError, match="cannot be imported"):
            resolve_handler("HomeController@index", namespace="no_such_namespace_pkg")

    def test_class_on_namespace_package(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_package(
            tmp_path,
            "ns_exported",
            {"__init__.py": "class HomeController:\n    def index(self, request, response):\n        return 'home'\n"},
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        handler = resolve_handler("HomeController@index", namespace="ns_exported")
        assert handler.cls.__name__ == "HomeController"

    def test_snake_case_submodule(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_package(
            tmp_path,
            "ns_snake",
            {
                "__init__.py": "",
                "admin_user_controller.py": (
                    "class AdminUserController:\n    def index(self, request, response):\n        return 'users'\n"
                ),
            },
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        handler = resolve_handler("AdminUserController@index", namespace="ns_snake")
        assert handler.cls.__module__ == "ns_snake.admin_user_controller"

    def test_class_named_submodule(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_package(
            tmp_path,
            "ns_camel",
            {
                "__init__.py": "",
                "HomeController.py": "class HomeController:\n    def index(self, request, response):\n        return 'home'\n",
            },
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        handler = resolve_handler("HomeController@index", namespace="ns_camel")
        assert handler.cls.__module__ == "ns_camel.HomeController"

    def test_not_found_in_namespace(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_package(tmp_path, "ns_empty", {"__init__.py": ""})
        monkeypatch.syspath_prepend(str(tmp_path))
        with pytest.raises(HandlerResolutionError, match="Controller not found: HomeController"):
            resolve_handler("HomeController@index", namespace="ns_empty")


class TestUnsupported:
    def test_integer(self) -> None:
        with pytest.raises(HandlerResolutionError, match="Unsupported handler"):
            resolve_handler(42)


class TestControllerModule:
    def test_snake_case(self) -> None:
        assert controller_module("AdminUserController") == "admin_user_controller"
        assert controller_module("HomeController") == "home_controller"
