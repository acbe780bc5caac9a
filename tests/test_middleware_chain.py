"""Tests for migus.middleware.chain: registry and onion composition."""

import logging

import pytest

from migus.dispatch import DispatchContext
from migus.errors import ConfigurationError, UnknownMiddlewareError
from migus.http.request import Request
from migus.http.response import Response
from migus.middleware.chain import MiddlewareRegistry, build_chain


def _ctx() -> DispatchContext:
    return DispatchContext(Request.build("/"), Response())


def _tracing(log: list[str], name: str):
    def mw(ctx, next):
        log.append(f"{name}:before")
        next()
        log.append(f"{name}:after")

    return mw


class TestRegistry:
    def test_register_and_get(self) -> None:
        registry = MiddlewareRegistry()
        registry.register("noop", lambda ctx, next: next())
        assert "noop" in registry
        assert len(registry) == 1
        assert list(registry) == ["noop"]

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(ConfigurationError, match="must be callable"):
            MiddlewareRegistry().register("bad", "nope")

    def test_rejects_empty_name(self) -> None:
        with pytest.raises(ConfigurationError):
            MiddlewareRegistry().register("", lambda ctx, next: next())

    def test_unknown(self) -> None:
        registry = MiddlewareRegistry()
        registry.register("auth", lambda ctx, next: next())
        assert registry.unknown(["auth", "admin", "admin"]) == ["admin"]

    def test_check_strict(self) -> None:
        with pytest.raises(UnknownMiddlewareError, match="'admin'.*GET /x"):
            MiddlewareRegistry().check(["admin"], "GET /x")

    def test_check_lenient(self) -> None:
        MiddlewareRegistry(strict=False).check(["admin"])


class TestBuildChain:
    def test_first_name_runs_outermost(self) -> None:
        log: list[str] = []
        registry = MiddlewareRegistry()
        registry.register("a", _tracing(log, "a"))
        registry.register("b", _tracing(log, "b"))
        chain = build_chain(["a", "b"], registry, lambda: log.append("handler"), _ctx())
        chain()
        assert log == ["a:before", "b:before", "handler", "b:after", "a:after"]

    def test_empty_chain_is_terminal(self) -> None:
        log: list[str] = []
        build_chain([], MiddlewareRegistry(), lambda: log.append("handler"), _ctx())()
        assert log == ["handler"]

    def test_short_circuit(self) -> None:
        log: list[str] = []
        registry = MiddlewareRegistry()

        def gate(ctx, next):
            ctx.response.redirect("/login")

        registry.register("gate", gate)
        registry.register("inner", _tracing(log, "inner"))
        ctx = _ctx()
        build_chain(["gate", "inner"], registry, lambda: log.append("handler"), ctx)()
        assert log == []
        assert ctx.response.status == 302

    def test_middleware_sees_context(self) -> None:
        registry = MiddlewareRegistry()
        registry.register("tag", lambda ctx, next: (ctx.state.update(tag=True), next()))
        ctx = _ctx()
        build_chain(["tag"], registry, lambda: None, ctx)()
        assert ctx.state["tag"] is True

    def test_unknown_strict_raises(self) -> None:
        with pytest.raises(UnknownMiddlewareError, match="ghost"):
            build_chain(["ghost"], MiddlewareRegistry(), lambda: None, _ctx())

    def test_unknown_lenient_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        log: list[str] = []
        registry = MiddlewareRegistry(strict=False)
        registry.register("a", _tracing(log, "a"))
        with caplog.at_level(logging.DEBUG, logger="migus.routing"):
            build_chain(["ghost", "a"], registry, lambda: log.append("handler"), _ctx())()
        assert log == ["a:before", "handler", "a:after"]
        assert "ghost" in caplog.text
