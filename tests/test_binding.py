"""Tests for migus.routing.binding: declared handler signatures."""

import pytest

from migus.dispatch import DispatchContext
from migus.errors import BindingError, NotFound
from migus.http.request import Request
from migus.http.response import Response
from migus.routing.binding import (
    CONTEXT,
    REQUEST,
    RESPONSE,
    bind_arguments,
    binds,
    capture,
    declared_binding,
)


def _ctx(*captures: str) -> DispatchContext:
    return DispatchContext(Request.build("/x"), Response(), captures=captures)


class TestDefaultBinding:
    def test_request_response_then_captures(self) -> None:
        ctx = _ctx("7", "posts")
        assert bind_arguments(None, ctx) == [ctx.request, ctx.response, "7", "posts"]


class TestDeclaredBinding:
    def test_slots_in_declared_order(self) -> None:
        ctx = _ctx("7")
        args = bind_arguments((RESPONSE, capture(), REQUEST, CONTEXT), ctx)
        assert args == [ctx.response, "7", ctx.request, ctx]

    def test_converter_applied(self) -> None:
        assert bind_arguments((capture(convert=int),), _ctx("42")) == [42]

    def test_converter_value_error_is_not_found(self) -> None:
        with pytest.raises(NotFound):
            bind_arguments((capture(convert=int),), _ctx("abc"))

    def test_default_used_when_captures_run_out(self) -> None:
        args = bind_arguments((capture(), capture(default="summary")), _ctx("7"))
        assert args == ["7", "summary"]

    def test_default_ignored_when_capture_present(self) -> None:
        assert bind_arguments((capture(default="x"),), _ctx("y")) == ["y"]

    def test_missing_capture_without_default(self) -> None:
        with pytest.raises(BindingError, match="argument 1 of show"):
            bind_arguments((RESPONSE, capture()), _ctx(), "show")

    def test_unused_captures_dropped(self) -> None:
        assert bind_arguments((capture(),), _ctx("a", "b")) == ["a"]


class TestBindsDecorator:
    def test_attaches_binding(self) -> None:
        @binds(RESPONSE, capture(convert=int))
        def show(response, id):
            return id

        binding = declared_binding(show)
        assert binding[0] == RESPONSE
        assert binding[1].convert is int

    def test_undecorated_has_none(self) -> None:
        assert declared_binding(lambda: None) is None
