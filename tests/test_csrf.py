"""Tests for CSRF tokens and the csrf middleware."""

from migus.dispatch import DispatchContext
from migus.http.request import Request
from migus.http.response import Response
from migus.middleware.csrf import REJECTED_BODY, REJECTED_STATUS, csrf, submitted_token
from migus.security.csrf import SESSION_KEY, CSRFConfig, Csrf
from migus.sessions import Session


class TestCsrfToken:
    def test_created_once(self) -> None:
        session: dict = {}
        csrf_ = Csrf(session)
        token = csrf_.token()
        assert len(token) == 64
        assert csrf_.token() == token
        assert session[SESSION_KEY] == token

    def test_regenerate(self) -> None:
        csrf_ = Csrf({})
        first = csrf_.token()
        assert csrf_.regenerate() != first

    def test_validate(self) -> None:
        csrf_ = Csrf({})
        token = csrf_.token()
        assert csrf_.validate(token)
        assert not csrf_.validate("wrong")
        assert not csrf_.validate(None)

    def test_validate_without_session_token(self) -> None:
        assert not Csrf({}).validate("anything")

    def test_field(self) -> None:
        csrf_ = Csrf({SESSION_KEY: "abc"})
        assert str(csrf_.field()) == '<input type="hidden" name="_token" value="abc">'

    def test_custom_config(self) -> None:
        session: dict = {}
        csrf_ = Csrf(session, CSRFConfig(session_key="_csrf", field_name="csrf", token_length=16))
        token = csrf_.token()
        assert len(token) == 32
        assert session["_csrf"] == token
        assert 'name="csrf"' in str(csrf_.field())


class TestSubmittedToken:
    def test_form_field_first(self) -> None:
        request = Request.build("/", "POST", form={"_token": "form"}, headers={"X-CSRF-TOKEN": "header"})
        assert submitted_token(request) == "form"

    def test_header(self) -> None:
        assert submitted_token(Request.build("/", "POST", headers={"X-CSRF-TOKEN": "h"})) == "h"

    def test_xsrf_header_needs_cookie(self) -> None:
        without = Request.build("/", "POST", headers={"X-XSRF-TOKEN": "x"})
        assert submitted_token(without) is None
        with_cookie = Request.build("/", "POST", headers={"X-XSRF-TOKEN": "x", "Cookie": "XSRF-TOKEN=x"})
        assert submitted_token(with_cookie) == "x"

    def test_custom_field_and_header(self) -> None:
        config = CSRFConfig(field_name="csrf", header_name="X-Token")
        assert submitted_token(Request.build("/", "POST", form={"csrf": "f"}), config) == "f"
        assert submitted_token(Request.build("/", "POST", headers={"X-Token": "h"}), config) == "h"
        assert submitted_token(Request.build("/", "POST", form={"_token": "f"}), config) is None


def _run(request: Request, session: Session) -> tuple[DispatchContext, list[str]]:
    calls: list[str] = []
    ctx = DispatchContext(request, Response(), session)
    csrf(ctx, lambda: calls.append("next"))
    return ctx, calls


class TestCsrfMiddleware:
    def test_safe_method_passes(self) -> None:
        _, calls = _run(Request.build("/"), Session())
        assert calls == ["next"]

    def test_missing_token_rejected(self) -> None:
        ctx, calls = _run(Request.build("/", "POST"), Session({SESSION_KEY: "t"}))
        assert calls == []
        assert ctx.response.status == REJECTED_STATUS == 419
        assert ctx.response.text == REJECTED_BODY

    def test_valid_token_passes(self) -> None:
        _, calls = _run(Request.build("/", "POST", form={"_token": "t"}), Session({SESSION_KEY: "t"}))
        assert calls == ["next"]

    def test_overridden_method_checked(self) -> None:
        request = Request.build("/users/1", "POST", form={"_method": "DELETE"})
        _, calls = _run(request, Session({SESSION_KEY: "t"}))
        assert calls == []
