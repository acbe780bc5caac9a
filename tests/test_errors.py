"""Tests for migus.errors: the exception hierarchy."""

import pytest

from migus.errors import (
    BindingError,
    ConfigurationError,
    Forbidden,
    HandlerResolutionError,
    HTTPError,
    MigusError,
    MissingRouteParameter,
    NotFound,
    RouteNameError,
    UnknownMiddlewareError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [HandlerResolutionError, BindingError, UnknownMiddlewareError, RouteNameError, MissingRouteParameter],
    )
    def test_configuration_errors(self, cls: type[Exception]) -> None:
        assert issubclass(cls, ConfigurationError)
        assert issubclass(cls, MigusError)

    def test_http_errors(self) -> None:
        assert issubclass(NotFound, HTTPError)
        assert issubclass(Forbidden, HTTPError)
        assert issubclass(HTTPError, MigusError)


class TestHTTPError:
    def test_fields(self) -> None:
        exc = HTTPError(429, "Too Many Requests", (("Retry-After", "60"),))
        assert exc.status == 429
        assert exc.headers == (("Retry-After", "60"),)
        assert str(exc) == "429: Too Many Requests"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(500)) == "500"

    def test_not_found(self) -> None:
        exc = NotFound()
        assert (exc.status, exc.detail) == (404, "404 Not Found")
        assert NotFound("Usuario no encontrado").detail == "Usuario no encontrado"

    def test_forbidden(self) -> None:
        assert (Forbidden().status, Forbidden().detail) == (403, "Forbidden")

    def test_raisable(self) -> None:
        with pytest.raises(HTTPError):
            raise NotFound()
