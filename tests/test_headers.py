"""Tests for migus.http.headers: case-insensitive request headers."""

from migus.http.headers import Headers


class TestHeaders:
    def test_case_insensitive_lookup(self) -> None:
        headers = Headers(((b"content-type", b"text/html"),))
        assert headers["Content-Type"] == "text/html"
        assert "CONTENT-TYPE" in headers

    def test_first_value_and_list(self) -> None:
        headers = Headers(((b"accept", b"a"), (b"Accept", b"b")))
        assert headers["accept"] == "a"
        assert headers.get_list("ACCEPT") == ["a", "b"]

    def test_get_default(self) -> None:
        headers = Headers()
        assert headers.get("x-missing") is None
        assert headers.get("x-missing", "d") == "d"

    def test_iter_unique_lowercase(self) -> None:
        headers = Headers(((b"Accept", b"a"), (b"accept", b"b"), (b"Host", b"h")))
        assert list(headers) == ["accept", "host"]
        assert len(headers) == 2

    def test_non_string_key_not_contained(self) -> None:
        assert 1 not in Headers(((b"a", b"1"),))

    def test_of_mapping(self) -> None:
        headers = Headers.of({"X-Requested-With": "XMLHttpRequest"})
        assert headers["x-requested-with"] == "XMLHttpRequest"
        assert headers.raw == ((b"x-requested-with", b"XMLHttpRequest"),)

    def test_of_empty(self) -> None:
        assert len(Headers.of(None)) == 0
