"""Tests for migus.http.query: query string parameters."""

from migus.http.query import QueryParams


class TestQueryParams:
    def test_str_and_bytes(self) -> None:
        assert QueryParams("a=1")["a"] == "1"
        assert QueryParams(b"a=1")["a"] == "1"

    def test_blank_values_kept(self) -> None:
        assert QueryParams("q=")["q"] == ""

    def test_multi_values(self) -> None:
        params = QueryParams("tag=a&tag=b")
        assert params["tag"] == "a"
        assert params.get_list("tag") == ["a", "b"]
        assert params.get_list("other") == []

    def test_get_default(self) -> None:
        assert QueryParams("").get("page", "1") == "1"

    def test_get_int(self) -> None:
        params = QueryParams("page=3&bad=x")
        assert params.get_int("page") == 3
        assert params.get_int("bad", 1) == 1
        assert params.get_int("missing") is None

    def test_decoding(self) -> None:
        assert QueryParams("name=Jos%C3%A9+P")["name"] == "José P"

    def test_raw(self) -> None:
        assert QueryParams("a=1&b=2").raw == "a=1&b=2"
