"""Tests for courier.http: Status, Headers, Request, Response."""

import pytest

from courier.http.headers import Headers
from courier.http.request import Request
from courier.http.response import Response
from courier.http.status import (
    INTERNAL_SERVER_ERROR,
    NOT_FOUND,
    OK,
    Family,
    Status,
    sanitize_reason_phrase,
)


class TestStatus:
    def test_canonical_phrase(self) -> None:
        assert Status.of(404) == NOT_FOUND
        assert NOT_FOUND.reason_phrase == "Not Found"

    def test_unknown_code_has_empty_phrase(self) -> None:
        status = Status.of(599)
        assert status.reason_phrase == ""
        assert str(status) == "599"

    @pytest.mark.parametrize(
        ("code", "family"),
        [
            (100, Family.INFORMATIONAL),
            (200, Family.SUCCESSFUL),
            (304, Family.REDIRECTION),
            (404, Family.CLIENT_ERROR),
            (503, Family.SERVER_ERROR),
            (99, Family.OTHER),
            (700, Family.OTHER),
        ],
    )
    def test_family(self, code: int, family: Family) -> None:
        assert Status(code).family is family

    def test_with_reason_phrase(self) -> None:
        status = OK.with_reason_phrase("Fine")
        assert status.code == 200
        assert status.reason_phrase == "Fine"
        assert OK.reason_phrase == "OK"

    def test_reason_phrase_control_characters_replaced(self) -> None:
        status = INTERNAL_SERVER_ERROR.with_reason_phrase("a\r\nb\tc\x00d\x7fe")
        assert status.reason_phrase == "a  b c d e"

    def test_none_phrase(self) -> None:
        assert sanitize_reason_phrase(None) == ""

    def test_str(self) -> None:
        assert str(INTERNAL_SERVER_ERROR) == "500 Internal Server Error"


class TestHeaders:
    def test_case_insensitive_lookup(self) -> None:
        headers = Headers([("Content-Type", "text/html")])
        assert headers["content-type"] == "text/html"
        assert headers["CONTENT-TYPE"] == "text/html"
        assert "Content-type" in headers

    def test_missing(self) -> None:
        headers = Headers()
        assert headers.get("x-missing") is None
        assert headers.get("x-missing", "fallback") == "fallback"
        with pytest.raises(KeyError):
            headers["x-missing"]

    def test_repeated_values(self) -> None:
        headers = Headers([("Accept", "a"), ("accept", "b")])
        assert headers["accept"] == "a"
        assert headers.get_list("ACCEPT") == ["a", "b"]
        assert len(headers) == 1
        assert list(headers) == ["accept"]

    def test_from_mapping(self) -> None:
        headers = Headers({"X-One": "1"})
        assert headers.pairs == (("X-One", "1"),)

    def test_replacing(self) -> None:
        headers = Headers([("Accept", "a"), ("accept", "b"), ("Host", "h")])
        replaced = headers.replacing("ACCEPT", "c")
        assert replaced.get_list("accept") == ["c"]
        assert replaced["host"] == "h"
        assert headers.get_list("accept") == ["a", "b"]

    def test_non_string_key_not_contained(self) -> None:
        assert 1 not in Headers([("a", "b")])

    def test_updating(self) -> None:
        headers = Headers([("Accept", "a"), ("Host", "h")]).updating({"accept": "b", "X-New": "n"})
        assert headers.pairs == (("Host", "h"), ("accept", "b"), ("X-New", "n"))

    def test_equality(self) -> None:
        assert Headers([("A", "1")]) == Headers({"A": "1"})
        assert Headers([("A", "1")]) != Headers([("a", "1")])
        assert Headers([("A", "1")]) == {"a": "1"}


class TestRequest:
    def test_for_uri(self) -> None:
        request = Request.for_uri("/users/1")
        assert request.method == "GET"
        assert request.uri == "/users/1"
        assert request.service is None
        assert request.payload is None

    def test_path_and_parameters(self) -> None:
        request = Request.for_uri("/search?q=a&q=b&empty=&n=1")
        assert request.path == "/search"
        assert request.parameters == {"q": ["a", "b"], "empty": [""], "n": ["1"]}
        assert request.parameter("q") == "a"
        assert request.parameter("missing") is None

    def test_path_stays_encoded(self) -> None:
        assert Request.for_uri("/a%20b").path == "/a%20b"

    def test_absolute_uri_path(self) -> None:
        assert Request.for_uri("http://example.com/x/y?z=1").path == "/x/y"

    def test_with_methods_return_new_request(self) -> None:
        request = Request.for_uri("/a")
        changed = (
            request.with_uri("/b")
            .with_service("gateway")
            .with_header("X-Id", "1")
            .with_headers({"x-id": "2", "Accept": "*/*"})
            .with_payload(b"data")
        )
        assert request.uri == "/a"
        assert changed.uri == "/b"
        assert changed.service == "gateway"
        assert changed.header("x-id") == "2"
        assert changed.headers.get_list("X-ID") == ["2"]
        assert changed.header("accept") == "*/*"
        assert changed.payload == b"data"


class TestResponse:
    def test_defaults(self) -> None:
        response = Response.ok()
        assert response.status == OK
        assert response.headers == Headers()
        assert response.payload is None

    def test_for_status_accepts_int(self) -> None:
        assert Response.for_status(404).status == NOT_FOUND
        assert Response.for_status(NOT_FOUND).status == NOT_FOUND

    def test_of(self) -> None:
        response = Response.of(201, {"id": 1})
        assert response.status.code == 201
        assert response.payload == {"id": 1}

    def test_with_header_replaces_case_insensitively(self) -> None:
        response = Response.ok().with_header("Content-Type", "a").with_header("content-type", "b")
        assert response.headers.pairs == (("content-type", "b"),)
        assert response.header("CONTENT-TYPE") == "b"

    def test_with_headers(self) -> None:
        response = Response.ok().with_headers({"X-A": "1", "X-B": "2"})
        assert response.header("x-a") == "1"
        assert response.header("x-b") == "2"
        assert response.header("x-c") is None

    def test_headers_are_case_insensitive(self) -> None:
        response = Response.ok().with_header("Set-Cookie", "a=1")
        assert isinstance(response.headers, Headers)
        assert response.headers["set-cookie"] == "a=1"
        assert "SET-COOKIE" in response.headers

    def test_with_payload_none_removes(self) -> None:
        response = Response.for_payload("x").with_payload(None)
        assert response.payload is None

    def test_with_status(self) -> None:
        response = Response.ok().with_status(500)
        assert response.status == INTERNAL_SERVER_ERROR
