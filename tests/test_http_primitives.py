"""
Unit tests for HTTP primitives.

Tests the Request, Response, and URLComponents classes and the header
helpers to ensure they work correctly and maintain immutability.
"""

import dataclasses
from dataclasses import dataclass
from typing import List

import pytest

from aio_webclient.exceptions import DecodeError
from aio_webclient.http_primitives import (
    Request,
    Response,
    URLComponents,
    append_header,
    get_all_headers,
    get_header,
    has_header,
    set_default_header,
    set_header,
)


@dataclass
class Pet:
    name: str
    age: int


@dataclass
class Household:
    owner: str
    pets: List[Pet]


class TestURLComponents:
    """Test URLComponents class functionality."""

    def test_from_url_with_http(self) -> None:
        """Test creating URLComponents from HTTP URL."""
        url = URLComponents.from_url("http://example.com/path")
        assert url.scheme == b"http"
        assert url.host == b"example.com"
        assert url.port == 80
        assert url.path == b"/path"

    def test_from_url_with_https(self) -> None:
        """Test creating URLComponents from HTTPS URL."""
        url = URLComponents.from_url("https://example.com:8443/api/v1")
        assert url.scheme == b"https"
        assert url.port == 8443
        assert url.path == b"/api/v1"

    def test_from_url_without_path(self) -> None:
        """Test creating URLComponents from URL without path."""
        url = URLComponents.from_url("https://example.com")
        assert url.port == 443
        assert url.path == b"/"  # Default path

    def test_from_url_keeps_query(self) -> None:
        url = URLComponents.from_url("http://example.com/search?q=1&page=2")
        assert url.path == b"/search?q=1&page=2"

    def test_from_url_without_host(self) -> None:
        with pytest.raises(ValueError, match="No hostname"):
            URLComponents.from_url("/relative/path")

    def test_to_tuple(self) -> None:
        """Test converting URLComponents to tuple."""
        url = URLComponents(b"https", b"example.com", 443, b"/api")
        assert url.to_tuple() == (b"https", b"example.com", 443, b"/api")


class TestHeaderHelpers:
    """Test the header list helpers."""

    def test_get_header_case_insensitive(self, sample_headers) -> None:
        assert get_header(sample_headers, "content-type") == b"application/json"
        assert get_header(sample_headers, b"AUTHORIZATION") == b"Bearer token123"
        assert get_header(sample_headers, "X-Missing") is None

    def test_has_header(self, sample_headers) -> None:
        assert has_header(sample_headers, "accept")
        assert not has_header(sample_headers, "x-missing")

    def test_set_header_replaces_all_values(self) -> None:
        headers = [(b"Accept", b"text/html"), (b"accept", b"text/plain")]
        updated = set_header(headers, "Accept", "application/json")
        assert updated == [(b"Accept", b"application/json")]
        # Input is left untouched
        assert len(headers) == 2

    def test_append_header_keeps_existing(self) -> None:
        headers = [(b"Accept", b"text/html")]
        updated = append_header(headers, "Accept", "text/plain")
        assert get_all_headers(updated, "accept") == [b"text/html", b"text/plain"]

    def test_set_default_header(self) -> None:
        headers = [(b"content-length", b"5")]
        assert set_default_header(headers, "Content-Length", 10) == headers
        updated = set_default_header(headers, "Content-Type", "text/plain")
        assert updated[-1] == (b"Content-Type", b"text/plain")

    def test_int_values_are_encoded(self) -> None:
        assert set_header([], "Content-Length", 42) == [(b"Content-Length", b"42")]


class TestRequest:
    """Test Request class functionality."""

    def test_create_with_strings(self) -> None:
        """Test creating Request with string inputs."""
        request = Request.create("get", "http://example.com/api")
        assert request.method == b"GET"
        assert request.url == (b"http", b"example.com", 80, b"/api")
        assert request.headers == []
        assert request.timeout is None

    def test_create_with_tuple(self) -> None:
        request = Request.create(b"POST", (b"https", b"api.example.com", 443, b"/data"))
        assert request.is_tls
        assert request.host == b"api.example.com"
        assert request.port == 443
        assert request.path == b"/data"

    def test_create_with_timeout(self) -> None:
        request = Request.create("GET", "http://example.com/", timeout=1.5)
        assert request.timeout == 1.5

    @pytest.mark.parametrize("timeout", [0, -1.0])
    def test_invalid_timeout(self, timeout) -> None:
        with pytest.raises(ValueError, match="timeout must be positive"):
            Request.create("GET", "http://example.com/", timeout=timeout)

    def test_invalid_headers(self) -> None:
        with pytest.raises(ValueError):
            Request(method=b"GET", url=(b"http", b"h", 80, b"/"), headers=[("a", "b")])

    def test_immutability(self) -> None:
        request = Request.create("GET", "http://example.com/")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.method = b"POST"

    def test_with_headers_returns_new_request(self) -> None:
        request = Request.create("GET", "http://example.com/")
        updated = request.with_headers([(b"X-Test", b"1")])
        assert updated.get_header("x-test") == b"1"
        assert request.get_header("x-test") is None
        assert updated.url == request.url


class TestResponse:
    """Test Response class functionality and body accessors."""

    def test_create_defaults_body_to_content(self) -> None:
        response = Response.create(status_code=200, content=b"raw")
        assert response.body == b"raw"
        assert response.body_as_buffer() == b"raw"
        assert response.extensions == {}

    def test_create_with_none_body(self) -> None:
        """A decoded JSON null is kept as None."""
        response = Response.create(status_code=200, content=b"null", body=None)
        assert response.body is None

    def test_headers(self) -> None:
        response = Response.create(
            status_code=404,
            headers=[(b"Set-Cookie", b"a=1"), (b"set-cookie", b"b=2")],
        )
        assert response.has_header("SET-COOKIE")
        assert response.get_all_headers("set-cookie") == [b"a=1", b"b=2"]
        assert response.content_type is None

    def test_body_as_string_uses_charset(self) -> None:
        response = Response.create(
            status_code=200,
            headers=[(b"Content-Type", b"text/plain; charset=latin-1")],
            content="café".encode("latin-1"),
        )
        assert response.body_as_string() == "café"
        with pytest.raises(DecodeError):
            response.body_as_string("utf-8")

    def test_body_as_json_object_without_content_type(self) -> None:
        """JSON accessors parse regardless of the declared media type."""
        response = Response.create(status_code=200, content=b'{"cheese":"Goat Cheese"}')
        assert response.body_as_json_object() == {"cheese": "Goat Cheese"}
        assert response.body_as_json() == {"cheese": "Goat Cheese"}

    def test_body_as_json_array(self) -> None:
        response = Response.create(status_code=200, content=b'[1,"two",null]')
        assert response.body_as_json_array() == [1, "two", None]

    def test_body_as_json_object_rejects_other_shapes(self) -> None:
        response = Response.create(status_code=200, content=b"[1,2]")
        with pytest.raises(DecodeError):
            response.body_as_json_object()

    def test_body_as_json_malformed(self) -> None:
        response = Response.create(status_code=200, content=b"not-json-object")
        with pytest.raises(DecodeError):
            response.body_as_json()

    def test_body_as_dataclass(self) -> None:
        response = Response.create(status_code=200, content=b'{"name":"Rex","age":3}')
        assert response.body_as(Pet) == Pet(name="Rex", age=3)

    def test_body_as_generic(self) -> None:
        response = Response.create(status_code=200, content=b"[1, 2]")
        assert response.body_as(List[int]) == [1, 2]

    def test_body_as_nested_dataclass(self) -> None:
        response = Response.create(
            status_code=200, content=b'{"owner":"Ana","pets":[{"name":"Rex","age":3}]}'
        )
        household = response.body_as(Household)
        assert household.pets == [Pet(name="Rex", age=3)]
        assert isinstance(household.pets[0], Pet)

    def test_body_as_rejects_wrong_field_type(self) -> None:
        response = Response.create(status_code=200, content=b'{"name":"Rex","age":"old"}')
        with pytest.raises(DecodeError):
            response.body_as(Pet)

    @pytest.mark.parametrize(
        "content_type, content, expected",
        [
            (b"application/json", b'{"a":1}', {"a": 1}),
            (b"application/problem+json", b'{"a":1}', {"a": 1}),
            (b"text/plain; charset=utf-8", b"hello", "hello"),
            (b"application/octet-stream", b"\x00\x01", b"\x00\x01"),
        ],
    )
    def test_body_auto(self, content_type, content, expected) -> None:
        response = Response.create(
            status_code=200,
            headers=[(b"Content-Type", content_type)],
            content=content,
        )
        assert response.body_auto() == expected

    def test_body_auto_without_content_type(self) -> None:
        response = Response.create(status_code=200, content=b'{"a":1}')
        assert response.body_auto() == b'{"a":1}'

    def test_immutability(self) -> None:
        response = Response.create(status_code=200)
        with pytest.raises(dataclasses.FrozenInstanceError):
            response.status_code = 500
