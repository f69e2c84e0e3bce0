"""
HTTP primitives for aio_webclient.

This module defines the core data structures for HTTP requests and responses.
All classes are immutable to ensure requests can be snapshotted per send and
responses handed to callers without further coordination.
"""

from typing import (
    Any,
    Dict,
    List,
    Optional,
    Tuple,
    Union,
    NamedTuple,
)
from dataclasses import dataclass, field
from urllib.parse import urlparse

from .codecs import BodyCodec
from .serialization import (
    charset_of,
    is_json_content_type,
    is_text_content_type,
)


# Type aliases for better readability
Headers = List[Tuple[bytes, bytes]]
URL = Tuple[bytes, bytes, int, bytes]  # (scheme, host, port, path)
StatusCode = int

HeaderValue = Union[str, bytes, int]

_UNSET: Any = object()


def _to_bytes(value: HeaderValue) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode("latin-1")


def get_header(headers: Headers, name: Union[str, bytes]) -> Optional[bytes]:
    """Get the first header value by name (case-insensitive)."""
    name_lower = _to_bytes(name).lower()
    for header_name, header_value in headers:
        if header_name.lower() == name_lower:
            return header_value
    return None


def get_all_headers(headers: Headers, name: Union[str, bytes]) -> List[bytes]:
    """Get every value of a header, in insertion order (case-insensitive)."""
    name_lower = _to_bytes(name).lower()
    return [value for header_name, value in headers if header_name.lower() == name_lower]


def has_header(headers: Headers, name: Union[str, bytes]) -> bool:
    """Check if a header exists (case-insensitive)."""
    return get_header(headers, name) is not None


def set_header(headers: Headers, name: HeaderValue, value: HeaderValue) -> Headers:
    """Return a copy of ``headers`` where ``name`` has the single value ``value``."""
    name_bytes = _to_bytes(name)
    name_lower = name_bytes.lower()
    kept = [(n, v) for n, v in headers if n.lower() != name_lower]
    kept.append((name_bytes, _to_bytes(value)))
    return kept


def append_header(headers: Headers, name: HeaderValue, value: HeaderValue) -> Headers:
    """Return a copy of ``headers`` with one more value for ``name``."""
    return list(headers) + [(_to_bytes(name), _to_bytes(value))]


def set_default_header(headers: Headers, name: HeaderValue, value: HeaderValue) -> Headers:
    """Return a copy of ``headers`` with ``name`` added only if it is absent."""
    if has_header(headers, _to_bytes(name)):
        return list(headers)
    return list(headers) + [(_to_bytes(name), _to_bytes(value))]


class URLComponents(NamedTuple):
    """Immutable representation of URL components."""
    scheme: bytes
    host: bytes
    port: int
    path: bytes

    @classmethod
    def from_url(cls, url: str) -> "URLComponents":
        """Create URLComponents from a URL string."""
        parsed = urlparse(url)
        if not parsed.hostname:
            raise ValueError(f"No hostname found in URL: {url!r}")
        scheme = parsed.scheme.encode() if parsed.scheme else b"http"
        host = parsed.hostname.encode()
        port = parsed.port or (443 if scheme == b"https" else 80)
        path = parsed.path or "/"
        if parsed.query:
            path += "?" + parsed.query

        return cls(scheme=scheme, host=host, port=port, path=path.encode())

    def to_tuple(self) -> URL:
        """Convert to the internal URL tuple format."""
        return (self.scheme, self.host, self.port, self.path)


@dataclass(frozen=True)
class Request:
    """
    Immutable HTTP request representation.

    This is the snapshot of builder state that the engine sends. The body
    travels separately as a BodySource so the same headers and target can be
    sent many times.
    """

    method: bytes
    url: URL
    headers: Headers = field(default_factory=list)
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.method, bytes):
            raise ValueError("method must be bytes")

        if not isinstance(self.url, tuple) or len(self.url) != 4:
            raise ValueError("url must be a 4-tuple (scheme, host, port, path)")

        if not all(isinstance(component, bytes) for component in self.url[:2] + (self.url[3],)):
            raise ValueError("URL components must be bytes")

        if not isinstance(self.url[2], int):
            raise ValueError("URL port must be int")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def create(
        cls,
        method: Union[str, bytes],
        url: Union[str, URL, URLComponents],
        headers: Optional[Headers] = None,
        timeout: Optional[float] = None,
    ) -> "Request":
        """
        Create a Request with proper type conversion.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: URL string, tuple, or URLComponents
            headers: Optional list of (name, value) header tuples
            timeout: Optional deadline for the whole exchange in seconds

        Returns:
            New Request instance
        """
        if isinstance(method, str):
            method = method.encode()
        method = method.upper()

        if isinstance(url, str):
            url = URLComponents.from_url(url).to_tuple()
        elif isinstance(url, URLComponents):
            url = url.to_tuple()
        elif not isinstance(url, tuple):
            raise ValueError("url must be string, URLComponents, or URL tuple")

        return cls(method=method, url=url, headers=list(headers or []), timeout=timeout)

    def with_headers(self, headers: Headers) -> "Request":
        """Create a new request with different headers."""
        return Request(method=self.method, url=self.url, headers=headers, timeout=self.timeout)

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        """Get a header value by name (case-insensitive)."""
        return get_header(self.headers, name)

    @property
    def scheme(self) -> bytes:
        """Get the URL scheme."""
        return self.url[0]

    @property
    def host(self) -> bytes:
        """Get the URL host."""
        return self.url[1]

    @property
    def port(self) -> int:
        """Get the URL port."""
        return self.url[2]

    @property
    def path(self) -> bytes:
        """Get the URL path."""
        return self.url[3]

    @property
    def is_tls(self) -> bool:
        """Whether the request targets an https URL."""
        return self.scheme == b"https"


@dataclass(frozen=True)
class Response:
    """
    Immutable HTTP response representation.

    ``content`` always holds the raw received bytes. ``body`` holds the value
    produced by the codec chosen at send time, or the raw bytes when the send
    did not name a codec. The ``body_as_*`` accessors decode ``content`` on
    demand and may each raise DecodeError.
    ``extensions`` carries transport details; its ``connection`` entry
    holds the connection metrics taken when the body completed.
    """

    status_code: StatusCode
    headers: Headers = field(default_factory=list)
    content: bytes = b""
    body: Any = None
    extensions: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate response data after initialization."""
        if not isinstance(self.status_code, int):
            raise ValueError("status_code must be int")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

        if not isinstance(self.content, bytes):
            raise ValueError("content must be bytes")

    @classmethod
    def create(
        cls,
        status_code: StatusCode,
        headers: Optional[Headers] = None,
        content: bytes = b"",
        body: Any = _UNSET,
        extensions: Optional[Dict[str, Any]] = None,
    ) -> "Response":
        """
        Create a Response with proper validation.

        When no ``body`` is given the raw ``content`` is used as the body.
        """
        return cls(
            status_code=status_code,
            headers=list(headers or []),
            content=content,
            body=content if body is _UNSET else body,
            extensions=extensions or {},
        )

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        """Get a header value by name (case-insensitive)."""
        return get_header(self.headers, name)

    def get_all_headers(self, name: Union[str, bytes]) -> List[bytes]:
        """Get all values of a header (case-insensitive)."""
        return get_all_headers(self.headers, name)

    def has_header(self, name: Union[str, bytes]) -> bool:
        """Check if a header exists (case-insensitive)."""
        return self.get_header(name) is not None

    @property
    def content_type(self) -> Optional[str]:
        value = self.get_header(b"content-type")
        return value.decode("latin-1") if value is not None else None

    def body_as_buffer(self) -> bytes:
        return self.content

    def body_as_string(self, encoding: Optional[str] = None) -> str:
        """Decode the body as text, using the response charset by default."""
        return BodyCodec.string(encoding).decode(self.content, self.content_type)

    def body_as_json(self) -> Any:
        """Parse the body as JSON, whatever Content-Type was declared."""
        return BodyCodec.json().decode(self.content, self.content_type)

    def body_as_json_object(self) -> Dict[str, Any]:
        return BodyCodec.json_object().decode(self.content, self.content_type)

    def body_as_json_array(self) -> List[Any]:
        return BodyCodec.json_array().decode(self.content, self.content_type)

    def body_as(self, target_type: Any) -> Any:
        """Parse the body as JSON and map it onto ``target_type``."""
        return BodyCodec.json_mapped(target_type).decode(self.content, self.content_type)

    def body_auto(self) -> Any:
        """
        Decode the body as directed by its Content-Type.

        JSON media types give the parsed value, ``text/*`` gives a str and
        anything else is returned as raw bytes.
        """
        content_type = self.content_type
        if is_json_content_type(content_type):
            return self.body_as_json()
        if is_text_content_type(content_type):
            return self.body_as_string(charset_of(content_type))
        return self.content
