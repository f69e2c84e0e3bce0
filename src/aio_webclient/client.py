"""
Public request-building surface of aio_webclient.

A WebClient creates RequestBuilders through per-method factories. A builder
collects headers and a timeout and is sent with one of its ``send_*``
coroutines. The same builder may be sent any number of times, concurrently
or not; every send works on its own snapshot.
"""

from datetime import timedelta
from typing import Any, AsyncIterable, Optional, Union

from typing_extensions import Self

from .body import BodySource
from .codecs import BodyCodec
from .config import WebClientOptions
from .engine import RequestEngine
from .http_primitives import (
    URL,
    Headers,
    HeaderValue,
    Request,
    Response,
    URLComponents,
    append_header,
    get_header,
    set_header,
)
from .network.asyncio_backend import AsyncioNetworkBackend
from .network.backend import NetworkBackend
from .network.utils import validate_port
from .serialization import JsonSerializer, default_serializer


class RequestBuilder:
    """
    Fluent builder for one request target.

    Method and target are fixed at construction. Setters return the builder
    itself so calls can be chained.
    """

    def __init__(
        self,
        engine: RequestEngine,
        method: bytes,
        url: URL,
        serializer: JsonSerializer = default_serializer,
    ) -> None:
        self._engine = engine
        self._method = method
        self._url = url
        self._serializer = serializer
        self._headers: Headers = []
        self._timeout: Optional[float] = None

    def put_header(self, name: HeaderValue, value: HeaderValue) -> Self:
        """Set a header, replacing any value already set under that name."""
        self._headers = set_header(self._headers, name, value)
        return self

    def add_header(self, name: HeaderValue, value: HeaderValue) -> Self:
        """Add another value for a header, keeping existing ones."""
        self._headers = append_header(self._headers, name, value)
        return self

    def timeout(self, duration: Union[float, timedelta]) -> Self:
        """
        Set a deadline for the whole exchange.

        Args:
            duration: Deadline in seconds (``0.05`` is 50 milliseconds), or a
                ``timedelta``

        If the send has not resolved in time it fails with TimeoutError and
        the connection is closed.
        """
        if isinstance(duration, timedelta):
            duration = duration.total_seconds()
        if duration <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = float(duration)
        return self

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        return get_header(self._headers, name)

    @property
    def method(self) -> bytes:
        return self._method

    @property
    def host(self) -> bytes:
        return self._url[1]

    @property
    def port(self) -> int:
        return self._url[2]

    @property
    def path(self) -> bytes:
        return self._url[3]

    def build(self) -> Request:
        """Snapshot the current builder state."""
        return Request(
            method=self._method,
            url=self._url,
            headers=list(self._headers),
            timeout=self._timeout,
        )

    async def send(self, codec: Optional[BodyCodec] = None) -> Response:
        """Send the request without a body."""
        return await self._send(BodySource.empty(), codec)

    async def send_buffer(
        self,
        data: Union[bytes, bytearray, memoryview, str],
        codec: Optional[BodyCodec] = None,
    ) -> Response:
        """Send an in-memory body. Content-Length is set to its size."""
        return await self._send(BodySource.buffer(data), codec)

    async def send_stream(
        self,
        source: AsyncIterable[bytes],
        codec: Optional[BodyCodec] = None,
    ) -> Response:
        """
        Send a streamed body.

        The body is sent chunked unless a Content-Length header was set, in
        which case the source must produce exactly that many bytes.
        """
        return await self._send(BodySource.from_stream(source), codec)

    async def send_json(self, obj: Any, codec: Optional[BodyCodec] = None) -> Response:
        """
        Send ``obj`` serialized as JSON.

        Raises:
            EncodeError: Before any connection attempt, if ``obj`` cannot be
                serialized
        """
        return await self._send(BodySource.serialized(obj, self._serializer), codec)

    async def _send(self, body: BodySource, codec: Optional[BodyCodec]) -> Response:
        return await self._engine.send(self.build(), body, codec)

    def __repr__(self) -> str:
        scheme, host, port, path = self._url
        return (
            f"<RequestBuilder {self._method.decode()} "
            f"{scheme.decode()}://{host.decode()}:{port}{path.decode()}>"
        )


class WebClient:
    """
    Entry point for building requests.

    Args:
        backend: Network backend, an AsyncioNetworkBackend by default
        options: Read-only defaults shared by every request
        serializer: Serializer used by ``send_json``
    """

    def __init__(
        self,
        backend: Optional[NetworkBackend] = None,
        options: Optional[WebClientOptions] = None,
        serializer: Optional[JsonSerializer] = None,
    ) -> None:
        self._options = options or WebClientOptions()
        self._backend = backend or AsyncioNetworkBackend(
            write_buffer_high_water=self._options.write_buffer_high_water
        )
        self._serializer = serializer or default_serializer
        self._engine = RequestEngine(self._backend, self._options)

    @property
    def options(self) -> WebClientOptions:
        return self._options

    def request(
        self,
        method: Union[str, bytes],
        host: str,
        port: Union[int, str],
        path: str = "/",
    ) -> RequestBuilder:
        """Create a builder for ``method`` on ``host:port`` and ``path``."""
        if isinstance(method, str):
            method = method.encode("ascii")
        if not path.startswith("/"):
            path = "/" + path
        scheme = b"https" if self._options.ssl else b"http"
        url = (scheme, host.encode("ascii"), validate_port(port), path.encode("utf-8"))
        return RequestBuilder(self._engine, method.upper(), url, self._serializer)

    def request_abs(self, method: Union[str, bytes], url: str) -> RequestBuilder:
        """Create a builder from an absolute http or https URL."""
        if isinstance(method, str):
            method = method.encode("ascii")
        components = URLComponents.from_url(url)
        if components.scheme not in (b"http", b"https"):
            raise ValueError(f"Unsupported URL scheme: {components.scheme.decode()}")
        return RequestBuilder(
            self._engine, method.upper(), components.to_tuple(), self._serializer
        )

    def get(self, host: str, port: Union[int, str], path: str = "/") -> RequestBuilder:
        return self.request(b"GET", host, port, path)

    def head(self, host: str, port: Union[int, str], path: str = "/") -> RequestBuilder:
        return self.request(b"HEAD", host, port, path)

    def delete(self, host: str, port: Union[int, str], path: str = "/") -> RequestBuilder:
        return self.request(b"DELETE", host, port, path)

    def post(self, host: str, port: Union[int, str], path: str = "/") -> RequestBuilder:
        return self.request(b"POST", host, port, path)

    def put(self, host: str, port: Union[int, str], path: str = "/") -> RequestBuilder:
        return self.request(b"PUT", host, port, path)

    def patch(self, host: str, port: Union[int, str], path: str = "/") -> RequestBuilder:
        return self.request(b"PATCH", host, port, path)
