"""
Pytest configuration for aio_webclient tests.

This file contains shared fixtures: sample data, body sources, helpers that
parse what the client wrote to a mock stream, and a small in-process HTTP/1.1
server built on h11 for end-to-end tests.
"""

import asyncio
import os
import sys
from typing import Awaitable, Callable, List, Optional, Tuple

import h11
import pytest
import pytest_asyncio

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from aio_webclient.network.mock import MockNetworkBackend, MockNetworkStream


class MockAsyncStream:
    """Async iterable body source that records how far it was pulled."""

    def __init__(self, data: List[bytes]) -> None:
        self.data = data
        self.index = 0
        self.closed = False

    def __aiter__(self) -> "MockAsyncStream":
        return self

    async def __anext__(self) -> bytes:
        if self.index >= len(self.data):
            raise StopAsyncIteration
        result = self.data[self.index]
        self.index += 1
        return result

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def mock_stream():
    """Create a mock async body source for testing."""
    def _create_stream(data: List[bytes]) -> MockAsyncStream:
        return MockAsyncStream(data)
    return _create_stream


@pytest.fixture
def async_data_generator():
    """Create an async data generator for testing."""
    async def generator(data: List[bytes]):
        for chunk in data:
            yield chunk

    return generator


@pytest.fixture
def sample_headers():
    """Sample headers for testing."""
    return [
        (b"Content-Type", b"application/json"),
        (b"Authorization", b"Bearer token123"),
        (b"User-Agent", b"aio_webclient/0.1.0"),
        (b"Accept", b"*/*"),
    ]


@pytest.fixture
def sample_stream_data():
    """Sample stream data for testing."""
    return [
        b"Hello",
        b", ",
        b"World",
        b"!",
    ]


@pytest.fixture
def sample_large_stream_data():
    """Sample large stream data for testing."""
    return [b"x" * 1024 for _ in range(1024)]  # 1MB of data


@pytest.fixture
def mock_network_stream():
    """Create a mock network stream."""
    return MockNetworkStream()


@pytest.fixture
def mock_backend():
    """Create a mock network backend."""
    return MockNetworkBackend()


def build_response(
    status_code: int = 200,
    headers: Optional[List[Tuple[bytes, bytes]]] = None,
    body: bytes = b"",
) -> bytes:
    """Raw HTTP/1.1 response bytes with a Content-Length framed body."""
    lines = [f"HTTP/1.1 {status_code} OK".encode()]
    for name, value in headers or []:
        lines.append(name + b": " + value)
    lines.append(b"Content-Length: " + str(len(body)).encode())
    return b"\r\n".join(lines) + b"\r\n\r\n" + body


class ParsedRequest:
    """A request as received by a server, decoded with h11."""

    def __init__(self, head: h11.Request, body: bytes, complete: bool) -> None:
        self.method = head.method.decode()
        self.target = head.target.decode()
        self.headers = [(bytes(n), bytes(v)) for n, v in head.headers]
        self.body = body
        self.complete = complete

    def header(self, name: str) -> Optional[str]:
        name_bytes = name.lower().encode()
        for header_name, value in self.headers:
            if header_name == name_bytes:
                return value.decode("latin-1")
        return None


def parse_request(raw: bytes) -> ParsedRequest:
    """Decode raw bytes written by the client into a ParsedRequest."""
    conn = h11.Connection(h11.SERVER)
    conn.receive_data(raw)
    head = conn.next_event()
    assert isinstance(head, h11.Request), f"expected a request head, got {head!r}"
    body = bytearray()
    while True:
        event = conn.next_event()
        if isinstance(event, h11.Data):
            body += event.data
        elif isinstance(event, h11.EndOfMessage):
            return ParsedRequest(head, bytes(body), complete=True)
        else:
            return ParsedRequest(head, bytes(body), complete=False)


@pytest.fixture
def response_bytes():
    """Build raw response bytes for a mock stream."""
    return build_response


@pytest.fixture
def request_parser():
    """Parse raw bytes written to a mock stream."""
    return parse_request


class PeerConnection:
    """Server side of one accepted connection, framed with h11."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.reader = reader
        self.writer = writer
        self.conn = h11.Connection(h11.SERVER)
        self.request: Optional[h11.Request] = None

    async def _next_event(self):
        while True:
            event = self.conn.next_event()
            if event is h11.NEED_DATA:
                try:
                    data = await self.reader.read(65536)
                except ConnectionError:
                    data = b""
                self.conn.receive_data(data)
                continue
            return event

    async def read_request(self) -> h11.Request:
        event = await self._next_event()
        assert isinstance(event, h11.Request), f"expected a request head, got {event!r}"
        self.request = event
        return event

    async def read_body_chunk(self) -> Optional[bytes]:
        """Next body chunk, or None at the end of the request body."""
        event = await self._next_event()
        if isinstance(event, h11.Data):
            return bytes(event.data)
        if isinstance(event, h11.EndOfMessage):
            return None
        raise AssertionError(f"unexpected event while reading body: {event!r}")

    async def read_body(self) -> bytes:
        body = bytearray()
        while True:
            chunk = await self.read_body_chunk()
            if chunk is None:
                return bytes(body)
            body += chunk

    @property
    def method(self) -> str:
        return self.request.method.decode()

    @property
    def target(self) -> str:
        return self.request.target.decode()

    def header(self, name: str) -> Optional[str]:
        name_bytes = name.lower().encode()
        for header_name, value in self.request.headers:
            if header_name == name_bytes:
                return value.decode("latin-1")
        return None

    async def respond(
        self,
        status_code: int = 200,
        headers: Optional[List[Tuple[str, str]]] = None,
        body: bytes = b"",
    ) -> None:
        """Send a complete Content-Length framed response."""
        response_headers = list(headers or [])
        response_headers.append(("Content-Length", str(len(body))))
        data = self.conn.send(h11.Response(status_code=status_code, headers=response_headers))
        if body and self.request.method != b"HEAD":
            data += self.conn.send(h11.Data(data=body))
        data += self.conn.send(h11.EndOfMessage())
        await self.send_raw(data)

    async def send_raw(self, data: bytes) -> None:
        """Write bytes outside of h11 framing."""
        self.writer.write(data)
        await self.writer.drain()

    async def wait_for_disconnect(self) -> None:
        """Read and discard until the client closes its side."""
        while True:
            try:
                data = await self.reader.read(65536)
            except ConnectionError:
                return
            if not data:
                return

    def close(self) -> None:
        self.writer.close()


Handler = Callable[[PeerConnection], Awaitable[None]]


class LocalHTTPServer:
    """
    In-process HTTP/1.1 server on 127.0.0.1.

    Every accepted connection is handed to ``handler`` and closed when the
    handler returns. Handler exceptions are collected in ``errors``.
    """

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.host = "127.0.0.1"
        self.port = 0
        self.connections: List[PeerConnection] = []
        self.errors: List[BaseException] = []
        self.disconnected = asyncio.Event()
        self._server: Optional[asyncio.AbstractServer] = None
        self._tasks: List["asyncio.Task[None]"] = []

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle, self.host, 0)
        self.port = self._server.sockets[0].getsockname()[1]

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._tasks.append(asyncio.current_task())
        peer = PeerConnection(reader, writer)
        self.connections.append(peer)
        try:
            await self.handler(peer)
        except Exception as e:
            self.errors.append(e)
        finally:
            writer.close()
            self.disconnected.set()

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        for peer in self.connections:
            peer.close()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()


@pytest_asyncio.fixture
async def http_server():
    """Start local servers for the duration of a test."""
    servers: List[LocalHTTPServer] = []

    async def _start(handler: Handler) -> LocalHTTPServer:
        server = LocalHTTPServer(handler)
        await server.start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        await server.stop()
