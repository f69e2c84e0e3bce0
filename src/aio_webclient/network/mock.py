"""
Mock network implementations for testing.

This module provides mock implementations of NetworkStream and NetworkBackend
that can be used for unit testing without requiring actual network connections.
The mock stream can hold writes back to simulate a backpressured transport and
can be closed from the peer side mid-exchange.
"""

import asyncio
import errno
import ssl
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Set, Tuple

from .backend import NetworkBackend
from .stream import NetworkStream


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.

    This implementation simulates a network stream in memory, allowing tests
    to script what the peer sends and inspect what the client wrote.
    """

    def __init__(self, data: bytes = b"", eof: bool = False) -> None:
        """
        Initialize the mock stream.

        Args:
            data: Initial data to be available for reading.
            eof: Whether the peer has already finished sending.
        """
        self._buffer = bytearray(data)
        self._eof = eof
        self._closed = False
        self._peer_closed = False
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []
        # Created on first use so they bind to the loop running the test
        self._readable_event: Optional[asyncio.Event] = None
        self._drained_event: Optional[asyncio.Event] = None

    @property
    def _readable(self) -> asyncio.Event:
        if self._readable_event is None:
            self._readable_event = asyncio.Event()
        return self._readable_event

    @property
    def _drained(self) -> asyncio.Event:
        if self._drained_event is None:
            self._drained_event = asyncio.Event()
            self._drained_event.set()
        return self._drained_event

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        """
        Read data from the mock stream, waiting until data or EOF arrives.

        Raises:
            RuntimeError: If the stream is closed.
        """
        if self._closed:
            raise RuntimeError("Stream is closed")

        while not self._buffer and not self._eof:
            self._readable.clear()
            await self._readable.wait()
            if self._closed:
                raise RuntimeError("Stream is closed")

        size = len(self._buffer) if max_bytes is None else min(max_bytes, len(self._buffer))
        result = bytes(self._buffer[:size])
        del self._buffer[:size]
        return result

    async def write(self, data: bytes) -> None:
        """
        Record written data, then wait while writing is paused.

        Raises:
            RuntimeError: If the stream is closed.
            ConnectionResetError: If the peer closed the connection.
        """
        if self._closed:
            raise RuntimeError("Stream is closed")
        if self._peer_closed:
            raise ConnectionResetError(errno.ECONNRESET, "Connection reset by peer")

        self._write_buffer.append(bytes(data))
        await self._drained.wait()

        if self._peer_closed:
            raise ConnectionResetError(errno.ECONNRESET, "Connection lost")

    async def aclose(self) -> None:
        """Close the mock stream."""
        self._closed = True
        self._wake_readers()
        self._release_writers()

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)

    @property
    def is_closed(self) -> bool:
        """Check if the mock stream is closed."""
        return self._closed

    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)

    @property
    def write_count(self) -> int:
        """Number of write calls accepted so far."""
        return len(self._write_buffer)

    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value

    def add_data(self, data: bytes) -> None:
        """
        Add data to be available for reading.

        Args:
            data: The data to add.
        """
        self._buffer += data
        self._wake_readers()

    def feed_eof(self) -> None:
        """Signal that the peer finished sending."""
        self._eof = True
        self._wake_readers()

    def close_by_peer(self) -> None:
        """Simulate the peer closing the connection."""
        self._peer_closed = True
        self.feed_eof()
        self._release_writers()

    def pause_writing(self) -> None:
        """Make subsequent writes wait until ``resume_writing`` is called."""
        self._drained.clear()

    def resume_writing(self) -> None:
        self._release_writers()

    @property
    def writing_paused(self) -> bool:
        return self._drained_event is not None and not self._drained_event.is_set()

    def _wake_readers(self) -> None:
        if self._readable_event is not None:
            self._readable_event.set()

    def _release_writers(self) -> None:
        if self._drained_event is not None:
            self._drained_event.set()


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.

    Streams queued with ``add_stream`` are handed out in order, one per
    connection attempt. When the queue is empty a fresh stream is created.
    """

    def __init__(self) -> None:
        """Initialize the mock backend."""
        self._streams: Deque[MockNetworkStream] = deque()
        self._refused: Set[Tuple[str, int]] = set()
        self._connections: List[Tuple[str, int, bool]] = []
        self._opened: List[MockNetworkStream] = []

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> MockNetworkStream:
        return self._connect(host, port, tls=False)

    async def connect_tls(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> MockNetworkStream:
        stream = self._connect(host, port, tls=True)
        stream.set_extra_info("ssl_object", True)
        stream.set_extra_info(
            "selected_alpn_protocol", alpn_protocols[0] if alpn_protocols else "http/1.1"
        )
        return stream

    def _connect(self, host: str, port: int, tls: bool) -> MockNetworkStream:
        if (host, port) in self._refused:
            raise ConnectionRefusedError(
                errno.ECONNREFUSED, f"Connect call failed ('{host}', {port})"
            )

        stream = self._streams.popleft() if self._streams else MockNetworkStream()
        stream.set_extra_info("peername", (host, port))
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))
        self._connections.append((host, port, tls))
        self._opened.append(stream)
        return stream

    def add_stream(self, stream: MockNetworkStream) -> None:
        """Queue a stream for the next connection attempt."""
        self._streams.append(stream)

    def refuse(self, host: str, port: int) -> None:
        """Make connection attempts to ``host:port`` fail as refused."""
        self._refused.add((host, port))

    @property
    def connections(self) -> List[Tuple[str, int, bool]]:
        """(host, port, tls) of every successful connection attempt."""
        return list(self._connections)

    @property
    def opened_streams(self) -> List[MockNetworkStream]:
        return list(self._opened)

    def reset(self) -> None:
        """Reset all mock connections."""
        self._streams.clear()
        self._refused.clear()
        self._connections.clear()
        self._opened.clear()
