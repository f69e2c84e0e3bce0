"""
HTTP/1.1 connection implementation for aio_webclient.

This module implements the HTTP11Connection class that frames one
request/response exchange with h11 over a NetworkStream. The connection is
driven step by step: the engine writes the head, the BodyPump writes the
body, and the ResponseCollector reads the response back.
"""

import logging
from collections import deque
from typing import Any, Deque, Dict, Optional, Tuple

import h11

from .http_primitives import Headers, Request
from .network.stream import NetworkStream
from .exceptions import InterruptedError

logger = logging.getLogger(__name__)


class HTTP11Connection:
    """
    HTTP/1.1 connection for a single exchange.

    There is no keep-alive: the owner closes the connection once the
    exchange resolves.
    """

    DEFAULT_READ_CHUNK_SIZE = 65536  # 64KB chunks

    def __init__(
        self,
        stream: NetworkStream,
        read_chunk_size: Optional[int] = None,
    ) -> None:
        """
        Initialize HTTP/1.1 connection.

        Args:
            stream: The NetworkStream to use for communication
            read_chunk_size: Maximum bytes requested per read
        """
        self._stream = stream
        self._h11_connection = h11.Connection(h11.CLIENT)
        self._read_chunk_size = read_chunk_size or self.DEFAULT_READ_CHUNK_SIZE
        self._peer_closed = False
        self._closed = False
        # Events parsed ahead of the readers by has_complete_response
        self._parsed_events: Deque[Any] = deque()

        # Metrics
        self._bytes_sent = 0
        self._bytes_received = 0

    async def send_request_head(self, request: Request) -> None:
        """
        Send the request line and headers.

        The framing headers (Content-Length or Transfer-Encoding) must
        already be present; h11 enforces them for the body that follows.
        """
        h11_request = h11.Request(
            method=request.method,
            target=request.path,
            headers=request.headers,
        )
        await self._send_event(h11_request)

    async def send_body(self, data: bytes) -> None:
        """Send one body chunk. Returns once the transport accepted it."""
        if data:
            await self._send_event(h11.Data(data=data))

    async def end_request(self) -> None:
        """Send the end of the request message."""
        await self._send_event(h11.EndOfMessage())

    async def _send_event(self, event: h11.Event) -> None:
        """
        Send an h11 event to the network stream.

        Args:
            event: The h11 event to send
        """
        data = self._h11_connection.send(event)
        if data:
            await self._stream.write(data)
            self._bytes_sent += len(data)

    async def _receive_data(self) -> bool:
        """
        Read once from the stream into h11.

        Returns:
            False once the peer has closed its side
        """
        if self._peer_closed:
            return False
        data = await self._stream.read(self._read_chunk_size)
        # An empty read tells h11 the peer closed the connection
        self._h11_connection.receive_data(data)
        self._bytes_received += len(data)
        if not data:
            self._peer_closed = True
        return bool(data)

    async def wait_for_peer_close(self) -> None:
        """
        Consume incoming bytes until the peer closes the connection.

        Used while a streamed body is uploading so a peer close is seen even
        when the source is idle. Bytes of an early response stay buffered in
        h11 for ``receive_response_head``.
        """
        while await self._receive_data():
            pass

    def has_complete_response(self) -> bool:
        """
        Parse the bytes received so far and report whether they hold a whole
        response, up to its end of message.

        Parsed events are kept for ``receive_response_head`` and
        ``receive_body_chunk``. A malformed or truncated response counts as
        incomplete.
        """
        while not (self._parsed_events and isinstance(self._parsed_events[-1], h11.EndOfMessage)):
            try:
                event = self._h11_connection.next_event()
            except h11.RemoteProtocolError:
                return False
            if event is h11.NEED_DATA or event is h11.PAUSED:
                return False
            self._parsed_events.append(event)
            if isinstance(event, h11.ConnectionClosed):
                return False
        return True

    def _next_event(self) -> Any:
        if self._parsed_events:
            return self._parsed_events.popleft()
        try:
            return self._h11_connection.next_event()
        except h11.RemoteProtocolError as e:
            raise InterruptedError(f"invalid response from server: {e}", cause=e) from e

    async def receive_response_head(self) -> Tuple[int, Headers]:
        """
        Receive the final response status and headers.

        Informational (1xx) responses are skipped.

        Returns:
            Tuple of (status code, headers)

        Raises:
            InterruptedError: If the connection closed before the head arrived
        """
        while True:
            event = self._next_event()

            if event is h11.NEED_DATA:
                await self._receive_data()
                continue

            if isinstance(event, h11.InformationalResponse):
                continue

            if isinstance(event, h11.Response):
                headers = [(name, value) for name, value in event.headers]
                return event.status_code, headers

            if isinstance(event, h11.ConnectionClosed):
                raise InterruptedError("connection was closed before the response arrived")

            raise InterruptedError(f"unexpected event while awaiting response: {event!r}")

    async def receive_body_chunk(self) -> Optional[bytes]:
        """
        Receive a chunk of response body.

        Returns:
            Chunk of data or None if end of body

        Raises:
            InterruptedError: If the connection closed mid-body
        """
        while True:
            event = self._next_event()

            if event is h11.NEED_DATA:
                await self._receive_data()
                continue

            if isinstance(event, h11.Data):
                return bytes(event.data)

            if isinstance(event, h11.EndOfMessage):
                return None

            if isinstance(event, h11.ConnectionClosed):
                raise InterruptedError("connection was closed before the response body completed")

            raise InterruptedError(f"unexpected event while receiving body: {event!r}")

    async def close(self) -> None:
        """
        Close the connection and cleanup resources.
        """
        if self._closed:
            return
        self._closed = True
        await self._stream.aclose()
        logger.debug(
            f"Connection closed: {self._bytes_sent} bytes sent, "
            f"{self._bytes_received} bytes received"
        )

    @property
    def is_closed(self) -> bool:
        """Check if connection is closed."""
        return self._closed

    @property
    def peer_closed(self) -> bool:
        """Whether the peer has closed its side."""
        return self._peer_closed

    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get connection metrics.

        Returns:
            Dictionary with connection metrics
        """
        return {
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._bytes_received,
            "our_state": self._h11_connection.our_state.__name__,
            "their_state": self._h11_connection.their_state.__name__,
            "closed": self._closed,
        }
