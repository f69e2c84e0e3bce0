"""
Response collection for aio_webclient.
"""

import logging
from typing import Optional

from .codecs import BodyCodec
from .http11 import HTTP11Connection
from .http_primitives import Headers, Response, get_header

logger = logging.getLogger(__name__)


class ResponseCollector:
    """
    Reads a response body from a connection and decodes it.

    Chunks are accumulated in arrival order. With a codec, the complete body
    is decoded when the message ends and the value becomes ``Response.body``;
    without one, ``Response.body`` is the raw bytes and decoding is left to
    the Response accessors.
    """

    def __init__(self, connection: HTTP11Connection, codec: Optional[BodyCodec] = None) -> None:
        self._connection = connection
        self._codec = codec
        self._buffer = bytearray()

    @property
    def bytes_received(self) -> int:
        return len(self._buffer)

    async def collect(self, status_code: int, headers: Headers) -> Response:
        """
        Read the body that follows an already received response head.

        Raises:
            InterruptedError: If the connection drops before the body ends
            DecodeError: If the codec cannot decode the complete body
        """
        while True:
            chunk = await self._connection.receive_body_chunk()
            if chunk is None:
                break
            self._buffer += chunk

        content = bytes(self._buffer)
        logger.debug(f"Response body received: {len(content)} bytes")
        extensions = {"connection": self._connection.metrics}

        if self._codec is None:
            return Response.create(
                status_code=status_code,
                headers=headers,
                content=content,
                extensions=extensions,
            )

        content_type = get_header(headers, b"content-type")
        body = self._codec.decode(
            content,
            content_type.decode("latin-1") if content_type is not None else None,
        )
        return Response.create(
            status_code=status_code,
            headers=headers,
            content=content,
            body=body,
            extensions=extensions,
        )
