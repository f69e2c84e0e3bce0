"""
asyncio streams network backend for aio_webclient.

Connections are opened with ``asyncio.open_connection``. Backpressure comes
from ``StreamWriter.drain()``, which suspends while the transport buffer is
above its high-water mark.
"""

import asyncio
import logging
import ssl
from typing import Any, List, Optional

from .backend import NetworkBackend
from .stream import NetworkStream
from .utils import create_ssl_context

logger = logging.getLogger(__name__)


class AsyncioNetworkStream(NetworkStream):
    """Network stream over an asyncio StreamReader/StreamWriter pair."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._closed = False

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")
        return await self._reader.read(max_bytes or 65536)

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        self._writer.write(data)
        await self._writer.drain()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        transport = self._writer.transport
        if transport.get_write_buffer_size():
            # Unsent data would hold a graceful close open
            transport.abort()
        else:
            self._writer.close()
        try:
            await self._writer.wait_closed()
        except (OSError, ssl.SSLError) as e:
            # The peer may already have reset the connection.
            logger.debug(f"Error while closing stream: {e!r}")

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._writer.get_extra_info(name)

    @property
    def is_closed(self) -> bool:
        return self._closed


class AsyncioNetworkBackend(NetworkBackend):
    """
    Network backend built on asyncio streams.

    Args:
        write_buffer_high_water: Optional transport high-water mark in bytes.
            ``write`` waits whenever more than this many bytes are queued.
    """

    def __init__(self, write_buffer_high_water: Optional[int] = None) -> None:
        self._write_buffer_high_water = write_buffer_high_water

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> AsyncioNetworkStream:
        return await self._open(host, port, timeout)

    async def connect_tls(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> AsyncioNetworkStream:
        if ssl_context is None:
            ssl_context = create_ssl_context(alpn_protocols=alpn_protocols or ["http/1.1"])
        return await self._open(host, port, timeout, ssl_context=ssl_context)

    async def _open(
        self,
        host: str,
        port: int,
        timeout: Optional[float],
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> AsyncioNetworkStream:
        kwargs = {}
        if ssl_context is not None:
            kwargs = {"ssl": ssl_context, "server_hostname": host}

        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port, **kwargs),
            timeout=timeout,
        )

        if self._write_buffer_high_water is not None:
            writer.transport.set_write_buffer_limits(high=self._write_buffer_high_water)

        logger.debug(f"Connected to {host}:{port} (tls={ssl_context is not None})")
        return AsyncioNetworkStream(reader, writer)
