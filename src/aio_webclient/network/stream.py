"""
Network stream interface for aio_webclient.

This module defines the NetworkStream interface that all network stream
implementations must follow for consistent behavior across the library.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class NetworkStream(ABC):
    """
    Interface for network streams with async I/O operations.

    A stream is one byte-level connection owned by a single exchange.
    ``write`` carries the flow-control handshake: it returns only once the
    transport is ready to accept more data.
    """

    @abstractmethod
    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        """
        Read data from the stream.

        Args:
            max_bytes: Maximum number of bytes to read.

        Returns:
            The data read from the stream, waiting until some is available.
            An empty bytes object means the peer closed its side.

        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """
        pass

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write data to the stream and wait until the transport drains.

        Args:
            data: The data to write to the stream.

        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """
        pass

    @abstractmethod
    async def aclose(self) -> None:
        """
        Close the stream and cleanup resources.

        Closing twice is allowed and has no effect.
        """
        pass

    @abstractmethod
    def get_extra_info(self, name: str) -> Optional[Any]:
        """
        Get extra information about the stream.

        Args:
            name: The name of the information to retrieve. Common values include:
                 - "peername": The remote endpoint address
                 - "sockname": The local endpoint address
                 - "ssl_object": The SSL object when the stream is TLS encrypted

        Returns:
            The requested information or None if not available.
        """
        pass

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """
        Check if the stream is closed.

        Returns:
            True if the stream is closed, False otherwise.
        """
        pass
