"""
Network backend interface for aio_webclient.

This module defines the NetworkBackend interface that provides
abstractions for creating network connections.
"""

import ssl
from abc import ABC, abstractmethod
from typing import List, Optional

from .stream import NetworkStream


class NetworkBackend(ABC):
    """
    Interface for network backend implementations.

    This interface defines the contract that all network backend implementations
    must follow. It provides methods for creating TCP and TLS connections
    in an asynchronous manner.
    """

    @abstractmethod
    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> NetworkStream:
        """
        Connect to a TCP endpoint.

        Args:
            host: The hostname or IP address to connect to.
            port: The port number to connect to.
            timeout: Optional timeout in seconds for the connection.

        Returns:
            A NetworkStream representing the TCP connection.

        Raises:
            OSError: If the connection fails.
            asyncio.TimeoutError: If the connection times out.
        """
        pass

    @abstractmethod
    async def connect_tls(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> NetworkStream:
        """
        Connect to a TLS endpoint.

        Args:
            host: The hostname to connect to and verify against.
            port: The port number to connect to.
            timeout: Optional timeout in seconds for connect and handshake.
            ssl_context: Optional preconfigured SSL context.
            alpn_protocols: Optional list of ALPN protocols to negotiate.

        Returns:
            A NetworkStream representing the TLS connection.

        Raises:
            OSError: If the connection or the TLS handshake fails.
            asyncio.TimeoutError: If the connection times out.
        """
        pass
