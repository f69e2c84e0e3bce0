"""
Network backend components for aio_webclient.

This module provides the low-level networking abstractions: the stream and
backend interfaces, an asyncio implementation and an in-memory mock.
"""

from .backend import NetworkBackend
from .stream import NetworkStream
from .asyncio_backend import AsyncioNetworkBackend, AsyncioNetworkStream
from .mock import MockNetworkBackend, MockNetworkStream
from .utils import (
    create_ssl_context,
    format_host_header,
    validate_port,
)

__all__ = [
    "NetworkBackend",
    "NetworkStream",
    "AsyncioNetworkBackend",
    "AsyncioNetworkStream",
    "MockNetworkBackend",
    "MockNetworkStream",
    "create_ssl_context",
    "format_host_header",
    "validate_port",
]
