"""
Client configuration for aio_webclient.
"""

import ssl as ssl_lib
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import __version__

DEFAULT_USER_AGENT = f"aio_webclient/{__version__}"


@dataclass(frozen=True)
class WebClientOptions:
    """
    Read-only defaults shared by every request a client builds.

    Attributes:
        user_agent: Value of the User-Agent header, None to omit it
        default_headers: Headers added to every request unless the request
            sets the same name
        connect_timeout: Timeout in seconds for establishing a connection
        read_chunk_size: Maximum bytes requested per network read
        write_buffer_high_water: Transport buffer size in bytes above which
            writes wait for a drain, None for the asyncio default
        ssl: Whether the host/port factories use TLS by default
        ssl_context: SSL context for TLS connections, None for a default one
    """

    user_agent: Optional[str] = DEFAULT_USER_AGENT
    default_headers: List[Tuple[str, str]] = field(default_factory=list)
    connect_timeout: Optional[float] = 30.0
    read_chunk_size: int = 65536
    write_buffer_high_water: Optional[int] = None
    ssl: bool = False
    ssl_context: Optional[ssl_lib.SSLContext] = None

    def __post_init__(self) -> None:
        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        if self.read_chunk_size <= 0:
            raise ValueError("read_chunk_size must be positive")
        if self.write_buffer_high_water is not None and self.write_buffer_high_water <= 0:
            raise ValueError("write_buffer_high_water must be positive")
