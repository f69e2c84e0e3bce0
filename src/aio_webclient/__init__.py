"""
aio_webclient - asyncio HTTP/1.1 web client

A fluent request builder over a streaming request engine: buffered, JSON
and streamed request bodies with backpressure, pluggable response body
codecs, and a small failure taxonomy delivered exactly once per send.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .http_primitives import Request, Response, URLComponents
from .body import BodySource, BodySourceKind
from .codecs import BodyCodec, BodyCodecKind
from .serialization import JsonSerializer
from .config import WebClientOptions
from .client import RequestBuilder, WebClient
from .engine import RequestEngine
from .pending import PendingSend, SendPhase
from .exceptions import (
    HTTPClientError,
    ConnectError,
    EncodeError,
    StreamFailure,
    InterruptedError,
    DecodeError,
    TimeoutError,
)

__all__ = [
    "Request",
    "Response",
    "URLComponents",
    "BodySource",
    "BodySourceKind",
    "BodyCodec",
    "BodyCodecKind",
    "JsonSerializer",
    "WebClientOptions",
    "RequestBuilder",
    "WebClient",
    "RequestEngine",
    "PendingSend",
    "SendPhase",
    "HTTPClientError",
    "ConnectError",
    "EncodeError",
    "StreamFailure",
    "InterruptedError",
    "DecodeError",
    "TimeoutError",
]
