"""
Request body sources for aio_webclient.

A BodySource describes what the pump writes after the request head. The
kinds form a closed set; every handling site switches on ``BodySource.kind``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterable, Optional, Union

from .http_primitives import Headers, has_header, set_default_header
from .serialization import JsonSerializer, default_serializer


class BodySourceKind(Enum):
    """Kinds of request body."""
    EMPTY = "empty"
    BUFFER = "buffer"
    SERIALIZED = "serialized"
    STREAM = "stream"


@dataclass(frozen=True)
class BodySource:
    """
    Immutable description of a request body.

    ``payload`` holds the bytes to write for BUFFER and SERIALIZED sources.
    ``stream`` holds the async iterable for STREAM sources.
    """

    kind: BodySourceKind
    payload: bytes = b""
    stream: Optional[AsyncIterable[bytes]] = None
    content_type: Optional[str] = None

    @classmethod
    def empty(cls) -> "BodySource":
        return cls(kind=BodySourceKind.EMPTY)

    @classmethod
    def buffer(cls, data: Union[bytes, bytearray, memoryview, str]) -> "BodySource":
        """Attach an in-memory buffer. Strings are encoded as UTF-8."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        elif not isinstance(data, bytes):
            raise TypeError(f"buffer body must be bytes or str, got {type(data).__name__}")
        return cls(kind=BodySourceKind.BUFFER, payload=data)

    @classmethod
    def serialized(
        cls,
        obj: Any,
        serializer: JsonSerializer = default_serializer,
    ) -> "BodySource":
        """
        Serialize ``obj`` eagerly.

        Encoding happens here so an EncodeError is raised before any
        connection is opened.

        Raises:
            EncodeError: If the serializer rejects the object
        """
        payload = serializer.encode(obj)
        return cls(
            kind=BodySourceKind.SERIALIZED,
            payload=payload,
            content_type=serializer.content_type,
        )

    @classmethod
    def from_stream(cls, stream: AsyncIterable[bytes]) -> "BodySource":
        if not hasattr(stream, "__aiter__"):
            raise TypeError("stream body must be an async iterable of bytes")
        return cls(kind=BodySourceKind.STREAM, stream=stream)

    @property
    def known_length(self) -> Optional[int]:
        """Byte length when known up front, None for streams."""
        if self.kind is BodySourceKind.STREAM:
            return None
        return len(self.payload)

    def apply_framing(self, headers: Headers) -> Headers:
        """
        Return ``headers`` completed with the framing headers for this body.

        Caller supplied Content-Length and Content-Type are never overwritten.
        A stream without an explicit Content-Length is sent chunked.
        """
        if self.kind is BodySourceKind.EMPTY:
            return list(headers)

        if self.kind in (BodySourceKind.BUFFER, BodySourceKind.SERIALIZED):
            headers = set_default_header(headers, b"Content-Length", len(self.payload))
            if self.content_type is not None:
                headers = set_default_header(headers, b"Content-Type", self.content_type)
            return headers

        if self.kind is BodySourceKind.STREAM:
            # An explicit length is trusted as is; mismatches surface from h11.
            if has_header(headers, b"content-length"):
                return list(headers)
            return set_default_header(headers, b"Transfer-Encoding", b"chunked")

        raise ValueError(f"Unknown body kind: {self.kind}")
