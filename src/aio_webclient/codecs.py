"""
Response body codecs for aio_webclient.

A BodyCodec converts the complete raw body of a response into a typed
value. Codecs form a closed set of kinds, dispatched in ``BodyCodec.decode``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .exceptions import DecodeError, HTTPClientError
from .serialization import JsonSerializer, charset_of, default_serializer


class BodyCodecKind(Enum):
    """Kinds of response body decoding."""
    RAW = "raw"                  # bytes as received
    TEXT = "text"                # str, charset from Content-Type
    JSON = "json"                # any JSON value
    JSON_MAPPED = "json_mapped"  # JSON mapped onto a target type
    CUSTOM = "custom"            # caller supplied callable


@dataclass(frozen=True)
class BodyCodec:
    """
    Immutable description of how a response body is decoded.

    Use the factory classmethods rather than the constructor.
    """

    kind: BodyCodecKind
    encoding: Optional[str] = None
    target_type: Optional[Any] = None
    decoder: Optional[Callable[[bytes], Any]] = None
    serializer: JsonSerializer = default_serializer

    @classmethod
    def buffer(cls) -> "BodyCodec":
        """Keep the body as raw bytes."""
        return cls(kind=BodyCodecKind.RAW)

    @classmethod
    def string(cls, encoding: Optional[str] = None) -> "BodyCodec":
        """Decode the body as text using ``encoding`` or the response charset."""
        return cls(kind=BodyCodecKind.TEXT, encoding=encoding)

    @classmethod
    def json(cls) -> "BodyCodec":
        """Parse the body as JSON into plain Python values."""
        return cls(kind=BodyCodecKind.JSON)

    @classmethod
    def json_mapped(cls, target_type: Any) -> "BodyCodec":
        """Parse the body as JSON and validate it as ``target_type``."""
        return cls(kind=BodyCodecKind.JSON_MAPPED, target_type=target_type)

    @classmethod
    def json_object(cls) -> "BodyCodec":
        """Parse the body as a JSON object (``dict``)."""
        return cls.json_mapped(dict)

    @classmethod
    def json_array(cls) -> "BodyCodec":
        """Parse the body as a JSON array (``list``)."""
        return cls.json_mapped(list)

    @classmethod
    def create(cls, decoder: Callable[[bytes], Any]) -> "BodyCodec":
        """Wrap a caller supplied ``bytes -> value`` function."""
        if not callable(decoder):
            raise ValueError("decoder must be callable")
        return cls(kind=BodyCodecKind.CUSTOM, decoder=decoder)

    def decode(self, content: bytes, content_type: Optional[str] = None) -> Any:
        """
        Decode a complete body.

        Args:
            content: Raw body bytes in arrival order
            content_type: Content-Type header of the response, if any

        Returns:
            The decoded value

        Raises:
            DecodeError: If the body cannot be converted
        """
        if self.kind is BodyCodecKind.RAW:
            return content

        if self.kind is BodyCodecKind.TEXT:
            encoding = self.encoding or charset_of(content_type)
            try:
                return content.decode(encoding)
            except (LookupError, UnicodeDecodeError) as e:
                raise DecodeError(f"cannot decode body as {encoding}: {e}", cause=e) from e

        if self.kind is BodyCodecKind.JSON:
            return self.serializer.decode(content)

        if self.kind is BodyCodecKind.JSON_MAPPED:
            return self.serializer.decode(content, self.target_type)

        if self.kind is BodyCodecKind.CUSTOM:
            try:
                return self.decoder(content)
            except HTTPClientError:
                raise
            except Exception as e:
                raise DecodeError(f"custom decoder failed: {e}", cause=e) from e

        raise ValueError(f"Unknown codec kind: {self.kind}")
