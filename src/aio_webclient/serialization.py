"""
Wire-format serialization for aio_webclient.

JSON is the structured format used by ``send_json`` and the JSON codecs.
The serializer turns encoder and parser failures into ``EncodeError`` and
``DecodeError`` and knows how to map decoded values onto a target type.
"""

import dataclasses
import functools
import json
from typing import Any, Dict, Optional, Tuple

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from .exceptions import DecodeError, EncodeError

JSON_CONTENT_TYPE = "application/json"


def parse_content_type(value: Optional[str]) -> Tuple[str, Dict[str, str]]:
    """
    Split a Content-Type header into its media type and parameters.

    Args:
        value: Raw header value, e.g. ``text/plain; charset=latin-1``

    Returns:
        Tuple of (lower-cased media type, parameter dict). The media type is
        an empty string when no header was given.
    """
    if not value:
        return "", {}

    media_type, _, rest = value.partition(";")
    params: Dict[str, str] = {}
    for item in rest.split(";"):
        name, sep, param_value = item.partition("=")
        if sep:
            params[name.strip().lower()] = param_value.strip().strip('"')
    return media_type.strip().lower(), params


def is_json_content_type(value: Optional[str]) -> bool:
    """Check for ``application/json`` or any ``+json`` suffixed type."""
    media_type, _ = parse_content_type(value)
    return media_type == JSON_CONTENT_TYPE or media_type.endswith("+json")


def is_text_content_type(value: Optional[str]) -> bool:
    """Check for a ``text/*`` media type."""
    media_type, _ = parse_content_type(value)
    return media_type.startswith("text/")


def charset_of(value: Optional[str], default: str = "utf-8") -> str:
    """Return the charset parameter of a Content-Type, or ``default``."""
    _, params = parse_content_type(value)
    return params.get("charset") or default


class JsonSerializer:
    """
    JSON encoder/decoder used for structured request and response bodies.

    Encoding accepts anything ``json`` accepts plus dataclass instances and
    objects exposing ``model_dump()``. Decoding onto a target type is done by
    a pydantic ``TypeAdapter`` in strict mode, so builtins, generics such as
    ``List[int]``, nested dataclasses, TypedDicts and pydantic models are all
    validated field by field.
    """

    content_type = JSON_CONTENT_TYPE

    def encode(self, obj: Any) -> bytes:
        """
        Serialize an object to JSON bytes.

        Raises:
            EncodeError: If the object cannot be represented as JSON
        """
        try:
            text = json.dumps(
                obj, default=self._default, separators=(",", ":"), ensure_ascii=False
            )
        except (TypeError, ValueError) as e:
            raise EncodeError(f"cannot encode {type(obj).__name__} as JSON: {e}", cause=e) from e
        return text.encode("utf-8")

    def decode(self, data: bytes, target_type: Optional[Any] = None) -> Any:
        """
        Parse JSON bytes and optionally validate the result as ``target_type``.

        Raises:
            DecodeError: If the payload is malformed or does not fit the target
        """
        if target_type is None or target_type is object:
            try:
                return json.loads(data)
            except (UnicodeDecodeError, ValueError) as e:
                raise DecodeError(f"invalid JSON payload: {e}", cause=e) from e

        name = getattr(target_type, "__name__", repr(target_type))
        try:
            adapter = _type_adapter(target_type)
        except PydanticSchemaGenerationError as e:
            raise DecodeError(f"cannot map JSON onto {name}: {e}", cause=e) from e

        try:
            return adapter.validate_json(data, strict=True)
        except ValidationError as e:
            raise DecodeError(f"cannot map JSON onto {name}: {e}", cause=e) from e

    @staticmethod
    def _default(obj: Any) -> Any:
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        model_dump = getattr(obj, "model_dump", None)
        if callable(model_dump):
            return model_dump()
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


@functools.lru_cache(maxsize=256)
def _type_adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


default_serializer = JsonSerializer()
