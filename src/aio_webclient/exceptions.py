"""
Custom exceptions for aio_webclient.

This module defines the failure taxonomy surfaced by the request engine.
Every failed send resolves with exactly one of these classes.
"""

from typing import Optional


class HTTPClientError(Exception):
    """Base exception for all aio_webclient errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ConnectError(HTTPClientError):
    """Raised when the transport cannot establish a connection."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Connect error: {message}", cause)


class EncodeError(HTTPClientError):
    """Raised when a request body cannot be serialized. No bytes are sent."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Encode error: {message}", cause)


class StreamFailure(HTTPClientError):
    """Raised when the body source or the transport aborts during upload."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Stream failure: {message}", cause)


class InterruptedError(HTTPClientError):
    """Raised when a response is not fully received."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Interrupted: {message}", cause)


class DecodeError(HTTPClientError):
    """Raised when received bytes cannot be converted by a codec."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Decode error: {message}", cause)


class TimeoutError(HTTPClientError):
    """Raised when the request deadline elapses before the send resolves."""

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        super().__init__(f"Timeout error: {message}")
        self.timeout = timeout
