"""
Single-resolution state of one in-flight send.

A PendingSend is resolved at most once. Whoever resolves it first (the
exchange, a failure, or the timeout) wins; later attempts are discarded.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from .exceptions import HTTPClientError
from .http_primitives import Request, Response

logger = logging.getLogger(__name__)


class SendPhase(Enum):
    """Phases of a send."""
    IDLE = "idle"
    CONNECTING = "connecting"
    SENDING = "sending"
    AWAITING_RESPONSE = "awaiting_response"
    RECEIVING = "receiving"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SendPhase.SUCCEEDED, SendPhase.FAILED)


class PendingSend:
    """
    The live state of one in-flight request.

    Resolution goes through a single ``asyncio.Future``. Everything runs on
    one event loop, so checking ``done()`` before setting the result is
    enough to guarantee a single winner.
    """

    def __init__(self, request: Request) -> None:
        self.request = request
        self._phase = SendPhase.IDLE
        self._future: "asyncio.Future[Response]" = asyncio.get_running_loop().create_future()
        self._failure: Optional[HTTPClientError] = None

    @property
    def phase(self) -> SendPhase:
        return self._phase

    @property
    def resolved(self) -> bool:
        return self._future.done()

    @property
    def failure(self) -> Optional[HTTPClientError]:
        """The failure the send resolved with, if any."""
        return self._failure

    def advance(self, phase: SendPhase) -> bool:
        """
        Move to a non-terminal phase.

        Returns:
            False if the send already resolved; the phase is left unchanged
        """
        if phase.is_terminal:
            raise ValueError(f"use succeed() or fail() to enter {phase.name}")
        if self.resolved:
            return False
        logger.debug(f"{self._describe()}: {self._phase.name} -> {phase.name}")
        self._phase = phase
        return True

    def succeed(self, response: Response) -> bool:
        """
        Resolve with a response.

        Returns:
            True if this call resolved the send
        """
        if self.resolved:
            logger.debug(f"{self._describe()}: discarding late response {response.status_code}")
            return False
        self._phase = SendPhase.SUCCEEDED
        self._future.set_result(response)
        return True

    def fail(self, error: HTTPClientError) -> bool:
        """
        Resolve with a failure.

        Returns:
            True if this call resolved the send
        """
        if self.resolved:
            logger.debug(f"{self._describe()}: discarding late failure {error!r}")
            return False
        self._phase = SendPhase.FAILED
        self._failure = error
        self._future.set_exception(error)
        return True

    async def result(self) -> Response:
        """Wait for the resolution and return the response or raise the failure."""
        return await self._future

    def _describe(self) -> str:
        return f"{self.request.method.decode()} {self.request.path.decode()}"
