"""
Per-request deadline for aio_webclient.
"""

import asyncio
import logging
from typing import Callable, Optional

from .exceptions import TimeoutError
from .pending import PendingSend

logger = logging.getLogger(__name__)


class TimeoutGovernor:
    """
    A single deadline timer for one PendingSend.

    When the timer fires before the send resolves, the send is failed with
    TimeoutError and ``on_expire`` is called so the owner can cancel the
    exchange and close the connection. Resolving the send first and then
    calling ``disarm`` guarantees the timer never fires.
    """

    def __init__(
        self,
        pending: PendingSend,
        timeout: Optional[float],
        on_expire: Optional[Callable[[], None]] = None,
    ) -> None:
        self._pending = pending
        self._timeout = timeout
        self._on_expire = on_expire
        self._handle: Optional[asyncio.TimerHandle] = None
        self._fired = False

    def arm(self) -> None:
        """Start the timer. Does nothing without a timeout."""
        if self._timeout is None or self._handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._timeout, self._expire)

    def disarm(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def fired(self) -> bool:
        return self._fired

    def _expire(self) -> None:
        self._handle = None
        error = TimeoutError(
            f"request did not complete (phase: {self._pending.phase.name})",
            timeout=self._timeout,
        )
        if not self._pending.fail(error):
            return
        self._fired = True
        logger.debug(f"Request deadline of {self._timeout}s elapsed")
        if self._on_expire is not None:
            self._on_expire()
