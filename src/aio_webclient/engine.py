"""
Request engine for aio_webclient.

The engine runs one exchange per send: connect, write the head, pump the
body, read the response head, collect the body. Each send resolves a
PendingSend exactly once, with a Response or with one classified failure.
"""

import asyncio
import logging
import time
from typing import Dict, Optional, Type

import h11

from .body import BodySource
from .codecs import BodyCodec
from .collector import ResponseCollector
from .config import WebClientOptions
from .exceptions import (
    ConnectError,
    HTTPClientError,
    InterruptedError,
    StreamFailure,
)
from .http11 import HTTP11Connection
from .http_primitives import Request, Response, set_default_header
from .network.backend import NetworkBackend
from .network.stream import NetworkStream
from .network.utils import format_host_header
from .pending import PendingSend, SendPhase
from .pump import CONNECTION_CLOSED, BodyPump
from .timeout import TimeoutGovernor

logger = logging.getLogger(__name__)

# Failure class for unclassified errors, by the phase they interrupted
_PHASE_FAILURES: Dict[SendPhase, Type[HTTPClientError]] = {
    SendPhase.IDLE: ConnectError,
    SendPhase.CONNECTING: ConnectError,
    SendPhase.SENDING: StreamFailure,
    SendPhase.AWAITING_RESPONSE: InterruptedError,
    SendPhase.RECEIVING: InterruptedError,
}


class RequestEngine:
    """
    Orchestrates sends over a NetworkBackend.

    The engine holds only read-only configuration, so any number of sends
    may run concurrently through one engine.
    """

    def __init__(self, backend: NetworkBackend, options: WebClientOptions) -> None:
        self._backend = backend
        self._options = options

    @property
    def options(self) -> WebClientOptions:
        return self._options

    def prepare(self, request: Request, body: BodySource) -> Request:
        """
        Complete a request snapshot with framing and default headers.

        Caller supplied headers always win over the defaults added here.
        """
        headers = body.apply_framing(request.headers)
        headers = set_default_header(
            headers,
            b"Host",
            format_host_header(
                request.host.decode("ascii"), request.port, request.scheme.decode("ascii")
            ),
        )
        for name, value in self._options.default_headers:
            headers = set_default_header(headers, name, value)
        if self._options.user_agent:
            headers = set_default_header(headers, b"User-Agent", self._options.user_agent)
        return request.with_headers(headers)

    async def send(
        self,
        request: Request,
        body: BodySource,
        codec: Optional[BodyCodec] = None,
    ) -> Response:
        """
        Send a request and wait for its single outcome.

        Args:
            request: Request snapshot; framing headers are added here
            body: Body to write after the head
            codec: Optional codec for the response body

        Returns:
            The response

        Raises:
            ConnectError, StreamFailure, InterruptedError, DecodeError or
            TimeoutError, exactly once per send
        """
        pending = PendingSend(self.prepare(request, body))
        exchange = asyncio.ensure_future(self._exchange(pending, body, codec))
        governor = TimeoutGovernor(pending, request.timeout, on_expire=exchange.cancel)
        governor.arm()
        try:
            return await pending.result()
        finally:
            governor.disarm()
            if not exchange.done():
                exchange.cancel()
            # Wait for the connection to be closed before handing back the result
            await asyncio.gather(exchange, return_exceptions=True)

    async def _exchange(
        self,
        pending: PendingSend,
        body: BodySource,
        codec: Optional[BodyCodec],
    ) -> None:
        request = pending.request
        connection: Optional[HTTP11Connection] = None
        start_time = time.monotonic()

        try:
            pending.advance(SendPhase.CONNECTING)
            stream = await self._connect(request)
            connection = HTTP11Connection(stream, read_chunk_size=self._options.read_chunk_size)

            pending.advance(SendPhase.SENDING)
            await self._send_head(connection, request)
            await BodyPump(connection, body).run()

            pending.advance(SendPhase.AWAITING_RESPONSE)
            status_code, headers = await connection.receive_response_head()

            pending.advance(SendPhase.RECEIVING)
            response = await ResponseCollector(connection, codec).collect(status_code, headers)

            duration = time.monotonic() - start_time
            if pending.succeed(response):
                logger.debug(
                    f"{request.method.decode()} {request.path.decode()} "
                    f"-> {response.status_code} ({duration:.3f}s)"
                )

        except HTTPClientError as e:
            self._report(pending, e, start_time)

        except Exception as e:
            self._report(pending, self._classify(pending.phase, e), start_time)

        finally:
            if connection is not None:
                await connection.close()

    async def _connect(self, request: Request) -> NetworkStream:
        host = request.host.decode("ascii")
        port = request.port
        timeout = self._options.connect_timeout
        try:
            if request.is_tls:
                return await self._backend.connect_tls(
                    host, port, timeout=timeout, ssl_context=self._options.ssl_context
                )
            return await self._backend.connect_tcp(host, port, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ConnectError(f"connecting to {host}:{port} timed out", cause=e) from e
        except OSError as e:
            raise ConnectError(f"cannot connect to {host}:{port}: {e}", cause=e) from e

    async def _send_head(self, connection: HTTP11Connection, request: Request) -> None:
        try:
            await connection.send_request_head(request)
        except h11.LocalProtocolError as e:
            raise StreamFailure(f"invalid request: {e}", cause=e) from e
        except (OSError, RuntimeError) as e:
            raise StreamFailure(CONNECTION_CLOSED, cause=e) from e

    @staticmethod
    def _classify(phase: SendPhase, error: Exception) -> HTTPClientError:
        failure_class = _PHASE_FAILURES.get(phase, InterruptedError)
        if failure_class is StreamFailure and isinstance(error, (OSError, RuntimeError)):
            return StreamFailure(CONNECTION_CLOSED, cause=error)
        return failure_class(f"{error!r} while {phase.value.replace('_', ' ')}", cause=error)

    @staticmethod
    def _report(pending: PendingSend, error: HTTPClientError, start_time: float) -> None:
        duration = time.monotonic() - start_time
        request = pending.request
        if pending.fail(error):
            logger.error(
                f"Request {request.method.decode()} {request.path.decode()} "
                f"failed: {error} ({duration:.3f}s)"
            )
