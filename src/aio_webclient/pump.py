"""
Request body pump for aio_webclient.

The pump moves a BodySource into an HTTP11Connection. Streamed sources are
pulled one chunk at a time and the next chunk is only requested once the
transport has accepted the previous one, so a backpressured transport
pauses the source and a drained one resumes it.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

import h11

from .body import BodySource, BodySourceKind
from .exceptions import StreamFailure
from .http11 import HTTP11Connection

logger = logging.getLogger(__name__)

CONNECTION_CLOSED = "Connection was closed"


class BodyPump:
    """
    Drives one BodySource into one connection.

    ``run`` either returns once the whole body and the end of message were
    written, returns early when the peer sent a complete response and closed
    the connection during the upload, or raises exactly one StreamFailure.
    When it raises, the source has already been detached and any failure it
    reports afterwards is discarded.
    """

    def __init__(self, connection: HTTP11Connection, source: BodySource) -> None:
        self._connection = connection
        self._source = source
        self._bytes_written = 0
        self._chunks_written = 0
        self._transport_closed = False
        self._answered_early = False

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    @property
    def chunks_written(self) -> int:
        return self._chunks_written

    @property
    def answered_early(self) -> bool:
        """Whether the upload stopped because a complete response arrived."""
        return self._answered_early

    async def run(self) -> None:
        """
        Write the body and the end of the request message.

        Raises:
            StreamFailure: If the source or the transport fails
        """
        kind = self._source.kind

        if kind is BodySourceKind.EMPTY:
            pass
        elif kind in (BodySourceKind.BUFFER, BodySourceKind.SERIALIZED):
            await self._write(self._source.payload)
        elif kind is BodySourceKind.STREAM:
            await self._drive_stream()
        else:
            raise ValueError(f"Unknown body kind: {kind}")

        if self._answered_early:
            return

        await self._transport(self._connection.end_request())
        logger.debug(
            f"Request body sent: {self._bytes_written} bytes "
            f"in {self._chunks_written} chunks"
        )

    async def _drive_stream(self) -> None:
        """
        Upload a streamed source while watching for the peer closing.

        The first of the two tasks to finish decides the outcome; the other
        one is cancelled. A peer that sent a whole response before closing
        ends the upload early instead of failing it.
        """
        upload = asyncio.ensure_future(self._pump_chunks())
        watcher = asyncio.ensure_future(self._connection.wait_for_peer_close())
        try:
            done, _ = await asyncio.wait({upload, watcher}, return_when=asyncio.FIRST_COMPLETED)
            upload_failed = upload in done and upload.exception() is not None
            if upload in done and not upload_failed:
                return

            if (not upload_failed or self._transport_closed) and (
                self._connection.has_complete_response()
            ):
                self._answered_early = True
                logger.debug(
                    f"Server answered and closed after {self._bytes_written} body bytes"
                )
                return

            if upload_failed:
                upload.result()

            cause: Optional[BaseException] = None
            if not watcher.cancelled():
                cause = watcher.exception()
            logger.debug(f"Peer closed the connection after {self._bytes_written} body bytes")
            raise StreamFailure(CONNECTION_CLOSED, cause=cause)
        finally:
            upload.cancel()
            watcher.cancel()
            # Collect outcomes so late failures are never reported as unretrieved
            await asyncio.gather(upload, watcher, return_exceptions=True)

    async def _pump_chunks(self) -> None:
        iterator: AsyncIterator[Any] = self._source.stream.__aiter__()
        try:
            while True:
                try:
                    chunk = await iterator.__anext__()
                except StopAsyncIteration:
                    return
                except Exception as e:
                    raise StreamFailure(f"request body source failed: {e!r}", cause=e) from e

                if not isinstance(chunk, (bytes, bytearray, memoryview)):
                    raise StreamFailure(
                        f"request body source produced {type(chunk).__name__}, expected bytes"
                    )
                await self._write(bytes(chunk))
        finally:
            await self._detach(iterator)

    async def _detach(self, iterator: AsyncIterator[Any]) -> None:
        aclose = getattr(iterator, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as e:
            logger.debug(f"Discarding body source failure after detach: {e!r}")

    async def _write(self, chunk: bytes) -> None:
        if not chunk:
            return
        await self._transport(self._connection.send_body(chunk))
        self._bytes_written += len(chunk)
        self._chunks_written += 1

    async def _transport(self, operation: Any) -> None:
        """Await a transport write, classifying its failures."""
        try:
            await operation
        except h11.LocalProtocolError as e:
            raise StreamFailure(
                f"request body does not match its declared framing: {e}", cause=e
            ) from e
        except (OSError, RuntimeError) as e:
            self._transport_closed = True
            raise StreamFailure(CONNECTION_CLOSED, cause=e) from e
