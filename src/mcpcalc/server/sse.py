"""SSEChannel — lifecycle of one push channel.

States run ``OPENING -> OPEN -> CLOSED``:

* :meth:`SSEChannel.open` registers the connection, queues the connection
  notice and starts the liveness ping task.
* While open, routed dispatch results and pings are queued and yielded by
  :meth:`SSEChannel.frames` in FIFO order. The queue is bounded; frames
  arriving while it is full are dropped.
* :meth:`SSEChannel.close` runs once, on peer disconnect or abort. It cancels
  the ping task and unregisters the connection without yielding to the loop
  in between, so a ping can never follow removal.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from enum import Enum
from typing import TYPE_CHECKING

from mcpcalc.server.framing import PING_FRAME, connection_notice
from mcpcalc.server.registry import Connection

if TYPE_CHECKING:
    from mcpcalc.server.registry import ConnectionRegistry

logger = logging.getLogger(__name__)

DEFAULT_PING_INTERVAL = 30.0
DEFAULT_MAX_PENDING = 1024

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Access-Control-Allow-Origin": "*",
    "X-Accel-Buffering": "no",
}


class ChannelState(str, Enum):
    OPENING = "opening"
    OPEN = "open"
    CLOSED = "closed"


class SSEChannel:
    """A registered, queue-backed Server-Sent-Events stream.

    Usage::

        channel = SSEChannel(registry, ping_interval=30.0)
        channel.open()
        return StreamingResponse(channel.frames(), media_type="text/event-stream")
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        ping_interval: float = DEFAULT_PING_INTERVAL,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        if ping_interval <= 0:
            msg = f"ping_interval must be positive, got {ping_interval}"
            raise ValueError(msg)
        if max_pending < 1:
            msg = f"max_pending must be at least 1, got {max_pending}"
            raise ValueError(msg)
        self._registry = registry
        self._ping_interval = ping_interval
        # frames the peer has not read yet; a stalled reader loses new ones
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=max_pending)
        self._state = ChannelState.OPENING
        self._ping_task: asyncio.Task[None] | None = None
        self._connection: Connection | None = None

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def connection_id(self) -> str | None:
        return self._connection.id if self._connection else None

    def open(self) -> Connection:
        """Register the channel and queue the connection notice.

        Must be called from within a running event loop.
        """
        if self._state is not ChannelState.OPENING:
            msg = f"Cannot open a channel in state {self._state.value}"
            raise RuntimeError(msg)

        connection = Connection(
            id=self._registry.next_id(),
            send=self.push,
            close=self.close,
        )
        self._registry.register(connection)
        self._connection = connection
        self._state = ChannelState.OPEN
        self._queue.put_nowait(connection_notice(connection.id))
        self._ping_task = asyncio.get_running_loop().create_task(self._ping_loop())
        logger.info("SSE connection opened: %s", connection.id)
        return connection

    def push(self, frame: str) -> None:
        """Queue an encoded frame; frames pushed after close are dropped."""
        if self._state is not ChannelState.OPEN:
            logger.debug("Dropping frame for closed connection %s", self.connection_id)
            return
        self._enqueue(frame)

    def close(self) -> bool:
        """Transition to CLOSED. Returns ``False`` if already closed."""
        if self._state is ChannelState.CLOSED:
            return False
        self._state = ChannelState.CLOSED
        if self._ping_task is not None:
            self._ping_task.cancel()
            self._ping_task = None
        if self._connection is not None:
            self._registry.unregister(self._connection.id)
            logger.info("SSE connection closed: %s", self._connection.id)
        # Wake a consumer blocked on an empty queue. A full queue means nobody
        # is waiting, and frames() stops once it drains a closed channel.
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            logger.debug(
                "Close of %s left %d frames pending",
                self.connection_id,
                self._queue.qsize(),
            )
        return True

    async def frames(self) -> AsyncIterator[str]:
        """Yield queued frames until the channel closes; always closes on exit."""
        try:
            while True:
                if self._state is ChannelState.CLOSED and self._queue.empty():
                    return
                frame = await self._queue.get()
                if frame is None:
                    return
                yield frame
        finally:
            self.close()

    def _enqueue(self, frame: str) -> None:
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            logger.debug(
                "Dropping frame for %s: %d frames pending",
                self.connection_id,
                self._queue.qsize(),
            )

    async def _ping_loop(self) -> None:
        while True:
            await asyncio.sleep(self._ping_interval)
            connection_id = self.connection_id
            if self._state is not ChannelState.OPEN or connection_id not in self._registry:
                return
            self._enqueue(PING_FRAME)
