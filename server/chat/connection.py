"""
Connection module.

One live bidirectional channel to a browser peer, with the identity it has
bound (if any) and a fire-and-forget outbound path.
"""

import asyncio
import itertools
from enum import Enum
from typing import Optional

from websockets.exceptions import ConnectionClosed

from common.constants import OUTBOUND_QUEUE_SIZE
from server.utils.logger import logger


class ConnectionState(Enum):
    OPEN = 'open'
    CLOSING = 'closing'
    CLOSED = 'closed'


class IdentityAlreadyBound(Exception):
    """Raised when a connection that already holds a name is bound again."""


class Connection:
    """A transport handle plus relay bookkeeping."""

    _ids = itertools.count(1)

    def __init__(self, transport, queue_size: int = OUTBOUND_QUEUE_SIZE):
        self.transport = transport
        self.cid = next(Connection._ids)
        self.state = ConnectionState.OPEN
        self.identity: Optional[str] = None
        self._outbound: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._writer_task: Optional[asyncio.Task] = None

    def __repr__(self):
        return f"<Connection cid={self.cid} identity={self.identity!r} state={self.state.value}>"

    @property
    def remote_address(self):
        return getattr(self.transport, 'remote_address', None)

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    @property
    def is_bound(self) -> bool:
        return self.identity is not None

    def bind_identity(self, name: str):
        """Record the name this connection acts under. Set at most once."""
        if self.identity is not None:
            raise IdentityAlreadyBound(f"cid={self.cid} is already bound to '{self.identity}'")
        self.identity = name

    def start(self):
        """Start the writer task that drains the outbound queue."""
        if self._writer_task is None:
            self._writer_task = asyncio.create_task(self._write_loop())

    def send(self, frame: str) -> bool:
        """
        Queue a frame for delivery without waiting on the peer.

        Returns False when the connection is not OPEN or its outbound queue
        is full; the frame is dropped in both cases.
        """
        if not self.is_open:
            return False
        try:
            self._outbound.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning(f"Outbound queue full for cid={self.cid}, dropping frame")
            return False
        return True

    async def drain(self):
        """Wait until every queued frame has been handed to the transport."""
        if self._writer_task is None or self._writer_task.done():
            return
        await self._outbound.join()

    async def close(self):
        """Begin closing: stop accepting frames and close the transport."""
        if self.state is ConnectionState.OPEN:
            self.state = ConnectionState.CLOSING
        self._stop_writer()
        try:
            await self.transport.close()
        except (ConnectionClosed, OSError) as e:
            logger.debug(f"Transport close failed for cid={self.cid}: {e}")

    def mark_closed(self):
        """Record that the transport is gone. Idempotent."""
        self.state = ConnectionState.CLOSED
        self._stop_writer()

    def _stop_writer(self):
        if self._writer_task is not None and not self._writer_task.done():
            self._writer_task.cancel()
        self._discard_pending()

    def _discard_pending(self):
        while True:
            try:
                self._outbound.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._outbound.task_done()

    async def _write_loop(self):
        while True:
            frame = await self._outbound.get()
            try:
                await self.transport.send(frame)
            except (ConnectionClosed, OSError) as e:
                logger.debug(f"Send failed for cid={self.cid}: {e}")
                if self.state is ConnectionState.OPEN:
                    self.state = ConnectionState.CLOSING
                return
            finally:
                self._outbound.task_done()
                if not self.is_open:
                    self._discard_pending()
