"""
In-memory stand-ins for the WebSocket transport used by the relay tests.
"""

import asyncio
import json
import tempfile

from common.constants import RELOAD_FRAME
from server.utils.logger import logger

_EOF = object()


class FakeTransport:
    """Records outbound frames and replays queued inbound ones."""

    def __init__(self, remote_address=('127.0.0.1', 50000)):
        self.remote_address = remote_address
        self.sent = []
        self.closed = False
        self.fail_sends = False
        self._inbound = asyncio.Queue()

    async def send(self, frame):
        if self.fail_sends:
            raise OSError("broken pipe")
        self.sent.append(frame)

    async def close(self):
        self.closed = True
        self._inbound.put_nowait(_EOF)

    def feed(self, frame):
        """Queue a frame as if the peer had sent it."""
        self._inbound.put_nowait(frame)

    def hang_up(self):
        """End the inbound stream as if the peer went away."""
        self._inbound.put_nowait(_EOF)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._inbound.get()
        if item is _EOF:
            raise StopAsyncIteration
        return item

    def messages(self):
        """JSON frames sent so far, decoded."""
        return [json.loads(frame) for frame in self.sent if frame != RELOAD_FRAME]

    def reloads(self):
        return self.sent.count(RELOAD_FRAME)


async def settle(*connections, rounds: int = 10):
    """Let pending tasks run, then wait for every outbound queue to flush."""
    for _ in range(rounds):
        await asyncio.sleep(0)
    for connection in connections:
        await connection.drain()


def use_temp_logs(testcase):
    """Point the shared logger at a throwaway directory for one test."""
    logs = tempfile.TemporaryDirectory()
    previous = logger.logs_dir
    logger.configure(logs_dir=logs.name)
    testcase.addCleanup(logs.cleanup)
    testcase.addCleanup(logger.configure, logs_dir=str(previous))
    return logs.name
