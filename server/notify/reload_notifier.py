"""
Reload notifier module.

Pushes the bare reload signal to every open connection when the public
assets change. Independent of login state: bound and unbound connections
are treated alike.
"""

import asyncio
from typing import Callable, Iterable, Optional

from common.constants import RELOAD_FRAME, RELOAD_DEBOUNCE_SECONDS
from server.chat.connection import Connection
from server.utils.logger import logger


class ReloadNotifier:
    """Best-effort reload broadcast over the shared connection set."""

    def __init__(self, connections_provider: Callable[[], Iterable[Connection]],
                 debounce: float = RELOAD_DEBOUNCE_SECONDS):
        self.connections_provider = connections_provider
        self.debounce = debounce
        self._pending: Optional[asyncio.TimerHandle] = None

    def notify_reload(self) -> int:
        """Send reload to every OPEN connection. Returns how many took it."""
        delivered = 0
        for connection in self.connections_provider():
            if connection.send(RELOAD_FRAME):
                delivered += 1
        logger.log_reload(delivered)
        return delivered

    def request_reload(self):
        """Schedule a reload, folding bursts within the debounce window into one."""
        if self.debounce <= 0:
            self.notify_reload()
            return

        if self._pending is not None:
            self._pending.cancel()
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self.debounce, self._fire)

    def request_reload_threadsafe(self, loop: asyncio.AbstractEventLoop):
        """Entry point for change events raised on a foreign thread."""
        try:
            loop.call_soon_threadsafe(self.request_reload)
        except RuntimeError:
            # Loop already closed during shutdown
            logger.debug("Dropping reload request, event loop is closed")

    def cancel(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self):
        self._pending = None
        self.notify_reload()
