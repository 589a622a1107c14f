"""
Registry module.

Process-wide mapping from bound name to the connection that owns it.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

from server.chat.connection import Connection


class Registry:
    """Name -> Connection bindings behind a single lock."""

    def __init__(self):
        self._bindings: Dict[str, Connection] = {}
        self.lock = asyncio.Lock()  # Serializes every read and mutation

    def __len__(self):
        return len(self._bindings)

    def __contains__(self, name):
        return name in self._bindings

    async def try_bind(self, name: str, connection: Connection) -> bool:
        """
        Bind name to connection unless the name is taken.

        The check and the insert happen under the lock, so of several
        concurrent attempts for the same name exactly one wins. A connection
        that already holds a name, or is no longer OPEN, never binds.
        """
        async with self.lock:
            if name in self._bindings:
                return False
            if connection.is_bound or not connection.is_open:
                return False
            connection.bind_identity(name)
            self._bindings[name] = connection
            return True

    async def unbind(self, connection: Connection) -> Optional[str]:
        """Drop the binding owned by connection, returning the freed name."""
        async with self.lock:
            name = connection.identity
            if name is None:
                return None
            if self._bindings.get(name) is not connection:
                return None
            del self._bindings[name]
            return name

    async def snapshot(self) -> List[str]:
        """Names bound at this instant."""
        async with self.lock:
            return list(self._bindings)

    async def members(self) -> List[Tuple[str, Connection]]:
        """Bindings at this instant, for fan-out outside the lock."""
        async with self.lock:
            return list(self._bindings.items())

    async def lookup(self, name: str) -> Optional[Connection]:
        async with self.lock:
            return self._bindings.get(name)
