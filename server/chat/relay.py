"""
Relay module.

Executes the chat protocol for every connection: login, directed chat and
presence broadcast. The relay is the only component that mutates the
registry.
"""

from typing import List, Set

from websockets.exceptions import ConnectionClosed

from common.constants import ERROR_NAME_USED
from common.protocol_definitions import (
    ChatMessage, LoginMessage, PingMessage, parse_frame, encode_message,
    create_error_message, create_users_message, create_chat_delivery_message
)
from server.chat.connection import Connection
from server.chat.registry import Registry
from server.utils.logger import logger


class Relay:
    """Server-side protocol state machine, one task per connection."""

    def __init__(self, registry: Registry = None):
        self.registry = registry if registry is not None else Registry()
        self.connections: Set[Connection] = set()  # every live connection, bound or not

    def attach(self, connection: Connection):
        self.connections.add(connection)

    def detach(self, connection: Connection):
        self.connections.discard(connection)

    def connections_snapshot(self) -> List[Connection]:
        """Point-in-time copy of the live connection set."""
        return list(self.connections)

    async def serve(self, connection: Connection):
        """
        Run the relay task for one connection until its transport ends.

        Inbound frames are handled in arrival order. Close, transport error
        and cancellation all end in exactly one call to handle_close.
        """
        self.attach(connection)
        connection.start()
        logger.log_connection(connection.remote_address, connection.cid)

        try:
            async for raw in connection.transport:
                await self.handle_frame(connection, raw)
        except ConnectionClosed as e:
            logger.debug(f"Transport for cid={connection.cid} closed abnormally: {e}")
        finally:
            await self.handle_close(connection)

    async def handle_frame(self, connection: Connection, raw):
        """Decode one inbound frame and apply it."""
        message = parse_frame(raw)
        if message is None:
            logger.debug(f"Dropping malformed frame from cid={connection.cid}")
            return

        try:
            if isinstance(message, PingMessage):
                return
            if isinstance(message, LoginMessage):
                await self.handle_login(connection, message)
            elif isinstance(message, ChatMessage):
                await self.handle_chat(connection, message)
        except Exception as e:
            logger.log_error(f"handling {type(message).__name__} from cid={connection.cid}", e)

    async def handle_login(self, connection: Connection, message: LoginMessage):
        """Process login message."""
        if connection.is_bound:
            logger.debug(f"Ignoring second login from cid={connection.cid} bound as '{connection.identity}'")
            return

        if not await self.registry.try_bind(message.username, connection):
            logger.log_login_rejected(message.username, connection.cid)
            connection.send(encode_message(create_error_message(ERROR_NAME_USED)))
            return

        logger.log_login(message.username, connection.cid)
        await self.broadcast_presence()

    async def handle_chat(self, connection: Connection, message: ChatMessage):
        """Deliver a chat message to its addressee only."""
        sender = connection.identity
        if sender is None:
            logger.debug(f"Dropping chat from unbound cid={connection.cid}")
            return

        target = await self.registry.lookup(message.to)
        if target is None or not target.is_open:
            logger.debug(f"Dropping chat from '{sender}' to absent '{message.to}'")
            return

        if target.send(encode_message(create_chat_delivery_message(sender, message.msg))):
            logger.log_chat(sender, message.to, message.msg)

    async def handle_close(self, connection: Connection):
        """Tear down a connection and announce the departure if it was bound."""
        connection.mark_closed()
        self.detach(connection)
        name = await self.registry.unbind(connection)
        logger.log_disconnect(name, connection.cid)

        if name is not None:
            await self.broadcast_presence()

    async def broadcast_presence(self) -> int:
        """
        Send the full set of bound names to every bound connection.

        Returns how many connections accepted the frame. Connections that are
        not OPEN or cannot take the frame right now are skipped.
        """
        members = await self.registry.members()
        frame = encode_message(create_users_message(name for name, _ in members))

        delivered = 0
        for _, member in members:
            if member.send(frame):
                delivered += 1
        return delivered
