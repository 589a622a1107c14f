"""
Protocol definitions for the LAN relay.

This module defines the message structures and the text-frame codec used
between browser clients and the relay server.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Union

from common.constants import MessageTypes, PING_FRAME


@dataclass(frozen=True)
class PingMessage:
    """Client keep-alive. Carries nothing and expects nothing back."""


@dataclass(frozen=True)
class LoginMessage:
    """Request to bind a name to the sending connection."""
    username: str


@dataclass(frozen=True)
class ChatMessage:
    """Directed chat addressed to a bound name."""
    to: str
    msg: str


InboundMessage = Union[PingMessage, LoginMessage, ChatMessage]


def parse_frame(raw: Union[str, bytes]) -> Optional[InboundMessage]:
    """
    Decode one inbound text frame.

    Returns None for anything that is not a well-formed message so callers
    can drop it without replying.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError:
            return None

    if raw == PING_FRAME:
        return PingMessage()

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None

    if not isinstance(data, dict):
        return None

    msg_type = data.get('type')

    if msg_type == MessageTypes.LOGIN:
        username = data.get('username')
        if not isinstance(username, str) or not username:
            return None
        return LoginMessage(username=username)

    if msg_type == MessageTypes.CHAT:
        to = data.get('to')
        msg = data.get('msg')
        if not isinstance(to, str) or not isinstance(msg, str):
            return None
        return ChatMessage(to=to, msg=msg)

    return None


def encode_message(message: Dict[str, Any]) -> str:
    """Serialize an outbound message into a compact JSON text frame."""
    return json.dumps(message, separators=(',', ':'))


def create_login_message(username: str) -> Dict[str, Any]:
    """Create a login message."""
    return {
        "type": MessageTypes.LOGIN,
        "username": username
    }


def create_chat_message(to: str, msg: str) -> Dict[str, Any]:
    """Create a chat message addressed to another participant."""
    return {
        "type": MessageTypes.CHAT,
        "to": to,
        "msg": msg
    }


def create_chat_delivery_message(sender: str, msg: str) -> Dict[str, Any]:
    """Create the chat message delivered to the addressee."""
    return {
        "type": MessageTypes.CHAT,
        "from": sender,
        "msg": msg
    }


def create_error_message(msg: str) -> Dict[str, Any]:
    """Create an error message."""
    return {
        "type": MessageTypes.ERROR,
        "msg": msg
    }


def create_users_message(names: Iterable[str]) -> Dict[str, Any]:
    """Create a presence message carrying the full set of bound names."""
    return {
        "type": MessageTypes.USERS,
        "users": list(names)
    }
