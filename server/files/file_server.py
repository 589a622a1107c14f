"""
File server module.

This module serves the public asset tree over plain HTTP on the same port
as the relay. WebSocket upgrade requests are passed through untouched.
"""

import asyncio
import json
from http import HTTPStatus
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import unquote, urlsplit

from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from common.constants import (
    PUBLIC_DIR, PAGE_SUBDIR, STORAGE_SUBDIR, INDEX_FILE, MIME_TYPES, DEFAULT_MIME_TYPE
)
from server.utils.logger import logger


class ForbiddenPath(Exception):
    """Raised when a request path escapes the public directory."""


class AssetStore:
    """Read-only view of the public directory tree."""

    def __init__(self, public_dir=PUBLIC_DIR):
        self.public_dir = Path(public_dir).resolve()
        self.page_dir = self.public_dir / PAGE_SUBDIR
        self.storage_dir = self.public_dir / STORAGE_SUBDIR
        self.page_dir.mkdir(parents=True, exist_ok=True)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def resolve(self, url_path: str) -> Optional[Path]:
        """
        Map a URL path onto a file under the public directory.

        Raises ForbiddenPath when the path leaves the public directory and
        returns None when nothing is there.
        """
        rel = url_path.lstrip('/') or INDEX_FILE
        try:
            candidate = (self.public_dir / rel).resolve()
        except ValueError:
            # Embedded NUL byte
            raise ForbiddenPath(url_path)
        if not candidate.is_relative_to(self.public_dir):
            raise ForbiddenPath(url_path)
        if not candidate.is_file():
            return None
        return candidate

    def resolve_storage(self, rel: str) -> Optional[Path]:
        """Map a path relative to storage/ onto an uploaded file."""
        try:
            candidate = (self.storage_dir / rel.lstrip('/')).resolve()
        except ValueError:
            return None
        if not candidate.is_relative_to(self.storage_dir) or not candidate.is_file():
            return None
        return candidate

    def list_pages(self) -> List[str]:
        """HTML pages available under page/."""
        if not self.page_dir.is_dir():
            return []
        return sorted(p.name for p in self.page_dir.iterdir() if p.suffix == '.html')

    def list_storage(self) -> List[Dict[str, int]]:
        """Uploaded files with their sizes."""
        if not self.storage_dir.is_dir():
            return []
        return [
            {"name": p.name, "size": p.stat().st_size}
            for p in sorted(self.storage_dir.iterdir())
            if p.is_file()
        ]

    @staticmethod
    def content_type(path: Path) -> str:
        return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def _response(status: HTTPStatus, body: bytes, content_type: str = DEFAULT_MIME_TYPE) -> Response:
    headers = Headers([
        ("Content-Type", content_type),
        ("Content-Length", str(len(body))),
        ("Connection", "close"),
    ])
    return Response(status.value, status.phrase, headers, body)


def _json_response(payload) -> Response:
    return _response(HTTPStatus.OK, json.dumps(payload).encode('utf-8'), MIME_TYPES['.json'])


class FileServer:
    """HTTP side of the server, plugged into the WebSocket handshake."""

    def __init__(self, store: AssetStore):
        self.store = store

    async def process_request(self, connection, request: Request) -> Optional[Response]:
        """Answer plain HTTP requests; let WebSocket upgrades through."""
        if request.headers.get("Upgrade", "").lower() == "websocket":
            return None

        path = unquote(urlsplit(request.path).path)
        logger.debug(f"HTTP GET {path}")

        try:
            return await self.handle_get(path)
        except OSError as e:
            logger.log_error(f"serving {path}", e)
            return _response(HTTPStatus.INTERNAL_SERVER_ERROR, b"error")

    async def handle_get(self, path: str) -> Response:
        if path == "/api/pages":
            return _json_response(self.store.list_pages())

        if path == "/api/storage":
            return _json_response(self.store.list_storage())

        if path.startswith("/storage/"):
            file_path = self.store.resolve_storage(path[len("/storage/"):])
            if file_path is None:
                return _response(HTTPStatus.NOT_FOUND, b"file not found")
            body = await asyncio.to_thread(file_path.read_bytes)
            return _response(HTTPStatus.OK, body, "application/octet-stream")

        try:
            file_path = self.store.resolve(path)
        except ForbiddenPath:
            logger.warning(f"Refused path outside public directory: {path}")
            return _response(HTTPStatus.FORBIDDEN, b"forbidden")

        if file_path is None:
            return _response(HTTPStatus.NOT_FOUND, b"404")

        body = await asyncio.to_thread(file_path.read_bytes)
        return _response(HTTPStatus.OK, body, self.store.content_type(file_path))
