#!/usr/bin/env python3
"""
LAN Relay Server - Main Entry Point

This is the main entry point for the server application.
It wires the relay core, live reload and static asset serving onto one port.
"""

import argparse
import asyncio
import logging
from typing import Optional

from websockets.asyncio.server import serve

from server.chat.connection import Connection
from server.chat.registry import Registry
from server.chat.relay import Relay
from server.files.file_server import AssetStore, FileServer
from server.notify.asset_watcher import AssetWatcher
from server.notify.reload_notifier import ReloadNotifier
from server.utils.config import ServerConfig
from server.utils.logger import logger
from server.utils.network import get_network_info, format_banner
from common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT, PUBLIC_DIR, LOG_DIR


class RelayServer:
    """Main server class that integrates all functionality."""

    def __init__(self, config: ServerConfig = None):
        self.config = config or ServerConfig()

        # Initialize modules
        self.registry = Registry()
        self.relay = Relay(self.registry)
        self.store = AssetStore(self.config.public_dir)
        self.file_server = FileServer(self.store)
        self.notifier = ReloadNotifier(self.relay.connections_snapshot, self.config.reload_debounce)
        self.watcher: Optional[AssetWatcher] = None

    async def handle_websocket(self, websocket):
        """Handle individual client connection."""
        connection = Connection(websocket, self.config.outbound_queue_size)
        await self.relay.serve(connection)

    def listen(self):
        """WebSocket + HTTP server on the configured address, not yet started."""
        return serve(
            self.handle_websocket,
            self.config.host,
            self.config.port,
            process_request=self.file_server.process_request,
        )

    def start_watcher(self, loop: asyncio.AbstractEventLoop):
        """Forward asset changes from the observer thread to the notifier."""
        self.watcher = AssetWatcher(
            self.config.public_dir,
            lambda: self.notifier.request_reload_threadsafe(loop)
        )
        self.watcher.start()

    async def start(self):
        """Start the server."""
        if self.config.watch:
            self.start_watcher(asyncio.get_running_loop())

        try:
            async with self.listen() as server:
                for line in format_banner(self.config.port, get_network_info()):
                    logger.info(line)
                try:
                    await server.serve_forever()
                finally:
                    await self.close_connections()
        except OSError as e:
            logger.log_error(f"binding {self.config.host}:{self.config.port}", e)
            raise
        finally:
            self.stop()

    async def close_connections(self):
        """Close every live connection; their relay tasks then unbind them."""
        connections = self.relay.connections_snapshot()
        if connections:
            logger.info(f"Closing {len(connections)} connection(s)")
            await asyncio.gather(*(connection.close() for connection in connections))

    def stop(self):
        """Stop background helpers."""
        self.notifier.cancel()
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='LAN Relay Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Port for HTTP and WebSocket (default: {DEFAULT_PORT})')
    parser.add_argument('--public-dir', type=str, default=PUBLIC_DIR,
                        help=f'Directory of static assets (default: {PUBLIC_DIR})')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Console log level (default: INFO)')
    parser.add_argument('--logs-dir', type=str, default=LOG_DIR,
                        help=f'Directory for the chat log (default: {LOG_DIR})')
    parser.add_argument('--no-watch', action='store_true',
                        help='Disable live reload on asset changes')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = ServerConfig(
        host=args.host,
        port=args.port,
        public_dir=args.public_dir,
        watch=not args.no_watch,
        logs_dir=args.logs_dir
    )
    logger.configure(log_level=getattr(logging, args.log_level), **config.get_log_settings())
    server = RelayServer(config)
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
        server.stop()


if __name__ == "__main__":
    main()
