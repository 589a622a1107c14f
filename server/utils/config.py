"""
Server configuration module.

This module handles server-side configuration settings.
"""

from pathlib import Path

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, PUBLIC_DIR, PAGE_SUBDIR, STORAGE_SUBDIR,
    LOG_DIR, OUTBOUND_QUEUE_SIZE, RELOAD_DEBOUNCE_SECONDS
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 public_dir: str = PUBLIC_DIR, watch: bool = True,
                 logs_dir: str = LOG_DIR):
        self.host = host
        self.port = port
        self.public_dir = Path(public_dir).resolve()

        # Asset layout
        self.page_dir = self.public_dir / PAGE_SUBDIR
        self.storage_dir = self.public_dir / STORAGE_SUBDIR

        # Logging configuration
        self.logs_dir = logs_dir

        # Relay settings
        self.outbound_queue_size = OUTBOUND_QUEUE_SIZE

        # Live reload
        self.watch = watch
        self.reload_debounce = RELOAD_DEBOUNCE_SECONDS

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }

    def get_asset_settings(self):
        """Get static asset settings."""
        return {
            'public_dir': str(self.public_dir),
            'page_dir': str(self.page_dir),
            'storage_dir': str(self.storage_dir),
            'watch': self.watch,
            'reload_debounce': self.reload_debounce
        }

    def get_log_settings(self):
        """Get logging settings."""
        return {
            'logs_dir': self.logs_dir
        }
