"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path

from common.constants import LOG_DIR, CHAT_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: str = LOG_DIR, log_level: int = logging.INFO):
        self.logs_dir = Path(logs_dir)

        # Set up main logger
        self.logger = logging.getLogger('lan_relay_server')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

        self.chat_log_path = self.logs_dir / CHAT_LOG_FILE

    def configure(self, logs_dir: str = None, log_level: int = None):
        """Apply settings chosen at startup."""
        if logs_dir is not None:
            self.logs_dir = Path(logs_dir)
            self.chat_log_path = self.logs_dir / CHAT_LOG_FILE
        if log_level is not None:
            self.logger.setLevel(log_level)
            for handler in self.logger.handlers:
                handler.setLevel(log_level)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr, cid: int):
        """Log client connection."""
        self.info(f"New connection from {addr}, assigned cid={cid}")

    def log_login(self, username: str, cid: int):
        """Log user login."""
        self.info(f"User '{username}' logged in on cid={cid}")

    def log_login_rejected(self, username: str, cid: int):
        """Log a login refused because the name is taken."""
        self.warning(f"Login as '{username}' refused on cid={cid}: name used")

    def log_disconnect(self, username: str, cid: int):
        """Log user disconnect."""
        if username:
            self.info(f"User {username} (cid={cid}) disconnected")
        else:
            self.info(f"Connection cid={cid} closed before login")

    def log_chat(self, from_username: str, to_username: str, message: str):
        """Log a delivered chat message."""
        self.info(f"Chat {from_username} -> {to_username}: {message}")
        self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | {from_username} -> {to_username} | {message}")

    def log_reload(self, delivered: int):
        """Log a reload signal pushed to clients."""
        self.info(f"Assets changed, reload sent to {delivered} connection(s)")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, file_path: Path, content: str):
        """Write content to log file."""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except OSError as e:
            self.error(f"Failed to write to log file {file_path}: {e}")


# Global logger instance
logger = ServerLogger()
