"""
Shared constants for the LAN relay.

This module contains all constants used across the relay core and the
static-asset side of the server.
"""

# Network Configuration
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 3000

# Public assets
PUBLIC_DIR = 'public'
PAGE_SUBDIR = 'page'
STORAGE_SUBDIR = 'storage'
INDEX_FILE = 'index.html'

# Outbound frames buffered per connection before a slow peer starts losing them
OUTBOUND_QUEUE_SIZE = 256

# Collapse bursts of file-system events into one reload
RELOAD_DEBOUNCE_SECONDS = 0.1

# Logging
LOG_DIR = 'logs'
CHAT_LOG_FILE = 'chat_history.log'

# Literal (non-JSON) frames
PING_FRAME = 'ping'
RELOAD_FRAME = 'reload'

# Error reasons
ERROR_NAME_USED = 'name used'

MIME_TYPES = {
    '.html': 'text/html',
    '.css': 'text/css',
    '.js': 'application/javascript',
    '.json': 'application/json',
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.svg': 'image/svg+xml',
}
DEFAULT_MIME_TYPE = 'text/plain'


# Message Types
class MessageTypes:
    # Client to Server
    LOGIN = 'login'
    CHAT = 'chat'

    # Server to Client
    ERROR = 'error'
    USERS = 'users'
