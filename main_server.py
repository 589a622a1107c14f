#!/usr/bin/env python3
"""
LAN Relay Server - Main Entry Point

Unified entry point for the server application that integrates:
- Named participants and directed chat over WebSocket
- Presence broadcast
- Live reload when the public directory changes
- Static pages and uploaded files over HTTP

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           HTTP and WebSocket port (default: 3000)
    --public-dir DIR      Static asset directory (default: public)
    --log-level LEVEL     Console log level (default: INFO)
    --no-watch            Disable live reload
"""

if __name__ == "__main__":
    from server.main_server import main

    main()
