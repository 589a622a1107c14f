"""
Server package for the LAN relay.

This package contains all server-side functionality including:
- Connection registry and message relay
- Live reload notification
- Static asset serving
- Configuration and utilities
"""
