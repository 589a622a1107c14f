"""
File module for serving the public asset tree.

Handles:
- Static file lookup with path containment
- Page and storage listings
- HTTP responses on the relay port
"""
