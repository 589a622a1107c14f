"""
Utilities for the server: configuration, logging and network info.
"""
