"""
Chat module for the relay core.

Handles:
- Connection lifecycle and outbound delivery
- Name bindings and uniqueness
- Login, directed chat and presence broadcast
"""
