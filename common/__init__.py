"""
Shared constants and wire protocol for the LAN relay.
"""
