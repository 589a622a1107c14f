"""
Notify module for server-side live reload.

Handles:
- Watching the public asset directory for changes
- Pushing the reload signal to every open connection
"""
