"""
Server package for the LAN File Transfer system.

This package contains all server-side functionality including:
- Connection acceptance and per-connection sessions
- Command dispatch
- Sandboxed file storage
- Configuration and utilities
"""
