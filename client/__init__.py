"""
Client package for the LAN File Transfer system.

This package contains all client-side functionality including:
- The interactive menu session
- File upload, download and listing
- Configuration and utilities
"""
