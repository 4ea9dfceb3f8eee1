"""
File transfer module for client-side file operations.

Handles:
- File uploads to server
- File downloads from server
- Local file name sanitization
"""
