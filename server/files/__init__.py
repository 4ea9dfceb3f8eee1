"""
File transfer module for server-side file operations.

Handles:
- File upload and overwrite negotiation
- File download
- Storage root listing
- Path sandboxing
"""
