"""
Error types shared by client and server.

Every failure the transfer protocol can surface derives from TransferError,
so callers can separate protocol outcomes from programming errors.
"""


class TransferError(Exception):
    """Base class for file transfer protocol errors."""


class ChannelClosed(TransferError):
    """The peer closed the stream. Normal end of a session."""


class MalformedFrame(TransferError):
    """A control frame violated the framing rules."""


class InvalidPath(TransferError):
    """A file name was empty or resolved outside the storage root."""


class NotFound(TransferError):
    """The requested file does not exist or is not a regular file."""


class TransferIncomplete(TransferError):
    """The stream ended before the payload terminator arrived."""


class TransferTimeout(TransferError):
    """No data arrived within the per-connection timeout."""
