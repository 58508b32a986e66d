"""Exception hierarchy shared by the store, feed clients and aggregator."""

from typing import Optional


class ShvssError(Exception):
    """Base class for every error raised by shvss."""


class InvalidIdentifierError(ShvssError, ValueError):
    """A subscription identifier failed its platform shape check."""


class TransportError(ShvssError):
    """An upstream HTTP request failed or returned an error status."""

    def __init__(self, message: str, url: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class ParseError(ShvssError):
    """A response body could not be read as the expected feed."""


class StorageError(ShvssError):
    """The subscriptions file could not be read, parsed or written."""
