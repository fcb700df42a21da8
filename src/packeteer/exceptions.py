"""Custom exceptions for the :mod:`packeteer` package."""


class PacketeerError(Exception):
    """Base class for all custom ``packeteer`` exceptions.

    Parameters
    ----------
    message:
        Short description of the failure.
    context:
        Optional additional information about where/why the error occurred.
    suggestion:
        Optional hint that may help recover from the error.
    """

    def __init__(
        self,
        message: str = "",
        *,
        context: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.context = context
        self.suggestion = suggestion


class EmptyPacketError(PacketeerError):
    """Raised in strict mode when no layer of a packet was recognised."""


class DecodeError(PacketeerError):
    """Raised when a DNS layer cannot be turned into a transaction."""


class CaptureReadError(PacketeerError):
    """Raised when a capture file cannot be read."""


class StorageError(PacketeerError):
    """Raised when the DNS store cannot be used."""


class StorageOpenError(StorageError):
    """Raised when the DNS store cannot be created or opened."""


class StorageInsertError(StorageError):
    """Raised when a DNS transaction cannot be appended to the store."""


class QueryError(StorageError):
    """Raised when an aggregation query over the store fails."""
