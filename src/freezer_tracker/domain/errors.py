"""Errors raised by the document sync layer."""


class SyncError(RuntimeError):
    """Base class for failures talking to the remote document."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientError(SyncError):
    """Server error or rate limit that outlived the retry budget."""


class NotFoundError(SyncError):
    """The configured remote document does not exist."""


class AuthFailedError(SyncError):
    """The credential was rejected for a write."""


class MalformedDocumentError(SyncError):
    """The remote bytes are not a readable document."""


class CreationFailedError(SyncError):
    """A new remote document could not be created."""


class ConnectionCheckFailedError(SyncError):
    """The existence probe failed for a reason other than a missing document."""


class FetchFailedError(SyncError):
    """The remote document could not be read."""


class ReplaceFailedError(SyncError):
    """The remote document could not be overwritten."""


class ConfigInvalidError(RuntimeError):
    """The session configuration points at a missing document and was discarded."""


class NoSessionError(RuntimeError):
    """No session configuration is set."""
