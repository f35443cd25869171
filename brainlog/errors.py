"""Exception types for brainlog."""


class BrainlogError(Exception):
    """Base class for brainlog errors."""


class ConfigurationError(BrainlogError):
    """Required settings are missing or invalid."""


class RemoteStoreError(BrainlogError):
    """A query against the remote store failed.

    Args:
        message: Human-readable description.
        code: Backend error code when one was reported (e.g. a PostgREST code).
    """

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.code = code


class RecordNotFound(RemoteStoreError):
    """A single-row select matched no rows."""
