from __future__ import annotations


class NotFoundError(ValueError):
    """Raised when a requested row does not exist."""


class ValidationFailed(ValueError):
    """Raised when submitted input fails a pre-submit check.

    ``field`` names the first offending input so forms can focus it.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class PermissionDenied(ValueError):
    pass


class DuplicateError(ValueError):
    pass


class StorageError(RuntimeError):
    pass
