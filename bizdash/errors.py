from __future__ import annotations


class BizdashError(Exception):
    """Base class for errors surfaced to the dashboard user."""


class UnsupportedFormat(BizdashError):
    pass


class FormatError(BizdashError):
    pass


class NoDataError(BizdashError):
    pass


class UnknownTableError(BizdashError):
    pass


class BackendError(BizdashError):
    """Opaque failure from the storage backend; the message is passed through."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
