"""Exceptions raised by the save API and mapped to HTTP responses by the handlers."""


class ApiError(Exception):
    """An error that maps directly onto an HTTP status code."""

    status = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class BadRequest(ApiError):
    status = 400


class ConfigurationError(Exception):
    """Required server-side configuration is missing or malformed."""


class StorageError(Exception):
    """The object store rejected a call (network, permissions, quota...)."""


class BackupError(StorageError):
    """The previous data.json could not be backed up, so it must not be overwritten."""
