"""Exceptions raised by the Integrity Advocate integration."""


class IntegrityAdvocateException(Exception):
    """Base class for Integrity Advocate errors."""


class IntegrityAdvocateConfigError(IntegrityAdvocateException):
    """The integration is not configured well enough to talk to the remote API."""


class IntegrityAdvocateAPIError(IntegrityAdvocateException):
    """A request to the remote API failed or returned something unusable."""

    def __init__(self, message, status_code=None, url=None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class InvalidStatusError(IntegrityAdvocateException, ValueError):
    """A participant status string or integer is not one we know."""
