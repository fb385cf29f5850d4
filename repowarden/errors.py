"""Exception types raised by RepoWarden."""

from typing import Optional


class RepoWardenError(Exception):
    """Base class for RepoWarden errors."""


class ProviderError(RepoWardenError):
    """A configuration provider call failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
        self.message = message


class NotFoundError(ProviderError):
    """The resource does not exist or the feature is not configured."""


class ForbiddenError(ProviderError):
    """The platform refused the request (permissions or plan restriction)."""


class TransientProviderError(ProviderError):
    """A failure worth retrying at the transport level (5xx, connection loss)."""
