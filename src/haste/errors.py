"""Exception hierarchy.

Everything except :class:`TransferError` aborts the run. A ``TransferError``
belongs to a single job and is recorded by the worker that hit it.
"""

from __future__ import annotations


class HasteError(RuntimeError):
    """Base class for errors raised by haste."""


class AuthenticationError(HasteError):
    """The identity exchange failed or could not be completed."""


class EndpointNotFoundError(HasteError):
    """The service catalog has no object-store endpoint for the region."""

    def __init__(self, region: str) -> None:
        super().__init__(f"No PublicURL found for object-store in region {region}")
        self.region = region


class ListingError(HasteError):
    """The first page of a container listing could not be fetched."""


class SourceError(HasteError):
    """A local job source cannot be walked."""


class EmptySourceError(HasteError):
    """The job source produced nothing."""

    def __init__(self, message: str = "No files to operate on") -> None:
        super().__init__(message)


class TransferError(HasteError):
    """A single object operation failed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
