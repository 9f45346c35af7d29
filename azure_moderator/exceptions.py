"""Exception hierarchy for azure-moderator.

``InvalidInputError`` covers caller mistakes and is always raised before any
network call.  ``ModerationError`` and its subclasses cover failures talking
to the Content Safety service; moderation calls absorb them into a degraded
verdict, management calls let them propagate.
"""

from __future__ import annotations

from typing import Optional


class InvalidInputError(ValueError):
    """A precondition on the caller's input was violated."""


class ModerationError(Exception):
    """Base class for failures talking to the Content Safety API.

    Parameters
    ----------
    message : str
        Human readable description of the failure.
    endpoint : str | None
        The configured service endpoint (never includes credentials).
    status_code : int | None
        HTTP status of the failed response, when one was received.
    """

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.status_code = status_code


class TransportError(ModerationError):
    """Network failure, or a retryable HTTP status that outlived every retry."""


class RemoteAPIError(ModerationError):
    """Non-retryable error response returned by the service."""
