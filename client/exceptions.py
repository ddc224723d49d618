"""Exception hierarchy for the soundboard client."""

from typing import Optional


class SoundboardError(Exception):
    """
    Base exception class for all client errors.
    """
    pass


class ValidationError(SoundboardError):
    """
    Raised when input is rejected locally, before any request is made.
    """
    pass


class TransportError(SoundboardError):
    """
    Raised when the server rejects a request with a structured error body.

    Attributes:
        code: Machine-readable error code from the server
        message: Human-readable message from the server
        status: HTTP status code
        retry_after: Seconds to wait before retrying (upload endpoint only)
    """

    def __init__(self, code: str, message: str, status: int, retry_after: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.retry_after = retry_after


class RateLimitedError(TransportError):
    """
    Raised when the server refuses an upload because of the upload cooldown.
    """
    pass


class NetworkError(SoundboardError):
    """
    Raised on connectivity failures or responses without a usable body.

    Attributes:
        status: Raw HTTP status, or None when no response was received
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UploadStateError(SoundboardError):
    """
    Raised when an upload action is not allowed in the current state.
    """
    pass


class CooldownActiveError(UploadStateError):
    """
    Raised when a submission is attempted while the upload cooldown runs.
    """

    def __init__(self, remaining: int):
        super().__init__(f"Next upload available in {remaining}s")
        self.remaining = remaining


class NotAuthenticatedError(SoundboardError):
    """
    Raised when an action requires a signed-in user.
    """
    pass


class ForbiddenError(SoundboardError):
    """
    Raised when an action requires administrator rights.
    """
    pass
