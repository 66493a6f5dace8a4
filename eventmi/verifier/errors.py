"""Failure kinds raised by the verifier."""

from typing import Optional


class VerificationError(Exception):
    """Base exception for verifier failures."""

    pass


class TransportError(VerificationError):
    """Raised when the endpoint surface cannot be reached."""

    def __init__(self, message: str, method: Optional[str] = None, path: Optional[str] = None):
        super().__init__(message)
        self.method = method
        self.path = path


class UnexpectedStatus(VerificationError, AssertionError):
    """Raised when the endpoint answers with a status code other than expected."""

    def __init__(self, method: str, path: str, expected: int, actual: int):
        super().__init__(f"{method} {path}: expected status {expected}, got {actual}")
        self.method = method
        self.path = path
        self.expected = expected
        self.actual = actual


class UnexpectedRedirect(VerificationError, AssertionError):
    """Raised when the endpoint redirects where it should redisplay a form."""

    pass


class StoreInconsistency(VerificationError, AssertionError):
    """Raised when store state disagrees with what the endpoint reported."""

    pass


class StoreError(VerificationError):
    """Raised when a store query fails."""

    pass
