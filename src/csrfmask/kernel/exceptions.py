"""Unified exception hierarchy for csrfmask.

All exceptions inherit from CsrfMaskException, so callers can catch the
base class or target a specific failure.

Categories:
- SecurityException: a client presented an unacceptable CSRF token
- InfrastructureException: the server could not issue a token at all
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class CsrfMaskException(Exception):
    """Base exception for all csrfmask errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CSRF_MISMATCH").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Security Exceptions
# =============================================================================


class SecurityException(CsrfMaskException):
    """A request failed a security check."""


class InvalidCsrfTokenException(SecurityException):
    """The presented CSRF token cannot be accepted."""


class MalformedTokenException(InvalidCsrfTokenException):
    """The presented token is too short, not base64, or truncated."""

    def __init__(self, message: str = "Malformed CSRF token", context: dict | None = None) -> None:
        super().__init__(message, code="CSRF_MALFORMED", context=context)


class CsrfValidationException(InvalidCsrfTokenException):
    """The presented token does not derive from the client's secret."""

    def __init__(self, message: str = "CSRF token mismatch", context: dict | None = None) -> None:
        super().__init__(message, code="CSRF_MISMATCH", context=context)


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(CsrfMaskException):
    """Server-side failures unrelated to client input."""


class RandomSourceFailure(InfrastructureException):
    """The cryptographic random source could not supply the requested bytes.

    Fatal to the current request: a secret or mask must never be empty
    or predictable.
    """

    def __init__(self, message: str = "Random source failure", context: dict | None = None) -> None:
        super().__init__(message, code="CSRF_ENTROPY", context=context)
