"""Exceptions raised by the IDCS login flow.

Every failure aborts the current login attempt; nothing is retried.
``str(error)`` is a plain human-readable message suitable for showing to
whoever started the attempt.
"""
from typing import Optional


class AuthFlowError(Exception):
    """Base exception for IDCS login flow errors."""

    error_code = "AUTH_FLOW_ERROR"
    http_status = 502

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AuthFlowError):
    """Service credentials or settings are missing or invalid.

    Detected before any network call is made.
    """

    error_code = "CONFIGURATION_ERROR"
    http_status = 500


class TransportError(AuthFlowError):
    """Connection, DNS or timeout failure talking to the provider."""

    error_code = "TRANSPORT_ERROR"


class ProtocolError(AuthFlowError):
    """The provider answered with a non-2xx status or a failure status.

    The raw response body is kept verbatim for diagnosis.
    """

    error_code = "PROTOCOL_ERROR"

    def __init__(self, message: str, body: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.body = body
        self.status_code = status_code


class DecodeError(AuthFlowError):
    """The response body is not JSON or does not have the expected shape."""

    error_code = "DECODE_ERROR"

    def __init__(self, message: str, body: str = "", cause: str = ""):
        super().__init__(message)
        self.body = body
        self.cause = cause


class InvariantViolation(AuthFlowError):
    """A step was handed input it cannot work with (e.g. no authnToken)."""

    error_code = "INVARIANT_VIOLATION"
