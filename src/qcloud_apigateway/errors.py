"""
Error types raised by the API Gateway client.

Three kinds of failure reach callers:

- ConfigurationError: the client was built without a credential pair.
  Raised synchronously by the constructor, before any request is sent.
- TransportError: the signed request never produced a usable response
  (network failure, HTTP error status, body that is not JSON). Raised by the
  transport and passed through the client untouched.
- ActionError: the request was delivered but the gateway reported a positive
  ``code`` in its response envelope.
"""

from __future__ import annotations

from typing import Any


class APIGatewayError(Exception):
    """Base exception for qcloud_apigateway errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(APIGatewayError):
    """Raised when the client configuration is incomplete."""


class TransportError(APIGatewayError):
    """Raised when the signed request could not be completed."""


class RetryableTransportError(TransportError):
    """Transport failures that are safe to retry."""


class ActionError(APIGatewayError):
    """Raised when the gateway rejects an action.

    ``name`` carries the envelope's ``codeDesc`` (for example
    ``ActionNotFound`` or ``InvalidParameter``) and ``code`` its numeric code.
    """

    def __init__(
        self,
        message: str,
        *,
        code_desc: str,
        code: int,
        action: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.code_desc = code_desc
        self.code = code
        self.action = action

    @property
    def name(self) -> str:
        return self.code_desc

    def __repr__(self) -> str:
        return f"ActionError(name={self.code_desc!r}, code={self.code}, message={self.message!r})"


def format_error_message(error: APIGatewayError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if isinstance(error, ActionError):
        msg = f"{error.code_desc}: {msg}"
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
