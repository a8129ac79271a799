"""Exception hierarchy for benefits-ofx."""

from typing import Optional


class BenefitsOfxError(Exception):
    """Base exception for all benefits-ofx errors."""


class TransportError(BenefitsOfxError):
    """Raised when a request fails at the network or HTTP level."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        message = super().__str__()
        if self.body:
            return f"{message}\nResponse: {self.body}"
        return message


class ParseError(BenefitsOfxError):
    """Raised when a response body does not have the expected shape.

    The raw body is always attached so the failing payload can be inspected.
    """

    def __init__(self, message: str, raw_body: str = ""):
        super().__init__(message)
        self.raw_body = raw_body

    def __str__(self) -> str:
        return f"Failed to parse response: {super().__str__()}.\nResponse: {self.raw_body}"


class EmptyStatementError(BenefitsOfxError):
    """Raised when there are no provider items to build a statement from."""


class AuthNotStartedError(BenefitsOfxError):
    """Raised when the second factor is submitted before the login was initiated."""


class NotAuthenticatedError(BenefitsOfxError):
    """Raised when a statement is requested without a completed login."""


class SerializationError(BenefitsOfxError):
    """Raised when the OFX document cannot be rendered."""


class ConfigurationError(BenefitsOfxError):
    """Raised when configuration is invalid or missing."""
