"""Custom exception classes."""
from typing import Optional


class PortalError(Exception):
    """Base class for errors raised by the portal."""
    pass


class ValidationRefused(PortalError):
    """Raised when input is refused locally, before any request is sent."""
    pass


class AuthRejection(PortalError):
    """Raised when login credentials are refused."""
    pass


class ApiError(PortalError):
    """Raised when an admin API call does not succeed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status
