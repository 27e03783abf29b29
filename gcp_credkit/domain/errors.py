"""
Error taxonomy for credential sources and decorators.
"""

from typing import Any, Dict, Optional


class CredentialsError(Exception):
    """Base exception for gcp_credkit."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(CredentialsError, ValueError):
    """Credential material is malformed or incomplete."""


class UnsupportedOperationError(CredentialsError, NotImplementedError):
    """The source does not provide the requested capability."""


class UpstreamResponseError(CredentialsError, ValueError):
    """An upstream response is missing an expected field."""


class InvalidTokenError(UpstreamResponseError):
    """Token material cannot be turned into a value object."""


class SigningError(CredentialsError, RuntimeError):
    """The private key could not be used to produce a signature."""
